# mei_facil/core/session.py
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterator, List, Optional

from supabase import Client

from mei_facil.core import db
from mei_facil.core.aggregation import aggregate, available_years
from mei_facil.core.errors import AccessDeniedError, FetchError
from mei_facil.core.filters import filter_transactions
from mei_facil.core.models import (
    DEFAULT_SELECTED_FIELDS,
    DEFAULT_VISUALIZATION_TYPE,
    CategorySummary,
    DateRange,
    MonthlySummary,
    ReportFilters,
    SavedReportConfig,
    Transaction,
)
from mei_facil.core.reports import ReportStore, sort_configs

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Não foi possível carregar os dados dos relatórios."
CONFIGS_ERROR_MESSAGE = "Não foi possível carregar os relatórios salvos."
PRO_ONLY_MESSAGE = "Relatórios avançados são um benefício do plano Pro."


class SessionState(str, Enum):
    LOCKED = "locked"
    LOADING = "loading"
    READY = "ready"
    APPLYING_FILTER = "applying_filter"
    FAULTED = "faulted"


# --- Ações expostas à camada de apresentação ---
APPLY_FILTER = "apply_filter"
SAVE_NEW = "save_new"
SAVE_EDIT = "save_edit"
LOAD = "load"
DELETE = "delete"
CONFIG_ACTIONS = (SAVE_NEW, SAVE_EDIT, LOAD, DELETE)


@dataclass
class ActionStatus:
    in_flight: bool = False
    last_error: Optional[str] = None


def default_report_year(transactions: List[Transaction], current_year: int) -> int:
    """Ano atual se houver transações nele; senão o ano mais recente dos dados; senão o ano atual."""
    years = available_years(transactions)
    if current_year in years:
        return current_year
    return years[0] if years else current_year


class ReportSession:
    """Sessão da página de relatórios avançados.

    Mantém as transações e os relatórios salvos carregados, os filtros
    ativos e as visões derivadas (transações filtradas, resumo mensal,
    despesas e receitas por categoria). As visões são recalculadas
    explicitamente após cada mudança de estado.

    Usage:
        session = ReportSession(supabase_client, has_elevated_access=True)
        session.load()
        session.apply_filters(novos_filtros)
        session.save_or_update_config("Primeiro trimestre")
    """

    def __init__(
        self,
        supabase_client: Client,
        has_elevated_access: bool,
        store: Optional[ReportStore] = None,
        today: Optional[date] = None,
    ) -> None:
        self.supabase_client = supabase_client
        self.has_elevated_access = has_elevated_access
        self.store = store or ReportStore(supabase_client)
        self._today = today

        self.state = SessionState.LOADING if has_elevated_access else SessionState.LOCKED
        self.error: Optional[str] = None

        self.all_transactions: List[Transaction] = []
        self.saved_configs: List[SavedReportConfig] = []
        self.active_filters = ReportFilters.for_year(self.today.year)

        self.filtered_transactions: List[Transaction] = []
        self.monthly_summary: List[MonthlySummary] = []
        self.expense_by_category: List[CategorySummary] = []
        self.income_by_category: List[CategorySummary] = []

        self.actions: Dict[str, ActionStatus] = {
            name: ActionStatus() for name in (APPLY_FILTER,) + CONFIG_ACTIONS
        }

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def is_processing_config_action(self) -> bool:
        return any(self.actions[name].in_flight for name in CONFIG_ACTIONS)

    @property
    def actions_disabled(self) -> bool:
        """Controles de salvar/carregar/excluir ficam desabilitados durante carga ou ação em andamento."""
        return self.state in (SessionState.LOADING, SessionState.LOCKED) or self.is_processing_config_action

    @property
    def available_years(self) -> List[int]:
        return available_years(self.all_transactions) or [self.today.year]

    @property
    def current_filter_year(self) -> Optional[int]:
        start = self.active_filters.date_range.start
        return start.year if start else None

    # --- Carga ---
    def load(self) -> SessionState:
        """Busca transações e relatórios salvos em paralelo e define o ano padrão."""
        if not self.has_elevated_access:
            logger.info("Acesso aos relatórios avançados bloqueado; nenhum dado carregado")
            self.state = SessionState.LOCKED
            return self.state

        self.state = SessionState.LOADING
        self.error = None
        with ThreadPoolExecutor(max_workers=2) as pool:
            transactions_future = pool.submit(db.get_transactions, self.supabase_client)
            configs_future = pool.submit(self.store.fetch_configs)

            # a lista de relatórios salvos é opcional: sem ela a página segue com as transações
            try:
                configs = configs_future.result()
            except FetchError:
                logger.warning("Relatórios salvos indisponíveis; seguindo com lista vazia")
                configs = []
                self.error = CONFIGS_ERROR_MESSAGE

            try:
                transactions = transactions_future.result()
            except FetchError:
                logger.error("Falha ao carregar as transações dos relatórios")
                self.all_transactions = []
                self.saved_configs = configs
                self.error = LOAD_ERROR_MESSAGE
                self.state = SessionState.FAULTED
                self._recompute()
                return self.state

        self.all_transactions = transactions
        self.saved_configs = configs
        year = default_report_year(transactions, self.today.year)
        self.active_filters = self.active_filters.with_date_range(DateRange.full_year(year))
        self.state = SessionState.READY
        self._recompute()
        logger.info(
            "Relatórios carregados: %d transações, %d relatórios salvos, ano padrão %d",
            len(transactions), len(configs), year,
        )
        return self.state

    def reload(self) -> SessionState:
        return self.load()

    # --- Filtros ---
    def apply_filters(self, new_filters: ReportFilters) -> None:
        self._ensure_access()
        previous_state = self.state
        with self._track(APPLY_FILTER):
            self.state = SessionState.APPLYING_FILTER
            self.active_filters = new_filters
            self._recompute()
        self.state = SessionState.FAULTED if previous_state == SessionState.FAULTED else SessionState.READY

    # --- Relatórios salvos ---
    def save_or_update_config(
        self, report_name: str, editing_config: Optional[SavedReportConfig] = None
    ) -> Optional[SavedReportConfig]:
        """Salva os filtros ativos como relatório novo ou atualiza ``editing_config``.

        Campos de exibição (selected_fields, visualization_type e
        visualization_config) são copiados do relatório em edição; um relatório
        novo recebe os padrões. Em caso de erro a lista local não é alterada.
        """
        self._ensure_access()
        action = SAVE_EDIT if editing_config is not None else SAVE_NEW
        status = self.actions[action]
        if status.in_flight:
            logger.warning("Ação '%s' já em andamento; ignorando novo envio", action)
            return None

        with self._track(action):
            name = (report_name or "").strip()
            if not name:
                status.last_error = "Informe um nome para o relatório."
                return None

            config = SavedReportConfig(
                id=editing_config.id if editing_config is not None else None,
                report_name=name,
                filters=self.active_filters.copy(),
                selected_fields=list(
                    (editing_config.selected_fields if editing_config is not None else None)
                    or DEFAULT_SELECTED_FIELDS
                ),
                visualization_type=(
                    (editing_config.visualization_type if editing_config is not None else None)
                    or DEFAULT_VISUALIZATION_TYPE
                ),
                visualization_config=dict(
                    (editing_config.visualization_config if editing_config is not None else None) or {}
                ),
            )
            result = self.store.upsert_config(config)

            if not result.ok:
                verb = "atualizar" if result.is_update else "salvar"
                status.last_error = result.error or f"Não foi possível {verb} o relatório."
                return None

            saved = result.report
            if result.is_update and any(c.id == saved.id for c in self.saved_configs):
                updated = [saved if c.id == saved.id else c for c in self.saved_configs]
            else:
                updated = self.saved_configs + [saved]
            self.saved_configs = sort_configs(updated)
            status.last_error = None
            return saved

    def save_as_new(self, report_name: str) -> Optional[SavedReportConfig]:
        return self.save_or_update_config(report_name)

    def save_edit(self, config: SavedReportConfig, report_name: str) -> Optional[SavedReportConfig]:
        return self.save_or_update_config(report_name, editing_config=config)

    def load_config(self, config: SavedReportConfig) -> None:
        """Aplica os filtros de um relatório salvo. O nome é apenas informativo aqui."""
        self._ensure_access()
        with self._track(LOAD) as status:
            self.active_filters = config.filters.copy()
            self._recompute()
            status.last_error = None
        logger.info("Configuração '%s' aplicada", config.report_name)

    def delete_config_action(self, report_id: str) -> bool:
        self._ensure_access()
        status = self.actions[DELETE]
        if status.in_flight:
            logger.warning("Exclusão já em andamento; ignorando novo envio")
            return False

        with self._track(DELETE):
            result = self.store.delete_config(report_id)
            if not result.success:
                status.last_error = result.error or "Não foi possível excluir o relatório."
                return False
            self.saved_configs = [c for c in self.saved_configs if c.id != report_id]
            status.last_error = None
            return True

    def find_config(self, report_name: str) -> Optional[SavedReportConfig]:
        for config in self.saved_configs:
            if config.report_name == report_name:
                return config
        return None

    # --- Internos ---
    def _ensure_access(self) -> None:
        if not self.has_elevated_access:
            raise AccessDeniedError(PRO_ONLY_MESSAGE)

    @contextmanager
    def _track(self, action: str) -> Iterator[ActionStatus]:
        status = self.actions[action]
        status.in_flight = True
        try:
            yield status
        finally:
            status.in_flight = False

    def _recompute(self) -> None:
        self.filtered_transactions = filter_transactions(self.all_transactions, self.active_filters)
        (
            self.monthly_summary,
            self.expense_by_category,
            self.income_by_category,
        ) = aggregate(self.filtered_transactions)

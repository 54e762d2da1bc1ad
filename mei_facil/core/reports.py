# mei_facil/core/reports.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from supabase import Client

from mei_facil.core import db
from mei_facil.core.errors import FetchError, PersistError, ValidationError
from mei_facil.core.models import VISUALIZATION_TYPES, ReportFilters, SavedReportConfig
from mei_facil.utils.text_utils import report_name_sort_key

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("report_name", "filters", "selected_fields", "visualization_type")


@dataclass
class UpsertResult:
    report: Optional[SavedReportConfig]
    is_update: bool
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.report is not None


@dataclass
class DeleteResult:
    success: bool
    error: Optional[str] = None


def sort_configs(configs: Iterable[SavedReportConfig]) -> List[SavedReportConfig]:
    """Ordena pelo nome do relatório, sem diferenciar acentos e maiúsculas."""
    return sorted(configs, key=lambda c: report_name_sort_key(c.report_name))


def validate_config(data: Mapping[str, Any]) -> None:
    """Confere os campos obrigatórios antes de qualquer acesso ao banco."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    if missing:
        raise ValidationError(f"Campos obrigatórios ausentes: {', '.join(missing)}.", missing)

    if data["visualization_type"] not in VISUALIZATION_TYPES:
        raise ValidationError(
            f"Tipo de visualização inválido: {data['visualization_type']}.", ["visualization_type"]
        )


def build_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Linha da tabela saved_reports (sem id e sem updated_at)."""
    filters = data["filters"]
    if isinstance(filters, ReportFilters):
        filters = filters.to_dict()
    return {
        "report_name": data["report_name"].strip(),
        "filters": filters,
        "selected_fields": list(data["selected_fields"]),
        "visualization_type": data["visualization_type"],
        "visualization_config": dict(data.get("visualization_config") or {}),
    }


class ReportStore:
    """Acesso às configurações de relatório salvas.

    Usage:
        store = ReportStore(supabase_client)
        configs = store.list_configs()
        result = store.upsert_config({"report_name": "Q1", "filters": filtros, ...})
        store.delete_config(result.report.id)
    """

    def __init__(self, supabase_client: Client):
        self.supabase_client = supabase_client

    def fetch_configs(self) -> List[SavedReportConfig]:
        """Lista as configurações ordenadas. Falhas são propagadas como FetchError."""
        return sort_configs(db.get_saved_reports(self.supabase_client))

    def list_configs(self) -> List[SavedReportConfig]:
        """Como fetch_configs, mas em caso de falha registra o erro e retorna lista vazia."""
        try:
            return self.fetch_configs()
        except FetchError:
            logger.warning("Listagem de relatórios salvos indisponível; retornando lista vazia")
            return []

    def upsert_config(self, config: Union[SavedReportConfig, Mapping[str, Any]]) -> UpsertResult:
        """Insere (sem id) ou atualiza (com id) uma configuração."""
        data = config.to_dict() if isinstance(config, SavedReportConfig) else dict(config)
        report_id = data.get("id")
        is_update = bool(report_id)

        try:
            validate_config(data)
        except ValidationError as e:
            logger.info("Configuração de relatório rejeitada: %s", e)
            return UpsertResult(report=None, is_update=is_update, error=str(e))

        payload = build_payload(data)
        try:
            if is_update:
                report = db.update_saved_report(self.supabase_client, report_id, payload)
            else:
                report = db.insert_saved_report(self.supabase_client, payload)
        except PersistError as e:
            return UpsertResult(report=None, is_update=is_update, error=str(e))

        logger.info("Relatório '%s' %s", report.report_name, "atualizado" if is_update else "salvo")
        return UpsertResult(report=report, is_update=is_update)

    def delete_config(self, report_id: str) -> DeleteResult:
        if not report_id:
            return DeleteResult(success=False, error="Relatório sem id não pode ser excluído.")
        try:
            db.delete_saved_report(self.supabase_client, report_id)
        except PersistError as e:
            return DeleteResult(success=False, error=str(e))
        return DeleteResult(success=True)

# mei_facil/core/db.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

from mei_facil.config import SUPABASE_URL, SUPABASE_KEY
from mei_facil.core.errors import FetchError, PersistError, ValidationError
from mei_facil.core.models import (
    EXPENSE_CATEGORIES,
    INCOME,
    INCOME_CATEGORIES,
    TRANSACTION_TYPES,
    SavedReportConfig,
    Transaction,
)

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = "id,created_at,description,amount,date,type,category,attachment_url,attachment_filename"
COMPANY_PROFILE_REQUIRED_FIELDS = ("razao_social", "cnpj", "titular_nome_completo", "titular_cpf")


def get_supabase_client() -> Client:
    """Retorna uma instância do cliente Supabase."""
    return create_client(SUPABASE_URL, SUPABASE_KEY)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- Funções para Transações ---
def get_transactions(supabase_client: Client) -> List[Transaction]:
    """Obtém todas as transações, da mais recente para a mais antiga."""
    try:
        response = supabase_client.table('transactions').select(TRANSACTION_COLUMNS).order('date', desc=True).execute()
        return [Transaction.from_row(row) for row in response.data or []]
    except Exception as e:
        logger.exception("Erro ao obter transações do Supabase")
        raise FetchError("Não foi possível buscar as transações.") from e


def add_transaction(supabase_client: Client, transaction: Transaction) -> Transaction:
    """Adiciona uma transação e retorna a versão gravada (com id e created_at)."""
    if not transaction.description or not transaction.date or transaction.amount is None or transaction.amount < 0:
        raise ValidationError("Dados da transação inválidos.")
    if transaction.type not in TRANSACTION_TYPES:
        raise ValidationError("Dados da transação inválidos.", ["type"])
    allowed = INCOME_CATEGORIES if transaction.type == INCOME else EXPENSE_CATEGORIES
    if transaction.category and transaction.category not in allowed:
        raise ValidationError("Categoria inválida para o tipo de transação.", ["category"])

    try:
        response = supabase_client.table('transactions').insert(transaction.to_row()).execute()
    except Exception as e:
        logger.exception("Erro ao adicionar transação ao Supabase")
        raise PersistError("Falha ao adicionar transação no banco de dados.") from e

    if not response.data:
        raise PersistError("Falha ao adicionar transação no banco de dados.")
    return Transaction.from_row(response.data[0])


def delete_transaction(supabase_client: Client, transaction_id: str) -> bool:
    """Remove uma transação pelo id."""
    try:
        supabase_client.table('transactions').delete().eq('id', transaction_id).execute()
        return True
    except Exception:
        logger.exception("Erro ao excluir transação %s do Supabase", transaction_id)
        return False


# --- Funções para Configurações do MEI (DAS) ---
def _das_paid_in_current_month(settings: Dict[str, Any], today: datetime) -> bool:
    updated_at = settings.get('updated_at')
    if not updated_at:
        return False
    updated = datetime.fromisoformat(str(updated_at).replace("Z", "+00:00"))
    same_month = updated.year == today.year and updated.month == today.month
    return bool(settings.get('das_paid_this_month')) and same_month


def get_mei_settings(supabase_client: Client, settings_id: str, today: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """Obtém as configurações do MEI, criando a linha padrão se ainda não existir.

    O status "DAS pago" só vale para o mês em que foi marcado.
    """
    today = today or datetime.now(timezone.utc)
    try:
        response = supabase_client.table('mei_settings').select('*').eq('id', settings_id).limit(1).execute()
        rows = response.data or []
        if not rows:
            logger.warning("Configurações do MEI não encontradas, criando padrão.")
            response = supabase_client.table('mei_settings').insert({
                "id": settings_id,
                "das_paid_this_month": False,
                "updated_at": _now_iso(),
            }).execute()
            rows = response.data or []
    except Exception:
        logger.exception("Erro ao obter configurações do MEI do Supabase")
        return None

    if not rows:
        logger.warning("Configurações do MEI vazias após busca/criação.")
        return None

    settings = dict(rows[0])
    settings['das_paid_this_month'] = _das_paid_in_current_month(settings, today)
    return settings


def update_das_status(supabase_client: Client, settings_id: str, das_paid: bool) -> Optional[Dict[str, Any]]:
    """Marca (ou desmarca) o DAS do mês como pago."""
    try:
        response = supabase_client.table('mei_settings').update({
            'das_paid_this_month': das_paid,
            'updated_at': _now_iso(),
        }).eq('id', settings_id).execute()
    except Exception:
        logger.exception("Erro ao atualizar status do DAS no Supabase")
        return None
    return response.data[0] if response.data else None


# --- Funções para Perfil da Empresa ---
def get_company_profile(supabase_client: Client, profile_id: str) -> Optional[Dict[str, Any]]:
    """Obtém o perfil da empresa (CNPJ, razão social, endereço, titular)."""
    try:
        response = supabase_client.table('company_profiles').select('*').eq('id', profile_id).limit(1).execute()
    except Exception:
        logger.exception("Erro ao obter perfil da empresa do Supabase")
        return None
    return response.data[0] if response.data else None


def update_company_profile(supabase_client: Client, profile_id: str, profile_data: Dict[str, Any]) -> Dict[str, Any]:
    """Cria ou atualiza o perfil da empresa."""
    missing = [name for name in COMPANY_PROFILE_REQUIRED_FIELDS if not profile_data.get(name)]
    if missing:
        raise ValidationError(
            "Campos obrigatórios (Razão Social, CNPJ, Nome do Titular, CPF do Titular) devem ser preenchidos.",
            missing,
        )

    data = dict(profile_data)
    data['id'] = profile_data.get('id') or profile_id
    data['updated_at'] = _now_iso()
    try:
        response = supabase_client.table('company_profiles').upsert(data, on_conflict='id').execute()
    except Exception as e:
        logger.exception("Erro ao salvar perfil da empresa no Supabase")
        raise PersistError("Falha ao salvar perfil da empresa.") from e
    if not response.data:
        raise PersistError("Falha ao salvar perfil da empresa.")
    return response.data[0]


# --- Funções para Relatórios Salvos ---
def get_saved_reports(supabase_client: Client) -> List[SavedReportConfig]:
    """Obtém os relatórios salvos ordenados pelo nome."""
    try:
        response = supabase_client.table('saved_reports').select('*').order('report_name').execute()
        return [SavedReportConfig.from_row(row) for row in response.data or []]
    except Exception as e:
        logger.exception("Erro ao obter relatórios salvos do Supabase")
        raise FetchError("Não foi possível buscar os relatórios salvos.") from e


def insert_saved_report(supabase_client: Client, data: Dict[str, Any]) -> SavedReportConfig:
    """Grava uma nova configuração de relatório."""
    payload = dict(data, updated_at=_now_iso())
    try:
        response = supabase_client.table('saved_reports').insert(payload).execute()
    except Exception as e:
        logger.exception("Erro ao salvar configuração do relatório")
        raise PersistError("Falha ao salvar configuração do relatório.") from e
    if not response.data:
        raise PersistError("Falha ao salvar configuração do relatório.")
    return SavedReportConfig.from_row(response.data[0])


def update_saved_report(supabase_client: Client, report_id: str, data: Dict[str, Any]) -> SavedReportConfig:
    """Atualiza uma configuração existente pelo id."""
    payload = dict(data, updated_at=_now_iso())
    try:
        response = supabase_client.table('saved_reports').update(payload).eq('id', report_id).execute()
    except Exception as e:
        logger.exception("Erro ao atualizar configuração do relatório %s", report_id)
        raise PersistError("Falha ao atualizar configuração do relatório.") from e
    if not response.data:
        logger.error("Relatório %s não encontrado para atualização", report_id)
        raise PersistError("Falha ao atualizar configuração do relatório.")
    return SavedReportConfig.from_row(response.data[0])


def delete_saved_report(supabase_client: Client, report_id: str) -> None:
    """Exclui um relatório salvo. Excluir um id inexistente não é erro."""
    try:
        response = supabase_client.table('saved_reports').delete().eq('id', report_id).execute()
    except Exception as e:
        logger.exception("Erro ao excluir relatório salvo %s", report_id)
        raise PersistError("Falha ao excluir relatório salvo.") from e
    if not response.data:
        logger.info("Relatório %s já não existia; nada a excluir", report_id)

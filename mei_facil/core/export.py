# mei_facil/core/export.py
import logging
from datetime import date, datetime
from pathlib import Path
from typing import IO, Optional, Sequence, Union

import pandas as pd

from mei_facil.core.limits import require_pro_access
from mei_facil.core.models import MonthlySummary, Transaction

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["ID", "Data", "Descrição", "Tipo", "Categoria", "Valor", "URL Anexo", "Nome Anexo", "Data Criação"]


def default_export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"mei_facil_transacoes_{today.isoformat()}.csv"


def _format_created_at(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        created = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return created.strftime("%d/%m/%Y %H:%M:%S")


def transactions_to_dataframe(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Tabela de transações com os cabeçalhos usados na exportação."""
    rows = [
        {
            "ID": t.id,
            "Data": t.date.isoformat(),
            "Descrição": t.description,
            "Tipo": t.type,
            "Categoria": t.category or "",
            "Valor": str(t.amount),
            "URL Anexo": t.attachment_url or "",
            "Nome Anexo": t.attachment_filename or "",
            "Data Criação": _format_created_at(t.created_at),
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def summary_to_dataframe(monthly_summary: Sequence[MonthlySummary]) -> pd.DataFrame:
    """Resumo mensal em formato de tabela (Mês, Receitas, Despesas, Saldo)."""
    return pd.DataFrame(
        [[m.month, m.receitas, m.despesas, m.saldo] for m in monthly_summary],
        columns=["Mês", "Receitas", "Despesas", "Saldo"],
    )


def export_transactions_csv(
    transactions: Sequence[Transaction],
    destination: Union[str, Path, IO[str]],
    has_pro_access: bool,
) -> int:
    """Exporta as transações em CSV (recurso Pro). Retorna o número de linhas gravadas."""
    require_pro_access(has_pro_access, "exportação CSV")

    df = transactions_to_dataframe(transactions)
    # pandas aplica as aspas necessárias para vírgulas, aspas e quebras de linha
    df.to_csv(destination, index=False)
    logger.info("Exportadas %d transações para CSV", len(df))
    return len(df)

# mei_facil/core/aggregation.py
from decimal import Decimal
from typing import Any, Iterable, List, Sequence, Tuple

import pandas as pd

from mei_facil.core.models import (
    EXPENSE,
    INCOME,
    CategorySummary,
    MonthlySummary,
    Totals,
    Transaction,
)
from mei_facil.utils.text_utils import month_label

ZERO = Decimal("0")


def _as_decimal(value: Any) -> Decimal:
    # somas de colunas object já vêm como Decimal; os zeros de preenchimento vêm como int
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Monta o DataFrame de trabalho. Valores ficam como Decimal (coluna object)."""
    rows = [
        {
            "data": t.date,
            "ano": t.date.year,
            "mes": t.date.month,
            "tipo": t.type,
            "categoria": t.category or None,
            "valor": t.amount,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=["data", "ano", "mes", "tipo", "categoria", "valor"])


def monthly_summary(transactions: Iterable[Transaction]) -> List[MonthlySummary]:
    """Receitas, despesas e saldo por mês, em ordem cronológica.

    O agrupamento é feito pela chave numérica (ano, mês); o rótulo ("Mar/2025")
    só é gerado depois, já que as abreviações não seguem ordem alfabética.
    """
    df = transactions_to_frame(transactions)
    if df.empty:
        return []

    totals = (
        df.groupby(["ano", "mes", "tipo"])["valor"]
        .sum()
        .unstack(fill_value=ZERO)
        .sort_index()
    )

    summary = []
    for (year, month), row in totals.iterrows():
        receitas = _as_decimal(row.get(INCOME, ZERO))
        despesas = _as_decimal(row.get(EXPENSE, ZERO))
        summary.append(
            MonthlySummary(
                month=month_label(int(year), int(month)),
                receitas=receitas,
                despesas=despesas,
                saldo=receitas - despesas,
                year=int(year),
                month_number=int(month),
            )
        )
    return summary


def category_summary(transactions: Iterable[Transaction], transaction_type: str) -> List[CategorySummary]:
    """Soma por categoria para um tipo de transação, do maior para o menor valor.

    Transações sem categoria ficam de fora (não existe balde "Outras").
    """
    df = transactions_to_frame(transactions)
    if df.empty:
        return []

    df = df[(df["tipo"] == transaction_type) & df["categoria"].notna()]
    if df.empty:
        return []

    por_categoria = df.groupby("categoria")["valor"].sum()
    items = [(str(name), _as_decimal(value)) for name, value in por_categoria.items()]
    # sorted é estável: empates mantêm a ordem alfabética do groupby
    items = sorted(items, key=lambda item: item[1], reverse=True)
    return [CategorySummary(name=name, value=value) for name, value in items]


def aggregate(
    filtered_transactions: Sequence[Transaction],
) -> Tuple[List[MonthlySummary], List[CategorySummary], List[CategorySummary]]:
    """Gera as três visões derivadas: resumo mensal, despesas e receitas por categoria."""
    return (
        monthly_summary(filtered_transactions),
        category_summary(filtered_transactions, EXPENSE),
        category_summary(filtered_transactions, INCOME),
    )


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Totais do painel. O faturamento anual considera todas as receitas informadas."""
    income = ZERO
    expenses = ZERO
    for t in transactions:
        if t.type == INCOME:
            income += t.amount
        else:
            expenses += t.amount
    return Totals(
        total_income=income,
        total_expenses=expenses,
        net_balance=income - expenses,
        annual_revenue=income,
    )


def available_years(transactions: Iterable[Transaction]) -> List[int]:
    """Anos presentes nas transações, do mais recente para o mais antigo."""
    return sorted({t.date.year for t in transactions}, reverse=True)

# mei_facil/core/filters.py
"""Avaliação dos filtros de relatório sobre transações.

Os filtros são "compilados" uma vez por passada (datas resolvidas, conjuntos
montados, texto normalizado) e o predicado resultante é aplicado a cada
transação. Todas as regras precisam passar (E lógico):

- período: ``[início do dia(from), fim do dia(to)]``, inclusivo; cada lado é opcional
- tipos: lista vazia = sem restrição
- categorias: lista vazia = sem restrição; caso contrário a transação precisa ter categoria
- valor mínimo / máximo: inclusivos
- descrição: substring sem diferenciar maiúsculas
"""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, List, Optional

from mei_facil.core.models import ReportFilters, Transaction


class CompiledFilter:
    """Filtros pré-processados para aplicação em lote."""

    def __init__(self, filters: ReportFilters):
        start = filters.date_range.start
        end = filters.date_range.end
        self.start: Optional[datetime] = datetime.combine(start, time.min) if start else None
        self.end: Optional[datetime] = datetime.combine(end, time.max) if end else None
        self.types = frozenset(filters.transaction_types or ())
        self.categories = frozenset(filters.categories or ())
        self.amount_min: Optional[Decimal] = filters.amount_min
        self.amount_max: Optional[Decimal] = filters.amount_max
        self.description = filters.description_contains.casefold() if filters.description_contains else None

    def matches(self, transaction: Transaction) -> bool:
        # transações não têm horário: consideramos 00:00 do dia
        moment = datetime.combine(transaction.date, time.min)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False

        if self.types and transaction.type not in self.types:
            return False

        if self.categories and (not transaction.category or transaction.category not in self.categories):
            return False

        if self.amount_min is not None and transaction.amount < self.amount_min:
            return False
        if self.amount_max is not None and transaction.amount > self.amount_max:
            return False

        if self.description and self.description not in transaction.description.casefold():
            return False

        return True

    __call__ = matches


def compile_filters(filters: ReportFilters) -> CompiledFilter:
    return CompiledFilter(filters)


def matches(transaction: Transaction, filters: ReportFilters) -> bool:
    """Indica se a transação passa nos filtros. Para listas, prefira filter_transactions."""
    return CompiledFilter(filters).matches(transaction)


def filter_transactions(transactions: Iterable[Transaction], filters: ReportFilters) -> List[Transaction]:
    """Retorna as transações que passam nos filtros, preservando a ordem de entrada.

    Um período invertido (from > to) resulta em lista vazia.
    """
    predicate = compile_filters(filters)
    return [t for t in transactions if predicate(t)]


def transactions_in_year(transactions: Iterable[Transaction], year: int) -> List[Transaction]:
    """Atalho para as transações de um ano-calendário."""
    start, end = date(year, 1, 1), date(year, 12, 31)
    return [t for t in transactions if start <= t.date <= end]

# mei_facil/core/models.py
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

# Tipos de transação (valores gravados na coluna "type" do Supabase)
INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

INCOME_CATEGORIES = (
    "Venda de Produtos",
    "Prestação de Serviços",
    "Consultoria",
    "Aluguel de Bens",
    "Rendimentos de Aplicações",
    "Outras Receitas",
)

EXPENSE_CATEGORIES = (
    "Compras de Mercadorias/Insumos",
    "Aluguel (Espaço/Equipamento)",
    "Água, Luz, Internet, Telefone",
    "Transporte/Combustível",
    "Marketing/Publicidade",
    "Taxas e Impostos (exceto DAS)",
    "Software/Ferramentas Online",
    "Manutenção (Equipamentos/Veículo)",
    "Material de Escritório",
    "Serviços de Terceiros (Contador, Designer)",
    "Despesas Bancárias",
    "Pró-labore/Salário (se aplicável)",
    "Outras Despesas",
)

VISUALIZATION_TYPES = (
    "table",
    "line_chart",
    "pie_chart_expenses",
    "pie_chart_income",
    "default_dashboard_layout",
)

DEFAULT_SELECTED_FIELDS = ["date", "description", "amount", "type", "category"]
DEFAULT_VISUALIZATION_TYPE = "default_dashboard_layout"


def to_decimal(value: Any) -> Optional[Decimal]:
    """Converte números vindos do Supabase (int, float ou str) para Decimal."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        # str() evita a imprecisão binária do float (0.1 -> 0.1000000000000000055...)
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Valor numérico inválido: {value!r}") from e


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Aceita date, datetime ou string ISO (YYYY-MM-DD, com ou sem horário)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _number_for_json(value: Optional[Decimal]) -> Union[int, str, None]:
    # o cliente do Supabase serializa com json, que não aceita Decimal;
    # valores fracionários vão como texto para não perder precisão
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return str(value)


@dataclass(frozen=True)
class Transaction:
    """Uma receita ou despesa registrada pelo MEI. Valores sempre em BRL."""

    id: str
    description: str
    amount: Decimal
    date: date
    type: str
    category: Optional[str] = None
    attachment_url: Optional[str] = None
    attachment_filename: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Transaction":
        """Monta a transação a partir de uma linha da tabela transactions."""
        return cls(
            id=str(row["id"]),
            description=row.get("description") or "",
            amount=to_decimal(row.get("amount")) or Decimal("0"),
            date=parse_date(row["date"]),
            type=row["type"],
            category=row.get("category") or None,
            attachment_url=row.get("attachment_url"),
            attachment_filename=row.get("attachment_filename"),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        """Linha para inserção (sem id/created_at, gerados pelo banco)."""
        return {
            "description": self.description,
            "amount": _number_for_json(self.amount),
            "date": self.date.isoformat(),
            "type": self.type,
            "category": self.category or None,
            "attachment_url": self.attachment_url,
            "attachment_filename": self.attachment_filename,
        }


@dataclass(frozen=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def full_year(cls, year: int) -> "DateRange":
        return cls(start=date(year, 1, 1), end=date(year, 12, 31))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DateRange":
        data = data or {}
        return cls(start=parse_date(data.get("from")), end=parse_date(data.get("to")))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "from": self.start.isoformat() if self.start else None,
            "to": self.end.isoformat() if self.end else None,
        }


@dataclass(frozen=True)
class ReportFilters:
    """Filtros ativos de um relatório.

    Listas vazias em ``transaction_types`` e ``categories`` significam
    "sem restrição". O formato serializado (``to_dict``) usa as mesmas
    chaves camelCase gravadas na coluna ``filters`` de ``saved_reports``.
    """

    date_range: DateRange = field(default_factory=DateRange)
    transaction_types: List[str] = field(default_factory=lambda: list(TRANSACTION_TYPES))
    categories: List[str] = field(default_factory=list)
    amount_min: Optional[Decimal] = None
    amount_max: Optional[Decimal] = None
    description_contains: Optional[str] = None

    @classmethod
    def for_year(cls, year: int) -> "ReportFilters":
        return cls(date_range=DateRange.full_year(year))

    def copy(self) -> "ReportFilters":
        """Cópia com listas próprias (não compartilhadas com a original)."""
        return self.with_date_range(self.date_range)

    def with_date_range(self, date_range: DateRange) -> "ReportFilters":
        return ReportFilters(
            date_range=date_range,
            transaction_types=list(self.transaction_types),
            categories=list(self.categories),
            amount_min=self.amount_min,
            amount_max=self.amount_max,
            description_contains=self.description_contains,
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReportFilters":
        data = data or {}
        types = data.get("transactionTypes")
        return cls(
            date_range=DateRange.from_dict(data.get("dateRange")),
            transaction_types=list(TRANSACTION_TYPES) if types is None else list(types),
            categories=list(data.get("categories") or []),
            amount_min=to_decimal(data.get("amountMin")),
            amount_max=to_decimal(data.get("amountMax")),
            description_contains=data.get("descriptionContains"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dateRange": self.date_range.to_dict(),
            "transactionTypes": list(self.transaction_types),
            "categories": list(self.categories),
            "amountMin": _number_for_json(self.amount_min),
            "amountMax": _number_for_json(self.amount_max),
            "descriptionContains": self.description_contains,
        }


@dataclass
class SavedReportConfig:
    """Configuração de relatório salva (tabela saved_reports). Sem id = ainda não gravada."""

    report_name: str
    filters: ReportFilters
    selected_fields: List[str] = field(default_factory=lambda: list(DEFAULT_SELECTED_FIELDS))
    visualization_type: str = DEFAULT_VISUALIZATION_TYPE
    visualization_config: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SavedReportConfig":
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            report_name=row.get("report_name") or "",
            filters=ReportFilters.from_dict(row.get("filters")),
            selected_fields=list(row.get("selected_fields") or []),
            visualization_type=row.get("visualization_type") or DEFAULT_VISUALIZATION_TYPE,
            visualization_config=dict(row.get("visualization_config") or {}),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "report_name": self.report_name,
            "filters": self.filters,
            "selected_fields": self.selected_fields,
            "visualization_type": self.visualization_type,
            "visualization_config": self.visualization_config,
        }


@dataclass(frozen=True)
class MonthlySummary:
    month: str
    receitas: Decimal
    despesas: Decimal
    saldo: Decimal
    year: int
    month_number: int

    def to_dict(self) -> Dict[str, Any]:
        # chaves usadas pelos gráficos
        return {
            "month": self.month,
            "Receitas": self.receitas,
            "Despesas": self.despesas,
            "Saldo": self.saldo,
        }


@dataclass(frozen=True)
class CategorySummary:
    name: str
    value: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class Totals:
    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    annual_revenue: Decimal

# mei_facil/utils/text_utils.py
import unicodedata
from decimal import Decimal
from typing import Tuple, Union

MONTH_ABBREVIATIONS = ("Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez")
MONTH_NAMES = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)


def normalize_text(s: str) -> str:
    """Remove acentos e converte para minúsculas (casefold).
    Ex: "Água, Luz" -> "agua, luz"
    Ex: "SERVIÇOS" -> "servicos"
    """
    if not s:
        return ""
    decomposed = unicodedata.normalize("NFKD", s)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def report_name_sort_key(name: str) -> Tuple[str, str]:
    """Chave de ordenação para nomes de relatório.

    Ignora acentos e maiúsculas na comparação principal,
    usando o nome original apenas para desempatar.
    """
    return (normalize_text(name), name)


def month_label(year: int, month: int) -> str:
    """Rótulo curto de mês/ano em português. Ex: (2025, 3) -> "Mar/2025"."""
    return f"{MONTH_ABBREVIATIONS[month - 1]}/{year:04d}"


def format_brl(value: Union[Decimal, float, int]) -> str:
    """Formata um valor em reais. Ex: 1234.5 -> "R$ 1.234,50"; -10 -> "-R$ 10,00"."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"))
    sign = "-" if amount < 0 else ""
    # formata no padrão americano e troca os separadores
    formatted = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {formatted}"

# mei_facil/core/deadlines.py
"""Lembretes de obrigações do MEI: DAS mensal e DASN-SIMEI anual."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from mei_facil.config import DAS_DUE_DAY, DAS_PAYMENT_URL, DASN_SUBMISSION_URL
from mei_facil.utils.text_utils import MONTH_NAMES

DASN_DUE_MONTH = 5
DASN_DUE_DAY = 31


@dataclass(frozen=True)
class DasStatus:
    status: str  # pago, a_vencer, vence_hoje, vencido
    due_date: date
    days_left: Optional[int]
    message: str
    payment_url: str = DAS_PAYMENT_URL


@dataclass(frozen=True)
class DasnStatus:
    status: str  # prazo_aberto, fora_do_periodo
    reference_year: int
    due_date: date
    days_left: Optional[int]
    message: str
    submission_url: str = DASN_SUBMISSION_URL


def das_status(today: date, das_paid: bool) -> DasStatus:
    """Situação do DAS do mês corrente (vencimento no dia 20)."""
    due = date(today.year, today.month, DAS_DUE_DAY)
    month_name = MONTH_NAMES[today.month - 1]

    if das_paid:
        return DasStatus("pago", due, None, f"DAS de {month_name} está pago.")
    if today < due:
        days = (due - today).days
        return DasStatus("a_vencer", due, days, f"Faltam {days} dia(s) para o vencimento do DAS de {month_name}.")
    if today == due:
        return DasStatus("vence_hoje", due, 0, f"DAS de {month_name} vence HOJE!")
    return DasStatus(
        "vencido",
        due,
        None,
        f"DAS de {month_name} venceu em {due.strftime('%d/%m/%Y')}. Pague o quanto antes!",
    )


def dasn_status(today: date, has_pro_access: bool = False) -> DasnStatus:
    """Situação da DASN-SIMEI (declaração do ano anterior, entregue de janeiro a 31 de maio)."""
    reference_year = today.year - 1
    due = date(today.year, DASN_DUE_MONTH, DASN_DUE_DAY)

    if today <= due:
        days = (due - today).days
        status = "prazo_aberto"
        message = (
            f"A declaração referente a {reference_year} deve ser entregue até 31 de Maio de {today.year}. "
            f"Faltam {days} dia(s)."
        )
    else:
        days = None
        status = "fora_do_periodo"
        message = (
            f"O período de entrega da DASN-SIMEI referente a {reference_year} foi de Janeiro a Maio de {today.year}. "
            f"A próxima declaração (ref. a {today.year}) será entre Janeiro e Maio de {today.year + 1}."
        )

    if has_pro_access:
        message += " Usuários Pro recebem lembretes detalhados."
    return DasnStatus(status, reference_year, due, days, message)

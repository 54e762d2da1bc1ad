# mei_facil/core/limits.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from mei_facil.config import ANNUAL_REVENUE_LIMIT, MAX_FREE_TRANSACTIONS
from mei_facil.core.errors import AccessDeniedError

PAID_PLAN = "paid"
FREE_PLAN = "free"

# Faixas do alerta de faturamento (percentual do limite anual)
WARNING_THRESHOLD = Decimal("80")
CRITICAL_THRESHOLD = Decimal("95")

PRO_FEATURE_MESSAGE = "Este recurso é exclusivo para usuários Pro."


@dataclass(frozen=True)
class RevenueProgress:
    annual_revenue: Decimal
    limit: Decimal
    percent: Decimal
    level: str  # ok, atencao, critico

    @property
    def message(self) -> Optional[str]:
        if self.level == "critico":
            return "Limite quase excedido!"
        if self.level == "atencao":
            return "Atenção ao limite!"
        return None


def has_pro_access(plan: str, is_admin: bool = False) -> bool:
    return plan == PAID_PLAN or bool(is_admin)


def plan_label(plan: str, is_admin: bool = False) -> str:
    if is_admin:
        return "Pro (Admin)"
    return "Pro" if has_pro_access(plan) else "Gratuito"


def require_pro_access(has_access: bool, feature: str = "") -> None:
    """Levanta AccessDeniedError quando o recurso exige o plano Pro."""
    if not has_access:
        message = PRO_FEATURE_MESSAGE if not feature else f"{PRO_FEATURE_MESSAGE} ({feature})"
        raise AccessDeniedError(message)


def can_add_more_transactions(has_access: bool, transaction_count: int) -> bool:
    """Plano gratuito permite até MAX_FREE_TRANSACTIONS transações."""
    return has_access or transaction_count < MAX_FREE_TRANSACTIONS


def remaining_free_transactions(transaction_count: int) -> int:
    return max(MAX_FREE_TRANSACTIONS - transaction_count, 0)


def revenue_progress(
    annual_revenue: Union[Decimal, int, float],
    limit: Union[Decimal, int, float] = ANNUAL_REVENUE_LIMIT,
) -> RevenueProgress:
    """Percentual do limite anual do MEI já faturado e o nível de alerta."""
    revenue = Decimal(str(annual_revenue))
    limit_value = Decimal(str(limit))
    percent = Decimal("0") if limit_value == 0 else revenue / limit_value * 100

    if percent > CRITICAL_THRESHOLD:
        level = "critico"
    elif percent > WARNING_THRESHOLD:
        level = "atencao"
    else:
        level = "ok"
    return RevenueProgress(annual_revenue=revenue, limit=limit_value, percent=percent, level=level)

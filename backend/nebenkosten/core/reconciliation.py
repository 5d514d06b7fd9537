"""Reconciliation of the allocated tenant share against prepayments."""
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from nebenkosten.core.amounts import non_negative
from nebenkosten.core.distribution import Unresolvable, is_resolved
from nebenkosten.exceptions import BillingValidationError

CENT = Decimal("0.01")


class BalanceKind(str, Enum):
    PAYMENT_DUE = "payment_due"
    CREDIT = "credit"
    BALANCED = "balanced"
    NOT_COMPUTABLE = "not_computable"

    @property
    def label(self) -> str:
        return _BALANCE_LABELS[self]


_BALANCE_LABELS = {
    BalanceKind.PAYMENT_DUE: "Nachzahlung",
    BalanceKind.CREDIT: "Guthaben",
    BalanceKind.BALANCED: "Ausgeglichen – keine Nachzahlung, kein Guthaben",
    BalanceKind.NOT_COMPUTABLE: "Keine Umlage möglich – bitte Objektprofil vervollständigen.",
}


def validate_months(months) -> int:
    if isinstance(months, bool) or not isinstance(months, int):
        raise BillingValidationError(
            f"Die Anzahl der Monate muss eine ganze Zahl sein ({months!r}).",
            field="prepayment_months",
        )
    if months <= 0:
        raise BillingValidationError(
            f"Die Anzahl der Monate muss größer als 0 sein ({months}).",
            field="prepayment_months",
        )
    return months


def prepayment_total(monthly, months) -> Decimal:
    return non_negative(monthly, field="prepayment_monthly") * validate_months(months)


def final_balance(
    tenant_share: Decimal | Unresolvable, prepaid: Decimal
) -> Decimal | Unresolvable:
    """Positive: tenant pays more. Negative: credit owed to the tenant."""
    if not is_resolved(tenant_share):
        return tenant_share
    return tenant_share - prepaid


def classify_balance(balance: Decimal | Unresolvable) -> BalanceKind:
    if not is_resolved(balance):
        return BalanceKind.NOT_COMPUTABLE
    # Classified on whole cents, the precision the statement prints.
    balance = balance.quantize(CENT, rounding=ROUND_HALF_UP)
    if balance > 0:
        return BalanceKind.PAYMENT_DUE
    if balance < 0:
        return BalanceKind.CREDIT
    return BalanceKind.BALANCED

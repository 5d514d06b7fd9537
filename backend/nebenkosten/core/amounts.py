"""Coercion of user-entered amounts to Decimal."""
from decimal import Decimal, InvalidOperation

from nebenkosten.exceptions import BillingValidationError


def to_decimal(value, field: str = "amount") -> Decimal:
    """Convert int / float / str / Decimal to Decimal, going through str for floats."""
    if isinstance(value, bool):
        raise BillingValidationError(f"Ungültiger Betrag für {field}: {value!r}.", field=field)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip().replace(",", "."))
        except (InvalidOperation, ValueError):
            raise BillingValidationError(f"Ungültiger Betrag für {field}: {value!r}.", field=field)
    if not result.is_finite():
        raise BillingValidationError(f"Ungültiger Betrag für {field}: {value!r}.", field=field)
    return result


def non_negative(value, field: str = "amount") -> Decimal:
    amount = to_decimal(value, field)
    if amount < 0:
        raise BillingValidationError(
            f"Der Wert für {field} darf nicht negativ sein ({amount}).", field=field
        )
    return amount


def optional_positive(value) -> Decimal | None:
    """Profile attributes: None, zero and negatives all count as 'not available'."""
    if value is None:
        return None
    try:
        amount = to_decimal(value)
    except BillingValidationError:
        return None
    return amount if amount > 0 else None

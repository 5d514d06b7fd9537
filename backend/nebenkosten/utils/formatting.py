"""German number, currency and date formatting for statements."""
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
NOT_AVAILABLE = "–"


def _german(text: str) -> str:
    # '1,234.56' -> '1.234,56'
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_eur(value) -> str:
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    if amount == 0:
        amount = abs(amount)  # no '-0,00 €'
    return f"{_german(f'{amount:,.2f}')} €"


def format_quantity(value) -> str:
    """Share values and divisors: no trailing zeros, comma as decimal separator."""
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP).normalize()
    if amount == amount.to_integral_value():
        amount = amount.quantize(Decimal("1"))
    return _german(f"{amount:,f}")


def format_percent(value) -> str:
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{_german(f'{amount:,.2f}')} %"


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")

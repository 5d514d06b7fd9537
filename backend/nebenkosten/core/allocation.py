"""
Allocation of the property's operating costs to one tenant.

The tenant's total liability is computed once from the divisor and then distributed
back over the categories by each category's proportion of the total cost, so the
category shares always add up to the tenant total.
"""
from decimal import Decimal

from nebenkosten.core.distribution import (
    PropertyBillingProfile,
    Unresolvable,
    is_resolved,
    is_single_unit,
)

HUNDRED = Decimal("100")


def cost_per_unit(total_cost: Decimal, divisor: Decimal | Unresolvable) -> Decimal | Unresolvable:
    if not is_resolved(divisor):
        return divisor
    return total_cost / divisor


def tenant_total_share(
    per_unit: Decimal | Unresolvable, share_value: Decimal
) -> Decimal | Unresolvable:
    if not is_resolved(per_unit):
        return per_unit
    return per_unit * share_value


def tenant_category_share(
    per_unit: Decimal | Unresolvable, share_value: Decimal, proportion: Decimal
) -> Decimal:
    # Defined zero (not absent) when no allocation is possible.
    if not is_resolved(per_unit):
        return Decimal("0")
    return per_unit * share_value * proportion


def share_percentage(
    share_value: Decimal, divisor: Decimal | Unresolvable
) -> Decimal | Unresolvable:
    if not is_resolved(divisor):
        return divisor
    return share_value / divisor * HUNDRED


def effective_share_value(
    profile: PropertyBillingProfile,
    share_value: Decimal,
    divisor: Decimal | Unresolvable,
) -> Decimal:
    """Single-unit properties bill the whole divisor to the one tenant."""
    if is_resolved(divisor) and is_single_unit(profile):
        return divisor
    return share_value

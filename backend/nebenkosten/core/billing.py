"""
Billing orchestration: resolve divisor -> aggregate -> allocate -> reconcile.
Every step is a pure function over a snapshot of the cost map.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from nebenkosten.core.allocation import (
    cost_per_unit,
    effective_share_value,
    share_percentage,
    tenant_category_share,
    tenant_total_share,
)
from nebenkosten.core.amounts import non_negative
from nebenkosten.core.categories import CostCategory, all_categories
from nebenkosten.core.costs import CostAggregator
from nebenkosten.core.distribution import (
    DistributionKey,
    PropertyBillingProfile,
    Unresolvable,
    is_resolved,
    resolve_divisor,
)
from nebenkosten.core.reconciliation import (
    BalanceKind,
    classify_balance,
    final_balance,
    prepayment_total,
    validate_months,
)
from nebenkosten.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TenantShareInput:
    name: str
    address: str = ""
    share_value: Decimal = Decimal("1")
    prepayment_monthly: Decimal = Decimal("0")
    prepayment_months: int = 12

    def __post_init__(self):
        object.__setattr__(self, "share_value", non_negative(self.share_value, "share_value"))
        object.__setattr__(
            self, "prepayment_monthly", non_negative(self.prepayment_monthly, "prepayment_monthly")
        )
        validate_months(self.prepayment_months)


@dataclass(frozen=True)
class CategoryShare:
    category: CostCategory
    cost: Decimal
    proportion: Decimal
    share: Decimal


@dataclass(frozen=True)
class BillingResult:
    """Computed billing for one tenant / one property / one year."""

    year: int
    distribution_key: DistributionKey | None
    total_cost: Decimal
    divisor: Decimal | Unresolvable
    cost_per_unit: Decimal | Unresolvable
    entered_share_value: Decimal
    share_value: Decimal  # after the single-unit policy
    share_percentage: Decimal | Unresolvable
    category_shares: tuple[CategoryShare, ...]
    tenant_total_share: Decimal | Unresolvable
    prepayment_monthly: Decimal
    prepayment_months: int
    prepayment_total: Decimal
    final_balance: Decimal | Unresolvable

    @property
    def allocatable(self) -> bool:
        return is_resolved(self.divisor)

    @property
    def balance_kind(self) -> BalanceKind:
        return classify_balance(self.final_balance)

    @property
    def category_share_sum(self) -> Decimal:
        return sum((c.share for c in self.category_shares), Decimal("0"))

    def share_for(self, category: CostCategory) -> CategoryShare:
        return next(c for c in self.category_shares if c.category == category)


def compute_billing(
    profile: PropertyBillingProfile,
    costs: CostAggregator | Mapping,
    tenant: TenantShareInput,
    year: int,
) -> BillingResult:
    if not isinstance(costs, CostAggregator):
        costs = CostAggregator(costs)
    snapshot = costs.snapshot()
    total = costs.total_cost()
    proportions = costs.proportions()

    divisor = resolve_divisor(profile)
    if not is_resolved(divisor):
        logger.info(
            "No divisor for %r (key=%s): %s",
            profile.name,
            profile.distribution_key,
            divisor.reason.value,
        )

    share_value = effective_share_value(profile, tenant.share_value, divisor)
    per_unit = cost_per_unit(total, divisor)
    tenant_share = tenant_total_share(per_unit, share_value)

    category_shares = tuple(
        CategoryShare(
            category=category,
            cost=snapshot[category],
            proportion=proportions[category],
            share=tenant_category_share(per_unit, share_value, proportions[category]),
        )
        for category in all_categories()
    )

    prepaid = prepayment_total(tenant.prepayment_monthly, tenant.prepayment_months)
    balance = final_balance(tenant_share, prepaid)

    logger.debug(
        "Billing %s for %r: total=%s divisor=%s share=%s balance=%s",
        year,
        tenant.name,
        total,
        divisor,
        tenant_share,
        balance,
    )
    return BillingResult(
        year=year,
        distribution_key=profile.distribution_key,
        total_cost=total,
        divisor=divisor,
        cost_per_unit=per_unit,
        entered_share_value=tenant.share_value,
        share_value=share_value,
        share_percentage=share_percentage(share_value, divisor),
        category_shares=category_shares,
        tenant_total_share=tenant_share,
        prepayment_monthly=tenant.prepayment_monthly,
        prepayment_months=tenant.prepayment_months,
        prepayment_total=prepaid,
        final_balance=balance,
    )

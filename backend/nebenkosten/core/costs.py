"""Per-category cost entries for one property and one billing year."""
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from nebenkosten.core.amounts import non_negative
from nebenkosten.core.categories import CostCategory, all_categories, parse_category


class CostAggregator:
    """
    Owns the category cost map of a billing run.

    The map is total over the catalog: every category has an entry, zero by default.
    set_amount() is the only mutation; computations read from snapshot().
    """

    def __init__(self, amounts: Mapping | None = None):
        self._amounts: dict[CostCategory, Decimal] = {c: Decimal("0") for c in all_categories()}
        for category, amount in (amounts or {}).items():
            self.set_amount(category, amount)

    def set_amount(self, category, amount) -> None:
        category = parse_category(category)
        self._amounts[category] = non_negative(amount, field=category.value)

    def amount(self, category) -> Decimal:
        return self._amounts[parse_category(category)]

    def total_cost(self) -> Decimal:
        return sum(self._amounts.values(), Decimal("0"))

    def proportion(self, category) -> Decimal:
        total = self.total_cost()
        if total <= 0:
            return Decimal("0")
        return self.amount(category) / total

    def proportions(self) -> dict[CostCategory, Decimal]:
        return {c: self.proportion(c) for c in all_categories()}

    def snapshot(self) -> Mapping[CostCategory, Decimal]:
        """Read-only copy in catalog order, safe to share between statements."""
        return MappingProxyType({c: self._amounts[c] for c in all_categories()})

    def __len__(self) -> int:
        return len(self._amounts)

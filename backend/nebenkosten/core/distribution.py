"""
Distribution key resolution.
Turns a property's billing profile into the divisor a tenant's share value is measured against.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from nebenkosten.core.amounts import optional_positive


class DistributionKey(str, Enum):
    AREA = "sqm"
    OCCUPANTS = "people"
    UNITS = "units"
    CONSUMPTION = "consumption"

    @classmethod
    def parse(cls, raw) -> "DistributionKey | None":
        """Unknown or empty keys parse to None ('Nicht definiert')."""
        if raw is None or isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return None


class UnresolvableReason(str, Enum):
    KEY_UNDEFINED = "key_undefined"
    CONSUMPTION_KEY = "consumption_key"
    MISSING_LIVING_AREA = "missing_living_area"
    MISSING_RESIDENTS_COUNT = "missing_residents_count"
    MISSING_UNIT_COUNT = "missing_unit_count"


@dataclass(frozen=True)
class Unresolvable:
    """Explicit 'not computable' value; never to be confused with a computed zero."""

    reason: UnresolvableReason


def is_resolved(value) -> bool:
    return not isinstance(value, Unresolvable)


@dataclass(frozen=True)
class PropertyBillingProfile:
    """Read-only subset of the property record the billing engine needs."""

    distribution_key: DistributionKey | None = None
    living_area: Decimal | None = None
    residents_count: int | None = None
    unit_count: int | None = None
    billing_model: str | None = None  # 'single' | 'multi'
    name: str = ""
    address: str = ""
    owner_name: str | None = None
    owner_address: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "distribution_key", DistributionKey.parse(self.distribution_key))


KEY_LABELS = {
    DistributionKey.AREA: "Wohnfläche (m²)",
    DistributionKey.OCCUPANTS: "Personen",
    DistributionKey.UNITS: "Einheiten",
    DistributionKey.CONSUMPTION: "Verbrauch",
}
UNDEFINED_KEY_LABEL = "Nicht definiert"

_PLACEHOLDERS = {
    DistributionKey.AREA: "Wohnfläche des Mieters (m²)",
    DistributionKey.OCCUPANTS: "Personenzahl des Mieters",
    DistributionKey.UNITS: "Anzahl Einheiten des Mieters",
    DistributionKey.CONSUMPTION: "Verbrauchseinheit des Mieters",
}

_MISSING_REASON = {
    DistributionKey.AREA: UnresolvableReason.MISSING_LIVING_AREA,
    DistributionKey.OCCUPANTS: UnresolvableReason.MISSING_RESIDENTS_COUNT,
    DistributionKey.UNITS: UnresolvableReason.MISSING_UNIT_COUNT,
}


def key_label(key: DistributionKey | None) -> str:
    return KEY_LABELS.get(DistributionKey.parse(key), UNDEFINED_KEY_LABEL)


def share_placeholder(key: DistributionKey | None) -> str:
    return _PLACEHOLDERS.get(DistributionKey.parse(key), "Wert für Schlüssel")


def resolve_divisor(profile: PropertyBillingProfile) -> Decimal | Unresolvable:
    key = profile.distribution_key
    if key is None:
        return Unresolvable(UnresolvableReason.KEY_UNDEFINED)
    if key is DistributionKey.CONSUMPTION:
        # Needs per-unit metering data, which the profile does not carry.
        return Unresolvable(UnresolvableReason.CONSUMPTION_KEY)

    raw = {
        DistributionKey.AREA: profile.living_area,
        DistributionKey.OCCUPANTS: profile.residents_count,
        DistributionKey.UNITS: profile.unit_count,
    }[key]
    divisor = optional_positive(raw)
    if divisor is None:
        return Unresolvable(_MISSING_REASON[key])
    return divisor


def is_single_unit(profile: PropertyBillingProfile) -> bool:
    """A property without an explicit multi-unit billing model and at most one unit."""
    if (profile.billing_model or "").strip().lower() == "multi":
        return False
    if profile.unit_count is not None and profile.unit_count > 1:
        return False
    return True

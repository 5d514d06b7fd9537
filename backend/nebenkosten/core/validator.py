"""
Plausibility checks for a computed billing.
Reports problems and hints; never alters the computed values.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from nebenkosten.core.billing import BillingResult
from nebenkosten.core.distribution import (
    DistributionKey,
    PropertyBillingProfile,
    UnresolvableReason,
    is_resolved,
    key_label,
)
from nebenkosten.utils.config_loader import get_prepayment_months_max
from nebenkosten.utils.formatting import format_quantity

_MISSING_FIELD = {
    UnresolvableReason.MISSING_LIVING_AREA: "living_area",
    UnresolvableReason.MISSING_RESIDENTS_COUNT: "residents_count",
    UnresolvableReason.MISSING_UNIT_COUNT: "unit_count",
    UnresolvableReason.KEY_UNDEFINED: "primary_operating_cost_key",
    UnresolvableReason.CONSUMPTION_KEY: "primary_operating_cost_key",
}


@dataclass
class ValidationIssue:
    level: str  # 'error' | 'warning' | 'info'
    code: str
    message: str
    field: str | None = None


@dataclass
class ValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.level == "error" for i in self.issues)

    @property
    def errors(self):
        return [i for i in self.issues if i.level == "error"]

    @property
    def warnings(self):
        return [i for i in self.issues if i.level == "warning"]

    @property
    def hints(self):
        return [i for i in self.issues if i.level == "info"]

    @property
    def codes(self) -> list[str]:
        return [i.code for i in self.issues]


def validate_billing(result: BillingResult, profile: PropertyBillingProfile) -> ValidationResult:
    outcome = ValidationResult()

    # 1. No allocation possible
    if not is_resolved(result.divisor):
        outcome.issues.append(
            ValidationIssue(
                level="error",
                code="DIVISOR_UNRESOLVABLE",
                message="Keine Umlage möglich – bitte Objektprofil vervollständigen.",
                field=_MISSING_FIELD[result.divisor.reason],
            )
        )

    # 2. Consumption key needs metering data per unit
    if profile.distribution_key is DistributionKey.CONSUMPTION:
        outcome.issues.append(
            ValidationIssue(
                level="warning",
                code="CONSUMPTION_KEY",
                message=(
                    "Verbrauchsabhängige Verteilung erfordert Zählerstände je Einheit. "
                    "Wählen Sie Wohnfläche, Personen oder Einheiten als Schlüssel."
                ),
                field="primary_operating_cost_key",
            )
        )

    # 3. Tenant share larger than the whole property
    if is_resolved(result.divisor) and result.share_value > result.divisor:
        outcome.issues.append(
            ValidationIssue(
                level="warning",
                code="SHARE_EXCEEDS_DIVISOR",
                message=(
                    f"Der Anteil des Mieters ({format_quantity(result.share_value)}) übersteigt "
                    f"den Gesamtwert ({format_quantity(result.divisor)}, "
                    f"{key_label(result.distribution_key)})."
                ),
                field="share_value",
            )
        )

    # 4. Single-unit property: share forced to 100 %
    if is_resolved(result.divisor) and result.share_value != result.entered_share_value:
        outcome.issues.append(
            ValidationIssue(
                level="info",
                code="SINGLE_UNIT_FORCED",
                message=(
                    "Einzelobjekt: Der Mieter trägt 100 % der umlagefähigen Kosten, "
                    f"der eingegebene Wert {format_quantity(result.entered_share_value)} "
                    "wird nicht verwendet."
                ),
                field="share_value",
            )
        )

    # 5. Nothing entered yet
    if result.total_cost == Decimal("0"):
        outcome.issues.append(
            ValidationIssue(
                level="warning",
                code="NO_COSTS",
                message="Es wurden noch keine Betriebskosten erfasst.",
                field="costs",
            )
        )

    # 6. More prepayment months than a billing period plausibly covers
    months_max = get_prepayment_months_max()
    if result.prepayment_months > months_max:
        outcome.issues.append(
            ValidationIssue(
                level="warning",
                code="PREPAYMENT_MONTHS_UNUSUAL",
                message=(
                    f"{result.prepayment_months} Monate Vorauszahlungen – "
                    f"üblich sind höchstens {months_max}."
                ),
                field="prepayment_months",
            )
        )

    return outcome

"""
Statement renderer: turns a BillingResult into an ordered, immutable document.

Single linear pass, no I/O. Section order:
header, title, property, distribution, period, items, prepayment, balance,
due date, notices.
"""
import re
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from nebenkosten.core.billing import BillingResult, TenantShareInput
from nebenkosten.core.categories import display_label
from nebenkosten.core.distribution import (
    DistributionKey,
    PropertyBillingProfile,
    is_resolved,
    key_label,
)
from nebenkosten.core.reconciliation import BalanceKind
from nebenkosten.utils.config_loader import load_statement_settings
from nebenkosten.utils.formatting import (
    NOT_AVAILABLE,
    format_date,
    format_eur,
    format_percent,
    format_quantity,
)

NO_ALLOCATION_TEXT = "Keine Umlage möglich – bitte Objektprofil vervollständigen."
ITEM_HEADERS = ("Nr.", "Kostenart", "Gesamt", "Schlüssel", "Anteil Mieter")

# (tenant value line, total line) per key
_SHARE_LINES = {
    DistributionKey.AREA: ("Wohnfläche Mieter: {share} m²", "Gesamtwohnfläche: {total} m²"),
    DistributionKey.OCCUPANTS: ("Personen im Haushalt: {share}", "Gesamtpersonen: {total}"),
    DistributionKey.UNITS: ("Einheiten Mieter: {share}", "Gesamteinheiten: {total}"),
}


class SectionKind(str, Enum):
    HEADER = "header"
    TITLE = "title"
    PROPERTY = "property"
    DISTRIBUTION = "distribution"
    PERIOD = "period"
    ITEMS = "items"
    PREPAYMENT = "prepayment"
    BALANCE = "balance"
    DUE_DATE = "due_date"
    NOTICES = "notices"


class RowStyle(str, Enum):
    HEAD = "head"
    ITEM = "item"
    TOTAL = "total"
    SEPARATOR = "separator"


@dataclass(frozen=True)
class StatementRow:
    cells: tuple[str, ...] = ()
    style: RowStyle = RowStyle.ITEM


@dataclass(frozen=True)
class StatementSection:
    kind: SectionKind
    lines: tuple[str, ...] = ()
    aside: tuple[str, ...] = ()  # right-hand column, used by the header
    rows: tuple[StatementRow, ...] = ()


@dataclass(frozen=True)
class Statement:
    year: int
    tenant_name: str
    sections: tuple[StatementSection, ...]

    @property
    def file_name(self) -> str:
        # word characters, dots and dashes only, so no path separators
        safe_name = re.sub(r"[^\w.-]", "_", self.tenant_name.strip()).lstrip(".") or "Mieter"
        return f"Nebenkostenabrechnung_{safe_name}_{self.year}.pdf"

    def section(self, kind: SectionKind) -> StatementSection:
        return next(s for s in self.sections if s.kind == kind)

    def as_text(self) -> str:
        out: list[str] = []
        for section in self.sections:
            for row in section.rows:
                if row.style == RowStyle.SEPARATOR:
                    out.append("-" * 72)
                else:
                    out.append(" | ".join(cell for cell in row.cells))
            out.extend(section.lines)
            out.extend(section.aside)
            out.append("")
        return "\n".join(out).rstrip() + "\n"


def _header(profile, tenant, landlord_name, landlord_address, landlord_contact) -> StatementSection:
    sender = landlord_name or profile.owner_name or NOT_AVAILABLE
    landlord = [
        f"Vermieter / Hausverwaltung: {sender}",
        f"Adresse: {landlord_address or profile.owner_address or profile.address}",
    ]
    if landlord_contact:
        landlord.append(f"Kontakt: {landlord_contact}")
    return StatementSection(
        kind=SectionKind.HEADER,
        lines=tuple(landlord),
        aside=(f"Mieter: {tenant.name}", f"Adresse: {tenant.address}"),
    )


def _distribution(result: BillingResult) -> StatementSection:
    if not is_resolved(result.divisor):
        return StatementSection(
            kind=SectionKind.DISTRIBUTION,
            lines=(
                f"Wert für Schlüssel ({key_label(result.distribution_key)}): "
                f"{format_quantity(result.share_value)}",
                NO_ALLOCATION_TEXT,
            ),
        )

    share = format_quantity(result.share_value)
    total = format_quantity(result.divisor)
    share_line, total_line = _SHARE_LINES[result.distribution_key]
    return StatementSection(
        kind=SectionKind.DISTRIBUTION,
        lines=(
            share_line.format(share=share),
            total_line.format(total=total),
            f"Anteil: {format_percent(result.share_percentage)} = {share} / {total}",
        ),
    )


def _items(result: BillingResult) -> StatementSection:
    label = key_label(result.distribution_key)
    rows = [StatementRow(cells=ITEM_HEADERS, style=RowStyle.HEAD)]
    for number, item in enumerate(result.category_shares, start=1):
        rows.append(
            StatementRow(
                cells=(
                    str(number),
                    display_label(item.category),
                    format_eur(item.cost),
                    label,
                    format_eur(item.share),
                )
            )
        )
    rows.append(
        StatementRow(
            cells=(
                "",
                "Summe umlagefähige Kosten",
                format_eur(result.total_cost),
                "",
                format_eur(result.category_share_sum),
            ),
            style=RowStyle.TOTAL,
        )
    )
    rows.append(StatementRow(style=RowStyle.SEPARATOR))
    return StatementSection(kind=SectionKind.ITEMS, rows=tuple(rows))


def _balance(result: BillingResult) -> StatementSection:
    kind = result.balance_kind
    if kind == BalanceKind.NOT_COMPUTABLE:
        value = NOT_AVAILABLE
    elif kind == BalanceKind.BALANCED:
        value = format_eur(0)
    else:
        value = format_eur(result.final_balance)
    return StatementSection(
        kind=SectionKind.BALANCE,
        rows=(StatementRow(cells=("Endbetrag", value), style=RowStyle.TOTAL),),
        lines=(f"Ergebnis: {kind.label}",),
    )


def build_statement(
    result: BillingResult,
    profile: PropertyBillingProfile,
    tenant: TenantShareInput,
    landlord_name: str | None = None,
    landlord_address: str | None = None,
    landlord_contact: str | None = None,
    issue_date: date | None = None,
    settings: dict | None = None,
) -> Statement:
    settings = settings or load_statement_settings()
    issue_date = issue_date or date.today()
    year = result.year
    due_date = issue_date + timedelta(days=settings["payment_term_days"])
    notices = settings["notices"]

    prepayment_label = (
        f"Vorauszahlungen ({format_eur(result.prepayment_monthly)} × {result.prepayment_months})"
    )

    sections = (
        _header(profile, tenant, landlord_name, landlord_address, landlord_contact),
        StatementSection(kind=SectionKind.TITLE, lines=(f"Nebenkostenabrechnung {year}",)),
        StatementSection(
            kind=SectionKind.PROPERTY,
            lines=(f"Objekt: {profile.name}", f"Adresse: {profile.address}"),
        ),
        _distribution(result),
        StatementSection(
            kind=SectionKind.PERIOD,
            lines=(f"Abrechnungszeitraum: 01.01.{year} – 31.12.{year}",),
        ),
        _items(result),
        StatementSection(
            kind=SectionKind.PREPAYMENT,
            rows=(
                StatementRow(cells=(prepayment_label, format_eur(-result.prepayment_total))),
                StatementRow(style=RowStyle.SEPARATOR),
            ),
        ),
        _balance(result),
        StatementSection(
            kind=SectionKind.DUE_DATE,
            lines=(f"Zahlbar bis: {format_date(due_date)}",),
        ),
        StatementSection(
            kind=SectionKind.NOTICES,
            lines=(
                notices["receipts"]["title"],
                notices["receipts"]["text"],
                notices["objection"]["title"],
                notices["objection"]["text"],
            ),
        ),
    )
    return Statement(year=year, tenant_name=tenant.name, sections=sections)

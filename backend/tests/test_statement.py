"""Tests for the statement renderer."""
import dataclasses
from datetime import date
from decimal import Decimal

import pytest

from nebenkosten.core.billing import TenantShareInput, compute_billing
from nebenkosten.core.costs import CostAggregator
from nebenkosten.core.distribution import PropertyBillingProfile
from nebenkosten.core.statement import (
    NO_ALLOCATION_TEXT,
    RowStyle,
    SectionKind,
    build_statement,
)

ISSUE_DATE = date(2025, 3, 1)


def _statement(profile, costs, tenant, **kwargs):
    result = compute_billing(profile, costs, tenant, 2024)
    kwargs.setdefault("issue_date", ISSUE_DATE)
    return build_statement(result, profile, tenant, **kwargs)


class TestSectionOrder:
    def test_fixed_order(self, area_profile, scenario_costs, tenant):
        statement = _statement(area_profile, scenario_costs, tenant)
        assert [s.kind for s in statement.sections] == [
            SectionKind.HEADER,
            SectionKind.TITLE,
            SectionKind.PROPERTY,
            SectionKind.DISTRIBUTION,
            SectionKind.PERIOD,
            SectionKind.ITEMS,
            SectionKind.PREPAYMENT,
            SectionKind.BALANCE,
            SectionKind.DUE_DATE,
            SectionKind.NOTICES,
        ]

    def test_deterministic(self, area_profile, scenario_costs, tenant):
        first = _statement(area_profile, scenario_costs, tenant)
        second = _statement(area_profile, scenario_costs, tenant)
        assert first == second
        assert first.as_text() == second.as_text()


class TestHeader:
    def test_landlord_defaults(self, area_profile, scenario_costs, tenant):
        header = _statement(area_profile, scenario_costs, tenant).section(SectionKind.HEADER)
        assert header.lines == (
            "Vermieter / Hausverwaltung: Erika Mustermann",
            "Adresse: Lindenstraße 12, 10969 Berlin",
        )
        assert header.aside == (
            "Mieter: Max Mieter",
            "Adresse: Lindenstraße 12, 10969 Berlin, 2. OG links",
        )

    def test_explicit_landlord_and_contact(self, area_profile, scenario_costs, tenant):
        header = _statement(
            area_profile,
            scenario_costs,
            tenant,
            landlord_name="Hausverwaltung Nord GmbH",
            landlord_address="Postfach 1, 20095 Hamburg",
            landlord_contact="040 123456",
        ).section(SectionKind.HEADER)
        assert header.lines == (
            "Vermieter / Hausverwaltung: Hausverwaltung Nord GmbH",
            "Adresse: Postfach 1, 20095 Hamburg",
            "Kontakt: 040 123456",
        )

    def test_no_owner_name(self, area_profile, scenario_costs, tenant):
        profile = dataclasses.replace(area_profile, owner_name=None)
        header = _statement(profile, scenario_costs, tenant).section(SectionKind.HEADER)
        assert header.lines[0] == "Vermieter / Hausverwaltung: –"
        assert not any(line.startswith("Kontakt") for line in header.lines)


class TestBody:
    def test_title_property_and_period(self, area_profile, scenario_costs, tenant):
        statement = _statement(area_profile, scenario_costs, tenant)
        assert statement.section(SectionKind.TITLE).lines == ("Nebenkostenabrechnung 2024",)
        assert statement.section(SectionKind.PROPERTY).lines == (
            "Objekt: Haus Lindenstraße",
            "Adresse: Lindenstraße 12, 10969 Berlin",
        )
        assert statement.section(SectionKind.PERIOD).lines == (
            "Abrechnungszeitraum: 01.01.2024 – 31.12.2024",
        )

    def test_distribution_with_divisor(self, area_profile, scenario_costs, tenant):
        section = _statement(area_profile, scenario_costs, tenant).section(SectionKind.DISTRIBUTION)
        assert section.lines == (
            "Wohnfläche Mieter: 50 m²",
            "Gesamtwohnfläche: 150 m²",
            "Anteil: 33,33 % = 50 / 150",
        )

    def test_distribution_by_people(self, area_profile, scenario_costs):
        profile = dataclasses.replace(area_profile, distribution_key="people")
        tenant = TenantShareInput(name="A", share_value=Decimal("2"))
        section = _statement(profile, scenario_costs, tenant).section(SectionKind.DISTRIBUTION)
        assert section.lines == (
            "Personen im Haushalt: 2",
            "Gesamtpersonen: 4",
            "Anteil: 50,00 % = 2 / 4",
        )

    def test_distribution_without_divisor(self, area_profile, scenario_costs, tenant):
        profile = dataclasses.replace(area_profile, living_area=None)
        section = _statement(profile, scenario_costs, tenant).section(SectionKind.DISTRIBUTION)
        assert section.lines == (
            "Wert für Schlüssel (Wohnfläche (m²)): 50",
            NO_ALLOCATION_TEXT,
        )
        assert not any("%" in line for line in section.lines)

    def test_single_unit_is_hundred_percent(self, scenario_costs, tenant):
        profile = PropertyBillingProfile(
            distribution_key="sqm", living_area=Decimal("120"), unit_count=1,
            name="Einfamilienhaus", address="Am Hang 3",
        )
        section = _statement(profile, scenario_costs, tenant).section(SectionKind.DISTRIBUTION)
        assert section.lines[-1] == "Anteil: 100,00 % = 120 / 120"

    def test_items_table(self, area_profile, scenario_costs, tenant):
        rows = _statement(area_profile, scenario_costs, tenant).section(SectionKind.ITEMS).rows
        assert rows[0].style == RowStyle.HEAD
        assert rows[0].cells == ("Nr.", "Kostenart", "Gesamt", "Schlüssel", "Anteil Mieter")
        items = [r for r in rows if r.style == RowStyle.ITEM]
        assert len(items) == 14
        assert [r.cells[0] for r in items] == [str(n) for n in range(1, 15)]
        assert items[2].cells == ("3", "Heizkosten", "1.200,00 €", "Wohnfläche (m²)", "400,00 €")
        assert items[1].cells[4] == "100,00 €"
        assert items[0].cells[2:] == ("0,00 €", "Wohnfläche (m²)", "0,00 €")
        total = rows[-2]
        assert total.style == RowStyle.TOTAL
        assert total.cells[1:] == ("Summe umlagefähige Kosten", "1.500,00 €", "", "500,00 €")
        assert rows[-1].style == RowStyle.SEPARATOR

    def test_prepayment_is_deduction(self, area_profile, scenario_costs, tenant):
        rows = _statement(area_profile, scenario_costs, tenant).section(SectionKind.PREPAYMENT).rows
        assert rows[0].cells == ("Vorauszahlungen (80,00 € × 12)", "-960,00 €")
        assert rows[1].style == RowStyle.SEPARATOR

    def test_due_date(self, area_profile, scenario_costs, tenant):
        section = _statement(area_profile, scenario_costs, tenant).section(SectionKind.DUE_DATE)
        assert section.lines == ("Zahlbar bis: 31.03.2025",)

    def test_due_date_from_settings(self, area_profile, scenario_costs, tenant):
        from nebenkosten.utils.config_loader import load_statement_settings

        settings = {**load_statement_settings(), "payment_term_days": 14}
        section = _statement(
            area_profile, scenario_costs, tenant, settings=settings
        ).section(SectionKind.DUE_DATE)
        assert section.lines == ("Zahlbar bis: 15.03.2025",)

    def test_notices(self, area_profile, scenario_costs, tenant):
        lines = _statement(area_profile, scenario_costs, tenant).section(SectionKind.NOTICES).lines
        assert lines[0] == "Belegübersicht"
        assert "eingesehen werden" in lines[1]
        assert lines[2] == "Rechtliche Hinweise"
        assert "innerhalb eines Jahres" in lines[3]


class TestBalance:
    def _balance(self, profile, costs, tenant):
        return _statement(profile, costs, tenant).section(SectionKind.BALANCE)

    def test_credit(self, area_profile, scenario_costs, tenant):
        section = self._balance(area_profile, scenario_costs, tenant)
        assert section.rows[0].cells == ("Endbetrag", "-460,00 €")
        assert section.lines == ("Ergebnis: Guthaben",)

    def test_payment_due(self, area_profile, scenario_costs):
        tenant = TenantShareInput(name="A", share_value=Decimal("50"), prepayment_monthly=Decimal("30"))
        section = self._balance(area_profile, scenario_costs, tenant)
        assert section.rows[0].cells == ("Endbetrag", "140,00 €")
        assert section.lines == ("Ergebnis: Nachzahlung",)

    def test_zero_is_rendered(self, area_profile, scenario_costs):
        tenant = TenantShareInput(
            name="A", share_value=Decimal("50"), prepayment_monthly=Decimal("500"), prepayment_months=1
        )
        section = self._balance(area_profile, scenario_costs, tenant)
        assert section.rows[0].cells == ("Endbetrag", "0,00 €")
        assert section.lines[0].startswith("Ergebnis: Ausgeglichen")

    def test_not_computable(self, area_profile, scenario_costs, tenant):
        profile = dataclasses.replace(area_profile, living_area=None)
        statement = _statement(profile, scenario_costs, tenant)
        section = statement.section(SectionKind.BALANCE)
        assert section.rows[0].cells == ("Endbetrag", "–")
        assert section.lines == (f"Ergebnis: {NO_ALLOCATION_TEXT}",)
        items = statement.section(SectionKind.ITEMS).rows
        assert items[-2].cells[4] == "0,00 €"

    def test_no_costs_full_credit(self, area_profile, tenant):
        section = self._balance(area_profile, CostAggregator(), tenant)
        assert section.rows[0].cells == ("Endbetrag", "-960,00 €")


class TestTextAndFileName:
    def test_file_name(self, area_profile, scenario_costs, tenant):
        statement = _statement(area_profile, scenario_costs, tenant)
        assert statement.file_name == "Nebenkostenabrechnung_Max_Mieter_2024.pdf"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Müller/Schmidt", "Nebenkostenabrechnung_Müller_Schmidt_2024.pdf"),
            ("..\\Fremd", "Nebenkostenabrechnung__Fremd_2024.pdf"),
            ("  ", "Nebenkostenabrechnung_Mieter_2024.pdf"),
        ],
    )
    def test_file_name_is_sanitised(self, area_profile, scenario_costs, tenant, name, expected):
        statement = _statement(area_profile, scenario_costs, tenant)
        statement = dataclasses.replace(statement, tenant_name=name)
        assert statement.file_name == expected

    def test_text_follows_section_order(self, area_profile, scenario_costs, tenant):
        text = _statement(area_profile, scenario_costs, tenant).as_text()
        markers = [
            "Vermieter / Hausverwaltung",
            "Mieter: Max Mieter",
            "Nebenkostenabrechnung 2024",
            "Objekt:",
            "Anteil: 33,33 %",
            "Abrechnungszeitraum",
            "Summe umlagefähige Kosten",
            "Vorauszahlungen",
            "Endbetrag",
            "Zahlbar bis",
            "Rechtliche Hinweise",
        ]
        positions = [text.index(m) for m in markers]
        assert positions == sorted(positions)

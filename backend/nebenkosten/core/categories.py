"""
Catalog of allocable operating-cost categories.
Order follows the positions of § 2 BetrKV and defines the statement line order.
"""
from enum import Enum

from nebenkosten.exceptions import UnknownCategoryError


class CostCategory(str, Enum):
    PUBLIC_CHARGES = "publicCharges"
    WATER_SUPPLY = "waterSupply"
    HEATING = "heating"
    WARM_WATER = "warmWater"
    STREET_CLEANING_WASTE = "streetCleaningWaste"
    BUILDING_CLEANING = "buildingCleaning"
    GARDEN = "garden"
    ELECTRICITY = "electricity"
    CARETAKER = "caretaker"
    ELEVATOR = "elevator"
    INSURANCE = "insurance"
    CABLE = "cable"
    MANAGEMENT = "management"
    OTHER = "other"


_LABELS = {
    CostCategory.PUBLIC_CHARGES: "Grundsteuer",
    CostCategory.WATER_SUPPLY: "Wasser & Entwässerung",
    CostCategory.HEATING: "Heizkosten",
    CostCategory.WARM_WATER: "Warmwasser",
    CostCategory.STREET_CLEANING_WASTE: "Straßenreinigung & Müll",
    CostCategory.BUILDING_CLEANING: "Gebäudereinigung",
    CostCategory.GARDEN: "Gartenpflege",
    CostCategory.ELECTRICITY: "Allgemeinstrom",
    CostCategory.CARETAKER: "Hausmeister",
    CostCategory.ELEVATOR: "Aufzug",
    CostCategory.INSURANCE: "Gebäudeversicherung",
    CostCategory.CABLE: "Antenne / Kabel / Internet",
    CostCategory.MANAGEMENT: "Hauswart / Verwaltung",
    CostCategory.OTHER: "Sonstige Kosten",
}

_ORDER: tuple[CostCategory, ...] = tuple(CostCategory)


def all_categories() -> tuple[CostCategory, ...]:
    return _ORDER


def display_label(category: CostCategory) -> str:
    return _LABELS[CostCategory(category)]


def parse_category(raw) -> CostCategory:
    """Accept a CostCategory, its identifier ('heating') or its member name ('HEATING')."""
    if isinstance(raw, CostCategory):
        return raw
    try:
        return CostCategory(raw)
    except ValueError:
        pass
    if isinstance(raw, str) and raw.upper() in CostCategory.__members__:
        return CostCategory[raw.upper()]
    raise UnknownCategoryError(f"Unbekannte Kostenart: {raw!r}.", field="category")

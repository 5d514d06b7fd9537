"""
Billing API: compute a tenant's operating-cost share and export the statement PDF.
Nothing is persisted; property profiles are only read.
"""
import re
import unicodedata
from datetime import date
from decimal import Decimal
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from nebenkosten.core.billing import BillingResult, TenantShareInput, compute_billing
from nebenkosten.core.categories import all_categories, display_label, parse_category
from nebenkosten.core.costs import CostAggregator
from nebenkosten.core.distribution import (
    DistributionKey,
    PropertyBillingProfile,
    is_resolved,
    key_label,
    share_placeholder,
)
from nebenkosten.core.statement import build_statement
from nebenkosten.core.validator import validate_billing
from nebenkosten.db.database import get_db
from nebenkosten.exceptions import BillingValidationError, StatementRenderError
from nebenkosten.models.property import Property
from nebenkosten.utils.logging import get_logger
from nebenkosten.utils.pdf_generator import generate_statement_pdf

logger = get_logger(__name__)

router = APIRouter()


class ProfileIn(BaseModel):
    name: str = ""
    address: str = ""
    owner_name: str | None = None
    owner_address: str | None = None
    living_area: float | None = None
    residents_count: int | None = None
    unit_count: int | None = None
    billing_model: str | None = None
    primary_operating_cost_key: str | None = None

    def to_profile(self) -> PropertyBillingProfile:
        return PropertyBillingProfile(
            distribution_key=self.primary_operating_cost_key,
            living_area=self.living_area,
            residents_count=self.residents_count,
            unit_count=self.unit_count,
            billing_model=self.billing_model,
            name=self.name,
            address=self.address,
            owner_name=self.owner_name,
            owner_address=self.owner_address,
        )


class TenantIn(BaseModel):
    name: str
    address: str = ""
    share_value: float = 1.0
    prepayment_monthly: float = 0.0
    prepayment_months: int = 12

    @field_validator("share_value", "prepayment_monthly")
    @classmethod
    def non_negative(cls, v):
        if v < 0:
            raise ValueError("Der Wert darf nicht negativ sein.")
        return v

    @field_validator("prepayment_months")
    @classmethod
    def positive_months(cls, v):
        if v <= 0:
            raise ValueError("Die Anzahl der Monate muss größer als 0 sein.")
        return v

    def to_input(self) -> TenantShareInput:
        return TenantShareInput(
            name=self.name,
            address=self.address,
            share_value=Decimal(str(self.share_value)),
            prepayment_monthly=Decimal(str(self.prepayment_monthly)),
            prepayment_months=self.prepayment_months,
        )


class CostsIn(BaseModel):
    year: int
    costs: dict[str, float] = {}
    tenant: TenantIn

    @field_validator("year")
    @classmethod
    def plausible_year(cls, v):
        if not 1900 <= v <= date.today().year + 1:
            raise ValueError("Ungültiges Abrechnungsjahr.")
        return v

    @field_validator("costs")
    @classmethod
    def known_non_negative_costs(cls, v):
        seen = {}
        for key, amount in v.items():
            category = parse_category(key)
            if category in seen:
                raise ValueError(f"Doppelte Kostenart: {seen[category]} und {key}.")
            seen[category] = key
            if amount < 0:
                raise ValueError(f"Negativer Betrag für {key}: {amount}.")
        return v


class LandlordIn(BaseModel):
    landlord_name: str | None = None
    landlord_address: str | None = None
    landlord_contact: str | None = None


class BillingRequest(CostsIn):
    profile: ProfileIn


class StatementRequest(BillingRequest, LandlordIn):
    pass


class PropertyStatementRequest(CostsIn, LandlordIn):
    pass


def _value(v):
    return float(v) if is_resolved(v) else None


def _serialize(result: BillingResult, profile: PropertyBillingProfile) -> dict:
    validation = validate_billing(result, profile)
    return {
        "year": result.year,
        "distribution_key": result.distribution_key.value if result.distribution_key else None,
        "distribution_key_label": key_label(result.distribution_key),
        "total_cost": float(result.total_cost),
        "divisor": _value(result.divisor),
        "unresolvable_reason": None if result.allocatable else result.divisor.reason.value,
        "cost_per_unit": _value(result.cost_per_unit),
        "share_value": float(result.share_value),
        "share_percentage": _value(result.share_percentage),
        "categories": [
            {
                "key": c.category.value,
                "label": display_label(c.category),
                "cost": float(c.cost),
                "proportion": float(c.proportion),
                "tenant_share": float(c.share),
            }
            for c in result.category_shares
        ],
        "tenant_total_share": _value(result.tenant_total_share),
        "prepayment_total": float(result.prepayment_total),
        "final_balance": _value(result.final_balance),
        "balance_kind": result.balance_kind.value,
        "balance_label": result.balance_kind.label,
        "issues": [
            {"level": i.level, "code": i.code, "message": i.message, "field": i.field}
            for i in validation.issues
        ],
    }


def _compute(profile: PropertyBillingProfile, data: CostsIn) -> BillingResult:
    try:
        return compute_billing(
            profile=profile,
            costs=CostAggregator(data.costs),
            tenant=data.tenant.to_input(),
            year=data.year,
        )
    except BillingValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _content_disposition(file_name: str) -> str:
    """ASCII fallback for old clients plus the RFC 5987 UTF-8 name."""
    ascii_name = unicodedata.normalize("NFKD", file_name).encode("ascii", "ignore").decode("ascii")
    ascii_name = re.sub(r"[^A-Za-z0-9._-]", "_", ascii_name)
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


def _pdf_response(profile: PropertyBillingProfile, data, result: BillingResult) -> Response:
    statement = build_statement(
        result,
        profile,
        data.tenant.to_input(),
        landlord_name=data.landlord_name,
        landlord_address=data.landlord_address,
        landlord_contact=data.landlord_contact,
    )
    try:
        pdf_bytes = generate_statement_pdf(statement)
    except StatementRenderError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(statement.file_name)},
    )


def _load_profile(property_id: int, db: Session) -> PropertyBillingProfile:
    prop = (
        db.query(Property)
        .filter(Property.id == property_id, Property.is_active)
        .first()
    )
    if not prop:
        raise HTTPException(status_code=404, detail="Objekt nicht gefunden.")
    return prop.to_billing_profile()


@router.get("/categories")
def list_categories():
    return [
        {"position": i, "key": c.value, "label": display_label(c)}
        for i, c in enumerate(all_categories(), start=1)
    ]


@router.get("/distribution-keys")
def list_distribution_keys():
    return [
        {"key": k.value, "label": key_label(k), "share_hint": share_placeholder(k)}
        for k in DistributionKey
    ]


@router.post("/compute")
def compute(data: BillingRequest):
    profile = data.profile.to_profile()
    return _serialize(_compute(profile, data), profile)


@router.post("/statement")
def statement_pdf(data: StatementRequest):
    profile = data.profile.to_profile()
    result = _compute(profile, data)
    return _pdf_response(profile, data, result)


@router.get("/properties/{property_id}/profile")
def property_profile(property_id: int, db: Session = Depends(get_db)):
    profile = _load_profile(property_id, db)
    return {
        "property_id": property_id,
        "name": profile.name,
        "address": profile.address,
        "distribution_key": profile.distribution_key.value if profile.distribution_key else None,
        "distribution_key_label": key_label(profile.distribution_key),
        "share_hint": share_placeholder(profile.distribution_key),
        "living_area": float(profile.living_area) if profile.living_area is not None else None,
        "residents_count": profile.residents_count,
        "unit_count": profile.unit_count,
        "billing_model": profile.billing_model,
    }


@router.post("/properties/{property_id}/compute")
def compute_for_property(property_id: int, data: CostsIn, db: Session = Depends(get_db)):
    profile = _load_profile(property_id, db)
    return _serialize(_compute(profile, data), profile)


@router.post("/properties/{property_id}/statement")
def statement_for_property(
    property_id: int, data: PropertyStatementRequest, db: Session = Depends(get_db)
):
    profile = _load_profile(property_id, db)
    result = _compute(profile, data)
    logger.info("Statement %s for property %s, tenant %r", data.year, property_id, data.tenant.name)
    return _pdf_response(profile, data, result)

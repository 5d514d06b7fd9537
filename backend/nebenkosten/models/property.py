from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nebenkosten.core.distribution import PropertyBillingProfile
from nebenkosten.db.database import Base


class Property(Base):
    """Property record as maintained by the property service; read-only here."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_name: Mapped[str | None] = mapped_column(String(200))
    owner_address: Mapped[str | None] = mapped_column(Text)

    living_area: Mapped[float | None] = mapped_column(Numeric(10, 2))
    residents_count: Mapped[int | None] = mapped_column(Integer)
    unit_count: Mapped[int | None] = mapped_column(Integer)
    # 'single' (Einfamilienhaus) | 'multi' (Mehrfamilienhaus)
    billing_model: Mapped[str | None] = mapped_column(String(20))
    # 'sqm' | 'people' | 'units' | 'consumption'
    primary_operating_cost_key: Mapped[str | None] = mapped_column(String(20))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def to_billing_profile(self) -> PropertyBillingProfile:
        return PropertyBillingProfile(
            distribution_key=self.primary_operating_cost_key,
            living_area=self.living_area,
            residents_count=self.residents_count,
            unit_count=self.unit_count,
            billing_model=self.billing_model,
            name=self.name,
            address=self.address or "",
            owner_name=self.owner_name,
            owner_address=self.owner_address,
        )

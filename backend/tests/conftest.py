import os
import tempfile
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Use a temp file-based SQLite so all connections share the same database.
# Must be set BEFORE any app imports.
_db_file = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_db_file.close()
_TEST_DB_URL = f"sqlite:///{_db_file.name}"
os.environ["DATABASE_URL"] = _TEST_DB_URL

from nebenkosten.core.billing import TenantShareInput  # noqa: E402
from nebenkosten.core.categories import CostCategory  # noqa: E402
from nebenkosten.core.distribution import PropertyBillingProfile  # noqa: E402
from nebenkosten.db.database import Base, get_db  # noqa: E402
from nebenkosten.main import app  # noqa: E402
from nebenkosten.models.property import Property  # noqa: E402

_test_engine = create_engine(_TEST_DB_URL, connect_args={"check_same_thread": False})
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


@pytest.fixture(autouse=True)
def setup_db():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=_test_engine)
    yield
    Base.metadata.drop_all(bind=_test_engine)


@pytest.fixture
def db():
    session = _TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_property(db):
    def _make(**overrides):
        data = {
            "name": "Haus Lindenstraße",
            "address": "Lindenstraße 12, 10969 Berlin",
            "owner_name": "Erika Mustermann",
            "living_area": 150,
            "residents_count": 4,
            "unit_count": 3,
            "billing_model": "multi",
            "primary_operating_cost_key": "sqm",
        }
        data.update(overrides)
        prop = Property(**data)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    return _make


@pytest.fixture
def area_profile():
    """Multi-unit house, 150 m², distributed by living area."""
    return PropertyBillingProfile(
        distribution_key="sqm",
        living_area=Decimal("150"),
        residents_count=4,
        unit_count=3,
        billing_model="multi",
        name="Haus Lindenstraße",
        address="Lindenstraße 12, 10969 Berlin",
        owner_name="Erika Mustermann",
    )


@pytest.fixture
def scenario_costs():
    return {CostCategory.HEATING: 1200, CostCategory.WATER_SUPPLY: 300}


@pytest.fixture
def tenant():
    return TenantShareInput(
        name="Max Mieter",
        address="Lindenstraße 12, 10969 Berlin, 2. OG links",
        share_value=Decimal("50"),
        prepayment_monthly=Decimal("80"),
        prepayment_months=12,
    )

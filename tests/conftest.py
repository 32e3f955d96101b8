import pytest

import cache
import config
import db
from models import AppData, Settings, Tenant, Unit, UtilityCharge


@pytest.fixture(autouse=True)
def isolated_files(tmp_path, monkeypatch):
    """Point the store and the local cache at throwaway files."""
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "test.db")
    monkeypatch.setattr(cache, "CACHE_FILE", tmp_path / "cache.json")
    monkeypatch.setattr(config, "ADMIN_EMAIL", "")
    monkeypatch.setattr(config, "CURRENCYAPI_KEY", "test-key")
    db.init_db()
    return tmp_path


@pytest.fixture
def owner_id():
    """Create and return a registered owner id."""
    import auth

    return auth.register_owner("owner@example.com", "secret123")


@pytest.fixture
def apartment():
    return Unit("unit_apt1", "Apartment 1A", "apartment", 200.0, "JOD")


@pytest.fixture
def shop():
    return Unit("unit_shop", "Corner Shop", "shop", 3000.0, "ILS")


@pytest.fixture
def sample_data(apartment, shop):
    """One active tenant per unit and a handful of utility charges."""
    return AppData(
        settings=Settings("JOD", 5.0),
        units=(apartment, shop),
        tenants=(
            Tenant("tenant_a", "Ahmad", apartment.id, "2024-01-01", True),
            Tenant("tenant_s", "Market", shop.id, "2024-01-01", True),
        ),
        utilities=(
            UtilityCharge("util_1", apartment.id, "2024-05", "water", 50.0, "JOD"),
            UtilityCharge("util_2", apartment.id, "2024-06", "electricity", 30.0, "JOD"),
            UtilityCharge("util_3", shop.id, "2024-02", "water", 100.0, "ILS"),
            UtilityCharge("util_4", shop.id, "2024-11", "electricity", 50.0, "ILS"),
            UtilityCharge("util_5", shop.id, "2023-12", "electricity", 500.0, "ILS"),
        ),
    )

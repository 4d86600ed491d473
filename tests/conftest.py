import random
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from backend.config import settings
from backend.database.connection import Database
from backend.helpers.synthetic_data import SyntheticDataGenerator
from backend.main_api import create_app

TEST_MONTH = date(2026, 9, 1)


class FakeGeocoder:
    """Stands in for NominatimClient; returns a fixed address or raises."""

    def __init__(self, address=None, error=None):
        self.address = address if address is not None else {}
        self.error = error
        self.calls = []

    def reverse(self, lat, lng):
        self.calls.append((lat, lng))
        if self.error:
            raise self.error
        return self.address


@pytest.fixture(autouse=True)
def single_seed_worker(monkeypatch):
    # All sessions share one in-memory SQLite connection; keep generation sequential
    monkeypatch.setattr(settings, "SEED_WORKERS", 1)


@pytest.fixture
def database():
    db = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ).open()
    db.create_schema()
    yield db
    db.close()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def generator(database):
    return SyntheticDataGenerator(database, rng=random.Random(42), max_workers=1)


@pytest.fixture
def seeded(generator):
    generator.initialize(month=TEST_MONTH)
    return generator


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def client(database, geocoder):
    app = create_app(database=database, geocoder=geocoder, seed_on_startup=False, enable_scheduler=False)
    with TestClient(app) as c:
        yield c

"""
Pytest configuration and shared fixtures for storefront tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.otp.manager import OTPManager
from storefront.search.catalog import CatalogStore, Product, Variant


class FakeClock:
    """Controllable clock for expiry tests."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, minutes=0, seconds=0):
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def otp_manager(clock):
    return OTPManager(clock=clock)


@pytest.fixture
def sample_products():
    return [
        Product(
            id=1,
            name="Arduino Uno R3",
            brand="Arduino",
            category="Boards",
            description="ATmega328P microcontroller board",
            sku="ARD-UNO-R3",
            price=25.0,
            variants=[
                Variant(name="Uno R3 SMD", sku="ARD-UNO-SMD", attributes={"chip": "SMD"}),
            ],
        ),
        Product(
            id=2,
            name="Raspberry Pi 4",
            brand="Raspberry Pi",
            category="Computers",
            description="Single board computer with 4GB RAM",
            price=55.0,
            variants=[
                Variant(name="4GB", primary_values=["4GB"], multi_values={"case": ["Red", "White"]}),
            ],
        ),
        Product(
            id=3,
            name="USB Cable",
            category="Accessories",
            description="1m charging cord",
            price=3.5,
        ),
    ]


@pytest.fixture
def catalog(sample_products):
    store = CatalogStore()
    store.add_many(sample_products)
    return store


@pytest.fixture
def client(monkeypatch, catalog, clock):
    """FastAPI test client with a sample catalog and a fresh OTP store."""
    from fastapi.testclient import TestClient

    from storefront import main
    from storefront.search.dictionary import KeywordTables

    monkeypatch.setattr(main, "CATALOG", catalog)
    monkeypatch.setattr(main, "TABLES", KeywordTables.default())
    monkeypatch.setattr(main, "OTP_MANAGER", OTPManager(clock=clock))
    monkeypatch.setattr(main.settings, "environment", "development")

    return TestClient(main.app)

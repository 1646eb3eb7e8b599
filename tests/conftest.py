"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides persistence fakes, sample products and the test client.

The application reads its settings once, so the test environment is set
before anything from ``app`` is imported.

==============================================================================
"""

import os
from pathlib import Path

TEST_DATA_DIR = Path(__file__).parent / "data"
AUTHORITATIVE_PATH = TEST_DATA_DIR / "authoritative.json"

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTHORITATIVE_CATALOG"] = str(AUTHORITATIVE_PATH)
os.environ["REFRESH_ON_STARTUP"] = "true"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from typing import Dict, Generator, List, Optional
from fastapi.testclient import TestClient

from app.main import app
from app.catalog.models import Category, Product
from app.catalog.store import CatalogStore
from app.core.exceptions import PersistenceError
from app.db.database import get_database_manager
from app.services.cart_service import CartService


# ============================================================================
# PERSISTENCE FIXTURES
# ============================================================================

class MemoryKeyValueStore:
    """Dict-backed key/value store that records every save."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.saves: List[str] = []

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.saves.append(key)
        self.data[key] = value


class FailingKeyValueStore(MemoryKeyValueStore):
    """Key/value store whose writes fail while ``failing`` is set."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.failing = True

    def save(self, key: str, value: str) -> None:
        if self.failing:
            raise PersistenceError("disk full", key)
        super().save(key, value)


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    """Empty in-memory persistence."""
    return MemoryKeyValueStore()


@pytest.fixture
def failing_store() -> FailingKeyValueStore:
    """Persistence that rejects every write."""
    return FailingKeyValueStore()


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================

@pytest.fixture
def latte() -> Product:
    return Product(id="1", name="Latte", price=3.5, code="CAF-01", category=Category.COFFEE)


@pytest.fixture
def croissant() -> Product:
    return Product(
        id="2",
        name="Croissant",
        price=2.25,
        code="PAN-01",
        category=Category.BAKERY,
        description="Hojaldre de mantequilla",
    )


@pytest.fixture
def house_brew() -> Product:
    return Product(id="local-9", name="House Brew", price=1, category=Category.COFFEE)


@pytest.fixture
def sample_products(latte: Product, croissant: Product, house_brew: Product) -> List[Product]:
    """Small catalog with and without optional fields."""
    return [latte, croissant, house_brew]


@pytest.fixture
def catalog_store(memory_store: MemoryKeyValueStore, sample_products: List[Product]) -> CatalogStore:
    """Catalog store preloaded with the sample products."""
    store = CatalogStore(memory_store, "cafe_productos")
    store.set(sample_products)
    memory_store.saves.clear()
    return store


@pytest.fixture
def cart(memory_store: MemoryKeyValueStore) -> CartService:
    """Empty cart sharing persistence with the catalog store."""
    return CartService(memory_store, "cafe_carrito")


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def client() -> Generator[TestClient, None, None]:
    """Test client on a fresh in-memory database, reconciled at startup."""
    get_database_manager().reset_database()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

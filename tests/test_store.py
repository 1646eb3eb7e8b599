"""
==============================================================================
Catalog Store Tests
==============================================================================

Tests for the in-memory catalog and its persistence mirror.

==============================================================================
"""

import json

import pytest

from app.catalog.codec import encode_structured
from app.catalog.models import Category, Product
from app.catalog.store import CatalogStore
from app.core.exceptions import PersistenceError

from tests.conftest import FailingKeyValueStore, MemoryKeyValueStore


KEY = "cafe_productos"


class TestLoading:
    """Tests for restoring the saved catalog."""

    def test_load_persisted(self, sample_products):
        persistence = MemoryKeyValueStore({KEY: encode_structured(sample_products)})
        store = CatalogStore(persistence, KEY)
        assert store.load_persisted() == 3
        assert store.get() == sample_products

    def test_nothing_saved(self, memory_store):
        store = CatalogStore(memory_store, KEY)
        assert store.load_persisted() == 0
        assert store.get() == []

    def test_corrupt_document_starts_empty(self):
        store = CatalogStore(MemoryKeyValueStore({KEY: "[{"}), KEY)
        assert store.load_persisted() == 0
        assert len(store) == 0


class TestMutations:
    """Tests for store mutations."""

    def test_upsert_existing_keeps_position(self, catalog_store, croissant):
        """Editing a product does not move it."""
        edited = croissant.model_copy(update={"price": 2.75})
        inserted = catalog_store.upsert(edited)
        assert inserted is False
        assert catalog_store.ids() == ["1", "2", "local-9"]
        assert catalog_store.find("2").price == 2.75

    def test_upsert_new_appends(self, catalog_store):
        product = Product(id="new", name="Mocha", price=4, category=Category.COFFEE)
        assert catalog_store.upsert(product) is True
        assert catalog_store.ids()[-1] == "new"
        assert "new" in catalog_store

    def test_remove(self, catalog_store):
        assert catalog_store.remove("1") is True
        assert "1" not in catalog_store
        assert catalog_store.ids() == ["2", "local-9"]

    def test_remove_absent_id_is_noop(self, catalog_store, memory_store, sample_products):
        assert catalog_store.remove("missing") is False
        assert catalog_store.get() == sample_products
        assert memory_store.saves == [KEY]

    def test_every_mutation_persists(self, catalog_store, memory_store, latte):
        catalog_store.upsert(latte)
        catalog_store.remove("2")
        catalog_store.set([latte])
        assert memory_store.saves == [KEY, KEY, KEY]
        saved = json.loads(memory_store.data[KEY])
        assert [p["id"] for p in saved] == ["1"]

    def test_set_with_repeated_id_keeps_first_position(self, memory_store):
        store = CatalogStore(memory_store, KEY)
        first = Product(id="1", name="A", price=1, category=Category.OTHER)
        other = Product(id="2", name="B", price=1, category=Category.OTHER)
        last = Product(id="1", name="C", price=1, category=Category.OTHER)
        store.set([first, other, last])
        assert store.ids() == ["1", "2"]
        assert store.find("1").name == "C"


class TestPersistenceFailures:
    """Tests for the surface-once behavior of save failures."""

    def test_first_failure_raises_then_logs(self, latte, croissant):
        persistence = FailingKeyValueStore()
        store = CatalogStore(persistence, KEY)

        with pytest.raises(PersistenceError):
            store.upsert(latte)
        assert store.persistence_failing
        assert store.find("1") == latte

        store.upsert(croissant)
        assert store.ids() == ["1", "2"]

    def test_failure_surfaces_again_after_recovery(self, latte, croissant):
        persistence = FailingKeyValueStore()
        store = CatalogStore(persistence, KEY)

        with pytest.raises(PersistenceError):
            store.upsert(latte)

        persistence.failing = False
        store.upsert(croissant)
        assert not store.persistence_failing
        assert [p["id"] for p in json.loads(persistence.data[KEY])] == ["1", "2"]

        persistence.failing = True
        with pytest.raises(PersistenceError):
            store.remove("1")

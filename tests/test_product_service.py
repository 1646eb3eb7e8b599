"""
==============================================================================
Product Service Tests
==============================================================================

Tests for catalog CRUD, search and filtering.

==============================================================================
"""

import pytest
from pydantic import ValidationError

from app.catalog.models import Category, Product
from app.catalog.store import CatalogStore
from app.core.exceptions import AppException, PersistenceError
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.cart_service import CartService
from app.services.product_service import ProductService

from tests.conftest import FailingKeyValueStore, MemoryKeyValueStore


@pytest.fixture
def service(catalog_store, cart) -> ProductService:
    return ProductService(catalog_store, cart)


class TestSearch:
    """Tests for listing and filtering."""

    def test_all(self, service, sample_products):
        assert service.search() == sample_products

    def test_text_matches_name_or_code(self, service):
        assert [p.id for p in service.search("LAT")] == ["1"]
        assert [p.id for p in service.search("pan-")] == ["2"]

    def test_category_filter(self, service):
        assert [p.id for p in service.search(category=Category.COFFEE)] == ["1", "local-9"]

    def test_text_and_category(self, service):
        assert [p.id for p in service.search("brew", Category.COFFEE)] == ["local-9"]
        assert service.search("brew", Category.BAKERY) == []


class TestMutations:
    """Tests for create, update and delete."""

    def test_create_generates_id(self, service, catalog_store):
        product = service.create(ProductCreate(nombre="Mocha", precio=4.2, categoria="Café"))
        assert product.id
        assert catalog_store.ids()[-1] == product.id
        assert product.code is None

    def test_create_with_english_category(self, service):
        product = service.create(ProductCreate(name="Muffin", price=2, category="pastry"))
        assert product.category is Category.PASTRY

    def test_create_rejects_negative_price(self):
        with pytest.raises(ValidationError):
            ProductCreate(nombre="Mocha", precio=-1)

    def test_create_with_taken_id_is_rejected(self, service, latte):
        with pytest.raises(AppException) as exc_info:
            service.create(ProductCreate(id="1", nombre="Otro Latte", precio=9, categoria="Café"))
        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "PRODUCT_EXISTS"
        assert service.get("1") == latte

    def test_create_with_new_id(self, service, catalog_store):
        product = service.create(ProductCreate(id="local-10", nombre="Chai", precio=3, categoria="Café"))
        assert product.id == "local-10"
        assert catalog_store.ids()[-1] == "local-10"

    def test_update_in_place(self, service, catalog_store):
        updated = service.update("1", ProductUpdate(nombre="Latte Grande", precio=4, codigo=" "))
        assert updated.name == "Latte Grande"
        assert updated.code is None
        assert catalog_store.ids() == ["1", "2", "local-9"]

    def test_update_unknown(self, service):
        with pytest.raises(AppException) as exc_info:
            service.update("nope", ProductUpdate(nombre="X", precio=1))
        assert exc_info.value.status_code == 404

    def test_delete_removes_from_cart(self, service, catalog_store, cart, latte):
        cart.add(latte)
        assert service.delete("1") is True
        assert "1" not in catalog_store
        assert cart.lines() == []

    def test_delete_clears_cart_when_catalog_save_fails(self, sample_products, latte):
        persistence = FailingKeyValueStore()
        persistence.failing = False
        store = CatalogStore(persistence, "cafe_productos")
        store.set(sample_products)
        cart = CartService(MemoryKeyValueStore(), "cafe_carrito")
        cart.add(latte)
        persistence.failing = True

        with pytest.raises(PersistenceError):
            ProductService(store, cart).delete("1")
        assert "1" not in store
        assert cart.lines() == []

    def test_delete_unknown_is_noop(self, service, sample_products):
        assert service.delete("nope") is False
        assert service.search() == sample_products

    def test_get(self, service, latte):
        assert service.get("1") == latte
        with pytest.raises(AppException):
            service.get("nope")


class TestProductModel:
    """Tests for product validation."""

    def test_display_code(self, latte, house_brew):
        assert latte.display_code == "CAF-01"
        assert house_brew.display_code == "Desconocido"

    def test_price_rounded(self):
        product = Product(id="1", name="Té", price=2.499, category="Otro")
        assert product.price == 2.5

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            Product(id="1", name="Té", price=1, category="Infusiones")

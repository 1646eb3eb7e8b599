"""
==============================================================================
Inventory Service Tests
==============================================================================

Tests for file import (merge / replace) and export.

==============================================================================
"""

import json

import pytest

from app.catalog.codec import BOM, decode_delimited, encode_structured
from app.catalog.merge import ImportStrategy
from app.catalog.models import Category, Product
from app.core.exceptions import AppException, FormatError
from app.services.inventory_service import FileFormat, InventoryService, always


HEADER = "id,nombre,precio,codigo,categoria,descripcion"


@pytest.fixture
def service(catalog_store, cart) -> InventoryService:
    return InventoryService(catalog_store, cart, max_import_bytes=10_000)


def csv_bytes(*rows: str) -> bytes:
    return (BOM + HEADER + "\n" + "\n".join(rows) + "\n").encode("utf-8")


class TestFileFormat:
    """Tests for format detection."""

    @pytest.mark.parametrize("filename,expected", [
        ("menu.json", FileFormat.STRUCTURED),
        ("MENU.JSON", FileFormat.STRUCTURED),
        ("inventario.csv", FileFormat.DELIMITED),
    ])
    def test_from_filename(self, filename, expected):
        assert FileFormat.from_filename(filename) is expected

    @pytest.mark.parametrize("filename", ["menu.xlsx", "menu", ""])
    def test_unsupported(self, filename):
        with pytest.raises(AppException) as exc_info:
            FileFormat.from_filename(filename)
        assert exc_info.value.code == "UNSUPPORTED_FORMAT"
        assert exc_info.value.message == "Formato no soportado. Usa .json o .csv"


class TestImport:
    """Tests for importing inventory files."""

    def test_merge_csv(self, service, catalog_store):
        data = csv_bytes("2,Croissant XL,3.10,PAN-01,Panadería,", "3,Mocha,4,,Café,")

        preview, outcome = service.import_file("menu.csv", data, always(ImportStrategy.MERGE))

        assert preview.record_count == 2
        assert preview.warnings == []
        assert catalog_store.ids() == ["1", "2", "local-9", "3"]
        assert catalog_store.find("2").price == 3.1
        assert outcome.added_ids == ["3"]
        assert outcome.updated_ids == ["2"]

    def test_replace_json_prunes_cart(self, service, catalog_store, cart, latte, croissant):
        cart.add(latte)
        cart.add(croissant)
        data = encode_structured([croissant]).encode("utf-8")

        _, outcome = service.import_file("menu.json", data, always(ImportStrategy.REPLACE))

        assert catalog_store.get() == [croissant]
        assert sorted(outcome.removed_ids) == ["1", "local-9"]
        assert [line.product.id for line in cart.lines()] == ["2"]

    def test_cancelled_decision_changes_nothing(self, service, catalog_store, memory_store, sample_products):
        data = csv_bytes("9,Té,2,,Bebida Fría,")
        seen = []

        def cancel(preview):
            seen.append(preview.record_count)
            return None

        preview, outcome = service.import_file("menu.csv", data, cancel)

        assert seen == [1]
        assert outcome is None
        assert catalog_store.get() == sample_products
        assert memory_store.saves == []

    def test_empty_file_is_not_committed(self, service, catalog_store, sample_products):
        preview, outcome = service.import_file("menu.csv", csv_bytes(), always(ImportStrategy.REPLACE))
        assert preview.record_count == 0
        assert outcome is None
        assert catalog_store.get() == sample_products

    def test_malformed_json_changes_nothing(self, service, catalog_store, sample_products):
        with pytest.raises(FormatError):
            service.import_file("menu.json", b'[{"id": ', always(ImportStrategy.REPLACE))
        assert catalog_store.get() == sample_products

    def test_unsupported_extension_changes_nothing(self, service, catalog_store, sample_products):
        with pytest.raises(AppException) as exc_info:
            service.import_file("menu.txt", b"x", always(ImportStrategy.MERGE))
        assert exc_info.value.status_code == 415
        assert catalog_store.get() == sample_products

    def test_too_large(self, catalog_store):
        service = InventoryService(catalog_store, max_import_bytes=10)
        with pytest.raises(AppException) as exc_info:
            service.parse_file("menu.csv", csv_bytes("1,Latte,3.5,,Café,"))
        assert exc_info.value.code == "IMPORT_TOO_LARGE"

    def test_row_warnings_in_preview(self, service):
        data = csv_bytes("1,Latte,,,Café,", "2,Kombucha,3,,Fermentados,")
        products, preview = service.parse_file("menu.csv", data)
        assert [p.price for p in products] == [0, 3]
        assert products[1].category is Category.OTHER
        assert [w.field for w in preview.warnings] == ["precio", "categoria"]
        assert [w.line for w in preview.warnings] == [2, 3]


class TestExport:
    """Tests for exporting the catalog."""

    def test_export_json(self, service, sample_products):
        artifact = service.export(FileFormat.STRUCTURED)
        assert artifact.filename == "inventario_cafeteria.json"
        assert artifact.media_type == "application/json"
        assert [p["id"] for p in json.loads(artifact.content)] == ["1", "2", "local-9"]

    def test_export_csv_round_trips(self, service, sample_products):
        artifact = service.export("csv")
        assert artifact.filename == "inventario_cafeteria.csv"
        assert artifact.media_type == "text/csv;charset=utf-8"
        assert artifact.encode().startswith(BOM.encode("utf-8"))
        assert decode_delimited(artifact.content) == sample_products

    def test_export_then_replace_is_identity(self, service, catalog_store, sample_products):
        artifact = service.export(FileFormat.DELIMITED)
        service.import_file(artifact.filename, artifact.encode(), always(ImportStrategy.REPLACE))
        assert catalog_store.get() == sample_products

    def test_export_empty_catalog(self, memory_store):
        from app.catalog.store import CatalogStore

        service = InventoryService(CatalogStore(memory_store, "cafe_productos"))
        assert json.loads(service.export(FileFormat.STRUCTURED).content) == []
        assert service.export(FileFormat.DELIMITED).content == BOM + HEADER + "\n"


class TestProductRoundTrip:
    """Imported JSON keeps every field."""

    def test_import_json_keeps_optionals(self, service, catalog_store):
        product = Product(
            id="x1",
            name="Pan de Elote",
            price=2.8,
            code="PAN-09",
            category=Category.BAKERY,
            description="Dulce, húmedo",
        )
        service.import_file("x.json", encode_structured([product]).encode("utf-8"), always("merge"))
        assert catalog_store.find("x1") == product

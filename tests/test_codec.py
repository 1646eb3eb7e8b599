"""
==============================================================================
Catalog Codec Tests
==============================================================================

Tests for JSON and CSV encoding and decoding of the catalog.

==============================================================================
"""

import json

import pytest

from app.catalog.codec import (
    BOM,
    MISSING_NAME_LABEL,
    decode_delimited,
    decode_structured,
    encode_delimited,
    encode_structured,
    format_price,
)
from app.catalog.models import Category, Product
from app.core.exceptions import FormatError


HEADER = "id,nombre,precio,codigo,categoria,descripcion"


class TestStructuredFormat:
    """Tests for the JSON format."""

    def test_round_trip_keeps_absent_optionals(self, sample_products):
        """Decoding an encoded catalog returns the same products."""
        assert decode_structured(encode_structured(sample_products)) == sample_products

    def test_encode_uses_wire_keys_and_omits_absent_fields(self, house_brew):
        """Absent code/description are omitted, never null."""
        data = json.loads(encode_structured([house_brew]))
        assert data == [{
            "id": "local-9",
            "nombre": "House Brew",
            "precio": 1.0,
            "categoria": "Café",
        }]

    def test_encode_keeps_non_ascii(self, croissant):
        text = encode_structured([croissant])
        assert "Panadería" in text
        assert '\n  {' in text

    def test_decode_accepts_bom_and_english_category(self):
        text = BOM + '[{"id": 7, "nombre": "Muffin", "precio": 2, "categoria": "pastry"}]'
        [product] = decode_structured(text)
        assert product.id == "7"
        assert product.category is Category.PASTRY
        assert product.code is None

    def test_decode_invalid_json(self):
        """Malformed text raises FormatError."""
        with pytest.raises(FormatError) as exc_info:
            decode_structured("[{")
        assert exc_info.value.code == "INVALID_FORMAT"

    def test_decode_rejects_non_array(self):
        with pytest.raises(FormatError):
            decode_structured('{"id": "1"}')

    def test_decode_rejects_non_object_record(self):
        with pytest.raises(FormatError) as exc_info:
            decode_structured('[1]')
        assert exc_info.value.details["record"] == 0

    def test_decode_missing_required_field_names_record(self):
        """A record without a price is reported by index."""
        text = json.dumps([
            {"id": "1", "nombre": "Latte", "precio": 3.5, "categoria": "Café"},
            {"id": "2", "nombre": "Mocha", "categoria": "Café"},
        ])
        with pytest.raises(FormatError) as exc_info:
            decode_structured(text)
        assert exc_info.value.details["record"] == 1
        assert "precio" in exc_info.value.details["fields"]

    def test_decode_empty_array(self):
        assert decode_structured("[]") == []


class TestDelimitedEncoding:
    """Tests for CSV export."""

    def test_header_and_bom(self, latte):
        text = encode_delimited([latte])
        assert text.startswith(BOM + HEADER + "\n")

    def test_quotes_only_when_needed(self):
        product = Product(
            id="1",
            name='Vanilla, Latte',
            price=4.5,
            code="VL-01",
            category=Category.COFFEE,
            description='The "best" one',
        )
        row = encode_delimited([product]).split("\n")[1]
        assert row == '1,"Vanilla, Latte",4.5,VL-01,Café,"The ""best"" one"'

    def test_absent_optionals_are_empty_cells(self, house_brew):
        row = encode_delimited([house_brew]).split("\n")[1]
        assert row == "local-9,House Brew,1,,Café,"

    @pytest.mark.parametrize("price,expected", [
        (3.5, "3.5"),
        (4, "4"),
        (4.25, "4.25"),
        (0, "0"),
    ])
    def test_format_price(self, price, expected):
        assert format_price(price) == expected


class TestDelimitedDecoding:
    """Tests for permissive CSV import."""

    def test_quoted_row(self):
        """Quoted fields may contain the delimiter."""
        text = HEADER + '\n1,"Vanilla, Latte",4.50,VL-01,Café,"Rich & smooth"\n'
        [product] = decode_delimited(text)
        assert product.id == "1"
        assert product.name == "Vanilla, Latte"
        assert product.price == 4.5
        assert product.code == "VL-01"
        assert product.category is Category.COFFEE
        assert product.description == "Rich & smooth"

    def test_round_trip_preserves_fields(self, sample_products):
        decoded = decode_delimited(encode_delimited(sample_products))
        assert decoded == sample_products

    def test_empty_price_becomes_zero(self):
        errors = []
        [product] = decode_delimited(HEADER + "\n5,Té,,,Bebida Fría,\n", errors=errors)
        assert product.price == 0
        assert [e.field for e in errors] == ["precio"]

    def test_negative_or_garbage_price_becomes_zero(self):
        products = decode_delimited(HEADER + "\n1,A,-2,,Otro,\n2,B,abc,,Otro,\n")
        assert [p.price for p in products] == [0, 0]

    def test_unknown_category_becomes_other(self):
        errors = []
        [product] = decode_delimited(HEADER + "\n1,Kombucha,3,,Fermentados,\n", errors=errors)
        assert product.category is Category.OTHER
        assert errors[0].field == "categoria"
        assert errors[0].value == "Fermentados"

    def test_missing_id_and_name_get_defaults(self):
        errors = []
        [product] = decode_delimited(HEADER + "\n,,2,,Otro,\n", errors=errors)
        assert product.id
        assert product.name == MISSING_NAME_LABEL
        assert {e.field for e in errors} == {"id", "nombre"}

    def test_blank_code_and_description_are_absent(self):
        [product] = decode_delimited(HEADER + "\n1,Latte,3.5, ,Café, \n")
        assert product.code is None
        assert product.description is None

    def test_blank_lines_and_crlf_are_ignored(self):
        text = HEADER + "\r\n\r\n1,Latte,3.5,,Café,\r\n\r\n2,Mocha,4,,Café,\r\n"
        products = decode_delimited(text)
        assert [p.id for p in products] == ["1", "2"]

    def test_stray_quote_row_is_kept(self):
        """Text after a closing quote is read into the field and reported."""
        errors = []
        text = HEADER + '\n1,"Latte" grande,3.5,,Café,\n2,Mocha,4,,Café,\n'
        products = decode_delimited(text, errors=errors)
        assert [p.id for p in products] == ["1", "2"]
        assert products[0].name == "Latte grande"
        assert products[0].price == 3.5
        assert products[0].category is Category.COFFEE
        assert len(errors) == 1
        assert errors[0].line == 2
        assert errors[0].field is None

    def test_doubled_quotes_are_unescaped(self):
        [product] = decode_delimited(HEADER + '\n1,"The ""best"" one",2,,Café,\n')
        assert product.name == 'The "best" one'
        assert product.price == 2

    def test_round_trip_with_delimiter_and_quote(self):
        product = Product(
            id="q1",
            name='Café "de olla", grande',
            price=3,
            code="CAF-9",
            category=Category.COFFEE,
            description='Con canela, "piloncillo"',
        )
        assert decode_delimited(encode_delimited([product])) == [product]

    def test_header_only(self):
        assert decode_delimited(BOM + HEADER + "\n") == []

"""
==============================================================================
Catalog Codec Module
==============================================================================

Conversion between a product list and the two interchange formats.

Formats:
--------
- Structured (JSON): an array of product objects with wire keys. Decoding
  is strict, one invalid record rejects the whole document.
- Delimited (CSV): BOM + fixed header ``id,nombre,precio,codigo,categoria,
  descripcion`` + one row per product. Decoding is permissive, every field
  falls back to a default instead of rejecting the row.

Example:
--------
    >>> text = encode_delimited(products)
    >>> issues = []
    >>> decoded = decode_delimited(text, errors=issues)

==============================================================================
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from app.catalog.models import Category, Product, new_product_id
from app.core.exceptions import FormatError, RowError


# Module logger
logger = logging.getLogger(__name__)


BOM = "\ufeff"
DELIMITER = ","
DELIMITED_HEADER = ("id", "nombre", "precio", "codigo", "categoria", "descripcion")
MISSING_NAME_LABEL = "Sin Nombre"


# =============================================================================
# STRUCTURED FORMAT
# =============================================================================

def encode_structured(catalog: Iterable[Product]) -> str:
    """Serialize products as an indented JSON array."""
    return json.dumps(
        [product.to_wire() for product in catalog],
        indent=2,
        ensure_ascii=False,
    )


def decode_structured(text: str) -> List[Product]:
    """
    Parse a JSON array of products.

    Args:
        text: JSON document

    Returns:
        Products in document order

    Raises:
        FormatError: If the text is not a JSON array of valid products
    """
    if text.startswith(BOM):
        text = text[1:]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(
            f"Invalid JSON: {e.msg}",
            {"line": e.lineno, "column": e.colno},
        ) from e

    if not isinstance(data, list):
        raise FormatError("Expected a JSON array of products")

    products = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise FormatError(
                f"Record {index} is not an object",
                {"record": index},
            )
        try:
            products.append(Product.model_validate(record))
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise FormatError(
                f"Record {index} is invalid: {', '.join(fields) or 'unknown field'}",
                {"record": index, "fields": fields},
            ) from e

    return products


# =============================================================================
# DELIMITED FORMAT
# =============================================================================

def format_price(price: float) -> str:
    """Plain decimal without trailing zeros: 3.5, 4, 4.25."""
    text = f"{price:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def encode_delimited(catalog: Iterable[Product]) -> str:
    """
    Serialize products as CSV with a byte-order marker.

    Fields holding the delimiter, a quote or a newline are quoted with
    embedded quotes doubled. Absent optional fields are empty cells.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=DELIMITER,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow(DELIMITED_HEADER)
    for product in catalog:
        writer.writerow([
            product.id,
            product.name,
            format_price(product.price),
            product.code or "",
            product.category.value,
            product.description or "",
        ])
    return BOM + buffer.getvalue()


def _split_row(row: str, strict: bool = True) -> List[str]:
    """Tokenize one row; a quoted run may contain delimiters and ""."""
    reader = csv.reader([row], delimiter=DELIMITER, quotechar='"', strict=strict)
    return next(reader, [])


def _parse_price(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _field(fields: Sequence[str], index: int) -> str:
    return fields[index].strip() if index < len(fields) else ""


def parse_delimited_row(row: str, line: int) -> Tuple[Optional[Product], List[RowError]]:
    """
    Parse one CSV data row into a product.

    Args:
        row: Raw text of the row
        line: 1-based line number, for error reporting

    Returns:
        Tuple of (product, row errors). Stray quotes are read leniently;
        the product is None only when even that fails.
    """
    issues: List[RowError] = []

    try:
        fields = _split_row(row)
    except csv.Error as e:
        issues.append(RowError(line, f"malformed quoting ({e}), read leniently"))
        try:
            fields = _split_row(row, strict=False)
        except csv.Error as err:
            issues.append(RowError(line, f"unreadable row ({err})"))
            return None, issues

    product_id = _field(fields, 0)
    if not product_id:
        product_id = new_product_id()
        issues.append(RowError(line, "missing id, generated a new one", "id"))

    name = _field(fields, 1)
    if not name:
        name = MISSING_NAME_LABEL
        issues.append(RowError(line, "missing name", "nombre"))

    raw_price = _field(fields, 2)
    price = _parse_price(raw_price)
    if price is None:
        price = 0.0
        issues.append(RowError(line, "invalid price, using 0", "precio", raw_price))

    raw_category = _field(fields, 4)
    category = Category.parse(raw_category)
    if category is None:
        category = Category.OTHER
        issues.append(
            RowError(line, "unknown category, using Otro", "categoria", raw_category)
        )

    product = Product(
        id=product_id,
        name=name,
        price=price,
        code=_field(fields, 3) or None,
        category=category,
        description=_field(fields, 5) or None,
    )
    return product, issues


def decode_delimited(text: str, errors: Optional[List[RowError]] = None) -> List[Product]:
    """
    Parse a CSV inventory, never failing on a single bad row.

    The first non-blank line is the header and is discarded. Columns are
    read positionally in header order.

    Args:
        text: CSV document, optionally starting with a BOM
        errors: Optional list collecting the row errors that were recovered

    Returns:
        Products in row order
    """
    if text.startswith(BOM):
        text = text[1:]

    lines = [
        (number, raw.strip())
        for number, raw in enumerate(text.split("\n"), start=1)
        if raw.strip()
    ]

    products = []
    for number, row in lines[1:]:
        product, issues = parse_delimited_row(row, number)
        for issue in issues:
            logger.warning(f"CSV import: {issue.message}")
        if errors is not None:
            errors.extend(issues)
        if product is not None:
            products.append(product)

    logger.debug(f"Decoded {len(products)} products from {len(lines)} CSV lines")
    return products

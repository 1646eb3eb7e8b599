"""
==============================================================================
Product Models Module
==============================================================================

Pydantic models for catalog items.

Wire Format:
-----------
Products are exchanged with Spanish keys, the format of the bundled
catalog and of exported files:

    {"id": "1", "nombre": "Latte", "precio": 3.5, "codigo": "CAF-01",
     "categoria": "Café", "descripcion": "..."}

English field names are accepted on input as well.

==============================================================================
"""

from __future__ import annotations

import enum
import unicodedata
import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


UNKNOWN_CODE_LABEL = "Desconocido"


def _fold(value: str) -> str:
    """Lowercase and strip accents for lenient label comparison."""
    decomposed = unicodedata.normalize("NFKD", value.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class Category(str, enum.Enum):
    """
    Closed set of product categories.

    The value is the label used on the wire. English labels are accepted
    as aliases when parsing.
    """

    COFFEE = "Café"
    BAKERY = "Panadería"
    PASTRY = "Pastelería"
    COLD_DRINK = "Bebida Fría"
    SANDWICH = "Sándwich"
    OTHER = "Otro"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value

    @property
    def english_label(self) -> str:
        """English display label (e.g. "Cold Drink")."""
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Category"]:
        """
        Resolve a category from its wire value or English label.

        Matching ignores case and accents. Returns None when the value
        is not a recognized category.
        """
        if value is None:
            return None
        folded = _fold(str(value))
        if not folded:
            return None
        for member in cls:
            if folded in (_fold(member.value), _fold(member.english_label)):
                return member
        return None

    @classmethod
    def _missing_(cls, value: object) -> Optional["Category"]:
        if isinstance(value, str):
            return cls.parse(value)
        return None

    @classmethod
    def labels(cls) -> List[str]:
        """All wire labels, in declaration order."""
        return [member.value for member in cls]


def new_product_id() -> str:
    """Generate a fresh opaque product id."""
    return str(uuid.uuid4())


class Product(BaseModel):
    """
    Catalog product.

    Attributes:
        id: Opaque unique identifier, stable across sessions
        name: Display name (non-empty)
        price: Non-negative unit price, two decimals
        code: Optional short inventory code
        category: One of the fixed categories
        description: Optional free text
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str = Field(..., min_length=1, description="Product id")
    name: str = Field(..., min_length=1, alias="nombre", description="Product name")
    price: float = Field(..., ge=0, alias="precio", description="Unit price")
    code: Optional[str] = Field(default=None, alias="codigo", description="Inventory code")
    category: Category = Field(..., alias="categoria", description="Category")
    description: Optional[str] = Field(
        default=None, alias="descripcion", description="Free text description"
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        """Numeric ids in hand-written files are read as strings."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("category", mode="before")
    @classmethod
    def resolve_category(cls, value):
        """Accept English labels and case/accent variants."""
        if isinstance(value, Category):
            return value
        if isinstance(value, str):
            return Category.parse(value) or value
        return value

    @field_validator("price")
    @classmethod
    def round_price(cls, value: float) -> float:
        """Keep two significant decimals."""
        return round(value, 2)

    @property
    def display_code(self) -> str:
        """Code to render; absent and empty codes are both unknown."""
        return self.code or UNKNOWN_CODE_LABEL

    def to_wire(self) -> dict:
        """Serialize with wire keys, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def matches(self, text: str) -> bool:
        """Case-insensitive match of ``text`` against name or code."""
        needle = text.strip().lower()
        if not needle:
            return True
        if needle in self.name.lower():
            return True
        return bool(self.code) and needle in self.code.lower()

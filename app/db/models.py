"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM model backing the local persistence collaborator.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                          kv_entries                             │
    ├─────────────────────────────────────────────────────────────────┤
    │ key (VARCHAR, PK)                                               │
    │ value (TEXT, NOT NULL)                                          │
    │ updated_at (DATETIME, AUTO UPDATE)                              │
    └─────────────────────────────────────────────────────────────────┘

Each row holds one JSON document (the product catalog, the cart).

=============================================================================
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, func

from app.db.database import Base


class KeyValueEntry(Base):
    """
    One persisted text document addressed by a fixed logical key.

    Attributes:
        key: Logical storage key (e.g. "cafe_productos")
        value: Serialized document
        updated_at: Last write time

    Example:
        >>> entry = KeyValueEntry(key="cafe_carrito", value="[]")
        >>> session.merge(entry)
    """

    __tablename__ = "kv_entries"

    # =========================================================================
    # COLUMNS
    # =========================================================================

    key: str = Column(
        String(100),
        primary_key=True,
        doc="Logical storage key"
    )

    value: str = Column(
        Text,
        nullable=False,
        doc="Serialized document"
    )

    updated_at: datetime = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        doc="Last write timestamp"
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"KeyValueEntry(key={self.key!r}, size={len(self.value or '')})"

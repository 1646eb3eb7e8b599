"""
==============================================================================
Key/Value Store Module
==============================================================================

Local persistence collaborator for the catalog and the cart.

The catalog layer only needs two calls, ``load(key)`` and
``save(key, value)``. ``KeyValueStore`` names that contract;
``SqlKeyValueStore`` implements it on the ``kv_entries`` table.

Failures of the underlying database surface as ``PersistenceError``.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import PersistenceError
from app.db.database import DatabaseManager, get_database_manager
from app.db.models import KeyValueEntry


# Module logger
logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Text documents addressed by a logical key."""

    def load(self, key: str) -> Optional[str]:
        """Return the stored text, or None when the key was never saved."""
        ...

    def save(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...


class SqlKeyValueStore:
    """
    Key/value store on the application database.

    Attributes:
        _db_manager: DatabaseManager providing transactional sessions

    Example:
        >>> store = SqlKeyValueStore()
        >>> store.save("cafe_carrito", "[]")
        >>> store.load("cafe_carrito")
        '[]'
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or get_database_manager()

    def load(self, key: str) -> Optional[str]:
        """
        Load the document stored under a key.

        Raises:
            PersistenceError: If the database cannot be read
        """
        try:
            with self._db_manager.session_scope() as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load '{key}': {e}")
            raise PersistenceError(f"Could not read '{key}' from local storage", key) from e

    def save(self, key: str, value: str) -> None:
        """
        Insert or replace the document stored under a key.

        Raises:
            PersistenceError: If the write cannot be committed
        """
        try:
            with self._db_manager.session_scope() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                    entry.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save '{key}': {e}")
            raise PersistenceError(f"Could not write '{key}' to local storage", key) from e

        logger.debug(f"Saved '{key}' ({len(value)} chars)")

"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy infrastructure behind the local persistence collaborator.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
├── models.py     - KeyValueEntry ORM model
├── kv_store.py   - KeyValueStore contract and SQL implementation
└── init_db.py    - DatabaseInitializer for setup

Usage:
------
    from app.db import SqlKeyValueStore, init_db

    init_db()
    store = SqlKeyValueStore()
    store.save("cafe_carrito", "[]")

==============================================================================
"""

from .database import DatabaseManager, Base, get_database_manager
from .models import KeyValueEntry
from .kv_store import KeyValueStore, SqlKeyValueStore
from .init_db import DatabaseInitializer, init_db

__all__ = [
    # Database management
    "DatabaseManager",
    "Base",
    "get_database_manager",
    # Models
    "KeyValueEntry",
    # Persistence
    "KeyValueStore",
    "SqlKeyValueStore",
    # Initialization
    "DatabaseInitializer",
    "init_db",
]

"""
==============================================================================
Database Initialization Module
==============================================================================

Database initialization and setup utilities.

Initialization Flow:
-------------------
1. Create all tables from ORM models
2. Verify the key/value table can be queried
3. Log initialization status

Usage:
------
    from app.db import init_db, DatabaseInitializer

    # Quick initialization
    init_db()

    # Or with more control
    initializer = DatabaseInitializer()
    initializer.create_tables()
    initializer.verify_tables()

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.db.database import DatabaseManager
from app.db.models import KeyValueEntry


# Module logger
logger = logging.getLogger(__name__)


class DatabaseInitializer:
    """
    Database initialization manager.

    Attributes:
        _db_manager: DatabaseManager instance

    Example:
        >>> initializer = DatabaseInitializer()
        >>> initializer.initialize()
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        """
        Initialize the database initializer.

        Args:
            db_manager: Optional DatabaseManager instance (singleton if None)
        """
        self._db_manager = db_manager or DatabaseManager()

    def create_tables(self) -> None:
        """Create all database tables from ORM models (idempotent)."""
        logger.info("Creating database tables...")
        self._db_manager.create_tables()
        logger.info("✅ Database tables created successfully")

    def verify_tables(self) -> bool:
        """
        Verify that the key/value table exists and is readable.

        Returns:
            True if the table can be queried, False otherwise
        """
        try:
            with self._db_manager.session_scope() as session:
                session.query(KeyValueEntry).first()
            logger.debug("Database tables verified successfully")
            return True
        except SQLAlchemyError as e:
            logger.error(f"Table verification failed: {e}")
            return False

    def initialize(self) -> bool:
        """
        Run the full initialization flow.

        Returns:
            True if the database is ready
        """
        self.create_tables()
        ready = self.verify_tables()
        if ready:
            logger.info("✅ Database initialization complete")
        else:
            logger.error("❌ Database initialization failed")
        return ready


def init_db() -> bool:
    """Initialize the database (create and verify tables)."""
    return DatabaseInitializer().initialize()

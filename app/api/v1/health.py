"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter

from app.db.database import DatabaseManager, get_database_manager
from app.catalog.store import get_catalog_store


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, db_manager: DatabaseManager):
        self._db_manager = db_manager

    def check_database(self) -> str:
        """Check database connectivity."""
        return "healthy" if self._db_manager.verify_connection() else "unhealthy"

    def check_catalog(self) -> dict:
        """Check catalog status."""
        store = get_catalog_store()
        if store is None:
            return {"status": "not_loaded", "products": 0}
        status = "degraded" if store.persistence_failing else "healthy"
        return {"status": status, "products": len(store)}

    def get_health(self) -> dict:
        """Get full health status."""
        db_status = self.check_database()
        catalog_info = self.check_catalog()

        healthy = db_status == "healthy" and catalog_info["status"] == "healthy"

        return {
            "status": "healthy" if healthy else "degraded",
            "components": {
                "api": "healthy",
                "database": db_status,
                "catalog": catalog_info["status"]
            },
            "details": {
                "products_loaded": catalog_info["products"]
            }
        }


@router.get("")
async def health_check():
    """
    Health check endpoint.

    Returns system status including API, database, and catalog.
    """
    controller = HealthController(get_database_manager())
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness check: ready once the catalog is loaded."""
    return {"ready": get_catalog_store() is not None}


@router.get("/live")
async def liveness_check():
    """Liveness check for container orchestration."""
    return {"alive": True}

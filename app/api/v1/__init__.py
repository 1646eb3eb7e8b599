"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- products: Product catalog
- cart: Current order
- inventory: File import / export and catalog refresh

==============================================================================
"""

from . import health, products, cart, inventory

__all__ = ["health", "products", "cart", "inventory"]

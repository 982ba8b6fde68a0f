"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.catalog_import import router as catalog_import_router

__all__ = [
    "products_router",
    "catalog_import_router",
]

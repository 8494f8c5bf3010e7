"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.inventory import router as inventory_router
from routes.inventory_check import router as inventory_check_router
from routes.labels import router as labels_router
from routes.sku import router as sku_router

__all__ = [
    "inventory_router",
    "inventory_check_router",
    "labels_router",
    "sku_router",
]

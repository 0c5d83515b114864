"""API layer module.

Contains FastAPI routers, request/response schemas, dependencies
and middleware.
"""

from storefront.api.categories import router as categories_router
from storefront.api.health import router as health_router
from storefront.api.products import router as products_router
from storefront.api.subcategories import router as subcategories_router
from storefront.api.wishlist import router as wishlist_router

__all__ = [
    "categories_router",
    "health_router",
    "products_router",
    "subcategories_router",
    "wishlist_router",
]

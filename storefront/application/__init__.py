"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from storefront.application.auth import AuthGate
from storefront.application.category_service import CategoryDetail, CategoryService
from storefront.application.container import Container, build_container
from storefront.application.images import (
    ImageStager,
    ImageUpload,
    StagedImage,
    discard_images,
)
from storefront.application.product_service import ProductService
from storefront.application.rate_limiter import RateLimiter
from storefront.application.references import Reference, ReferenceResolver, References
from storefront.application.subcategory_service import (
    CategorySubCategories,
    SubCategoryDetail,
    SubCategoryService,
)
from storefront.application.wishlist_service import WishlistService

__all__ = [
    "AuthGate",
    "CategoryDetail",
    "CategoryService",
    "CategorySubCategories",
    "Container",
    "build_container",
    "ImageStager",
    "ImageUpload",
    "StagedImage",
    "discard_images",
    "ProductService",
    "RateLimiter",
    "Reference",
    "ReferenceResolver",
    "References",
    "SubCategoryDetail",
    "SubCategoryService",
    "WishlistService",
]

"""Domain layer module.

Contains entities, value objects and the error taxonomy of the catalog.
"""

from storefront.domain.entities import (
    CATEGORIES,
    PRODUCTS,
    SUBCATEGORIES,
    USERS,
    Category,
    Product,
    SubCategory,
    User,
)
from storefront.domain.exceptions import (
    AuthError,
    ConflictError,
    DomainError,
    DuplicateKeyError,
    ErrorIssue,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    StorageError,
    ValidationError,
)
from storefront.domain.value_objects import PriceRange, ProductImage, Rating, Variant

__all__ = [
    # Collections
    "CATEGORIES",
    "PRODUCTS",
    "SUBCATEGORIES",
    "USERS",
    # Entities
    "Category",
    "Product",
    "SubCategory",
    "User",
    # Value objects
    "PriceRange",
    "ProductImage",
    "Rating",
    "Variant",
    # Errors
    "AuthError",
    "ConflictError",
    "DomainError",
    "DuplicateKeyError",
    "ErrorIssue",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "StorageError",
    "ValidationError",
]

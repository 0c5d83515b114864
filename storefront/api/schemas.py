"""API schemas for the storefront API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, Field

from storefront.application.references import Reference, References
from storefront.catalog import PaginatedResult
from storefront.domain.entities import CATEGORIES, SUBCATEGORIES, Category, Product, SubCategory


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginationSchema(BaseModel):
    """Pagination block of list responses."""

    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool
    limit: int

    @classmethod
    def from_result(cls, result: PaginatedResult[Any]) -> Self:
        return cls(**result.pagination())


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class EntityRef(BaseModel):
    """Id and display name of a related entity.

    ``name`` is null when the entity no longer exists.
    """

    id: str
    name: str | None = None

    @classmethod
    def from_reference(cls, reference: Reference) -> Self:
        return cls(id=reference.id, name=reference.name)


class UserRef(EntityRef):
    """Creator of a catalog entity."""

    email: str | None = None

    @classmethod
    def from_reference(cls, reference: Reference) -> Self:
        return cls(id=reference.id, name=reference.name, email=reference.email)


def creator_ref(refs: References, user_id: str | None) -> UserRef | None:
    """Resolve a creator id, keeping null for entities without one."""
    reference = refs.creator(user_id)
    return UserRef.from_reference(reference) if reference is not None else None


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str | None = Field(default=None, description="Category name (2-50 characters)")
    description: str | None = Field(default=None, description="Description (max 500 characters)")


class CategoryUpdateRequest(BaseModel):
    """Partial category update."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None


class CategoryResponse(BaseModel):
    """Category representation."""

    id: str
    name: str
    description: str | None = None
    is_active: bool
    created_by: UserRef | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, category: Category, refs: References, **extra: Any) -> Self:
        document = category.to_document()
        document["created_by"] = creator_ref(refs, category.created_by)
        return cls(**document, **extra)


class CategoryListResponse(BaseModel):
    """Paginated categories."""

    items: list[CategoryResponse]
    pagination: PaginationSchema


# ============================================================================
# Subcategory Schemas
# ============================================================================


class SubCategoryCreateRequest(BaseModel):
    """Request to create a subcategory."""

    name: str | None = None
    category: str | None = Field(default=None, description="Parent category id")
    description: str | None = None


class SubCategoryUpdateRequest(BaseModel):
    """Partial subcategory update."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None
    category: str | None = Field(default=None, description="Move to this category")


class SubCategoryResponse(BaseModel):
    """Subcategory representation."""

    id: str
    name: str
    category: EntityRef
    description: str | None = None
    is_active: bool
    created_by: UserRef | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, sub_category: SubCategory, refs: References, **extra: Any) -> Self:
        document = sub_category.to_document()
        document["category"] = EntityRef.from_reference(refs.get(CATEGORIES, sub_category.category))
        document["created_by"] = creator_ref(refs, sub_category.created_by)
        return cls(**document, **extra)


class SubCategoryDetailResponse(SubCategoryResponse):
    """Subcategory with its parent and active product count."""

    parent: EntityRef | None = None
    product_count: int = 0


class SubCategoryListResponse(BaseModel):
    """Paginated subcategories."""

    items: list[SubCategoryResponse]
    pagination: PaginationSchema


class CategoryDetailResponse(CategoryResponse):
    """Category with its active subcategories."""

    subcategories: list[SubCategoryResponse] = Field(default_factory=list)


class CategorySubCategoriesResponse(BaseModel):
    """Subcategories of one category."""

    category: EntityRef
    subcategories: list[SubCategoryResponse]


# ============================================================================
# Product Schemas
# ============================================================================


class VariantSchema(BaseModel):
    """Product variant."""

    ram: str
    price: float
    quantity: int


class ProductImageSchema(BaseModel):
    """Product image."""

    storage_id: str
    url: str
    alt_text: str = ""


class RatingSchema(BaseModel):
    """Aggregated rating."""

    average: float = Field(default=0.0, ge=0, le=5)
    count: int = Field(default=0, ge=0)


class PriceRangeSchema(BaseModel):
    """Lowest and highest variant price."""

    min: float
    max: float


class ProductResponse(BaseModel):
    """Product representation with derived stock and price range."""

    id: str
    title: str
    description: str
    sub_category: EntityRef
    category: EntityRef
    variants: list[VariantSchema]
    images: list[ProductImageSchema]
    rating: RatingSchema
    total_stock: int
    price_range: PriceRangeSchema
    is_active: bool
    created_by: UserRef | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product, refs: References) -> Self:
        price_range = product.price_range
        document = product.to_document()
        document["category"] = EntityRef.from_reference(refs.get(CATEGORIES, product.category))
        document["sub_category"] = EntityRef.from_reference(
            refs.get(SUBCATEGORIES, product.sub_category)
        )
        document["created_by"] = creator_ref(refs, product.created_by)
        return cls(
            **document,
            total_stock=product.total_stock,
            price_range=PriceRangeSchema(min=price_range.min, max=price_range.max),
        )


class ProductListResponse(BaseModel):
    """Paginated products."""

    items: list[ProductResponse]
    pagination: PaginationSchema

    @classmethod
    def from_result(cls, result: PaginatedResult[Product], refs: References) -> Self:
        return cls(
            items=[ProductResponse.from_entity(p, refs) for p in result.items],
            pagination=PaginationSchema.from_result(result),
        )


# ============================================================================
# Wishlist Schemas
# ============================================================================


class WishlistResponse(BaseModel):
    """Wishlist products in insertion order.

    ``count`` includes entries whose product has since been deleted.
    """

    wishlist: list[ProductResponse]
    count: int


class WishlistCountResponse(BaseModel):
    """Number of wishlist entries."""

    count: int


class WishlistCheckResponse(BaseModel):
    """Whether a product is in the wishlist."""

    product_id: str
    in_wishlist: bool


# ============================================================================
# Health Schemas
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str

"""Domain entities for the storefront catalog.

Entities are domain objects with identity that persists across state changes.
This module contains the catalog hierarchy (Category, SubCategory, Product)
and the User that owns a wishlist. Each entity converts to and from the plain
documents exchanged with the document store.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Self

from storefront.domain.base import Entity, utc_now
from storefront.domain.value_objects import PriceRange, ProductImage, Rating, Variant

CATEGORIES = "categories"
SUBCATEGORIES = "subcategories"
PRODUCTS = "products"
USERS = "users"


def _timestamps(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "created_at": data.get("created_at") or utc_now(),
        "updated_at": data.get("updated_at") or data.get("created_at") or utc_now(),
    }


# ============================================================================
# Category
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Category(Entity):
    """Top level of the catalog hierarchy.

    Attributes:
        name: Display name, unique case-insensitively.
        description: Optional description.
        is_active: Whether new subcategories may be created under it.
        created_by: Id of the user that created it.
    """

    collection: ClassVar[str] = CATEGORIES

    name: str
    description: str | None = None
    is_active: bool = True
    created_by: str | None = None

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        """Create from a stored document."""
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            is_active=data.get("is_active", True),
            created_by=data.get("created_by"),
            **_timestamps(data),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ============================================================================
# SubCategory
# ============================================================================


@dataclass(kw_only=True, eq=False)
class SubCategory(Entity):
    """Second level of the catalog hierarchy.

    Attributes:
        name: Display name, unique case-insensitively within its category.
        category: Id of the parent category.
        description: Optional description.
        is_active: Whether new products may be created under it.
        created_by: Id of the user that created it.
    """

    collection: ClassVar[str] = SUBCATEGORIES

    name: str
    category: str
    description: str | None = None
    is_active: bool = True
    created_by: str | None = None

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        """Create from a stored document."""
        return cls(
            id=data["id"],
            name=data["name"],
            category=data["category"],
            description=data.get("description"),
            is_active=data.get("is_active", True),
            created_by=data.get("created_by"),
            **_timestamps(data),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ============================================================================
# Product
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Product(Entity):
    """A sellable item with one or more variants.

    The ``category`` field is denormalized from the subcategory so that
    category listings need a single indexed lookup. It is only ever set
    from the subcategory's parent.

    Attributes:
        title: Product title.
        description: Long description.
        sub_category: Id of the owning subcategory.
        category: Id of the subcategory's parent category.
        variants: Ordered, non-empty list of variants.
        images: Ordered list of images.
        rating: Aggregated rating.
        is_active: Whether the product is listed.
        created_by: Id of the user that created it.
    """

    collection: ClassVar[str] = PRODUCTS

    title: str
    description: str
    sub_category: str
    category: str
    variants: list[Variant] = field(default_factory=list)
    images: list[ProductImage] = field(default_factory=list)
    rating: Rating = field(default_factory=Rating)
    is_active: bool = True
    created_by: str | None = None

    @property
    def total_stock(self) -> int:
        """Total units in stock across all variants."""
        return sum(variant.quantity for variant in self.variants)

    @property
    def price_range(self) -> PriceRange:
        """Lowest and highest variant price.

        Returns:
            PriceRange, or a zero range when there are no variants.
        """
        if not self.variants:
            return PriceRange(min=0, max=0)
        prices = [variant.price for variant in self.variants]
        return PriceRange(min=min(prices), max=max(prices))

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        """Create from a stored document."""
        rating = data.get("rating") or {}
        return cls(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            sub_category=data["sub_category"],
            category=data["category"],
            variants=[Variant.from_document(v) for v in data.get("variants", [])],
            images=[ProductImage.from_document(i) for i in data.get("images", [])],
            rating=Rating(
                average=rating.get("average", 0.0),
                count=rating.get("count", 0),
            ),
            is_active=data.get("is_active", True),
            created_by=data.get("created_by"),
            **_timestamps(data),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "sub_category": self.sub_category,
            "category": self.category,
            "variants": [v.to_document() for v in self.variants],
            "images": [i.to_document() for i in self.images],
            "rating": self.rating.to_document(),
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ============================================================================
# User
# ============================================================================


@dataclass(kw_only=True, eq=False)
class User(Entity):
    """An account that can authenticate and keep a wishlist.

    Attributes:
        email: Login email.
        name: Display name.
        role: Authorization role (e.g., "user", "admin").
        is_active: Deactivated users cannot authenticate.
        wishlist: Product ids in insertion order, without duplicates.
    """

    collection: ClassVar[str] = USERS

    email: str
    name: str | None = None
    role: str = "user"
    is_active: bool = True
    wishlist: list[str] = field(default_factory=list)

    def has_in_wishlist(self, product_id: str) -> bool:
        """Check whether a product id is in the wishlist."""
        return product_id in self.wishlist

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        """Create from a stored document."""
        return cls(
            id=data["id"],
            email=data["email"],
            name=data.get("name"),
            role=data.get("role", "user"),
            is_active=data.get("is_active", True),
            wishlist=list(data.get("wishlist", [])),
            **_timestamps(data),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
            "wishlist": list(self.wishlist),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

"""SQLAlchemy models for database tables.

Provides ORM models for categories, subcategories, products (with their
variants), users and wishlist entries. Each model converts to and from
the plain documents exchanged through the document store interface.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from storefront.infrastructure.database import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_columns() -> tuple[Column, Column]:
    return (
        Column(DateTime(timezone=True), nullable=False, default=_now),
        Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now),
    )


# ============================================================================
# Catalog Hierarchy
# ============================================================================


class CategoryModel(Base):
    """Top-level catalog category."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(50), nullable=False)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(String(36), nullable=True)
    created_at, updated_at = _timestamp_columns()

    def apply(self, patch: dict[str, Any]) -> None:
        """Copy document fields onto the row."""
        for key in ("id", "name", "description", "is_active", "created_by", "created_at", "updated_at"):
            if key in patch:
                setattr(self, key, patch[key])

    def to_document(self) -> dict[str, Any]:
        """Convert to a store document."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class SubCategoryModel(Base):
    """Subcategory, unique by name within its category."""

    __tablename__ = "subcategories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(50), nullable=False)
    category_id = Column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(String(36), nullable=True)
    created_at, updated_at = _timestamp_columns()

    def apply(self, patch: dict[str, Any]) -> None:
        """Copy document fields onto the row."""
        for key in ("id", "name", "description", "is_active", "created_by", "created_at", "updated_at"):
            if key in patch:
                setattr(self, key, patch[key])
        if "category" in patch:
            self.category_id = patch["category"]

    def to_document(self) -> dict[str, Any]:
        """Convert to a store document."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category_id,
            "description": self.description,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class ProductModel(Base):
    """Product with denormalized category and ordered variants."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    sub_category_id = Column(
        String(36),
        ForeignKey("subcategories.id"),
        nullable=False,
        index=True,
    )
    category_id = Column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    images = Column(JSONB, nullable=False, default=list)
    rating_average = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(String(36), nullable=True)
    created_at, updated_at = _timestamp_columns()

    # Relationships
    variants = relationship(
        "ProductVariantModel",
        cascade="all, delete-orphan",
        order_by="ProductVariantModel.position",
        lazy="selectin",
    )

    def apply(self, patch: dict[str, Any]) -> None:
        """Copy document fields onto the row."""
        for key in (
            "id",
            "title",
            "description",
            "is_active",
            "created_by",
            "created_at",
            "updated_at",
        ):
            if key in patch:
                setattr(self, key, patch[key])
        if "sub_category" in patch:
            self.sub_category_id = patch["sub_category"]
        if "category" in patch:
            self.category_id = patch["category"]
        if "images" in patch:
            self.images = [dict(image) for image in patch["images"]]
        if "rating" in patch:
            self.rating_average = patch["rating"].get("average", 0.0)
            self.rating_count = patch["rating"].get("count", 0)
        if "variants" in patch:
            self.variants = [
                ProductVariantModel(
                    position=position,
                    ram=variant["ram"],
                    price=variant["price"],
                    quantity=variant["quantity"],
                )
                for position, variant in enumerate(patch["variants"])
            ]

    def to_document(self) -> dict[str, Any]:
        """Convert to a store document."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "sub_category": self.sub_category_id,
            "category": self.category_id,
            "variants": [v.to_document() for v in self.variants],
            "images": [dict(image) for image in self.images or []],
            "rating": {"average": self.rating_average, "count": self.rating_count},
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class ProductVariantModel(Base):
    """A priced, stocked configuration of a product."""

    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False)
    ram = Column(String(50), nullable=False)
    price = Column(Float, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)

    def to_document(self) -> dict[str, Any]:
        """Convert to a variant document."""
        return {"ram": self.ram, "price": self.price, "quantity": self.quantity}


# ============================================================================
# Users and Wishlists
# ============================================================================


class UserModel(Base):
    """Account that can authenticate and keep a wishlist."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(255), nullable=False)
    name = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at, updated_at = _timestamp_columns()

    # Relationships
    wishlist = relationship(
        "WishlistEntryModel",
        cascade="all, delete-orphan",
        order_by="WishlistEntryModel.position",
        lazy="selectin",
    )

    def apply(self, patch: dict[str, Any]) -> None:
        """Copy document fields onto the row."""
        for key in ("id", "email", "name", "role", "is_active", "created_at", "updated_at"):
            if key in patch:
                setattr(self, key, patch[key])
        if "wishlist" in patch:
            # Reuse existing rows so unchanged entries are not deleted and re-inserted
            existing = {entry.product_id: entry for entry in self.wishlist or []}
            entries = []
            for position, product_id in enumerate(patch["wishlist"]):
                entry = existing.get(product_id) or WishlistEntryModel(product_id=product_id)
                entry.position = position
                entries.append(entry)
            self.wishlist = entries

    def to_document(self) -> dict[str, Any]:
        """Convert to a store document."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
            "wishlist": [entry.product_id for entry in self.wishlist],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class WishlistEntryModel(Base):
    """One product id in a user's wishlist.

    ``product_id`` is not a foreign key: deleting a product leaves the
    entry in place and wishlist listings skip it.
    """

    __tablename__ = "wishlist_entries"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    product_id = Column(String(36), primary_key=True)
    position = Column(Integer, nullable=False)


# ============================================================================
# Indexes
# ============================================================================


Index("uq_categories_name_lower", func.lower(CategoryModel.name), unique=True)
Index(
    "uq_subcategories_name_lower_category",
    func.lower(SubCategoryModel.name),
    SubCategoryModel.category_id,
    unique=True,
)
Index("uq_users_email_lower", func.lower(UserModel.email), unique=True)
Index(
    "ix_products_fulltext",
    func.to_tsvector(
        "english",
        func.coalesce(ProductModel.title, "") + " " + func.coalesce(ProductModel.description, ""),
    ),
    postgresql_using="gin",
)

"""Wishlist application service.

A wishlist is an ordered list of product ids kept on the user record,
in insertion order and without duplicates. Products are validated when
added; later deactivation or deletion is tolerated and deleted products
are skipped when listing.
"""

from __future__ import annotations

import structlog

from storefront.catalog import In, PaginatedResult, validate_pagination
from storefront.domain.entities import PRODUCTS, USERS, Product, User
from storefront.domain.exceptions import (
    ConflictError,
    ErrorIssue,
    NotFoundError,
    ValidationError,
)
from storefront.infrastructure.document_store import DocumentStore

logger = structlog.get_logger()


class WishlistService:
    """Application service for user wishlists."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize service.

        Args:
            store: Document store.
        """
        self.store = store

    async def _wishlist(self, user: User) -> list[str]:
        document = await self.store.find_by_id(USERS, user.id)
        if document is None:
            raise NotFoundError("User", user.id)
        user.wishlist = list(document.get("wishlist", []))
        return list(user.wishlist)

    async def _save(self, user: User, wishlist: list[str]) -> list[str]:
        document = await self.store.update_by_id(USERS, user.id, {"wishlist": wishlist})
        if document is None:
            raise NotFoundError("User", user.id)
        user.wishlist = list(document["wishlist"])
        return list(user.wishlist)

    async def add(self, user: User, product_id: str) -> list[str]:
        """Append a product to the wishlist.

        Args:
            user: Wishlist owner.
            product_id: Product to add.

        Returns:
            The updated wishlist.

        Raises:
            ValidationError: If the product does not exist or is inactive.
            ConflictError: If the product is already in the wishlist.
        """
        document = await self.store.find_by_id(PRODUCTS, product_id)
        if document is None:
            raise ValidationError(
                "Product not found",
                details=[ErrorIssue(message="Product does not exist", field="product_id")],
            )
        if not document.get("is_active", True):
            raise ValidationError(
                "Cannot add inactive product to wishlist",
                details=[ErrorIssue(message="Product is inactive", field="product_id")],
            )

        wishlist = await self._wishlist(user)
        if user.has_in_wishlist(product_id):
            raise ConflictError("Product is already in wishlist")

        wishlist.append(product_id)
        logger.info("Wishlist item added", user_id=user.id, product_id=product_id)
        return await self._save(user, wishlist)

    async def remove(self, user: User, product_id: str) -> list[str]:
        """Remove a product from the wishlist.

        Raises:
            ValidationError: If the product is not in the wishlist.
        """
        wishlist = await self._wishlist(user)
        if product_id not in wishlist:
            raise ValidationError(
                "Product is not in wishlist",
                details=[ErrorIssue(message="Product is not in wishlist", field="product_id")],
            )
        wishlist.remove(product_id)
        logger.info("Wishlist item removed", user_id=user.id, product_id=product_id)
        return await self._save(user, wishlist)

    async def clear(self, user: User) -> list[str]:
        """Empty the wishlist. Clearing an empty wishlist succeeds."""
        await self._wishlist(user)
        logger.info("Wishlist cleared", user_id=user.id)
        return await self._save(user, [])

    async def list(self, user: User, page: int = 1, limit: int = 10) -> PaginatedResult[Product]:
        """List wishlist products, oldest first.

        The page is cut from the stored id sequence; ids whose product no
        longer exists are skipped, so a page may hold fewer items than
        ``limit``.

        Raises:
            ValidationError: If page or limit is below 1.
        """
        validate_pagination(page, limit)
        wishlist = await self._wishlist(user)
        start = (page - 1) * limit

        return PaginatedResult(
            items=await self.products(wishlist[start : start + limit]),
            total=len(wishlist),
            page=page,
            limit=limit,
        )

    async def contains(self, user: User, product_id: str) -> bool:
        """Check whether a product is in the wishlist."""
        await self._wishlist(user)
        return user.has_in_wishlist(product_id)

    async def products(self, product_ids: list[str]) -> list[Product]:
        """Load products in wishlist order, skipping deleted ones."""
        if not product_ids:
            return []
        found = await self.store.find(PRODUCTS, (In("id", tuple(product_ids)),))
        documents = {d["id"]: d for d in found}
        return [Product.from_document(documents[i]) for i in product_ids if i in documents]

    async def count(self, user: User) -> int:
        """Number of product ids in the wishlist."""
        return len(await self._wishlist(user))

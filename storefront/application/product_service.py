"""Product application service.

Handles product writes with their variants and images, and every
product listing: filtered lists, per-category and per-subcategory
lists and relevance-ranked search.

Images are staged into the object store before a write. If the write
fails, the staged images are discarded and the original failure is
re-raised.
"""

import dataclasses
from collections.abc import Sequence
from typing import Any

import structlog

from storefront.application.images import MAX_IMAGES, StagedImage, discard_images
from storefront.application.validation import (
    PRODUCT_DESCRIPTION,
    PRODUCT_TITLE,
    is_blank,
    raise_if_issues,
)
from storefront.catalog import (
    PRODUCT_LIST,
    ListOptions,
    PaginatedResult,
    assert_parent_active,
    build_list_query,
    build_search_query,
    derive_category_from_subcategory,
    paginate,
    validate_variants,
)
from storefront.domain.entities import CATEGORIES, PRODUCTS, SUBCATEGORIES, Product, User
from storefront.domain.exceptions import ErrorIssue, NotFoundError, ValidationError
from storefront.infrastructure.document_store import DocumentStore
from storefront.infrastructure.object_store import ObjectStore

logger = structlog.get_logger()

REQUIRED_FIELDS = ("title", "description", "sub_category", "variants")


class ProductService:
    """Application service for products.

    Example usage:
        service = ProductService(store, object_store)
        product = await service.create(
            {"title": "Phone X", "description": "...", "sub_category": sub_id,
             "variants": [{"ram": "8GB", "price": 100, "quantity": 5}]},
            staged_images=staged,
            actor=user,
        )
    """

    def __init__(self, store: DocumentStore, object_store: ObjectStore) -> None:
        """Initialize service.

        Args:
            store: Document store.
            object_store: Object store holding product images.
        """
        self.store = store
        self.object_store = object_store

    async def _load(self, product_id: str) -> Product:
        document = await self.store.find_by_id(PRODUCTS, product_id)
        if document is None:
            raise NotFoundError("Product", product_id)
        return Product.from_document(document)

    @staticmethod
    def _check_image_count(staged_images: Sequence[StagedImage]) -> None:
        if len(staged_images) > MAX_IMAGES:
            raise ValidationError(
                f"At most {MAX_IMAGES} images are allowed",
                details=[ErrorIssue(message=f"{len(staged_images)} images given", field="images")],
            )

    # ========================================================================
    # Writes
    # ========================================================================

    async def create(
        self,
        data: dict[str, Any],
        staged_images: Sequence[StagedImage] = (),
        actor: User | None = None,
    ) -> Product:
        """Create a product.

        Args:
            data: Fields: title, description, sub_category, variants and
                optionally is_active.
            staged_images: Images already stored, attached in order.
            actor: User creating the product.

        Returns:
            The created product.

        Raises:
            ValidationError: If fields are missing or invalid, or the parents are inactive.
            NotFoundError: If the subcategory does not exist.
        """
        try:
            return await self._create(data, staged_images, actor)
        except Exception:
            await discard_images(self.object_store, [s.storage_id for s in staged_images])
            raise

    async def _create(
        self,
        data: dict[str, Any],
        staged_images: Sequence[StagedImage],
        actor: User | None,
    ) -> Product:
        missing = [
            name
            for name in REQUIRED_FIELDS
            if is_blank(data.get(name)) or (name == "variants" and not data.get(name))
        ]
        if missing:
            raise ValidationError(
                "Please provide title, description, subcategory and at least one variant",
                details=[ErrorIssue(message=f"{name} is required", field=name) for name in missing],
            )

        issues: list[ErrorIssue] = []
        title = PRODUCT_TITLE.check("title", data["title"], issues)
        description = PRODUCT_DESCRIPTION.check("description", data["description"], issues)
        raise_if_issues(issues)
        self._check_image_count(staged_images)

        sub_category, category = await derive_category_from_subcategory(
            self.store, data["sub_category"]
        )
        assert_parent_active("product", sub_category, category)
        variants = validate_variants(data["variants"])

        document = await self.store.insert(
            PRODUCTS,
            {
                "title": title,
                "description": description,
                "sub_category": sub_category.id,
                "category": category.id,
                "variants": [v.to_document() for v in variants],
                "images": [s.to_image().to_document() for s in staged_images],
                "rating": {"average": 0.0, "count": 0},
                "is_active": bool(data.get("is_active", True)),
                "created_by": actor.id if actor else None,
            },
        )
        product = Product.from_document(document)
        logger.info(
            "Product created",
            product_id=product.id,
            sub_category_id=product.sub_category,
            category_id=product.category,
            variants=len(product.variants),
            images=len(product.images),
        )
        return product

    async def update(
        self,
        product_id: str,
        data: dict[str, Any],
        staged_images: Sequence[StagedImage] = (),
        replace_images: bool = False,
    ) -> Product:
        """Partially update a product.

        Args:
            product_id: Product id.
            data: Any of title, description, sub_category, variants, is_active.
            staged_images: Newly stored images.
            replace_images: Replace existing images instead of appending.

        Returns:
            The updated product.

        Raises:
            NotFoundError: If the product or the new subcategory does not exist.
            ValidationError: If a field is invalid.
        """
        try:
            return await self._update(product_id, data, staged_images, replace_images)
        except Exception:
            await discard_images(self.object_store, [s.storage_id for s in staged_images])
            raise

    async def _update(
        self,
        product_id: str,
        data: dict[str, Any],
        staged_images: Sequence[StagedImage],
        replace_images: bool,
    ) -> Product:
        current = await self._load(product_id)

        issues: list[ErrorIssue] = []
        patch: dict[str, Any] = {}
        if data.get("title") is not None:
            patch["title"] = PRODUCT_TITLE.check("title", data["title"], issues)
        if data.get("description") is not None:
            patch["description"] = PRODUCT_DESCRIPTION.check(
                "description", data["description"], issues
            )
        if data.get("is_active") is not None:
            patch["is_active"] = bool(data["is_active"])
        raise_if_issues(issues)
        self._check_image_count(staged_images)

        if data.get("sub_category"):
            # No parent-active check on update
            sub_category, category = await derive_category_from_subcategory(
                self.store, data["sub_category"]
            )
            patch["sub_category"] = sub_category.id
            patch["category"] = category.id

        if data.get("variants") is not None:
            patch["variants"] = [v.to_document() for v in validate_variants(data["variants"])]

        if staged_images:
            new_images = [s.to_image().to_document() for s in staged_images]
            if replace_images:
                await discard_images(self.object_store, [i.storage_id for i in current.images])
                patch["images"] = new_images
            else:
                patch["images"] = [i.to_document() for i in current.images] + new_images

        document = await self.store.update_by_id(PRODUCTS, product_id, patch)
        if document is None:
            raise NotFoundError("Product", product_id)
        logger.info(
            "Product updated",
            product_id=product_id,
            fields=sorted(patch),
            replaced_images=bool(staged_images and replace_images),
        )
        return Product.from_document(document)

    async def delete(self, product_id: str) -> None:
        """Delete a product and its images.

        Image deletion is best-effort: failures are logged and the record
        is deleted regardless.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product = await self._load(product_id)
        await discard_images(self.object_store, [i.storage_id for i in product.images])
        await self.store.delete_by_id(PRODUCTS, product_id)
        logger.info("Product deleted", product_id=product_id, images=len(product.images))

    # ========================================================================
    # Reads
    # ========================================================================

    async def get(self, product_id: str) -> Product:
        """Get a product by id.

        Raises:
            NotFoundError: If the product does not exist.
        """
        return await self._load(product_id)

    async def list(self, options: ListOptions) -> PaginatedResult[Product]:
        """List products with search, filters, sort and pagination."""
        query = build_list_query(PRODUCT_LIST, options)
        return await paginate(self.store, query, Product.from_document)

    async def list_by_subcategory(
        self,
        sub_category_id: str,
        options: ListOptions,
    ) -> PaginatedResult[Product]:
        """List the active products of a subcategory.

        Raises:
            NotFoundError: If the subcategory does not exist.
        """
        if await self.store.find_by_id(SUBCATEGORIES, sub_category_id) is None:
            raise NotFoundError("Subcategory", sub_category_id)
        scoped = dataclasses.replace(
            options, sub_category=sub_category_id, category=None, is_active=True
        )
        return await self.list(scoped)

    async def list_by_category(
        self,
        category_id: str,
        options: ListOptions,
    ) -> PaginatedResult[Product]:
        """List the active products of a category, across its subcategories.

        Raises:
            NotFoundError: If the category does not exist.
        """
        if await self.store.find_by_id(CATEGORIES, category_id) is None:
            raise NotFoundError("Category", category_id)
        scoped = dataclasses.replace(options, category=category_id, is_active=True)
        return await self.list(scoped)

    async def search(
        self,
        query: str | None,
        page: int = 1,
        limit: int = 10,
    ) -> PaginatedResult[Product]:
        """Full-text search over active products, most relevant first.

        Raises:
            ValidationError: If the query is blank.
        """
        list_query = build_search_query(query, page, limit)
        return await paginate(self.store, list_query, Product.from_document)

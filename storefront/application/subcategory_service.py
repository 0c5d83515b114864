"""Subcategory application service.

Handles subcategories, which are unique by name within their category.
Moving a subcategory to another category rewrites the denormalized
category of its products.
"""

from dataclasses import dataclass

import structlog

from storefront.application.validation import (
    SUBCATEGORY_DESCRIPTION,
    SUBCATEGORY_NAME,
    raise_if_issues,
    require,
)
from storefront.catalog import (
    SUBCATEGORY_LIST,
    Equals,
    ListOptions,
    PaginatedResult,
    Sort,
    assert_no_children,
    assert_parent_active,
    assert_unique_sibling_name,
    build_list_query,
    paginate,
    resync_product_categories,
)
from storefront.domain.entities import (
    CATEGORIES,
    PRODUCTS,
    SUBCATEGORIES,
    Category,
    SubCategory,
    User,
)
from storefront.domain.exceptions import ErrorIssue, NotFoundError
from storefront.infrastructure.document_store import DocumentStore

logger = structlog.get_logger()


@dataclass
class SubCategoryDetail:
    """A subcategory with its parent and its active product count."""

    sub_category: SubCategory
    category: Category | None
    product_count: int


@dataclass
class CategorySubCategories:
    """Subcategories of one category."""

    category: Category
    subcategories: list[SubCategory]


class SubCategoryService:
    """Application service for subcategories."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize service.

        Args:
            store: Document store.
        """
        self.store = store

    async def _load(self, sub_category_id: str) -> SubCategory:
        document = await self.store.find_by_id(SUBCATEGORIES, sub_category_id)
        if document is None:
            raise NotFoundError("Subcategory", sub_category_id)
        return SubCategory.from_document(document)

    async def _load_category(self, category_id: str) -> Category:
        document = await self.store.find_by_id(CATEGORIES, category_id)
        if document is None:
            raise NotFoundError("Category", category_id)
        return Category.from_document(document)

    async def create(
        self,
        name: str | None,
        category: str | None,
        description: str | None = None,
        actor: User | None = None,
    ) -> SubCategory:
        """Create a subcategory under an active category.

        Args:
            name: Subcategory name, unique case-insensitively within the category.
            category: Parent category id.
            description: Optional description.
            actor: User creating the subcategory.

        Returns:
            The created subcategory.

        Raises:
            ValidationError: If a field is missing or invalid, or the category is inactive.
            NotFoundError: If the category does not exist.
            ConflictError: If the name is taken within the category.
        """
        require(
            "Subcategory name and category are required",
            {"name": name, "category": category},
            ("name", "category"),
        )

        issues: list[ErrorIssue] = []
        name = SUBCATEGORY_NAME.check("name", name, issues)
        if description is not None:
            description = SUBCATEGORY_DESCRIPTION.check("description", description, issues)
        raise_if_issues(issues)

        parent = await self._load_category(category)
        assert_parent_active("subcategory", parent)
        await assert_unique_sibling_name(
            self.store, SUBCATEGORIES, name, scope=("category", parent.id)
        )

        document = await self.store.insert(
            SUBCATEGORIES,
            {
                "name": name,
                "category": parent.id,
                "description": description,
                "is_active": True,
                "created_by": actor.id if actor else None,
            },
        )
        sub_category = SubCategory.from_document(document)
        logger.info(
            "Subcategory created",
            sub_category_id=sub_category.id,
            category_id=parent.id,
            name=sub_category.name,
        )
        return sub_category

    async def list(self, options: ListOptions) -> PaginatedResult[SubCategory]:
        """List subcategories with search, category and active filters."""
        query = build_list_query(SUBCATEGORY_LIST, options)
        return await paginate(self.store, query, SubCategory.from_document)

    async def get(self, sub_category_id: str) -> SubCategoryDetail:
        """Get a subcategory, its parent and how many active products it holds.

        Raises:
            NotFoundError: If the subcategory does not exist.
        """
        sub_category = await self._load(sub_category_id)
        parent = await self.store.find_by_id(CATEGORIES, sub_category.category)
        product_count = await self.store.count(
            PRODUCTS,
            (Equals("sub_category", sub_category_id), Equals("is_active", True)),
        )
        return SubCategoryDetail(
            sub_category=sub_category,
            category=Category.from_document(parent) if parent else None,
            product_count=product_count,
        )

    async def list_by_category(
        self,
        category_id: str,
        is_active: bool | None = True,
    ) -> CategorySubCategories:
        """List a category's subcategories sorted by name.

        Args:
            category_id: Parent category id.
            is_active: Active filter; None lists every subcategory.

        Raises:
            NotFoundError: If the category does not exist.
        """
        category = await self._load_category(category_id)
        predicate = [Equals("category", category_id)]
        if is_active is not None:
            predicate.append(Equals("is_active", is_active))
        documents = await self.store.find(
            SUBCATEGORIES,
            tuple(predicate),
            sort=Sort(field="name", descending=False),
        )
        return CategorySubCategories(
            category=category,
            subcategories=[SubCategory.from_document(d) for d in documents],
        )

    async def update(
        self,
        sub_category_id: str,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
        category: str | None = None,
    ) -> SubCategory:
        """Partially update a subcategory.

        Moving to another category does not require that category to be
        active.

        Raises:
            NotFoundError: If the subcategory or the new category does not exist.
            ValidationError: If a field is out of bounds.
            ConflictError: If the name is taken within the target category.
        """
        current = await self._load(sub_category_id)

        issues: list[ErrorIssue] = []
        patch: dict = {}
        if name is not None:
            patch["name"] = SUBCATEGORY_NAME.check("name", name, issues)
        if description is not None:
            patch["description"] = SUBCATEGORY_DESCRIPTION.check("description", description, issues)
        if is_active is not None:
            patch["is_active"] = is_active
        raise_if_issues(issues)

        target_category = current.category
        if category is not None and category != current.category:
            target_category = (await self._load_category(category)).id
            patch["category"] = target_category

        if "name" in patch or "category" in patch:
            await assert_unique_sibling_name(
                self.store,
                SUBCATEGORIES,
                patch.get("name", current.name),
                scope=("category", target_category),
                exclude_id=sub_category_id,
            )

        document = await self.store.update_by_id(SUBCATEGORIES, sub_category_id, patch)
        if document is None:
            raise NotFoundError("Subcategory", sub_category_id)

        if "category" in patch:
            await resync_product_categories(self.store, sub_category_id, target_category)

        logger.info("Subcategory updated", sub_category_id=sub_category_id, fields=sorted(patch))
        return SubCategory.from_document(document)

    async def delete(self, sub_category_id: str) -> None:
        """Delete a subcategory that owns no products.

        Raises:
            NotFoundError: If the subcategory does not exist.
            ConflictError: If any product references it.
        """
        await self._load(sub_category_id)
        await assert_no_children(self.store, SUBCATEGORIES, sub_category_id)
        await self.store.delete_by_id(SUBCATEGORIES, sub_category_id)
        logger.info("Subcategory deleted", sub_category_id=sub_category_id)

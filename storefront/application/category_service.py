"""Category application service.

Handles creating, listing, reading, updating and deleting top-level
categories.
"""

from dataclasses import dataclass, field

import structlog

from storefront.application.validation import (
    CATEGORY_DESCRIPTION,
    CATEGORY_NAME,
    is_blank,
    raise_if_issues,
)
from storefront.catalog import (
    CATEGORY_LIST,
    Equals,
    ListOptions,
    PaginatedResult,
    Sort,
    assert_no_children,
    assert_unique_sibling_name,
    build_list_query,
    paginate,
)
from storefront.domain.entities import CATEGORIES, SUBCATEGORIES, Category, SubCategory, User
from storefront.domain.exceptions import ErrorIssue, NotFoundError, ValidationError
from storefront.infrastructure.document_store import DocumentStore

logger = structlog.get_logger()


@dataclass
class CategoryDetail:
    """A category with its active subcategories."""

    category: Category
    subcategories: list[SubCategory] = field(default_factory=list)


class CategoryService:
    """Application service for categories."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize service.

        Args:
            store: Document store.
        """
        self.store = store

    async def _load(self, category_id: str) -> Category:
        document = await self.store.find_by_id(CATEGORIES, category_id)
        if document is None:
            raise NotFoundError("Category", category_id)
        return Category.from_document(document)

    async def create(
        self,
        name: str | None,
        description: str | None = None,
        actor: User | None = None,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name, unique case-insensitively.
            description: Optional description.
            actor: User creating the category.

        Returns:
            The created category.

        Raises:
            ValidationError: If the name is missing or a field is out of bounds.
            ConflictError: If another category already uses the name.
        """
        if is_blank(name):
            raise ValidationError(
                "Category name is required",
                details=[ErrorIssue(message="Category name is required", field="name")],
            )

        issues: list[ErrorIssue] = []
        name = CATEGORY_NAME.check("name", name, issues)
        if description is not None:
            description = CATEGORY_DESCRIPTION.check("description", description, issues)
        raise_if_issues(issues)

        await assert_unique_sibling_name(self.store, CATEGORIES, name)

        document = await self.store.insert(
            CATEGORIES,
            {
                "name": name,
                "description": description,
                "is_active": True,
                "created_by": actor.id if actor else None,
            },
        )
        category = Category.from_document(document)
        logger.info("Category created", category_id=category.id, name=category.name)
        return category

    async def list(self, options: ListOptions) -> PaginatedResult[Category]:
        """List categories with search, active filter, sort and pagination."""
        query = build_list_query(CATEGORY_LIST, options)
        return await paginate(self.store, query, Category.from_document)

    async def get(self, category_id: str) -> CategoryDetail:
        """Get a category and its active subcategories, sorted by name.

        Raises:
            NotFoundError: If the category does not exist.
        """
        category = await self._load(category_id)
        documents = await self.store.find(
            SUBCATEGORIES,
            (Equals("category", category_id), Equals("is_active", True)),
            sort=Sort(field="name", descending=False),
        )
        return CategoryDetail(
            category=category,
            subcategories=[SubCategory.from_document(d) for d in documents],
        )

    async def update(
        self,
        category_id: str,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
    ) -> Category:
        """Partially update a category.

        Deactivating a category does not touch its subcategories.

        Raises:
            NotFoundError: If the category does not exist.
            ValidationError: If a field is out of bounds.
            ConflictError: If the new name is taken by another category.
        """
        await self._load(category_id)

        issues: list[ErrorIssue] = []
        patch: dict = {}
        if name is not None:
            patch["name"] = CATEGORY_NAME.check("name", name, issues)
        if description is not None:
            patch["description"] = CATEGORY_DESCRIPTION.check("description", description, issues)
        if is_active is not None:
            patch["is_active"] = is_active
        raise_if_issues(issues)

        if "name" in patch:
            await assert_unique_sibling_name(
                self.store, CATEGORIES, patch["name"], exclude_id=category_id
            )

        document = await self.store.update_by_id(CATEGORIES, category_id, patch)
        if document is None:
            raise NotFoundError("Category", category_id)
        logger.info("Category updated", category_id=category_id, fields=sorted(patch))
        return Category.from_document(document)

    async def delete(self, category_id: str) -> None:
        """Delete a category that owns no subcategories.

        Raises:
            NotFoundError: If the category does not exist.
            ConflictError: If any subcategory references it.
        """
        await self._load(category_id)
        await assert_no_children(self.store, CATEGORIES, category_id)
        await self.store.delete_by_id(CATEGORIES, category_id)
        logger.info("Category deleted", category_id=category_id)

"""Tests for catalog integrity rules."""

import pytest

from storefront.catalog import (
    assert_no_children,
    assert_parent_active,
    assert_unique_sibling_name,
    derive_category_from_subcategory,
    resync_product_categories,
    validate_variants,
)
from storefront.domain import (
    CATEGORIES,
    PRODUCTS,
    SUBCATEGORIES,
    Category,
    ConflictError,
    NotFoundError,
    SubCategory,
    ValidationError,
)
from storefront.infrastructure.document_store import InMemoryDocumentStore


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create an empty in-memory store."""
    return InMemoryDocumentStore()


class TestUniqueSiblingName:
    """Tests for sibling name uniqueness."""

    @pytest.mark.asyncio
    async def test_case_insensitive_conflict(self, store: InMemoryDocumentStore) -> None:
        """Names differing only in case conflict."""
        await store.insert(CATEGORIES, {"name": "Phones", "is_active": True})
        with pytest.raises(ConflictError):
            await assert_unique_sibling_name(store, CATEGORIES, "phones")

    @pytest.mark.asyncio
    async def test_substring_is_not_conflict(self, store: InMemoryDocumentStore) -> None:
        """A name containing an existing one does not conflict."""
        await store.insert(CATEGORIES, {"name": "Phones", "is_active": True})
        await assert_unique_sibling_name(store, CATEGORIES, "Phones Accessories")

    @pytest.mark.asyncio
    async def test_scoped_to_parent(self, store: InMemoryDocumentStore) -> None:
        """Subcategory names only conflict within the same category."""
        await store.insert(SUBCATEGORIES, {"name": "Accessories", "category": "c1"})
        await assert_unique_sibling_name(
            store, SUBCATEGORIES, "Accessories", scope=("category", "c2")
        )
        with pytest.raises(ConflictError) as exc_info:
            await assert_unique_sibling_name(
                store, SUBCATEGORIES, "accessories", scope=("category", "c1")
            )
        assert exc_info.value.message == "Subcategory with this name already exists in this category"

    @pytest.mark.asyncio
    async def test_excludes_self(self, store: InMemoryDocumentStore) -> None:
        """Renaming to the current name is allowed."""
        document = await store.insert(CATEGORIES, {"name": "Phones"})
        await assert_unique_sibling_name(store, CATEGORIES, "PHONES", exclude_id=document["id"])


class TestParentActive:
    """Tests for the parent-active rule."""

    def test_active_parents_pass(self) -> None:
        """Active parents raise nothing."""
        assert_parent_active("product", Category(id="c", name="A"), SubCategory(id="s", name="B", category="c"))

    def test_inactive_parent_fails(self) -> None:
        """An inactive category blocks creation."""
        with pytest.raises(ValidationError) as exc_info:
            assert_parent_active("subcategory", Category(id="c", name="A", is_active=False))
        assert exc_info.value.message == "Cannot create subcategory under inactive category"
        assert exc_info.value.details[0].field == "category"


class TestNoChildren:
    """Tests for the orphan guard."""

    @pytest.mark.asyncio
    async def test_category_with_subcategories(self, store: InMemoryDocumentStore) -> None:
        """Categories with subcategories cannot be deleted."""
        await store.insert(SUBCATEGORIES, {"name": "Phones", "category": "c1", "is_active": False})
        with pytest.raises(ConflictError) as exc_info:
            await assert_no_children(store, CATEGORIES, "c1")
        assert exc_info.value.message == "Cannot delete category with existing subcategories"

    @pytest.mark.asyncio
    async def test_subcategory_with_products(self, store: InMemoryDocumentStore) -> None:
        """Subcategories with products cannot be deleted."""
        await store.insert(PRODUCTS, {"title": "P", "sub_category": "s1", "category": "c1"})
        with pytest.raises(ConflictError):
            await assert_no_children(store, SUBCATEGORIES, "s1")

    @pytest.mark.asyncio
    async def test_childless_parent(self, store: InMemoryDocumentStore) -> None:
        """Childless parents pass."""
        await assert_no_children(store, CATEGORIES, "c1")
        await assert_no_children(store, SUBCATEGORIES, "s1")


class TestValidateVariants:
    """Tests for variant validation."""

    @pytest.mark.parametrize("raw", [None, [], "8GB", {"ram": "8GB"}])
    def test_missing_variants(self, raw) -> None:
        """An empty or non-list value is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_variants(raw)
        assert exc_info.value.message == "At least one variant is required"

    def test_valid_variants(self) -> None:
        """Valid variants are parsed in order."""
        variants = validate_variants(
            [
                {"ram": " 8GB ", "price": 100, "quantity": 5},
                {"ram": "16GB", "price": 149.99, "quantity": 0},
            ]
        )
        assert [v.ram for v in variants] == ["8GB", "16GB"]
        assert variants[1].price == 149.99

    def test_reports_every_issue(self) -> None:
        """All offending variants are reported together."""
        with pytest.raises(ValidationError) as exc_info:
            validate_variants(
                [
                    {"ram": "", "price": -1, "quantity": 1},
                    {"ram": "8GB", "price": 10, "quantity": 1.5},
                    "not a variant",
                ]
            )
        fields = [d.field for d in exc_info.value.details]
        assert fields == [
            "variants[0].ram",
            "variants[0].price",
            "variants[1].quantity",
            "variants[2]",
        ]

    def test_boolean_is_not_a_number(self) -> None:
        """Booleans are not accepted as price or quantity."""
        with pytest.raises(ValidationError) as exc_info:
            validate_variants([{"ram": "8GB", "price": True, "quantity": False}])
        assert len(exc_info.value.details) == 2


class TestCategoryDerivation:
    """Tests for the denormalized product category."""

    @pytest.mark.asyncio
    async def test_derives_parent(self, store: InMemoryDocumentStore) -> None:
        """The category comes from the subcategory's parent."""
        category = await store.insert(CATEGORIES, {"name": "Electronics"})
        sub = await store.insert(SUBCATEGORIES, {"name": "Phones", "category": category["id"]})

        sub_category, parent = await derive_category_from_subcategory(store, sub["id"])
        assert sub_category.id == sub["id"]
        assert parent.id == category["id"]

    @pytest.mark.asyncio
    async def test_missing_subcategory(self, store: InMemoryDocumentStore) -> None:
        """An unknown subcategory is not found."""
        with pytest.raises(NotFoundError):
            await derive_category_from_subcategory(store, "missing")

    @pytest.mark.asyncio
    async def test_resync_rewrites_products(self, store: InMemoryDocumentStore) -> None:
        """Moving a subcategory updates its products only."""
        await store.insert(PRODUCTS, {"title": "A", "sub_category": "s1", "category": "old"})
        await store.insert(PRODUCTS, {"title": "B", "sub_category": "s2", "category": "old"})

        assert await resync_product_categories(store, "s1", "new") == 1
        products = {p["title"]: p["category"] for p in await store.find(PRODUCTS)}
        assert products == {"A": "new", "B": "old"}

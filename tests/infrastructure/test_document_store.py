"""Tests for the in-memory document store."""

import pytest

from storefront.catalog import Equals, In, Sort
from storefront.domain import CATEGORIES, PRODUCTS, SUBCATEGORIES, USERS, DuplicateKeyError
from storefront.infrastructure.document_store import InMemoryDocumentStore


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create an empty in-memory store."""
    return InMemoryDocumentStore()


class TestInsertAndFind:
    """Tests for basic document operations."""

    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_timestamps(self, store: InMemoryDocumentStore) -> None:
        """Inserted documents get an id and timestamps."""
        document = await store.insert(CATEGORIES, {"name": "Phones"})
        assert document["id"]
        assert document["created_at"] == document["updated_at"]

    @pytest.mark.asyncio
    async def test_documents_are_copied(self, store: InMemoryDocumentStore) -> None:
        """Mutating a returned document does not change the store."""
        document = await store.insert(USERS, {"email": "a@example.com", "wishlist": []})
        document["wishlist"].append("p1")

        stored = await store.find_by_id(USERS, document["id"])
        assert stored["wishlist"] == []

    @pytest.mark.asyncio
    async def test_find_with_sort_and_page(self, store: InMemoryDocumentStore) -> None:
        """Sorting ignores case and pages slice the sorted list."""
        for name in ("banana", "Apple", "cherry"):
            await store.insert(CATEGORIES, {"name": name})

        names = [d["name"] for d in await store.find(CATEGORIES, sort=Sort("name", descending=False))]
        assert names == ["Apple", "banana", "cherry"]

        page = await store.find(CATEGORIES, sort=Sort("name", descending=True), skip=1, limit=1)
        assert [d["name"] for d in page] == ["banana"]

    @pytest.mark.asyncio
    async def test_count_and_in(self, store: InMemoryDocumentStore) -> None:
        """Predicates filter both find and count."""
        a = await store.insert(CATEGORIES, {"name": "A", "is_active": True})
        await store.insert(CATEGORIES, {"name": "B", "is_active": False})

        assert await store.count(CATEGORIES) == 2
        assert await store.count(CATEGORIES, (Equals("is_active", True),)) == 1
        found = await store.find(CATEGORIES, (In("id", (a["id"], "missing")),))
        assert [d["name"] for d in found] == ["A"]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, store: InMemoryDocumentStore) -> None:
        """Updates merge patches; deletes report whether anything was removed."""
        document = await store.insert(CATEGORIES, {"name": "A", "description": "x"})

        updated = await store.update_by_id(CATEGORIES, document["id"], {"description": "y"})
        assert updated["name"] == "A"
        assert updated["description"] == "y"
        assert await store.update_by_id(CATEGORIES, "missing", {"name": "B"}) is None

        assert await store.delete_by_id(CATEGORIES, document["id"]) is True
        assert await store.delete_by_id(CATEGORIES, document["id"]) is False


class TestUniqueIndexes:
    """Tests for unique index enforcement."""

    @pytest.mark.asyncio
    async def test_category_name_case_insensitive(self, store: InMemoryDocumentStore) -> None:
        """Category names are unique regardless of case."""
        await store.insert(CATEGORIES, {"name": "Phones"})
        with pytest.raises(DuplicateKeyError):
            await store.insert(CATEGORIES, {"name": "PHONES"})

    @pytest.mark.asyncio
    async def test_subcategory_name_per_category(self, store: InMemoryDocumentStore) -> None:
        """Subcategory names are unique per category only."""
        await store.insert(SUBCATEGORIES, {"name": "Cases", "category": "c1"})
        await store.insert(SUBCATEGORIES, {"name": "Cases", "category": "c2"})
        with pytest.raises(DuplicateKeyError):
            await store.insert(SUBCATEGORIES, {"name": "cases", "category": "c1"})

    @pytest.mark.asyncio
    async def test_update_checks_uniqueness(self, store: InMemoryDocumentStore) -> None:
        """Renaming into a taken name is rejected."""
        await store.insert(CATEGORIES, {"name": "A"})
        b = await store.insert(CATEGORIES, {"name": "B"})
        with pytest.raises(DuplicateKeyError):
            await store.update_by_id(CATEGORIES, b["id"], {"name": "a"})


class TestTextSearch:
    """Tests for in-memory full-text search."""

    @pytest.mark.asyncio
    async def test_ranked_by_score(self, store: InMemoryDocumentStore) -> None:
        """Documents matching more terms rank first; non-matches are dropped."""
        await store.insert(PRODUCTS, {"title": "Kettle", "description": "Boils water"})
        await store.insert(PRODUCTS, {"title": "Phone", "description": "A phone"})
        await store.insert(PRODUCTS, {"title": "Fast phone", "description": "Very fast phone"})

        results = await store.text_search(PRODUCTS, "fast phone")
        assert [d["title"] for d in results] == ["Fast phone", "Phone"]

    @pytest.mark.asyncio
    async def test_predicate_and_paging(self, store: InMemoryDocumentStore) -> None:
        """Predicates apply before ranking and paging."""
        await store.insert(PRODUCTS, {"title": "Phone", "description": "", "is_active": False})
        await store.insert(PRODUCTS, {"title": "Phone", "description": "", "is_active": True})

        results = await store.text_search(PRODUCTS, "phone", (Equals("is_active", True),))
        assert len(results) == 1
        assert await store.text_search(PRODUCTS, "phone", skip=5) == []

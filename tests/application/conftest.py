"""Shared fixtures for service tests."""

import pytest
import pytest_asyncio

from storefront.application import (
    CategoryService,
    ProductService,
    SubCategoryService,
    WishlistService,
)
from storefront.domain import USERS, Category, SubCategory, User
from storefront.infrastructure.document_store import InMemoryDocumentStore
from storefront.infrastructure.object_store import InMemoryObjectStore


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create an empty in-memory store."""
    return InMemoryDocumentStore()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    """Create an empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def categories(store: InMemoryDocumentStore) -> CategoryService:
    """Create the category service."""
    return CategoryService(store)


@pytest.fixture
def subcategories(store: InMemoryDocumentStore) -> SubCategoryService:
    """Create the subcategory service."""
    return SubCategoryService(store)


@pytest.fixture
def products(store: InMemoryDocumentStore, object_store: InMemoryObjectStore) -> ProductService:
    """Create the product service."""
    return ProductService(store, object_store)


@pytest.fixture
def wishlist(store: InMemoryDocumentStore) -> WishlistService:
    """Create the wishlist service."""
    return WishlistService(store)


@pytest_asyncio.fixture
async def user(store: InMemoryDocumentStore) -> User:
    """Create a regular user."""
    document = await store.insert(
        USERS, {"email": "shopper@example.com", "name": "Shopper", "role": "user", "wishlist": []}
    )
    return User.from_document(document)


@pytest_asyncio.fixture
async def electronics(categories: CategoryService, user: User) -> Category:
    """Create the Electronics category."""
    return await categories.create("Electronics", "Gadgets and devices", actor=user)


@pytest_asyncio.fixture
async def phones(
    subcategories: SubCategoryService, electronics: Category, user: User
) -> SubCategory:
    """Create the Phones subcategory under Electronics."""
    return await subcategories.create("Phones", electronics.id, actor=user)


@pytest.fixture
def product_data():
    """Build valid product input for a subcategory."""

    def build(sub_category_id: str, **overrides) -> dict:
        data = {
            "title": "Pixel Phone",
            "description": "Android phone with a bright display",
            "sub_category": sub_category_id,
            "variants": [{"ram": "8GB", "price": 599.0, "quantity": 10}],
        }
        data.update(overrides)
        return data

    return build

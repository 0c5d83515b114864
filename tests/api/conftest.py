"""Shared fixtures for API tests."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from storefront.application import Container, build_container
from storefront.domain import USERS, User
from storefront.infrastructure.config import Settings
from storefront.main import create_app


def make_settings(**overrides) -> Settings:
    """Settings for in-memory test backends."""
    values = {
        "store_backend": "memory",
        "object_store_backend": "memory",
        "jwt_secret": "test-secret",
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(**values)


def add_user(container: Container, email: str, role: str = "user", is_active: bool = True) -> User:
    """Insert a user directly into the store."""
    document = asyncio.run(
        container.store.insert(
            USERS,
            {"email": email, "name": email.split("@")[0], "role": role, "is_active": is_active, "wishlist": []},
        )
    )
    return User.from_document(document)


def bearer(container: Container, user: User) -> dict[str, str]:
    """Authorization header for a user."""
    return {"Authorization": f"Bearer {container.token_provider.issue(user.id)}"}


@pytest.fixture
def container() -> Container:
    """Create a container with in-memory backends."""
    return build_container(make_settings())


@pytest.fixture
def client(container: Container) -> TestClient:
    """Create test client without authentication."""
    return TestClient(create_app(container))


@pytest.fixture
def auth_headers(container: Container) -> dict[str, str]:
    """Get authentication headers for a catalog editor."""
    return bearer(container, add_user(container, "editor@example.com", role="admin"))


@pytest.fixture
def viewer_headers(container: Container) -> dict[str, str]:
    """Get authentication headers for a user without catalog rights."""
    return bearer(container, add_user(container, "viewer@example.com", role="viewer"))


@pytest.fixture
def phones(client: TestClient, auth_headers: dict[str, str]) -> dict:
    """Create Electronics > Phones and return the subcategory."""
    category = client.post(
        "/api/categories", json={"name": "Electronics"}, headers=auth_headers
    ).json()
    return client.post(
        "/api/subcategories",
        json={"name": "Phones", "category": category["id"]},
        headers=auth_headers,
    ).json()


@pytest.fixture
def create_product(client: TestClient, auth_headers: dict[str, str], phones: dict):
    """Create products under Phones through the API."""

    def create(title: str = "Pixel Phone", price: float = 599.0, **fields) -> dict:
        data = {
            "title": title,
            "description": "Android phone with a bright display",
            "sub_category": phones["id"],
            "variants": f'[{{"ram": "8GB", "price": {price}, "quantity": 5}}]',
            **fields,
        }
        response = client.post("/api/products", data=data, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return create

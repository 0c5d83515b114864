"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Query, Request

from storefront.application.container import Container
from storefront.catalog import ListOptions
from storefront.domain.entities import User


def get_container(request: Request) -> Container:
    """Get the application container."""
    return request.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


def bearer_token(request: Request) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


async def current_user(request: Request, container: ContainerDep) -> User:
    """Authenticated user; fails with 401 otherwise."""
    user = await container.auth.authenticate(bearer_token(request))
    request.state.user_id = user.id
    return user


async def optional_user(request: Request, container: ContainerDep) -> User | None:
    """Authenticated user when a valid token is given, else None."""
    return await container.auth.authenticate_optional(bearer_token(request))


async def catalog_editor(
    user: Annotated[User, Depends(current_user)],
    container: ContainerDep,
) -> User:
    """Authenticated user allowed to modify the catalog; 403 otherwise."""
    return container.auth.authorize(user, container.settings.catalog_editor_roles)


CurrentUser = Annotated[User, Depends(current_user)]
OptionalUser = Annotated[User | None, Depends(optional_user)]
CatalogEditor = Annotated[User, Depends(catalog_editor)]


def list_options(
    page: int = Query(default=1, description="Page number (1-based)"),
    limit: int = Query(default=10, description="Items per page"),
    search: str | None = Query(default=None, description="Search text"),
    is_active: bool | None = Query(default=None, description="Filter by active flag"),
    category: str | None = Query(default=None, description="Filter by category id"),
    sub_category: str | None = Query(default=None, description="Filter by subcategory id"),
    min_price: float | None = Query(default=None, description="Lowest variant price"),
    max_price: float | None = Query(default=None, description="Highest variant price"),
    sort_by: str = Query(default="created_at", description="Sort field"),
    sort_order: str = Query(default="desc", description="asc or desc"),
) -> ListOptions:
    """Parse list query parameters."""
    return ListOptions(
        page=page,
        limit=limit,
        search=search,
        is_active=is_active,
        category=category,
        sub_category=sub_category,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
    )


ListOptionsDep = Annotated[ListOptions, Depends(list_options)]

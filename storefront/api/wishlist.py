"""Wishlist API endpoints.

Every route acts on the authenticated user's own wishlist.
"""

from fastapi import APIRouter, Query

from storefront.api.dependencies import ContainerDep, CurrentUser
from storefront.api.schemas import (
    ErrorResponse,
    ProductListResponse,
    ProductResponse,
    WishlistCheckResponse,
    WishlistCountResponse,
    WishlistResponse,
)
from storefront.application.container import Container

router = APIRouter(
    prefix="/wishlist",
    tags=["Wishlist"],
    responses={401: {"model": ErrorResponse}},
)


async def _wishlist(container: Container, ids: list[str]) -> WishlistResponse:
    products = await container.wishlist.products(ids)
    refs = await container.references.load(*products)
    return WishlistResponse(
        wishlist=[ProductResponse.from_entity(p, refs) for p in products],
        count=len(ids),
    )


@router.get("", response_model=ProductListResponse, summary="List wishlist")
async def get_wishlist(
    user: CurrentUser,
    container: ContainerDep,
    page: int = Query(default=1),
    limit: int = Query(default=10),
) -> ProductListResponse:
    """List wishlist products in the order they were added."""
    result = await container.wishlist.list(user, page=page, limit=limit)
    refs = await container.references.load(*result.items)
    return ProductListResponse.from_result(result, refs)


@router.get("/count", response_model=WishlistCountResponse, summary="Count wishlist")
async def get_wishlist_count(user: CurrentUser, container: ContainerDep) -> WishlistCountResponse:
    """Number of products in the wishlist."""
    return WishlistCountResponse(count=await container.wishlist.count(user))


@router.get(
    "/check/{product_id}",
    response_model=WishlistCheckResponse,
    summary="Check wishlist",
)
async def check_wishlist(
    product_id: str,
    user: CurrentUser,
    container: ContainerDep,
) -> WishlistCheckResponse:
    """Whether a product is in the wishlist."""
    return WishlistCheckResponse(
        product_id=product_id,
        in_wishlist=await container.wishlist.contains(user, product_id),
    )


@router.post(
    "/{product_id}",
    response_model=WishlistResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Add to wishlist",
)
async def add_to_wishlist(
    product_id: str,
    user: CurrentUser,
    container: ContainerDep,
) -> WishlistResponse:
    """Add an active product to the wishlist."""
    return await _wishlist(container, await container.wishlist.add(user, product_id))


@router.delete(
    "/{product_id}",
    response_model=WishlistResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Remove from wishlist",
)
async def remove_from_wishlist(
    product_id: str,
    user: CurrentUser,
    container: ContainerDep,
) -> WishlistResponse:
    """Remove a product from the wishlist."""
    return await _wishlist(container, await container.wishlist.remove(user, product_id))


@router.delete("", response_model=WishlistResponse, summary="Clear wishlist")
async def clear_wishlist(user: CurrentUser, container: ContainerDep) -> WishlistResponse:
    """Remove every product from the wishlist."""
    return await _wishlist(container, await container.wishlist.clear(user))

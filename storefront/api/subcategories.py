"""Subcategory API endpoints."""

from fastapi import APIRouter, status

from storefront.api.dependencies import CatalogEditor, ContainerDep, ListOptionsDep
from storefront.api.schemas import (
    EntityRef,
    ErrorResponse,
    MessageResponse,
    PaginationSchema,
    ProductListResponse,
    SubCategoryCreateRequest,
    SubCategoryDetailResponse,
    SubCategoryListResponse,
    SubCategoryResponse,
    SubCategoryUpdateRequest,
)

router = APIRouter(prefix="/subcategories", tags=["Subcategories"])


@router.get("", response_model=SubCategoryListResponse, summary="List subcategories")
async def list_subcategories(
    options: ListOptionsDep,
    container: ContainerDep,
) -> SubCategoryListResponse:
    """List subcategories with name search, category and active filters."""
    result = await container.subcategories.list(options)
    refs = await container.references.load(*result.items)
    return SubCategoryListResponse(
        items=[SubCategoryResponse.from_entity(s, refs) for s in result.items],
        pagination=PaginationSchema.from_result(result),
    )


@router.post(
    "",
    response_model=SubCategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create subcategory",
)
async def create_subcategory(
    body: SubCategoryCreateRequest,
    user: CatalogEditor,
    container: ContainerDep,
) -> SubCategoryResponse:
    """Create a subcategory under an active category."""
    sub_category = await container.subcategories.create(
        body.name, body.category, body.description, actor=user
    )
    return SubCategoryResponse.from_entity(
        sub_category, await container.references.load(sub_category)
    )


@router.get(
    "/{sub_category_id}",
    response_model=SubCategoryDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get subcategory",
)
async def get_subcategory(
    sub_category_id: str,
    container: ContainerDep,
) -> SubCategoryDetailResponse:
    """Get a subcategory with its parent and active product count."""
    detail = await container.subcategories.get(sub_category_id)
    parent = detail.category
    return SubCategoryDetailResponse.from_entity(
        detail.sub_category,
        await container.references.load(detail.sub_category),
        parent=EntityRef(id=parent.id, name=parent.name) if parent else None,
        product_count=detail.product_count,
    )


@router.put(
    "/{sub_category_id}",
    response_model=SubCategoryResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update subcategory",
)
async def update_subcategory(
    sub_category_id: str,
    body: SubCategoryUpdateRequest,
    user: CatalogEditor,
    container: ContainerDep,
) -> SubCategoryResponse:
    """Partially update or move a subcategory."""
    sub_category = await container.subcategories.update(
        sub_category_id,
        name=body.name,
        description=body.description,
        is_active=body.is_active,
        category=body.category,
    )
    return SubCategoryResponse.from_entity(
        sub_category, await container.references.load(sub_category)
    )


@router.delete(
    "/{sub_category_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Delete subcategory",
)
async def delete_subcategory(
    sub_category_id: str,
    user: CatalogEditor,
    container: ContainerDep,
) -> MessageResponse:
    """Delete a subcategory that has no products."""
    await container.subcategories.delete(sub_category_id)
    return MessageResponse(message="Subcategory deleted successfully")


@router.get(
    "/{sub_category_id}/products",
    response_model=ProductListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List products of a subcategory",
)
async def list_subcategory_products(
    sub_category_id: str,
    options: ListOptionsDep,
    container: ContainerDep,
) -> ProductListResponse:
    """List the active products of a subcategory, optionally text-searched."""
    result = await container.products.list_by_subcategory(sub_category_id, options)
    refs = await container.references.load(*result.items)
    return ProductListResponse.from_result(result, refs)

"""Category API endpoints.

Provides CRUD for categories plus the per-category subcategory and
product listings.
"""

from fastapi import APIRouter, status

from storefront.api.dependencies import CatalogEditor, ContainerDep, ListOptionsDep
from storefront.api.schemas import (
    CategoryCreateRequest,
    CategoryDetailResponse,
    CategoryListResponse,
    CategoryResponse,
    CategorySubCategoriesResponse,
    CategoryUpdateRequest,
    EntityRef,
    ErrorResponse,
    MessageResponse,
    PaginationSchema,
    ProductListResponse,
    SubCategoryResponse,
)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    options: ListOptionsDep,
    container: ContainerDep,
) -> CategoryListResponse:
    """List categories with name search, active filter, sort and pagination."""
    result = await container.categories.list(options)
    refs = await container.references.load(*result.items)
    return CategoryListResponse(
        items=[CategoryResponse.from_entity(c, refs) for c in result.items],
        pagination=PaginationSchema.from_result(result),
    )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create category",
)
async def create_category(
    body: CategoryCreateRequest,
    user: CatalogEditor,
    container: ContainerDep,
) -> CategoryResponse:
    """Create a category. Names are unique case-insensitively."""
    category = await container.categories.create(body.name, body.description, actor=user)
    return CategoryResponse.from_entity(category, await container.references.load(category))


@router.get(
    "/{category_id}",
    response_model=CategoryDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category",
)
async def get_category(category_id: str, container: ContainerDep) -> CategoryDetailResponse:
    """Get a category with its active subcategories."""
    detail = await container.categories.get(category_id)
    refs = await container.references.load(detail.category, *detail.subcategories)
    return CategoryDetailResponse.from_entity(
        detail.category,
        refs,
        subcategories=[SubCategoryResponse.from_entity(s, refs) for s in detail.subcategories],
    )


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update category",
)
async def update_category(
    category_id: str,
    body: CategoryUpdateRequest,
    user: CatalogEditor,
    container: ContainerDep,
) -> CategoryResponse:
    """Partially update a category."""
    category = await container.categories.update(
        category_id,
        name=body.name,
        description=body.description,
        is_active=body.is_active,
    )
    return CategoryResponse.from_entity(category, await container.references.load(category))


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Delete category",
)
async def delete_category(
    category_id: str,
    user: CatalogEditor,
    container: ContainerDep,
) -> MessageResponse:
    """Delete a category that has no subcategories."""
    await container.categories.delete(category_id)
    return MessageResponse(message="Category deleted successfully")


@router.get(
    "/{category_id}/subcategories",
    response_model=CategorySubCategoriesResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List subcategories of a category",
)
async def list_category_subcategories(
    category_id: str,
    container: ContainerDep,
    is_active: bool | None = True,
) -> CategorySubCategoriesResponse:
    """List a category's subcategories sorted by name (active only by default)."""
    result = await container.subcategories.list_by_category(category_id, is_active=is_active)
    refs = await container.references.load(*result.subcategories)
    return CategorySubCategoriesResponse(
        category=EntityRef(id=result.category.id, name=result.category.name),
        subcategories=[SubCategoryResponse.from_entity(s, refs) for s in result.subcategories],
    )


@router.get(
    "/{category_id}/products",
    response_model=ProductListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List products of a category",
)
async def list_category_products(
    category_id: str,
    options: ListOptionsDep,
    container: ContainerDep,
) -> ProductListResponse:
    """List the active products of a category."""
    result = await container.products.list_by_category(category_id, options)
    refs = await container.references.load(*result.items)
    return ProductListResponse.from_result(result, refs)

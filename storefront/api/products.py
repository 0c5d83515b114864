"""Product API endpoints.

Product writes are multipart forms: scalar fields as form fields,
``variants`` as a JSON array string and up to five ``images`` files.
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from storefront.api.dependencies import CatalogEditor, ContainerDep, ListOptionsDep, OptionalUser
from storefront.api.schemas import (
    ErrorResponse,
    MessageResponse,
    ProductListResponse,
    ProductResponse,
)
from storefront.application.images import ImageUpload
from storefront.domain.exceptions import ErrorIssue, ValidationError

router = APIRouter(prefix="/products", tags=["Products"])

WRITE_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


# ============================================================================
# Form Parsing
# ============================================================================


def parse_variants(raw: str | None) -> list[Any] | None:
    """Decode the ``variants`` form field.

    Raises:
        ValidationError: If the value is not a JSON array.
    """
    if raw is None or not raw.strip():
        return None
    try:
        variants = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(
            "Invalid variants format. Must be a valid JSON array.",
            details=[ErrorIssue(message=e.msg, field="variants")],
        ) from e
    if not isinstance(variants, list):
        raise ValidationError(
            "Invalid variants format. Must be a valid JSON array.",
            details=[ErrorIssue(message="Expected a JSON array", field="variants")],
        )
    return variants


async def read_uploads(files: list[UploadFile] | None) -> list[ImageUpload]:
    """Read uploaded files into memory, skipping empty file parts."""
    uploads = []
    for file in files or []:
        data = await file.read()
        if not file.filename and not data:
            continue
        uploads.append(
            ImageUpload(
                filename=file.filename or "image",
                content_type=file.content_type or "",
                data=data,
            )
        )
    return uploads


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/search",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Search products",
)
async def search_products(
    container: ContainerDep,
    q: str | None = Query(default=None, description="Search text"),
    page: int = Query(default=1),
    limit: int = Query(default=10),
) -> ProductListResponse:
    """Full-text search over active products, most relevant first."""
    result = await container.products.search(q, page=page, limit=limit)
    refs = await container.references.load(*result.items)
    return ProductListResponse.from_result(result, refs)


@router.get("", response_model=ProductListResponse, summary="List products")
async def list_products(
    options: ListOptionsDep,
    container: ContainerDep,
    user: OptionalUser,
) -> ProductListResponse:
    """List products with search, category, subcategory, price and active filters."""
    result = await container.products.list(options)
    refs = await container.references.load(*result.items)
    return ProductListResponse.from_result(result, refs)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
    summary="Create product",
)
async def create_product(
    user: CatalogEditor,
    container: ContainerDep,
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    sub_category: Annotated[str | None, Form()] = None,
    variants: Annotated[str | None, Form(description="JSON array of variants")] = None,
    is_active: Annotated[bool | None, Form()] = None,
    images: Annotated[list[UploadFile] | None, File()] = None,
) -> ProductResponse:
    """Create a product with its variants and images."""
    data: dict[str, Any] = {
        "title": title,
        "description": description,
        "sub_category": sub_category,
        "variants": parse_variants(variants),
    }
    if is_active is not None:
        data["is_active"] = is_active

    staged = await container.image_stager.stage(await read_uploads(images))
    product = await container.products.create(data, staged, actor=user)
    return ProductResponse.from_entity(product, await container.references.load(product))


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str,
    container: ContainerDep,
    user: OptionalUser,
) -> ProductResponse:
    """Get a product by id."""
    product = await container.products.get(product_id)
    return ProductResponse.from_entity(product, await container.references.load(product))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses=WRITE_RESPONSES,
    summary="Update product",
)
async def update_product(
    product_id: str,
    user: CatalogEditor,
    container: ContainerDep,
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    sub_category: Annotated[str | None, Form()] = None,
    variants: Annotated[str | None, Form(description="JSON array of variants")] = None,
    is_active: Annotated[bool | None, Form()] = None,
    replace_images: Annotated[bool, Form()] = False,
    images: Annotated[list[UploadFile] | None, File()] = None,
) -> ProductResponse:
    """Partially update a product; new images are appended unless replace_images is set."""
    data = {
        "title": title,
        "description": description,
        "sub_category": sub_category,
        "variants": parse_variants(variants),
        "is_active": is_active,
    }
    staged = await container.image_stager.stage(await read_uploads(images))
    product = await container.products.update(
        product_id, data, staged, replace_images=replace_images
    )
    return ProductResponse.from_entity(product, await container.references.load(product))


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    user: CatalogEditor,
    container: ContainerDep,
) -> MessageResponse:
    """Delete a product and its images."""
    await container.products.delete(product_id)
    return MessageResponse(message="Product deleted successfully")

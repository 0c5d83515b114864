"""Referential-integrity and input rules for the catalog hierarchy.

Guards creates, updates and deletes across category -> subcategory ->
product: sibling-name uniqueness, parent-active checks on create, the
orphan guard on delete, variant validation and the derivation of a
product's denormalized category.
"""

import math
from collections.abc import Sequence
from numbers import Integral, Real
from typing import TYPE_CHECKING, Any

import structlog

from storefront.catalog.query import Equals, Matches, NotEquals
from storefront.domain.entities import CATEGORIES, PRODUCTS, SUBCATEGORIES, Category, SubCategory
from storefront.domain.exceptions import (
    ConflictError,
    ErrorIssue,
    NotFoundError,
    ValidationError,
)
from storefront.domain.value_objects import Variant

if TYPE_CHECKING:
    from storefront.infrastructure.document_store import DocumentStore

logger = structlog.get_logger()

_ENTITY_NAMES = {
    CATEGORIES: "Category",
    SUBCATEGORIES: "Subcategory",
    PRODUCTS: "Product",
}


async def assert_unique_sibling_name(
    store: "DocumentStore",
    collection: str,
    name: str,
    scope: tuple[str, str] | None = None,
    exclude_id: str | None = None,
) -> None:
    """Fail if a sibling already uses this name.

    The comparison is case-insensitive and exact (not a substring match).

    Args:
        store: Document store.
        collection: Collection of the siblings.
        name: Candidate name.
        scope: Parent field and id that define the siblings, if any.
        exclude_id: Id of the entity being renamed.

    Raises:
        ConflictError: If a sibling with the same name exists.
    """
    predicate: list[Any] = [Matches("name", name.strip(), exact=True)]
    if scope is not None:
        predicate.append(Equals(scope[0], scope[1]))
    if exclude_id is not None:
        predicate.append(NotEquals("id", exclude_id))

    if await store.count(collection, tuple(predicate)) > 0:
        entity = _ENTITY_NAMES.get(collection, "Record")
        suffix = f" in this {scope[0].replace('_', ' ')}" if scope else ""
        raise ConflictError(f"{entity} with this name already exists{suffix}")


def assert_parent_active(child: str, *parents: Category | SubCategory) -> None:
    """Fail if any parent is inactive.

    Only enforced when creating children; updates never re-check it.

    Args:
        child: Kind of entity being created (e.g., "subcategory").
        parents: Parent entities that must be active.

    Raises:
        ValidationError: If a parent is inactive.
    """
    inactive = [p for p in parents if not p.is_active]
    if not inactive:
        return
    kinds = " or ".join(
        "category" if isinstance(p, Category) else "subcategory" for p in parents
    )
    raise ValidationError(
        f"Cannot create {child} under inactive {kinds}",
        details=[
            ErrorIssue(
                message=f"{type(p).__name__} '{p.name}' is inactive",
                field="category" if isinstance(p, Category) else "sub_category",
            )
            for p in inactive
        ],
    )


async def assert_no_children(
    store: "DocumentStore",
    parent_collection: str,
    parent_id: str,
) -> None:
    """Fail if the parent still owns children.

    Children are counted regardless of their active state.

    Args:
        store: Document store.
        parent_collection: CATEGORIES or SUBCATEGORIES.
        parent_id: Id of the parent being deleted.

    Raises:
        ConflictError: If any child references the parent.
    """
    if parent_collection == CATEGORIES:
        child_collection, field, noun = SUBCATEGORIES, "category", "subcategories"
    elif parent_collection == SUBCATEGORIES:
        child_collection, field, noun = PRODUCTS, "sub_category", "products"
    else:
        raise ValueError(f"{parent_collection} has no child collection")

    children = await store.count(child_collection, (Equals(field, parent_id),))
    if children > 0:
        entity = _ENTITY_NAMES[parent_collection].lower()
        raise ConflictError(
            f"Cannot delete {entity} with existing {noun}",
            details=[ErrorIssue(message=f"{children} {noun} reference this {entity}")],
        )


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and not math.isnan(value)
        and not math.isinf(value)
    )


def validate_variants(variants: Any) -> list[Variant]:
    """Validate raw variant input.

    Every offending variant is reported, not just the first.

    Args:
        variants: Sequence of variant mappings ({ram, price, quantity}).

    Returns:
        Parsed variants, in input order.

    Raises:
        ValidationError: If the sequence is empty or any variant is invalid.
    """
    if not isinstance(variants, Sequence) or isinstance(variants, (str, bytes)) or not variants:
        raise ValidationError(
            "At least one variant is required",
            details=[ErrorIssue(message="At least one variant is required", field="variants")],
        )

    issues: list[ErrorIssue] = []
    parsed: list[Variant] = []
    for index, raw in enumerate(variants):
        prefix = f"variants[{index}]"
        if not isinstance(raw, dict):
            issues.append(ErrorIssue(message="Variant must be an object", field=prefix))
            continue

        ram = raw.get("ram")
        price = raw.get("price")
        quantity = raw.get("quantity")
        before = len(issues)

        if not isinstance(ram, str) or not ram.strip():
            issues.append(ErrorIssue(message="RAM specification is required", field=f"{prefix}.ram"))

        if price is None:
            issues.append(ErrorIssue(message="Price is required", field=f"{prefix}.price"))
        elif not _is_number(price):
            issues.append(ErrorIssue(message="Price must be a number", field=f"{prefix}.price"))
        elif price < 0:
            issues.append(ErrorIssue(message="Price cannot be negative", field=f"{prefix}.price"))

        if quantity is None:
            issues.append(ErrorIssue(message="Quantity is required", field=f"{prefix}.quantity"))
        elif not isinstance(quantity, Integral) or isinstance(quantity, bool):
            issues.append(
                ErrorIssue(message="Quantity must be an integer", field=f"{prefix}.quantity")
            )
        elif quantity < 0:
            issues.append(
                ErrorIssue(message="Quantity cannot be negative", field=f"{prefix}.quantity")
            )

        if len(issues) == before:
            parsed.append(Variant(ram=ram.strip(), price=price, quantity=int(quantity)))

    if issues:
        raise ValidationError("Invalid variants", details=issues)
    return parsed


async def derive_category_from_subcategory(
    store: "DocumentStore",
    sub_category_id: str,
) -> tuple[SubCategory, Category]:
    """Resolve a subcategory and the category a product under it belongs to.

    This is the only place a product's denormalized category is computed.

    Args:
        store: Document store.
        sub_category_id: Subcategory id.

    Returns:
        The subcategory and its parent category.

    Raises:
        NotFoundError: If the subcategory or its category does not exist.
    """
    document = await store.find_by_id(SUBCATEGORIES, sub_category_id)
    if document is None:
        raise NotFoundError("Subcategory", sub_category_id)
    sub_category = SubCategory.from_document(document)

    parent = await store.find_by_id(CATEGORIES, sub_category.category)
    if parent is None:
        raise NotFoundError("Category", sub_category.category)
    return sub_category, Category.from_document(parent)


async def resync_product_categories(
    store: "DocumentStore",
    sub_category_id: str,
    category_id: str,
) -> int:
    """Point the denormalized category of a subcategory's products at its new parent.

    Args:
        store: Document store.
        sub_category_id: Subcategory that was moved.
        category_id: Its new parent category.

    Returns:
        Number of products rewritten.
    """
    updated = await store.update_many(
        PRODUCTS,
        (Equals("sub_category", sub_category_id), NotEquals("category", category_id)),
        {"category": category_id},
    )
    if updated:
        logger.info(
            "Resynced product categories",
            sub_category_id=sub_category_id,
            category_id=category_id,
            products=updated,
        )
    return updated

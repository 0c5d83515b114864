"""Integrity and query engine.

Builds list queries and pagination shared by every list endpoint and
enforces the referential-integrity rules of the catalog hierarchy.
"""

from storefront.catalog.integrity import (
    assert_no_children,
    assert_parent_active,
    assert_unique_sibling_name,
    derive_category_from_subcategory,
    resync_product_categories,
    validate_variants,
)
from storefront.catalog.query import (
    CATEGORY_LIST,
    PRODUCT_LIST,
    SUBCATEGORY_LIST,
    Equals,
    In,
    ListConfig,
    ListOptions,
    ListQuery,
    Matches,
    NotEquals,
    PaginatedResult,
    Predicate,
    PriceBetween,
    Sort,
    TextMatches,
    build_list_query,
    build_search_query,
    paginate,
    validate_pagination,
)

__all__ = [
    # Query
    "CATEGORY_LIST",
    "PRODUCT_LIST",
    "SUBCATEGORY_LIST",
    "Equals",
    "In",
    "ListConfig",
    "ListOptions",
    "ListQuery",
    "Matches",
    "NotEquals",
    "PaginatedResult",
    "Predicate",
    "PriceBetween",
    "Sort",
    "TextMatches",
    "build_list_query",
    "build_search_query",
    "paginate",
    "validate_pagination",
    # Integrity
    "assert_no_children",
    "assert_parent_active",
    "assert_unique_sibling_name",
    "derive_category_from_subcategory",
    "resync_product_categories",
    "validate_variants",
]

"""Tests for list query construction and pagination."""

import pytest

from storefront.catalog import (
    CATEGORY_LIST,
    PRODUCT_LIST,
    SUBCATEGORY_LIST,
    Equals,
    ListOptions,
    Matches,
    PaginatedResult,
    PriceBetween,
    TextMatches,
    build_list_query,
    build_search_query,
)
from storefront.catalog.query import Sort, text_score, tokenize
from storefront.domain.exceptions import ValidationError


class TestPaginatedResult:
    """Tests for pagination arithmetic."""

    def test_pagination_block(self) -> None:
        """25 items at 10 per page make 3 pages."""
        result = PaginatedResult(items=[], total=25, page=2, limit=10)
        assert result.pagination() == {
            "current_page": 2,
            "total_pages": 3,
            "total_items": 25,
            "has_next_page": True,
            "has_prev_page": True,
            "limit": 10,
        }

    def test_last_page(self) -> None:
        """The last page has no next page."""
        result = PaginatedResult(items=[], total=25, page=3, limit=10)
        assert result.has_next_page is False
        assert result.has_prev_page is True

    def test_empty_result(self) -> None:
        """No items means zero pages."""
        result = PaginatedResult(items=[], total=0, page=1, limit=10)
        assert result.total_pages == 0
        assert result.has_next_page is False
        assert result.has_prev_page is False

    def test_page_beyond_end(self) -> None:
        """A page past the end still reports totals."""
        result = PaginatedResult(items=[], total=5, page=4, limit=2)
        assert result.total_pages == 3
        assert result.has_next_page is False


class TestBuildListQuery:
    """Tests for build_list_query."""

    def test_defaults(self) -> None:
        """Default options sort newest first with no conditions."""
        query = build_list_query(CATEGORY_LIST, ListOptions())
        assert query.predicate == ()
        assert query.sort == Sort(field="created_at", descending=True)
        assert query.skip == 0

    def test_skip_from_page(self) -> None:
        """Skip is (page - 1) * limit."""
        query = build_list_query(CATEGORY_LIST, ListOptions(page=3, limit=20))
        assert query.skip == 40

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, -5)])
    def test_invalid_pagination(self, page: int, limit: int) -> None:
        """Page and limit must be at least 1."""
        with pytest.raises(ValidationError) as exc_info:
            build_list_query(CATEGORY_LIST, ListOptions(page=page, limit=limit))
        assert exc_info.value.message == "Invalid list parameters"

    def test_invalid_sort_order(self) -> None:
        """Only asc and desc are accepted."""
        with pytest.raises(ValidationError) as exc_info:
            build_list_query(CATEGORY_LIST, ListOptions(sort_order="sideways"))
        assert exc_info.value.details[0].field == "sort_order"

    def test_camel_case_sort_field(self) -> None:
        """camelCase sort fields map to snake_case."""
        query = build_list_query(CATEGORY_LIST, ListOptions(sort_by="updatedAt", sort_order="asc"))
        assert query.sort == Sort(field="updated_at", descending=False)

    def test_unknown_sort_field_falls_back(self) -> None:
        """Unknown sort fields use the default sort."""
        query = build_list_query(CATEGORY_LIST, ListOptions(sort_by="password"))
        assert query.sort.field == "created_at"

    def test_product_rating_sort(self) -> None:
        """Products sort by rating average."""
        query = build_list_query(PRODUCT_LIST, ListOptions(sort_by="rating"))
        assert query.sort.field == "rating.average"

    def test_category_search_is_name_substring(self) -> None:
        """Category search matches name substrings."""
        query = build_list_query(CATEGORY_LIST, ListOptions(search="  pho "))
        assert query.predicate == (Matches("name", "pho"),)

    def test_product_search_is_full_text(self) -> None:
        """Product search uses the full-text condition."""
        query = build_list_query(PRODUCT_LIST, ListOptions(search="fast phone"))
        assert query.predicate == (TextMatches("fast phone"),)

    def test_blank_search_ignored(self) -> None:
        """Whitespace-only search adds no condition."""
        query = build_list_query(PRODUCT_LIST, ListOptions(search="   "))
        assert query.predicate == ()

    def test_filters_not_in_config_are_ignored(self) -> None:
        """Categories ignore category, subcategory and price filters."""
        query = build_list_query(
            CATEGORY_LIST,
            ListOptions(category="c1", sub_category="s1", min_price=1, is_active=False),
        )
        assert query.predicate == (Equals("is_active", False),)

    def test_subcategory_filters(self) -> None:
        """Subcategories filter by category."""
        query = build_list_query(SUBCATEGORY_LIST, ListOptions(category="c1"))
        assert query.predicate == (Equals("category", "c1"),)

    def test_product_filters(self) -> None:
        """Products combine every supported filter."""
        query = build_list_query(
            PRODUCT_LIST,
            ListOptions(is_active=True, category="c1", sub_category="s1", min_price=10, max_price=50),
        )
        assert query.predicate == (
            Equals("is_active", True),
            Equals("category", "c1"),
            Equals("sub_category", "s1"),
            PriceBetween(10, 50),
        )

    def test_inverted_price_bounds(self) -> None:
        """min_price above max_price is rejected."""
        with pytest.raises(ValidationError):
            build_list_query(PRODUCT_LIST, ListOptions(min_price=100, max_price=10))

    def test_negative_price_bound(self) -> None:
        """Negative bounds are rejected."""
        with pytest.raises(ValidationError):
            build_list_query(PRODUCT_LIST, ListOptions(min_price=-1))


class TestBuildSearchQuery:
    """Tests for build_search_query."""

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_query_rejected(self, text) -> None:
        """Blank queries are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            build_search_query(text)
        assert exc_info.value.message == "Search query is required"

    def test_only_active_products(self) -> None:
        """Search always restricts to active products."""
        query = build_search_query(" phone ", page=2, limit=5)
        assert query.relevance == "phone"
        assert Equals("is_active", True) in query.predicate
        assert query.skip == 5

    def test_invalid_pagination(self) -> None:
        """Search validates pagination too."""
        with pytest.raises(ValidationError):
            build_search_query("phone", page=0)


class TestConditions:
    """Tests for in-memory condition evaluation."""

    def test_tokenize_lowercases(self) -> None:
        """Tokens are lowercase words."""
        assert tokenize("Fast, PHONE!") == ["fast", "phone"]

    def test_text_score_any_term(self) -> None:
        """A single matching term is enough."""
        document = {"title": "Pixel Phone", "description": "Great camera"}
        assert text_score(document, ["phone", "laptop"]) == 1.0
        assert text_score(document, ["laptop"]) == 0.0

    def test_exact_match_is_case_insensitive(self) -> None:
        """Exact matches ignore case but not extra characters."""
        condition = Matches("name", "phones", exact=True)
        assert condition.matches({"name": "Phones"})
        assert not condition.matches({"name": "Phones Plus"})

    def test_price_between_needs_single_variant(self) -> None:
        """Both bounds must hold for the same variant."""
        document = {"variants": [{"price": 5}, {"price": 500}]}
        assert not PriceBetween(10, 100).matches(document)
        assert PriceBetween(10, None).matches(document)

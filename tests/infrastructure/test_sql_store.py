"""Tests for SQL predicate compilation."""

import pytest
from sqlalchemy.dialects import postgresql

from storefront.catalog import Equals, In, Matches, NotEquals, PriceBetween, TextMatches
from storefront.domain import CATEGORIES, PRODUCTS, SUBCATEGORIES
from storefront.infrastructure.sql_store import compile_condition


def render(expression) -> str:
    """Render an expression as PostgreSQL with inlined parameters."""
    return str(
        expression.compile(
            dialect=postgresql.dialect(),
            compile_kwargs={"literal_binds": True},
        )
    )


class TestCompileCondition:
    """Tests for compile_condition."""

    def test_equals(self) -> None:
        """Equals compiles to an equality on the mapped column."""
        sql = render(compile_condition(SUBCATEGORIES, Equals("category", "c1")))
        assert sql == "subcategories.category_id = 'c1'"

    def test_equals_none(self) -> None:
        """Equals None compiles to IS NULL."""
        sql = render(compile_condition(CATEGORIES, Equals("description", None)))
        assert sql == "categories.description IS NULL"

    def test_not_equals(self) -> None:
        """NotEquals compiles to an inequality."""
        sql = render(compile_condition(CATEGORIES, NotEquals("id", "c1")))
        assert sql == "categories.id != 'c1'"

    def test_in(self) -> None:
        """In compiles to IN."""
        sql = render(compile_condition(PRODUCTS, In("id", ("a", "b"))))
        assert "products.id IN ('a', 'b')" in sql

    def test_exact_match_lowercases(self) -> None:
        """Exact matches compare lowercased values."""
        sql = render(compile_condition(CATEGORIES, Matches("name", "Phones", exact=True)))
        assert sql == "lower(categories.name) = 'phones'"

    def test_substring_match_escapes_wildcards(self) -> None:
        """Substring matches use ILIKE with escaped wildcards."""
        sql = render(compile_condition(CATEGORIES, Matches("name", "50%_off")))
        assert "ILIKE" in sql.upper()
        assert "ESCAPE" in sql.upper()
        assert "\\%" in sql

    def test_price_between_uses_exists(self) -> None:
        """Price bounds check a single variant."""
        sql = render(compile_condition(PRODUCTS, PriceBetween(10, 20)))
        assert "EXISTS" in sql
        assert "product_variants.price >=" in sql
        assert "product_variants.price <=" in sql

    def test_text_matches(self) -> None:
        """Full-text search OR-combines the terms."""
        sql = render(compile_condition(PRODUCTS, TextMatches("Fast Phone")))
        assert "to_tsvector" in sql
        assert "'fast | phone'" in sql

    def test_dotted_rating_field(self) -> None:
        """Nested document paths map to flat columns."""
        sql = render(compile_condition(PRODUCTS, Equals("rating.average", 5)))
        assert sql.startswith("products.rating_average = 5")

    def test_unknown_field(self) -> None:
        """Unknown fields are rejected."""
        with pytest.raises(ValueError):
            compile_condition(CATEGORIES, Equals("password", "x"))

    def test_price_on_categories(self) -> None:
        """Price bounds only apply to products."""
        with pytest.raises(ValueError):
            compile_condition(CATEGORIES, PriceBetween(1, 2))

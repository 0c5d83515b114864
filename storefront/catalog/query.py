"""List query construction and pagination.

Turns request-level list options into a store predicate, a sort key and
pagination bounds, and runs the resulting query against a document store.
The same builder serves every list endpoint; a ListConfig parameterizes
it per entity.
"""

import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Literal, TypeVar

from storefront.domain.entities import CATEGORIES, PRODUCTS, SUBCATEGORIES
from storefront.domain.exceptions import ErrorIssue, ValidationError

if TYPE_CHECKING:
    from storefront.infrastructure.document_store import DocumentStore

T = TypeVar("T")

TEXT_FIELDS = ("title", "description")

_TOKEN_PATTERN = re.compile(r"\w+")
_CAMEL_PATTERN = re.compile(r"(?<!^)(?=[A-Z])")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens."""
    return _TOKEN_PATTERN.findall(text.lower())


def text_score(document: dict[str, Any], terms: Sequence[str]) -> float:
    """Relevance of a document for a set of search terms.

    Counts occurrences of each term in the text-indexed fields. Any
    single matching term is enough for a non-zero score.
    """
    wanted = set(terms)
    score = 0
    for name in TEXT_FIELDS:
        value = document.get(name)
        if value:
            score += sum(1 for token in tokenize(str(value)) if token in wanted)
    return float(score)


def get_path(document: dict[str, Any], path: str) -> Any:
    """Read a possibly dotted field path from a document."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


# ============================================================================
# Predicate Conditions
# ============================================================================


@dataclass(frozen=True)
class Equals:
    """Field equals value exactly."""

    field: str
    value: Any

    def matches(self, document: dict[str, Any]) -> bool:
        return get_path(document, self.field) == self.value


@dataclass(frozen=True)
class NotEquals:
    """Field differs from value."""

    field: str
    value: Any

    def matches(self, document: dict[str, Any]) -> bool:
        return get_path(document, self.field) != self.value


@dataclass(frozen=True)
class In:
    """Field is one of the given values."""

    field: str
    values: tuple[Any, ...]

    def matches(self, document: dict[str, Any]) -> bool:
        return get_path(document, self.field) in self.values


@dataclass(frozen=True)
class Matches:
    """Case-insensitive literal match on a string field.

    With ``exact`` the whole value must match; otherwise the text may
    appear anywhere in the value.
    """

    field: str
    text: str
    exact: bool = False

    def matches(self, document: dict[str, Any]) -> bool:
        value = get_path(document, self.field)
        if value is None:
            return False
        if self.exact:
            return str(value).casefold() == self.text.casefold()
        return self.text.casefold() in str(value).casefold()


@dataclass(frozen=True)
class PriceBetween:
    """Some single variant's price lies within the bounds."""

    min_price: float | None = None
    max_price: float | None = None

    def matches(self, document: dict[str, Any]) -> bool:
        for variant in document.get("variants") or []:
            price = variant.get("price")
            if price is None:
                continue
            if self.min_price is not None and price < self.min_price:
                continue
            if self.max_price is not None and price > self.max_price:
                continue
            return True
        return False


@dataclass(frozen=True)
class TextMatches:
    """Full-text match on the text-indexed fields."""

    query: str

    @property
    def terms(self) -> list[str]:
        return tokenize(self.query)

    def matches(self, document: dict[str, Any]) -> bool:
        return text_score(document, self.terms) > 0


Condition = Equals | NotEquals | In | Matches | PriceBetween | TextMatches
Predicate = tuple[Condition, ...]


def matches_all(predicate: Predicate, document: dict[str, Any]) -> bool:
    """Evaluate a predicate (AND of its conditions) against a document."""
    return all(condition.matches(document) for condition in predicate)


@dataclass(frozen=True)
class Sort:
    """Sort key for a query."""

    field: str = "created_at"
    descending: bool = True


# ============================================================================
# List Configuration and Options
# ============================================================================


SearchMode = Literal["name", "text"]


@dataclass(frozen=True)
class ListConfig:
    """Per-entity parameterization of the list query builder.

    Attributes:
        collection: Collection to query.
        search_mode: "name" for substring match on name, "text" for full-text.
        filters: Option names honored by this listing.
        sortable: Accepted sort fields mapped to document paths.
    """

    collection: str
    search_mode: SearchMode
    filters: frozenset[str]
    sortable: dict[str, str]
    default_sort: str = "created_at"


CATEGORY_LIST = ListConfig(
    collection=CATEGORIES,
    search_mode="name",
    filters=frozenset({"is_active"}),
    sortable={
        "created_at": "created_at",
        "updated_at": "updated_at",
        "name": "name",
    },
)

SUBCATEGORY_LIST = ListConfig(
    collection=SUBCATEGORIES,
    search_mode="name",
    filters=frozenset({"is_active", "category"}),
    sortable={
        "created_at": "created_at",
        "updated_at": "updated_at",
        "name": "name",
    },
)

PRODUCT_LIST = ListConfig(
    collection=PRODUCTS,
    search_mode="text",
    filters=frozenset({"is_active", "category", "sub_category", "price"}),
    sortable={
        "created_at": "created_at",
        "updated_at": "updated_at",
        "title": "title",
        "rating": "rating.average",
    },
)


@dataclass
class ListOptions:
    """Options accepted by list endpoints.

    Attributes:
        page: Page number (1-indexed).
        limit: Items per page.
        search: Name substring or full-text query, depending on the entity.
        is_active: Filter by active flag; None means no filter.
        category: Filter by category id.
        sub_category: Filter by subcategory id.
        min_price: Lower bound on some variant's price.
        max_price: Upper bound on some variant's price.
        sort_by: Sort field (snake_case or camelCase).
        sort_order: "asc" or "desc".
    """

    page: int = 1
    limit: int = 10
    search: str | None = None
    is_active: bool | None = None
    category: str | None = None
    sub_category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


@dataclass(frozen=True)
class ListQuery:
    """A fully built list query.

    Attributes:
        collection: Collection to query.
        predicate: Conditions combined with AND.
        sort: Sort key (ignored when ranking by relevance).
        page: Requested page.
        limit: Page size.
        relevance: Search text to rank by, for relevance-ordered queries.
    """

    collection: str
    predicate: Predicate
    sort: Sort
    page: int
    limit: int
    relevance: str | None = None

    @property
    def skip(self) -> int:
        """Number of documents to skip for the requested page."""
        return (self.page - 1) * self.limit


def _snake_case(name: str) -> str:
    return _CAMEL_PATTERN.sub("_", name).lower()


def _check_page(page: int, limit: int, issues: list[ErrorIssue]) -> None:
    if page < 1:
        issues.append(ErrorIssue(message="Page must be at least 1", field="page"))
    if limit < 1:
        issues.append(ErrorIssue(message="Limit must be at least 1", field="limit"))


def validate_pagination(page: int, limit: int) -> None:
    """Fail unless page and limit are both at least 1.

    Raises:
        ValidationError: Listing each invalid bound.
    """
    issues: list[ErrorIssue] = []
    _check_page(page, limit, issues)
    if issues:
        raise ValidationError("Invalid list parameters", details=issues)


def build_list_query(config: ListConfig, options: ListOptions) -> ListQuery:
    """Build a list query from request options.

    Args:
        config: Entity-specific list configuration.
        options: Request options.

    Returns:
        The list query.

    Raises:
        ValidationError: If pagination, sort order or price bounds are invalid.
    """
    issues: list[ErrorIssue] = []
    _check_page(options.page, options.limit, issues)

    sort_order = (options.sort_order or "desc").lower()
    if sort_order not in ("asc", "desc"):
        issues.append(ErrorIssue(message="Sort order must be 'asc' or 'desc'", field="sort_order"))

    conditions: list[Condition] = []

    search = (options.search or "").strip()
    if search:
        if config.search_mode == "text":
            conditions.append(TextMatches(search))
        else:
            conditions.append(Matches("name", search))

    if "is_active" in config.filters and options.is_active is not None:
        conditions.append(Equals("is_active", options.is_active))

    if "category" in config.filters and options.category:
        conditions.append(Equals("category", options.category))

    if "sub_category" in config.filters and options.sub_category:
        conditions.append(Equals("sub_category", options.sub_category))

    if "price" in config.filters and (
        options.min_price is not None or options.max_price is not None
    ):
        for name in ("min_price", "max_price"):
            value = getattr(options, name)
            if value is not None and value < 0:
                issues.append(ErrorIssue(message="Price bounds cannot be negative", field=name))
        if (
            options.min_price is not None
            and options.max_price is not None
            and options.min_price > options.max_price
        ):
            issues.append(
                ErrorIssue(message="min_price cannot exceed max_price", field="min_price")
            )
        conditions.append(PriceBetween(options.min_price, options.max_price))

    if issues:
        raise ValidationError("Invalid list parameters", details=issues)

    sort_field = config.sortable.get(
        _snake_case(options.sort_by or config.default_sort),
        config.sortable[config.default_sort],
    )

    return ListQuery(
        collection=config.collection,
        predicate=tuple(conditions),
        sort=Sort(field=sort_field, descending=sort_order == "desc"),
        page=options.page,
        limit=options.limit,
    )


def build_search_query(query: str | None, page: int = 1, limit: int = 10) -> ListQuery:
    """Build a relevance-ranked full-text query over active products.

    Args:
        query: Search text.
        page: Page number.
        limit: Page size.

    Returns:
        The list query, ranked by relevance.

    Raises:
        ValidationError: If the trimmed query is empty or pagination is invalid.
    """
    text = (query or "").strip()
    if not text:
        raise ValidationError(
            "Search query is required",
            details=[ErrorIssue(message="Search query is required", field="q")],
        )
    validate_pagination(page, limit)

    return ListQuery(
        collection=PRODUCTS,
        predicate=(TextMatches(text), Equals("is_active", True)),
        sort=Sort(),
        page=page,
        limit=limit,
        relevance=text,
    )


# ============================================================================
# Pagination
# ============================================================================


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: Items on the current page.
        total: Total matching items.
        page: Current page.
        limit: Items per page.
    """

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1

    def pagination(self) -> dict[str, Any]:
        """Pagination block for list payloads."""
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total_items": self.total,
            "has_next_page": self.has_next_page,
            "has_prev_page": self.has_prev_page,
            "limit": self.limit,
        }


async def paginate(
    store: "DocumentStore",
    query: ListQuery,
    factory: Callable[[dict[str, Any]], T],
) -> PaginatedResult[T]:
    """Run a list query and wrap the page with its pagination block.

    Args:
        store: Document store to query.
        query: Built list query.
        factory: Converts a stored document into the result item type.

    Returns:
        Paginated result.
    """
    if query.relevance is not None:
        documents = await store.text_search(
            query.collection,
            query.relevance,
            predicate=query.predicate,
            skip=query.skip,
            limit=query.limit,
        )
    else:
        documents = await store.find(
            query.collection,
            query.predicate,
            sort=query.sort,
            skip=query.skip,
            limit=query.limit,
        )
    total = await store.count(query.collection, query.predicate)
    return PaginatedResult(
        items=[factory(document) for document in documents],
        total=total,
        page=query.page,
        limit=query.limit,
    )

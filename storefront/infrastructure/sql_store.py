"""SQL document store.

Maps the document store interface onto the relational schema in
``storefront.infrastructure.models``. Predicates compile to SQLAlchemy
expressions; full-text search uses PostgreSQL ``to_tsvector`` and
``ts_rank``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import String, and_, false, func, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from storefront.catalog.query import (
    Condition,
    Equals,
    In,
    Matches,
    NotEquals,
    Predicate,
    PriceBetween,
    Sort,
    TextMatches,
    tokenize,
)
from storefront.domain.base import utc_now
from storefront.domain.entities import CATEGORIES, PRODUCTS, SUBCATEGORIES, USERS
from storefront.domain.exceptions import DuplicateKeyError, StorageError
from storefront.infrastructure.database import create_session_factory
from storefront.infrastructure.models import (
    CategoryModel,
    ProductModel,
    ProductVariantModel,
    SubCategoryModel,
    UserModel,
)

logger = structlog.get_logger()

MODELS = {
    CATEGORIES: CategoryModel,
    SUBCATEGORIES: SubCategoryModel,
    PRODUCTS: ProductModel,
    USERS: UserModel,
}

# Document field -> mapped column, per collection
COLUMNS: dict[str, dict[str, Any]] = {
    CATEGORIES: {
        "id": CategoryModel.id,
        "name": CategoryModel.name,
        "description": CategoryModel.description,
        "is_active": CategoryModel.is_active,
        "created_by": CategoryModel.created_by,
        "created_at": CategoryModel.created_at,
        "updated_at": CategoryModel.updated_at,
    },
    SUBCATEGORIES: {
        "id": SubCategoryModel.id,
        "name": SubCategoryModel.name,
        "category": SubCategoryModel.category_id,
        "description": SubCategoryModel.description,
        "is_active": SubCategoryModel.is_active,
        "created_by": SubCategoryModel.created_by,
        "created_at": SubCategoryModel.created_at,
        "updated_at": SubCategoryModel.updated_at,
    },
    PRODUCTS: {
        "id": ProductModel.id,
        "title": ProductModel.title,
        "description": ProductModel.description,
        "sub_category": ProductModel.sub_category_id,
        "category": ProductModel.category_id,
        "rating.average": ProductModel.rating_average,
        "rating.count": ProductModel.rating_count,
        "is_active": ProductModel.is_active,
        "created_by": ProductModel.created_by,
        "created_at": ProductModel.created_at,
        "updated_at": ProductModel.updated_at,
    },
    USERS: {
        "id": UserModel.id,
        "email": UserModel.email,
        "name": UserModel.name,
        "role": UserModel.role,
        "is_active": UserModel.is_active,
        "created_at": UserModel.created_at,
        "updated_at": UserModel.updated_at,
    },
}

UNIQUE_FIELDS = {
    CATEGORIES: ("name",),
    SUBCATEGORIES: ("name", "category"),
    USERS: ("email",),
}


# ============================================================================
# Predicate Compilation
# ============================================================================


def product_vector():
    """Full-text vector over product title and description."""
    return func.to_tsvector(
        "english",
        func.coalesce(ProductModel.title, "") + " " + func.coalesce(ProductModel.description, ""),
    )


def product_query(terms: list[str]):
    """OR-combined ts_query for a list of word tokens."""
    return func.to_tsquery("english", " | ".join(terms))


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _column(collection: str, name: str):
    try:
        return COLUMNS[collection][name]
    except KeyError:
        raise ValueError(f"Field {name!r} is not queryable on {collection}") from None


def compile_condition(collection: str, condition: Condition):
    """Compile one predicate condition into a SQLAlchemy expression.

    Args:
        collection: Collection the condition applies to.
        condition: Condition to compile.

    Returns:
        A boolean SQL expression.

    Raises:
        ValueError: If the field or condition is not supported.
    """
    if isinstance(condition, Equals):
        column = _column(collection, condition.field)
        return column.is_(None) if condition.value is None else column == condition.value

    if isinstance(condition, NotEquals):
        column = _column(collection, condition.field)
        return column.is_not(None) if condition.value is None else column != condition.value

    if isinstance(condition, In):
        return _column(collection, condition.field).in_(list(condition.values))

    if isinstance(condition, Matches):
        column = _column(collection, condition.field)
        if condition.exact:
            return func.lower(column) == condition.text.lower()
        return column.ilike(f"%{_escape_like(condition.text)}%", escape="\\")

    if isinstance(condition, PriceBetween):
        if collection != PRODUCTS:
            raise ValueError(f"Price bounds are not supported on {collection}")
        bounds = []
        if condition.min_price is not None:
            bounds.append(ProductVariantModel.price >= condition.min_price)
        if condition.max_price is not None:
            bounds.append(ProductVariantModel.price <= condition.max_price)
        return ProductModel.variants.any(and_(*bounds))

    if isinstance(condition, TextMatches):
        if collection != PRODUCTS:
            raise ValueError(f"Full-text search is not supported on {collection}")
        terms = condition.terms
        if not terms:
            return false()
        return product_vector().op("@@")(product_query(terms))

    raise ValueError(f"Unsupported condition: {condition!r}")


def compile_predicate(collection: str, predicate: Predicate) -> list[Any]:
    """Compile a predicate into a list of AND-ed SQL expressions."""
    return [compile_condition(collection, condition) for condition in predicate]


def _order_by(collection: str, sort: Sort) -> list[Any]:
    column = _column(collection, sort.field)
    key = func.lower(column) if isinstance(column.type, String) else column
    model = MODELS[collection]
    if sort.descending:
        return [key.desc(), model.created_at.desc()]
    return [key.asc(), model.created_at.asc()]


# ============================================================================
# Store
# ============================================================================


class SqlDocumentStore:
    """Document store on SQLAlchemy async.

    Each operation runs in its own session and commits on success.
    Unique index violations surface as DuplicateKeyError; any other
    database failure surfaces as StorageError.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize the store.

        Args:
            engine: Async engine to open sessions on.
        """
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @property
    def engine(self) -> AsyncEngine:
        """Engine the store runs on."""
        return self._engine

    @asynccontextmanager
    async def _session(self, collection: str, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if "duplicate key" in str(e.orig).lower():
                    raise DuplicateKeyError(
                        collection, UNIQUE_FIELDS.get(collection, ("id",))
                    ) from e
                logger.error(
                    "Integrity error",
                    collection=collection,
                    operation=operation,
                    error=str(e),
                )
                raise StorageError("Database integrity error") from e
            except (SQLAlchemyError, OSError) as e:
                await session.rollback()
                logger.error(
                    "Database operation failed",
                    collection=collection,
                    operation=operation,
                    error=str(e),
                )
                raise StorageError("Database operation failed") from e

    async def find(
        self,
        collection: str,
        predicate: Predicate = (),
        sort: Sort | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        model = MODELS[collection]
        query = select(model).where(*compile_predicate(collection, predicate))
        if sort is not None:
            query = query.order_by(*_order_by(collection, sort))
        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        async with self._session(collection, "find") as session:
            result = await session.execute(query)
            return [row.to_document() for row in result.scalars().all()]

    async def find_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None:
        async with self._session(collection, "find_by_id") as session:
            row = await session.get(MODELS[collection], document_id)
            return row.to_document() if row is not None else None

    async def count(self, collection: str, predicate: Predicate = ()) -> int:
        query = (
            select(func.count())
            .select_from(MODELS[collection])
            .where(*compile_predicate(collection, predicate))
        )
        async with self._session(collection, "count") as session:
            result = await session.execute(query)
            return result.scalar_one()

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        now = utc_now()
        row = MODELS[collection]()
        row.apply(
            {
                **document,
                "created_at": document.get("created_at") or now,
                "updated_at": document.get("updated_at") or document.get("created_at") or now,
            }
        )
        async with self._session(collection, "insert") as session:
            session.add(row)
            await session.flush()
            return row.to_document()

    async def update_by_id(
        self, collection: str, document_id: str, patch: dict[str, Any]
    ) -> dict[str, Any] | None:
        async with self._session(collection, "update_by_id") as session:
            row = await session.get(MODELS[collection], document_id)
            if row is None:
                return None
            row.apply({k: v for k, v in patch.items() if k != "id"})
            row.updated_at = utc_now()
            await session.flush()
            return row.to_document()

    async def update_many(
        self, collection: str, predicate: Predicate, patch: dict[str, Any]
    ) -> int:
        values = {_column(collection, name).key: value for name, value in patch.items()}
        values["updated_at"] = utc_now()
        statement = (
            update(MODELS[collection])
            .where(*compile_predicate(collection, predicate))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self._session(collection, "update_many") as session:
            result = await session.execute(statement)
            return result.rowcount

    async def delete_by_id(self, collection: str, document_id: str) -> bool:
        async with self._session(collection, "delete_by_id") as session:
            row = await session.get(MODELS[collection], document_id)
            if row is None:
                return False
            await session.delete(row)
            return True

    async def text_search(
        self,
        collection: str,
        query: str,
        predicate: Predicate = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        terms = tokenize(query)
        if collection != PRODUCTS or not terms:
            return []
        rank = func.ts_rank(product_vector(), product_query(terms))
        statement = (
            select(ProductModel)
            .where(product_vector().op("@@")(product_query(terms)))
            .where(*compile_predicate(collection, predicate))
            .order_by(rank.desc(), ProductModel.created_at.desc())
            .offset(skip)
        )
        if limit is not None:
            statement = statement.limit(limit)

        async with self._session(collection, "text_search") as session:
            result = await session.execute(statement)
            return [row.to_document() for row in result.scalars().all()]

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database ping failed", error=str(e))
            return False
        return True

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Database engine disposed")

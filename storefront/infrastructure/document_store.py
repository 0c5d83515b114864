"""Document store interface and in-memory adapter.

The catalog persists four collections (categories, subcategories,
products, users) as plain documents. Services talk to the store only
through the DocumentStore protocol; the in-memory adapter backs tests
and local development, the SQL adapter backs production.
"""

import copy
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import uuid4

import structlog

from storefront.catalog.query import Predicate, Sort, get_path, matches_all, text_score, tokenize
from storefront.domain.base import utc_now
from storefront.domain.entities import CATEGORIES, SUBCATEGORIES, USERS
from storefront.domain.exceptions import DuplicateKeyError

logger = structlog.get_logger()

Document = dict[str, Any]


class DocumentStore(Protocol):
    """Async document store used by every entity service."""

    async def find(
        self,
        collection: str,
        predicate: Predicate = (),
        sort: Sort | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        """Find documents matching a predicate."""
        ...

    async def find_by_id(self, collection: str, document_id: str) -> Document | None:
        """Get a document by id."""
        ...

    async def count(self, collection: str, predicate: Predicate = ()) -> int:
        """Count documents matching a predicate."""
        ...

    async def insert(self, collection: str, document: Document) -> Document:
        """Insert a document, assigning id and timestamps."""
        ...

    async def update_by_id(
        self, collection: str, document_id: str, patch: Document
    ) -> Document | None:
        """Apply a partial update; None if the document does not exist."""
        ...

    async def update_many(self, collection: str, predicate: Predicate, patch: Document) -> int:
        """Apply a partial update to every matching document."""
        ...

    async def delete_by_id(self, collection: str, document_id: str) -> bool:
        """Delete a document; False if it did not exist."""
        ...

    async def text_search(
        self,
        collection: str,
        query: str,
        predicate: Predicate = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        """Full-text search ranked by relevance, highest first."""
        ...

    async def ping(self) -> bool:
        """Check the store is reachable."""
        ...

    async def close(self) -> None:
        """Release resources held by the store."""
        ...


# ============================================================================
# Unique Indexes
# ============================================================================


@dataclass(frozen=True)
class UniqueIndex:
    """A unique index over one or more fields.

    Attributes:
        fields: Indexed fields.
        case_insensitive: Fields compared case-insensitively.
    """

    fields: tuple[str, ...]
    case_insensitive: tuple[str, ...] = ()

    def key(self, document: Document) -> tuple[Any, ...]:
        """Index key of a document."""
        values = []
        for name in self.fields:
            value = document.get(name)
            if name in self.case_insensitive and isinstance(value, str):
                value = value.casefold()
            values.append(value)
        return tuple(values)


UNIQUE_INDEXES: dict[str, tuple[UniqueIndex, ...]] = {
    CATEGORIES: (UniqueIndex(("name",), case_insensitive=("name",)),),
    SUBCATEGORIES: (UniqueIndex(("name", "category"), case_insensitive=("name",)),),
    USERS: (UniqueIndex(("email",), case_insensitive=("email",)),),
}


# ============================================================================
# In-Memory Adapter
# ============================================================================


def _sort_key(path: str):
    def key(document: Document) -> tuple[bool, Any]:
        value = get_path(document, path)
        if isinstance(value, str):
            value = value.casefold()
        return (value is not None, value)

    return key


def _page(documents: list[Document], skip: int, limit: int | None) -> list[Document]:
    end = None if limit is None else skip + limit
    return documents[skip:end]


class InMemoryDocumentStore:
    """In-memory document store.

    Keeps each collection as an insertion-ordered dict of documents and
    enforces the same unique indexes as the SQL schema. Documents are
    copied on the way in and out so callers never share state with the
    store.
    """

    def __init__(
        self,
        unique_indexes: dict[str, tuple[UniqueIndex, ...]] | None = None,
    ) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._unique_indexes = UNIQUE_INDEXES if unique_indexes is None else unique_indexes

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def _check_unique(self, collection: str, document: Document) -> None:
        for index in self._unique_indexes.get(collection, ()):
            key = index.key(document)
            for other in self._collection(collection).values():
                if other["id"] != document["id"] and index.key(other) == key:
                    raise DuplicateKeyError(collection, index.fields)

    def _matching(self, collection: str, predicate: Predicate) -> Iterable[Document]:
        return (d for d in self._collection(collection).values() if matches_all(predicate, d))

    async def find(
        self,
        collection: str,
        predicate: Predicate = (),
        sort: Sort | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        documents = list(self._matching(collection, predicate))
        if sort is not None:
            documents.sort(key=_sort_key(sort.field), reverse=sort.descending)
        return copy.deepcopy(_page(documents, skip, limit))

    async def find_by_id(self, collection: str, document_id: str) -> Document | None:
        document = self._collection(collection).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def count(self, collection: str, predicate: Predicate = ()) -> int:
        return sum(1 for _ in self._matching(collection, predicate))

    async def insert(self, collection: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored["id"] = stored.get("id") or str(uuid4())
        now = utc_now()
        stored.setdefault("created_at", now)
        stored["updated_at"] = stored.get("updated_at") or stored["created_at"]
        if stored["id"] in self._collection(collection):
            raise DuplicateKeyError(collection, ("id",))
        self._check_unique(collection, stored)
        self._collection(collection)[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update_by_id(
        self, collection: str, document_id: str, patch: Document
    ) -> Document | None:
        current = self._collection(collection).get(document_id)
        if current is None:
            return None
        updated = {**copy.deepcopy(current), **copy.deepcopy(patch)}
        updated["id"] = document_id
        updated["updated_at"] = utc_now()
        self._check_unique(collection, updated)
        self._collection(collection)[document_id] = updated
        return copy.deepcopy(updated)

    async def update_many(self, collection: str, predicate: Predicate, patch: Document) -> int:
        ids = [d["id"] for d in self._matching(collection, predicate)]
        for document_id in ids:
            await self.update_by_id(collection, document_id, patch)
        return len(ids)

    async def delete_by_id(self, collection: str, document_id: str) -> bool:
        return self._collection(collection).pop(document_id, None) is not None

    async def text_search(
        self,
        collection: str,
        query: str,
        predicate: Predicate = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        terms = tokenize(query)
        scored = [
            (text_score(document, terms), document)
            for document in self._matching(collection, predicate)
        ]
        # Stable sort: equal scores keep insertion order
        ranked = [d for score, d in sorted(scored, key=lambda s: s[0], reverse=True) if score > 0]
        return copy.deepcopy(_page(ranked, skip, limit))

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        logger.debug("In-memory document store closed", collections=len(self._collections))

    def reset(self) -> None:
        """Drop every collection."""
        self._collections.clear()

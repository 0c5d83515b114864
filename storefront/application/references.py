"""Related entity lookup.

Categories, subcategories and products store the ids of their parent
and creator. Responses show those as id/name pairs; this module loads
them with one batched query per collection for a whole page.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from storefront.catalog import In
from storefront.domain.entities import (
    CATEGORIES,
    SUBCATEGORIES,
    USERS,
    Category,
    Product,
    SubCategory,
)
from storefront.infrastructure.document_store import DocumentStore


@dataclass(frozen=True)
class Reference:
    """Display fields of a related entity.

    ``name`` is None when the entity no longer exists.
    """

    id: str
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class References:
    """Resolved references keyed by collection, then id."""

    found: dict[str, dict[str, Reference]] = field(default_factory=dict)

    def get(self, collection: str, entity_id: str) -> Reference:
        return self.found.get(collection, {}).get(entity_id) or Reference(id=entity_id)

    def creator(self, user_id: str | None) -> Reference | None:
        if user_id is None:
            return None
        return self.get(USERS, user_id)


class ReferenceResolver:
    """Loads the parents and creators of catalog entities."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize resolver.

        Args:
            store: Document store.
        """
        self.store = store

    async def load(self, *entities: Category | SubCategory | Product) -> References:
        """Resolve every reference held by the given entities.

        Args:
            entities: Entities whose parents and creators to load.

        Returns:
            References covering each id found; missing ids stay unresolved.
        """
        wanted: dict[str, set[str]] = defaultdict(set)
        for entity in entities:
            if isinstance(entity, Product):
                wanted[CATEGORIES].add(entity.category)
                wanted[SUBCATEGORIES].add(entity.sub_category)
            elif isinstance(entity, SubCategory):
                wanted[CATEGORIES].add(entity.category)
            if entity.created_by:
                wanted[USERS].add(entity.created_by)

        found: dict[str, dict[str, Reference]] = {}
        for collection, ids in wanted.items():
            documents = await self.store.find(collection, (In("id", tuple(sorted(ids))),))
            found[collection] = {
                d["id"]: Reference(id=d["id"], name=d.get("name"), email=d.get("email"))
                for d in documents
            }
        return References(found)

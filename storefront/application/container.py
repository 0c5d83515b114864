"""Application container.

Owns the long-lived collaborators (document store, object store, token
provider, rate limiter) and hands out services bound to them.
"""

from dataclasses import dataclass, field

import structlog

from storefront.application.auth import AuthGate
from storefront.application.category_service import CategoryService
from storefront.application.images import ImageStager
from storefront.application.product_service import ProductService
from storefront.application.rate_limiter import RateLimiter
from storefront.application.references import ReferenceResolver
from storefront.application.subcategory_service import SubCategoryService
from storefront.application.wishlist_service import WishlistService
from storefront.infrastructure.config import Settings, settings as default_settings
from storefront.infrastructure.document_store import DocumentStore, InMemoryDocumentStore
from storefront.infrastructure.object_store import (
    CloudinaryObjectStore,
    InMemoryObjectStore,
    ObjectStore,
)
from storefront.infrastructure.tokens import JwtTokenProvider

logger = structlog.get_logger()


@dataclass
class Container:
    """Long-lived collaborators shared by every request."""

    store: DocumentStore
    object_store: ObjectStore
    token_provider: JwtTokenProvider
    rate_limiter: RateLimiter
    settings: Settings = field(default_factory=lambda: default_settings)

    @property
    def categories(self) -> CategoryService:
        return CategoryService(self.store)

    @property
    def subcategories(self) -> SubCategoryService:
        return SubCategoryService(self.store)

    @property
    def products(self) -> ProductService:
        return ProductService(self.store, self.object_store)

    @property
    def wishlist(self) -> WishlistService:
        return WishlistService(self.store)

    @property
    def references(self) -> ReferenceResolver:
        return ReferenceResolver(self.store)

    @property
    def auth(self) -> AuthGate:
        return AuthGate(self.store, self.token_provider)

    @property
    def image_stager(self) -> ImageStager:
        return ImageStager(
            self.object_store,
            max_files=self.settings.max_images_per_product,
            max_bytes=self.settings.max_image_bytes,
        )

    async def close(self) -> None:
        """Close the stores."""
        await self.store.close()
        await self.object_store.close()


def build_container(config: Settings | None = None) -> Container:
    """Build a container from settings.

    Args:
        config: Settings to use; defaults to the module-level settings.

    Returns:
        Container with the configured store and object store backends.
    """
    config = config or default_settings

    store: DocumentStore
    if config.store_backend == "sql":
        # Imported lazily so the in-memory backend does not need a database driver
        from storefront.infrastructure.database import create_engine
        from storefront.infrastructure.sql_store import SqlDocumentStore

        store = SqlDocumentStore(create_engine(config.database_url))
    else:
        store = InMemoryDocumentStore()

    object_store: ObjectStore
    if config.object_store_backend == "cloudinary":
        object_store = CloudinaryObjectStore(
            cloud_name=config.cloudinary_cloud_name,
            api_key=config.cloudinary_api_key,
            api_secret=config.cloudinary_api_secret,
            folder=config.cloudinary_folder,
            timeout=config.object_store_timeout_seconds,
        )
    else:
        object_store = InMemoryObjectStore()

    logger.info(
        "Container built",
        store_backend=config.store_backend,
        object_store_backend=config.object_store_backend,
    )
    return Container(
        store=store,
        object_store=object_store,
        token_provider=JwtTokenProvider(
            config.jwt_secret,
            algorithm=config.jwt_algorithm,
            expire_minutes=config.jwt_expire_minutes,
        ),
        rate_limiter=RateLimiter(
            window_seconds=config.rate_limit_window_seconds,
            max_requests=config.rate_limit_max_requests,
        ),
        settings=config,
    )

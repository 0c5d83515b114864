"""Object store clients for product images.

Provides the ObjectStore protocol used by the product service, an
in-memory implementation for tests and local development, and a
Cloudinary client talking to the signed REST upload API over httpx.
"""

import hashlib
import time
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import uuid4

import httpx
import structlog

from storefront.domain.exceptions import StorageError

logger = structlog.get_logger()


@dataclass(frozen=True)
class StoredObject:
    """Result of storing an object.

    Attributes:
        storage_id: Identifier used to delete the object later.
        url: Public URL of the object.
    """

    storage_id: str
    url: str


class ObjectStore(Protocol):
    """Async binary object store."""

    async def store(self, data: bytes, filename: str, content_type: str) -> StoredObject:
        """Store an object and return its id and URL."""
        ...

    async def delete(self, storage_id: str) -> None:
        """Delete an object. Deleting a missing id succeeds."""
        ...

    async def close(self) -> None:
        """Release resources held by the client."""
        ...


# ============================================================================
# In-Memory Object Store
# ============================================================================


class InMemoryObjectStore:
    """Object store that keeps objects in a dict."""

    def __init__(self, base_url: str = "memory://objects") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str, str]] = {}

    async def store(self, data: bytes, filename: str, content_type: str) -> StoredObject:
        storage_id = f"product-images/{uuid4().hex}"
        self.objects[storage_id] = (data, filename, content_type)
        return StoredObject(storage_id=storage_id, url=f"{self.base_url}/{storage_id}")

    async def delete(self, storage_id: str) -> None:
        self.objects.pop(storage_id, None)

    async def close(self) -> None:
        self.objects.clear()


# ============================================================================
# Cloudinary Object Store
# ============================================================================


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Compute a Cloudinary request signature.

    Parameters are sorted by name, joined as ``key=value`` pairs with
    ``&``, suffixed with the API secret and hashed with SHA-1.

    Args:
        params: Parameters to sign (excluding file, api_key and signature).
        api_secret: Account API secret.

    Returns:
        Hex-encoded SHA-1 signature.
    """
    payload = "&".join(
        f"{key}={value}" for key, value in sorted(params.items()) if value not in (None, "")
    )
    return hashlib.sha1(f"{payload}{api_secret}".encode()).hexdigest()


class CloudinaryObjectStore:
    """Cloudinary image storage over the signed upload API.

    Example usage:
        store = CloudinaryObjectStore("demo", "key", "secret")
        stored = await store.store(data, "phone.png", "image/png")
        await store.delete(stored.storage_id)
    """

    BASE_URL = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "product-images",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        clock=time.time,
    ) -> None:
        """Initialize the client.

        Args:
            cloud_name: Cloudinary cloud name.
            api_key: API key.
            api_secret: API secret used for signing.
            folder: Folder uploaded images are placed in.
            timeout: Request timeout in seconds.
            client: Optional preconfigured HTTP client.
            clock: Returns the current Unix time.
        """
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self._clock = clock
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _endpoint(self, action: str) -> str:
        return f"{self.BASE_URL}/{self.cloud_name}/image/{action}"

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(self._clock())}
        return {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }

    async def store(self, data: bytes, filename: str, content_type: str) -> StoredObject:
        """Upload an image.

        Raises:
            StorageError: If the upload fails.
        """
        form = self._signed({"folder": self.folder})
        try:
            response = await self._client.post(
                self._endpoint("upload"),
                data=form,
                files={"file": (filename, data, content_type)},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Image upload rejected",
                filename=filename,
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            raise StorageError("Image upload failed") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Image upload failed", filename=filename, error=str(e))
            raise StorageError("Image upload failed") from e

        logger.info("Image uploaded", storage_id=body["public_id"], filename=filename)
        return StoredObject(storage_id=body["public_id"], url=body["secure_url"])

    async def delete(self, storage_id: str) -> None:
        """Destroy an image.

        Raises:
            StorageError: If the request fails or Cloudinary reports an error.
        """
        form = self._signed({"public_id": storage_id})
        try:
            response = await self._client.post(self._endpoint("destroy"), data=form)
            response.raise_for_status()
            result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Image delete failed", storage_id=storage_id, error=str(e))
            raise StorageError("Image delete failed") from e

        if result not in ("ok", "not found"):
            logger.error("Image delete rejected", storage_id=storage_id, result=result)
            raise StorageError("Image delete failed")
        logger.info("Image deleted", storage_id=storage_id, result=result)

    async def close(self) -> None:
        await self._client.aclose()

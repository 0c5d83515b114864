"""Image staging and cleanup for product writes.

Uploads are staged into the object store before the product record is
written. When the write fails, staged images are discarded; discarding
is best-effort and never raises.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from storefront.domain.exceptions import ErrorIssue, StorageError, ValidationError
from storefront.domain.value_objects import ProductImage
from storefront.infrastructure.object_store import ObjectStore

logger = structlog.get_logger()

MAX_IMAGES = 5
MAX_IMAGE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class ImageUpload:
    """A raw uploaded file."""

    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class StagedImage:
    """An image already held by the object store."""

    storage_id: str
    url: str
    original_name: str

    def to_image(self) -> ProductImage:
        """Product image with the original file name as alt text."""
        return ProductImage(storage_id=self.storage_id, url=self.url, alt_text=self.original_name)


async def discard_images(object_store: ObjectStore, storage_ids: Iterable[str]) -> None:
    """Delete images from the object store, logging and skipping failures."""
    for storage_id in storage_ids:
        try:
            await object_store.delete(storage_id)
        except Exception as e:
            logger.warning("Failed to discard image", storage_id=storage_id, error=str(e))


class ImageStager:
    """Validates uploads and stores them in the object store."""

    def __init__(
        self,
        object_store: ObjectStore,
        max_files: int = MAX_IMAGES,
        max_bytes: int = MAX_IMAGE_BYTES,
    ) -> None:
        self.object_store = object_store
        self.max_files = max_files
        self.max_bytes = max_bytes

    def validate(self, uploads: Sequence[ImageUpload]) -> None:
        """Check file count, content types and sizes.

        Raises:
            ValidationError: Listing every rejected file.
        """
        issues: list[ErrorIssue] = []
        if len(uploads) > self.max_files:
            issues.append(
                ErrorIssue(message=f"At most {self.max_files} images are allowed", field="images")
            )
        for index, upload in enumerate(uploads):
            field = f"images[{index}]"
            if not (upload.content_type or "").startswith("image/"):
                issues.append(ErrorIssue(message="Only image files are allowed!", field=field))
            if len(upload.data) > self.max_bytes:
                issues.append(
                    ErrorIssue(
                        message=f"Image exceeds the {self.max_bytes // (1024 * 1024)}MB limit",
                        field=field,
                    )
                )
        if issues:
            raise ValidationError("Invalid images", details=issues)

    async def stage(self, uploads: Sequence[ImageUpload]) -> list[StagedImage]:
        """Validate and store uploads, in order.

        Args:
            uploads: Uploaded files.

        Returns:
            Staged images in upload order.

        Raises:
            ValidationError: If the uploads are rejected.
            StorageError: If storing fails; anything already staged is discarded.
        """
        self.validate(uploads)

        staged: list[StagedImage] = []
        for upload in uploads:
            try:
                stored = await self.object_store.store(
                    upload.data, upload.filename, upload.content_type
                )
            except Exception as e:
                logger.error(
                    "Image staging failed",
                    filename=upload.filename,
                    staged=len(staged),
                    error=str(e),
                )
                await discard_images(self.object_store, [s.storage_id for s in staged])
                if isinstance(e, StorageError):
                    raise
                raise StorageError("Image upload failed") from e
            staged.append(
                StagedImage(
                    storage_id=stored.storage_id,
                    url=stored.url,
                    original_name=upload.filename,
                )
            )
        return staged

"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass
from typing import Any, Self

from storefront.domain.base import ValueObject


@dataclass(frozen=True)
class Variant(ValueObject):
    """A priced, stocked configuration of a product.

    Attributes:
        ram: RAM size label (e.g., "8GB").
        price: Unit price, never negative.
        quantity: Units in stock, never negative.
    """

    ram: str
    price: float
    quantity: int

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        """Create from a stored variant document."""
        return cls(
            ram=data["ram"],
            price=data["price"],
            quantity=data["quantity"],
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {"ram": self.ram, "price": self.price, "quantity": self.quantity}


@dataclass(frozen=True)
class ProductImage(ValueObject):
    """An image attached to a product and held by the object store.

    Attributes:
        storage_id: Object store identifier, used for deletion.
        url: Public URL of the image.
        alt_text: Alternative text (defaults to the uploaded file name).
    """

    storage_id: str
    url: str
    alt_text: str = ""

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        """Create from a stored image document."""
        return cls(
            storage_id=data["storage_id"],
            url=data["url"],
            alt_text=data.get("alt_text") or "",
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {"storage_id": self.storage_id, "url": self.url, "alt_text": self.alt_text}


@dataclass(frozen=True)
class Rating(ValueObject):
    """Aggregated product rating.

    Attributes:
        average: Mean rating between 0 and 5.
        count: Number of ratings.
    """

    average: float = 0.0
    count: int = 0

    def __post_init__(self) -> None:
        """Validate rating bounds."""
        if not 0 <= self.average <= 5:
            raise ValueError(f"Rating average must be between 0 and 5, got {self.average}")
        if self.count < 0:
            raise ValueError(f"Rating count cannot be negative, got {self.count}")

    def to_document(self) -> dict[str, Any]:
        """Convert to a storable document."""
        return {"average": self.average, "count": self.count}


@dataclass(frozen=True)
class PriceRange(ValueObject):
    """Lowest and highest variant price of a product."""

    min: float
    max: float

"""Domain exceptions.

All domain-level errors that represent business rule violations.
Services raise these; the API layer maps each kind to a status code
and a consistent error envelope.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorIssue:
    """A single human-readable problem attached to an error.

    Attributes:
        message: Description of the problem.
        field: Field the problem relates to, if any.
    """

    message: str
    field: str | None = None


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "ERROR"

    def __init__(
        self,
        message: str,
        details: list[ErrorIssue] | None = None,
    ) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional list of individual issues.
        """
        super().__init__(message)
        self.message = message
        self.details = details or []


# ============================================================================
# Client Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised for malformed, missing or out-of-range input.

    Also used for business-rule violations on input, such as creating
    an entity under an inactive parent.
    """

    error_code = "VALIDATION_ERROR"


class ConflictError(DomainError):
    """Raised when a uniqueness or orphan-guard rule is violated."""

    error_code = "CONFLICT"


class DuplicateKeyError(ConflictError):
    """Raised by a document store when a unique index rejects a write."""

    def __init__(self, collection: str, fields: tuple[str, ...]) -> None:
        """Initialize duplicate key error.

        Args:
            collection: Collection holding the unique index.
            fields: Fields covered by the violated index.
        """
        super().__init__(
            f"A record with this {' and '.join(fields)} already exists in {collection}",
            details=[ErrorIssue(message="Duplicate value", field=f) for f in fields],
        )
        self.collection = collection
        self.fields = fields


class NotFoundError(DomainError):
    """Raised when a referenced id does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Human name of the entity (e.g., "Category").
            entity_id: The id that could not be resolved.
        """
        super().__init__(f"{entity_type} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


# ============================================================================
# Access Errors
# ============================================================================


class AuthError(DomainError):
    """Raised when a request cannot be authenticated."""

    error_code = "UNAUTHORIZED"


class ForbiddenError(DomainError):
    """Raised when an authenticated user lacks a required role."""

    error_code = "FORBIDDEN"

    def __init__(self, role: str) -> None:
        """Initialize forbidden error.

        Args:
            role: The role of the acting user.
        """
        super().__init__(f"User role {role} is not authorized to access this route")
        self.role = role


class RateLimitError(DomainError):
    """Raised when a client exceeds its request budget for the window."""

    error_code = "RATE_LIMITED"

    def __init__(self, retry_after_seconds: int) -> None:
        """Initialize rate limit error.

        Args:
            retry_after_seconds: Seconds until the current window resets.
        """
        super().__init__("Too many requests, please try again later")
        self.retry_after_seconds = retry_after_seconds


# ============================================================================
# Server Errors
# ============================================================================


class StorageError(DomainError):
    """Raised when the document store or object store fails unexpectedly.

    The message is logged; clients only ever see a generic error.
    """

    error_code = "STORAGE_ERROR"

"""Authentication and authorization gate.

Turns a bearer token into an active User and checks role-based access.
"""

from collections.abc import Collection
from typing import Protocol

import structlog

from storefront.domain.entities import USERS, User
from storefront.domain.exceptions import AuthError, ForbiddenError
from storefront.infrastructure.document_store import DocumentStore
from storefront.infrastructure.tokens import TokenClaims

logger = structlog.get_logger()


class TokenProvider(Protocol):
    """Verifies bearer tokens."""

    def verify(self, token: str) -> TokenClaims:
        """Return the verified claims or raise AuthError."""
        ...


class AuthGate:
    """Authenticates tokens and authorizes users by role."""

    def __init__(self, store: DocumentStore, token_provider: TokenProvider) -> None:
        """Initialize gate.

        Args:
            store: Document store holding users.
            token_provider: Bearer token verifier.
        """
        self.store = store
        self.token_provider = token_provider

    async def authenticate(self, token: str | None) -> User:
        """Resolve a token to an active user.

        Args:
            token: Raw bearer token, without the "Bearer " prefix.

        Returns:
            The authenticated user.

        Raises:
            AuthError: If the token is missing or invalid, or the user is
                unknown or deactivated.
        """
        if not token:
            raise AuthError("Authentication error: Token not provided. Please login.")

        claims = self.token_provider.verify(token)

        document = await self.store.find_by_id(USERS, claims.subject_id)
        if document is None:
            logger.warning("Token subject not found", user_id=claims.subject_id)
            raise AuthError("No user found with this token")

        user = User.from_document(document)
        if not user.is_active:
            logger.warning("Deactivated user rejected", user_id=user.id)
            raise AuthError("Account is deactivated")
        return user

    async def authenticate_optional(self, token: str | None) -> User | None:
        """Resolve a token to a user when possible, never failing."""
        if not token:
            return None
        try:
            return await self.authenticate(token)
        except AuthError as e:
            logger.info("Optional authentication ignored", reason=e.message)
            return None

    @staticmethod
    def authorize(user: User, roles: Collection[str]) -> User:
        """Check that the user holds one of the allowed roles.

        Raises:
            ForbiddenError: If the user's role is not allowed.
        """
        if user.role not in roles:
            logger.warning("Role not authorized", user_id=user.id, role=user.role)
            raise ForbiddenError(user.role)
        return user

"""Tests for authentication and role checks."""

from datetime import timedelta

import pytest

from storefront.application import AuthGate
from storefront.domain import USERS, AuthError, ForbiddenError, User
from storefront.infrastructure.document_store import InMemoryDocumentStore
from storefront.infrastructure.tokens import JwtTokenProvider


@pytest.fixture
def tokens() -> JwtTokenProvider:
    """Create a token provider."""
    return JwtTokenProvider(secret="test-secret")


@pytest.fixture
def gate(store: InMemoryDocumentStore, tokens: JwtTokenProvider) -> AuthGate:
    """Create the auth gate."""
    return AuthGate(store, tokens)


class TestAuthenticate:
    """Tests for AuthGate.authenticate."""

    @pytest.mark.asyncio
    async def test_valid_token(self, gate: AuthGate, tokens: JwtTokenProvider, user: User) -> None:
        """A valid token resolves to its user."""
        authenticated = await gate.authenticate(tokens.issue(user.id))
        assert authenticated.id == user.id
        assert authenticated.email == "shopper@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token(self, gate: AuthGate, token) -> None:
        """A missing token asks the client to log in."""
        with pytest.raises(AuthError) as exc_info:
            await gate.authenticate(token)
        assert exc_info.value.message == "Authentication error: Token not provided. Please login."

    @pytest.mark.asyncio
    async def test_expired_token(self, gate: AuthGate, tokens: JwtTokenProvider, user: User) -> None:
        """Expired tokens are rejected."""
        token = tokens.issue(user.id, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthError):
            await gate.authenticate(token)

    @pytest.mark.asyncio
    async def test_unknown_user(self, gate: AuthGate, tokens: JwtTokenProvider) -> None:
        """Tokens for deleted users are rejected."""
        with pytest.raises(AuthError) as exc_info:
            await gate.authenticate(tokens.issue("ghost"))
        assert exc_info.value.message == "No user found with this token"

    @pytest.mark.asyncio
    async def test_deactivated_user(
        self, gate: AuthGate, tokens: JwtTokenProvider, store: InMemoryDocumentStore, user: User
    ) -> None:
        """Deactivated users cannot authenticate."""
        await store.update_by_id(USERS, user.id, {"is_active": False})
        with pytest.raises(AuthError) as exc_info:
            await gate.authenticate(tokens.issue(user.id))
        assert exc_info.value.message == "Account is deactivated"

    @pytest.mark.asyncio
    async def test_optional_never_fails(self, gate: AuthGate, user: User) -> None:
        """Optional authentication returns None for bad tokens."""
        assert await gate.authenticate_optional(None) is None
        assert await gate.authenticate_optional("garbage") is None


class TestAuthorize:
    """Tests for AuthGate.authorize."""

    def test_allowed_role(self) -> None:
        """Users with an allowed role pass through."""
        admin = User(id="u1", email="a@example.com", role="admin")
        assert AuthGate.authorize(admin, ["admin"]) is admin

    def test_disallowed_role(self) -> None:
        """Other roles are forbidden."""
        viewer = User(id="u1", email="a@example.com", role="viewer")
        with pytest.raises(ForbiddenError) as exc_info:
            AuthGate.authorize(viewer, ["user", "admin"])
        assert exc_info.value.role == "viewer"

"""Bearer token provider.

Issues and verifies HS256 JSON Web Tokens with python-jose. The
subject is carried in the ``id`` claim, the expiry in ``exp``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from storefront.domain.exceptions import AuthError


@dataclass(frozen=True)
class TokenClaims:
    """Verified token contents."""

    subject_id: str
    expires_at: datetime


class JwtTokenProvider:
    """Signs and verifies bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, subject_id: str, expires_delta: timedelta | None = None) -> str:
        """Issue a token for a user id.

        Args:
            subject_id: Id of the user the token authenticates.
            expires_delta: Lifetime; defaults to the configured expiry.

        Returns:
            Encoded token.
        """
        expires_at = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=self.expire_minutes)
        )
        return jwt.encode(
            {"id": subject_id, "exp": int(expires_at.timestamp())},
            self.secret,
            algorithm=self.algorithm,
        )

    def verify(self, token: str) -> TokenClaims:
        """Verify a token.

        Args:
            token: Encoded token.

        Returns:
            The verified claims.

        Raises:
            AuthError: If the token is malformed, expired or has a bad signature.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise AuthError("Authentication error: Token has expired") from e
        except JWTError as e:
            raise AuthError("Authentication error: Token is invalid or has expired.") from e

        subject_id = payload.get("id")
        expires = payload.get("exp")
        if not isinstance(subject_id, str) or not subject_id or expires is None:
            raise AuthError("Authentication error: Token is invalid or has expired.")
        return TokenClaims(
            subject_id=subject_id,
            expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
        )

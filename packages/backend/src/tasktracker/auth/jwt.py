"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The
server keeps no session: a token is valid as long as its HMAC signature
checks out and its "exp" claim is in the future.

Claims: {"sub": "<user id>", "exp": <unix seconds>, "iat": <unix seconds>}.
"sub" travels as a decimal string (RFC 7519 StringOrURI; PyJWT rejects
non-string subjects) and is turned back into an int on verification.

The codec is built once at startup from Settings and injected; it is the
only object that ever touches the signing secret.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasktracker.config import Settings


class TokenError(Exception):
    """Raised when token creation/verification fails."""


@dataclass(frozen=True)
class TokenClaims:
    subject: int
    expires_at: datetime


class TokenCodec:
    """Signs and verifies access tokens with a shared HMAC secret."""

    def __init__(
        self,
        secret: bytes,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret.get_secret_value().encode("utf-8"),
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def __repr__(self) -> str:
        return f"TokenCodec(algorithm={self.algorithm!r}, ttl={self.ttl!r})"

    def create_access_token(
        self, user_id: int, now: Optional[datetime] = None
    ) -> str:
        """Create a signed access token for user_id."""
        issued = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "exp": issued + self.ttl,
            "iat": issued,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError, NotImplementedError) as e:
            raise TokenError(f"Could not sign token: {e}") from e

    def verify_token(self, token: str) -> TokenClaims:
        """Verify and decode a token.

        Returns the claims on success.
        Raises TokenError on any failure (bad signature, expired, missing
        or malformed claims).
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        try:
            subject = int(payload["sub"])
        except (TypeError, ValueError):
            raise TokenError("Invalid token: malformed subject")

        return TokenClaims(
            subject=subject,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

"""JWT token issuance and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token
carries a single claim — the subject (user id) — plus iat/exp. It stays
valid for its whole lifetime (7 days by default): there is no revocation
list, so deleting a user does not invalidate tokens already handed out.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from taskhub.config import Settings


class TokenError(Exception):
    """Raised when token verification fails."""


@dataclass(frozen=True)
class TokenClaims:
    """The verified content of a token."""

    subject_id: uuid.UUID


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Signs and verifies bearer tokens with a process-wide secret.

    The only state is the read-only key material taken from Settings at
    construction, so a single instance is shared by all requests.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(days=settings.token_expire_days),
        )

    def issue(self, subject_id: uuid.UUID, lifetime: Optional[timedelta] = None) -> str:
        """Create a signed token for ``subject_id``."""
        now = self._clock()
        payload = {
            "sub": str(subject_id),
            "iat": now,
            "exp": now + (lifetime or self.lifetime),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> TokenClaims:
        """Verify and decode a token.

        Raises TokenError if the token is absent, malformed, badly signed,
        expired, or its subject is not a user id. Does not check that the
        subject still exists.
        """
        if not token:
            raise TokenError("Token is missing")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        try:
            subject_id = uuid.UUID(str(payload["sub"]))
        except ValueError:
            raise TokenError("Invalid token: malformed subject")
        return TokenClaims(subject_id=subject_id)

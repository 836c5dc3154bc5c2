"""Access token issuance and verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, Optional
import secrets

from jose import JWTError, jwt

from sewadar_api.config import settings
from sewadar_api.core.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from sewadar_api.core.permissions import UserRole
from sewadar_api.schemas.auth import TokenClaims

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issue and verify signed, time-bound identity tokens.

    Stateless: depends only on the signing secret, the algorithm and the
    clock handed to the constructor.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ) -> None:
        if not secret_key:
            raise ValueError("Token signing secret must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.default_ttl = default_ttl
        self._clock = clock

    def issue(
        self,
        subject_id: str,
        email: str,
        role: UserRole,
        ttl: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed token for an authenticated identity

        Args:
            subject_id: User ID
            email: User email
            role: Role at issuance time
            ttl: Lifetime, defaults to the configured access token lifetime

        Returns:
            str: Encoded JWT
        """
        if not subject_id or not email or not role:
            raise ValueError("subject_id, email and role are required to issue a token")

        issued_at = self._clock()
        expires_at = issued_at + (ttl if ttl is not None else self.default_ttl)
        payload = {
            "sub": str(subject_id),
            "email": email,
            "role": UserRole.parse(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry, returning the embedded claims

        Raises:
            MalformedTokenError: Token is not three dot-separated segments,
                or its payload lacks required claims
            InvalidSignatureError: Signature does not verify
            TokenExpiredError: Current time is at or past expiry
        """
        segments = token.split(".") if isinstance(token, str) else []
        if len(segments) != 3 or not all(segments):
            raise MalformedTokenError()

        try:
            # Expiry is checked below against the injected clock, with no leeway.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError:
            raise InvalidSignatureError()

        claims = self._claims_from_payload(payload)
        if self._clock() >= claims.expires_at:
            raise TokenExpiredError()
        return claims

    @staticmethod
    def _claims_from_payload(payload: dict) -> TokenClaims:
        try:
            return TokenClaims(
                subject_id=str(payload["sub"]),
                email=payload["email"],
                role=UserRole.parse(payload["role"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
                token_id=payload.get("jti", ""),
            )
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            raise MalformedTokenError("Invalid token payload")


@lru_cache()
def get_token_service() -> TokenService:
    """Process-wide token service built from settings; overridable as a dependency"""
    return TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        default_ttl=settings.access_token_ttl,
    )

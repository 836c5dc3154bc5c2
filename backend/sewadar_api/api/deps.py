"""API dependencies - authentication and authorization gate"""

from typing import Callable, Iterable, Optional, Union
import logging

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from sewadar_api.config import settings
from sewadar_api.core.database import get_db
from sewadar_api.core.exceptions import (
    AuthenticationError,
    BaseAPIException,
    IdentityNotFoundOrInactiveError,
    InsufficientRoleError,
    MalformedHeaderError,
    MissingTokenError,
    RateLimitExceededError,
    TokenRejectedError,
)
from sewadar_api.core.metrics import AUTH_REJECTIONS
from sewadar_api.core.permissions import CAN_EDIT, IS_ADMIN, UserRole, role_set
from sewadar_api.schemas.auth import CurrentIdentity
from sewadar_api.services.rate_limiter import rate_limiter
from sewadar_api.services.token_service import TokenService, get_token_service
from sewadar_api.services.user_service import user_service

logger = logging.getLogger(__name__)

# Raw header access: the scheme must be exactly "Bearer", which HTTPBearer does not enforce
authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    description="Bearer <token>",
)


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def extract_bearer_token(header: Optional[str]) -> str:
    """
    Parse an `Authorization: Bearer <token>` header

    Raises:
        MissingTokenError: Header absent or token empty
        MalformedHeaderError: Not exactly two space-separated parts with scheme `Bearer`
    """
    if header is None or not header.strip():
        raise MissingTokenError()

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise MalformedHeaderError()
    if not parts[1]:
        raise MissingTokenError()
    return parts[1]


def _rejected(
    request: Request,
    exc: BaseAPIException,
    identity: Optional[str] = None,
) -> BaseAPIException:
    AUTH_REJECTIONS.labels(getattr(exc, "reason", "unknown")).inc()
    logger.warning(
        "Request rejected (%s %s): %s %s client=%s identity=%s",
        exc.status_code,
        exc.message,
        request.method,
        request.url.path,
        get_client_ip(request),
        identity or "anonymous",
    )
    return exc


def get_current_identity(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """
    Resolve the authenticated identity for this request

    The role is taken from the token claims; the live store decides whether
    the account still exists and is active.

    Args:
        request: Incoming request
        authorization: Raw Authorization header
        db: Database session
        tokens: Token service

    Returns:
        Current identity, also stored on request.state.identity

    Raises:
        AuthenticationError: 401 for missing/malformed header or token
        TokenRejectedError: 403 for bad signature or expiry
        IdentityNotFoundOrInactiveError: 403 when the subject is gone or deactivated
    """
    try:
        token = extract_bearer_token(authorization)
        claims = tokens.verify(token)
    except (AuthenticationError, TokenRejectedError) as exc:
        raise _rejected(request, exc)

    user = user_service.find_active_by_id(db, claims.subject_id)
    if user is None:
        raise _rejected(request, IdentityNotFoundOrInactiveError(), claims.email)

    identity = CurrentIdentity(
        id=claims.subject_id,
        email=claims.email,
        role=claims.role,
        first_name=user.first_name,
        last_name=user.last_name,
    )
    request.state.identity = identity
    return identity


def require_role(allowed: Iterable[Union[str, UserRole]]) -> Callable[..., CurrentIdentity]:
    """
    Build a dependency admitting only identities whose role is in `allowed`

    Args:
        allowed: Permitted roles

    Returns:
        FastAPI dependency returning the current identity
    """
    allowed_roles = role_set(allowed)
    required = ", ".join(sorted(role.value for role in allowed_roles))

    def dependency(
        request: Request,
        identity: CurrentIdentity = Depends(get_current_identity),
    ) -> CurrentIdentity:
        if identity.role not in allowed_roles:
            logger.info("Role %s not in required set [%s]", identity.role.value, required)
            raise _rejected(request, InsufficientRoleError(), identity.email)
        return identity

    return dependency


require_editor = require_role(CAN_EDIT)
require_admin = require_role(IS_ADMIN)


def enforce_api_rate_limit(request: Request) -> None:
    """Per-client request limit across the whole API"""
    key = f"api:{get_client_ip(request)}"
    if not rate_limiter.allow(key, settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_MINUTES * 60):
        raise RateLimitExceededError(retry_after=rate_limiter.retry_after(key))

"""Authentication routes"""

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.orm import Session
import logging

from sewadar_api.core.database import get_db
from sewadar_api.config import settings
from sewadar_api.schemas.auth import CurrentIdentity
from sewadar_api.schemas.audit import AuditAction, EntityType
from sewadar_api.schemas.response import APIResponse
from sewadar_api.schemas.user import (
    UserLogin,
    UserCreate,
    TokenResponse,
    UserResponse,
    ProfileUpdate,
    PasswordChange,
)
from sewadar_api.services.user_service import user_service
from sewadar_api.services.token_service import TokenService, get_token_service
from sewadar_api.services.audit_service import audit_service
from sewadar_api.services.rate_limiter import rate_limiter
from sewadar_api.api.deps import get_client_ip, get_current_identity, require_admin
from sewadar_api.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def login(
    credentials: UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Login endpoint - authenticate user and return JWT token

    Args:
        credentials: Email and password
        db: Database session
        tokens: Token service

    Returns:
        JWT token and user info
    """
    client_ip = get_client_ip(request)
    login_key = f"login:min:{client_ip}"
    if not rate_limiter.allow(login_key, settings.LOGIN_RATE_LIMIT_PER_MINUTE, 60):
        raise RateLimitExceededError(
            "Too many login attempts. Please wait a minute.",
            retry_after=rate_limiter.retry_after(login_key),
        )

    user = user_service.authenticate_user(db, credentials.email, credentials.password)
    access_token = tokens.issue(user.id, user.email, user.role)

    audit_service.record(
        db,
        action=AuditAction.LOGIN,
        actor_id=user.id,
        entity_type=EntityType.USER,
        entity_id=user.id,
        detail=f"User {user.email} logged in",
        ip_address=client_ip,
    )

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=int(tokens.default_ttl.total_seconds()),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    request: Request,
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Register a new account (admin only)

    Args:
        user_data: User creation data
        current_user: Current admin identity
        db: Database session

    Returns:
        Created user
    """
    user = user_service.create_user(db, user_data)

    audit_service.record(
        db,
        action=AuditAction.CREATE_ENTITY,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=user.id,
        detail=f"Created user {user.email} with role {user.role}",
        ip_address=get_client_ip(request),
    )
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Get current user information

    Args:
        current_user: Current authenticated identity

    Returns:
        User information
    """
    user, _ = user_service.get_user_with_stats(db, current_user.id)
    return UserResponse.model_validate(user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile: ProfileUpdate,
    request: Request,
    current_user: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, current_user.id, profile)

    audit_service.record(
        db,
        action=AuditAction.UPDATE_PROFILE,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=current_user.id,
        detail=f"Updated profile: {user.full_name} ({user.email})",
        ip_address=get_client_ip(request),
    )
    return UserResponse.model_validate(user)


@router.post("/change-password", response_model=APIResponse)
def change_password(
    body: PasswordChange,
    request: Request,
    current_user: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user_service.change_password(db, current_user.id, body.current_password, body.new_password)

    audit_service.record(
        db,
        action=AuditAction.CHANGE_PASSWORD,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=current_user.id,
        detail="Password changed",
        ip_address=get_client_ip(request),
    )
    return APIResponse(message="Password changed successfully")


@router.post("/logout", response_model=APIResponse, status_code=status.HTTP_200_OK)
def logout(
    request: Request,
    current_user: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Logout endpoint

    Tokens are not revoked server-side; the client discards its token and
    the event is recorded in the audit trail.
    """
    audit_service.record(
        db,
        action=AuditAction.LOGOUT,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=current_user.id,
        detail=f"User {current_user.email} logged out",
        ip_address=get_client_ip(request),
    )
    return APIResponse(message="Logged out successfully")

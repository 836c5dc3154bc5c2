"""User management routes (admin only)"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from sewadar_api.core.database import get_db
from sewadar_api.core.permissions import UserRole
from sewadar_api.schemas.auth import CurrentIdentity
from sewadar_api.schemas.audit import AuditAction, EntityType
from sewadar_api.schemas.response import APIResponse
from sewadar_api.schemas.user import (
    PasswordReset,
    UserDetailResponse,
    UserResponse,
    UserUpdate,
)
from sewadar_api.services.audit_service import audit_service
from sewadar_api.services.user_service import user_service
from sewadar_api.api.deps import get_client_ip, require_admin

router = APIRouter()


@router.get("/", response_model=List[UserResponse])
def get_all_users(
    role: Optional[UserRole] = None,
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Get all users (admin only)

    Args:
        role: Optional role filter
        current_user: Current admin identity
        db: Database session

    Returns:
        List of users
    """
    return user_service.get_all_users(db, role)


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: str,
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user, authored = user_service.get_user_with_stats(db, user_id)
    response = UserDetailResponse.model_validate(user)
    response.sewadars_created = authored
    return response


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    updates: UserUpdate,
    request: Request,
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Update names, role or active flag (admin only)

    A role change takes effect for the target on their next login.
    """
    user = user_service.update_user(db, user_id, updates, current_user.id)

    changed = ", ".join(sorted(updates.model_dump(exclude_none=True)))
    audit_service.record(
        db,
        action=AuditAction.UPDATE_ENTITY,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=user_id,
        detail=f"Updated user {user.email}: {changed}",
        ip_address=get_client_ip(request),
    )
    return user


@router.post("/{user_id}/reset-password", response_model=APIResponse)
def reset_password(
    user_id: str,
    body: PasswordReset,
    request: Request,
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = user_service.reset_password(db, user_id, body.new_password)

    audit_service.record(
        db,
        action=AuditAction.RESET_PASSWORD,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=user_id,
        detail=f"Reset password for {user.email}",
        ip_address=get_client_ip(request),
    )
    return APIResponse(message="Password reset successfully")


@router.delete("/{user_id}", response_model=APIResponse, status_code=status.HTTP_200_OK)
def delete_user(
    user_id: str,
    request: Request,
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Delete user (admin only)

    Args:
        user_id: User ID to delete
        current_user: Current admin identity
        db: Database session

    Returns:
        Success message
    """
    email = user_service.delete_user(db, user_id, current_user.id)

    audit_service.record(
        db,
        action=AuditAction.DELETE_ENTITY,
        actor_id=current_user.id,
        entity_type=EntityType.USER,
        entity_id=user_id,
        detail=f"Deleted user {email}",
        ip_address=get_client_ip(request),
    )
    return APIResponse(message=f"User {email} deleted successfully")

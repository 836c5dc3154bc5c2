"""Sewadar record routes"""

from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from sewadar_api.core.database import get_db
from sewadar_api.schemas.auth import CurrentIdentity
from sewadar_api.schemas.audit import AuditAction, EntityType
from sewadar_api.schemas.response import APIResponse
from sewadar_api.schemas.sewadar import SewadarCreate, SewadarResponse, SewadarUpdate
from sewadar_api.services.audit_service import audit_service
from sewadar_api.services.sewadar_service import sewadar_service
from sewadar_api.api.deps import get_client_ip, get_current_identity, require_editor

router = APIRouter()


@router.get("/")
def list_sewadars(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    current_user: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    List sewadars, newest first

    Args:
        search: Optional name or badge filter
        page: Page number
        limit: Page size

    Returns:
        Page of sewadars with pagination info
    """
    rows, total = sewadar_service.list_sewadars(db, search=search, page=page, limit=limit)
    return {
        "success": True,
        "data": [sewadar_service.to_response(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": ceil(total / limit) if total else 0,
        },
    }


@router.get("/{sewadar_id}", response_model=SewadarResponse)
def get_sewadar(
    sewadar_id: str,
    current_user: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return sewadar_service.to_response(sewadar_service.get(db, sewadar_id))


@router.post("/", response_model=SewadarResponse, status_code=status.HTTP_201_CREATED)
def create_sewadar(
    data: SewadarCreate,
    request: Request,
    current_user: CurrentIdentity = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """
    Create a sewadar (editors and admins)

    The record is attributed to the authenticated requester; any creator
    field in the body is ignored.
    """
    sewadar = sewadar_service.create(db, data, created_by=current_user.id)

    audit_service.record(
        db,
        action=AuditAction.CREATE_ENTITY,
        actor_id=current_user.id,
        entity_type=EntityType.SEWADAR,
        entity_id=sewadar.id,
        detail=f"Created sewadar {sewadar.full_name}",
        ip_address=get_client_ip(request),
    )
    return sewadar_service.to_response(sewadar)


@router.put("/{sewadar_id}", response_model=SewadarResponse)
def update_sewadar(
    sewadar_id: str,
    data: SewadarUpdate,
    request: Request,
    current_user: CurrentIdentity = Depends(require_editor),
    db: Session = Depends(get_db),
):
    sewadar = sewadar_service.update(db, sewadar_id, data)

    audit_service.record(
        db,
        action=AuditAction.UPDATE_ENTITY,
        actor_id=current_user.id,
        entity_type=EntityType.SEWADAR,
        entity_id=sewadar_id,
        detail=f"Updated sewadar {sewadar.full_name}: {', '.join(sorted(data.model_fields_set))}",
        ip_address=get_client_ip(request),
    )
    return sewadar_service.to_response(sewadar)


@router.delete("/{sewadar_id}", response_model=APIResponse)
def delete_sewadar(
    sewadar_id: str,
    request: Request,
    current_user: CurrentIdentity = Depends(require_editor),
    db: Session = Depends(get_db),
):
    full_name = sewadar_service.delete(db, sewadar_id)

    audit_service.record(
        db,
        action=AuditAction.DELETE_ENTITY,
        actor_id=current_user.id,
        entity_type=EntityType.SEWADAR,
        entity_id=sewadar_id,
        detail=f"Deleted sewadar {full_name}",
        ip_address=get_client_ip(request),
    )
    return APIResponse(message="Sewadar deleted successfully")

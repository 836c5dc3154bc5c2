"""Audit trail routes (admin only, read-only)"""

from datetime import date
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sewadar_api.core.database import get_db
from sewadar_api.schemas.auth import CurrentIdentity
from sewadar_api.schemas.audit import AuditLogFilters, AuditLogPage, AuditStats, EntityType, Pagination
from sewadar_api.services.audit_service import audit_service
from sewadar_api.api.deps import require_admin

router = APIRouter()


@router.get("/", response_model=AuditLogPage)
def list_audit_logs(
    action: Optional[str] = Query(None, description="Comma-separated actions"),
    actor_id: Optional[str] = None,
    entity_type: Optional[EntityType] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    List audit records, newest first

    Args:
        action: Comma-separated action filter, matched case-insensitively
        actor_id: Only records by this user
        entity_type: Only records for this entity type
        search: Free text over detail and actor names
        start_date: Inclusive start date (UTC)
        end_date: Inclusive end date (UTC)

    Returns:
        Page of audit records
    """
    filters = AuditLogFilters(
        action=action,
        actor_id=actor_id,
        entity_type=entity_type,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    rows, total = audit_service.query(db, filters, page=page, limit=limit)
    return AuditLogPage(
        data=rows,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=ceil(total / limit) if total else 0,
        ),
    )


@router.get("/stats", response_model=AuditStats)
def audit_stats(
    current_user: CurrentIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return audit_service.stats(db)

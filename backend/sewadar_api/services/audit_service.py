"""Audit service - append-only trail of authenticated mutations."""

from __future__ import annotations

from datetime import datetime, time as dt_time, timedelta, timezone
from typing import Callable, List, Optional, Tuple, Union
import logging
import time

from sqlalchemy import func, or_
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from sewadar_api.config import settings
from sewadar_api.core.exceptions import AuditWriteFailure
from sewadar_api.core.metrics import AUDIT_WRITE_FAILURES
from sewadar_api.models.audit import AuditLog
from sewadar_api.models.user import User, _new_id
from sewadar_api.schemas.audit import (
    AuditAction,
    AuditLogFilters,
    AuditLogResponse,
    AuditStats,
    EntityType,
    UserActivity,
)

logger = logging.getLogger(__name__)


class AuditService:
    """Persist immutable audit trail entries.

    Writes happen after the triggering mutation has been committed. A failed
    write is retried on transient store errors, then logged and counted; it
    is never raised to the caller.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        retry_backoff_seconds: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff_seconds = retry_backoff_seconds
        self._sleep = sleep

    def record(
        self,
        db: Session,
        *,
        action: Union[AuditAction, str],
        actor_id: str,
        entity_type: Union[EntityType, str],
        entity_id: Optional[str] = None,
        detail: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[str]:
        """
        Append one audit record

        Args:
            db: Database session of the current request
            action: Audited action
            actor_id: Authenticated requester, never a client-supplied value
            entity_type: Kind of affected entity
            entity_id: Affected entity, None for account-level actions
            detail: Human-readable summary without secrets
            ip_address: Client address

        Returns:
            The new record id, or None if the write failed
        """
        action = AuditAction(action)
        entity_type = EntityType(entity_type)
        if not actor_id:
            raise ValueError("Audit records require an authenticated actor")

        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._persist(
                    db,
                    action=action,
                    actor_id=actor_id,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    detail=detail,
                    ip_address=ip_address,
                )
            except AuditWriteFailure as failure:
                if not failure.transient or attempt == self.max_attempts:
                    self._report(failure, attempt, entity_type, entity_id)
                    return None
                logger.warning(
                    "Transient audit write failure (attempt %d/%d) for %s: %s",
                    attempt,
                    self.max_attempts,
                    action.value,
                    failure.cause,
                )
                self._sleep(self.retry_backoff_seconds * attempt)
        return None

    @staticmethod
    def _persist(
        db: Session,
        *,
        action: AuditAction,
        actor_id: str,
        entity_type: EntityType,
        entity_id: Optional[str],
        detail: Optional[str],
        ip_address: Optional[str],
    ) -> str:
        record_id = _new_id()
        event = AuditLog(
            id=record_id,
            action=action.value,
            actor_id=actor_id,
            entity_type=entity_type.value,
            entity_id=entity_id,
            detail=detail,
            ip_address=ip_address,
        )
        try:
            db.add(event)
            db.commit()
        except OperationalError as exc:
            db.rollback()
            raise AuditWriteFailure(action.value, actor_id, exc, transient=True) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise AuditWriteFailure(action.value, actor_id, exc) from exc
        return record_id

    @staticmethod
    def _report(
        failure: AuditWriteFailure,
        attempts: int,
        entity_type: EntityType,
        entity_id: Optional[str],
    ) -> None:
        AUDIT_WRITE_FAILURES.labels(failure.action).inc()
        logger.error(
            "Audit record dropped after %d attempt(s): action=%s actor=%s entity=%s:%s error=%s",
            attempts,
            failure.action,
            failure.actor_id,
            entity_type.value,
            entity_id,
            failure.cause,
        )

    # Read surface (administrators only)

    @staticmethod
    def _to_response(event: AuditLog, actor: Optional[User]) -> AuditLogResponse:
        if actor is not None:
            actor_name = actor.full_name or actor.email
        else:
            actor_name = "Unknown User"
        return AuditLogResponse(
            id=event.id,
            action=event.action,
            actor_id=event.actor_id,
            actor_name=actor_name,
            actor_email=actor.email if actor is not None else None,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            detail=event.detail,
            ip_address=event.ip_address,
            created_at=event.created_at,
        )

    def query(
        self,
        db: Session,
        filters: AuditLogFilters,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[AuditLogResponse], int]:
        """
        List audit records, newest first

        Returns:
            Tuple of (page of records, total matching records)
        """
        page = max(1, page)
        limit = max(1, min(limit, 500))

        query = db.query(AuditLog, User).outerjoin(User, User.id == AuditLog.actor_id)

        if filters.action:
            terms = [term.strip().upper() for term in filters.action.split(",") if term.strip()]
            if terms:
                query = query.filter(or_(*[AuditLog.action.ilike(f"%{term}%") for term in terms]))
        if filters.actor_id:
            query = query.filter(AuditLog.actor_id == filters.actor_id)
        if filters.entity_type:
            query = query.filter(AuditLog.entity_type == filters.entity_type.value)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(
                or_(
                    AuditLog.detail.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )
        if filters.start_date:
            start = datetime.combine(filters.start_date, dt_time.min, tzinfo=timezone.utc)
            query = query.filter(AuditLog.created_at >= start)
        if filters.end_date:
            end = datetime.combine(filters.end_date + timedelta(days=1), dt_time.min, tzinfo=timezone.utc)
            query = query.filter(AuditLog.created_at < end)

        total = query.count()
        rows = (
            query.order_by(AuditLog.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [self._to_response(event, actor) for event, actor in rows], total

    def stats(self, db: Session, now: Optional[datetime] = None) -> AuditStats:
        """Summary counts for the administrative dashboard"""
        now = now or datetime.now(timezone.utc)
        today_start = datetime.combine(now.date(), dt_time.min, tzinfo=timezone.utc)
        week_start = now - timedelta(days=7)

        total = db.query(func.count(AuditLog.id)).scalar() or 0
        today = db.query(func.count(AuditLog.id)).filter(AuditLog.created_at >= today_start).scalar() or 0
        week = db.query(func.count(AuditLog.id)).filter(AuditLog.created_at >= week_start).scalar() or 0

        by_action_rows = (
            db.query(AuditLog.action, func.count(AuditLog.id).label("count"))
            .group_by(AuditLog.action)
            .order_by(func.count(AuditLog.id).desc())
            .all()
        )

        recent_rows = (
            db.query(AuditLog, User)
            .outerjoin(User, User.id == AuditLog.actor_id)
            .order_by(AuditLog.created_at.desc())
            .limit(10)
            .all()
        )

        action_count = func.count(AuditLog.id).label("action_count")
        by_user_rows = (
            db.query(User, action_count)
            .outerjoin(AuditLog, AuditLog.actor_id == User.id)
            .filter(User.is_active.is_(True))
            .group_by(User.id)
            .order_by(action_count.desc())
            .limit(10)
            .all()
        )

        return AuditStats(
            total_actions=total,
            todays_actions=today,
            this_week_actions=week,
            by_action={action: count for action, count in by_action_rows},
            recent_actions=[self._to_response(event, actor) for event, actor in recent_rows],
            by_user=[
                UserActivity(
                    user_id=user.id,
                    name=user.full_name,
                    email=user.email,
                    action_count=count,
                )
                for user, count in by_user_rows
            ],
        )


audit_service = AuditService(
    max_attempts=settings.AUDIT_WRITE_MAX_ATTEMPTS,
    retry_backoff_seconds=settings.AUDIT_RETRY_BACKOFF_SECONDS,
)

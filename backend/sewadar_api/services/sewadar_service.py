"""Sewadar service - CRUD for volunteer records"""

from typing import List, Optional, Tuple
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from sewadar_api.core.exceptions import ResourceNotFoundError
from sewadar_api.models.sewadar import Sewadar
from sewadar_api.schemas.sewadar import SewadarCreate, SewadarResponse, SewadarUpdate

logger = logging.getLogger(__name__)


class SewadarService:
    """Service for sewadar records"""

    @staticmethod
    def to_response(sewadar: Sewadar) -> SewadarResponse:
        response = SewadarResponse.model_validate(sewadar)
        if sewadar.creator is not None:
            response.created_by_name = sewadar.creator.full_name
        return response

    @staticmethod
    def get(db: Session, sewadar_id: str) -> Sewadar:
        sewadar = (
            db.query(Sewadar)
            .options(joinedload(Sewadar.creator))
            .filter(Sewadar.id == sewadar_id)
            .first()
        )
        if not sewadar:
            raise ResourceNotFoundError("Sewadar")
        return sewadar

    @staticmethod
    def list_sewadars(
        db: Session,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Sewadar], int]:
        """
        List sewadars, newest first

        Args:
            db: Database session
            search: Optional match on name or badge
            page: 1-based page number
            limit: Page size (max 500)

        Returns:
            Tuple of (page of sewadars, total matches)
        """
        page = max(1, page)
        limit = max(1, min(limit, 500))

        query = db.query(Sewadar).options(joinedload(Sewadar.creator))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Sewadar.first_name.ilike(pattern),
                    Sewadar.last_name.ilike(pattern),
                    Sewadar.badge_id.ilike(pattern),
                )
            )

        total = query.count()
        rows = (
            query.order_by(Sewadar.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    @staticmethod
    def create(db: Session, data: SewadarCreate, created_by: str) -> Sewadar:
        """
        Create a sewadar attributed to the authenticated user

        Args:
            db: Database session
            data: Validated payload
            created_by: ID of the authenticated requester

        Returns:
            Created sewadar
        """
        sewadar = Sewadar(**data.model_dump(), created_by=created_by)
        db.add(sewadar)
        db.commit()
        db.refresh(sewadar)

        logger.info(f"Created sewadar {sewadar.id} by {created_by}")
        return sewadar

    @staticmethod
    def update(db: Session, sewadar_id: str, data: SewadarUpdate) -> Sewadar:
        sewadar = SewadarService.get(db, sewadar_id)

        for field in data.model_fields_set:
            value = getattr(data, field)
            if value == "":
                value = None
            setattr(sewadar, field, value)

        db.commit()
        db.refresh(sewadar)

        logger.info(f"Updated sewadar {sewadar.id}: {sorted(data.model_fields_set)}")
        return sewadar

    @staticmethod
    def delete(db: Session, sewadar_id: str) -> str:
        """Delete a sewadar and return its full name for the audit trail"""
        sewadar = SewadarService.get(db, sewadar_id)
        full_name = sewadar.full_name

        db.delete(sewadar)
        db.commit()

        logger.info(f"Deleted sewadar {sewadar_id}")
        return full_name


sewadar_service = SewadarService()

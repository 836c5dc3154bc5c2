"""Audit vocabulary and response schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel


class AuditAction(str, Enum):
    """Closed vocabulary of audited actions"""
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE_ENTITY = "CREATE_ENTITY"
    UPDATE_ENTITY = "UPDATE_ENTITY"
    DELETE_ENTITY = "DELETE_ENTITY"
    RESET_PASSWORD = "RESET_PASSWORD"
    CHANGE_PASSWORD = "CHANGE_PASSWORD"
    UPDATE_PROFILE = "UPDATE_PROFILE"


class EntityType(str, Enum):
    USER = "USER"
    SEWADAR = "SEWADAR"


class AuditLogFilters(BaseModel):
    action: Optional[str] = None
    actor_id: Optional[str] = None
    entity_type: Optional[EntityType] = None
    search: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AuditLogResponse(BaseModel):
    id: str
    action: str
    actor_id: str
    actor_name: Optional[str] = None
    actor_email: Optional[str] = None
    entity_type: str
    entity_id: Optional[str] = None
    detail: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AuditLogPage(BaseModel):
    success: bool = True
    data: List[AuditLogResponse]
    pagination: Pagination


class UserActivity(BaseModel):
    user_id: str
    name: str
    email: str
    action_count: int


class AuditStats(BaseModel):
    total_actions: int
    todays_actions: int
    this_week_actions: int
    by_action: Dict[str, int]
    recent_actions: List[AuditLogResponse]
    by_user: List[UserActivity]

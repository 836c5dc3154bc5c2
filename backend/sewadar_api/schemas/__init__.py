"""Pydantic schemas for API validation"""

from sewadar_api.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserDetailResponse,
    UserLogin,
    ProfileUpdate,
    PasswordChange,
    PasswordReset,
    TokenResponse,
)
from sewadar_api.schemas.sewadar import SewadarCreate, SewadarUpdate, SewadarResponse
from sewadar_api.schemas.audit import (
    AuditAction,
    EntityType,
    AuditLogFilters,
    AuditLogResponse,
    AuditLogPage,
    AuditStats,
)
from sewadar_api.schemas.auth import TokenClaims, CurrentIdentity
from sewadar_api.schemas.response import APIResponse

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse", "UserDetailResponse", "UserLogin",
    "ProfileUpdate", "PasswordChange", "PasswordReset", "TokenResponse",
    "SewadarCreate", "SewadarUpdate", "SewadarResponse",
    "AuditAction", "EntityType", "AuditLogFilters", "AuditLogResponse", "AuditLogPage", "AuditStats",
    "TokenClaims", "CurrentIdentity",
    "APIResponse"
]

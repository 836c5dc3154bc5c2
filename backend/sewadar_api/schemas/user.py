"""User schemas"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from sewadar_api.core.permissions import UserRole


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class UserLogin(BaseModel):
    """User login schema"""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def email_lowercase(cls, v):
        return _normalize_email(v)


class UserCreate(BaseModel):
    """Administrator-only registration schema"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    role: UserRole = UserRole.VIEWER

    @field_validator('email')
    @classmethod
    def email_lowercase(cls, v):
        """Emails compare case-insensitively"""
        return _normalize_email(v)


class UserUpdate(BaseModel):
    """Administrative user update"""
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @model_validator(mode='after')
    def at_least_one_field(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError('No valid fields provided for update')
        return self


class ProfileUpdate(BaseModel):
    """Self-service profile update"""
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr

    @field_validator('email')
    @classmethod
    def email_lowercase(cls, v):
        return _normalize_email(v)


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    """User response schema"""
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserDetailResponse(UserResponse):
    """User with authorship statistics"""
    sewadars_created: int = 0


class TokenResponse(BaseModel):
    """JWT token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

"""Sewadar schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class SewadarCreate(BaseModel):
    """Sewadar creation schema.

    Unknown fields are ignored, so a client-supplied creator is dropped.
    """
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    age: Optional[int] = Field(None, ge=1, le=120)
    badge_id: Optional[str] = Field(None, max_length=20)


class SewadarUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    age: Optional[int] = Field(None, ge=1, le=120)
    badge_id: Optional[str] = Field(None, max_length=20)

    @field_validator('first_name', 'last_name')
    @classmethod
    def names_not_null(cls, v):
        if v is None:
            raise ValueError('Name fields cannot be cleared')
        return v

    @model_validator(mode='after')
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError('No valid fields provided for update')
        return self


class SewadarResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    age: Optional[int] = None
    badge_id: Optional[str] = None
    created_by: str
    created_by_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

"""Token claim and request identity schemas"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from sewadar_api.core.permissions import UserRole


class TokenClaims(BaseModel):
    """Verified token payload; a snapshot taken at issuance"""
    model_config = ConfigDict(frozen=True)

    subject_id: str
    email: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime
    token_id: str


class CurrentIdentity(BaseModel):
    """Identity attached to an authenticated request"""
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    role: UserRole
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

"""Database models"""

from sewadar_api.models.user import User
from sewadar_api.models.sewadar import Sewadar
from sewadar_api.models.audit import AuditLog

__all__ = ["User", "Sewadar", "AuditLog"]

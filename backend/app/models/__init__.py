"""SQLAlchemy ORM models."""

from app.models.user import User
from app.models.organization import Organization, Department, UserDepartment
from app.models.a3_document import A3Document
from app.models.a3_comment import A3Comment
from app.models.audit_log import AuditLog, AuditLogImmutableError

__all__ = [
    "User",
    "Organization",
    "Department",
    "UserDepartment",
    "A3Document",
    "A3Comment",
    "AuditLog",
    "AuditLogImmutableError",
]

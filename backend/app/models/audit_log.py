"""Audit log model — immutable record of every significant action."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, event
from sqlalchemy.sql import func

from app.database import Base


class AuditLogImmutableError(RuntimeError):
    """Raised when something tries to change a written audit record."""


class AuditLog(Base):
    __tablename__ = "audit_logs"

    # Monotonic: orders records written within the same clock tick
    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(50), nullable=False)  # a3 | comment
    entity_id = Column(String(36), nullable=False, index=True)
    # No FK: records must outlive the document they describe
    a3_id = Column(String(36), nullable=True, index=True)
    organization_id = Column(String(36), nullable=True, index=True)
    action = Column(String(50), nullable=False)  # CREATED | DELETED | ARCHIVED | ...
    actor_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    details = Column(Text, nullable=True)  # JSON string
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


@event.listens_for(AuditLog, "before_update")
def _reject_audit_update(_mapper, _connection, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"Audit record {target.id} is append-only")


@event.listens_for(AuditLog, "before_delete")
def _reject_audit_delete(_mapper, _connection, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"Audit record {target.id} is append-only")

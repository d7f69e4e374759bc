"""Audit service — best-effort, append-only activity records.

The logger writes through its own session so that a failing audit write can
never roll back (or block) the mutation it describes. Failures are logged and
swallowed; callers only ever see the primary operation's result.
"""

import json
import logging
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    CREATED = "CREATED"
    DELETED = "DELETED"
    ARCHIVED = "ARCHIVED"
    UNARCHIVED = "UNARCHIVED"
    COMMENT_CREATED = "COMMENT_CREATED"
    COMMENT_DELETED = "COMMENT_DELETED"


class AuditLogger:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def record(
        self,
        entity_type: str,
        entity_id: str,
        actor_id: str,
        action: AuditAction,
        details: Optional[dict] = None,
        a3_id: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """Append one audit record. Returns None if the write failed.

        An unknown action is a programming error and raises ValueError here,
        before the store is touched.
        """
        action = AuditAction(action)

        db = None
        try:
            db = self._session_factory()
            entry = AuditLog(
                entity_type=entity_type,
                entity_id=entity_id,
                a3_id=a3_id,
                organization_id=organization_id,
                action=action.value,
                actor_id=actor_id,
                details=json.dumps(details or {}, default=str),
            )
            db.add(entry)
            db.commit()
            db.refresh(entry)
            db.expunge(entry)
            return entry
        except Exception:
            logger.exception(
                "Audit write failed (action=%s %s=%s actor=%s)",
                action.value, entity_type, entity_id, actor_id,
            )
            return None
        finally:
            if db is not None:
                db.close()


audit_logger = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """FastAPI dependency; overridden in tests."""
    return audit_logger


def list_for_a3(db: Session, a3_id: str) -> list[AuditLog]:
    """All records grouped under a document, newest first (insertion order)."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.a3_id == a3_id)
        .order_by(AuditLog.id.desc())
        .all()
    )

"""Comment service — create, soft-delete, and list comments on an A3."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.errors import Conflict, NotFound
from app.models.a3_comment import A3Comment
from app.services.a3_service import (
    STATUS_ARCHIVED,
    load_authorized,
    load_visible,
)
from app.services.audit_service import AuditAction, AuditLogger, audit_logger
from app.services.guards import authorize, clean_text, require_caller, validate_identifier
from app.services.permissions import Action, Caller, ResourceScope, delete_action_for

logger = logging.getLogger(__name__)


def _comment_not_found() -> NotFound:
    return NotFound("Comment not found")


def create_comment(
    db: Session,
    caller: Optional[Caller],
    a3_id: str,
    content: str,
    audit: AuditLogger = audit_logger,
) -> A3Comment:
    caller = require_caller(caller)
    a3 = load_authorized(db, caller, a3_id, Action.COMMENT)
    if a3.status == STATUS_ARCHIVED:
        raise Conflict("Cannot comment on an archived A3")

    content = clean_text(content, "content", settings.COMMENT_MAX_LENGTH)

    comment = A3Comment(
        id=str(uuid.uuid4()),
        a3_id=a3.id,
        author_id=caller.id,
        content=content,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s created on A3 %s by %s", comment.id, a3.id, caller.id)

    audit.record(
        "comment", comment.id, caller.id, AuditAction.COMMENT_CREATED,
        {"content_length": len(content)},
        a3_id=a3.id,
        organization_id=a3.organization_id,
    )
    return comment


def delete_comment(
    db: Session,
    caller: Optional[Caller],
    comment_id: str,
    audit: AuditLogger = audit_logger,
) -> A3Comment:
    """Soft-delete: overwrite the content with the sentinel, keep the row.

    The overwrite is irreversible; the original text survives only in the
    COMMENT_DELETED audit record.
    """
    caller = require_caller(caller)
    validate_identifier(comment_id, "comment_id")

    comment = db.query(A3Comment).filter(A3Comment.id == comment_id).first()
    if not comment:
        raise _comment_not_found()
    a3 = comment.a3
    scope = ResourceScope(
        organization_id=a3.organization_id,
        department_id=a3.department_id,
        author_id=comment.author_id,
    )
    authorize(
        caller, scope, delete_action_for(caller, scope), _comment_not_found(),
        visible=a3.status != STATUS_ARCHIVED,
    )

    if a3.status == STATUS_ARCHIVED:
        raise Conflict("Cannot delete comments on an archived A3")
    if comment.deleted_at is not None:
        raise Conflict("Comment already deleted")

    snapshot = {
        "content": comment.content,
        "author_id": comment.author_id,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
    }
    now = datetime.now(timezone.utc)
    updated = (
        db.query(A3Comment)
        .filter(A3Comment.id == comment.id, A3Comment.deleted_at.is_(None))
        .update(
            {
                "content": settings.DELETED_COMMENT_SENTINEL,
                "deleted_at": now,
                "updated_at": now,
            },
            synchronize_session=False,
        )
    )
    if not updated:
        db.rollback()
        raise Conflict("Comment already deleted")
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s deleted by %s", comment.id, caller.id)

    audit.record(
        "comment", comment.id, caller.id, AuditAction.COMMENT_DELETED, snapshot,
        a3_id=a3.id,
        organization_id=a3.organization_id,
    )
    return comment


def list_comments(db: Session, caller: Optional[Caller], a3_id: str) -> list[A3Comment]:
    """All comments of a visible A3 in creation order, deleted ones included."""
    caller = require_caller(caller)
    a3 = load_visible(db, caller, a3_id)
    return (
        db.query(A3Comment)
        .filter(A3Comment.a3_id == a3.id)
        .order_by(A3Comment.created_at.asc(), A3Comment.id.asc())
        .all()
    )

"""A3 service — document create/read and the delete/archive/unarchive lifecycle.

Every handler follows the same order and stops at the first failure:
authenticate, validate ids, fetch, authorize, check lifecycle, validate
fields, mutate, audit.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import Conflict, NotFound
from app.models.a3_comment import A3Comment
from app.models.a3_document import A3Document
from app.models.audit_log import AuditLog
from app.models.organization import Department
from app.services import audit_service
from app.services.audit_service import AuditAction, AuditLogger, audit_logger
from app.services.guards import (
    authorize,
    clean_text,
    current_thresholds,
    require_caller,
    validate_identifier,
)
from app.services.permissions import (
    Action,
    Caller,
    ResourceScope,
    delete_action_for,
    evaluate,
)

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_ARCHIVED = "archived"

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
SEARCH_MAX_LENGTH = 200


def _a3_not_found() -> NotFound:
    return NotFound("A3 not found")


def scope_of(a3: A3Document) -> ResourceScope:
    return ResourceScope(
        organization_id=a3.organization_id,
        department_id=a3.department_id,
        author_id=a3.author_id,
    )


def _load(db: Session, a3_id: str) -> Optional[A3Document]:
    return db.query(A3Document).filter(A3Document.id == a3_id).first()


def load_authorized(db: Session, caller: Caller, a3_id: str, action: Action) -> A3Document:
    """Validate the id, fetch, and authorize. Lifecycle is left to the caller."""
    validate_identifier(a3_id, "a3_id")
    a3 = _load(db, a3_id)
    if not a3:
        raise _a3_not_found()
    authorize(
        caller, scope_of(a3), action, _a3_not_found(),
        visible=a3.status != STATUS_ARCHIVED,
    )
    return a3


def load_visible(db: Session, caller: Caller, a3_id: str) -> A3Document:
    """Readable, active document; archived ones are reported as not found."""
    a3 = load_authorized(db, caller, a3_id, Action.READ)
    if a3.status == STATUS_ARCHIVED:
        raise _a3_not_found()
    return a3


def _snapshot(db: Session, a3: A3Document) -> dict:
    comment_count = (
        db.query(func.count(A3Comment.id)).filter(A3Comment.a3_id == a3.id).scalar()
    )
    return {
        "title": a3.title,
        "description": a3.description,
        "status": a3.status,
        "author_id": a3.author_id,
        "department_id": a3.department_id,
        "created_at": a3.created_at.isoformat() if a3.created_at else None,
        "comment_count": comment_count,
    }


def create_document(
    db: Session,
    caller: Optional[Caller],
    department_id: str,
    title: str,
    description: Optional[str] = None,
    audit: AuditLogger = audit_logger,
) -> A3Document:
    """Create an active A3 in a department the caller is a member of."""
    caller = require_caller(caller)
    validate_identifier(department_id, "department_id")

    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise NotFound("Department not found")
    authorize(
        caller,
        ResourceScope(organization_id=department.organization_id, department_id=department.id),
        Action.CREATE,
        NotFound("Department not found"),
    )

    title = clean_text(title, "title", TITLE_MAX_LENGTH)
    description = clean_text(description, "description", DESCRIPTION_MAX_LENGTH, required=False)

    a3 = A3Document(
        id=str(uuid.uuid4()),
        organization_id=department.organization_id,
        department_id=department.id,
        author_id=caller.id,
        title=title,
        description=description,
        status=STATUS_ACTIVE,
    )
    db.add(a3)
    db.commit()
    db.refresh(a3)
    logger.info("A3 %s created by %s", a3.id, caller.id)

    audit.record(
        "a3", a3.id, caller.id, AuditAction.CREATED,
        {"title": a3.title, "department_id": a3.department_id},
        a3_id=a3.id,
        organization_id=a3.organization_id,
    )
    return a3


def get_document(db: Session, caller: Optional[Caller], a3_id: str) -> A3Document:
    caller = require_caller(caller)
    return load_visible(db, caller, a3_id)


def list_documents(
    db: Session,
    caller: Optional[Caller],
    search: Optional[str] = None,
    archived: bool = False,
) -> list[A3Document]:
    """List documents the caller can see.

    With ``archived=True`` only archived documents the caller could restore
    are returned (the unarchive path); otherwise only active ones.
    """
    caller = require_caller(caller)
    search = clean_text(search, "search", SEARCH_MAX_LENGTH, required=False)

    if caller.organization_id is None or not caller.roles:
        return []

    query = db.query(A3Document).filter(
        A3Document.organization_id == caller.organization_id,
        A3Document.department_id.in_(list(caller.roles)),
        A3Document.status == (STATUS_ARCHIVED if archived else STATUS_ACTIVE),
    )
    if search:
        query = query.filter(func.lower(A3Document.title).contains(search.lower(), autoescape=True))

    thresholds = current_thresholds()
    action = Action.UNARCHIVE if archived else Action.READ
    return [
        a3 for a3 in query.order_by(A3Document.created_at.desc()).all()
        if evaluate(caller, scope_of(a3), action, thresholds).allowed
    ]


def delete_document(
    db: Session,
    caller: Optional[Caller],
    a3_id: str,
    audit: AuditLogger = audit_logger,
) -> dict:
    """Hard-delete an A3 (comments cascade). Archived A3s must be unarchived first."""
    caller = require_caller(caller)
    validate_identifier(a3_id, "a3_id")
    a3 = _load(db, a3_id)
    if not a3:
        raise _a3_not_found()
    scope = scope_of(a3)
    authorize(
        caller, scope, delete_action_for(caller, scope), _a3_not_found(),
        visible=a3.status != STATUS_ARCHIVED,
    )

    if a3.status == STATUS_ARCHIVED:
        raise Conflict("Archived A3 must be unarchived before deletion")

    # Captured before the row disappears
    snapshot = _snapshot(db, a3)
    organization_id = a3.organization_id

    deleted = (
        db.query(A3Document)
        .filter(A3Document.id == a3_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise _a3_not_found()
    db.commit()
    db.expunge(a3)
    logger.info("A3 %s deleted by %s", a3_id, caller.id)

    audit.record(
        "a3", a3_id, caller.id, AuditAction.DELETED, snapshot,
        a3_id=a3_id,
        organization_id=organization_id,
    )
    return {"status": "deleted", "id": a3_id}


def _transition(
    db: Session,
    a3: A3Document,
    from_status: str,
    values: dict,
) -> None:
    """Conditional status update; losing a concurrent race is a Conflict."""
    updated = (
        db.query(A3Document)
        .filter(A3Document.id == a3.id, A3Document.status == from_status)
        .update(values, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise Conflict(f"A3 is no longer {from_status}")
    db.commit()
    db.refresh(a3)


def archive_document(
    db: Session,
    caller: Optional[Caller],
    a3_id: str,
    audit: AuditLogger = audit_logger,
) -> A3Document:
    caller = require_caller(caller)
    a3 = load_authorized(db, caller, a3_id, Action.ARCHIVE)
    if a3.status == STATUS_ARCHIVED:
        raise Conflict("A3 is already archived")

    previous = {"status": a3.status, "title": a3.title}
    now = datetime.now(timezone.utc)
    _transition(db, a3, STATUS_ACTIVE, {
        "status": STATUS_ARCHIVED,
        "archived_at": now,
        "updated_at": now,
    })
    logger.info("A3 %s archived by %s", a3.id, caller.id)

    audit.record(
        "a3", a3.id, caller.id, AuditAction.ARCHIVED, {"previous": previous},
        a3_id=a3.id,
        organization_id=a3.organization_id,
    )
    return a3


def unarchive_document(
    db: Session,
    caller: Optional[Caller],
    a3_id: str,
    audit: AuditLogger = audit_logger,
) -> A3Document:
    """Restore path: the only operation that acts on an archived A3."""
    caller = require_caller(caller)
    a3 = load_authorized(db, caller, a3_id, Action.UNARCHIVE)
    if a3.status != STATUS_ARCHIVED:
        raise Conflict("A3 is not archived")

    previous = {
        "status": a3.status,
        "archived_at": a3.archived_at.isoformat() if a3.archived_at else None,
    }
    _transition(db, a3, STATUS_ARCHIVED, {
        "status": STATUS_ACTIVE,
        "archived_at": None,
        "updated_at": datetime.now(timezone.utc),
    })
    logger.info("A3 %s unarchived by %s", a3.id, caller.id)

    audit.record(
        "a3", a3.id, caller.id, AuditAction.UNARCHIVED, {"previous": previous},
        a3_id=a3.id,
        organization_id=a3.organization_id,
    )
    return a3


def list_activity(db: Session, caller: Optional[Caller], a3_id: str) -> list[AuditLog]:
    """Audit trail of an A3 and its comments, newest first."""
    caller = require_caller(caller)
    a3 = load_visible(db, caller, a3_id)
    return audit_service.list_for_a3(db, a3.id)

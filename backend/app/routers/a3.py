"""A3 router — documents, their lifecycle, comments, and activity."""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.auth import get_optional_caller
from app.middleware.rate_limit import limiter
from app.schemas.a3 import A3Create, A3Response, A3ListResponse, DeleteResponse
from app.schemas.activity import ActivityResponse, ActivityListResponse
from app.schemas.comment import CommentCreate, CommentResponse, CommentListResponse
from app.services import a3_service, comment_service
from app.services.audit_service import AuditLogger, get_audit_logger
from app.services.permissions import Caller

router = APIRouter(prefix="/api/a3", tags=["a3"])


def _a3_to_response(a3) -> A3Response:
    return A3Response(
        id=a3.id,
        organization_id=a3.organization_id,
        department_id=a3.department_id,
        author_id=a3.author_id,
        title=a3.title,
        description=a3.description,
        status=a3.status,
        archived_at=a3.archived_at.isoformat() if a3.archived_at else None,
        created_at=a3.created_at.isoformat() if a3.created_at else "",
        updated_at=a3.updated_at.isoformat() if a3.updated_at else "",
    )


def comment_to_response(comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        a3_id=comment.a3_id,
        author_id=comment.author_id,
        content=comment.content,
        is_deleted=comment.deleted_at is not None,
        created_at=comment.created_at.isoformat() if comment.created_at else "",
        deleted_at=comment.deleted_at.isoformat() if comment.deleted_at else None,
    )


@router.post("", response_model=A3Response, status_code=201)
def create_a3(
    req: A3Create,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Create an A3 in one of the caller's departments (MEMBER or above)."""
    a3 = a3_service.create_document(db, caller, req.department_id, req.title, req.description, audit=audit)
    return _a3_to_response(a3)


@router.get("", response_model=A3ListResponse)
@limiter.limit(lambda: settings.LIST_RATE_LIMIT)
def list_a3s(
    request: Request,
    search: Optional[str] = Query(None),
    archived: bool = Query(False),
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """List visible A3s, optionally filtered by title. archived=true lists restorable ones."""
    a3s = a3_service.list_documents(db, caller, search=search, archived=archived)
    return A3ListResponse(a3s=[_a3_to_response(a) for a in a3s], total=len(a3s))


@router.get("/{a3_id}", response_model=A3Response)
def get_a3(
    a3_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    return _a3_to_response(a3_service.get_document(db, caller, a3_id))


@router.delete("/{a3_id}", response_model=DeleteResponse)
def delete_a3(
    a3_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Delete an A3 and its comments (author or MANAGER)."""
    return a3_service.delete_document(db, caller, a3_id, audit=audit)


@router.patch("/{a3_id}/archive", response_model=A3Response)
def archive_a3(
    a3_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
    audit: AuditLogger = Depends(get_audit_logger),
):
    return _a3_to_response(a3_service.archive_document(db, caller, a3_id, audit=audit))


@router.patch("/{a3_id}/unarchive", response_model=A3Response)
def unarchive_a3(
    a3_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
    audit: AuditLogger = Depends(get_audit_logger),
):
    return _a3_to_response(a3_service.unarchive_document(db, caller, a3_id, audit=audit))


@router.get("/{a3_id}/comments", response_model=CommentListResponse)
@limiter.limit(lambda: settings.LIST_RATE_LIMIT)
def list_comments(
    request: Request,
    a3_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Comments in creation order; deleted ones keep their place with the sentinel text."""
    comments = comment_service.list_comments(db, caller, a3_id)
    return CommentListResponse(
        comments=[comment_to_response(c) for c in comments],
        total=len(comments),
    )


@router.post("/{a3_id}/comments", response_model=CommentResponse, status_code=201)
def create_comment(
    a3_id: str,
    req: CommentCreate,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
    audit: AuditLogger = Depends(get_audit_logger),
):
    comment = comment_service.create_comment(db, caller, a3_id, req.content, audit=audit)
    return comment_to_response(comment)


@router.get("/{a3_id}/activity", response_model=ActivityListResponse)
def list_activity(
    a3_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Audit trail for an A3 and its comments, newest first."""
    records = a3_service.list_activity(db, caller, a3_id)
    return ActivityListResponse(
        a3_id=a3_id,
        activity=[
            ActivityResponse(
                id=r.id,
                entity_type=r.entity_type,
                entity_id=r.entity_id,
                action=r.action,
                actor_id=r.actor_id,
                details=json.loads(r.details) if r.details else {},
                created_at=r.created_at.isoformat() if r.created_at else "",
            )
            for r in records
        ],
    )

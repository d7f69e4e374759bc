"""Comments router — deletion by comment id."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth import get_optional_caller
from app.routers.a3 import comment_to_response
from app.schemas.comment import CommentResponse
from app.services import comment_service
from app.services.audit_service import AuditLogger, get_audit_logger
from app.services.permissions import Caller

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.delete("/{comment_id}", response_model=CommentResponse)
def delete_comment(
    comment_id: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Soft-delete a comment (author or MANAGER). Returns the sentinel-marked comment."""
    comment = comment_service.delete_comment(db, caller, comment_id, audit=audit)
    return comment_to_response(comment)

"""Comment request/response schemas."""

from typing import Optional
from pydantic import BaseModel


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: str
    a3_id: str
    author_id: str
    content: str
    is_deleted: bool
    created_at: str
    deleted_at: Optional[str]

    class Config:
        from_attributes = True


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    total: int

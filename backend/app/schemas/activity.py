"""Activity (audit trail) response schemas."""

from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    action: str  # CREATED | DELETED | ARCHIVED | UNARCHIVED | COMMENT_CREATED | COMMENT_DELETED
    actor_id: str
    details: dict
    created_at: str


class ActivityListResponse(BaseModel):
    a3_id: str
    activity: list[ActivityResponse]

"""A3 document request/response schemas."""

from typing import Optional
from pydantic import BaseModel


class A3Create(BaseModel):
    department_id: str
    title: str
    description: Optional[str] = None


class A3Response(BaseModel):
    id: str
    organization_id: str
    department_id: str
    author_id: str
    title: str
    description: Optional[str]
    status: str  # active | archived
    archived_at: Optional[str]
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class A3ListResponse(BaseModel):
    a3s: list[A3Response]
    total: int


class DeleteResponse(BaseModel):
    status: str = "deleted"
    id: str

"""Organization, department and membership schemas."""

from pydantic import BaseModel


class OrganizationCreate(BaseModel):
    name: str


class OrganizationResponse(BaseModel):
    id: str
    name: str
    created_at: str


class DepartmentCreate(BaseModel):
    name: str


class DepartmentResponse(BaseModel):
    id: str
    organization_id: str
    name: str
    created_at: str


class MemberAssign(BaseModel):
    email: str
    role: str  # VIEWER | MEMBER | MANAGER


class MemberResponse(BaseModel):
    user_id: str
    department_id: str
    role: str

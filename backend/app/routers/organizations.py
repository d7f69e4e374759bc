"""Organizations router — tenants, departments, and department roles."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth import get_optional_caller
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    DepartmentCreate,
    DepartmentResponse,
    MemberAssign,
    MemberResponse,
)
from app.services import organization_service
from app.services.permissions import Caller

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


@router.post("", response_model=OrganizationResponse, status_code=201)
def create_organization(
    req: OrganizationCreate,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Create an organization; the caller becomes its owner."""
    org = organization_service.create_organization(db, caller, req.name)
    return OrganizationResponse(id=org.id, name=org.name, created_at=org.created_at.isoformat())


@router.post("/departments", response_model=DepartmentResponse, status_code=201)
def create_department(
    req: DepartmentCreate,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Create a department in the caller's organization (owner only)."""
    department = organization_service.create_department(db, caller, req.name)
    return DepartmentResponse(
        id=department.id,
        organization_id=department.organization_id,
        name=department.name,
        created_at=department.created_at.isoformat(),
    )


@router.put("/departments/{department_id}/members", response_model=MemberResponse)
def assign_member(
    department_id: str,
    req: MemberAssign,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Set a user's role in a department (owner only)."""
    membership = organization_service.assign_member(db, caller, department_id, req.email, req.role)
    return MemberResponse(
        user_id=membership.user_id,
        department_id=membership.department_id,
        role=membership.role,
    )

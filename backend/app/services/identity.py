"""Builds the Caller identity handed to every operation."""

from sqlalchemy.orm import Session

from app.models.organization import UserDepartment
from app.models.user import User
from app.services.permissions import Caller, Role


def build_caller(db: Session, user: User) -> Caller:
    """Snapshot the user's tenant and department roles."""
    memberships = db.query(UserDepartment).filter(UserDepartment.user_id == user.id).all()
    return Caller(
        id=user.id,
        organization_id=user.organization_id,
        roles={m.department_id: Role.parse(m.role) for m in memberships},
        is_owner=bool(user.is_owner),
    )

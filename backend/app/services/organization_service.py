"""Organization service — tenants, departments and department roles."""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from app.errors import Conflict, Forbidden, InvalidInput, NotFound
from app.models.organization import Department, Organization, UserDepartment
from app.models.user import User
from app.services.guards import clean_text, require_caller, validate_identifier
from app.services.permissions import Caller, Role

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255


def _require_owner(caller: Caller) -> str:
    if caller.organization_id is None:
        raise InvalidInput("User must belong to an organization")
    if not caller.is_owner:
        raise Forbidden("Owner access required")
    return caller.organization_id


def create_organization(db: Session, caller: Optional[Caller], name: str) -> Organization:
    """Create a tenant; the caller becomes its owner."""
    caller = require_caller(caller)
    if caller.organization_id is not None:
        raise Conflict("User already belongs to an organization")
    name = clean_text(name, "name", NAME_MAX_LENGTH)

    org = Organization(id=str(uuid.uuid4()), name=name)
    db.add(org)
    db.flush()

    user = db.query(User).filter(User.id == caller.id).first()
    user.organization_id = org.id
    user.is_owner = True
    db.commit()
    db.refresh(org)
    logger.info("Organization %s created by %s", org.id, caller.id)
    return org


def create_department(db: Session, caller: Optional[Caller], name: str) -> Department:
    caller = require_caller(caller)
    organization_id = _require_owner(caller)
    name = clean_text(name, "name", NAME_MAX_LENGTH)

    department = Department(id=str(uuid.uuid4()), organization_id=organization_id, name=name)
    db.add(department)
    db.commit()
    db.refresh(department)
    logger.info("Department %s created in %s", department.id, organization_id)
    return department


def assign_member(
    db: Session,
    caller: Optional[Caller],
    department_id: str,
    email: str,
    role: str,
) -> UserDepartment:
    """Give a user a role in a department, pulling them into the tenant if needed.

    Users that do not exist and users of other tenants are reported the same way.
    """
    caller = require_caller(caller)
    validate_identifier(department_id, "department_id")
    organization_id = _require_owner(caller)
    try:
        parsed_role = Role.parse(role)
    except ValueError:
        raise InvalidInput("Role must be VIEWER, MEMBER or MANAGER")

    department = db.query(Department).filter(
        Department.id == department_id,
        Department.organization_id == organization_id,
    ).first()
    if not department:
        raise NotFound("Department not found")

    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or user.organization_id not in (None, organization_id):
        raise NotFound("User not found")
    user.organization_id = organization_id

    membership = db.query(UserDepartment).filter(
        UserDepartment.user_id == user.id,
        UserDepartment.department_id == department.id,
    ).first()
    if membership:
        membership.role = parsed_role.name
    else:
        membership = UserDepartment(
            id=str(uuid.uuid4()),
            user_id=user.id,
            department_id=department.id,
            role=parsed_role.name,
        )
        db.add(membership)
    db.commit()
    db.refresh(membership)
    logger.info("User %s is %s in department %s", user.id, parsed_role.name, department.id)
    return membership

"""Shared fixtures: a throwaway SQLite database, seeded tenants, callers."""

import os
import sys
import uuid
from types import SimpleNamespace

# Add parent dir to path for imports; settings read the env at import time
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.database import Base, enable_sqlite_foreign_keys
from app.models.organization import Department, Organization, UserDepartment
from app.models.user import User
from app.services.audit_service import AuditLogger
from app.services.identity import build_caller


@pytest.fixture
def engine(tmp_path):
    """File-backed so the audit logger gets a genuinely separate connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'a3_test.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def audit(session_factory):
    return AuditLogger(session_factory)


class _BrokenSession:
    """Stands in for a session whose database has gone away."""

    def add(self, _obj):
        pass

    def commit(self):
        raise ConnectionError("audit store unavailable")

    def close(self):
        pass


@pytest.fixture
def broken_audit():
    return AuditLogger(_BrokenSession)


def _user(db, name, organization=None, is_owner=False):
    user = User(
        id=str(uuid.uuid4()),
        email=f"{name}@example.com",
        password_hash="not-used",
        display_name=name.title(),
        organization_id=organization.id if organization else None,
        is_owner=is_owner,
    )
    db.add(user)
    return user


def _member(db, user, department, role):
    db.add(UserDepartment(
        id=str(uuid.uuid4()),
        user_id=user.id,
        department_id=department.id,
        role=role,
    ))


@pytest.fixture
def world(db):
    """Two tenants.

    T1: departments D1 and D2.
        owner    MANAGER D1, organization owner
        manager  MANAGER D1
        member   MEMBER  D1  (caller C)
        peer     MEMBER  D1  (another member of D1)
        viewer   VIEWER  D1
        other    MEMBER  D2  (caller C2)
    T2: department E1.
        outsider MANAGER E1
    loner: no organization at all.
    """
    t1 = Organization(id=str(uuid.uuid4()), name="Tenant One")
    t2 = Organization(id=str(uuid.uuid4()), name="Tenant Two")
    db.add_all([t1, t2])
    db.flush()

    d1 = Department(id=str(uuid.uuid4()), organization_id=t1.id, name="Quality")
    d2 = Department(id=str(uuid.uuid4()), organization_id=t1.id, name="Logistics")
    e1 = Department(id=str(uuid.uuid4()), organization_id=t2.id, name="Quality")
    db.add_all([d1, d2, e1])
    db.flush()

    users = SimpleNamespace(
        owner=_user(db, "owner", t1, is_owner=True),
        manager=_user(db, "manager", t1),
        member=_user(db, "member", t1),
        peer=_user(db, "peer", t1),
        viewer=_user(db, "viewer", t1),
        other=_user(db, "other", t1),
        outsider=_user(db, "outsider", t2),
        loner=_user(db, "loner"),
    )
    db.flush()

    _member(db, users.owner, d1, "MANAGER")
    _member(db, users.manager, d1, "MANAGER")
    _member(db, users.member, d1, "MEMBER")
    _member(db, users.peer, d1, "MEMBER")
    _member(db, users.viewer, d1, "VIEWER")
    _member(db, users.other, d2, "MEMBER")
    _member(db, users.outsider, e1, "MANAGER")
    db.commit()

    return SimpleNamespace(
        t1=t1, t2=t2, d1=d1, d2=d2, e1=e1,
        users=users,
        caller=lambda user: build_caller(db, user),
    )

"""Tests for tenant, department, and membership management."""

import pytest

from app.errors import Conflict, Forbidden, InvalidInput, NotFound
from app.models.organization import UserDepartment
from app.services import organization_service
from app.services.permissions import Role


class TestOrganizations:
    def test_loner_founds_an_organization(self, db, world):
        org = organization_service.create_organization(db, world.caller(world.users.loner), "  Solo Inc ")
        assert org.name == "Solo Inc"
        caller = world.caller(world.users.loner)
        assert caller.organization_id == org.id
        assert caller.is_owner

    def test_members_cannot_found_a_second_one(self, db, world):
        with pytest.raises(Conflict):
            organization_service.create_organization(db, world.caller(world.users.member), "Again")


class TestDepartments:
    def test_owner_creates_department(self, db, world):
        dept = organization_service.create_department(db, world.caller(world.users.owner), "Maintenance")
        assert dept.organization_id == world.t1.id

    def test_manager_is_not_owner(self, db, world):
        with pytest.raises(Forbidden):
            organization_service.create_department(db, world.caller(world.users.manager), "Maintenance")

    def test_no_organization(self, db, world):
        with pytest.raises(InvalidInput):
            organization_service.create_department(db, world.caller(world.users.loner), "Maintenance")


class TestAssignMember:
    def test_promote_existing_member(self, db, world):
        organization_service.assign_member(
            db, world.caller(world.users.owner), world.d1.id, "viewer@example.com", "manager",
        )
        assert world.caller(world.users.viewer).role_in(world.d1.id) is Role.MANAGER
        assert db.query(UserDepartment).filter(UserDepartment.user_id == world.users.viewer.id).count() == 1

    def test_pulls_loner_into_tenant(self, db, world):
        organization_service.assign_member(
            db, world.caller(world.users.owner), world.d2.id, "LONER@example.com", "VIEWER",
        )
        caller = world.caller(world.users.loner)
        assert caller.organization_id == world.t1.id
        assert caller.role_in(world.d2.id) is Role.VIEWER

    def test_other_tenant_user_looks_missing(self, db, world):
        owner = world.caller(world.users.owner)
        with pytest.raises(NotFound) as foreign:
            organization_service.assign_member(db, owner, world.d1.id, "outsider@example.com", "MEMBER")
        with pytest.raises(NotFound) as missing:
            organization_service.assign_member(db, owner, world.d1.id, "nobody@example.com", "MEMBER")
        assert foreign.value.detail == missing.value.detail

    def test_foreign_department(self, db, world):
        with pytest.raises(NotFound):
            organization_service.assign_member(
                db, world.caller(world.users.owner), world.e1.id, "member@example.com", "MEMBER",
            )

    def test_bad_role(self, db, world):
        with pytest.raises(InvalidInput):
            organization_service.assign_member(
                db, world.caller(world.users.owner), world.d1.id, "member@example.com", "ADMIN",
            )

"""Permission evaluator — who may do what to an A3 resource.

``evaluate`` is a pure function of (caller, resource, action): no database,
no settings, no logging. Every allow/deny decision in the service layer comes
from here, so the full matrix is testable without a database.

Checks run in a fixed order:
  1. tenancy      caller.organization_id must equal resource.organization_id
  2. scope        caller must hold a role in resource.department_id
  3. threshold    the role must reach the action's minimum
                  (DELETE_OWN also passes for the resource's author)
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional


class Role(IntEnum):
    VIEWER = 1
    MEMBER = 2
    MANAGER = 3

    @classmethod
    def parse(cls, value: str) -> "Role":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown role '{value}'") from None


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    COMMENT = "comment"
    DELETE_OWN = "delete_own"
    DELETE_ANY = "delete_any"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"


class DenyReason(str, Enum):
    CROSS_TENANT = "cross_tenant"
    NO_MEMBERSHIP = "no_membership"
    INSUFFICIENT_ROLE = "insufficient_role"
    NOT_AUTHOR = "not_author"


@dataclass(frozen=True)
class Caller:
    """Authenticated identity plus its department roles."""

    id: str
    organization_id: Optional[str]
    roles: Mapping[str, Role] = field(default_factory=dict)
    is_owner: bool = False

    def role_in(self, department_id: str) -> Optional[Role]:
        return self.roles.get(department_id)


@dataclass(frozen=True)
class ResourceScope:
    """The tenancy-relevant facts of a resource."""

    organization_id: str
    department_id: str
    author_id: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None


ALLOW = Decision(allowed=True)

DEFAULT_THRESHOLDS: Mapping[Action, Role] = MappingProxyType({
    Action.READ: Role.VIEWER,
    Action.CREATE: Role.MEMBER,
    Action.COMMENT: Role.MEMBER,
    Action.DELETE_OWN: Role.MANAGER,  # authors bypass this
    Action.DELETE_ANY: Role.MANAGER,
    Action.ARCHIVE: Role.MANAGER,
    Action.UNARCHIVE: Role.MANAGER,
})


def thresholds_from_settings(archive_min_role: str, unarchive_min_role: str) -> Mapping[Action, Role]:
    """Default thresholds with the configurable archive/unarchive minimums applied."""
    thresholds = dict(DEFAULT_THRESHOLDS)
    thresholds[Action.ARCHIVE] = Role.parse(archive_min_role)
    thresholds[Action.UNARCHIVE] = Role.parse(unarchive_min_role)
    return MappingProxyType(thresholds)


def delete_action_for(caller: Caller, resource: ResourceScope) -> Action:
    """Pick DELETE_OWN for the author, DELETE_ANY for everyone else."""
    if resource.author_id is not None and resource.author_id == caller.id:
        return Action.DELETE_OWN
    return Action.DELETE_ANY


def evaluate(
    caller: Caller,
    resource: ResourceScope,
    action: Action,
    thresholds: Mapping[Action, Role] = DEFAULT_THRESHOLDS,
) -> Decision:
    """Decide whether ``caller`` may perform ``action`` on ``resource``."""
    if caller.organization_id is None or caller.organization_id != resource.organization_id:
        return Decision(False, DenyReason.CROSS_TENANT)

    role = caller.role_in(resource.department_id)
    if role is None:
        return Decision(False, DenyReason.NO_MEMBERSHIP)

    if action is Action.DELETE_OWN:
        if resource.author_id is not None and resource.author_id == caller.id:
            return ALLOW
        if role < thresholds[action]:
            return Decision(False, DenyReason.NOT_AUTHOR)
        return ALLOW

    if role < thresholds[action]:
        return Decision(False, DenyReason.INSUFFICIENT_ROLE)
    return ALLOW

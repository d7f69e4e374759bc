"""Shared pre-mutation checks used by every operation handler."""

import logging
import uuid
from typing import Mapping, Optional

from app.config import settings
from app.errors import Forbidden, InvalidInput, NotFound, Unauthenticated
from app.services.permissions import (
    Action,
    Caller,
    ResourceScope,
    Role,
    evaluate,
    thresholds_from_settings,
)

logger = logging.getLogger(__name__)

POLICY_NOT_FOUND = "not_found"
POLICY_FORBIDDEN = "forbidden"


def require_caller(caller: Optional[Caller]) -> Caller:
    """Fail with Unauthenticated before anything touches the database."""
    if caller is None:
        raise Unauthenticated()
    return caller


def validate_identifier(value: str, field: str = "id") -> str:
    """Accept only canonical (lowercase, hyphenated) UUID strings."""
    try:
        parsed = uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise InvalidInput(f"Invalid {field}")
    if str(parsed) != value:
        raise InvalidInput(f"Invalid {field}")
    return value


def clean_text(value: Optional[str], field: str, max_length: int, required: bool = True) -> Optional[str]:
    """Trim, then enforce non-empty (when required) and max length."""
    if value is None:
        if required:
            raise InvalidInput(f"{field} is required")
        return None
    cleaned = value.strip()
    if not cleaned:
        if required:
            raise InvalidInput(f"{field} cannot be empty")
        return None
    if len(cleaned) > max_length:
        raise InvalidInput(f"{field} must be at most {max_length} characters")
    return cleaned


def current_thresholds() -> Mapping[Action, Role]:
    return thresholds_from_settings(settings.ARCHIVE_MIN_ROLE, settings.UNARCHIVE_MIN_ROLE)


def authorize(
    caller: Caller,
    resource: ResourceScope,
    action: Action,
    not_found: NotFound,
    policy: Optional[str] = None,
    visible: bool = True,
) -> None:
    """Raise the policy-chosen error unless ``caller`` may perform ``action``.

    Callers who cannot read the resource always get ``not_found`` so that
    existence is never disclosed. Under the ``forbidden`` policy, callers who
    can read it but lack the role for ``action`` get 403 instead. A resource
    that is not ``visible`` (archived) reads as missing, so it never gets 403.
    """
    thresholds = current_thresholds()
    decision = evaluate(caller, resource, action, thresholds)
    if decision.allowed:
        return

    policy = policy or settings.DENIAL_POLICY
    logger.info(
        "Denied %s for user %s: %s", action.value, caller.id, decision.reason.value
    )
    if (
        policy == POLICY_FORBIDDEN
        and visible
        and action is not Action.READ
        and evaluate(caller, resource, Action.READ, thresholds).allowed
    ):
        raise Forbidden()
    raise not_found

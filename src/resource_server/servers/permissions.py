"""Permission semantics of the supported hosting platforms.

GitHub reports a single role per collaborator; stronger roles carry every
weaker one. GitLab reports a numeric access level per project member. Both
are normalized into the permission strings held by a PermissionRecord.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import IntEnum


READ = "read"
TRIAGE = "triage"
WRITE = "write"
MAINTAIN = "maintain"
ADMIN = "admin"

# Each role mapped to every permission it grants
GITHUB_PERMISSION_IMPLIES: dict[str, frozenset[str]] = {
    ADMIN: frozenset({ADMIN, MAINTAIN, WRITE, TRIAGE, READ}),
    MAINTAIN: frozenset({MAINTAIN, WRITE, TRIAGE, READ}),
    WRITE: frozenset({WRITE, TRIAGE, READ}),
    TRIAGE: frozenset({TRIAGE, READ}),
    READ: frozenset({READ}),
    "none": frozenset(),
}

# Legacy names used by the boolean "permissions" map of the GitHub user object
_GITHUB_FLAG_ALIASES = {
    "pull": READ,
    "triage": TRIAGE,
    "push": WRITE,
    "maintain": MAINTAIN,
    "admin": ADMIN,
}


def grants(held: Iterable[str], required: str) -> bool:
    """Return True if any held permission implies ``required``."""
    return any(
        required in GITHUB_PERMISSION_IMPLIES.get(permission, frozenset({permission}))
        for permission in held
    )


def expand_github_permissions(
    role: str | None,
    flags: Mapping[str, bool] | None = None,
) -> frozenset[str]:
    """Expand a GitHub role and permission flags into granted permissions.

    Args:
        role: ``role_name`` or ``permission`` from the collaborator API.
        flags: Boolean ``user.permissions`` map (``pull``, ``push``, ...).

    Returns:
        Every permission granted, including implied ones.
    """
    granted: set[str] = set()
    if role:
        granted |= GITHUB_PERMISSION_IMPLIES.get(role.lower(), frozenset())
    for flag, enabled in (flags or {}).items():
        name = _GITHUB_FLAG_ALIASES.get(flag)
        if enabled and name:
            granted |= GITHUB_PERMISSION_IMPLIES[name]
    return frozenset(granted)


class GitLabAccessLevel(IntEnum):
    """GitLab project member access levels."""

    NO_ACCESS = 0
    MINIMAL_ACCESS = 5
    GUEST = 10
    PLANNER = 15
    REPORTER = 20
    DEVELOPER = 30
    MAINTAINER = 40
    OWNER = 50


def gitlab_permissions_for(access_level: int) -> frozenset[str]:
    """Map a GitLab access level onto the GitHub-style permission names."""
    if access_level >= GitLabAccessLevel.OWNER:
        return GITHUB_PERMISSION_IMPLIES[ADMIN]
    if access_level >= GitLabAccessLevel.MAINTAINER:
        return GITHUB_PERMISSION_IMPLIES[MAINTAIN]
    if access_level >= GitLabAccessLevel.DEVELOPER:
        return GITHUB_PERMISSION_IMPLIES[WRITE]
    if access_level >= GitLabAccessLevel.REPORTER:
        return GITHUB_PERMISSION_IMPLIES[READ]
    return frozenset()

"""Local user record merging.

Local records are plain mappings of field name to value, shaped like the
host application's user table. Nothing here persists a record; the host
stores whatever these helpers return.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from resource_server.observability.logging import get_logger
from resource_server.security.passwords import random_password_seed


if TYPE_CHECKING:
    from resource_server.security.passwords import PasswordHasher

logger = get_logger(__name__)

LocalRecord = dict[str, Any]

PLACEMENT_FIELD = "pid"
PASSWORD_FIELD = "password"
GROUPS_FIELD = "usergroup"


def create_record_shell(hasher: PasswordHasher, storage_pid: int = 0) -> LocalRecord:
    """Create the minimal record for a user seen for the first time.

    Args:
        hasher: Backend used to hash the random, never-used password.
        storage_pid: Placement marker of the new record.

    Returns:
        Record holding the placement marker and a password hash.
    """
    return {
        PLACEMENT_FIELD: storage_pid,
        PASSWORD_FIELD: hasher.hash(random_password_seed()),
    }


def merge_record(current: Mapping[str, Any], fields: Mapping[str, Any]) -> LocalRecord:
    """Overlay ``fields`` onto a copy of ``current``."""
    return {**current, **fields}


def assign_default_groups(
    record: Mapping[str, Any],
    default_groups: Iterable[str],
    field: str = GROUPS_FIELD,
) -> LocalRecord:
    """Add the provider's default groups to a record's group list.

    Groups are stored as a comma-separated string. Existing groups keep their
    order; defaults not yet present are appended.

    Args:
        record: Record returned by ``update_user_record``.
        default_groups: Group ids from the provider configuration.
        field: Name of the group list field.

    Returns:
        A new record with the merged group list.
    """
    existing = str(record.get(field) or "")
    groups = [g.strip() for g in existing.split(",") if g.strip()]
    for default in default_groups:
        group = str(default).strip()
        if group and group not in groups:
            groups.append(group)

    logger.debug("Assigned default groups", field=field, groups=groups)
    return merge_record(record, {field: ",".join(groups)})

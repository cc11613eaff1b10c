"""Local user record helpers."""

from resource_server.records.merger import (
    LocalRecord,
    assign_default_groups,
    create_record_shell,
    merge_record,
)


__all__ = [
    "LocalRecord",
    "assign_default_groups",
    "create_record_shell",
    "merge_record",
]

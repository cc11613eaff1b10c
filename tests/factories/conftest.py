"""Factory configuration and exports.

This module exports all factories for convenient importing in tests.
"""

from tests.factories.identities import (
    GitHubResourceOwnerFactory,
    GitLabResourceOwnerFactory,
    PermissionRecordFactory,
)


__all__ = [
    "GitHubResourceOwnerFactory",
    "GitLabResourceOwnerFactory",
    "PermissionRecordFactory",
]

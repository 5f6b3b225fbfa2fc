"""Provisioner API response payloads for tests."""

from typing import Any


def group(
    *,
    group_id: str = "group-1",
    name: str = "test-group",
    description: str = "Load Test Group",
) -> dict[str, Any]:
    """Build a group payload."""
    return {
        "ID": group_id,
        "Sequence": 0,
        "Name": name,
        "Description": description,
        "Version": "",
        "Image": "",
        "MaxRolling": 1,
        "MattermostEnv": None,
        "CreateAt": 4070908800000,
        "DeleteAt": 0,
        "APISecurityLock": False,
        "LockAcquiredBy": None,
        "LockAcquiredAt": 0,
    }


def installation(
    *,
    installation_id: str = "installation-1",
    state: str = "creation-requested",
    create_at: int = 4070908800000,
    group_id: str | None = "group-1",
) -> dict[str, Any]:
    """Build an installation payload."""
    return {
        "ID": installation_id,
        "OwnerID": "owner-1",
        "GroupID": group_id,
        "Version": "stable",
        "Image": "mattermost/mattermost-enterprise-edition",
        "Name": "",
        "Database": "aws-multitenant-rds-postgres",
        "Filestore": "aws-multitenant-s3",
        "License": "",
        "Size": "1000users",
        "Affinity": "multitenant",
        "State": state,
        "CRVersion": "installation.mattermost.com/v1beta1",
        "CreateAt": create_at,
        "DeleteAt": 0,
        "APISecurityLock": False,
        "DeletionLocked": False,
        "LockAcquiredBy": None,
        "LockAcquiredAt": 0,
        "DNSRecords": [],
    }

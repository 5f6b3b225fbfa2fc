"""Models for provisioner API requests and responses."""

from datetime import datetime, timezone

from pydantic import Field

from cloudburst.models.base import Model

INSTALLATION_STATE_STABLE = "stable"
INSTALLATION_STATE_DELETED = "deleted"
INSTALLATION_STATE_DELETION_REQUESTED = "deletion-requested"
INSTALLATION_STATE_DELETION_IN_PROGRESS = "deletion-in-progress"
INSTALLATION_STATE_DELETION_FINAL_CLEANUP = "deletion-final-cleanup"

INSTALLATION_DELETION_STATES = frozenset(
    {
        INSTALLATION_STATE_DELETION_REQUESTED,
        INSTALLATION_STATE_DELETION_IN_PROGRESS,
        INSTALLATION_STATE_DELETION_FINAL_CLEANUP,
    }
)

# Any state label containing this marks a terminal failure
# (creation-failed, update-failed, deletion-failed).
FAILED_STATE_MARKER = "failed"

INSTALLATION_AFFINITY_MULTITENANT = "multitenant"


def is_failed_state(state: str) -> bool:
    """Return True if the state label denotes a failure."""
    return FAILED_STATE_MARKER in state


class Group(Model):
    """A group of installations from the provisioner API."""

    id: str = Field(..., alias="ID")
    name: str = Field(default="", alias="Name")
    description: str = Field(default="", alias="Description")
    sequence: int = Field(default=0, alias="Sequence")
    create_at: int = Field(default=0, alias="CreateAt")
    delete_at: int = Field(default=0, alias="DeleteAt")


class Installation(Model):
    """An installation record from the provisioner API."""

    id: str = Field(..., alias="ID")
    state: str = Field(..., alias="State")
    create_at: int = Field(
        default=0, alias="CreateAt", description="Creation time in epoch ms"
    )
    delete_at: int = Field(default=0, alias="DeleteAt")
    owner_id: str = Field(default="", alias="OwnerID")
    group_id: str | None = Field(default=None, alias="GroupID")
    database: str = Field(default="", alias="Database")
    filestore: str = Field(default="", alias="Filestore")
    size: str = Field(default="", alias="Size")
    affinity: str = Field(default="", alias="Affinity")

    @property
    def created_at(self) -> datetime:
        """Creation timestamp as an aware datetime."""
        return datetime.fromtimestamp(self.create_at / 1000, tz=timezone.utc)


class CreateGroupRequest(Model):
    """Payload for creating a group."""

    name: str = Field(..., alias="Name")
    description: str = Field(default="", alias="Description")
    api_security_lock: bool = Field(default=False, alias="APISecurityLock")


class CreateInstallationRequest(Model):
    """Payload for creating an installation."""

    owner_id: str = Field(..., alias="OwnerID")
    group_id: str = Field(..., alias="GroupID")
    database: str = Field(..., alias="Database")
    filestore: str = Field(..., alias="Filestore")
    size: str = Field(..., alias="Size")
    affinity: str = Field(..., alias="Affinity")
    dns: str = Field(..., alias="DNS")
    api_security_lock: bool = Field(default=False, alias="APISecurityLock")

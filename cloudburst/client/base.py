"""Abstract base class for provisioner API clients."""

from abc import ABC, abstractmethod

from cloudburst.models.provisioner import Group, Installation


class ProvisionerAPIError(RuntimeError):
    """Raised when a provisioner API call fails.

    ``status`` is the HTTP status code, or None when no usable response was
    received (connection refused, timeout, malformed body, ...).
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def is_transient(self) -> bool:
        """Whether retrying the same call may succeed."""
        return self.status is None or self.status >= 500


class ProvisionerClient(ABC):
    """Operations the load test consumes from the provisioner API.

    Lookups return None when the provisioner reports the resource as not
    found; every other failure raises ProvisionerAPIError.
    """

    @abstractmethod
    async def create_group(self, name: str, description: str) -> Group:
        """Create a group to hold the test installations."""

    @abstractmethod
    async def get_group(self, group_id: str) -> Group | None:
        """Fetch a group, or None if it does not exist."""

    @abstractmethod
    async def delete_group(self, group_id: str) -> None:
        """Delete a group."""

    @abstractmethod
    async def create_installation(
        self,
        *,
        owner_id: str,
        group_id: str,
        database: str,
        filestore: str,
        size: str,
        affinity: str,
        dns: str,
    ) -> Installation:
        """Request creation of an installation.

        Returns:
            The installation record as accepted by the provisioner

        """

    @abstractmethod
    async def get_installation(self, installation_id: str) -> Installation | None:
        """Fetch an installation, or None if it does not exist."""

    @abstractmethod
    async def delete_installation(self, installation_id: str) -> None:
        """Request deletion of an installation."""

"""In-memory provisioner for exercising the load test without a server."""

import asyncio
from collections import Counter, defaultdict, deque
from collections.abc import Sequence
from dataclasses import dataclass, field

from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.installer import new_id
from cloudburst.models.provisioner import (
    INSTALLATION_STATE_DELETED,
    INSTALLATION_STATE_DELETION_IN_PROGRESS,
    INSTALLATION_STATE_DELETION_REQUESTED,
    INSTALLATION_STATE_STABLE,
    Group,
    Installation,
)
from cloudburst.testing.factories import GroupFactory, InstallationFactory

DEFAULT_CREATION_STATES: Sequence[str | None] = (
    "creation-requested",
    "creation-in-progress",
    INSTALLATION_STATE_STABLE,
)

DEFAULT_DELETION_STATES: Sequence[str | None] = (
    INSTALLATION_STATE_DELETION_REQUESTED,
    INSTALLATION_STATE_DELETION_IN_PROGRESS,
    INSTALLATION_STATE_DELETED,
)


@dataclass(kw_only=True)
class FakeInstallation:
    """Scripted lifecycle of one installation.

    Every lookup returns the state at the current step and then advances,
    staying on the last state once the script is exhausted. A None state
    means the provisioner reports the installation as not found.
    """

    record: Installation
    states: Sequence[str | None]
    step: int = 0

    def advance(self) -> Installation | None:
        state = self.states[min(self.step, len(self.states) - 1)]
        self.step += 1
        if state is None:
            return None
        return self.record.model_copy(update={"state": state})


@dataclass(kw_only=True)
class FakeProvisioner(ProvisionerClient):
    """Provisioner client whose installations follow scripted states.

    ``creation_scripts`` are assigned to installations in creation order;
    installations beyond the scripts follow ``creation_states``.
    """

    creation_states: Sequence[str | None] = DEFAULT_CREATION_STATES
    deletion_states: Sequence[str | None] = DEFAULT_DELETION_STATES
    creation_scripts: deque[Sequence[str | None]] = field(default_factory=deque)
    missing_group_lookups: int = 0

    groups: dict[str, Group] = field(default_factory=dict)
    installations: dict[str, FakeInstallation] = field(default_factory=dict)
    calls: Counter[str] = field(default_factory=Counter)
    get_calls: Counter[str] = field(default_factory=Counter)
    delete_calls: Counter[str] = field(default_factory=Counter)
    failures: defaultdict[str, deque[ProvisionerAPIError]] = field(
        default_factory=lambda: defaultdict(deque)
    )
    in_flight_creates: int = 0
    max_in_flight_creates: int = 0

    def fail_next(
        self, operation: str, count: int = 1, *, status: int | None = 500
    ) -> None:
        """Make the next ``count`` calls of ``operation`` raise."""
        for _ in range(count):
            self.failures[operation].append(
                ProvisionerAPIError(f"injected {operation} failure", status=status)
            )

    def _record_call(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.failures[operation]:
            raise self.failures[operation].popleft()

    async def create_group(self, name: str, description: str) -> Group:
        self._record_call("create_group")
        group = GroupFactory.build(name=name, description=description)
        self.groups[group.id] = group
        return group

    async def get_group(self, group_id: str) -> Group | None:
        self._record_call("get_group")
        if self.missing_group_lookups > 0:
            self.missing_group_lookups -= 1
            return None
        return self.groups.get(group_id)

    async def delete_group(self, group_id: str) -> None:
        self._record_call("delete_group")
        if self.groups.pop(group_id, None) is None:
            raise ProvisionerAPIError(f"group {group_id} not found", status=404)

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
        self.in_flight_creates += 1
        self.max_in_flight_creates = max(
            self.max_in_flight_creates, self.in_flight_creates
        )
        try:
            # Let other batches interleave as they would on a real server.
            await asyncio.sleep(0)
            self._record_call("create_installation")
        finally:
            self.in_flight_creates -= 1

        states = (
            self.creation_scripts.popleft()
            if self.creation_scripts
            else self.creation_states
        )
        record = InstallationFactory.build(
            owner_id=owner_id,
            group_id=group_id,
            database=database,
            filestore=filestore,
            size=size,
            affinity=affinity,
        )
        self.installations[record.id] = FakeInstallation(record=record, states=states)
        return record

    async def get_installation(self, installation_id: str) -> Installation | None:
        self._record_call("get_installation")
        self.get_calls[installation_id] += 1
        fake = self.installations.get(installation_id)
        if fake is None:
            return None
        return fake.advance()

    async def delete_installation(self, installation_id: str) -> None:
        self._record_call("delete_installation")
        self.delete_calls[installation_id] += 1
        fake = self.installations.get(installation_id)
        if fake is None:
            raise ProvisionerAPIError(
                f"installation {installation_id} not found", status=404
            )
        fake.states = self.deletion_states
        fake.step = 0

    async def provision(self, count: int) -> list[Installation]:
        """Create ``count`` installations with placeholder parameters."""
        return [
            await self.create_installation(
                owner_id="owner",
                group_id="group",
                database="aws-multitenant-rds-postgres",
                filestore="aws-multitenant-s3",
                size="1000users",
                affinity="multitenant",
                dns=f"{new_id()[:6]}.loadtest.example.com",
            )
            for _ in range(count)
        ]

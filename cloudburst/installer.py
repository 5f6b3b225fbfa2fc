"""Concurrent batch creation of installations."""

import asyncio
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.models.provisioner import Installation

log = logging.getLogger(__name__)


def new_id() -> str:
    """Generate a random identifier."""
    return uuid.uuid4().hex


def batch_sizes(total: int, batch_size: int) -> Sequence[int]:
    """Split ``total`` into batches of at most ``batch_size``.

    The last batch holds the remainder, so the sizes always sum to ``total``.
    """
    if total < 0:
        raise ValueError(f"total must not be negative, got {total}")
    if batch_size < 1:
        raise ValueError(f"batch size must be at least 1, got {batch_size}")
    return [min(batch_size, total - start) for start in range(0, total, batch_size)]


@dataclass(frozen=True, kw_only=True)
class InstallationSpec:
    """Parameters shared by every installation created in a test."""

    owner_id: str
    group_id: str
    database: str
    filestore: str
    size: str
    affinity: str
    dns_domain: str

    def dns_name(self) -> str:
        """Return a unique DNS name for a new installation."""
        return f"{self.owner_id}-{new_id()[:6]}.{self.dns_domain}"


@dataclass(frozen=True, kw_only=True)
class BatchInstaller:
    """Creates installations in concurrent batches.

    Installations within a batch are requested serially, batches run in
    parallel. A batch size of 1 requests everything in parallel and a batch
    size equal to the total requests everything serially.
    """

    client: ProvisionerClient
    spec: InstallationSpec
    retry_interval: float = 0.0
    logger: logging.Logger = field(default=log, repr=False)

    async def create_installations(
        self, total: int, batch_size: int
    ) -> Mapping[str, Installation]:
        """Request ``total`` installations and return them keyed by ID."""
        sizes = batch_sizes(total, batch_size)
        self.logger.info(
            "Requesting %d installation(s) in %d batch(es) of up to %d",
            total,
            len(sizes),
            batch_size,
        )

        batches: asyncio.Queue[Sequence[Installation]] = asyncio.Queue()
        installations: dict[str, Installation] = {}

        async with asyncio.TaskGroup() as group:
            for number, count in enumerate(sizes):
                group.create_task(self._run_batch(batches, number, count))

            for _ in sizes:
                batch = await batches.get()
                for installation in batch:
                    installations[installation.id] = installation

        return installations

    async def _run_batch(
        self,
        out: asyncio.Queue[Sequence[Installation]],
        number: int,
        count: int,
    ) -> None:
        batch = await self.serial_batch_install(count)
        self.logger.debug("Batch %d finished with %d installation(s)", number, count)
        await out.put(batch)

    async def serial_batch_install(self, count: int) -> Sequence[Installation]:
        """Request ``count`` installations one after another.

        Rejected requests are retried until ``count`` installations have been
        accepted; failed attempts do not count towards the quota.
        """
        installations: list[Installation] = []
        while len(installations) < count:
            try:
                installation = await self.create_installation()
            except ProvisionerAPIError as exc:
                self.logger.warning("Failed to request installation creation: %s", exc)
                await asyncio.sleep(self.retry_interval)
                continue
            self.logger.info("Requested creation successfully: %s", installation.id)
            installations.append(installation)
        return installations

    async def create_installation(self) -> Installation:
        """Request creation of a single installation without retrying."""
        return await self.client.create_installation(
            owner_id=self.spec.owner_id,
            group_id=self.spec.group_id,
            database=self.spec.database,
            filestore=self.spec.filestore,
            size=self.spec.size,
            affinity=self.spec.affinity,
            dns=self.spec.dns_name(),
        )

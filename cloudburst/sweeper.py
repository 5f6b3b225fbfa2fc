"""Deletion of installations until the provisioner confirms removal."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.models.provisioner import (
    INSTALLATION_DELETION_STATES,
    INSTALLATION_STATE_DELETED,
    Installation,
)
from cloudburst.models.report import FailedReport
from cloudburst.poller import utcnow

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CleanupSweeper:
    """Deletes installations and blocks until they are gone."""

    client: ProvisionerClient
    interval: float = 0.0
    timeout: float | None = None
    clock: Callable[[], datetime] = utcnow
    logger: logging.Logger = field(default=log, repr=False)

    async def cleanup_installations(
        self, installations: Iterable[Installation]
    ) -> Sequence[FailedReport]:
        """Delete every installation, retrying until each one is deleted.

        Installations that can no longer be found are dropped and reported.

        Returns:
            Reports for installations that vanished before deletion was confirmed

        Raises:
            TimeoutError: If a timeout is set and exceeded

        """
        remaining = {installation.id: installation for installation in installations}
        reports: list[FailedReport] = []
        loop = asyncio.get_running_loop()
        deadline = None if self.timeout is None else loop.time() + self.timeout

        while remaining:
            for installation_id, known in list(remaining.items()):
                done, report = await self.sweep_installation(known)
                if report is not None:
                    reports.append(report)
                if done:
                    del remaining[installation_id]

            if not remaining:
                break

            if deadline is not None and loop.time() >= deadline:
                raise TimeoutError(
                    f"{len(remaining)} installation(s) were not deleted within "
                    f"{self.timeout} seconds"
                )

            # Yield to the event loop even when sweeping without a delay.
            await asyncio.sleep(self.interval)

        return reports

    async def sweep_installation(
        self, known: Installation
    ) -> tuple[bool, FailedReport | None]:
        """Advance deletion of one installation by a single step.

        Returns:
            Whether the installation left the working set, and a report if it
            vanished

        """
        try:
            fetched = await self.client.get_installation(known.id)
        except ProvisionerAPIError as exc:
            self.logger.warning("Failed to look up installation %s: %s", known.id, exc)
            return False, None

        if fetched is None:
            self.logger.warning(
                "Installation %s not found; will not retry deletion", known.id
            )
            return True, FailedReport(
                installation=known,
                timestamp=self.clock(),
                message=f"{known.id} not found",
                reason="not_found",
            )

        if fetched.state == INSTALLATION_STATE_DELETED:
            self.logger.info("Successfully deleted installation %s", fetched.id)
            return True, None

        if fetched.state in INSTALLATION_DELETION_STATES:
            return False, None

        try:
            await self.client.delete_installation(fetched.id)
        except ProvisionerAPIError as exc:
            self.logger.warning(
                "Failed to request deletion of installation %s: %s", fetched.id, exc
            )
        return False, None

"""Polling of installations until they converge to a terminal state."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.models.provisioner import (
    INSTALLATION_STATE_STABLE,
    Installation,
    is_failed_state,
)
from cloudburst.models.report import CompletedReport, FailedReport, Report

log = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, kw_only=True)
class ConvergencePoller:
    """Waits for installations to become stable or fail."""

    client: ProvisionerClient
    poll_interval: float = 5.0
    timeout: float | None = None
    clock: Callable[[], datetime] = utcnow
    logger: logging.Logger = field(default=log, repr=False)

    async def wait_for_installations(
        self, installations: Iterable[Installation]
    ) -> Sequence[Report]:
        """Poll every installation until it reaches a terminal condition.

        Args:
            installations: Installations as returned by the create call

        Returns:
            One report per installation, in the order they converged

        Raises:
            TimeoutError: If a timeout is set and exceeded

        """
        waiting = {installation.id: installation for installation in installations}
        reports: list[Report] = []
        loop = asyncio.get_running_loop()
        deadline = None if self.timeout is None else loop.time() + self.timeout

        while waiting:
            for installation_id, known in list(waiting.items()):
                report = await self.check_installation(known)
                if report is not None:
                    reports.append(report)
                    del waiting[installation_id]

            if not waiting:
                break

            if deadline is not None and loop.time() >= deadline:
                raise TimeoutError(
                    f"{len(waiting)} installation(s) did not converge within "
                    f"{self.timeout} seconds"
                )

            await asyncio.sleep(self.poll_interval)

        return reports

    async def check_installation(self, known: Installation) -> Report | None:
        """Fetch an installation once and report it if it reached a terminal state.

        Returns None while the installation is still converging or could not
        be fetched.
        """
        try:
            fetched = await self.client.get_installation(known.id)
        except ProvisionerAPIError as exc:
            self.logger.warning("Failed to fetch installation %s: %s", known.id, exc)
            return None

        if fetched is None:
            self.logger.error("Installation %s has gone missing", known.id)
            return FailedReport(
                installation=known,
                timestamp=self.clock(),
                message=f"installation {known.id} has gone missing",
                reason="missing",
            )

        if is_failed_state(fetched.state):
            self.logger.error(
                "Installation %s failed to be created (state=%s); not waiting for it",
                fetched.id,
                fetched.state,
            )
            return FailedReport(
                installation=fetched,
                timestamp=self.clock(),
                message=f"installation {fetched.id} reached state {fetched.state}",
            )

        if fetched.state != INSTALLATION_STATE_STABLE:
            return None

        report = CompletedReport(
            installation=fetched,
            created_at=fetched.created_at,
            completed_at=self.clock(),
        )
        self.logger.info(
            "Creation time for %s was: %.0f seconds", fetched.id, report.duration
        )
        return report

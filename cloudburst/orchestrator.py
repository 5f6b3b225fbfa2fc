"""Run orchestration for load tests against a provisioning server."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from cloudburst.aggregator import compile_results
from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.config import LoadTestConfig
from cloudburst.installer import BatchInstaller, InstallationSpec, new_id
from cloudburst.models.provisioner import Group
from cloudburst.models.report import FailedReport, Report, Results
from cloudburst.poller import ConvergencePoller
from cloudburst.sweeper import CleanupSweeper

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Outcome of a complete load test."""

    test_id: str
    results: Results
    run_results: Sequence[Results]
    reports: Sequence[Report]


def log_results(logger: logging.Logger, title: str, results: Results) -> None:
    """Log a results block."""
    logger.info(
        "%s: errors=%d successful=%d min=%.0fs median=%.0fs max=%.0fs",
        title,
        results.error_count,
        results.success_count,
        results.min_duration,
        results.median_duration,
        results.max_duration,
    )


@dataclass(frozen=True, kw_only=True)
class RunOrchestrator:
    """Runs load tests against a provisioner within a dedicated group."""

    client: ProvisionerClient
    config: LoadTestConfig
    test_id: str = field(default_factory=new_id)
    logger: logging.Logger = field(default=log, repr=False)

    async def run(self) -> RunSummary:
        """Create a group, run every repetition and delete the group.

        Raises:
            ProvisionerAPIError: If the group cannot be created, looked up or
                deleted
            TimeoutError: If a configured timeout is exceeded

        """
        group = await self.create_group()
        try:
            self.logger.info("Waiting for group %s to be created...", group.id)
            await self.wait_for_group(group.id)
            run_results, reports = await self.run_tests(group)
        except BaseException as exc:
            # Keep the error that aborted the run; a failed delete is secondary.
            try:
                await self.cleanup_group(group.id)
            except ProvisionerAPIError as cleanup_exc:
                self.logger.error("%s", cleanup_exc)
                exc.add_note(str(cleanup_exc))
            raise

        await self.cleanup_group(group.id)

        results = compile_results(reports)
        log_results(self.logger, "Completed test", results)
        return RunSummary(
            test_id=self.test_id,
            results=results,
            run_results=run_results,
            reports=reports,
        )

    async def run_tests(
        self, group: Group
    ) -> tuple[Sequence[Results], Sequence[Report]]:
        """Run the configured number of repetitions and collect every report."""
        installer = BatchInstaller(
            client=self.client,
            spec=InstallationSpec(
                owner_id=self.test_id,
                group_id=group.id,
                database=self.config.database,
                filestore=self.config.filestore,
                size=self.config.size,
                affinity=self.config.affinity,
                dns_domain=self.config.dns_domain,
            ),
            logger=self.logger,
        )
        poller = ConvergencePoller(
            client=self.client,
            poll_interval=self.config.poll_interval,
            timeout=self.config.timeout,
            logger=self.logger,
        )
        sweeper = CleanupSweeper(
            client=self.client,
            interval=self.config.cleanup_interval,
            timeout=self.config.timeout,
            logger=self.logger,
        )

        all_reports: list[Report] = []
        run_results: list[Results] = []

        runs = self.config.runs
        for run in range(1, runs + 1):
            self.logger.info("Run %d/%d: requesting installations...", run, runs)
            created = await installer.create_installations(
                self.config.total, self.config.batch
            )

            self.logger.info("Run %d/%d: waiting for installations...", run, runs)
            reports = list(await poller.wait_for_installations(created.values()))

            # Installations that vanished while converging have nothing left
            # to delete and are already reported.
            vanished = {
                report.installation.id
                for report in reports
                if isinstance(report, FailedReport) and report.reason == "missing"
            }
            self.logger.info("Run %d/%d: cleaning up installations...", run, runs)
            reports.extend(
                await sweeper.cleanup_installations(
                    installation
                    for installation_id, installation in created.items()
                    if installation_id not in vanished
                )
            )

            results = compile_results(reports)
            log_results(self.logger, f"Completed run {run}", results)
            run_results.append(results)
            all_reports.extend(reports)

        return run_results, all_reports

    async def create_group(self) -> Group:
        """Create the group all test installations belong to."""
        try:
            group = await self.client.create_group(
                self.test_id, f"Load Test Group for Test {self.test_id}"
            )
        except ProvisionerAPIError as exc:
            raise ProvisionerAPIError(
                f"Failed to create a group for test {self.test_id}: {exc}",
                status=exc.status,
            ) from exc
        self.logger.info("Created group %s for test %s", group.id, self.test_id)
        return group

    async def wait_for_group(self, group_id: str) -> Group:
        """Block until the group can be fetched.

        Missing groups and transient errors are retried, permanent errors
        are raised.
        """
        loop = asyncio.get_running_loop()
        deadline = (
            None if self.config.timeout is None else loop.time() + self.config.timeout
        )

        while True:
            try:
                group = await self.client.get_group(group_id)
            except ProvisionerAPIError as exc:
                if not exc.is_transient:
                    raise
                self.logger.warning("Failed to get group %s: %s", group_id, exc)
                group = None

            if group is not None:
                return group

            if deadline is not None and loop.time() >= deadline:
                raise TimeoutError(
                    f"Group {group_id} did not appear within "
                    f"{self.config.timeout} seconds"
                )

            await asyncio.sleep(self.config.group_interval)

    async def cleanup_group(self, group_id: str) -> None:
        """Delete the group once without retrying."""
        try:
            await self.client.delete_group(group_id)
        except ProvisionerAPIError as exc:
            raise ProvisionerAPIError(
                f"Failed to delete group {group_id}: {exc}", status=exc.status
            ) from exc
        self.logger.info("Deleted group %s", group_id)

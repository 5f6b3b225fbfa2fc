"""CLI entry point for the provisioner load test."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from pydantic import ValidationError

from cloudburst.client import HTTPProvisionerClient, ProvisionerAPIError
from cloudburst.client.config import ProvisionerConfig
from cloudburst.config import LoadTestConfig
from cloudburst.orchestrator import RunOrchestrator, RunSummary

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def log_summary(log: logging.Logger, summary: RunSummary) -> None:
    """Log a formatted summary of the load test."""
    results = summary.results
    log.info("=" * 80)
    log.info("Completed test %s", summary.test_id)
    log.info("=" * 80)
    log.info("Errors: %d", results.error_count)
    log.info("Successful Installs: %d", results.success_count)
    log.info("Minimum Time to Reconcile: %.0f seconds", results.min_duration)
    log.info("Median Time to Reconcile: %.0f seconds", results.median_duration)
    log.info("Maximum Time to Reconcile: %.0f seconds", results.max_duration)


def format_output(summary: RunSummary) -> dict[str, Any]:
    """Format a run summary for JSON output."""
    return {
        "test_id": summary.test_id,
        "results": asdict(summary.results),
        "runs": [asdict(results) for results in summary.run_results],
    }


async def run(config: LoadTestConfig) -> int:
    """Run the load test and return exit code."""
    log = logging.getLogger("cloudburst")
    log.info("Server address %s", config.server)

    async with HTTPProvisionerClient.from_config(
        ProvisionerConfig(address=config.server)
    ) as client:
        orchestrator = RunOrchestrator(client=client, config=config, logger=log)
        try:
            summary = await orchestrator.run()
        except (ProvisionerAPIError, TimeoutError) as exc:
            log.error("Load test failed: %s", exc)
            return 1

    log_summary(log, summary)
    print(json.dumps(format_output(summary), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    defaults = LoadTestConfig()
    parser = argparse.ArgumentParser(
        prog="cloudburst",
        description="Run a load test against a provisioning server",
    )
    parser.add_argument(
        "--server",
        default=defaults.server,
        help="Location of the provisioning server to load test",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=defaults.runs,
        help="Number of times to repeat the test",
    )
    parser.add_argument(
        "--batch",
        type=int,
        default=defaults.batch,
        help=(
            "Number of installations in each batch. Installations in a batch "
            "are installed serially and batches are installed in parallel."
        ),
    )
    parser.add_argument(
        "--total",
        type=int,
        default=defaults.total,
        help="Number of installations to provision",
    )
    parser.add_argument(
        "--database",
        default=defaults.database,
        help="Type of database with which to create installations",
    )
    parser.add_argument(
        "--filestore",
        default=defaults.filestore,
        help="Filestore type with which to create installations",
    )
    parser.add_argument(
        "--size",
        default=defaults.size,
        help="Size of the created installations",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=defaults.poll_interval,
        help="Seconds between polls while waiting for installations",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up on any single wait after this many seconds",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=LOG_LEVELS,
        help="Logging level",
    )
    return parser


def parse_config(args: argparse.Namespace) -> LoadTestConfig:
    """Build the load test configuration from parsed arguments."""
    return LoadTestConfig(
        server=args.server,
        runs=args.runs,
        batch=args.batch,
        total=args.total,
        database=args.database,
        filestore=args.filestore,
        size=args.size,
        poll_interval=args.poll_interval,
        timeout=args.timeout,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = parse_config(args)
    except ValidationError as exc:
        logging.getLogger("cloudburst").error("Invalid configuration: %s", exc)
        sys.exit(1)

    sys.exit(asyncio.run(run(config)))


if __name__ == "__main__":  # pragma: no cover
    main()

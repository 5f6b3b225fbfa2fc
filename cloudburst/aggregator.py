"""Aggregation of reports into summary statistics."""

from collections.abc import Iterable

from cloudburst.models.report import CompletedReport, FailedReport, Report, Results


def compile_results(reports: Iterable[Report]) -> Results:
    """Count outcomes and compute min/median/max reconcile durations.

    With no completed reports every duration is zero.
    """
    durations: list[float] = []
    error_count = 0

    for report in reports:
        match report:
            case CompletedReport():
                durations.append(report.duration)
            case FailedReport():
                error_count += 1

    if not durations:
        return Results(error_count=error_count)

    durations.sort()
    return Results(
        error_count=error_count,
        success_count=len(durations),
        min_duration=durations[0],
        median_duration=durations[len(durations) // 2],
        max_duration=durations[-1],
    )

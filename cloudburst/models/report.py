"""Models for per-installation outcomes and aggregated run results."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from cloudburst.models.provisioner import Installation


@dataclass(frozen=True, kw_only=True)
class CompletedReport:
    """An installation that converged to the stable state."""

    installation: Installation
    created_at: datetime
    completed_at: datetime

    @property
    def duration(self) -> float:
        """Seconds between creation and observed stabilisation."""
        return (self.completed_at - self.created_at).total_seconds()


@dataclass(frozen=True, kw_only=True)
class FailedReport:
    """An installation that failed, vanished or could not be cleaned up."""

    installation: Installation
    timestamp: datetime
    message: str
    reason: Literal["failed", "missing", "not_found"] = "failed"


type Report = CompletedReport | FailedReport


@dataclass(frozen=True, kw_only=True)
class Results:
    """Summary statistics over a collection of reports.

    Durations are in seconds. The median is the element at index ``n // 2``
    of the ascending durations, so even-length lists pick the upper middle.
    """

    error_count: int = 0
    success_count: int = 0
    min_duration: float = 0.0
    median_duration: float = 0.0
    max_duration: float = 0.0

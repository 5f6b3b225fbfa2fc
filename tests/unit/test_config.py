"""Tests for load test configuration."""

import pytest
from pydantic import ValidationError

from cloudburst.config import LoadTestConfig


def test_defaults() -> None:
    """Defaults match a small multitenant load test."""
    config = LoadTestConfig()

    assert config.server == "http://localhost:8075"
    assert config.runs == 1
    assert config.batch == 5
    assert config.total == 20
    assert config.database == "aws-multitenant-rds-postgres"
    assert config.filestore == "aws-multitenant-s3"
    assert config.size == "1000users"
    assert config.affinity == "multitenant"
    assert config.poll_interval == 5.0
    assert config.timeout is None


@pytest.mark.parametrize(
    "size", ["100users", "25000users", "miniHA", "provisionerXL", "provisionerXL-3"]
)
def test_accepts_supported_sizes(size: str) -> None:
    """Accepts operator sizes and provisioner sizes with replicas."""
    assert LoadTestConfig(size=size).size == size


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("database", "sqlite", "unknown database type sqlite"),
        ("filestore", "ftp", "unknown filestore type ftp"),
        ("size", "huge", "unrecognized installation size huge"),
        ("size", "provisionerXL-", "unrecognized installation size"),
    ],
)
def test_rejects_unsupported_values(field: str, value: str, message: str) -> None:
    """Rejects values the provisioner would refuse."""
    with pytest.raises(ValidationError, match=message):
        LoadTestConfig.model_validate({field: value})


@pytest.mark.parametrize(
    ("field", "value"),
    [("batch", 0), ("runs", 0), ("total", -1), ("timeout", 0)],
)
def test_rejects_out_of_range_numbers(field: str, value: int) -> None:
    """Rejects counts that would make the test meaningless."""
    with pytest.raises(ValidationError):
        LoadTestConfig.model_validate({field: value})

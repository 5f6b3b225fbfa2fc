"""Configuration for a load test run."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cloudburst.models.provisioner import INSTALLATION_AFFINITY_MULTITENANT

SUPPORTED_DATABASES = frozenset(
    {
        "mysql-operator",
        "aws-rds",
        "aws-rds-postgres",
        "aws-multitenant-rds",
        "aws-multitenant-rds-postgres",
        "aws-multitenant-rds-postgres-pgbouncer",
        "perseus",
        "external",
    }
)

SUPPORTED_FILESTORES = frozenset(
    {
        "minio-operator",
        "aws-s3",
        "aws-multitenant-s3",
        "bifrost",
        "local-ephemeral",
    }
)

SUPPORTED_SIZES = frozenset(
    {
        "100users",
        "1000users",
        "5000users",
        "10000users",
        "25000users",
        "miniSingleton",
        "miniHA",
    }
)

# Provisioner specific sizes take an optional replica count: provisionerXL-3
PROVISIONER_SIZE_PATTERN = re.compile(r"^provisionerXL(-[1-9][0-9]*)?$")


class LoadTestConfig(BaseModel):
    """Parameters of a load test against a provisioning server."""

    model_config = ConfigDict(frozen=True)

    server: str = Field(
        default="http://localhost:8075",
        description="Location of the provisioning server to load test",
    )
    runs: int = Field(default=1, ge=1, description="Number of times to repeat the test")
    batch: int = Field(
        default=5, ge=1, description="Number of installations in each batch"
    )
    total: int = Field(default=20, ge=0, description="Number of installations")
    database: str = "aws-multitenant-rds-postgres"
    filestore: str = "aws-multitenant-s3"
    size: str = "1000users"
    affinity: str = INSTALLATION_AFFINITY_MULTITENANT
    dns_domain: str = "loadtest.dev.cloud.mattermost.com"
    poll_interval: float = Field(
        default=5.0, ge=0, description="Seconds between convergence polls"
    )
    cleanup_interval: float = Field(
        default=0.0, ge=0, description="Seconds between cleanup passes"
    )
    group_interval: float = Field(
        default=0.0, ge=0, description="Seconds between group lookups"
    )
    timeout: float | None = Field(
        default=None, gt=0, description="Maximum seconds for any single wait"
    )

    @field_validator("database")
    @classmethod
    def validate_database(cls, value: str) -> str:
        """Reject database types the provisioner does not support."""
        if value not in SUPPORTED_DATABASES:
            raise ValueError(f"unknown database type {value}")
        return value

    @field_validator("filestore")
    @classmethod
    def validate_filestore(cls, value: str) -> str:
        """Reject filestore types the provisioner does not support."""
        if value not in SUPPORTED_FILESTORES:
            raise ValueError(f"unknown filestore type {value}")
        return value

    @field_validator("size")
    @classmethod
    def validate_size(cls, value: str) -> str:
        """Reject unknown installation sizes."""
        if value not in SUPPORTED_SIZES and not PROVISIONER_SIZE_PATTERN.match(value):
            raise ValueError(f"unrecognized installation size {value}")
        return value

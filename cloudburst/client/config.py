"""Configuration for the provisioner HTTP client."""

from pydantic import BaseModel, Field


class ProvisionerConfig(BaseModel):
    """Configuration for the provisioner HTTP client."""

    address: str = "http://localhost:8075"
    headers: dict[str, str] = Field(default_factory=dict)
    request_timeout: float = Field(default=30.0, gt=0)

"""Provisioner API client module."""

from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.client.config import ProvisionerConfig
from cloudburst.client.http import HTTPProvisionerClient

__all__ = [
    "HTTPProvisionerClient",
    "ProvisionerAPIError",
    "ProvisionerClient",
    "ProvisionerConfig",
]

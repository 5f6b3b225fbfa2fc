"""Provisioner API client over HTTP."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError

from cloudburst.client.base import ProvisionerAPIError, ProvisionerClient
from cloudburst.client.config import ProvisionerConfig
from cloudburst.models.base import Model
from cloudburst.models.provisioner import (
    CreateGroupRequest,
    CreateInstallationRequest,
    Group,
    Installation,
)

log = logging.getLogger(__name__)


def decode[M: Model](model: type[M], data: Any, action: str) -> M:
    """Validate a response body, raising ProvisionerAPIError if it is malformed."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ProvisionerAPIError(
            f"Failed to {action}: invalid response: {exc}"
        ) from exc


@dataclass(frozen=True, kw_only=True)
class HTTPProvisionerClient(ProvisionerClient):
    """Provisioner client backed by an aiohttp session."""

    config: ProvisionerConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ProvisionerConfig
    ) -> AsyncGenerator["HTTPProvisionerClient", None]:
        """Create client with managed session lifecycle."""
        async with aiohttp.ClientSession(
            base_url=config.address,
            headers=config.headers,
            timeout=aiohttp.ClientTimeout(total=config.request_timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def create_group(self, name: str, description: str) -> Group:
        """Create a group and return the stored record."""
        request = CreateGroupRequest(name=name, description=description)
        data = await self._request(
            "POST",
            "/api/groups",
            json=request.model_dump(by_alias=True),
            expected=200,
            action="create group",
        )
        return decode(Group, data, "create group")

    async def get_group(self, group_id: str) -> Group | None:
        """Fetch a group by ID."""
        data = await self._request(
            "GET",
            f"/api/group/{group_id}",
            expected=200,
            action=f"get group {group_id}",
            allow_missing=True,
        )
        return None if data is None else decode(Group, data, f"get group {group_id}")

    async def delete_group(self, group_id: str) -> None:
        """Delete a group by ID."""
        await self._request(
            "DELETE",
            f"/api/group/{group_id}",
            expected=200,
            action=f"delete group {group_id}",
            read_body=False,
        )

    async def create_installation(
        self,
        *,
        owner_id: str,
        group_id: str,
        database: str,
        filestore: str,
        size: str,
        affinity: str,
        dns: str,
    ) -> Installation:
        """Request creation of an installation."""
        request = CreateInstallationRequest(
            owner_id=owner_id,
            group_id=group_id,
            database=database,
            filestore=filestore,
            size=size,
            affinity=affinity,
            dns=dns,
        )
        data = await self._request(
            "POST",
            "/api/installations",
            json=request.model_dump(by_alias=True),
            expected=202,
            action="create installation",
        )
        return decode(Installation, data, "create installation")

    async def get_installation(self, installation_id: str) -> Installation | None:
        """Fetch an installation by ID."""
        data = await self._request(
            "GET",
            f"/api/installation/{installation_id}",
            expected=200,
            action=f"get installation {installation_id}",
            allow_missing=True,
        )
        if data is None:
            return None
        return decode(Installation, data, f"get installation {installation_id}")

    async def delete_installation(self, installation_id: str) -> None:
        """Request deletion of an installation."""
        await self._request(
            "DELETE",
            f"/api/installation/{installation_id}",
            expected=202,
            action=f"delete installation {installation_id}",
            read_body=False,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        expected: int,
        action: str,
        json: dict[str, Any] | None = None,
        allow_missing: bool = False,
        read_body: bool = True,
    ) -> Any:
        """Perform a request and decode the JSON body.

        Returns None for a 404 when ``allow_missing`` is set.
        """
        log.debug("%s %s", method, url)
        try:
            async with self.session.request(method, url, json=json) as response:
                if allow_missing and response.status == 404:
                    return None
                if response.status != expected:
                    text = await response.text()
                    raise ProvisionerAPIError(
                        f"Failed to {action}: {response.status} {text}",
                        status=response.status,
                    )
                if not read_body:
                    return None
                try:
                    return await response.json()
                except ValueError as exc:
                    raise ProvisionerAPIError(
                        f"Failed to {action}: invalid JSON response: {exc}"
                    ) from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ProvisionerAPIError(f"Failed to {action}: {exc}") from exc

"""Health probe adapters for the snapshot collector."""

from collections.abc import Awaitable, Callable

import httpx

from tenantpulse.core.models import StorageHealth


class HttpHealthProbe:
    """HealthProbePort backed by a storage health check and an HTTP ping.

    Args:
        storage_check: Coroutine factory returning the store's health, e.g.
            ``SQLiteBucketStorage(...).health``.
        auth_url: URL of the auth provider's health or discovery endpoint.
            Any 2xx or 3xx answer counts as reachable.
        client: Optional shared ``httpx.AsyncClient``; one is created per
            call when omitted.
    """

    def __init__(
        self,
        storage_check: Callable[[], Awaitable[StorageHealth]],
        auth_url: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._storage_check = storage_check
        self._auth_url = auth_url
        self._client = client

    async def storage_health(self) -> StorageHealth:
        return await self._storage_check()

    async def auth_reachable(self) -> bool:
        """Ping the auth provider; raises ``httpx.HTTPError`` when unreachable."""
        if self._client is not None:
            response = await self._client.get(self._auth_url)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(self._auth_url)
        if response.status_code >= 400:
            response.raise_for_status()
        return True

"""
Shared aiohttp plumbing for the JSON HTTP APIs.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from raydium_pools.config import HTTP_TIMEOUT
from raydium_pools.errors import ConnectivityError

logger = logging.getLogger(__name__)


class JsonApiClient:
    """Base class owning (or borrowing) an aiohttp session."""

    def __init__(self, base_url: str, session: Optional[aiohttp.ClientSession] = None,
                 timeout: Optional[float] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout or HTTP_TIMEOUT
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded JSON body (single attempt)."""
        url = f"{self.base_url}{path}"
        try:
            async with self.session.get(url, params=params,
                                        timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
                if response.status == 404:
                    return None
                response.raise_for_status()
                try:
                    return await response.json()
                except ValueError as e:
                    logger.error(f"GET {url} returned a body that is not JSON: {e}")
                    raise ConnectivityError(f"GET {url} returned invalid JSON: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"GET {url} failed: {e}")
            raise ConnectivityError(f"GET {url} failed: {e}") from e

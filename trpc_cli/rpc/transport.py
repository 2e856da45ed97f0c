"""
HTTP transport used by the RPC client to exchange one request with the daemon.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from trpc_cli.exceptions import TransportError

log = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Status, case-insensitive headers and raw body of one HTTP exchange."""

    status: int
    headers: CIMultiDictProxy = field(
        default_factory=lambda: CIMultiDictProxy(CIMultiDict())
    )
    body: bytes = b""


class Transport(Protocol):
    """Anything that can perform a single POST exchange."""

    async def send(
        self, uri: str, headers: Mapping[str, str], body: bytes
    ) -> TransportResponse: ...

    async def close(self) -> None: ...


class AiohttpTransport:
    """
    Transport backed by an aiohttp client session.

    The session is created lazily on the first exchange and must be released
    with `close()`.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        """
        Args:
            timeout: Total time allowed for one exchange, in seconds.
            username: Optional user for the daemon's HTTP basic authentication.
            password: Password for `username`.
        """
        self.timeout = timeout
        self._authorization = (
            aiohttp.encode_basic_auth(username, password or "") if username else None
        )
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def send(
        self, uri: str, headers: Mapping[str, str], body: bytes
    ) -> TransportResponse:
        await self._initialize_session()
        if self._authorization:
            headers = {**headers, "Authorization": self._authorization}
        try:
            async with self._session.post(uri, headers=headers, data=body) as r:
                payload = await r.read()
                return TransportResponse(status=r.status, headers=r.headers, body=payload)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Request to {uri} timed out after {self.timeout}s."
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {uri} failed: {e}") from e

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

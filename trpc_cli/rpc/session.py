"""
Holds the anti-forgery session token issued by the daemon.
"""

import asyncio
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Optional

log = logging.getLogger(__name__)

SESSION_ID_HEADER = "X-Transmission-Session-Id"


class SessionState(Enum):
    """Whether a session token is currently held."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionNegotiator:
    """
    Owns the session token of a single client instance.

    The token starts empty and is only replaced when the daemon rejects a
    request with 409 and hands out a new one.
    """

    def __init__(self):
        self._token = ""
        self._lock = asyncio.Lock()

    @property
    def token(self) -> str:
        return self._token

    @property
    def state(self) -> SessionState:
        if self._token:
            return SessionState.AUTHENTICATED
        return SessionState.UNAUTHENTICATED

    async def current_token(self) -> str:
        async with self._lock:
            return self._token

    async def renew_from(self, headers: Mapping[str, str]) -> Optional[str]:
        """
        Stores the token carried by a 409 rejection.

        Args:
            headers: Case-insensitive response headers of the rejected exchange.

        Returns:
            The new token, or None when the rejection did not carry one.
        """
        token = headers.get(SESSION_ID_HEADER)
        if not token:
            return None

        async with self._lock:
            changed = token != self._token
            self._token = token

        if changed:
            log.debug("Session token renewed by the daemon.")
        return token

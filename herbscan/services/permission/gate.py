"""
Permission gate: single owner of the camera authorization state.

Concurrent requests share one in-flight prompt, so the host is never asked
twice at the same time.
"""

import asyncio
from typing import Optional

import structlog

from herbscan.services.permission.interfaces import (
    IPermissionHost, PermissionResponse, PermissionState
)

logger = structlog.get_logger(__name__)


class PermissionGate:
    """
    Tracks and requests camera authorization.

    Responsabilités :
    - Keep the last known PermissionState
    - Coalesce concurrent request() calls into a single host prompt
    - Skip the prompt after a denial the host says cannot be re-asked
    """

    def __init__(self, host: IPermissionHost):
        self._host = host
        self._state = PermissionState.UNKNOWN
        self._can_ask_again = True
        self._inflight: Optional[asyncio.Task] = None

    def current_state(self) -> PermissionState:
        """Last known authorization, without touching the host."""
        return self._state

    @property
    def can_ask_again(self) -> bool:
        return self._can_ask_again

    async def request(self) -> PermissionState:
        """
        Ensure camera authorization, prompting the host when needed.

        Returns:
            GRANTED or DENIED, never UNKNOWN
        """
        if self._state == PermissionState.GRANTED:
            return self._state

        if self._inflight is not None and not self._inflight.done():
            logger.debug("Joining in-flight permission request")
            return await asyncio.shield(self._inflight)

        if self._state == PermissionState.DENIED and not self._can_ask_again:
            # No prompt; the user may have changed the setting outside the app
            state = await self.refresh()
            if state != PermissionState.GRANTED:
                self._state = PermissionState.DENIED
            return self._state

        self._inflight = asyncio.ensure_future(self._prompt())
        try:
            return await asyncio.shield(self._inflight)
        finally:
            if self._inflight is not None and self._inflight.done():
                self._inflight = None

    async def refresh(self) -> PermissionState:
        """Re-read the host status without prompting."""
        try:
            state = await self._host.check()
        except Exception as e:
            logger.warning("Permission status check failed", error=str(e))
            return self._state

        if state != PermissionState.UNKNOWN:
            self._state = state
        return self._state

    async def _prompt(self) -> PermissionState:
        previous = self._state
        try:
            response = await self._host.prompt()
        except Exception as e:
            logger.error("Permission prompt failed", error=str(e))
            response = PermissionResponse(granted=False, can_ask_again=True)

        self._state = PermissionState.GRANTED if response.granted else PermissionState.DENIED
        self._can_ask_again = response.can_ask_again

        logger.info(
            "Camera permission resolved",
            previous=previous.value,
            state=self._state.value,
            can_ask_again=self._can_ask_again
        )
        return self._state

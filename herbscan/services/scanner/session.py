"""
Scan session controller.

State machine:
    IDLE --start--> AWAITING_PERMISSION --granted--> ACTIVE
    ACTIVE --detected|stop--> COMPLETED --reset--> IDLE

The controller exclusively owns the scan source while ACTIVE and releases it
on detection, stop and teardown.
"""

import asyncio
import time
from typing import Callable, Optional

import structlog

from herbscan.core.exceptions import CameraPermissionError
from herbscan.services.permission import PermissionGate, PermissionState
from herbscan.services.scanner.interfaces import (
    CancellationToken, InputOrigin, IScanSource, RawInput, ScanSessionState
)

logger = structlog.get_logger(__name__)


class ScanSessionController:
    """
    Owns the scanning on/off state machine and emits one detection per session.

    Responsabilités :
    - Acquire camera permission before activating the source
    - Accept exactly one payload per ACTIVE session, debouncing repeats
    - Release the source synchronously on detection, stop and teardown
    """

    def __init__(
        self,
        source: IScanSource,
        permission_gate: PermissionGate,
        debounce_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._source = source
        self._gate = permission_gate
        self._debounce_seconds = debounce_seconds
        self._clock = clock

        self._state = ScanSessionState.IDLE
        self._session_id = 0
        self._token: Optional[CancellationToken] = None
        self._detection: Optional[asyncio.Future] = None

        self._last_payload: Optional[str] = None
        self._last_accepted_at: Optional[float] = None

    @property
    def state(self) -> ScanSessionState:
        return self._state

    @property
    def session_id(self) -> int:
        return self._session_id

    async def start(self) -> None:
        """
        Begin a scan session.

        No-op while ACTIVE or AWAITING_PERMISSION. A COMPLETED session is
        reset first.

        Raises:
            CameraPermissionError: Permission denied or camera unavailable
        """
        if self._state in (ScanSessionState.ACTIVE, ScanSessionState.AWAITING_PERMISSION):
            logger.debug("Scan already in progress", state=self._state.value)
            return

        if self._state == ScanSessionState.COMPLETED:
            self.reset()

        self._session_id += 1
        token = CancellationToken(self._session_id)
        self._token = token
        self._detection = asyncio.get_running_loop().create_future()
        self._state = ScanSessionState.AWAITING_PERMISSION

        logger.info("Scan session starting", session_id=token.session_id)

        try:
            permission = await self._gate.request()
        except asyncio.CancelledError:
            self._abort(token)
            raise

        if token.cancelled:
            logger.info("Scan session stopped before activation", session_id=token.session_id)
            return

        if permission != PermissionState.GRANTED:
            self._state = ScanSessionState.IDLE
            self._finish(None)
            logger.warning("Camera permission denied", session_id=token.session_id)
            raise CameraPermissionError("Camera permission denied")

        self._state = ScanSessionState.ACTIVE
        try:
            await self._source.open(self.on_detection)
        except asyncio.CancelledError:
            self._abort(token)
            raise
        except Exception as e:
            self._source.release()
            self._state = ScanSessionState.IDLE
            self._finish(None)
            logger.error("Camera could not be started", session_id=token.session_id, error=str(e))
            raise CameraPermissionError(f"Camera unavailable: {e}", original_error=e) from e

        if token.cancelled:
            # stop() or a detection landed while the source was opening
            self._source.release()
            return

        logger.info("Scan session active", session_id=token.session_id)

    def on_detection(self, payload: str) -> bool:
        """
        Detection callback handed to the scan source.

        Returns:
            True if the payload was accepted as this session's RawInput
        """
        token = self._token
        if self._state != ScanSessionState.ACTIVE or token is None or token.cancelled:
            logger.debug("Detection ignored, session not active", state=self._state.value)
            return False

        if not payload or not payload.strip():
            return False

        now = self._clock()
        if (
            payload == self._last_payload
            and self._last_accepted_at is not None
            and now - self._last_accepted_at < self._debounce_seconds
        ):
            logger.info(
                "Repeat of the last accepted code ignored",
                session_id=token.session_id,
                retry_in=round(self._debounce_seconds - (now - self._last_accepted_at), 3)
            )
            return False

        self._last_payload = payload
        self._last_accepted_at = now

        token.cancel()
        self._state = ScanSessionState.COMPLETED
        self._source.release()
        self._finish(RawInput(text=payload, origin=InputOrigin.CAMERA))

        logger.info("Code detected", session_id=token.session_id, length=len(payload))
        return True

    async def wait_for_detection(self) -> Optional[RawInput]:
        """
        Wait for the current session's detection.

        Returns:
            The accepted RawInput, or None if the session was stopped
        """
        if self._detection is None:
            return None
        return await asyncio.shield(self._detection)

    async def scan(self) -> Optional[RawInput]:
        """Start a session and wait for its single detection."""
        await self.start()
        try:
            return await self.wait_for_detection()
        except asyncio.CancelledError:
            self.stop()
            raise

    def stop(self) -> None:
        """
        Force the session to COMPLETED and release the camera.

        No detection is accepted once this returns.
        """
        if self._state not in (ScanSessionState.ACTIVE, ScanSessionState.AWAITING_PERMISSION):
            return

        if self._token is not None:
            self._token.cancel()
        self._source.release()
        self._state = ScanSessionState.COMPLETED
        self._finish(None)

        logger.info("Scan session stopped", session_id=self._session_id)

    def reset(self) -> None:
        """COMPLETED -> IDLE."""
        if self._state != ScanSessionState.COMPLETED:
            return
        self._state = ScanSessionState.IDLE
        self._token = None
        self._detection = None

    async def close(self) -> None:
        """Teardown: stop any session and release the source."""
        self.stop()
        self._source.release()
        self._finish(None)
        self._state = ScanSessionState.IDLE
        self._token = None
        self._detection = None

    def _abort(self, token: CancellationToken) -> None:
        """Undo a start() cancelled before activation completed."""
        token.cancel()
        if self._token is not token:
            return
        self._source.release()
        self._state = ScanSessionState.IDLE
        self._finish(None)
        logger.info("Scan session start cancelled", session_id=token.session_id)

    def _finish(self, value: Optional[RawInput]) -> None:
        if self._detection is not None and not self._detection.done():
            self._detection.set_result(value)

"""
OpenCV-backed permission host.

Desktop platforms have no in-app permission dialog: the OS decides when the
device is opened. Probing the camera is the closest equivalent, and a failed
probe cannot be re-asked from inside the application.
"""

import asyncio
from typing import Optional

import cv2
import structlog

from herbscan.services.permission.interfaces import (
    IPermissionHost, PermissionResponse, PermissionState
)

logger = structlog.get_logger(__name__)


class CameraPermissionHost(IPermissionHost):
    """Grants access when the configured camera device can be opened."""

    def __init__(self, camera_index: int = 0):
        self.camera_index = camera_index
        self._last: Optional[bool] = None

    async def check(self) -> PermissionState:
        if self._last is None:
            return PermissionState.UNKNOWN
        granted = await asyncio.to_thread(self._probe)
        return PermissionState.GRANTED if granted else PermissionState.DENIED

    async def prompt(self) -> PermissionResponse:
        granted = await asyncio.to_thread(self._probe)
        return PermissionResponse(granted=granted, can_ask_again=granted)

    def _probe(self) -> bool:
        capture = cv2.VideoCapture(self.camera_index)
        try:
            opened = bool(capture.isOpened())
        finally:
            capture.release()

        self._last = opened
        if not opened:
            logger.warning("Camera could not be opened", camera_index=self.camera_index)
        return opened

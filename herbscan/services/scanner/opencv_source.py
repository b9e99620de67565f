"""
OpenCV + pyzbar scan source.

Frames are read from an OpenCV VideoCapture in a worker thread and decoded
with pyzbar on the event loop. Every decoded QR payload is handed to the
detection callback; deduplication is the session controller's job.
"""

import asyncio
import threading
from typing import List, Optional

import cv2
import numpy as np
import structlog
from pyzbar.pyzbar import Decoded, ZBarSymbol, decode

from herbscan.services.scanner.interfaces import DetectionCallback, IScanSource

logger = structlog.get_logger(__name__)


class OpenCVQrScanSource(IScanSource):
    """
    Camera scan source using OpenCV capture and pyzbar decoding.

    The capture is guarded by a lock so release() never races a frame read
    running in the worker thread.
    """

    def __init__(
        self,
        camera_index: int = 0,
        frame_interval: float = 0.05,
        width: int = 640,
        height: int = 480,
        symbols: Optional[List[ZBarSymbol]] = None,
    ):
        """
        Initialize OpenCVQrScanSource.

        Args:
            camera_index: OpenCV device index
            frame_interval: Pause between two frames, in seconds
            width: Requested frame width
            height: Requested frame height
            symbols: Barcode types to decode (default: QRCODE only)
        """
        self.camera_index = camera_index
        self.frame_interval = frame_interval
        self.width = width
        self.height = height
        self._symbols = symbols or [ZBarSymbol.QRCODE]

        self._lock = threading.Lock()
        self._capture: Optional[cv2.VideoCapture] = None
        self._task: Optional[asyncio.Task] = None
        self._on_detection: Optional[DetectionCallback] = None
        self._running = False

    @property
    def is_open(self) -> bool:
        return self._running

    async def open(self, on_detection: DetectionCallback) -> None:
        if self._running:
            return

        capture = await asyncio.to_thread(self._open_capture)
        if not capture.isOpened():
            capture.release()
            raise RuntimeError(f"Camera {self.camera_index} could not be opened")

        with self._lock:
            self._capture = capture
        self._on_detection = on_detection
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._run())

        logger.info("Camera opened", camera_index=self.camera_index, width=self.width, height=self.height)

    def release(self) -> None:
        was_running = self._running
        self._running = False
        self._on_detection = None

        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

        with self._lock:
            if self._capture is not None:
                self._capture.release()
                self._capture = None

        if was_running:
            logger.info("Camera released", camera_index=self.camera_index)

    def _open_capture(self) -> cv2.VideoCapture:
        capture = cv2.VideoCapture(self.camera_index)
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        return capture

    async def _run(self) -> None:
        try:
            while self._running:
                frame = await asyncio.to_thread(self._read_frame)
                if not self._running:
                    break

                if frame is not None:
                    for payload in self._decode(frame):
                        callback = self._on_detection
                        if not self._running or callback is None:
                            break
                        callback(payload)

                await asyncio.sleep(self.frame_interval)
        except Exception as e:
            logger.error("Frame loop failed, releasing camera", camera_index=self.camera_index, error=str(e))
            self._task = None
            self.release()

    def _read_frame(self) -> Optional[np.ndarray]:
        with self._lock:
            if self._capture is None:
                return None
            success, frame = self._capture.read()
        return frame if success else None

    def _decode(self, frame: np.ndarray) -> List[str]:
        """Decode QR payloads from a BGR or grayscale frame."""
        try:
            if frame.ndim == 3:
                frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
            results: List[Decoded] = decode(frame, symbols=self._symbols)
        except Exception as e:
            logger.error("Error decoding frame", error=str(e))
            return []

        payloads = []
        for result in results:
            try:
                payloads.append(result.data.decode("utf-8"))
            except UnicodeDecodeError:
                logger.warning("QR payload is not UTF-8, skipped", size=len(result.data))
        return payloads

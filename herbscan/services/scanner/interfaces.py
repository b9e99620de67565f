"""
Interfaces and data types for the scanning side of the pipeline.

Architecture Pattern : Strategy (scan sources) + State Machine (sessions)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class InputOrigin(str, Enum):
    """Where a RawInput came from."""
    CAMERA = "camera"
    MANUAL = "manual-paste"


@dataclass(frozen=True)
class RawInput:
    """Opaque scanned or pasted text, tagged with its origin."""
    text: str
    origin: InputOrigin = InputOrigin.MANUAL

    @property
    def is_blank(self) -> bool:
        return not self.text or not self.text.strip()


class ScanSessionState(str, Enum):
    """Scan session lifecycle."""
    IDLE = "idle"
    AWAITING_PERMISSION = "awaiting_permission"
    ACTIVE = "active"
    COMPLETED = "completed"


class CancellationToken:
    """One per scan session; cancelling it is how a session is stopped."""

    def __init__(self, session_id: int):
        self.session_id = session_id
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        return f"CancellationToken(session_id={self.session_id}, cancelled={self._cancelled})"


DetectionCallback = Callable[[str], bool]


class IScanSource(ABC):
    """
    Camera-like source of decoded payloads.

    Implementations deliver every decoded payload to the callback given to
    open(), possibly many times for a code held in front of the camera.
    """

    @abstractmethod
    async def open(self, on_detection: DetectionCallback) -> None:
        """
        Start capturing and delivering detections.

        Args:
            on_detection: Called on the event loop with each decoded payload
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """
        Stop capturing and free the device.

        Synchronous: no detection is delivered once this returns.
        """
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True while the capture session is running."""
        pass

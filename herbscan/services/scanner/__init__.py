"""
Scanner package.

Components:
- IScanSource: camera-like source of decoded payloads
- ScanSessionController: scan state machine, one detection per session
- OpenCVQrScanSource: OpenCV capture + pyzbar decoding (herbscan.services.scanner.opencv_source)
"""

from herbscan.services.scanner.interfaces import (
    CancellationToken,
    InputOrigin,
    IScanSource,
    RawInput,
    ScanSessionState,
)
from herbscan.services.scanner.session import ScanSessionController

__all__ = [
    "CancellationToken",
    "InputOrigin",
    "IScanSource",
    "RawInput",
    "ScanSessionState",
    "ScanSessionController",
]

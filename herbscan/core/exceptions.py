"""
Exception taxonomy for the scan -> resolve pipeline.

None of these escape the workflow: they are turned into Failure outcomes
and shown to the user.
"""

from typing import Optional


class ScanClientError(Exception):
    """Base exception for scan client errors."""

    def __init__(self, message: str, key: str = "", original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.original_error = original_error


class CameraPermissionError(ScanClientError):
    """Camera access denied or camera unavailable."""
    pass


class TransportError(ScanClientError):
    """Network unreachable, timeout, DNS failure or broken response framing."""
    pass


class ResponseError(ScanClientError):
    """Non-success status returned by the lookup service."""

    def __init__(self, message: str, status_code: int, body: str = "", key: str = ""):
        super().__init__(message, key=key)
        self.status_code = status_code
        self.body = body


class ParseError(ScanClientError):
    """Response body is not valid JSON."""
    pass

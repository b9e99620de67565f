"""
Camera permission package.

Components:
- IPermissionHost: host-level authorization contract
- PermissionGate: owner of the PermissionState, coalesces requests
- CameraPermissionHost: OpenCV device probe
"""

from herbscan.services.permission.interfaces import (
    IPermissionHost,
    PermissionResponse,
    PermissionState,
)
from herbscan.services.permission.gate import PermissionGate

__all__ = [
    "IPermissionHost",
    "PermissionResponse",
    "PermissionState",
    "PermissionGate",
]

"""
Interfaces for camera permission handling.

Architecture Pattern : Interface Segregation + Strategy (one host per platform)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class PermissionState(str, Enum):
    """Camera authorization as known by the permission gate."""
    UNKNOWN = "unknown"
    DENIED = "denied"
    GRANTED = "granted"


@dataclass(frozen=True)
class PermissionResponse:
    """What the host answered to a permission prompt."""
    granted: bool
    can_ask_again: bool = True


class IPermissionHost(ABC):
    """
    Host-level camera authorization (OS dialog, device probe...).

    Responsabilités :
    - Report the current authorization without prompting
    - Prompt the user when allowed
    """

    @abstractmethod
    async def check(self) -> PermissionState:
        """
        Read the current authorization without prompting.

        Returns:
            PermissionState (UNKNOWN when the host has never been asked)
        """
        pass

    @abstractmethod
    async def prompt(self) -> PermissionResponse:
        """
        Ask the host for camera access.

        Returns:
            PermissionResponse with the decision and whether asking again is useful
        """
        pass

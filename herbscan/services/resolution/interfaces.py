"""
Interfaces for resolving canonical keys against the lookup service.

Architecture Pattern : Strategy + Tagged result (no exception crosses the boundary)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OutcomeStatus(str, Enum):
    """Tag of a LookupOutcome."""
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


class ErrorKind(str, Enum):
    """Why a lookup failed."""
    PERMISSION = "permission"
    TRANSPORT = "transport"
    RESPONSE = "response"
    VALIDATION = "validation"


# Field used to wrap a 2xx body that is not valid JSON
RAW_BODY_FIELD = "raw"


@dataclass(frozen=True)
class LookupOutcome:
    """
    Result of one submission.

    payload is an opaque JSON tree (dict/list/scalars) whose shape is owned by
    the remote service; it is only set for SUCCESS.
    """
    status: OutcomeStatus
    payload: Any = None
    message: str = ""
    error_kind: Optional[ErrorKind] = None
    key: Optional[str] = None

    @classmethod
    def loading(cls, key: Optional[str] = None) -> "LookupOutcome":
        return cls(status=OutcomeStatus.LOADING, key=key)

    @classmethod
    def success(cls, payload: Any, key: Optional[str] = None) -> "LookupOutcome":
        return cls(status=OutcomeStatus.SUCCESS, payload=payload, key=key)

    @classmethod
    def failure(
        cls,
        message: str,
        kind: ErrorKind = ErrorKind.RESPONSE,
        key: Optional[str] = None,
    ) -> "LookupOutcome":
        return cls(status=OutcomeStatus.FAILURE, message=message, error_kind=kind, key=key)

    @property
    def is_loading(self) -> bool:
        return self.status == OutcomeStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == OutcomeStatus.FAILURE


class IResolutionClient(ABC):
    """
    Interface for lookup clients.

    Responsabilités :
    - Send the canonical key to the remote service
    - Classify the response into Success / Failure
    - Never raise: transport faults become Failure outcomes
    """

    @abstractmethod
    async def resolve(self, key: str) -> LookupOutcome:
        """
        Resolve a canonical key.

        Args:
            key: Canonical lookup key

        Returns:
            SUCCESS or FAILURE outcome
        """
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        pass

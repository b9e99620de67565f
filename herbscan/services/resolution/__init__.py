"""
Resolution package: turns a canonical key into a LookupOutcome.

Example:
    from herbscan.services.resolution import get_resolution_client

    client = get_resolution_client()
    outcome = await client.resolve("abc123")
"""

from herbscan.services.resolution.interfaces import (
    RAW_BODY_FIELD,
    ErrorKind,
    IResolutionClient,
    LookupOutcome,
    OutcomeStatus,
)
from herbscan.services.resolution.client import HttpResolutionClient
from herbscan.services.resolution.manager import ResolutionClientFactory, get_resolution_client

__all__ = [
    "RAW_BODY_FIELD",
    "ErrorKind",
    "IResolutionClient",
    "LookupOutcome",
    "OutcomeStatus",
    "HttpResolutionClient",
    "ResolutionClientFactory",
    "get_resolution_client",
]

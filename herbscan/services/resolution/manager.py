"""
Factory for resolution clients.

Architecture Pattern : Factory + Configuration
The base address comes from Settings, never from the client itself.
"""

from typing import Optional

import httpx
import structlog

from herbscan.core.config import Settings, get_settings
from herbscan.services.resolution.client import HttpResolutionClient
from herbscan.services.resolution.interfaces import IResolutionClient

logger = structlog.get_logger(__name__)


class ResolutionClientFactory:
    """Creates resolution clients from configuration."""

    @staticmethod
    def create_client(
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> IResolutionClient:
        """
        Create the HTTP resolution client.

        Args:
            settings: Client settings (environment defaults when omitted)
            transport: Optional httpx transport override

        Returns:
            IResolutionClient implementation
        """
        settings = settings or get_settings()
        base_url = settings.resolve_base_url()

        logger.info(
            "Creating resolution client",
            base_url=base_url,
            platform=settings.platform,
            overridden=settings.api_base_url is not None
        )

        return HttpResolutionClient(
            base_url=base_url,
            timeout=settings.request_timeout,
            auth_token=settings.auth_token,
            transport=transport,
        )


def get_resolution_client(settings: Optional[Settings] = None) -> IResolutionClient:
    """Shortcut for ResolutionClientFactory.create_client."""
    return ResolutionClientFactory.create_client(settings)

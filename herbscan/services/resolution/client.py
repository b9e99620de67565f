"""
HTTP resolution client for the lookup service.

API Endpoint : POST {base}/scan with body {"data": "<canonical key>"}
"""

import json
from typing import Any, Dict, Optional

import httpx
import structlog

from herbscan.core.exceptions import ParseError, ResponseError, TransportError
from herbscan.services.resolution.interfaces import (
    RAW_BODY_FIELD, ErrorKind, IResolutionClient, LookupOutcome
)

logger = structlog.get_logger(__name__)


class HttpResolutionClient(IResolutionClient):
    """
    Resolves canonical keys with a single POST to the lookup service.

    Response classification:
    - JSON body + 2xx      -> Success(parsed body)
    - JSON body + error    -> Failure(body["message"] or body text)
    - other body + error   -> Failure(body text)
    - other body + 2xx     -> Success({"raw": body text})
    """

    SCAN_PATH = "/scan"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        auth_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Lookup service base address (already resolved from config)
            timeout: Request timeout in seconds
            auth_token: Optional bearer token from the login collaborator
            transport: Custom httpx transport (tests, proxies)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth_token = auth_token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info("Resolution client initialized", base_url=self.base_url, timeout=timeout)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{self.SCAN_PATH}"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def resolve(self, key: str) -> LookupOutcome:
        """Resolve a canonical key; never raises."""
        try:
            response = await self._send(key)
        except TransportError as e:
            logger.error("Lookup transport failure", key=key, error=e.message)
            return LookupOutcome.failure(e.message, kind=ErrorKind.TRANSPORT, key=key)
        except Exception as e:
            logger.error("Unexpected lookup failure", key=key, error=str(e))
            return LookupOutcome.failure(_describe(e), kind=ErrorKind.TRANSPORT, key=key)

        outcome = self._classify(key, response.status_code, response.text)
        logger.info(
            "Lookup resolved",
            key=key,
            status=response.status_code,
            outcome=outcome.status.value
        )
        return outcome

    async def _send(self, key: str) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.post(
                self.endpoint,
                headers=self._headers(),
                json={"data": key},
            )
            # Full body read happens here; framing errors surface as httpx errors
            await response.aread()
            return response
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
            raise TransportError(_describe(e), key=key, original_error=e) from e

    def _classify(self, key: str, status_code: int, body: str) -> LookupOutcome:
        ok = 200 <= status_code < 300

        try:
            parsed = self._parse(body, key)
        except ParseError:
            if ok:
                logger.warning("Lookup body is not JSON, wrapped as raw", key=key, status=status_code)
                return LookupOutcome.success({RAW_BODY_FIELD: body}, key=key)
            error = ResponseError(body.strip() or f"HTTP {status_code}", status_code, body, key=key)
            return LookupOutcome.failure(error.message, kind=ErrorKind.RESPONSE, key=key)

        if ok:
            return LookupOutcome.success(parsed, key=key)

        error = ResponseError(_error_message(parsed, body, status_code), status_code, body, key=key)
        return LookupOutcome.failure(error.message, kind=ErrorKind.RESPONSE, key=key)

    @staticmethod
    def _parse(body: str, key: str) -> Any:
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError("Response body is not valid JSON", key=key, original_error=e) from e

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


def _error_message(parsed: Any, body: str, status_code: int) -> str:
    if isinstance(parsed, dict):
        message = parsed.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return body.strip() or f"HTTP {status_code}"


def _describe(error: Exception) -> str:
    """Human-readable description of a transport fault."""
    detail = str(error).strip()
    name = type(error).__name__
    return f"{name}: {detail}" if detail else name

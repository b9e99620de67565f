"""
Scan -> resolve -> render pipeline.

Architecture Pattern : Orchestrator over injected services
    ScanSessionController -> normalize -> IResolutionClient -> OutcomeStore
"""

from typing import Optional

import structlog

from herbscan.core.exceptions import CameraPermissionError
from herbscan.presentation.store import OutcomeStore
from herbscan.services.normalizer import normalize
from herbscan.services.resolution.interfaces import ErrorKind, IResolutionClient, LookupOutcome
from herbscan.services.scanner.interfaces import InputOrigin, RawInput
from herbscan.services.scanner.session import ScanSessionController

logger = structlog.get_logger(__name__)

EMPTY_INPUT_MESSAGE = "Nothing to look up: scan a code or paste its content first"


class ScanWorkflow:
    """
    Coordinates one user's scans and manual submissions.

    Responsabilités :
    - Hand camera detections and pasted text to the normalizer
    - Issue one resolution per submission, tagged with a sequence number
    - Surface permission, transport and response failures as outcomes
    """

    def __init__(
        self,
        client: IResolutionClient,
        controller: Optional[ScanSessionController] = None,
        store: Optional[OutcomeStore] = None,
    ):
        self._client = client
        self._controller = controller
        self.store = store or OutcomeStore()

    @property
    def controller(self) -> Optional[ScanSessionController]:
        return self._controller

    @property
    def current(self) -> Optional[LookupOutcome]:
        return self.store.current

    async def submit(self, raw: RawInput) -> LookupOutcome:
        """
        Normalize and resolve one RawInput.

        The returned outcome is this submission's own result; the store only
        shows it if no newer submission started meanwhile.
        """
        if raw.is_blank:
            outcome = LookupOutcome.failure(EMPTY_INPUT_MESSAGE, kind=ErrorKind.VALIDATION)
            self.store.publish(outcome)
            return outcome

        key = normalize(raw)
        sequence = self.store.begin(key)

        logger.info("Submission started", seq=sequence, key=key, origin=raw.origin.value)

        try:
            outcome = await self._client.resolve(key)
        except Exception as e:
            logger.error("Resolution client raised", seq=sequence, key=key, error=str(e))
            outcome = LookupOutcome.failure(
                f"{type(e).__name__}: {e}", kind=ErrorKind.TRANSPORT, key=key
            )
        applied = self.store.apply(sequence, outcome)

        logger.info(
            "Submission finished",
            seq=sequence,
            key=key,
            outcome=outcome.status.value,
            displayed=applied
        )
        return outcome

    async def submit_text(self, text: str, origin: InputOrigin = InputOrigin.MANUAL) -> LookupOutcome:
        """Submit pasted/typed text."""
        return await self.submit(RawInput(text=text, origin=origin))

    async def scan_and_resolve(self) -> Optional[LookupOutcome]:
        """
        Run one camera session and resolve its detection.

        Returns:
            The outcome, or None when the session was stopped without detection
        """
        if self._controller is None:
            raise RuntimeError("No scan session controller configured")

        try:
            raw = await self._controller.scan()
        except CameraPermissionError as e:
            outcome = LookupOutcome.failure(e.message, kind=ErrorKind.PERMISSION)
            self.store.publish(outcome)
            return outcome

        # The session is over either way; the camera is already released
        self._controller.reset()

        if raw is None:
            logger.info("Scan stopped without detection")
            return None
        return await self.submit(raw)

    def stop_scan(self) -> None:
        """Stop the active scan; an already issued resolution still completes."""
        if self._controller is not None:
            self._controller.stop()

    async def close(self) -> None:
        """Teardown: release the camera and the HTTP client."""
        if self._controller is not None:
            await self._controller.close()
        await self._client.aclose()

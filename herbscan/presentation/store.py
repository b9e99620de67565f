"""
Outcome store: the single container for the displayed LookupOutcome.

Every submission takes a sequence number from begin(). Results are applied
only if their sequence is still the latest issued, so an older request that
resolves late never overwrites a newer one.
"""

from typing import Callable, List, Optional

import structlog

from herbscan.services.resolution.interfaces import LookupOutcome

logger = structlog.get_logger(__name__)

OutcomeListener = Callable[[LookupOutcome], None]


class OutcomeStore:
    """Holds the current outcome with last-submission-wins ordering."""

    def __init__(self):
        self._sequence = 0
        self._current: Optional[LookupOutcome] = None
        self._listeners: List[OutcomeListener] = []

    @property
    def current(self) -> Optional[LookupOutcome]:
        return self._current

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    def begin(self, key: Optional[str] = None) -> int:
        """
        Start a submission: invalidate the previous outcome and show Loading.

        Returns:
            Sequence number to pass back to apply()
        """
        self._sequence += 1
        self._set(LookupOutcome.loading(key))
        return self._sequence

    def apply(self, sequence: int, outcome: LookupOutcome) -> bool:
        """
        Apply a resolved outcome if it belongs to the latest submission.

        Returns:
            False when the outcome is stale and was discarded
        """
        if sequence != self._sequence:
            logger.debug("Stale outcome discarded", seq=sequence, latest=self._sequence)
            return False
        self._set(outcome)
        return True

    def publish(self, outcome: LookupOutcome) -> int:
        """Show an outcome that needs no network round-trip (validation, permission)."""
        self._sequence += 1
        self._set(outcome)
        return self._sequence

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        """
        Register a listener called on every change.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, outcome: LookupOutcome) -> None:
        self._current = outcome
        for listener in list(self._listeners):
            listener(outcome)

"""
Result presenter: rendering policy for the current LookupOutcome.

Exactly one section is shown at a time: loading indicator, error text or the
structured result. Payloads are rendered generically as indented JSON since
their schema belongs to the remote service.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from herbscan.presentation.store import OutcomeStore
from herbscan.services.resolution.interfaces import LookupOutcome, OutcomeStatus


class ViewSection(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    RESULT = "result"


@dataclass(frozen=True)
class RenderedView:
    """The one visible section and its text."""
    section: ViewSection
    text: str


class ResultPresenter:
    """Maps LookupOutcome tags to mutually-exclusive views."""

    LOADING_TEXT = "Loading..."
    ERROR_PREFIX = "Error: "

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, outcome: LookupOutcome) -> RenderedView:
        if outcome.status == OutcomeStatus.LOADING:
            return RenderedView(ViewSection.LOADING, self.LOADING_TEXT)
        if outcome.status == OutcomeStatus.FAILURE:
            return RenderedView(ViewSection.ERROR, f"{self.ERROR_PREFIX}{outcome.message}")
        return RenderedView(ViewSection.RESULT, self.format_payload(outcome.payload))

    def format_payload(self, payload: Any) -> str:
        """Indented JSON for any nested structure; unknown leaves fall back to str()."""
        return json.dumps(payload, indent=self.indent, ensure_ascii=False, default=str)

    def attach(self, store: OutcomeStore, sink: Callable[[str], Any]) -> Callable[[], None]:
        """
        Render every store change into sink.

        Returns:
            Function detaching the presenter
        """
        def on_change(outcome: LookupOutcome) -> None:
            sink(self.render(outcome).text)

        return store.subscribe(on_change)

    def render_current(self, store: OutcomeStore) -> Optional[RenderedView]:
        if store.current is None:
            return None
        return self.render(store.current)

"""
Unit tests for the outcome store and the result presenter.
"""

import json
from datetime import datetime

from unittest.mock import Mock

from herbscan.presentation import OutcomeStore, ResultPresenter, ViewSection
from herbscan.services.resolution import ErrorKind, LookupOutcome, OutcomeStatus


class TestOutcomeStore:
    """Test sequence numbers and last-submission-wins."""

    def test_begin_shows_loading(self):
        store = OutcomeStore()

        sequence = store.begin("abc")

        assert sequence == 1
        assert store.current.status == OutcomeStatus.LOADING
        assert store.current.key == "abc"

    def test_apply_latest(self):
        store = OutcomeStore()
        sequence = store.begin("abc")

        assert store.apply(sequence, LookupOutcome.success({"id": "abc"})) is True
        assert store.current.payload == {"id": "abc"}

    def test_stale_outcome_discarded(self):
        store = OutcomeStore()
        first = store.begin("a")
        second = store.begin("b")

        assert store.apply(second, LookupOutcome.success({"id": "b"})) is True
        assert store.apply(first, LookupOutcome.failure("late")) is False
        assert store.current.payload == {"id": "b"}

    def test_new_submission_invalidates_previous_outcome(self):
        store = OutcomeStore()
        first = store.begin("a")
        store.apply(first, LookupOutcome.success({"id": "a"}))

        store.begin("b")

        assert store.current.is_loading

    def test_publish_supersedes_in_flight(self):
        store = OutcomeStore()
        sequence = store.begin("a")

        store.publish(LookupOutcome.failure("Camera permission denied", kind=ErrorKind.PERMISSION))

        assert store.apply(sequence, LookupOutcome.success({"id": "a"})) is False
        assert store.current.error_kind == ErrorKind.PERMISSION

    def test_listeners_notified_and_unsubscribed(self):
        store = OutcomeStore()
        listener = Mock()
        unsubscribe = store.subscribe(listener)

        store.begin("a")
        unsubscribe()
        store.begin("b")

        listener.assert_called_once()
        assert listener.call_args[0][0].is_loading


class TestResultPresenter:
    """Test the mutually-exclusive views."""

    def test_loading_view(self):
        view = ResultPresenter().render(LookupOutcome.loading("abc"))

        assert view.section == ViewSection.LOADING
        assert view.text == "Loading..."

    def test_error_view(self):
        view = ResultPresenter().render(LookupOutcome.failure("not found"))

        assert view.section == ViewSection.ERROR
        assert view.text == "Error: not found"

    def test_result_view_is_indented_json(self):
        payload = {"id": "abc", "origin": {"farm": "Green Acres", "tags": ["organic", "wild"]}}

        view = ResultPresenter().render(LookupOutcome.success(payload))

        assert view.section == ViewSection.RESULT
        assert json.loads(view.text) == payload
        assert '\n  "origin": {\n    "farm": "Green Acres"' in view.text

    def test_result_view_any_shape(self):
        presenter = ResultPresenter()

        assert presenter.render(LookupOutcome.success([1, "two", None])).section == ViewSection.RESULT
        assert presenter.render(LookupOutcome.success("just text")).text == '"just text"'

    def test_non_ascii_preserved(self):
        view = ResultPresenter().render(LookupOutcome.success({"name": "तुलसी"}))

        assert "तुलसी" in view.text

    def test_unknown_leaf_falls_back_to_str(self):
        stamp = datetime(2024, 5, 1, 10, 0, 0)

        view = ResultPresenter().render(LookupOutcome.success({"at": stamp}))

        assert "2024-05-01 10:00:00" in view.text

    def test_attach_renders_every_change(self):
        store = OutcomeStore()
        lines = []
        ResultPresenter().attach(store, lines.append)

        sequence = store.begin("abc")
        store.apply(sequence, LookupOutcome.failure("not found"))

        assert lines == ["Loading...", "Error: not found"]

    def test_render_current_empty_store(self):
        assert ResultPresenter().render_current(OutcomeStore()) is None

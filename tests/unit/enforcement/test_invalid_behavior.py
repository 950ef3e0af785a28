"""
Unit tests for invalid-behavior dispatch.
"""

import logging
from io import StringIO

import pytest

from licensing_sdk.constants import FailureReason, InvalidBehavior, Limits
from licensing_sdk.enforcement.invalid_behavior import (
    DefaultInvalidViewRenderer,
    InvalidBehaviorDispatcher,
)


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def render(self, message, view_path):
        self.calls.append((message, view_path))
        return f"<modal>{message}</modal>"


class TestDispatch:
    """Test InvalidBehaviorDispatcher.dispatch()."""

    def test_modal_renders_message(self, make_config):
        renderer = RecordingRenderer()
        dispatcher = InvalidBehaviorDispatcher(
            make_config(invalid_behavior="modal", custom_invalid_message="Pay up"),
            renderer=renderer,
        )

        outcome = dispatcher.dispatch(FailureReason.PAYMENT_REQUIRED)

        assert renderer.calls == [("Pay up", None)]
        assert outcome.behavior == InvalidBehavior.MODAL
        assert outcome.rendered_output == "<modal>Pay up</modal>"
        assert outcome.halted is True

    def test_modal_default_message(self, make_config):
        renderer = RecordingRenderer()
        dispatcher = InvalidBehaviorDispatcher(make_config(invalid_behavior="modal"), renderer=renderer)

        outcome = dispatcher.dispatch(FailureReason.LICENSE_INVALID)

        assert outcome.message == Limits.DEFAULT_INVALID_MESSAGE

    def test_redirect_calls_handler(self, make_config):
        redirected = []
        dispatcher = InvalidBehaviorDispatcher(
            make_config(invalid_behavior="redirect", redirect_url="https://example.com/billing"),
            redirector=redirected.append,
        )

        outcome = dispatcher.dispatch(FailureReason.PAYMENT_REQUIRED)

        assert redirected == ["https://example.com/billing"]
        assert outcome.redirect_url == "https://example.com/billing"

    def test_log_behavior(self, make_config, caplog):
        dispatcher = InvalidBehaviorDispatcher(make_config(invalid_behavior="log"))

        with caplog.at_level(logging.ERROR, logger="licensing_sdk"):
            outcome = dispatcher.dispatch(FailureReason.LICENSE_INVALID, detail="revoked")

        assert outcome.behavior == InvalidBehavior.LOG
        assert any("LicenseInvalid" in record.getMessage() for record in caplog.records)

    def test_silent_does_nothing(self, make_config):
        renderer = RecordingRenderer()
        redirected = []
        dispatcher = InvalidBehaviorDispatcher(
            make_config(invalid_behavior="silent"), renderer=renderer, redirector=redirected.append
        )

        outcome = dispatcher.dispatch(FailureReason.API_ERROR)

        assert renderer.calls == []
        assert redirected == []
        assert outcome.halted is True
        assert outcome.rendered_output is None

    def test_unpaid_and_invalid_dispatch_identically(self, make_config):
        renderer = RecordingRenderer()
        dispatcher = InvalidBehaviorDispatcher(make_config(invalid_behavior="modal"), renderer=renderer)

        unpaid = dispatcher.dispatch(FailureReason.PAYMENT_REQUIRED)
        invalid = dispatcher.dispatch(FailureReason.LICENSE_INVALID)

        assert unpaid.rendered_output == invalid.rendered_output
        assert unpaid.reason != invalid.reason


class TestDefaultRenderer:
    """Test DefaultInvalidViewRenderer."""

    def test_message_only(self):
        stream = StringIO()

        output = DefaultInvalidViewRenderer(stream=stream).render("Blocked", None)

        assert output == "Blocked"
        assert stream.getvalue() == "Blocked\n"

    def test_custom_view(self, tmp_path):
        view = tmp_path / "invalid.html"
        view.write_text("<h1>{{ message }}</h1>", encoding="utf-8")

        output = DefaultInvalidViewRenderer(stream=StringIO()).render("Blocked", str(view))

        assert output == "<h1>Blocked</h1>"

    def test_unreadable_view_falls_back_to_message(self, tmp_path):
        output = DefaultInvalidViewRenderer(stream=StringIO()).render(
            "Blocked", str(tmp_path / "missing.html")
        )

        assert output == "Blocked"

    def test_view_not_utf8_falls_back_to_message(self, tmp_path):
        view = tmp_path / "invalid.html"
        view.write_bytes(b"\xff\xfe bad")
        stream = StringIO()

        output = DefaultInvalidViewRenderer(stream=stream).render("Blocked", str(view))

        assert output == "Blocked"
        assert stream.getvalue() == "Blocked\n"


@pytest.mark.parametrize("behavior", list(InvalidBehavior))
def test_every_behavior_halts(make_config, behavior):
    options = {"invalid_behavior": behavior}
    if behavior == InvalidBehavior.REDIRECT:
        options["redirect_url"] = "https://example.com"
    dispatcher = InvalidBehaviorDispatcher(
        make_config(**options), renderer=RecordingRenderer(), redirector=lambda url: None
    )

    assert dispatcher.dispatch(FailureReason.LICENSE_INVALID).halted is True

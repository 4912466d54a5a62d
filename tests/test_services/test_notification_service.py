"""
Tests for notification_service.

Delivery failures must never reach the caller; they only show up in
the log.
"""

import logging
import threading

from flask_mail import Message

from logistics.extensions import mail
from logistics.services import notification_service


class TestTrackingLink:
    """Customer-facing tracking URLs."""

    def test_link_uses_base_url(self, app):
        with app.app_context():
            assert (
                notification_service.tracking_link("ab12cd")
                == "http://testserver/track?parcel=ab12cd"
            )

    def test_trailing_slash_is_ignored(self, app):
        app.config["BASE_URL"] = "https://parcels.example.com/"
        with app.app_context():
            assert (
                notification_service.tracking_link("ab12cd")
                == "https://parcels.example.com/track?parcel=ab12cd"
            )


class TestDispatch:
    """Inline and background delivery."""

    def test_failure_is_logged_not_raised(self, app, monkeypatch, caplog):
        def _broken_send(message):
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr(mail, "send", _broken_send)

        with app.app_context(), caplog.at_level(logging.ERROR):
            notification_service.dispatch(
                Message(subject="Hello", recipients=["someone@example.com"], body="x")
            )

        assert "Failed to send email 'Hello'" in caplog.text

    def test_bcc_is_added_when_configured(self, app, outbox):
        app.config["MAIL_BCC"] = "audit@example.com"
        with app.app_context():
            notification_service._notify(  # pylint: disable=protected-access
                "welcome_admin",
                ["new@example.com"],
                first_name="New",
                display_id="abc123",
                company_name="ABC Logistics Company",
            )

        assert outbox[0].bcc == ["audit@example.com"]

    def test_background_thread_delivers(self, app, outbox, monkeypatch):
        app.config["MAIL_ASYNC"] = True
        started = []

        class _RecordingThread(threading.Thread):
            def start(self):
                started.append(self)
                super().start()

        monkeypatch.setattr(notification_service, "Thread", _RecordingThread)

        with app.app_context():
            notification_service.dispatch(
                Message(subject="Async", recipients=["a@example.com"], body="x")
            )

        assert len(started) == 1
        started[0].join(timeout=5)
        assert started[0].daemon
        assert outbox[0].subject == "Async"

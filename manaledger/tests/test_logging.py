"""Logging setup tests"""

import httpx

from manaledger.core import logging as app_logging
from manaledger.core.config import settings


class FakeLevel:
    name = "ERROR"


class FakeMessage:
    def __init__(self, text):
        self.record = {"level": FakeLevel(), "extra": {"name": "sync_service"}, "message": text}


class TestLogLevel:
    def test_aliases_and_fallback(self):
        assert app_logging.resolve_level("warn") == "WARNING"
        assert app_logging.resolve_level(" debug ") == "DEBUG"
        assert app_logging.resolve_level("verbose") == "INFO"
        assert app_logging.resolve_level(None) == "INFO"


class TestSlackAlert:
    def test_posts_record_to_webhook(self, monkeypatch):
        posted = []
        monkeypatch.setattr(settings, "SLACK_WEBHOOK_URL", "https://hooks.example.test/T000")
        monkeypatch.setattr(app_logging.httpx, "post", lambda url, json, timeout: posted.append((url, json)))

        app_logging.slack_alert(FakeMessage("Fatal sync error after 1.00s: boom"))

        assert posted == [
            (
                "https://hooks.example.test/T000",
                {"text": "[manaledger ERROR] sync_service: Fatal sync error after 1.00s: boom"},
            )
        ]

    def test_webhook_failure_swallowed(self, monkeypatch):
        def unreachable(url, json, timeout):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(settings, "SLACK_WEBHOOK_URL", "https://hooks.example.test/T000")
        monkeypatch.setattr(app_logging.httpx, "post", unreachable)

        app_logging.slack_alert(FakeMessage("boom"))

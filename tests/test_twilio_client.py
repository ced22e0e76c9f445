from __future__ import annotations

from typing import Any

import pytest

from tradeassist.config import Settings
from tradeassist.twilio_client import TwilioMessenger, get_twilio_client, twiml_reply


class FakeMessages:
    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.created.append(kwargs)
        return type("Message", (), {"sid": "SM123"})()


class FakeClient:
    def __init__(self) -> None:
        self.messages = FakeMessages()


def test_send_uses_configured_sender() -> None:
    client = FakeClient()
    messenger = TwilioMessenger(client=client, from_number="+61400000000")  # type: ignore[arg-type]

    messenger.send("g'day", "+61412345678")

    assert client.messages.created == [
        {"to": "+61412345678", "from_": "+61400000000", "body": "g'day"}
    ]


def test_send_without_sender_number_fails() -> None:
    messenger = TwilioMessenger(client=FakeClient(), from_number=None)  # type: ignore[arg-type]
    with pytest.raises(RuntimeError, match="TWILIO_PHONE"):
        messenger.send("hi", "+61412345678")


def test_from_settings_reads_sender_number() -> None:
    settings = Settings(twilio_from_number="+61400000001")
    assert TwilioMessenger.from_settings(settings).from_number == "+61400000001"


def test_missing_credentials_raise() -> None:
    settings = Settings(twilio_account_sid=None, twilio_auth_token=None)
    with pytest.raises(RuntimeError, match="TWILIO_ACCOUNT_SID"):
        get_twilio_client(settings)


def test_twiml_reply_wraps_message() -> None:
    xml = twiml_reply("Chocolate, obviously.")
    assert xml.startswith("<?xml")
    assert "<Response><Message>Chocolate, obviously.</Message></Response>" in xml


def test_twiml_reply_escapes_markup() -> None:
    assert "Up &amp; Go" in twiml_reply("Up & Go")


def test_lazy_client_uses_the_given_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[Settings | None] = []

    def fake_get_client(settings: Settings | None = None) -> FakeClient:
        seen.append(settings)
        return FakeClient()

    monkeypatch.setattr("tradeassist.twilio_client.get_twilio_client", fake_get_client)
    settings = Settings(twilio_account_sid="AC1", twilio_auth_token="t", twilio_from_number="+61400000002")

    messenger = TwilioMessenger.from_settings(settings)
    messenger.send("hi", "+61412345678")

    assert seen == [settings]

from __future__ import annotations

import logging

from twilio.rest import Client
from twilio.twiml.messaging_response import MessagingResponse

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_twilio_client(settings: Settings | None = None) -> Client:
    settings = settings or get_settings()

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise RuntimeError(
            "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
        )

    return Client(settings.twilio_account_sid, settings.twilio_auth_token)


class TwilioMessenger:
    """
    Sends a single SMS from the configured sender number.

    One call to `send` is one Twilio API request; retries are the caller's job.
    The REST client is built on first use, so missing credentials surface as
    a send failure and not while the request is being parsed.
    """

    def __init__(
        self,
        client: Client | None = None,
        from_number: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._client = client
        self.from_number = from_number
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> TwilioMessenger:
        settings = settings or get_settings()
        return cls(from_number=settings.twilio_from_number, settings=settings)

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_twilio_client(self.settings)
        return self._client

    def send(self, body: str, to: str) -> None:
        if not self.from_number:
            raise RuntimeError("TWILIO_PHONE is not configured")

        message = self.client.messages.create(
            to=to,
            from_=self.from_number,
            body=body,
        )
        logger.info("Sent SMS %s to %s", message.sid, to)


def twiml_reply(text: str) -> str:
    """Wrap a reply in the TwiML envelope Twilio expects from an SMS webhook."""
    response = MessagingResponse()
    response.message(text)
    return str(response)

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """Waitlist form submission (JSON or form-encoded)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    business: str | None = None
    email: str | None = None
    phone: str | None = None
    # Hidden form field; real users leave it empty.
    honeypot: str | None = None
    # Epoch milliseconds when the form was rendered.
    signup_time: str | int | float | None = Field(default=None, alias="signupTime")

    def elapsed_ms(self, now_ms: int) -> float:
        """Milliseconds between form render and submission (unparseable -> since epoch)."""
        try:
            started = float(self.signup_time or 0)
        except (TypeError, ValueError):
            started = 0.0
        return now_ms - started


class InboundSms(BaseModel):
    """Fields we use from Twilio's inbound SMS webhook."""

    from_number: str = Field(alias="From")
    body: str = Field(default="", alias="Body")

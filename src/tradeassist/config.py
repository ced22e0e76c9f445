from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel


class Settings(BaseModel):
    # Project root (repo root in local dev, /app in Docker)
    project_root: Path = Path(os.getenv("PROJECT_ROOT", Path(__file__).resolve().parents[2]))

    # Database URL:
    # - Default for local dev: sqlite file in the project root (tradeassist.db)
    # - Override in production using the DATABASE_URL env var
    database_url: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{(Path(__file__).resolve().parents[2] / 'tradeassist.db')}",
    )

    # Static site (signup form + success page). Defaults to public/ under project root.
    public_dir: Path | None = None

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3001"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Twilio settings for outbound SMS ---
    twilio_account_sid: str | None = os.getenv("TWILIO_ACCOUNT_SID")
    twilio_auth_token: str | None = os.getenv("TWILIO_AUTH_TOKEN")
    twilio_from_number: str | None = os.getenv("TWILIO_PHONE")

    # --- OpenAI (OPENAI_API_KEY itself is read by langchain-openai) ---
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # --- Outbound sequence pacing ---
    sms_max_retries: int = int(os.getenv("SMS_MAX_RETRIES", "2"))
    sms_retry_delay: float = float(os.getenv("SMS_RETRY_DELAY", "2.5"))
    sms_pacing_delay: float = float(os.getenv("SMS_PACING_DELAY", "1.5"))

    # --- Signup bot heuristics and rate limiting ---
    min_signup_ms: int = int(os.getenv("MIN_SIGNUP_MS", "1000"))
    rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "5"))
    rate_limit_window: float = float(os.getenv("RATE_LIMIT_WINDOW", "60"))

    def model_post_init(self, __context: object) -> None:  # type: ignore[override]
        env_path = os.getenv("PUBLIC_DIR")
        if env_path:
            object.__setattr__(self, "public_dir", Path(env_path))
        elif self.public_dir is None:
            object.__setattr__(self, "public_dir", self.project_root / "public")


@lru_cache
def get_settings() -> Settings:
    return Settings()

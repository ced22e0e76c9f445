from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Generator
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, Form, HTTPException, Request, Response
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db import SessionLocal, SignupStore, init_db
from .llm import ChatGenerator, TextGenerator
from .phone import is_valid_au_mobile, normalize_phone
from .ratelimit import SlidingWindowLimiter
from .replies import ReplyResolver
from .retry import RetryPolicy
from .sender import Messenger, build_welcome_messages, send_sequence
from .sms import InboundSms, SignupRequest
from .twilio_client import TwilioMessenger, twiml_reply

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: runs once before the app starts serving requests
    configure_logging()
    init_db()
    yield


app = FastAPI(title="TradeAssist", version="0.1.0", lifespan=lifespan)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


# --- Dependencies ---


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> SignupStore:
    return SignupStore(db)


def get_messenger() -> Messenger:
    return TwilioMessenger.from_settings()


@lru_cache
def _default_generator() -> ChatGenerator:
    return ChatGenerator()


def get_generator() -> TextGenerator:
    return _default_generator()


def get_resolver(generator: TextGenerator = Depends(get_generator)) -> ReplyResolver:
    return ReplyResolver(generator)


def get_retry_policy(settings: Settings = Depends(get_settings)) -> RetryPolicy:
    return RetryPolicy(max_retries=settings.sms_max_retries, delay=settings.sms_retry_delay)


@lru_cache
def get_signup_limiter() -> SlidingWindowLimiter:
    settings = get_settings()
    return SlidingWindowLimiter(settings.rate_limit_max, settings.rate_limit_window)


def signup_rate_limit(
    request: Request,
    limiter: SlidingWindowLimiter = Depends(get_signup_limiter),
) -> None:
    client_host = request.client.host if request.client else "unknown"
    if not limiter.allow(client_host):
        logger.warning("Rate limit hit for %s on %s", client_host, request.url.path)
        raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")


async def signup_payload(request: Request) -> SignupRequest:
    """Accept the signup either as JSON or as a regular HTML form post."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        else:
            data = dict(await request.form())
        return SignupRequest.model_validate(data)
    except (ValueError, ValidationError) as exc:
        raise HTTPException(status_code=400, detail="Malformed signup payload") from exc


@app.exception_handler(HTTPException)
async def plain_text_errors(request: Request, exc: HTTPException) -> Response:
    # The signup form reads error bodies as plain text.
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


# --- Routes ---


@app.post("/send-sms", dependencies=[Depends(signup_rate_limit)])
def send_sms(
    payload: SignupRequest = Depends(signup_payload),
    settings: Settings = Depends(get_settings),
    store: SignupStore = Depends(get_store),
    messenger: Messenger = Depends(get_messenger),
    policy: RetryPolicy = Depends(get_retry_policy),
) -> Response:
    """
    Waitlist signup.

    Checks (in order): honeypot, form fill time, phone present, phone valid.
    Then stores the signup and sends the welcome sequence. Nothing is
    stored or sent unless the phone normalises to +61XXXXXXXXX.
    """
    if payload.honeypot and payload.honeypot.strip():
        raise HTTPException(status_code=400, detail="Bot detected")

    if payload.elapsed_ms(int(time.time() * 1000)) < settings.min_signup_ms:
        raise HTTPException(status_code=400, detail="Bot-like behavior")

    if not payload.phone or not payload.phone.strip():
        raise HTTPException(status_code=400, detail="Phone number required")

    phone = normalize_phone(payload.phone)
    if not is_valid_au_mobile(phone):
        raise HTTPException(status_code=400, detail="Invalid Australian mobile number")

    try:
        store.insert(
            name=payload.name,
            business=payload.business,
            email=payload.email,
            phone=phone,
        )
    except Exception as exc:
        logger.error("Signup insert error: %s", exc)
        raise HTTPException(status_code=500, detail="Database error") from exc

    result = send_sequence(
        build_welcome_messages(payload.name),
        phone,
        messenger,
        policy=policy,
        pacing_delay=settings.sms_pacing_delay,
        sleep=policy.sleep,
    )
    if not result.ok:
        logger.error("Error during signup for %s: %s", phone, result.error)
        raise HTTPException(status_code=500, detail="Failed to onboard user")

    return RedirectResponse("/success", status_code=303)


@app.get("/signup-count")
def signup_count(store: SignupStore = Depends(get_store)) -> JSONResponse:
    try:
        count = store.count()
    except Exception as exc:
        logger.error("Error fetching signup count: %s", exc)
        return JSONResponse({"error": "Failed to get signup count"}, status_code=500)
    return JSONResponse({"count": count})


@app.get("/success")
def success_page(settings: Settings = Depends(get_settings)) -> FileResponse:
    if settings.public_dir is None:
        raise HTTPException(status_code=500, detail="PUBLIC_DIR not configured")
    return FileResponse(settings.public_dir / "success.html")


@app.post("/sms")
def sms_webhook(
    From_: str = Form("", alias="From"),
    Body: str = Form("", alias="Body"),
    resolver: ReplyResolver = Depends(get_resolver),
) -> Response:
    """
    Twilio inbound SMS webhook.

    Always answers with TwiML carrying a reply; generation failures are
    already turned into the fallback text by the resolver.
    """
    logger.info("Incoming SMS from %s: %s", From_, Body)
    reply = resolver.resolve(Body)
    return Response(content=twiml_reply(reply), media_type="text/xml")


@app.post("/test/inbound")
def test_inbound(payload: InboundSms, resolver: ReplyResolver = Depends(get_resolver)) -> JSONResponse:
    """
    Same reply logic as /sms without Twilio, for local testing.

    Accepts JSON:

      { "From": "+61412345678", "Body": "sparky" }
    """
    reply = resolver.resolve(payload.body)
    return JSONResponse({"status": "ok", "reply": reply})


# Static site last so it never shadows the routes above.
_public_dir = get_settings().public_dir
if _public_dir is not None and _public_dir.is_dir():
    app.mount("/", StaticFiles(directory=_public_dir, html=True), name="public")

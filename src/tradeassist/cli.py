from __future__ import annotations

import argparse

import uvicorn

from .config import get_settings
from .db import SessionLocal, SignupStore, init_db
from .llm import ChatGenerator
from .replies import ReplyResolver


def chat() -> None:
    """
    Interactive CLI chat against the inbound-SMS reply logic.

    Uses the same resolver as the /sms webhook, without Twilio.
    """
    resolver = ReplyResolver(ChatGenerator())
    print("TradeAssist reply mode. Type /quit to exit.\n")
    while True:
        try:
            user_input = input("sms> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not user_input:
            continue
        if user_input.lower() in {"/q", "/quit", "/exit"}:
            break
        print(f"bot> {resolver.resolve(user_input)}\n")


def print_count() -> None:
    """Print how many people are on the waitlist."""
    init_db()
    db = SessionLocal()
    try:
        print(SignupStore(db).count())
    finally:
        db.close()


def serve(host: str | None = None, port: int | None = None) -> None:
    settings = get_settings()
    uvicorn.run(
        "tradeassist.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    parser = argparse.ArgumentParser(prog="tradeassist", description="TradeAssist waitlist backend.")
    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Run the HTTP server (default).")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    sub.add_parser("chat", help="Try inbound-SMS replies from the terminal.")
    sub.add_parser("count", help="Print the number of waitlist signups.")

    args = parser.parse_args()

    if args.command == "chat":
        chat()
    elif args.command == "count":
        print_count()
    else:
        serve(host=getattr(args, "host", None), port=getattr(args, "port", None))


if __name__ == "__main__":
    main()

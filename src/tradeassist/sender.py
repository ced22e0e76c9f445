from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Protocol

from .retry import RetryPolicy

logger = logging.getLogger(__name__)

PACING_DELAY = 1.5


class Messenger(Protocol):
    def send(self, body: str, to: str) -> None: ...


@dataclass
class SendResult:
    delivered: list[str] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_welcome_messages(name: str | None) -> list[str]:
    """The waitlist welcome sequence, in send order."""
    name = (name or "").strip()
    return [
        f"Hey {name or 'legend'}, you're officially on the TradeAssist waitlist "
        "- no more missed jobs, even when you're neckin' an Up & Go on the run!",
        f"Now rip the lid off that brekkie juice, {name or 'mate'} 💪 "
        "- we'll handle the calls while you handle the smoko.",
    ]


def send_sequence(
    messages: Sequence[str],
    to: str,
    messenger: Messenger,
    *,
    policy: RetryPolicy | None = None,
    pacing_delay: float = PACING_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> SendResult:
    """
    Send `messages` to `to` one at a time, in order.

    Each message gets its own retry budget. The first message that exhausts
    it aborts the sequence: later messages are never attempted and the
    result carries the last error. After every delivered message we wait
    `pacing_delay` seconds before moving on.
    """
    policy = policy or RetryPolicy(sleep=sleep)
    result = SendResult()

    for index, body in enumerate(messages, start=1):
        try:
            policy.run(partial(messenger.send, body, to), label=f"SMS {index} to {to}")
        except Exception as exc:
            logger.error(
                "Aborting sequence to %s after %d/%d messages: %s",
                to,
                len(result.delivered),
                len(messages),
                exc,
            )
            result.error = exc
            return result

        result.delivered.append(body)
        sleep(pacing_delay)

    return result

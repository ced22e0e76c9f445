from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Fixed-count retry with a fixed delay between attempts.

    Every exception is treated the same way: no classification into
    retryable / non-retryable errors. `max_retries=2` means 3 attempts.
    """

    max_retries: int = 2
    delay: float = 2.5
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def run(self, operation: Callable[[], T], *, label: str = "operation") -> T:
        """
        Call `operation` until it succeeds or the attempts are used up.

        Re-raises the last exception once the budget is exhausted. There is
        no sleep after the final failed attempt.
        """
        for attempt in range(1, self.attempts + 1):
            try:
                return operation()
            except Exception as exc:
                logger.error("%s failed (attempt %d/%d): %s", label, attempt, self.attempts, exc)
                if attempt == self.attempts:
                    raise
                self.sleep(self.delay)
        # max_retries >= 0, so the loop either returns or raises.
        raise RuntimeError("unreachable")

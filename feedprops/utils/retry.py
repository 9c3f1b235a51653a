from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

from .logging import get_logger

T = TypeVar("T")
logger = get_logger("feedprops.retry")


def with_retries(
    fn: Callable[[], T],
    *,
    retries: int = 2,
    backoff: float = 1.5,
    should_retry: Callable[[Exception], bool] = lambda exc: True,
    description: str = "call",
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call ``fn`` and retry up to ``retries`` times on retryable errors.

    Waits ``backoff ** attempt`` seconds between attempts. The last error is
    re-raised unchanged.
    """
    for attempt in range(retries + 1):
        try:
            return fn()
        except Exception as exc:  # noqa: BLE001 - filtered by should_retry
            if attempt >= retries or not should_retry(exc):
                raise
            sleep_s = backoff ** attempt
            logger.warning(
                "%s failed (attempt %s/%s): %s; retrying in %.1fs",
                description, attempt + 1, retries + 1, exc, sleep_s,
            )
            (sleep or time.sleep)(sleep_s)
    raise AssertionError("unreachable")

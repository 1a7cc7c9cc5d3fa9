"""Backoff retry for transient record-store failures."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, Tuple, Type, TypeVar, ParamSpec


P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def backoff_delays(
    attempts: int, delay: float, backoff: float, max_delay: float | None = None
) -> list[float]:
    """Pauses taken between consecutive attempts, capped at max_delay."""

    delays = [delay * backoff**index for index in range(max(attempts - 1, 0))]
    if max_delay is not None:
        delays = [min(pause, max_delay) for pause in delays]
    return delays


def retry(
    *,
    attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2.0,
    max_delay: float | None = None,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Call again on the given exceptions, re-raising the last one.

    Only the listed exceptions are retried; anything else propagates on the
    first attempt.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    pauses = backoff_delays(attempts, delay, backoff, max_delay)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        name = getattr(func, "__name__", repr(func))

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            for attempt, pause in enumerate(pauses, start=1):
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    logger.warning(
                        "retrying_call",
                        extra={
                            "function": name,
                            "attempt": attempt,
                            "delay": pause,
                            "error": str(exc),
                        },
                    )
                    sleep(pause)
            return func(*args, **kwargs)

        return wrapper

    return decorator

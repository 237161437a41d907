#!/usr/bin/env python3
"""
Retry decorator with exponential backoff

The extraction engine itself never retries: catalog failures are surfaced
and tile failures are absorbed as "no rain". Callers that want another
attempt (the CLI's ``--retries`` flag) wrap engine calls with this
decorator.
"""

import random
import time
from collections.abc import Callable
from functools import wraps


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, float, Exception], None] | None = None,
    jitter: bool = False,
):
    """Decorator for retry with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay cap in seconds (default: 30.0)
        exceptions: Exception types that trigger a retry (default: all)
        on_retry: Optional callback called before each retry with
            (attempt_number, delay, exception)
        jitter: Spread delays randomly between 50% and 150% of the
            computed value, still capped at max_delay

    Example:
        @retry_with_backoff(max_retries=2, exceptions=(NetworkError,))
        def latest_polygons():
            return extractor.extract(bbox)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        raise

                    delay = min(base_delay * (2**attempt), max_delay)
                    if jitter:
                        delay = min(delay * (0.5 + random.random()), max_delay)

                    attempt += 1
                    if on_retry is not None:
                        on_retry(attempt, delay, e)

                    time.sleep(delay)

        return wrapper

    return decorator

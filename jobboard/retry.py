"""Retry decorator with exponential backoff for network, LLM and SMTP calls."""
from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable, Tuple, Type

import requests

logger = logging.getLogger(__name__)

# Errors worth another attempt on an outbound HTTP call.
NETWORK_ERRORS: Tuple[Type[BaseException], ...] = (requests.RequestException, OSError)


def is_permanent(exc: BaseException) -> bool:
    """A 4xx other than 429 (bad key, bad query) will fail the same way again."""
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return isinstance(exc, requests.HTTPError) and status is not None and 400 <= status < 500 and status != 429


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = NETWORK_ERRORS,
) -> Callable:
    """Retry the wrapped call with exponential backoff.

    The final failure is re-raised so the caller decides how to recover
    (skip a source, fall back to a cached register, use the heuristic).
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if is_permanent(exc):
                        logger.error("%s failed permanently: %s", fn.__qualname__, exc)
                        raise
                    if attempt >= max_attempts:
                        logger.error("%s gave up after %d attempts: %s", fn.__qualname__, max_attempts, exc)
                        raise
                    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__, attempt, max_attempts, exc, delay,
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator

"""Short retry loop shared by the model-backed services."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    action: str,
    retry_attempts: int,
    retry_delay_seconds: float,
    debug: bool = False,
) -> T:
    """Call an async function with a short retry."""
    attempt = 0
    while True:
        try:
            return await func()
        except Exception as exc:
            attempt += 1
            if debug:
                _logger.warning(
                    "Model %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    retry_attempts + 1,
                    status_code_from_exception(exc),
                    exc,
                )
            if attempt > retry_attempts:
                raise
            await asyncio.sleep(retry_delay_seconds)


def status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"

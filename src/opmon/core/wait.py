import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class Clock:
    """
    Source of time for bounded waits. Tests substitute a clock that advances instantly.
    """

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


async def wait_until(
    predicate: Callable[[], Awaitable[Any]],
    timeout: float,
    interval: float = 1.0,
    clock: Clock = None,
    description: str = "condition",
) -> bool:
    """
    Polls an async predicate until it returns a truthy value or the timeout elapses.

    The predicate is always evaluated at least once, and once more at the deadline.
    Exceptions raised by the predicate count as a falsy result.

    Returns:
        bool: True if the predicate was satisfied within the timeout, False otherwise.
    """
    clock = clock or Clock()
    deadline = clock.monotonic() + max(timeout, 0)
    interval = max(interval, 0.01)

    while True:
        try:
            if await predicate():
                return True
        except Exception as e:
            logger.debug("Predicate for %s raised: %s", description, e)

        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            logger.debug("Timed out after %ss waiting for %s.", timeout, description)
            return False
        await clock.sleep(min(interval, remaining))

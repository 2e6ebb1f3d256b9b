"""Cooperative cancellation for recognition calls."""

import asyncio
import threading
from typing import Optional


class CancellationToken:
    """
    Caller-owned cancellation signal.

    ``cancel()`` may be called from any thread. Waiting code observes the
    token through ``raise_if_cancelled()`` and ``wait_or_cancel()``, which
    raise ``asyncio.CancelledError``.
    """

    def __init__(self):
        self._cancelled = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise asyncio.CancelledError("Operation was cancelled")


def raise_if_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise CancelledError if the (optional) token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()


async def wait_or_cancel(
    delay: float,
    token: Optional[CancellationToken],
    poll_interval: float = 0.05,
) -> None:
    """
    Sleep for ``delay`` seconds, aborting early if the token is cancelled.

    Raises:
        asyncio.CancelledError: If the token is cancelled before or during the wait
    """
    raise_if_cancelled(token)
    if token is None:
        await asyncio.sleep(delay)
        return

    loop = asyncio.get_running_loop()
    deadline = loop.time() + delay
    while True:
        token.raise_if_cancelled()
        remaining = deadline - loop.time()
        if remaining <= 0:
            return
        await asyncio.sleep(min(poll_interval, remaining))

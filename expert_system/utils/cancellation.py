"""Cooperative cancellation for long-running polling loops."""

from __future__ import annotations

import asyncio


class CancellationToken:
    """One-shot flag that a poll loop checks before each scheduled request.

    ``wait`` doubles as the inter-poll sleep so a cancel interrupts the delay
    instead of waiting it out.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return ``True`` if cancelled meanwhile."""
        if timeout <= 0:
            await asyncio.sleep(0)
            return self.cancelled
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


__all__ = ["CancellationToken"]

"""Schedule-once timers used for debouncing.

``TimerService`` is the seam between the episode state machine and the
event loop: production code runs on ``AsyncioTimerService`` while tests
drive a manual clock.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class TimerService(ABC):
    """Interface for schedule-once-with-cancel timers."""

    @abstractmethod
    def start(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        """Run ``callback`` once after ``delay_ms``.  Returns a handle."""

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a pending timer.  Cancelling a fired timer is a no-op."""


class AsyncioTimerService(TimerService):
    """Timers backed by ``loop.call_later`` on the running loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def start(
        self, delay_ms: int, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay_ms / 1000, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

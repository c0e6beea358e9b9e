"""asyncio-backed Scheduler for hosts running an event loop."""

import asyncio
from typing import Callable


class AsyncioScheduler:
    """
    Schedule replay ticks on an asyncio event loop.

    The returned asyncio.TimerHandle satisfies CancelToken.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def after(self, ms: float, fn: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(ms / 1000.0, fn)

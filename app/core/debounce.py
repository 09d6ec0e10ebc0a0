import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delays ``callback`` until ``window_sec`` passes without a new ``schedule`` call.

    Every ``schedule`` cancels the pending invocation, so only the arguments of the
    last call inside a quiescence window ever reach the callback. Once the window
    has elapsed the callback runs to completion; a later ``schedule`` starts a new
    window rather than interrupting it.
    """

    def __init__(self, window_sec: float, callback: Callable[..., Awaitable[Any]]):
        self.window_sec = window_sec
        self.callback = callback
        self._task: Optional[asyncio.Task] = None
        self._firing: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, *args: Any) -> asyncio.Task:
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._fire(*args))
        self._task = task
        return task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def drain(self) -> None:
        """Waits for the pending window and any callback already running."""
        tasks = list(self._firing)
        if self.pending:
            tasks.append(self._task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire(self, *args: Any) -> None:
        await asyncio.sleep(self.window_sec)

        task = asyncio.current_task()
        if self._task is task:
            self._task = None
        self._firing.add(task)
        try:
            await self.callback(*args)
        except Exception as e:
            logger.error(f"Debounced callback failed: {type(e).__name__}: {e}", exc_info=True)
        finally:
            self._firing.discard(task)

"""
Single-slot memo shared by a request and all of its clones.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from shared.logging import get_logger


class ResponseMemo:
    """Runs a request factory at most once and replays its outcome.

    Observers await the in-flight task through ``asyncio.shield`` so a
    detaching observer never cancels the underlying call; the outcome is
    recorded when the task finishes whether or not anyone is still waiting.
    """

    def __init__(self):
        self.logger = get_logger("client_cache.memo")
        self._task: Optional[asyncio.Future] = None
        self.settled = False
        self.value: Any = None
        self.failure: Optional[BaseException] = None
        self._failure_tb = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self.settled

    def _settle(self, task: asyncio.Future):
        if task.cancelled():
            # Nothing to replay; the next observer starts a fresh call.
            self._task = None
            self.logger.debug("Response memo reset after cancellation")
            return

        failure = task.exception()
        if failure is not None:
            self.failure = failure
            self._failure_tb = failure.__traceback__
        else:
            self.value = task.result()
        self.settled = True

    def _outcome(self) -> Any:
        if self.failure is not None:
            # Reset so every replay starts from the original traceback.
            raise self.failure.with_traceback(self._failure_tb)
        return self.value

    async def observe(self, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Return the memoized outcome, starting ``factory`` if nobody has yet."""
        if self.settled:
            return self._outcome()

        if self._task is None:
            self._task = asyncio.ensure_future(factory())
            self._task.add_done_callback(self._settle)

        return await asyncio.shield(self._task)

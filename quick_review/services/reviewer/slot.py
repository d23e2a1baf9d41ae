"""Single-assignment cell holding the verdict of one review."""

import asyncio
from typing import Awaitable, Callable, Optional

from quick_review.services.reviewer.schemas import ReviewVerdict

BeforeWrite = Callable[[ReviewVerdict], Awaitable[None]]


class ResultSlot:
    """Holds at most one ReviewVerdict.

    The first successful offer wins. Check-and-set runs under a lock, so two
    concurrent submissions can never both see the slot empty. Created fresh
    for every review and read once the loop has stopped.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._verdict: Optional[ReviewVerdict] = None

    @property
    def filled(self) -> bool:
        return self._verdict is not None

    async def offer(
        self,
        verdict: ReviewVerdict,
        before_write: Optional[BeforeWrite] = None,
    ) -> bool:
        """Store the verdict if the slot is still empty.

        before_write runs inside the locked section, only when the slot is
        empty. If it raises, nothing is stored and the error propagates.

        Returns:
            True if the verdict was stored, False if one was already there
        """
        async with self._lock:
            if self._verdict is not None:
                return False
            if before_write is not None:
                await before_write(verdict)
            self._verdict = verdict
            return True

    async def get(self) -> Optional[ReviewVerdict]:
        async with self._lock:
            return self._verdict

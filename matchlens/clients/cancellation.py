"""
Cancellation tokens for in-flight collaborator requests.

The caller owns an AbortSignal and passes it into every fetch. Calling
abort() (e.g. on view teardown or when a newer selection supersedes the
request) cancels the underlying HTTP request and the awaiting caller gets
RequestAborted instead of a late result.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")


class RequestAborted(Exception):
    """The request was cancelled through its AbortSignal."""

    def __init__(self, reason: str = "aborted"):
        super().__init__(reason)
        self.reason = reason


class AbortSignal:
    """One-shot cancellation flag that coroutines can await."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self, reason: str = "aborted") -> None:
        """Abort once. Later calls keep the first reason."""
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_aborted(self) -> None:
        if self.aborted:
            raise RequestAborted(self.reason or "aborted")


async def run_abortable(awaitable: Awaitable[T], signal: Optional[AbortSignal]) -> T:
    """
    Await `awaitable`, racing it against `signal`.

    Raises:
        RequestAborted: if the signal fires first (the awaitable is cancelled)
    """
    if signal is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    if signal.aborted:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        signal.raise_if_aborted()

    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    # Let the cancelled request unwind before reporting the abort.
    await asyncio.gather(task, return_exceptions=True)
    raise RequestAborted(signal.reason or "aborted")

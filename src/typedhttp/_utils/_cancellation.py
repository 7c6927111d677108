"""Cooperative cancellation shared by requests, callers and services.

A ``CancellationTokenSource`` owns the right to cancel; the
``CancellationToken`` it hands out can only be observed. Sources can be
linked to several tokens so that the first one to fire cancels the linked
source too, carrying the name of the source that fired as ``reason``.
"""

import asyncio
import threading
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from ..models.errors import RequestCancelledError

T = TypeVar("T")

CancellationCallback = Callable[["CancellationToken"], None]


class CancellationRegistration:
    """Handle returned by ``CancellationToken.register``; ``dispose`` unregisters."""

    __slots__ = ("_source", "_callback")

    def __init__(
        self,
        source: Optional["CancellationTokenSource"],
        callback: Optional[CancellationCallback],
    ) -> None:
        self._source = source
        self._callback = callback

    def dispose(self) -> None:
        source, callback = self._source, self._callback
        self._source = self._callback = None
        if source is not None and callback is not None:
            source._unregister(callback)


class CancellationToken:
    __slots__ = ("_source",)

    NONE: "CancellationToken"

    def __init__(self, source: Optional["CancellationTokenSource"] = None) -> None:
        self._source = source

    @property
    def can_be_cancelled(self) -> bool:
        return self._source is not None

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source is not None and self._source.is_cancellation_requested

    @property
    def reason(self) -> Optional[str]:
        return None if self._source is None else self._source.reason

    def register(self, callback: CancellationCallback) -> CancellationRegistration:
        """Call ``callback(token)`` once when cancellation is requested.

        The callback runs immediately when the token is already cancelled.
        """
        if self._source is None:
            return CancellationRegistration(None, None)
        return self._source._register(callback)

    def raise_if_cancellation_requested(self) -> None:
        if self.is_cancellation_requested:
            raise RequestCancelledError(self.reason)

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""
        if self.is_cancellation_requested:
            return
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()

        def wake(_: "CancellationToken") -> None:
            loop.call_soon_threadsafe(_resolve, waiter)

        registration = self.register(wake)
        try:
            await waiter
        finally:
            registration.dispose()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancellation_requested}, reason={self.reason!r})"


CancellationToken.NONE = CancellationToken()


def _resolve(waiter: "asyncio.Future[None]") -> None:
    if not waiter.done():
        waiter.set_result(None)


class CancellationTokenSource:
    """Thread safe, idempotent source of a ``CancellationToken``."""

    def __init__(self, name: str = "external") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._callbacks: List[CancellationCallback] = []
        self._links: List[CancellationRegistration] = []
        self._reason: Optional[str] = None
        self._cancelled = False
        self._closed = False
        self.token = CancellationToken(self)

    @classmethod
    def linked(
        cls, *tokens: Optional[CancellationToken], name: str = "linked"
    ) -> "CancellationTokenSource":
        """Create a source cancelled as soon as any of ``tokens`` is.

        ``None`` and never-cancelling tokens are skipped. The linked source
        reports the reason of the token that fired first.
        """
        source = cls(name)
        for token in tokens:
            if token is None or not token.can_be_cancelled:
                continue
            registration = token.register(
                lambda fired: source.cancel(fired.reason)
            )
            with source._lock:
                if source._closed:
                    registration.dispose()
                else:
                    source._links.append(registration)
        return source

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def closed(self) -> bool:
        return self._closed

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation. Repeated calls and calls after ``close`` are no-ops."""
        with self._lock:
            if self._cancelled or self._closed:
                return
            self._cancelled = True
            self._reason = reason or self.name
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self.token)

    def close(self) -> None:
        """Release callbacks and links to parent tokens. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            links, self._links = self._links, []
            self._callbacks = []
        for registration in links:
            registration.dispose()

    def _register(self, callback: CancellationCallback) -> CancellationRegistration:
        with self._lock:
            if not self._cancelled:
                if self._closed:
                    return CancellationRegistration(None, None)
                self._callbacks.append(callback)
                return CancellationRegistration(self, callback)
        callback(self.token)
        return CancellationRegistration(None, None)

    def _unregister(self, callback: CancellationCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def __repr__(self) -> str:
        return (
            f"CancellationTokenSource(name={self.name!r}, "
            f"cancelled={self._cancelled}, closed={self._closed})"
        )


async def run_cancellable(awaitable: Awaitable[T], token: CancellationToken) -> T:
    """Await ``awaitable`` unless ``token`` fires first.

    When the token wins, the pending operation is cancelled and
    ``RequestCancelledError`` is raised, even if the operation finished in
    the same loop iteration.
    """
    if token.is_cancellation_requested:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        token.raise_if_cancellation_requested()
    if not token.can_be_cancelled:
        return await awaitable

    task: "asyncio.Future[Any]" = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for pending in (task, waiter):
            if not pending.done():
                pending.cancel()
        await asyncio.gather(task, waiter, return_exceptions=True)

    token.raise_if_cancellation_requested()
    return task.result()

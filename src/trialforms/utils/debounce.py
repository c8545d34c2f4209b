"""
Debounce Utilities.

Collapses rapid repeated invocations (keystrokes, search queries) into one
deferred call on the asyncio event loop. Each debouncer owns at most one
pending timer: a new ``schedule`` supersedes the pending one, and ``cancel``
or ``close`` must be called when the owning form or search session goes
away so a callback never fires against a disposed context.
"""

import asyncio
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    TypeVar,
)

from trialforms.config import DEFAULT_DEBOUNCE_MS
from trialforms.utils.exceptions import DebounceCancelledError, DebouncerClosedError
from trialforms.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Debouncer:
    """Delays a callback until calls stop arriving for ``delay_ms``."""

    def __init__(
        self,
        delay_ms: float = DEFAULT_DEBOUNCE_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        """Initialize debouncer.

        Args:
            delay_ms: Default delay applied when ``schedule`` gets none
            loop: Event loop to use; defaults to the running loop
        """
        if delay_ms < 0:
            raise ValueError("delay_ms must not be negative")
        self.delay_ms = delay_ms
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[Tuple[Callable[..., Any], Sequence[Any]]] = None
        self._closed = False
        self._tasks: Set["asyncio.Task[Any]"] = set()

    @property
    def pending(self) -> bool:
        """Whether a callback is waiting to fire."""
        return self._handle is not None

    @property
    def closed(self) -> bool:
        """Whether the debouncer has been disposed."""
        return self._closed

    @property
    def running_tasks(self) -> int:
        """Coroutine callbacks started by this debouncer and not yet finished."""
        return len(self._tasks)

    def schedule(
        self,
        callback: Callable[..., Any],
        args: Sequence[Any] = (),
        delay_ms: Optional[float] = None,
    ) -> None:
        """Schedule ``callback(*args)``, replacing any pending call.

        Raises:
            DebouncerClosedError: If the debouncer was closed
        """
        if self._closed:
            raise DebouncerClosedError()

        self._clear_timer()
        delay = self.delay_ms if delay_ms is None else delay_ms
        loop = self._loop or asyncio.get_running_loop()
        self._pending = (callback, tuple(args))
        self._handle = loop.call_later(delay / 1000.0, self._fire)

    def cancel(self) -> None:
        """Drop the pending call without firing it. Safe when nothing is pending."""
        if self._handle is not None:
            logger.debug("debounce_cancelled")
        self._clear_timer()

    def flush(self) -> bool:
        """Fire the pending call immediately.

        Returns:
            True if a call was pending and has been invoked
        """
        if self._handle is None:
            return False
        self._fire()
        return True

    def close(self) -> None:
        """Cancel any pending call and refuse further scheduling."""
        self.cancel()
        self._closed = True

    def __enter__(self) -> "Debouncer":
        """Enter context manager."""
        return self

    def __exit__(self, *exc_info: Any) -> None:
        """Exit context manager, disposing the debouncer."""
        self.close()

    def _clear_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    def _fire(self) -> None:
        pending = self._pending
        self._clear_timer()
        if pending is None:
            return

        callback, args = pending
        result = callback(*args)
        if asyncio.iscoroutine(result):
            loop = self._loop or asyncio.get_running_loop()
            task = loop.create_task(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: "asyncio.Task[Any]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "debounced_callback_failed",
                error=str(error),
                error_type=type(error).__name__,
            )


class AsyncDebouncer(Generic[T]):
    """Debounces an async function and hands its result back to callers.

    Every caller awaiting within one debounce window shares a single future,
    resolved (or rejected) exactly once with the outcome of the call that
    actually fires, which is always the one made with the latest arguments.
    """

    def __init__(
        self,
        func: Callable[..., Awaitable[T]],
        delay_ms: float = DEFAULT_DEBOUNCE_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        """Initialize async debouncer."""
        self.func = func
        self._debouncer = Debouncer(delay_ms, loop=loop)
        self._future: Optional["asyncio.Future[T]"] = None

    @property
    def pending(self) -> bool:
        """Whether a call is waiting to fire."""
        return self._debouncer.pending

    async def call(self, *args: Any, **kwargs: Any) -> T:
        """Request a call; resolves when the debounced call completes.

        Raises:
            DebounceCancelledError: If ``cancel`` or ``close`` ran first
            DebouncerClosedError: If the debouncer was closed
        """
        if self._debouncer.closed:
            raise DebouncerClosedError()
        if self._future is None or self._future.done():
            self._future = asyncio.get_running_loop().create_future()
        future = self._future
        self._debouncer.schedule(self._fire, (future, args, kwargs))
        return await asyncio.shield(future)

    def cancel(self) -> None:
        """Cancel the pending call and reject anyone awaiting it."""
        self._debouncer.cancel()
        self._reject_pending()

    def close(self) -> None:
        """Cancel and dispose."""
        self._debouncer.close()
        self._reject_pending()

    def _reject_pending(self) -> None:
        future, self._future = self._future, None
        if future is not None and not future.done():
            future.set_exception(DebounceCancelledError())

    def _fire(
        self,
        future: "asyncio.Future[T]",
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> Awaitable[None]:
        # Later calls start a new window with a new future
        if self._future is future:
            self._future = None
        return self._run(future, args, kwargs)

    async def _run(
        self,
        future: "asyncio.Future[T]",
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> None:
        try:
            result = await self.func(*args, **kwargs)
        except Exception as e:
            if not future.done():
                future.set_exception(e)
            return
        if not future.done():
            future.set_result(result)


class DebouncedSearch(Generic[T]):
    """Search-as-you-type on top of ``AsyncDebouncer``.

    Blank queries never reach the search function: they cancel any pending
    search and resolve to an empty list straight away.
    """

    def __init__(
        self,
        search_fn: Callable[[str], Awaitable[List[T]]],
        delay_ms: float = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        """Initialize debounced search."""
        self._debouncer: AsyncDebouncer[List[T]] = AsyncDebouncer(
            self._search, delay_ms
        )
        self._search_fn = search_fn
        self.is_searching = False
        self.last_query = ""

    async def search(self, query: str) -> List[T]:
        """Debounced search for ``query``."""
        if not query.strip():
            self.cancel()
            return []
        self.is_searching = True
        self.last_query = query
        return await self._debouncer.call(query)

    def cancel(self) -> None:
        """Cancel the pending search."""
        self._debouncer.cancel()
        self.is_searching = False

    def close(self) -> None:
        """Dispose the search session."""
        self._debouncer.close()
        self.is_searching = False

    async def _search(self, query: str) -> List[T]:
        try:
            return await self._search_fn(query)
        finally:
            self.is_searching = False

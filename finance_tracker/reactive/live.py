"""
Observable Values

DESIGN DECISION: Everything the UI shows is pushed, never polled.
The store exposes LiveQuery objects that re-run after every committed
mutation; the state layer copies their results into MutableLiveValues
and combines those into DerivedLiveValues.

All subscribe/cancel/emit calls happen on the event loop thread, so
delivery to a given observer is serialized by construction. Store work
runs on the database thread and only its results come back to the loop.
"""

import asyncio
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Optional,
    Sequence,
    TypeVar,
)

import structlog


T = TypeVar("T")

logger = structlog.get_logger(__name__)

_MISSING = object()


class Subscription(Generic[T]):
    """Handle tying one observer to one observable."""

    def __init__(
        self,
        source: "Observable[T]",
        on_next: Callable[[T], Any],
        on_error: Optional[Callable[[Exception], Any]] = None,
    ):
        self._source = source
        self.on_next = on_next
        self.on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Detach the observer. Safe to call more than once."""
        if self._active:
            self._active = False
            self._source._remove(self)


class Observable(Generic[T]):
    """
    Multiplexes values to zero or more observers.

    Subclasses hook into _on_active (first observer attached) and
    _on_inactive (last observer detached) to start and stop their
    upstream work.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription[T]] = []
        self._value: Any = _MISSING

    @property
    def has_value(self) -> bool:
        return self._value is not _MISSING

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        on_next: Callable[[T], Any],
        on_error: Optional[Callable[[Exception], Any]] = None,
    ) -> Subscription[T]:
        """
        Attach an observer.

        If a value is already known it is delivered immediately.
        """
        subscription = Subscription(self, on_next, on_error)
        if not self._subscriptions:
            self._on_active()
        self._subscriptions.append(subscription)
        if self.has_value:
            subscription.on_next(self._value)
        return subscription

    def _remove(self, subscription: Subscription[T]) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return
        if not self._subscriptions:
            self._on_inactive()

    def _emit(self, value: T) -> None:
        self._value = value
        for subscription in list(self._subscriptions):
            if subscription.active:
                subscription.on_next(value)

    def _emit_error(self, error: Exception) -> None:
        handled = False
        for subscription in list(self._subscriptions):
            if subscription.active and subscription.on_error is not None:
                subscription.on_error(error)
                handled = True
        if not handled:
            logger.error(
                "observable_error_unhandled",
                source=type(self).__name__,
                error=str(error),
            )

    def _on_active(self) -> None:
        pass

    def _on_inactive(self) -> None:
        pass

    def snapshots(self) -> "SnapshotStream[T]":
        """
        Stream emitted values as an async iterator.

        Use as `async with observable.snapshots() as stream: async for ...`.
        The observer is attached on entering the block and detached on
        leaving it, including when the loop is left with `break`.
        """
        return SnapshotStream(self)


class SnapshotStream(Generic[T]):
    """
    Async iterator over the values of one observable.

    The subscription lives exactly as long as the `async with` block.
    Iteration raises the first error the observable reports.
    """

    def __init__(self, source: Observable[T]):
        self._source = source
        self._queue: asyncio.Queue = asyncio.Queue()
        self._subscription: Optional[Subscription[T]] = None

    @property
    def attached(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def __aenter__(self) -> "SnapshotStream[T]":
        self._subscription = self._source.subscribe(
            lambda value: self._queue.put_nowait((True, value)),
            lambda error: self._queue.put_nowait((False, error)),
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._subscription is not None:
            self._subscription.cancel()

    def __aiter__(self) -> "SnapshotStream[T]":
        return self

    async def __anext__(self) -> T:
        if self._subscription is None:
            raise RuntimeError("Enter the stream with 'async with' before iterating")
        ok, item = await self._queue.get()
        if not ok:
            raise item
        return item


class LiveValue(Observable[T]):
    """Read-only view of a MutableLiveValue."""

    def __init__(self, source: "MutableLiveValue[T]"):
        super().__init__()
        self._source = source

    @property
    def value(self) -> T:
        return self._source.value

    @property
    def has_value(self) -> bool:
        return True

    @property
    def observer_count(self) -> int:
        return self._source.observer_count

    def subscribe(self, on_next, on_error=None):
        return self._source.subscribe(on_next, on_error)


class MutableLiveValue(Observable[T]):
    """
    Holder of a current value.

    Setting an equal value is ignored; setting a different one notifies
    every observer. New observers receive the current value immediately.
    """

    def __init__(self, initial: T):
        super().__init__()
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        if new_value == self._value:
            return
        self._emit(new_value)

    def set(self, new_value: T) -> None:
        """Callable form of the setter, handy as an on_next callback."""
        self.value = new_value

    def as_read_only(self) -> LiveValue[T]:
        return LiveValue(self)


class InvalidationTracker:
    """Registry of the live queries that must re-run after a write."""

    def __init__(self) -> None:
        self._queries: list["LiveQuery[Any]"] = []

    @property
    def active_count(self) -> int:
        return len(self._queries)

    def register(self, query: "LiveQuery[Any]") -> None:
        if query not in self._queries:
            self._queries.append(query)

    def unregister(self, query: "LiveQuery[Any]") -> None:
        if query in self._queries:
            self._queries.remove(query)

    def notify(self) -> None:
        """Re-run every active query. Must be called on the event loop."""
        for query in list(self._queries):
            query.invalidate()


class LiveQuery(Observable[T]):
    """
    A store query that re-emits whenever the data behind it changes.

    Lazy: nothing runs until the first observer attaches.
    Restartable: when the last observer leaves the query forgets its
    result, and the next observer triggers a fresh run.

    Results are delivered in the order the refreshes were requested; a
    slow, older refresh never overwrites a newer snapshot. A failed
    refresh goes to the observers' error callbacks and the last good
    snapshot stays in place.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        tracker: InvalidationTracker,
        name: str = "query",
    ):
        super().__init__()
        self._fetch = fetch
        self._tracker = tracker
        self.name = name
        self._requested = 0
        self._delivered = 0
        self._tasks: set[asyncio.Task] = set()

    def _on_active(self) -> None:
        self._tracker.register(self)
        self.invalidate()

    def _on_inactive(self) -> None:
        self._tracker.unregister(self)
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._value = _MISSING

    def invalidate(self) -> None:
        """Schedule a refresh. Must be called on the event loop."""
        self._requested += 1
        task = asyncio.get_running_loop().create_task(self._refresh(self._requested))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh(self, sequence: int) -> None:
        try:
            value = await self._fetch()
        except Exception as e:
            logger.error("live_query_failed", query=self.name, error=str(e))
            if self._subscriptions:
                self._emit_error(e)
            return

        if sequence <= self._delivered or not self._subscriptions:
            return
        self._delivered = sequence
        self._emit(value)


class DerivedLiveValue(Observable[T]):
    """
    Value computed from the latest values of several sources.

    The upstream subscriptions start when the first observer attaches and
    stop `stop_timeout` seconds after the last one leaves; an observer
    arriving during that grace period keeps the existing computation. Only
    results different from the current value are emitted. The last value
    stays readable after the upstream has stopped.
    """

    def __init__(
        self,
        sources: Sequence[Observable[Any]],
        combine: Callable[..., T],
        initial: T,
        stop_timeout: float = 5.0,
    ):
        super().__init__()
        if stop_timeout < 0:
            raise ValueError("stop_timeout cannot be negative")
        self._sources = list(sources)
        self._combine = combine
        self._value = initial
        self._stop_timeout = stop_timeout
        self._latest: list[Any] = []
        self._upstream: list[Subscription[Any]] = []
        self._stop_handle: Optional[asyncio.TimerHandle] = None

    @property
    def value(self) -> T:
        return self._value

    @property
    def running(self) -> bool:
        """True while upstream subscriptions are held."""
        return bool(self._upstream)

    def _on_active(self) -> None:
        if self._stop_handle is not None:
            self._stop_handle.cancel()
            self._stop_handle = None
        if self._upstream:
            return
        self._latest = [_MISSING] * len(self._sources)
        for index, source in enumerate(self._sources):
            self._upstream.append(
                source.subscribe(
                    lambda value, index=index: self._on_source_value(index, value),
                    self._emit_error,
                )
            )

    def _on_source_value(self, index: int, value: Any) -> None:
        self._latest[index] = value
        if any(item is _MISSING for item in self._latest):
            return
        result = self._combine(*self._latest)
        if result != self._value:
            self._emit(result)

    def _on_inactive(self) -> None:
        if self._stop_timeout == 0:
            self.stop()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to run the grace timer on
            self.stop()
            return
        self._stop_handle = loop.call_later(self._stop_timeout, self.stop)

    def stop(self) -> None:
        """Release the upstream subscriptions now."""
        if self._stop_handle is not None:
            self._stop_handle.cancel()
            self._stop_handle = None
        upstream, self._upstream = self._upstream, []
        for subscription in upstream:
            subscription.cancel()

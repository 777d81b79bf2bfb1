"""Shared helpers for driving asynchronous code from synchronous tests."""

import asyncio
import time


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Poll `predicate` on the running loop until it holds or `timeout` passes."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not reached within timeout")
        await asyncio.sleep(interval)


class Recorder:
    """Observer that keeps every value and error it receives."""

    def __init__(self):
        self.values = []
        self.errors = []

    def __call__(self, value):
        self.values.append(value)

    def error(self, error):
        self.errors.append(error)

    @property
    def latest(self):
        return self.values[-1]

    @property
    def count(self) -> int:
        return len(self.values)


class RecordingLogger:
    """Stand-in for a bound structlog logger."""

    def __init__(self):
        self.records = []

    def _record(self, level, event, **kwargs):
        self.records.append((level, event, kwargs))

    def debug(self, event, **kwargs):
        self._record("debug", event, **kwargs)

    def info(self, event, **kwargs):
        self._record("info", event, **kwargs)

    def warning(self, event, **kwargs):
        self._record("warning", event, **kwargs)

    def error(self, event, **kwargs):
        self._record("error", event, **kwargs)

    def events_of_type(self, event_type: str):
        return [
            (level, kwargs)
            for level, _event, kwargs in self.records
            if kwargs.get("event_type") == event_type
        ]


async def drop_table(store) -> None:
    """Break the database underneath a store to provoke storage faults."""
    db = store.database
    await db.run(lambda: db.connect().execute("DROP TABLE transactions"))

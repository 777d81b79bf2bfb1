"""Observable values shared by the store and the state layer."""

from finance_tracker.reactive.live import (
    DerivedLiveValue,
    InvalidationTracker,
    LiveQuery,
    LiveValue,
    MutableLiveValue,
    Observable,
    SnapshotStream,
    Subscription,
)

__all__ = [
    "DerivedLiveValue",
    "InvalidationTracker",
    "LiveQuery",
    "LiveValue",
    "MutableLiveValue",
    "Observable",
    "SnapshotStream",
    "Subscription",
]

"""
Host-side integration: collaborator interfaces, in-memory adapters and the
`PoolEngine` shell that moves tokens around the pure core.
"""

from .events import Event, LoggingEventSink, ManualClock, PoolEvent, RecordingEventSink, SystemClock
from .interfaces import Clock, EventSink, InMemoryPoolStore, Ledger, PoolStore
from .ledger import InMemoryLedger
from .pool_engine import PoolEngine, PoolEngineConfig

__all__ = [
    "Event",
    "LoggingEventSink",
    "ManualClock",
    "PoolEvent",
    "RecordingEventSink",
    "SystemClock",
    "Clock",
    "EventSink",
    "InMemoryPoolStore",
    "Ledger",
    "PoolStore",
    "InMemoryLedger",
    "PoolEngine",
    "PoolEngineConfig",
]

"""
Audit events, event sinks and clocks for the pool engine.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, List, Mapping, Optional

from .interfaces import Clock, EventSink


@unique
class Event(Enum):
    POOL_CREATED = "PoolCreated"
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    LIQUIDITY_LOCKED = "LiquidityLocked"
    SWAP = "Swap"
    FEE_DISTRIBUTED = "FeeDistributed"
    REWARDS_DEPOSITED = "RewardsDeposited"
    REWARDS_WITHDRAWN = "RewardsWithdrawn"
    ROYALTY_ADDRESS_UPDATED = "RoyaltyAddressUpdated"
    CONFIG_UPDATED = "ConfigUpdated"


@dataclass(frozen=True)
class PoolEvent:
    event: Event
    timestamp: int
    pool_id: Optional[str] = None
    data: Mapping[str, Any] = field(default_factory=dict)


class RecordingEventSink(EventSink):
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: List[PoolEvent] = []

    def emit(self, event: PoolEvent) -> None:
        self.events.append(event)

    def of(self, kind: Event) -> List[PoolEvent]:
        return [e for e in self.events if e.event is kind]


class LoggingEventSink(EventSink):
    """Writes each event as one INFO record to a named logger."""

    def __init__(self, logger_name: str = "sinkswap.events") -> None:
        self._logger = logging.getLogger(logger_name)

    def emit(self, event: PoolEvent) -> None:
        self._logger.info(
            "%s pool=%s ts=%d %s",
            event.event.value,
            event.pool_id,
            event.timestamp,
            " ".join(f"{k}={v}" for k, v in sorted(event.data.items())),
        )


class SystemClock(Clock):
    """Milliseconds since the epoch, clamped so it never goes backwards."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        ts = time.time_ns() // 1_000_000
        if ts < self._last:
            ts = self._last
        self._last = ts
        return ts


class ManualClock(Clock):
    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start must be non-negative")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, delta: int) -> None:
        if delta < 0:
            raise ValueError("clock cannot move backwards")
        self._now += delta

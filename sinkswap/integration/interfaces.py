"""
Collaborator interfaces consumed by the pool engine.

The engine never holds tokens itself: custody is delegated to a `Ledger`,
pool records to a `PoolStore`, timestamps to a `Clock` and audit records to
an `EventSink`. The caller's address is passed explicitly to every engine
operation.
"""

from __future__ import annotations

from typing import Dict, List

from ..errors import PoolNotFound
from ..state.balances import Address, Amount, TokenKind
from ..state.pools import PoolState


class Ledger:
    """Token and LP custody."""

    def balance(self, owner: Address, kind: TokenKind) -> Amount:
        raise NotImplementedError

    def transfer(self, kind: TokenKind, src: Address, dst: Address, amount: Amount) -> None:
        """Move `amount` of `kind`; raises InsufficientFunds if `src` cannot cover it."""
        raise NotImplementedError

    def lp_balance(self, owner: Address, pool_id: str) -> Amount:
        raise NotImplementedError

    def mint_lp(self, owner: Address, pool_id: str, amount: Amount) -> None:
        raise NotImplementedError

    def burn_lp(self, owner: Address, pool_id: str, amount: Amount) -> None:
        raise NotImplementedError

    def transfer_lp(self, pool_id: str, src: Address, dst: Address, amount: Amount) -> None:
        raise NotImplementedError


class PoolStore:
    """Persistence for pool records, keyed by pool id."""

    def get(self, pool_id: str) -> PoolState:
        raise NotImplementedError

    def put(self, pool: PoolState) -> None:
        raise NotImplementedError

    def ids(self) -> List[str]:
        raise NotImplementedError


class Clock:
    """Monotonically non-decreasing timestamps (telemetry only)."""

    def now(self) -> int:
        raise NotImplementedError


class EventSink:
    """Fire-and-forget audit sink."""

    def emit(self, event) -> None:
        raise NotImplementedError


class InMemoryPoolStore(PoolStore):
    def __init__(self) -> None:
        self._pools: Dict[str, PoolState] = {}

    def get(self, pool_id: str) -> PoolState:
        pool = self._pools.get(pool_id)
        if pool is None:
            raise PoolNotFound(f"unknown pool: {pool_id}")
        return pool

    def put(self, pool: PoolState) -> None:
        self._pools[pool.pool_id] = pool

    def ids(self) -> List[str]:
        return sorted(self._pools)

    def __repr__(self) -> str:
        return f"InMemoryPoolStore({len(self._pools)} pools)"

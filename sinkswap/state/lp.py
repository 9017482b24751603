"""
LP unit balances, scoped per pool.

Holder balances plus `PoolState.locked_lp` add up to `PoolState.lp_supply`;
locked units are held under the pool's own address.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .balances import Address, Amount

PoolId = str


class LPTable:
    """(owner, pool_id) -> LP units. Zero entries are dropped."""

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, PoolId], Amount] = {}

    def get(self, owner: Address, pool_id: PoolId) -> Amount:
        return self._balances.get((owner, pool_id), 0)

    def add(self, owner: Address, pool_id: PoolId, delta: int) -> None:
        current = self.get(owner, pool_id)
        updated = current + delta
        if updated < 0:
            raise ValueError(f"Insufficient LP balance: {owner} holds {current} of {pool_id}, delta {delta}")
        if updated:
            self._balances[(owner, pool_id)] = updated
        else:
            self._balances.pop((owner, pool_id), None)

    def subtract(self, owner: Address, pool_id: PoolId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(owner, pool_id, -delta)

    def get_all_balances(self) -> Dict[Tuple[Address, PoolId], Amount]:
        return dict(self._balances)

    def total_for_pool(self, pool_id: PoolId) -> Amount:
        """LP units held by all owners of one pool."""
        return sum(amount for (_, pid), amount in self._balances.items() if pid == pool_id)

    def __repr__(self) -> str:
        return f"LPTable({len(self._balances)} entries)"

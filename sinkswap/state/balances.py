"""
Per-owner token balances for the in-memory ledger.

Pool reserves and fee sinks live on `PoolState`; the ledger mirrors them under
the pool's own address.
"""

from typing import Dict, Tuple


Address = str  # account or pool address
TokenKind = str  # stable token-kind identifier
Amount = int  # non-negative; u64 at the pool boundary


class BalanceTable:
    """
    (owner, kind) -> amount. Zero entries are dropped.

    Iteration order is insertion order; sort explicitly where order matters.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Address, TokenKind], Amount] = {}

    def get(self, owner: Address, kind: TokenKind) -> Amount:
        return self._balances.get((owner, kind), 0)

    def set(self, owner: Address, kind: TokenKind, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        key = (owner, kind)
        if amount:
            self._balances[key] = amount
        else:
            self._balances.pop(key, None)

    def add(self, owner: Address, kind: TokenKind, delta: Amount) -> None:
        """Apply a signed delta; the result must stay non-negative."""
        current = self.get(owner, kind)
        if current + delta < 0:
            raise ValueError(f"Insufficient balance: {owner} holds {current} {kind}, delta {delta}")
        self.set(owner, kind, current + delta)

    def subtract(self, owner: Address, kind: TokenKind, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(owner, kind, -delta)

    def get_all_balances(self) -> Dict[Tuple[Address, TokenKind], Amount]:
        return dict(self._balances)

    def total_supply(self, kind: TokenKind) -> Amount:
        """Sum of all balances of one token kind."""
        return sum(amount for (_, k), amount in self._balances.items() if k == kind)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"

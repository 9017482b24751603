"""
In-memory ledger built on the balance and LP tables.

Every debit is checked before any table is touched, so a failed transfer
leaves both tables unchanged.
"""

from __future__ import annotations

from ..errors import InsufficientFunds, ZeroInput
from ..state.balances import Address, Amount, BalanceTable, TokenKind
from ..state.lp import LPTable
from .interfaces import Ledger


def _require_amount(amount: Amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")


class InMemoryLedger(Ledger):
    def __init__(self) -> None:
        self.balances = BalanceTable()
        self.lp_balances = LPTable()

    def mint(self, owner: Address, kind: TokenKind, amount: Amount) -> None:
        """Credit fresh tokens (test and bootstrap helper)."""
        _require_amount(amount)
        if amount == 0:
            raise ZeroInput("mint amount must be positive")
        self.balances.add(owner, kind, amount)

    def balance(self, owner: Address, kind: TokenKind) -> Amount:
        return self.balances.get(owner, kind)

    def transfer(self, kind: TokenKind, src: Address, dst: Address, amount: Amount) -> None:
        _require_amount(amount)
        if amount == 0:
            return
        available = self.balances.get(src, kind)
        if available < amount:
            raise InsufficientFunds(f"{src} holds {available} {kind}, needs {amount}")
        self.balances.subtract(src, kind, amount)
        self.balances.add(dst, kind, amount)

    def lp_balance(self, owner: Address, pool_id: str) -> Amount:
        return self.lp_balances.get(owner, pool_id)

    def mint_lp(self, owner: Address, pool_id: str, amount: Amount) -> None:
        _require_amount(amount)
        self.lp_balances.add(owner, pool_id, amount)

    def burn_lp(self, owner: Address, pool_id: str, amount: Amount) -> None:
        _require_amount(amount)
        available = self.lp_balances.get(owner, pool_id)
        if available < amount:
            raise InsufficientFunds(f"{owner} holds {available} LP of {pool_id}, needs {amount}")
        self.lp_balances.subtract(owner, pool_id, amount)

    def transfer_lp(self, pool_id: str, src: Address, dst: Address, amount: Amount) -> None:
        _require_amount(amount)
        if amount == 0:
            return
        self.burn_lp(src, pool_id, amount)
        self.lp_balances.add(dst, pool_id, amount)

    def __repr__(self) -> str:
        return f"InMemoryLedger({self.balances!r}, {self.lp_balances!r})"

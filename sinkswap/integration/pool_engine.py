"""
Pool engine: imperative shell around the functional core.

Each public method is one serialized operation on one pool:
1. load the pool from the store,
2. compute the new pool state and itemized amounts with the pure core,
3. check every debit against the ledger,
4. move tokens, commit the new state and emit audit events.

Any failure in steps 1-3 raises before the ledger or store is touched.
Tokens owned by a pool (reserves and every fee sink) are held in the ledger
under the pool's own address, which is its pool id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ..core import config as config_ops
from ..core.config import ProtocolConfig, SweepThresholds
from ..core import fees as fee_ops
from ..core import liquidity as liquidity_ops
from ..core import swap as swap_ops
from ..core.fees import SINK_BURN, SINK_PROTOCOL, SINK_ROYALTY, SweepResult
from ..errors import InsufficientFunds
from ..kernels.lp_math import BurnLiquidityResult, MintLiquidityResult
from ..kernels.swap_math import SwapBreakdown
from ..state.balances import Address, Amount, TokenKind
from ..state.canonical import require_canonical_pair
from ..state.pools import PoolFeeRates, PoolState
from ..state.registry import PoolRegistry
from .events import Event, PoolEvent, SystemClock
from .interfaces import Clock, EventSink, InMemoryPoolStore, Ledger, PoolStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolEngineConfig:
    thresholds: SweepThresholds = SweepThresholds()
    # Run the sweep hook after every swap.
    auto_sweep: bool = True


class _NullEventSink(EventSink):
    def emit(self, event: PoolEvent) -> None:
        return None


class PoolEngine:
    def __init__(
        self,
        config: ProtocolConfig,
        ledger: Ledger,
        *,
        store: Optional[PoolStore] = None,
        registry: Optional[PoolRegistry] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventSink] = None,
        engine_config: PoolEngineConfig = PoolEngineConfig(),
    ) -> None:
        self.config = config
        self.ledger = ledger
        self.store = store if store is not None else InMemoryPoolStore()
        self.registry = registry if registry is not None else PoolRegistry()
        self.clock = clock if clock is not None else SystemClock()
        self.events = events if events is not None else _NullEventSink()
        self.engine_config = engine_config

    # -- helpers ---------------------------------------------------------------

    def _emit(self, kind: Event, pool_id: Optional[str], **data: Any) -> None:
        self.events.emit(PoolEvent(event=kind, timestamp=self.clock.now(), pool_id=pool_id, data=data))

    def _require_funds(self, owner: Address, debits: Iterable[Tuple[TokenKind, Amount]]) -> None:
        needed: dict = {}
        for kind, amount in debits:
            needed[kind] = needed.get(kind, 0) + amount
        for kind, amount in needed.items():
            available = self.ledger.balance(owner, kind)
            if available < amount:
                raise InsufficientFunds(f"{owner} holds {available} {kind}, needs {amount}")

    def _require_lp(self, owner: Address, pool_id: str, amount: Amount) -> None:
        available = self.ledger.lp_balance(owner, pool_id)
        if available < amount:
            raise InsufficientFunds(f"{owner} holds {available} LP of {pool_id}, needs {amount}")

    def _distribute(self, pool: PoolState, results: List[SweepResult]) -> None:
        for res in results:
            if res.skipped:
                logger.debug("sweep skipped pool=%s sink=%s", pool.pool_id, res.sink)
                continue
            if res.sink in (SINK_PROTOCOL, SINK_ROYALTY):
                self.ledger.transfer(pool.kind_a, pool.pool_id, res.recipient, res.swept)
            elif res.sink != SINK_BURN:
                raise AssertionError(f"unknown sink: {res.sink}")
            # Burn conversions stay in pool custody: A moves to the reserve, B to the burn bucket.
            logger.info("fee distributed pool=%s sink=%s swept=%d", pool.pool_id, res.sink, res.swept)
            self._emit(
                Event.FEE_DISTRIBUTED,
                pool.pool_id,
                sink=res.sink,
                amount=res.swept,
                recipient=res.recipient,
                burned_b=res.burned_b,
                protocol_fee=res.protocol_fee,
            )

    def _commit_swap(
        self,
        caller: Address,
        pool: PoolState,
        new_pool: PoolState,
        kind_in: TokenKind,
        breakdown: SwapBreakdown,
    ) -> None:
        kind_out = pool.kind_b if pool.is_a(kind_in) else pool.kind_a
        self._require_funds(caller, [(kind_in, breakdown.amount_in)])

        results: List[SweepResult] = []
        if self.engine_config.auto_sweep:
            new_pool, results = fee_ops.sweep_all(new_pool, self.config, self.engine_config.thresholds)

        self.ledger.transfer(kind_in, caller, pool.pool_id, breakdown.amount_in)
        self.ledger.transfer(kind_out, pool.pool_id, caller, breakdown.amount_out)
        self.store.put(new_pool)

        logger.info(
            "swap pool=%s in=%d %s out=%d %s",
            pool.pool_id,
            breakdown.amount_in,
            kind_in,
            breakdown.amount_out,
            kind_out,
        )
        self._emit(
            Event.SWAP,
            pool.pool_id,
            sender=caller,
            kind_in=kind_in,
            kind_out=kind_out,
            amount_in=breakdown.amount_in,
            amount_out=breakdown.amount_out,
            builder_fee_in=breakdown.builder_fee_in,
            builder_fee_out=breakdown.builder_fee_out,
            protocol_fee=breakdown.protocol_fee,
            burn_fee=breakdown.burn_fee,
            royalty_fee=breakdown.royalty_fee,
            rewards_fee=breakdown.rewards_fee,
            reserve_a=new_pool.reserve_a,
            reserve_b=new_pool.reserve_b,
        )
        self._distribute(new_pool, results)

    # -- queries ---------------------------------------------------------------

    def pool(self, pool_id: str) -> PoolState:
        return self.store.get(pool_id)

    def pool_id_for(self, kind_a: TokenKind, kind_b: TokenKind) -> Optional[str]:
        return self.registry.lookup(kind_a, kind_b)

    def quote_exact_in(self, pool_id: str, kind_in: TokenKind, amount_in: Amount) -> SwapBreakdown:
        breakdown = swap_ops.quote_exact_in(self.store.get(pool_id), self.config, kind_in, amount_in)
        logger.debug("quote exact-in pool=%s in=%d out=%d", pool_id, amount_in, breakdown.amount_out)
        return breakdown

    def quote_exact_out(self, pool_id: str, kind_in: TokenKind, amount_out: Amount) -> SwapBreakdown:
        breakdown = swap_ops.quote_exact_out(self.store.get(pool_id), self.config, kind_in, amount_out)
        logger.debug("quote exact-out pool=%s out=%d in=%d", pool_id, amount_out, breakdown.amount_in)
        return breakdown

    def custody_matches(self, pool_id: str) -> bool:
        """True iff the ledger holds exactly the pool's reserves plus its fee sinks."""
        pool = self.store.get(pool_id)
        expected_a = (
            pool.reserve_a
            + pool.protocol_fee_balance
            + pool.burn_balance
            + pool.royalty_balance
            + pool.rewards_balance
        )
        expected_b = pool.reserve_b + pool.burned_b_balance
        return (
            self.ledger.balance(pool_id, pool.kind_a) == expected_a
            and self.ledger.balance(pool_id, pool.kind_b) == expected_b
            and self.ledger.lp_balance(pool_id, pool_id) == pool.locked_lp
        )

    # -- pool lifecycle --------------------------------------------------------

    def create_pool(
        self,
        caller: Address,
        kind_a: TokenKind,
        kind_b: TokenKind,
        amount_a: Amount,
        amount_b: Amount,
        fee_rates: PoolFeeRates = PoolFeeRates(),
        royalty_address: Optional[Address] = None,
    ) -> Tuple[PoolState, Amount]:
        """
        Create and seed a pool; the seed LP goes to `caller`.

        The registry insert is the last step of the pure create, so the funds
        check has to come first.
        """
        require_canonical_pair(kind_a, kind_b)
        self._require_funds(caller, [(kind_a, amount_a), (kind_b, amount_b)])
        pool, lp_minted = liquidity_ops.create_pool(
            kind_a,
            kind_b,
            amount_a,
            amount_b,
            fee_rates,
            royalty_address if royalty_address is not None else caller,
            self.clock.now(),
            registry=self.registry,
        )

        self.ledger.transfer(kind_a, caller, pool.pool_id, amount_a)
        self.ledger.transfer(kind_b, caller, pool.pool_id, amount_b)
        self.ledger.mint_lp(caller, pool.pool_id, lp_minted)
        self.store.put(pool)

        logger.info("pool created pool=%s kinds=(%s, %s) lp=%d", pool.pool_id, kind_a, kind_b, lp_minted)
        self._emit(
            Event.POOL_CREATED,
            pool.pool_id,
            creator=caller,
            kind_a=kind_a,
            kind_b=kind_b,
            amount_a=amount_a,
            amount_b=amount_b,
            lp_minted=lp_minted,
            builder_fee_bp=fee_rates.builder_fee_bp,
            burn_fee_bp=fee_rates.burn_fee_bp,
            royalty_fee_bp=fee_rates.royalty_fee_bp,
            rewards_fee_bp=fee_rates.rewards_fee_bp,
        )
        return pool, lp_minted

    # -- liquidity -------------------------------------------------------------

    def add_liquidity(
        self,
        caller: Address,
        pool_id: str,
        amount_a: Amount,
        amount_b: Amount,
        min_lp_out: Amount = 1,
    ) -> MintLiquidityResult:
        """
        Deposit at the pool ratio; only the used amounts leave the caller.

        A deposit too small to mint any LP is rejected unless the caller
        passes `min_lp_out=0`.
        """
        pool = self.store.get(pool_id)
        new_pool, mint = liquidity_ops.add_liquidity(pool, amount_a, amount_b, min_lp_out)
        self._require_funds(caller, [(pool.kind_a, mint.amount_a_used), (pool.kind_b, mint.amount_b_used)])

        self.ledger.transfer(pool.kind_a, caller, pool_id, mint.amount_a_used)
        self.ledger.transfer(pool.kind_b, caller, pool_id, mint.amount_b_used)
        self.ledger.mint_lp(caller, pool_id, mint.lp_minted)
        self.store.put(new_pool)

        logger.info("liquidity added pool=%s lp=%d", pool_id, mint.lp_minted)
        self._emit(
            Event.LIQUIDITY_ADDED,
            pool_id,
            provider=caller,
            amount_a=mint.amount_a_used,
            amount_b=mint.amount_b_used,
            lp_minted=mint.lp_minted,
        )
        return mint

    def remove_liquidity(
        self,
        caller: Address,
        pool_id: str,
        lp_amount: Amount,
        min_amount_a: Amount = 0,
        min_amount_b: Amount = 0,
    ) -> BurnLiquidityResult:
        pool = self.store.get(pool_id)
        new_pool, burn = liquidity_ops.remove_liquidity(pool, lp_amount, min_amount_a, min_amount_b)
        self._require_lp(caller, pool_id, lp_amount)

        self.ledger.burn_lp(caller, pool_id, lp_amount)
        self.ledger.transfer(pool.kind_a, pool_id, caller, burn.amount_a_out)
        self.ledger.transfer(pool.kind_b, pool_id, caller, burn.amount_b_out)
        self.store.put(new_pool)

        logger.info("liquidity removed pool=%s lp=%d", pool_id, lp_amount)
        self._emit(
            Event.LIQUIDITY_REMOVED,
            pool_id,
            provider=caller,
            lp_burned=lp_amount,
            amount_a=burn.amount_a_out,
            amount_b=burn.amount_b_out,
        )
        return burn

    def lock_liquidity(self, caller: Address, pool_id: str, lp_amount: Amount) -> PoolState:
        """Hand LP units to the pool's lock; they can never be redeemed."""
        pool = self.store.get(pool_id)
        new_pool = liquidity_ops.lock_liquidity(pool, lp_amount)
        self._require_lp(caller, pool_id, lp_amount)

        self.ledger.transfer_lp(pool_id, caller, pool_id, lp_amount)
        self.store.put(new_pool)

        self._emit(Event.LIQUIDITY_LOCKED, pool_id, owner=caller, lp_locked=lp_amount, locked_total=new_pool.locked_lp)
        return new_pool

    # -- swaps -----------------------------------------------------------------

    def swap_exact_in(
        self,
        caller: Address,
        pool_id: str,
        kind_in: TokenKind,
        amount_in: Amount,
        min_amount_out: Amount = 0,
    ) -> SwapBreakdown:
        pool = self.store.get(pool_id)
        new_pool, breakdown = swap_ops.swap_exact_in(pool, self.config, kind_in, amount_in, min_amount_out)
        self._commit_swap(caller, pool, new_pool, kind_in, breakdown)
        return breakdown

    def swap_exact_out(
        self,
        caller: Address,
        pool_id: str,
        kind_in: TokenKind,
        amount_out: Amount,
        max_amount_in: Amount,
    ) -> SwapBreakdown:
        pool = self.store.get(pool_id)
        new_pool, breakdown = swap_ops.swap_exact_out(pool, self.config, kind_in, amount_out, max_amount_in)
        self._commit_swap(caller, pool, new_pool, kind_in, breakdown)
        return breakdown

    # -- fees ------------------------------------------------------------------

    def sweep(self, pool_id: str) -> List[SweepResult]:
        """Run the sweep hook explicitly (e.g. when `auto_sweep` is off)."""
        pool = self.store.get(pool_id)
        new_pool, results = fee_ops.sweep_all(pool, self.config, self.engine_config.thresholds)
        self.store.put(new_pool)
        self._distribute(new_pool, results)
        return results

    def deposit_rewards(self, caller: Address, pool_id: str, amount: Amount) -> PoolState:
        pool = self.store.get(pool_id)
        new_pool = fee_ops.deposit_rewards(pool, self.config, caller, amount)
        self._require_funds(caller, [(pool.kind_a, amount)])

        self.ledger.transfer(pool.kind_a, caller, pool_id, amount)
        self.store.put(new_pool)
        self._emit(Event.REWARDS_DEPOSITED, pool_id, sender=caller, amount=amount, balance=new_pool.rewards_balance)
        return new_pool

    def withdraw_rewards(self, caller: Address, pool_id: str, amount: Amount) -> PoolState:
        """Withdraw from the rewards sink to the caller (the rewards manager)."""
        pool = self.store.get(pool_id)
        new_pool = fee_ops.withdraw_rewards(pool, self.config, caller, amount)

        self.ledger.transfer(pool.kind_a, pool_id, caller, amount)
        self.store.put(new_pool)
        self._emit(Event.REWARDS_WITHDRAWN, pool_id, recipient=caller, amount=amount, balance=new_pool.rewards_balance)
        return new_pool

    # -- administration --------------------------------------------------------

    def set_royalty_address(self, caller: Address, pool_id: str, new_address: Address) -> PoolState:
        new_pool = liquidity_ops.set_royalty_address(self.store.get(pool_id), caller, new_address)
        self.store.put(new_pool)
        self._emit(Event.ROYALTY_ADDRESS_UPDATED, pool_id, royalty_address=new_address)
        return new_pool

    def _update_config(self, new_config: ProtocolConfig, changes: Mapping[str, Any]) -> ProtocolConfig:
        self.config = new_config
        logger.info("config updated %s", dict(changes))
        self._emit(Event.CONFIG_UPDATED, None, **changes)
        return new_config

    def set_swap_fee(self, caller: Address, swap_fee_bp: int) -> ProtocolConfig:
        new_config = config_ops.set_swap_fee(self.config, caller, swap_fee_bp)
        return self._update_config(new_config, {"swap_fee_bp": swap_fee_bp})

    def set_protocol_fee_address(self, caller: Address, address: Address) -> ProtocolConfig:
        new_config = config_ops.set_protocol_fee_address(self.config, caller, address)
        return self._update_config(new_config, {"protocol_fee_address": address})

    def set_rewards_manager(self, caller: Address, address: Address) -> ProtocolConfig:
        new_config = config_ops.set_rewards_manager(self.config, caller, address)
        return self._update_config(new_config, {"rewards_manager": address})

    def set_admin(self, caller: Address, new_admin: Address) -> ProtocolConfig:
        new_config = config_ops.set_admin(self.config, caller, new_admin)
        return self._update_config(new_config, {"admin": new_admin})

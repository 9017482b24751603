"""
Fee distribution: threshold-gated sweeps and rewards accounting.

Sweeps are meant to be called by the host after every swap (`sweep_all`).
A sink at or above its threshold is drained in full; below the threshold the
sweep is a no-op, not an error. Calling a sweep twice in a row is therefore
idempotent.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..errors import InsufficientFunds, ZeroInput
from ..kernels.fixed_point import checked_add, checked_sub, require_u64
from ..kernels.swap_math import swap_out_b
from ..state.balances import Address, Amount
from ..state.pools import PoolState
from .config import (
    BURN_SWEEP_THRESHOLD,
    PROTOCOL_SWEEP_THRESHOLD,
    ROYALTY_SWEEP_THRESHOLD,
    ProtocolConfig,
    SweepThresholds,
    require_rewards_manager,
)


SINK_PROTOCOL = "protocol"
SINK_BURN = "burn"
SINK_ROYALTY = "royalty"


@dataclass(frozen=True)
class SweepResult:
    """
    Outcome of one sweep.

    `swept` is the token A amount removed from the sink (0 when skipped).
    For the burn sink, `burned_b` is the token B moved into the permanent burn
    accumulator and `protocol_fee` the conversion fee credited to the protocol sink.
    """

    sink: str
    swept: Amount
    recipient: Optional[Address] = None
    burned_b: Amount = 0
    protocol_fee: Amount = 0

    @property
    def skipped(self) -> bool:
        return self.swept == 0


def sweep_protocol_fees(
    pool: PoolState,
    config: ProtocolConfig,
    threshold: int = PROTOCOL_SWEEP_THRESHOLD,
) -> Tuple[PoolState, SweepResult]:
    """Pay the whole protocol sink to `config.protocol_fee_address` once it reaches `threshold`."""
    balance = pool.protocol_fee_balance
    if balance == 0 or balance < threshold:
        return pool, SweepResult(sink=SINK_PROTOCOL, swept=0, recipient=config.protocol_fee_address)
    return (
        replace(pool, protocol_fee_balance=0),
        SweepResult(sink=SINK_PROTOCOL, swept=balance, recipient=config.protocol_fee_address),
    )


def sweep_royalty(
    pool: PoolState,
    threshold: int = ROYALTY_SWEEP_THRESHOLD,
) -> Tuple[PoolState, SweepResult]:
    """Pay the whole royalty sink to `pool.royalty_address` once it reaches `threshold`."""
    balance = pool.royalty_balance
    if balance == 0 or balance < threshold:
        return pool, SweepResult(sink=SINK_ROYALTY, swept=0, recipient=pool.royalty_address)
    return (
        replace(pool, royalty_balance=0),
        SweepResult(sink=SINK_ROYALTY, swept=balance, recipient=pool.royalty_address),
    )


def sweep_burn(
    pool: PoolState,
    config: ProtocolConfig,
    threshold: int = BURN_SWEEP_THRESHOLD,
) -> Tuple[PoolState, SweepResult]:
    """
    Buy-and-burn: convert the whole burn sink from A to B through the pool.

    The conversion is priced with the forward A->B kernel charging only the
    protocol swap fee. The fee is credited to the protocol sink, the rest of
    the A joins reserve A, and the B output leaves reserve B into
    `burned_b_balance`, which is never swept.

    A pool with an empty reserve has no price to convert at; the sweep is
    skipped and the burn sink waits for liquidity to return.
    """
    balance = pool.burn_balance
    if balance == 0 or balance < threshold:
        return pool, SweepResult(sink=SINK_BURN, swept=0)
    if pool.reserve_a == 0 or pool.reserve_b == 0:
        return pool, SweepResult(sink=SINK_BURN, swept=0)

    conversion = swap_out_b(
        amount_in=balance,
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        swap_fee_bp=config.swap_fee_bp,
        builder_fee_bp=0,
        burn_fee_bp=0,
        royalty_fee_bp=0,
        rewards_fee_bp=0,
    )
    if conversion.adjusted_in + conversion.protocol_fee != balance:
        raise AssertionError("burn conversion does not reconcile with the burn balance")

    new_pool = replace(
        pool,
        burn_balance=0,
        reserve_a=checked_add(pool.reserve_a, conversion.adjusted_in),
        reserve_b=checked_sub(pool.reserve_b, conversion.amount_out),
        protocol_fee_balance=checked_add(pool.protocol_fee_balance, conversion.protocol_fee),
        burned_b_balance=checked_add(pool.burned_b_balance, conversion.amount_out),
    )
    return new_pool, SweepResult(
        sink=SINK_BURN,
        swept=balance,
        burned_b=conversion.amount_out,
        protocol_fee=conversion.protocol_fee,
    )


def sweep_all(
    pool: PoolState,
    config: ProtocolConfig,
    thresholds: SweepThresholds = SweepThresholds(),
) -> Tuple[PoolState, List[SweepResult]]:
    """
    Post-swap hook: burn, then protocol, then royalty.

    The burn sweep runs first because its conversion fee feeds the protocol sink.
    """
    results: List[SweepResult] = []
    pool, res = sweep_burn(pool, config, thresholds.burn)
    results.append(res)
    pool, res = sweep_protocol_fees(pool, config, thresholds.protocol)
    results.append(res)
    pool, res = sweep_royalty(pool, thresholds.royalty)
    results.append(res)
    return pool, results


def deposit_rewards(pool: PoolState, config: ProtocolConfig, caller: Address, amount: Amount) -> PoolState:
    """Add token A to the rewards sink (rewards manager only)."""
    require_rewards_manager(config, caller)
    require_u64("amount", amount)
    if amount == 0:
        raise ZeroInput("rewards deposit must be positive")
    return replace(pool, rewards_balance=checked_add(pool.rewards_balance, amount))


def withdraw_rewards(pool: PoolState, config: ProtocolConfig, caller: Address, amount: Amount) -> PoolState:
    """Remove token A from the rewards sink (rewards manager only)."""
    require_rewards_manager(config, caller)
    require_u64("amount", amount)
    if amount == 0:
        raise ZeroInput("rewards withdrawal must be positive")
    if amount > pool.rewards_balance:
        raise InsufficientFunds(
            f"rewards withdrawal ({amount}) exceeds rewards balance ({pool.rewards_balance})"
        )
    return replace(pool, rewards_balance=pool.rewards_balance - amount)

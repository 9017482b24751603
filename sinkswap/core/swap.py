"""
Pool-level swaps.

Quotes are computed by the pure pricing kernel; `apply_swap` turns an itemized
breakdown into the post-swap pool. Nothing is applied until every fee amount
is known, so a failing swap leaves the pool untouched.

Where the tokens go:
- selling A: `adjusted_in + builder_fee_in` joins reserve A, the sink fees go
  to their accumulators, `amount_out` leaves reserve B (`builder_fee_out` stays);
- selling B: the whole input joins reserve B; `amount_out` and the sink fees
  leave reserve A (`builder_fee_out` stays).

Invariant: reserve_a' * reserve_b' >= reserve_a * reserve_b.
"""

from dataclasses import replace
from typing import Dict, Tuple

from ..errors import ExcessiveSlippage
from ..kernels.fixed_point import checked_add, checked_sub
from ..kernels.swap_math import SwapBreakdown, swap_in_a, swap_in_b, swap_out_a, swap_out_b
from ..state.balances import Amount, TokenKind
from ..state.pools import PoolState
from .config import ProtocolConfig


def kernel_rates(pool: PoolState, config: ProtocolConfig) -> Dict[str, int]:
    """Fee-rate keyword arguments for the pricing kernel."""
    rates = pool.fee_rates
    return {
        "swap_fee_bp": config.swap_fee_bp,
        "builder_fee_bp": rates.builder_fee_bp,
        "burn_fee_bp": rates.burn_fee_bp,
        "royalty_fee_bp": rates.royalty_fee_bp,
        "rewards_fee_bp": rates.rewards_fee_bp,
    }


def quote_exact_in(
    pool: PoolState,
    config: ProtocolConfig,
    kind_in: TokenKind,
    amount_in: Amount,
) -> SwapBreakdown:
    """Breakdown for selling exactly `amount_in` of `kind_in`."""
    kernel = swap_out_b if pool.is_a(kind_in) else swap_out_a
    return kernel(
        amount_in=amount_in,
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        **kernel_rates(pool, config),
    )


def quote_exact_out(
    pool: PoolState,
    config: ProtocolConfig,
    kind_in: TokenKind,
    amount_out: Amount,
) -> SwapBreakdown:
    """Breakdown for buying at least `amount_out` of the other token with `kind_in`."""
    kernel = swap_in_a if pool.is_a(kind_in) else swap_in_b
    return kernel(
        amount_out=amount_out,
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        **kernel_rates(pool, config),
    )


def apply_swap(pool: PoolState, breakdown: SwapBreakdown, *, a_to_b: bool) -> PoolState:
    """Post-swap pool for a breakdown computed against `pool`."""
    b = breakdown
    if a_to_b:
        if b.amount_in != b.adjusted_in + b.builder_fee_in + b.sink_fees:
            raise AssertionError("input does not reconcile with fees")
        if b.raw_out != b.amount_out + b.builder_fee_out:
            raise AssertionError("output does not reconcile with fees")
        reserve_a = checked_add(pool.reserve_a, b.adjusted_in + b.builder_fee_in)
        reserve_b = checked_sub(pool.reserve_b, b.amount_out)
    else:
        if b.amount_in != b.adjusted_in + b.builder_fee_in:
            raise AssertionError("input does not reconcile with fees")
        if b.raw_out != b.amount_out + b.builder_fee_out + b.sink_fees:
            raise AssertionError("output does not reconcile with fees")
        reserve_a = checked_sub(pool.reserve_a, b.amount_out + b.sink_fees)
        reserve_b = checked_add(pool.reserve_b, b.amount_in)

    if reserve_a * reserve_b < pool.get_constant_product():
        raise AssertionError(
            f"Invariant violation: new_k ({reserve_a * reserve_b}) < old_k ({pool.get_constant_product()})"
        )

    return replace(
        pool,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        protocol_fee_balance=checked_add(pool.protocol_fee_balance, b.protocol_fee),
        burn_balance=checked_add(pool.burn_balance, b.burn_fee),
        royalty_balance=checked_add(pool.royalty_balance, b.royalty_fee),
        rewards_balance=checked_add(pool.rewards_balance, b.rewards_fee),
    )


def swap_exact_in(
    pool: PoolState,
    config: ProtocolConfig,
    kind_in: TokenKind,
    amount_in: Amount,
    min_amount_out: Amount = 0,
) -> Tuple[PoolState, SwapBreakdown]:
    """
    Sell exactly `amount_in` of `kind_in`.

    Raises:
        ExcessiveSlippage: if the output is below `min_amount_out`
    """
    breakdown = quote_exact_in(pool, config, kind_in, amount_in)
    if breakdown.amount_out < min_amount_out:
        raise ExcessiveSlippage(
            f"amount_out ({breakdown.amount_out}) < min_amount_out ({min_amount_out})"
        )
    return apply_swap(pool, breakdown, a_to_b=pool.is_a(kind_in)), breakdown


def swap_exact_out(
    pool: PoolState,
    config: ProtocolConfig,
    kind_in: TokenKind,
    amount_out: Amount,
    max_amount_in: Amount,
) -> Tuple[PoolState, SwapBreakdown]:
    """
    Buy `amount_out` of the other token, paying with `kind_in`.

    The swap executes at the quoted input, so the trader receives at least
    `amount_out` (rounding surplus included).

    Raises:
        ExcessiveSlippage: if the required input exceeds `max_amount_in`
    """
    breakdown = quote_exact_out(pool, config, kind_in, amount_out)
    if breakdown.amount_in > max_amount_in:
        raise ExcessiveSlippage(
            f"amount_in ({breakdown.amount_in}) > max_amount_in ({max_amount_in})"
        )
    return apply_swap(pool, breakdown, a_to_b=pool.is_a(kind_in)), breakdown

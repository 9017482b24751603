"""
Multi-sink swap pricing kernel.

Semantics:
- Constant-product pricing on a fee-adjusted amount (Uniswap-v2 style).
- Every fee is extracted with ceil rounding, so the pool is never under-paid.
- The builder fee is split: half is charged on the input token, half on the output.
- Protocol, burn, royalty and rewards fees are always denominated in token A:
  selling A pays them from the input, selling B pays them from the raw A output.

The two forward directions are written out separately because the fee placement
is asymmetric. The reverse (exact-out) functions gross the requested amount up
through the same fee steps and then verify the result by running the forward
kernel, so `forward(reverse(x)) >= x` always holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..errors import InsufficientLiquidity, InvalidFeeRate, MathError, NoLiquidity, ZeroInput
from .fixed_point import ceil_mul_div, checked_add, checked_sub, mul_div, require_u64


BPS_DENOM = 10_000
HALF_BPS_DENOM = 2 * BPS_DENOM


@dataclass(frozen=True)
class SwapBreakdown:
    """
    Itemized result of one swap computation.

    `amount_in` is what the trader supplies and `amount_out` what they receive.
    `adjusted_in` is the amount priced against the curve and `raw_out` the curve
    output before output-side fees.
    """

    amount_in: int
    amount_out: int
    adjusted_in: int
    raw_out: int
    builder_fee_in: int
    builder_fee_out: int
    protocol_fee: int
    burn_fee: int
    royalty_fee: int
    rewards_fee: int

    @property
    def sink_fees(self) -> int:
        """Fees routed to accumulators outside the reserves (all in token A)."""
        return self.protocol_fee + self.burn_fee + self.royalty_fee + self.rewards_fee


def _check_rate(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if not (0 <= value <= BPS_DENOM):
        raise InvalidFeeRate(f"{name} must be in [0, {BPS_DENOM}]: {value}")


def _check_rates(
    swap_fee_bp: int,
    builder_fee_bp: int,
    burn_fee_bp: int,
    royalty_fee_bp: int,
    rewards_fee_bp: int,
) -> None:
    for name, v in (
        ("swap_fee_bp", swap_fee_bp),
        ("builder_fee_bp", builder_fee_bp),
        ("burn_fee_bp", burn_fee_bp),
        ("royalty_fee_bp", royalty_fee_bp),
        ("rewards_fee_bp", rewards_fee_bp),
    ):
        _check_rate(name, v)


def _check_reserves(reserve_a: int, reserve_b: int) -> None:
    require_u64("reserve_a", reserve_a)
    require_u64("reserve_b", reserve_b)
    if reserve_a == 0 or reserve_b == 0:
        raise NoLiquidity("cannot swap against an empty reserve")


def _gross_up(net: int, terms: Sequence[Tuple[int, int]]) -> int:
    """
    Smallest-bound gross amount `g` such that `g - sum(ceil(g * r / d))` stays `>= net`
    for every amount at or above `g`.

    Each ceil adds strictly less than one unit, so with `k` non-zero terms it is
    enough that `g * (1 - R) >= net + k - 1`.
    """
    rate_total = 0
    nonzero = 0
    for rate, denom in terms:
        rate_total += rate * (HALF_BPS_DENOM // denom)
        if rate > 0:
            nonzero += 1
    if rate_total >= HALF_BPS_DENOM:
        raise InvalidFeeRate(f"combined fee rate leaves nothing to trade: {rate_total}/{HALF_BPS_DENOM}")
    if nonzero == 0:
        return net
    return ceil_mul_div(checked_add(net, nonzero - 1), HALF_BPS_DENOM, HALF_BPS_DENOM - rate_total)


def swap_out_b(
    *,
    amount_in: int,
    reserve_a: int,
    reserve_b: int,
    swap_fee_bp: int,
    builder_fee_bp: int,
    burn_fee_bp: int,
    royalty_fee_bp: int,
    rewards_fee_bp: int,
) -> SwapBreakdown:
    """
    Sell exactly `amount_in` of token A for token B.

    All fees except the output half of the builder fee are taken from the input:
        fee_x = ceil(amount_in * rate_x / 10_000)
        builder_fee_in = ceil(amount_in * builder_fee_bp / 20_000)
        adjusted_in = amount_in - sum(fees)
        raw_out = floor(adjusted_in * reserve_b / (reserve_a + adjusted_in))
        amount_out = raw_out - ceil(raw_out * builder_fee_bp / 20_000)
    """
    require_u64("amount_in", amount_in)
    _check_rates(swap_fee_bp, builder_fee_bp, burn_fee_bp, royalty_fee_bp, rewards_fee_bp)
    if amount_in == 0:
        raise ZeroInput("amount_in must be positive")
    _check_reserves(reserve_a, reserve_b)

    protocol_fee = ceil_mul_div(amount_in, swap_fee_bp, BPS_DENOM)
    burn_fee = ceil_mul_div(amount_in, burn_fee_bp, BPS_DENOM)
    royalty_fee = ceil_mul_div(amount_in, royalty_fee_bp, BPS_DENOM)
    rewards_fee = ceil_mul_div(amount_in, rewards_fee_bp, BPS_DENOM)
    builder_fee_in = ceil_mul_div(amount_in, builder_fee_bp, HALF_BPS_DENOM)

    fees_in = protocol_fee + burn_fee + royalty_fee + rewards_fee + builder_fee_in
    adjusted_in = checked_sub(amount_in, fees_in)
    pool_in = checked_add(reserve_a, adjusted_in)
    if pool_in == 0:
        raise NoLiquidity("reserve_a + adjusted_in must be positive")

    raw_out = mul_div(adjusted_in, reserve_b, pool_in)
    builder_fee_out = ceil_mul_div(raw_out, builder_fee_bp, HALF_BPS_DENOM)
    amount_out = checked_sub(raw_out, builder_fee_out)

    return SwapBreakdown(
        amount_in=amount_in,
        amount_out=amount_out,
        adjusted_in=adjusted_in,
        raw_out=raw_out,
        builder_fee_in=builder_fee_in,
        builder_fee_out=builder_fee_out,
        protocol_fee=protocol_fee,
        burn_fee=burn_fee,
        royalty_fee=royalty_fee,
        rewards_fee=rewards_fee,
    )


def swap_out_a(
    *,
    amount_in: int,
    reserve_a: int,
    reserve_b: int,
    swap_fee_bp: int,
    builder_fee_bp: int,
    burn_fee_bp: int,
    royalty_fee_bp: int,
    rewards_fee_bp: int,
) -> SwapBreakdown:
    """
    Sell exactly `amount_in` of token B for token A.

    Only the input half of the builder fee comes out of the B input; every other
    fee is charged on the raw A output:
        adjusted_in = amount_in - ceil(amount_in * builder_fee_bp / 20_000)
        raw_out = floor(adjusted_in * reserve_a / (reserve_b + adjusted_in))
        amount_out = raw_out - (protocol + burn + royalty + rewards + builder_fee_out)
    """
    require_u64("amount_in", amount_in)
    _check_rates(swap_fee_bp, builder_fee_bp, burn_fee_bp, royalty_fee_bp, rewards_fee_bp)
    if amount_in == 0:
        raise ZeroInput("amount_in must be positive")
    _check_reserves(reserve_a, reserve_b)

    builder_fee_in = ceil_mul_div(amount_in, builder_fee_bp, HALF_BPS_DENOM)
    adjusted_in = checked_sub(amount_in, builder_fee_in)
    pool_in = checked_add(reserve_b, adjusted_in)
    if pool_in == 0:
        raise NoLiquidity("reserve_b + adjusted_in must be positive")

    raw_out = mul_div(adjusted_in, reserve_a, pool_in)
    protocol_fee = ceil_mul_div(raw_out, swap_fee_bp, BPS_DENOM)
    burn_fee = ceil_mul_div(raw_out, burn_fee_bp, BPS_DENOM)
    royalty_fee = ceil_mul_div(raw_out, royalty_fee_bp, BPS_DENOM)
    rewards_fee = ceil_mul_div(raw_out, rewards_fee_bp, BPS_DENOM)
    builder_fee_out = ceil_mul_div(raw_out, builder_fee_bp, HALF_BPS_DENOM)

    fees_out = protocol_fee + burn_fee + royalty_fee + rewards_fee + builder_fee_out
    amount_out = checked_sub(raw_out, fees_out)

    return SwapBreakdown(
        amount_in=amount_in,
        amount_out=amount_out,
        adjusted_in=adjusted_in,
        raw_out=raw_out,
        builder_fee_in=builder_fee_in,
        builder_fee_out=builder_fee_out,
        protocol_fee=protocol_fee,
        burn_fee=burn_fee,
        royalty_fee=royalty_fee,
        rewards_fee=rewards_fee,
    )


def swap_in_a(
    *,
    amount_out: int,
    reserve_a: int,
    reserve_b: int,
    swap_fee_bp: int,
    builder_fee_bp: int,
    burn_fee_bp: int,
    royalty_fee_bp: int,
    rewards_fee_bp: int,
) -> SwapBreakdown:
    """
    Quote the token A input needed to receive exactly `amount_out` of token B.

    Returns the forward breakdown at the quoted input; its `amount_out` is
    `>= amount_out` (rounding only ever favors the pool).
    """
    require_u64("amount_out", amount_out)
    _check_rates(swap_fee_bp, builder_fee_bp, burn_fee_bp, royalty_fee_bp, rewards_fee_bp)
    if amount_out == 0:
        raise ZeroInput("amount_out must be positive")
    _check_reserves(reserve_a, reserve_b)
    if amount_out >= reserve_b:
        raise InsufficientLiquidity(f"amount_out ({amount_out}) >= reserve_b ({reserve_b})")

    gross_out = _gross_up(amount_out, ((builder_fee_bp, HALF_BPS_DENOM),))
    if gross_out >= reserve_b:
        raise InsufficientLiquidity(f"gross output ({gross_out}) >= reserve_b ({reserve_b})")

    # Inverse constant product: raw_in = ceil(gross_out * reserve_a / (reserve_b - gross_out))
    raw_in = ceil_mul_div(gross_out, reserve_a, reserve_b - gross_out)
    amount_in = _gross_up(
        raw_in,
        (
            (swap_fee_bp, BPS_DENOM),
            (burn_fee_bp, BPS_DENOM),
            (royalty_fee_bp, BPS_DENOM),
            (rewards_fee_bp, BPS_DENOM),
            (builder_fee_bp, HALF_BPS_DENOM),
        ),
    )

    res = swap_out_b(
        amount_in=amount_in,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        swap_fee_bp=swap_fee_bp,
        builder_fee_bp=builder_fee_bp,
        burn_fee_bp=burn_fee_bp,
        royalty_fee_bp=royalty_fee_bp,
        rewards_fee_bp=rewards_fee_bp,
    )
    if res.amount_out < amount_out:
        raise MathError("computed amount_in insufficient for desired amount_out")
    return res


def swap_in_b(
    *,
    amount_out: int,
    reserve_a: int,
    reserve_b: int,
    swap_fee_bp: int,
    builder_fee_bp: int,
    burn_fee_bp: int,
    royalty_fee_bp: int,
    rewards_fee_bp: int,
) -> SwapBreakdown:
    """Quote the token B input needed to receive exactly `amount_out` of token A."""
    require_u64("amount_out", amount_out)
    _check_rates(swap_fee_bp, builder_fee_bp, burn_fee_bp, royalty_fee_bp, rewards_fee_bp)
    if amount_out == 0:
        raise ZeroInput("amount_out must be positive")
    _check_reserves(reserve_a, reserve_b)
    if amount_out >= reserve_a:
        raise InsufficientLiquidity(f"amount_out ({amount_out}) >= reserve_a ({reserve_a})")

    gross_out = _gross_up(
        amount_out,
        (
            (swap_fee_bp, BPS_DENOM),
            (burn_fee_bp, BPS_DENOM),
            (royalty_fee_bp, BPS_DENOM),
            (rewards_fee_bp, BPS_DENOM),
            (builder_fee_bp, HALF_BPS_DENOM),
        ),
    )
    if gross_out >= reserve_a:
        raise InsufficientLiquidity(f"gross output ({gross_out}) >= reserve_a ({reserve_a})")

    raw_in = ceil_mul_div(gross_out, reserve_b, reserve_a - gross_out)
    amount_in = _gross_up(raw_in, ((builder_fee_bp, HALF_BPS_DENOM),))

    res = swap_out_a(
        amount_in=amount_in,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        swap_fee_bp=swap_fee_bp,
        builder_fee_bp=builder_fee_bp,
        burn_fee_bp=burn_fee_bp,
        royalty_fee_bp=royalty_fee_bp,
        rewards_fee_bp=rewards_fee_bp,
    )
    if res.amount_out < amount_out:
        raise MathError("computed amount_in insufficient for desired amount_out")
    return res

"""
Liquidity math kernel.

Pure functions with explicit rounding rules:
- deposit sizing rounds the derived side up (the depositor never under-pays),
- minted LP rounds down,
- redeemed amounts round down.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import ExcessiveSlippage, InsufficientFunds, NoLiquidity, ZeroInput
from .fixed_point import ceil_div, checked_add, checked_sub, isqrt, mul_div, require_u64


@dataclass(frozen=True)
class DepositSizing:
    amount_a_used: int
    amount_b_used: int
    amount_a_refund: int
    amount_b_refund: int
    # "a", "b" or "both": which input bounded the deposit
    binding: str


@dataclass(frozen=True)
class MintLiquidityResult:
    lp_minted: int
    amount_a_used: int
    amount_b_used: int
    amount_a_refund: int
    amount_b_refund: int
    new_reserve_a: int
    new_reserve_b: int
    new_lp_supply: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_a_out: int
    amount_b_out: int
    new_reserve_a: int
    new_reserve_b: int
    new_lp_supply: int


def _require_seeded(reserve_a: int, reserve_b: int, lp_supply: int) -> None:
    if lp_supply == 0:
        consistent = reserve_a == 0 and reserve_b == 0
    else:
        consistent = reserve_a > 0 and reserve_b > 0
    if not consistent:
        raise NoLiquidity(
            f"inconsistent pool liquidity: reserves=({reserve_a}, {reserve_b}), lp_supply={lp_supply}"
        )


def optimal_deposit(*, reserve_a: int, reserve_b: int, amount_a: int, amount_b: int) -> DepositSizing:
    """
    Size a deposit to the pool ratio.

    Compares `amount_a * reserve_b` with `amount_b * reserve_a`; the smaller side
    binds and is used in full, the other side is derived with ceil rounding and
    the excess is refunded. An empty pool uses both amounts in full.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("amount_a", amount_a),
        ("amount_b", amount_b),
    ):
        require_u64(name, v)
    if amount_a == 0 or amount_b == 0:
        raise ZeroInput(f"deposit amounts must be positive: ({amount_a}, {amount_b})")

    if reserve_a == 0 or reserve_b == 0:
        return DepositSizing(
            amount_a_used=amount_a,
            amount_b_used=amount_b,
            amount_a_refund=0,
            amount_b_refund=0,
            binding="both",
        )

    cross_a = amount_a * reserve_b
    cross_b = amount_b * reserve_a
    if cross_a > cross_b:
        binding = "b"
        amount_b_used = amount_b
        amount_a_used = ceil_div(cross_b, reserve_b)
    elif cross_a < cross_b:
        binding = "a"
        amount_a_used = amount_a
        amount_b_used = ceil_div(cross_a, reserve_a)
    else:
        binding = "both"
        amount_a_used = amount_a
        amount_b_used = amount_b

    if amount_a_used > amount_a or amount_b_used > amount_b:
        raise AssertionError("used amounts exceed desired amounts")

    return DepositSizing(
        amount_a_used=amount_a_used,
        amount_b_used=amount_b_used,
        amount_a_refund=amount_a - amount_a_used,
        amount_b_refund=amount_b - amount_b_used,
        binding=binding,
    )


def mint_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    lp_supply: int,
    amount_a: int,
    amount_b: int,
    min_lp_out: int = 0,
) -> MintLiquidityResult:
    """
    Deposit liquidity and compute the LP units to mint.

    First deposit (`lp_supply == 0`): both amounts are used and
        lp = isqrt(amount_a * amount_b)
    Otherwise:
        lp = floor(bound_amount * lp_supply / bound_reserve)
    """
    require_u64("lp_supply", lp_supply)
    require_u64("min_lp_out", min_lp_out)
    sizing = optimal_deposit(reserve_a=reserve_a, reserve_b=reserve_b, amount_a=amount_a, amount_b=amount_b)
    _require_seeded(reserve_a, reserve_b, lp_supply)

    if lp_supply == 0:
        lp_minted = isqrt(sizing.amount_a_used, sizing.amount_b_used)
    elif sizing.binding == "b":
        lp_minted = mul_div(sizing.amount_b_used, lp_supply, reserve_b)
    else:
        lp_minted = mul_div(sizing.amount_a_used, lp_supply, reserve_a)

    if lp_minted < min_lp_out:
        raise ExcessiveSlippage(f"lp_minted ({lp_minted}) < min_lp_out ({min_lp_out})")

    return MintLiquidityResult(
        lp_minted=lp_minted,
        amount_a_used=sizing.amount_a_used,
        amount_b_used=sizing.amount_b_used,
        amount_a_refund=sizing.amount_a_refund,
        amount_b_refund=sizing.amount_b_refund,
        new_reserve_a=checked_add(reserve_a, sizing.amount_a_used),
        new_reserve_b=checked_add(reserve_b, sizing.amount_b_used),
        new_lp_supply=checked_add(lp_supply, lp_minted),
    )


def burn_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    lp_supply: int,
    lp_amount: int,
    min_amount_a: int = 0,
    min_amount_b: int = 0,
) -> BurnLiquidityResult:
    """
    Redeem `lp_amount` LP units pro rata:
        amount_x_out = floor(lp_amount * reserve_x / lp_supply)
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("lp_supply", lp_supply),
        ("lp_amount", lp_amount),
        ("min_amount_a", min_amount_a),
        ("min_amount_b", min_amount_b),
    ):
        require_u64(name, v)
    if lp_amount == 0:
        raise ZeroInput("lp_amount must be positive")
    if lp_supply == 0:
        raise NoLiquidity("pool has no liquidity to redeem")
    _require_seeded(reserve_a, reserve_b, lp_supply)
    if lp_amount > lp_supply:
        raise InsufficientFunds(f"cannot burn more LP than supply: {lp_amount} > {lp_supply}")

    amount_a_out = mul_div(lp_amount, reserve_a, lp_supply)
    amount_b_out = mul_div(lp_amount, reserve_b, lp_supply)

    if amount_a_out < min_amount_a:
        raise ExcessiveSlippage(f"amount_a_out ({amount_a_out}) < min_amount_a ({min_amount_a})")
    if amount_b_out < min_amount_b:
        raise ExcessiveSlippage(f"amount_b_out ({amount_b_out}) < min_amount_b ({min_amount_b})")

    return BurnLiquidityResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        new_reserve_a=checked_sub(reserve_a, amount_a_out),
        new_reserve_b=checked_sub(reserve_b, amount_b_out),
        new_lp_supply=checked_sub(lp_supply, lp_amount),
    )

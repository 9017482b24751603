"""
Liquidity management operations: create pool, add/remove/lock liquidity.
"""

from dataclasses import replace
from typing import Optional, Tuple

from ..errors import InsufficientFunds, NoLiquidity, PoolAlreadyExists, Unauthorized, ZeroInput
from ..kernels.fixed_point import checked_add, require_u64
from ..kernels.lp_math import BurnLiquidityResult, MintLiquidityResult, burn_liquidity, mint_liquidity
from ..state.balances import Address, Amount, TokenKind
from ..state.canonical import require_canonical_pair
from ..state.pools import PoolFeeRates, PoolState, compute_pool_id
from ..state.registry import PoolRegistry


def create_pool(
    kind_a: TokenKind,
    kind_b: TokenKind,
    amount_a: Amount,
    amount_b: Amount,
    fee_rates: PoolFeeRates,
    royalty_address: Address,
    created_at: int = 0,
    *,
    registry: Optional[PoolRegistry] = None,
) -> Tuple[PoolState, Amount]:
    """
    Create a new pool seeded with a strictly positive deposit of both tokens.

    Pool ID is deterministic:
        pool_id = H("Pool" || kind_a || kind_b)

    LP minting for the seed deposit:
        lp = floor(sqrt(amount_a * amount_b))

    When `registry` is given the pair must not be registered yet; the pool is
    inserted only after its state has been built.

    Returns:
        Tuple of (PoolState, lp_minted)

    Raises:
        InvalidPair: kinds identical or not in canonical order
        PoolAlreadyExists: pair already registered
        ZeroInput: a seed amount is zero
        InvalidFeeRate: a rate exceeds its maximum
    """
    require_canonical_pair(kind_a, kind_b)
    if registry is not None and registry.contains(kind_a, kind_b):
        raise PoolAlreadyExists(f"pool already exists for ({kind_a}, {kind_b})")

    if not isinstance(fee_rates, PoolFeeRates):
        raise TypeError("fee_rates must be a PoolFeeRates")

    mint = mint_liquidity(
        reserve_a=0,
        reserve_b=0,
        lp_supply=0,
        amount_a=amount_a,
        amount_b=amount_b,
    )
    pool_id = compute_pool_id(kind_a, kind_b)

    pool = PoolState(
        pool_id=pool_id,
        kind_a=kind_a,
        kind_b=kind_b,
        reserve_a=mint.new_reserve_a,
        reserve_b=mint.new_reserve_b,
        lp_supply=mint.new_lp_supply,
        fee_rates=fee_rates,
        royalty_address=royalty_address,
        created_at=created_at,
    )

    if registry is not None:
        registry.insert(kind_a, kind_b, pool_id)

    return pool, mint.lp_minted


def add_liquidity(
    pool: PoolState,
    amount_a: Amount,
    amount_b: Amount,
    min_lp_out: Amount = 0,
) -> Tuple[PoolState, MintLiquidityResult]:
    """
    Add liquidity at the current pool ratio.

    The binding side is used in full and the other side is derived (ceil);
    unused amounts are reported as refunds.

    LP minted:
        lp = floor(bound_amount * lp_supply / bound_reserve)
    or `isqrt(amount_a * amount_b)` if the pool has been fully drained.
    """
    mint = mint_liquidity(
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        lp_supply=pool.lp_supply,
        amount_a=amount_a,
        amount_b=amount_b,
        min_lp_out=min_lp_out,
    )
    new_pool = replace(
        pool,
        reserve_a=mint.new_reserve_a,
        reserve_b=mint.new_reserve_b,
        lp_supply=mint.new_lp_supply,
    )
    return new_pool, mint


def remove_liquidity(
    pool: PoolState,
    lp_amount: Amount,
    min_amount_a: Amount = 0,
    min_amount_b: Amount = 0,
) -> Tuple[PoolState, BurnLiquidityResult]:
    """
    Burn `lp_amount` LP units for a pro-rata share of both reserves.

    Outputs:
        amount_x_out = floor(lp_amount * reserve_x / lp_supply)

    Locked LP units cannot be redeemed. No fee is charged.
    """
    require_u64("lp_amount", lp_amount)
    if lp_amount == 0:
        raise ZeroInput("lp_amount must be positive")
    if pool.lp_supply == 0:
        raise NoLiquidity(f"pool {pool.pool_id} has no liquidity to redeem")
    if lp_amount > pool.redeemable_lp:
        raise InsufficientFunds(
            f"lp_amount ({lp_amount}) exceeds redeemable supply ({pool.redeemable_lp})"
        )

    burn = burn_liquidity(
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        lp_supply=pool.lp_supply,
        lp_amount=lp_amount,
        min_amount_a=min_amount_a,
        min_amount_b=min_amount_b,
    )
    new_pool = replace(
        pool,
        reserve_a=burn.new_reserve_a,
        reserve_b=burn.new_reserve_b,
        lp_supply=burn.new_lp_supply,
    )
    return new_pool, burn


def lock_liquidity(pool: PoolState, lp_amount: Amount) -> PoolState:
    """Move LP units into the pool's lock. One-way: locked units are never redeemable."""
    require_u64("lp_amount", lp_amount)
    if lp_amount == 0:
        raise ZeroInput("lp_amount must be positive")
    if lp_amount > pool.redeemable_lp:
        raise InsufficientFunds(
            f"lp_amount ({lp_amount}) exceeds redeemable supply ({pool.redeemable_lp})"
        )
    return replace(pool, locked_lp=checked_add(pool.locked_lp, lp_amount))


def set_royalty_address(pool: PoolState, caller: Address, new_address: Address) -> PoolState:
    """Rotate the royalty wallet; only the current wallet may do so."""
    if caller != pool.royalty_address:
        raise Unauthorized(f"caller {caller!r} is not the royalty wallet of pool {pool.pool_id}")
    return replace(pool, royalty_address=new_address)

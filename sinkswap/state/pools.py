"""
Pool state for multi-sink fee pools.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from ..errors import InvalidFeeRate, InvalidPair
from ..kernels.fixed_point import U64_MAX
from .balances import Address, Amount, TokenKind
from .canonical import (
    canonical_json_bytes,
    domain_sep_bytes,
    encode_bytes,
    kind_bytes,
    require_canonical_pair,
    sha256_hex,
)


# Per-rate maxima in basis points (of 10_000).
MAX_BUILDER_FEE_BP = 300  # 3%
MAX_BURN_FEE_BP = 500  # 5%
MAX_ROYALTY_FEE_BP = 100  # 1%
MAX_REWARDS_FEE_BP = 500  # 5%


def _require_u64_field(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if not (0 <= value <= U64_MAX):
        raise ValueError(f"{name} must be in [0, 2**64 - 1]: {value}")


@dataclass(frozen=True)
class PoolFeeRates:
    """Pool-level fee rates in basis points, fixed at pool creation."""

    builder_fee_bp: int = 0
    burn_fee_bp: int = 0
    royalty_fee_bp: int = 0
    rewards_fee_bp: int = 0

    def __post_init__(self) -> None:
        for name, v, limit in (
            ("builder_fee_bp", self.builder_fee_bp, MAX_BUILDER_FEE_BP),
            ("burn_fee_bp", self.burn_fee_bp, MAX_BURN_FEE_BP),
            ("royalty_fee_bp", self.royalty_fee_bp, MAX_ROYALTY_FEE_BP),
            ("rewards_fee_bp", self.rewards_fee_bp, MAX_REWARDS_FEE_BP),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if not (0 <= v <= limit):
                raise InvalidFeeRate(f"{name} must be in [0, {limit}]: {v}")


def compute_pool_id(kind_a: TokenKind, kind_b: TokenKind) -> str:
    """
    Deterministic pool id for a canonical pair:
        pool_id = H(domain || len(kind_a) || kind_a || len(kind_b) || kind_b)
    """
    require_canonical_pair(kind_a, kind_b)
    data = domain_sep_bytes("Pool") + encode_bytes(kind_bytes(kind_a)) + encode_bytes(kind_bytes(kind_b))
    return sha256_hex(data)


@dataclass(frozen=True)
class PoolState:
    """
    State of one pool.

    Attributes:
        pool_id: pool identifier (hex string)
        kind_a: token kind A (strictly precedes kind_b)
        kind_b: token kind B
        reserve_a / reserve_b: pool reserves
        lp_supply: total outstanding LP units (including locked units)
        fee_rates: pool-level fee rates
        royalty_address: creator-royalty payout address
        protocol_fee_balance: protocol sink (token A)
        burn_balance: burn sink awaiting conversion (token A)
        burned_b_balance: converted burn output (token B), never leaves the pool
        royalty_balance: creator-royalty sink (token A)
        rewards_balance: rewards sink (token A)
        locked_lp: LP units held by the pool and not redeemable
        created_at: clock timestamp at creation
    """

    pool_id: str
    kind_a: TokenKind
    kind_b: TokenKind
    reserve_a: Amount
    reserve_b: Amount
    lp_supply: Amount
    fee_rates: PoolFeeRates
    royalty_address: Address
    protocol_fee_balance: Amount = 0
    burn_balance: Amount = 0
    burned_b_balance: Amount = 0
    royalty_balance: Amount = 0
    rewards_balance: Amount = 0
    locked_lp: Amount = 0
    created_at: int = 0

    def __post_init__(self) -> None:
        require_canonical_pair(self.kind_a, self.kind_b)
        if not isinstance(self.fee_rates, PoolFeeRates):
            raise TypeError("fee_rates must be a PoolFeeRates")
        if not isinstance(self.royalty_address, str) or not self.royalty_address:
            raise ValueError("royalty_address must be a non-empty string")

        for name in (
            "reserve_a",
            "reserve_b",
            "lp_supply",
            "protocol_fee_balance",
            "burn_balance",
            "burned_b_balance",
            "royalty_balance",
            "rewards_balance",
            "locked_lp",
        ):
            _require_u64_field(name, getattr(self, name))

        # Never partially funded.
        if self.lp_supply == 0:
            if self.reserve_a != 0 or self.reserve_b != 0:
                raise ValueError("empty LP supply requires empty reserves")
        elif self.reserve_a == 0 or self.reserve_b == 0:
            raise ValueError("outstanding LP requires both reserves to be positive")

        if self.locked_lp > self.lp_supply:
            raise ValueError(f"locked_lp ({self.locked_lp}) exceeds lp_supply ({self.lp_supply})")

    def is_a(self, kind: TokenKind) -> bool:
        """True if `kind` is token A, False if token B."""
        if kind == self.kind_a:
            return True
        if kind == self.kind_b:
            return False
        raise InvalidPair(f"token kind {kind!r} not in pool {self.pool_id}")

    def get_reserve(self, kind: TokenKind) -> Amount:
        return self.reserve_a if self.is_a(kind) else self.reserve_b

    @property
    def redeemable_lp(self) -> Amount:
        return self.lp_supply - self.locked_lp

    def get_constant_product(self) -> int:
        return self.reserve_a * self.reserve_b

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"kinds=({self.kind_a}, {self.kind_b}), "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"lp_supply={self.lp_supply}, locked_lp={self.locked_lp})"
        )


def pool_to_dict(pool: PoolState) -> Dict[str, Any]:
    """JSON-safe snapshot (integers only, no floats)."""
    return asdict(pool)


def pool_from_dict(data: Mapping[str, Any]) -> PoolState:
    fields = dict(data)
    rates = fields.pop("fee_rates", None)
    if not isinstance(rates, Mapping):
        raise ValueError("fee_rates must be an object")
    return PoolState(fee_rates=PoolFeeRates(**rates), **fields)


def pool_digest(pool: PoolState) -> str:
    """sha256 over the canonical JSON snapshot of the pool."""
    return sha256_hex(domain_sep_bytes("PoolState") + canonical_json_bytes(pool_to_dict(pool)))

"""
Core pool operations (pure functions over immutable `PoolState`).
"""

from .config import (
    ProtocolConfig,
    SweepThresholds,
    set_admin,
    set_protocol_fee_address,
    set_rewards_manager,
    set_swap_fee,
)
from .fees import (
    SweepResult,
    deposit_rewards,
    sweep_all,
    sweep_burn,
    sweep_protocol_fees,
    sweep_royalty,
    withdraw_rewards,
)
from .liquidity import add_liquidity, create_pool, lock_liquidity, remove_liquidity, set_royalty_address
from .swap import apply_swap, quote_exact_in, quote_exact_out, swap_exact_in, swap_exact_out

__all__ = [
    "ProtocolConfig",
    "SweepThresholds",
    "set_admin",
    "set_protocol_fee_address",
    "set_rewards_manager",
    "set_swap_fee",
    "SweepResult",
    "deposit_rewards",
    "sweep_all",
    "sweep_burn",
    "sweep_protocol_fees",
    "sweep_royalty",
    "withdraw_rewards",
    "add_liquidity",
    "create_pool",
    "lock_liquidity",
    "remove_liquidity",
    "set_royalty_address",
    "apply_swap",
    "quote_exact_in",
    "quote_exact_out",
    "swap_exact_in",
    "swap_exact_out",
]

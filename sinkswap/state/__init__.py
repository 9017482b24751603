"""
State management for SinkSwap pools
"""

from .balances import BalanceTable
from .canonical import canonical_pair, compare_kinds, is_canonical_pair
from .lp import LPTable
from .pools import PoolFeeRates, PoolState, compute_pool_id, pool_digest, pool_from_dict, pool_to_dict
from .registry import PoolRegistry

__all__ = [
    "BalanceTable",
    "canonical_pair",
    "compare_kinds",
    "is_canonical_pair",
    "LPTable",
    "PoolFeeRates",
    "PoolState",
    "compute_pool_id",
    "pool_digest",
    "pool_from_dict",
    "pool_to_dict",
    "PoolRegistry",
]

"""
Pure integer kernels: fixed-point math, swap pricing and liquidity math.
"""

from .fixed_point import U64_MAX, ceil_div, ceil_mul_div, checked_add, checked_sub, isqrt, mul_div
from .lp_math import burn_liquidity, mint_liquidity, optimal_deposit
from .swap_math import SwapBreakdown, swap_in_a, swap_in_b, swap_out_a, swap_out_b

__all__ = [
    "U64_MAX",
    "ceil_div",
    "ceil_mul_div",
    "checked_add",
    "checked_sub",
    "isqrt",
    "mul_div",
    "burn_liquidity",
    "mint_liquidity",
    "optimal_deposit",
    "SwapBreakdown",
    "swap_in_a",
    "swap_in_b",
    "swap_out_a",
    "swap_out_b",
]

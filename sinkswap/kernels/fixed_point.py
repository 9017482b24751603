"""
Fixed-point integer primitives (unsigned 64-bit semantics).

Python integers are unbounded, so the double-width intermediate of
`a * b / c` is exact; the bounds below reproduce the u64/u128 abort behavior
of the host VM. Every function is pure and total except for the documented
failures.
"""

from __future__ import annotations

import math

from ..errors import MathError


U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u64(name: str, value: int) -> int:
    """Return `value` if it is a u64, else raise."""
    _require_int(name, value)
    if value < 0 or value > U64_MAX:
        raise MathError(f"{name} out of u64 range: {value}")
    return value


def _require_u128(name: str, value: int) -> int:
    _require_int(name, value)
    if value < 0 or value > U128_MAX:
        raise MathError(f"{name} out of u128 range: {value}")
    return value


def mul_div(a: int, b: int, c: int) -> int:
    """
    Compute `floor(a * b / c)`.

    Raises MathError if `c == 0` or the result does not fit in a u64.
    """
    require_u64("a", a)
    require_u64("b", b)
    require_u64("c", c)
    if c == 0:
        raise MathError("mul_div: division by zero")
    result = (a * b) // c
    if result > U64_MAX:
        raise MathError(f"mul_div: result overflows u64: {result}")
    return result


def ceil_mul_div(a: int, b: int, c: int) -> int:
    """
    Compute `ceil(a * b / c)`.

    Used for every fee extraction so fees round in the pool's favor.
    """
    require_u64("a", a)
    require_u64("b", b)
    require_u64("c", c)
    if c == 0:
        raise MathError("ceil_mul_div: division by zero")
    result = ceil_div(a * b, c)
    if result > U64_MAX:
        raise MathError(f"ceil_mul_div: result overflows u64: {result}")
    return result


def ceil_div(a: int, b: int) -> int:
    """`0` if `a == 0`, else `floor((a - 1) / b) + 1` over u128 operands."""
    _require_u128("a", a)
    _require_u128("b", b)
    if b == 0:
        raise MathError("ceil_div: division by zero")
    if a == 0:
        return 0
    return (a - 1) // b + 1


def isqrt(a: int, b: int) -> int:
    """Integer square root of `a * b` (geometric mean for the first deposit)."""
    require_u64("a", a)
    require_u64("b", b)
    return math.isqrt(a * b)


def checked_add(a: int, b: int) -> int:
    require_u64("a", a)
    require_u64("b", b)
    total = a + b
    if total > U64_MAX:
        raise MathError(f"u64 addition overflow: {a} + {b}")
    return total


def checked_sub(a: int, b: int) -> int:
    require_u64("a", a)
    require_u64("b", b)
    if b > a:
        raise MathError(f"u64 subtraction underflow: {a} - {b}")
    return a - b

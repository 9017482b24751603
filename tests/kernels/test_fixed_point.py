from __future__ import annotations

import pytest

from sinkswap.errors import MathError
from sinkswap.kernels.fixed_point import (
    U64_MAX,
    ceil_div,
    ceil_mul_div,
    checked_add,
    checked_sub,
    isqrt,
    mul_div,
)


def test_mul_div_floors_and_ceil_mul_div_rounds_up() -> None:
    assert mul_div(10, 3, 4) == 7
    assert ceil_mul_div(10, 3, 4) == 8
    # Exact quotients are not bumped.
    assert ceil_mul_div(8, 1, 4) == 2
    assert ceil_mul_div(0, 5, 7) == 0


def test_mul_div_uses_a_double_width_intermediate() -> None:
    assert mul_div(U64_MAX, U64_MAX, U64_MAX) == U64_MAX
    assert ceil_mul_div(U64_MAX, U64_MAX, U64_MAX) == U64_MAX


@pytest.mark.parametrize("fn", [mul_div, ceil_mul_div])
def test_division_by_zero_is_a_math_error(fn) -> None:
    with pytest.raises(MathError, match="division by zero"):
        fn(1, 1, 0)


@pytest.mark.parametrize("fn", [mul_div, ceil_mul_div])
def test_result_overflow_is_a_math_error(fn) -> None:
    with pytest.raises(MathError, match="overflows u64"):
        fn(U64_MAX, 2, 1)


def test_operands_must_be_unsigned_ints() -> None:
    with pytest.raises(TypeError):
        mul_div(True, 1, 1)
    with pytest.raises(MathError, match="out of u64 range"):
        mul_div(-1, 1, 1)
    with pytest.raises(MathError, match="out of u64 range"):
        ceil_mul_div(U64_MAX + 1, 1, 1)


def test_ceil_div() -> None:
    assert ceil_div(0, 5) == 0
    assert ceil_div(1, 5) == 1
    assert ceil_div(10, 5) == 2
    assert ceil_div(11, 5) == 3
    # 128-bit numerators are allowed.
    assert ceil_div(1 << 100, 1 << 36) == 1 << 64
    with pytest.raises(MathError, match="division by zero"):
        ceil_div(1, 0)


def test_isqrt_is_exact_beyond_float_precision() -> None:
    assert isqrt(100, 400) == 200
    assert isqrt(2, 1) == 1
    n = (1 << 63) + 12345
    assert isqrt(n, n) == n


def test_checked_add_and_sub_abort_out_of_range() -> None:
    assert checked_add(U64_MAX - 1, 1) == U64_MAX
    assert checked_sub(5, 5) == 0
    with pytest.raises(MathError, match="overflow"):
        checked_add(U64_MAX, 1)
    with pytest.raises(MathError, match="underflow"):
        checked_sub(1, 2)

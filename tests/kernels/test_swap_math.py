from __future__ import annotations

import random

import pytest

from sinkswap.errors import InsufficientLiquidity, InvalidFeeRate, MathError, NoLiquidity, ZeroInput
from sinkswap.kernels.swap_math import swap_in_a, swap_in_b, swap_out_a, swap_out_b


NO_FEES = dict(swap_fee_bp=0, builder_fee_bp=0, burn_fee_bp=0, royalty_fee_bp=0, rewards_fee_bp=0)
FEES = dict(swap_fee_bp=30, builder_fee_bp=100, burn_fee_bp=50, royalty_fee_bp=20, rewards_fee_bp=10)


@pytest.mark.parametrize("kernel", [swap_out_b, swap_out_a])
def test_zero_fee_swap_matches_plain_constant_product(kernel) -> None:
    res = kernel(amount_in=100, reserve_a=1000, reserve_b=1000, **NO_FEES)
    assert res.adjusted_in == 100
    assert res.raw_out == 90
    assert res.amount_out == res.raw_out
    assert res.builder_fee_in == res.builder_fee_out == res.sink_fees == 0


def test_swap_out_b_takes_every_sink_fee_from_the_input() -> None:
    res = swap_out_b(amount_in=10_000, reserve_a=1_000_000, reserve_b=1_000_000, **FEES)

    assert res.protocol_fee == 30
    assert res.burn_fee == 50
    assert res.royalty_fee == 20
    assert res.rewards_fee == 10
    # Half of 100 bp on each side.
    assert res.builder_fee_in == 50
    assert res.adjusted_in == 9_840
    assert res.raw_out == 9_744
    assert res.builder_fee_out == 49
    assert res.amount_out == 9_695


def test_swap_out_a_takes_sink_fees_from_the_output() -> None:
    res = swap_out_a(amount_in=10_000, reserve_a=1_000_000, reserve_b=1_000_000, **FEES)

    assert res.builder_fee_in == 50
    assert res.adjusted_in == 9_950
    assert res.protocol_fee == -(-res.raw_out * 30 // 10_000)
    assert res.burn_fee == -(-res.raw_out * 50 // 10_000)
    assert res.builder_fee_out == -(-res.raw_out * 100 // 20_000)


def test_fees_round_up_so_a_tiny_trade_is_charged_one_unit_per_fee() -> None:
    res = swap_out_b(amount_in=1_000, reserve_a=10**9, reserve_b=10**9, swap_fee_bp=1, builder_fee_bp=0,
                     burn_fee_bp=0, royalty_fee_bp=0, rewards_fee_bp=0)
    assert res.protocol_fee == 1
    assert res.adjusted_in == 999


@pytest.mark.parametrize("kernel", [swap_out_b, swap_out_a])
def test_conservation_holds_in_both_directions(kernel) -> None:
    rng = random.Random(1337)
    for _ in range(300):
        reserve_a = rng.randint(10**9, 10**12)
        reserve_b = rng.randint(10**9, 10**12)
        rates = dict(
            swap_fee_bp=rng.randint(0, 100),
            builder_fee_bp=rng.randint(0, 300),
            burn_fee_bp=rng.randint(0, 500),
            royalty_fee_bp=rng.randint(0, 100),
            rewards_fee_bp=rng.randint(0, 500),
        )
        amount_in = rng.randint(10**6, 10**11)
        res = kernel(amount_in=amount_in, reserve_a=reserve_a, reserve_b=reserve_b, **rates)

        if kernel is swap_out_b:
            assert res.amount_in == res.adjusted_in + res.builder_fee_in + res.sink_fees
            assert res.raw_out == res.amount_out + res.builder_fee_out
        else:
            assert res.amount_in == res.adjusted_in + res.builder_fee_in
            assert res.raw_out == res.amount_out + res.builder_fee_out + res.sink_fees


@pytest.mark.parametrize("kernel", [swap_out_b, swap_out_a])
def test_zero_input_is_rejected(kernel) -> None:
    with pytest.raises(ZeroInput):
        kernel(amount_in=0, reserve_a=1000, reserve_b=1000, **NO_FEES)


@pytest.mark.parametrize("kernel", [swap_out_b, swap_out_a])
def test_empty_reserve_is_rejected(kernel) -> None:
    with pytest.raises(NoLiquidity):
        kernel(amount_in=10, reserve_a=0, reserve_b=1000, **NO_FEES)


def test_rates_above_one_hundred_percent_are_rejected() -> None:
    rates = dict(NO_FEES, swap_fee_bp=10_001)
    with pytest.raises(InvalidFeeRate, match="swap_fee_bp"):
        swap_out_b(amount_in=10, reserve_a=1000, reserve_b=1000, **rates)


def test_fees_exceeding_a_tiny_input_underflow() -> None:
    # Five fee terms, each rounded up to 1, on an input of 1.
    with pytest.raises(MathError, match="underflow"):
        swap_out_b(amount_in=1, reserve_a=1000, reserve_b=1000, **FEES)


def test_output_fees_exceeding_a_tiny_raw_output_underflow() -> None:
    # adjusted_in = 2, raw_out = 1, five output-side fees of 1 each.
    with pytest.raises(MathError, match="underflow"):
        swap_out_a(amount_in=3, reserve_a=1000, reserve_b=1000, **FEES)


def test_reverse_zero_fee_quote() -> None:
    res = swap_in_a(amount_out=90, reserve_a=1000, reserve_b=1000, **NO_FEES)
    assert res.amount_in == 99
    assert res.amount_out == 90


@pytest.mark.parametrize("kernel", [swap_in_a, swap_in_b])
def test_reverse_rejects_the_whole_output_reserve(kernel) -> None:
    with pytest.raises(InsufficientLiquidity):
        kernel(amount_out=1000, reserve_a=1000, reserve_b=1000, **NO_FEES)


def test_reverse_rejects_when_fees_push_the_gross_output_past_the_reserve() -> None:
    rates = dict(NO_FEES, builder_fee_bp=300)
    with pytest.raises(InsufficientLiquidity, match="gross output"):
        swap_in_a(amount_out=999, reserve_a=1000, reserve_b=1000, **rates)


@pytest.mark.parametrize("kernel", [swap_in_a, swap_in_b])
def test_reverse_zero_output_is_rejected(kernel) -> None:
    with pytest.raises(ZeroInput):
        kernel(amount_out=0, reserve_a=1000, reserve_b=1000, **NO_FEES)


@pytest.mark.parametrize(
    "reverse, forward",
    [(swap_in_a, swap_out_b), (swap_in_b, swap_out_a)],
)
def test_forward_of_reverse_delivers_at_least_the_requested_output(reverse, forward) -> None:
    rng = random.Random(20240501)
    for _ in range(300):
        reserve_a = rng.randint(1_000, 10**12)
        reserve_b = rng.randint(1_000, 10**12)
        rates = dict(
            swap_fee_bp=rng.randint(0, 100),
            builder_fee_bp=rng.randint(0, 300),
            burn_fee_bp=rng.randint(0, 500),
            royalty_fee_bp=rng.randint(0, 100),
            rewards_fee_bp=rng.randint(0, 500),
        )
        reserve_out = reserve_b if reverse is swap_in_a else reserve_a
        amount_out = rng.randint(1, reserve_out // 2)

        quote = reverse(amount_out=amount_out, reserve_a=reserve_a, reserve_b=reserve_b, **rates)
        check = forward(amount_in=quote.amount_in, reserve_a=reserve_a, reserve_b=reserve_b, **rates)

        assert check == quote
        assert check.amount_out >= amount_out

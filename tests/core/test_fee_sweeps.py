from __future__ import annotations

from dataclasses import replace

import pytest

from sinkswap.core.config import ProtocolConfig, SweepThresholds
from sinkswap.core.fees import (
    SINK_BURN,
    SINK_PROTOCOL,
    SINK_ROYALTY,
    deposit_rewards,
    sweep_all,
    sweep_burn,
    sweep_protocol_fees,
    sweep_royalty,
    withdraw_rewards,
)
from sinkswap.core.liquidity import create_pool
from sinkswap.errors import InsufficientFunds, Unauthorized, ZeroInput
from sinkswap.state.pools import PoolFeeRates


CONFIG = ProtocolConfig(admin="admin", protocol_fee_address="treasury", rewards_manager="rewards", swap_fee_bp=30)


def _pool(**sinks):
    pool, _ = create_pool("tokA", "tokB", 1_000_000, 1_000_000, PoolFeeRates(), "creator")
    return replace(pool, **sinks)


def test_protocol_sweep_is_threshold_gated_and_idempotent() -> None:
    pool = _pool(protocol_fee_balance=500)

    same, res = sweep_protocol_fees(pool, CONFIG, threshold=1_000)
    assert same is pool
    assert res.skipped and res.sink == SINK_PROTOCOL

    swept, res = sweep_protocol_fees(pool, CONFIG, threshold=500)
    assert res.swept == 500
    assert res.recipient == "treasury"
    assert swept.protocol_fee_balance == 0

    again, res = sweep_protocol_fees(swept, CONFIG, threshold=500)
    assert again is swept
    assert res.skipped


def test_empty_sink_is_never_swept() -> None:
    pool = _pool()
    _, res = sweep_protocol_fees(pool, CONFIG, threshold=1)
    assert res.skipped


def test_royalty_sweep_pays_the_pool_royalty_address() -> None:
    pool = _pool(royalty_balance=250)
    swept, res = sweep_royalty(pool, threshold=100)
    assert (res.sink, res.swept, res.recipient) == (SINK_ROYALTY, 250, "creator")
    assert swept.royalty_balance == 0
    assert sweep_royalty(swept, threshold=100)[1].skipped


def test_burn_sweep_converts_a_to_permanently_held_b() -> None:
    pool = _pool(burn_balance=10_000)
    swept, res = sweep_burn(pool, CONFIG, threshold=10_000)

    assert res.sink == SINK_BURN
    assert res.swept == 10_000
    assert res.protocol_fee == 30
    assert res.burned_b == 9_871
    assert swept.burn_balance == 0
    assert swept.reserve_a == 1_009_970
    assert swept.reserve_b == 1_000_000 - 9_871
    assert swept.burned_b_balance == 9_871
    assert swept.protocol_fee_balance == 30
    assert swept.get_constant_product() >= pool.get_constant_product()

    again, res = sweep_burn(swept, CONFIG, threshold=10_000)
    assert again is swept and res.skipped


def test_burn_sweep_below_threshold_is_a_no_op() -> None:
    pool = _pool(burn_balance=9_999)
    same, res = sweep_burn(pool, CONFIG, threshold=10_000)
    assert same is pool and res.skipped


def test_burn_sweep_on_a_drained_pool_is_skipped() -> None:
    pool = _pool()
    drained = replace(pool, reserve_a=0, reserve_b=0, lp_supply=0, burn_balance=10)
    same, res = sweep_burn(drained, CONFIG, threshold=1)
    assert same is drained
    assert res.skipped and res.sink == SINK_BURN


def test_drained_pool_still_pays_protocol_and_royalty() -> None:
    pool = _pool()
    drained = replace(
        pool,
        reserve_a=0,
        reserve_b=0,
        lp_supply=0,
        burn_balance=50,
        protocol_fee_balance=50,
        royalty_balance=50,
    )

    swept, results = sweep_all(drained, CONFIG, SweepThresholds(protocol=10, burn=10, royalty=10))

    burn, protocol, royalty = results
    assert burn.skipped
    assert (protocol.swept, royalty.swept) == (50, 50)
    assert swept.burn_balance == 50
    assert swept.protocol_fee_balance == swept.royalty_balance == 0


def test_sweep_all_runs_burn_before_protocol() -> None:
    pool = _pool(burn_balance=10_000, royalty_balance=5)
    thresholds = SweepThresholds(protocol=30, burn=10_000, royalty=100)

    swept, results = sweep_all(pool, CONFIG, thresholds)

    assert [r.sink for r in results] == [SINK_BURN, SINK_PROTOCOL, SINK_ROYALTY]
    # The conversion fee from the burn sweep is paid out in the same pass.
    assert results[1].swept == 30
    assert results[2].skipped
    assert swept.protocol_fee_balance == 0
    assert swept.royalty_balance == 5


def test_rewards_are_managed_by_the_rewards_manager_only() -> None:
    pool = _pool()

    pool = deposit_rewards(pool, CONFIG, "rewards", 1_000)
    assert pool.rewards_balance == 1_000
    pool = withdraw_rewards(pool, CONFIG, "rewards", 400)
    assert pool.rewards_balance == 600

    with pytest.raises(Unauthorized, match="rewards manager"):
        deposit_rewards(pool, CONFIG, "mallory", 1)
    with pytest.raises(Unauthorized, match="rewards manager"):
        withdraw_rewards(pool, CONFIG, "mallory", 1)
    with pytest.raises(InsufficientFunds):
        withdraw_rewards(pool, CONFIG, "rewards", 601)
    with pytest.raises(ZeroInput):
        deposit_rewards(pool, CONFIG, "rewards", 0)
    with pytest.raises(ZeroInput):
        withdraw_rewards(pool, CONFIG, "rewards", 0)

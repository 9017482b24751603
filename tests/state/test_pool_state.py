from __future__ import annotations

from dataclasses import replace

import pytest

from sinkswap.errors import InvalidFeeRate, InvalidPair, PoolAlreadyExists
from sinkswap.state.balances import BalanceTable
from sinkswap.state.lp import LPTable
from sinkswap.state.pools import (
    PoolFeeRates,
    PoolState,
    compute_pool_id,
    pool_digest,
    pool_from_dict,
    pool_to_dict,
)
from sinkswap.state.registry import PoolRegistry


def _pool(**overrides) -> PoolState:
    fields = dict(
        pool_id=compute_pool_id("tokA", "tokB"),
        kind_a="tokA",
        kind_b="tokB",
        reserve_a=1_000,
        reserve_b=4_000,
        lp_supply=2_000,
        fee_rates=PoolFeeRates(builder_fee_bp=100, burn_fee_bp=50, royalty_fee_bp=20, rewards_fee_bp=10),
        royalty_address="creator",
    )
    fields.update(overrides)
    return PoolState(**fields)


@pytest.mark.parametrize(
    "name, limit",
    [
        ("builder_fee_bp", 300),
        ("burn_fee_bp", 500),
        ("royalty_fee_bp", 100),
        ("rewards_fee_bp", 500),
    ],
)
def test_fee_rate_maxima(name: str, limit: int) -> None:
    assert getattr(PoolFeeRates(**{name: limit}), name) == limit
    with pytest.raises(InvalidFeeRate, match=name):
        PoolFeeRates(**{name: limit + 1})
    with pytest.raises(InvalidFeeRate):
        PoolFeeRates(**{name: -1})


def test_pool_id_is_deterministic_and_pair_specific() -> None:
    pid = compute_pool_id("tokA", "tokB")
    assert pid == compute_pool_id("tokA", "tokB")
    assert pid.startswith("0x") and len(pid) == 66
    assert pid != compute_pool_id("tokA", "tokC")
    # Length prefixes keep ("ab", "c") and ("a", "bc") apart.
    assert compute_pool_id("ab", "c") != compute_pool_id("a", "bc")
    with pytest.raises(InvalidPair):
        compute_pool_id("tokB", "tokA")


def test_pool_state_invariants() -> None:
    with pytest.raises(ValueError, match="empty LP supply"):
        _pool(lp_supply=0)
    with pytest.raises(ValueError, match="both reserves"):
        _pool(reserve_b=0)
    with pytest.raises(ValueError, match="locked_lp"):
        _pool(locked_lp=2_001)
    with pytest.raises(ValueError, match="reserve_a"):
        _pool(reserve_a=-1)
    with pytest.raises(ValueError, match="reserve_a"):
        _pool(reserve_a=1 << 64)
    with pytest.raises(InvalidPair):
        _pool(kind_a="tokB", kind_b="tokA")

    drained = _pool(reserve_a=0, reserve_b=0, lp_supply=0)
    assert drained.get_constant_product() == 0


def test_pool_state_accessors() -> None:
    pool = _pool(locked_lp=500)
    assert pool.is_a("tokA")
    assert not pool.is_a("tokB")
    assert pool.get_reserve("tokB") == 4_000
    assert pool.redeemable_lp == 1_500
    assert pool.get_constant_product() == 4_000_000
    with pytest.raises(InvalidPair, match="not in pool"):
        pool.is_a("tokC")


def test_snapshot_round_trip_and_digest() -> None:
    pool = _pool(protocol_fee_balance=7, burned_b_balance=3, locked_lp=10, created_at=1_700_000_000_000)
    snapshot = pool_to_dict(pool)

    assert snapshot["fee_rates"]["builder_fee_bp"] == 100
    assert pool_from_dict(snapshot) == pool
    assert pool_digest(pool) == pool_digest(pool_from_dict(snapshot))
    assert pool_digest(pool) != pool_digest(replace(pool, rewards_balance=1))


def test_pool_from_dict_requires_fee_rates() -> None:
    snapshot = pool_to_dict(_pool())
    del snapshot["fee_rates"]
    with pytest.raises(ValueError, match="fee_rates"):
        pool_from_dict(snapshot)


def test_registry_holds_one_pool_per_canonical_pair() -> None:
    registry = PoolRegistry()
    registry.insert("tokB", "tokC", "pool-bc")
    registry.insert("tokA", "tokB", "pool-ab")

    assert registry.lookup("tokA", "tokB") == "pool-ab"
    assert registry.lookup("tokA", "tokC") is None
    assert registry.contains("tokB", "tokC")
    assert registry.pairs() == [("tokA", "tokB"), ("tokB", "tokC")]
    assert len(registry) == 2

    with pytest.raises(PoolAlreadyExists):
        registry.insert("tokA", "tokB", "pool-ab-2")
    with pytest.raises(InvalidPair):
        registry.insert("tokC", "tokA", "pool-ca")
    with pytest.raises(InvalidPair):
        registry.lookup("tokB", "tokA")
    assert len(registry) == 2


def test_balance_and_lp_tables_stay_sparse() -> None:
    balances = BalanceTable()
    balances.add("alice", "tokA", 10)
    balances.add("bob", "tokA", 5)
    balances.subtract("alice", "tokA", 10)
    assert balances.get("alice", "tokA") == 0
    assert balances.total_supply("tokA") == 5
    assert ("alice", "tokA") not in balances.get_all_balances()
    with pytest.raises(ValueError, match="Insufficient balance"):
        balances.subtract("bob", "tokA", 6)

    lp = LPTable()
    lp.add("alice", "pool", 3)
    lp.add("bob", "pool", 4)
    lp.add("bob", "other", 9)
    assert lp.total_for_pool("pool") == 7
    with pytest.raises(ValueError, match="Insufficient LP balance"):
        lp.subtract("alice", "pool", 4)

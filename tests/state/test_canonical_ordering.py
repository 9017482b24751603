from __future__ import annotations

import itertools
import random

import pytest

from sinkswap.errors import InvalidPair
from sinkswap.state.canonical import (
    canonical_json_bytes,
    canonical_pair,
    compare_kinds,
    encode_uvarint,
    is_canonical_pair,
    require_canonical_pair,
)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("a", "b", -1),
        ("b", "a", 1),
        ("a", "a", 0),
        # A strict prefix sorts first.
        ("0x1::coin::A", "0x1::coin::AB", -1),
        # Byte order, not case-folded order.
        ("Z", "a", -1),
        ("é", "z", 1),
    ],
)
def test_compare_kinds(a: str, b: str, expected: int) -> None:
    assert compare_kinds(a, b) == expected


def test_compare_kinds_is_antisymmetric_and_transitive() -> None:
    rng = random.Random(99)
    alphabet = "ab:Zé"
    kinds = sorted({"".join(rng.choice(alphabet) for _ in range(rng.randint(1, 4))) for _ in range(40)})

    for a, b in itertools.product(kinds, repeat=2):
        assert compare_kinds(a, b) == -compare_kinds(b, a)
    for a, b, c in itertools.product(kinds[:15], repeat=3):
        if compare_kinds(a, b) < 0 and compare_kinds(b, c) < 0:
            assert compare_kinds(a, c) < 0


def test_canonical_pair_orders_and_rejects_identical_kinds() -> None:
    assert canonical_pair("tokB", "tokA") == ("tokA", "tokB")
    assert canonical_pair("tokA", "tokB") == ("tokA", "tokB")
    assert is_canonical_pair("tokA", "tokB")
    assert not is_canonical_pair("tokB", "tokA")
    with pytest.raises(InvalidPair, match="must differ"):
        canonical_pair("tokA", "tokA")


def test_require_canonical_pair() -> None:
    require_canonical_pair("tokA", "tokB")
    with pytest.raises(InvalidPair, match="canonical order"):
        require_canonical_pair("tokB", "tokA")
    with pytest.raises(InvalidPair, match="non-empty"):
        require_canonical_pair("", "tokB")


def test_canonical_json_is_compact_sorted_and_rejects_floats() -> None:
    assert canonical_json_bytes({"b": 1, "a": [2, "x"]}) == b'{"a":[2,"x"],"b":1}'
    with pytest.raises(TypeError, match="floats"):
        canonical_json_bytes({"a": 1.5})


def test_encode_uvarint() -> None:
    assert encode_uvarint(0) == b"\x00"
    assert encode_uvarint(127) == b"\x7f"
    assert encode_uvarint(300) == b"\xac\x02"
    with pytest.raises(ValueError):
        encode_uvarint(-1)

"""
Deterministic encodings and token-kind ordering.

Token kinds are identified by stable strings (for example a fully qualified
type name). Their order is the byte-wise lexicographic order of the UTF-8
encoding, so a strict prefix sorts before any longer identifier.

Hashed data (pool ids, state digests) is built from a NUL-terminated domain
tag followed by length-prefixed fields or compact sorted-key JSON.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Tuple

from ..errors import InvalidPair


TokenKind = str

DOMAIN_PREFIX = b"sinkswap:"


def _check_text(s: str) -> None:
    # Lone surrogates cannot be UTF-8 encoded.
    if any(0xD800 <= ord(ch) <= 0xDFFF for ch in s):
        raise TypeError("surrogate code points are not allowed in canonical encoding")


def _check_json_value(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, str):
        _check_text(value)
    elif isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _check_text(k)
            _check_json_value(v)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_json_value(item)


def canonical_json_bytes(value: Any) -> bytes:
    """UTF-8 JSON with sorted keys, no whitespace, and no floats or NaN."""
    _check_json_value(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """`sinkswap:<label>:v<version>\\x00` for an ASCII label."""
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label or not label.isascii():
        raise ValueError(f"label must be ASCII without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def encode_uvarint(value: int) -> bytes:
    """Unsigned LEB128."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"uvarint must be a non-negative int, got {value!r}")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_bytes(value: bytes) -> bytes:
    """Length-prefixed bytes."""
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError("value must be bytes")
    return encode_uvarint(len(value)) + bytes(value)


def kind_bytes(kind: TokenKind) -> bytes:
    """Stable byte encoding of a token kind."""
    if not isinstance(kind, str):
        raise TypeError("token kind must be a str")
    if not kind:
        raise InvalidPair("token kind must be non-empty")
    _check_text(kind)
    return kind.encode("utf-8")


def compare_kinds(kind_a: TokenKind, kind_b: TokenKind) -> int:
    """
    Byte-wise lexicographic comparison: -1, 0 or 1.

    A shorter identifier that is a prefix of the other sorts first.
    """
    a = kind_bytes(kind_a)
    b = kind_bytes(kind_b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_canonical_pair(kind_a: TokenKind, kind_b: TokenKind) -> bool:
    """True iff `kind_a` strictly precedes `kind_b`."""
    return compare_kinds(kind_a, kind_b) < 0


def require_canonical_pair(kind_a: TokenKind, kind_b: TokenKind) -> None:
    cmp = compare_kinds(kind_a, kind_b)
    if cmp == 0:
        raise InvalidPair(f"token kinds must differ: {kind_a!r}")
    if cmp > 0:
        raise InvalidPair(f"token kinds must be in canonical order: {kind_a!r} < {kind_b!r}")


def canonical_pair(kind_x: TokenKind, kind_y: TokenKind) -> Tuple[TokenKind, TokenKind]:
    """Order two distinct kinds as (A, B)."""
    cmp = compare_kinds(kind_x, kind_y)
    if cmp == 0:
        raise InvalidPair(f"token kinds must differ: {kind_x!r}")
    return (kind_x, kind_y) if cmp < 0 else (kind_y, kind_x)

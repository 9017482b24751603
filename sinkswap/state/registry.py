"""
Canonical pair registry: one pool per ordered token-kind pair.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..errors import PoolAlreadyExists
from .balances import TokenKind
from .canonical import require_canonical_pair


PairKey = Tuple[TokenKind, TokenKind]


class PoolRegistry:
    """
    Maps a canonical pair `(kind_a, kind_b)` with `kind_a < kind_b` to a pool id.

    Insertions are guarded by an existence check; entries are never removed.
    """

    def __init__(self) -> None:
        self._entries: Dict[PairKey, str] = {}

    def lookup(self, kind_a: TokenKind, kind_b: TokenKind) -> Optional[str]:
        require_canonical_pair(kind_a, kind_b)
        return self._entries.get((kind_a, kind_b))

    def contains(self, kind_a: TokenKind, kind_b: TokenKind) -> bool:
        return self.lookup(kind_a, kind_b) is not None

    def insert(self, kind_a: TokenKind, kind_b: TokenKind, pool_id: str) -> None:
        """Register a pool for the pair, failing if one already exists."""
        require_canonical_pair(kind_a, kind_b)
        key = (kind_a, kind_b)
        if key in self._entries:
            raise PoolAlreadyExists(f"pool already exists for ({kind_a}, {kind_b}): {self._entries[key]}")
        self._entries[key] = pool_id

    def pairs(self) -> List[PairKey]:
        """Registered pairs in canonical (byte-wise) order."""
        return sorted(self._entries, key=lambda k: (k[0].encode("utf-8"), k[1].encode("utf-8")))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self._entries)} pools)"

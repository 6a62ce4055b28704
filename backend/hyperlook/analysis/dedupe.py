"""Deduplication helpers for overlapping poll windows."""

from __future__ import annotations

from collections import OrderedDict

from hyperlook.search.models import Hit
from hyperlook.utils.hashing import sha256_text


def hit_key(hit: Hit) -> str:
    """Stable identity of a hit across polls."""
    if hit.id:
        return f"{hit.index}/{hit.id}"
    return "sha256:" + sha256_text(hit.model_dump_json(by_alias=True, exclude={"score"}))


class SeenWindow:
    """Bounded set of recently seen hit keys, evicting the stalest first.

    A key seen again moves back to the fresh end, so records that keep
    reappearing in consecutive polls are never evicted while still in the
    fetched window.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._keys: OrderedDict[str, None] = OrderedDict()

    def add(self, key: str) -> bool:
        """Record ``key``; return False when it was already present."""
        if key in self._keys:
            self._keys.move_to_end(key)
            return False
        self._keys[key] = None
        while len(self._keys) > self.capacity:
            self._keys.popitem(last=False)
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def clear(self) -> None:
        self._keys.clear()


__all__ = ["SeenWindow", "hit_key"]

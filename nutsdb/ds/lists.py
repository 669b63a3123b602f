"""In-memory list structure keyed by name, with optional per-key expiry."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..errors import NutsDBError

MIN_INT = -(2**63)
MAX_INT = 2**63 - 1


class ListNotFoundError(NutsDBError):
    """The list does not exist, has expired or is empty."""

    default_message = "the list not found"


class IndexOutOfRangeError(NutsDBError):
    """An index lies outside the list."""

    default_message = "index out of range"


class CountError(NutsDBError):
    """The count is larger than the list."""

    default_message = "err count"


class MinIntError(NutsDBError):
    """The count is the smallest integer and cannot be negated."""

    default_message = "err MinInt"


def _valid_indexes(length: int, indexes: Iterable[int]) -> Iterator[int]:
    """Yield the usable indexes of an ascending index sequence."""
    previous = -1
    for index in indexes:
        if index < 0 or index == previous:
            continue
        if index >= length:
            break
        yield index
        previous = index


@dataclass
class List:
    """Lists of byte strings stored under string keys."""

    items: dict[str, list[bytes]] = field(default_factory=dict)
    ttl: dict[str, int] = field(default_factory=dict)
    timestamp: dict[str, int] = field(default_factory=dict)

    def _require(self, key: str) -> list[bytes]:
        if self.is_expire(key) or key not in self.items:
            raise ListNotFoundError()
        return self.items[key]

    def rpop(self, key: str) -> bytes:
        """Remove and return the last element of the list at ``key``."""
        item = self.rpeek(key)
        self.items[key] = self.items[key][:-1]
        return item

    def rpeek(self, key: str) -> bytes:
        """Return the last element of the list at ``key``."""
        items = self._require(key)
        if not items:
            raise ListNotFoundError()
        return items[-1]

    def rpush(self, key: str, *values: bytes) -> int:
        """Append values to the tail of the list; return the new size."""
        if self.is_expire(key):
            raise ListNotFoundError()
        self.items.setdefault(key, []).extend(values)
        return len(self.items[key])

    def lpush(self, key: str, *values: bytes) -> int:
        """Insert values at the head of the list, each ahead of the last; return the new size."""
        if self.is_expire(key):
            raise ListNotFoundError()
        self.items[key] = list(reversed(values)) + self.items.get(key, [])
        return len(self.items[key])

    def lpop(self, key: str) -> bytes:
        """Remove and return the first element of the list at ``key``."""
        item = self.lpeek(key)
        self.items[key] = self.items[key][1:]
        return item

    def lpeek(self, key: str) -> bytes:
        """Return the first element of the list at ``key``."""
        items = self._require(key)
        if not items:
            raise ListNotFoundError()
        return items[0]

    def size(self, key: str) -> int:
        """Number of elements in the list at ``key``."""
        return len(self._require(key))

    def lrange(self, key: str, start: int, end: int) -> list[bytes]:
        """Elements from ``start`` to ``end`` inclusive; negative indexes count from the tail."""
        items = self._require(key)
        size = len(items)
        if size == 0:
            return []
        if start >= 0 and end < 0:
            end = size + end
        if start < 0 and end > 0:
            start = size + start
        if start < 0 and end < 0:
            start, end = size + start, size + end
        if end >= size:
            end = size - 1
        if start > end or start < 0:
            raise NutsDBError("start or end error")
        return items[start : end + 1]

    def lrem(self, key: str, count: int, value: bytes) -> int:
        """Remove up to ``count`` elements equal to ``value``.

        A positive count removes from head to tail, a negative one from tail
        to head, and zero removes every match. Returns the number removed.
        """
        items = self._require(key)
        needed = self.lrem_num(key, count, value)
        if needed == 0:
            return 0
        if count == 0:
            count = needed
        limit = abs(count)
        removed = 0
        kept: list[bytes] = []
        for item in items if count > 0 else reversed(items):
            if removed < limit and item == value:
                removed += 1
            else:
                kept.append(item)
        if count < 0:
            kept.reverse()
        self.items[key] = kept
        return removed

    def lrem_num(self, key: str, count: int, value: bytes) -> int:
        """Number of elements that ``lrem`` with these arguments would remove."""
        items = self._require(key)
        if count > len(items):
            raise CountError()
        if count < 0:
            if count == MIN_INT:
                raise MinIntError()
            count = -count
        matches = sum(1 for item in items if item == value)
        return min(matches, count) if count > 0 else matches

    def lset(self, key: str, index: int, value: bytes) -> None:
        """Replace the element at ``index``."""
        items = self._require(key)
        if not 0 <= index < len(items):
            raise IndexOutOfRangeError()
        items[index] = value

    def ltrim(self, key: str, start: int, end: int) -> None:
        """Keep only the elements from ``start`` to ``end`` inclusive."""
        self._require(key)
        self.items[key] = self.lrange(key, start, end)

    def lrem_by_index(self, key: str, indexes: Iterable[int]) -> int:
        """Remove the elements at the given ascending indexes; return the number removed."""
        items = self._require(key)
        doomed = set(_valid_indexes(len(items), indexes))
        if not doomed:
            return 0
        self.items[key] = [item for i, item in enumerate(items) if i not in doomed]
        return len(doomed)

    def lrem_by_index_pre_check(self, key: str, indexes: Iterable[int]) -> int:
        """Number of usable indexes among the given ascending indexes."""
        items = self._require(key)
        return sum(1 for _ in _valid_indexes(len(items), indexes))

    def is_expire(self, key: str) -> bool:
        """True if the list has expired; an expired list is dropped."""
        if key not in self.ttl:
            return False
        ttl = self.ttl[key]
        if ttl == 0 or ttl + self.timestamp.get(key, 0) > int(time.time()):
            return False
        self.items.pop(key, None)
        self.ttl.pop(key, None)
        self.timestamp.pop(key, None)
        return True

    def is_empty(self, key: str) -> bool:
        """True if the list at ``key`` exists and has no elements."""
        return self.size(key) == 0

    def get_list_ttl(self, key: str) -> int:
        """Seconds left before the list expires, or 0 if it never does."""
        if self.is_expire(key):
            raise ListNotFoundError()
        ttl = self.ttl.get(key, 0)
        stamp = self.timestamp.get(key, 0)
        if ttl == 0 or stamp == 0:
            return 0
        return (stamp + ttl - int(time.time())) & 0xFFFFFFFF
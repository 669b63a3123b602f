"""A sorted set backed by a skip list, ordered by score and then key."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator

SKIP_LIST_MAX_LEVEL = 32
SKIP_LIST_P = 0.25

_MAX_LIMIT = (1 << 31) - 1


class _Level:
    __slots__ = ("forward", "span")

    def __init__(self) -> None:
        self.forward: SortedSetNode | None = None
        self.span = 0


class SortedSetNode:
    """A member of a sorted set: a unique key, a score and an associated value."""

    __slots__ = ("_key", "_score", "value", "backward", "levels")

    def __init__(self, level: int, score: float, key: str, value: bytes | None) -> None:
        self._key = key
        self._score = score
        self.value = value
        self.backward: SortedSetNode | None = None
        self.levels = [_Level() for _ in range(level)]

    @property
    def key(self) -> str:
        """The unique key of the node."""
        return self._key

    @property
    def score(self) -> float:
        """The score that orders the node within the set."""
        return self._score

    def __repr__(self) -> str:
        return f"SortedSetNode(key={self._key!r}, score={self._score!r}, value={self.value!r})"


@dataclass
class GetByScoreRangeOptions:
    """Options of a score range query."""

    limit: int = 0
    exclude_start: bool = False
    exclude_end: bool = False


def _random_level() -> int:
    """A level between 1 and the maximum, higher levels being less likely."""
    level = 1
    while random.getrandbits(16) < SKIP_LIST_P * 0xFFFF:
        level += 1
    return min(level, SKIP_LIST_MAX_LEVEL)


def _precedes(node: SortedSetNode, score: float, key: str) -> bool:
    return node._score < score or (node._score == score and node._key < key)


class SortedSet:
    """Members kept in order of score, ties broken by key."""

    def __init__(self) -> None:
        self._header = SortedSetNode(SKIP_LIST_MAX_LEVEL, 0, "", None)
        self._tail: SortedSetNode | None = None
        self._length = 0
        self._level = 1
        self.members: dict[str, SortedSetNode] = {}

    def __len__(self) -> int:
        return self._length

    def __contains__(self, key: object) -> bool:
        return key in self.members

    def __iter__(self) -> Iterator[SortedSetNode]:
        node = self._header.levels[0].forward
        while node is not None:
            yield node
            node = node.levels[0].forward

    def _insert_node(self, score: float, key: str, value: bytes | None) -> SortedSetNode:
        update: list[SortedSetNode | None] = [None] * SKIP_LIST_MAX_LEVEL
        rank = [0] * SKIP_LIST_MAX_LEVEL

        x = self._header
        for i in range(self._level - 1, -1, -1):
            rank[i] = 0 if i == self._level - 1 else rank[i + 1]
            while (fw := x.levels[i].forward) is not None and _precedes(fw, score, key):
                rank[i] += x.levels[i].span
                x = fw
            update[i] = x

        level = _random_level()
        if level > self._level:
            for i in range(self._level, level):
                rank[i] = 0
                update[i] = self._header
                self._header.levels[i].span = self._length
            self._level = level

        node = SortedSetNode(level, score, key, value)
        for i in range(level):
            prev = update[i]
            node.levels[i].forward = prev.levels[i].forward
            prev.levels[i].forward = node
            node.levels[i].span = prev.levels[i].span - (rank[0] - rank[i])
            prev.levels[i].span = (rank[0] - rank[i]) + 1

        for i in range(level, self._level):
            update[i].levels[i].span += 1

        node.backward = None if update[0] is self._header else update[0]
        if node.levels[0].forward is not None:
            node.levels[0].forward.backward = node
        else:
            self._tail = node

        self._length += 1
        return node

    def _delete_node(self, x: SortedSetNode, update: list) -> None:
        for i in range(self._level):
            prev = update[i]
            if prev.levels[i].forward is x:
                prev.levels[i].span += x.levels[i].span - 1
                prev.levels[i].forward = x.levels[i].forward
            else:
                prev.levels[i].span -= 1
        if x.levels[0].forward is not None:
            x.levels[0].forward.backward = x.backward
        else:
            self._tail = x.backward
        while self._level > 1 and self._header.levels[self._level - 1].forward is None:
            self._level -= 1
        self._length -= 1
        self.members.pop(x._key, None)

    def _delete(self, score: float, key: str) -> bool:
        update: list[SortedSetNode | None] = [None] * SKIP_LIST_MAX_LEVEL
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fw := x.levels[i].forward) is not None and _precedes(fw, score, key):
                x = fw
            update[i] = x
        target = x.levels[0].forward
        if target is not None and target._score == score and target._key == key:
            self._delete_node(target, update)
            return True
        return False

    def size(self) -> int:
        """Number of members."""
        return self._length

    def peek_min(self) -> SortedSetNode | None:
        """The member with the lowest score, or None if the set is empty."""
        return self._header.levels[0].forward

    def pop_min(self) -> SortedSetNode | None:
        """Remove and return the member with the lowest score, or None."""
        node = self._header.levels[0].forward
        if node is not None:
            self.remove(node._key)
        return node

    def peek_max(self) -> SortedSetNode | None:
        """The member with the highest score, or None if the set is empty."""
        return self._tail

    def pop_max(self) -> SortedSetNode | None:
        """Remove and return the member with the highest score, or None."""
        node = self._tail
        if node is not None:
            self.remove(node._key)
        return node

    def put(self, key: str, score: float, value: bytes | None) -> None:
        """Add a member, or update the score and value of an existing one."""
        existing = self.members.get(key)
        if existing is not None and existing._score == score:
            existing.value = value
            return
        if existing is not None:
            self._delete(existing._score, existing._key)
        self.members[key] = self._insert_node(score, key, value)

    def remove(self, key: str) -> SortedSetNode | None:
        """Remove and return the member at ``key``, or None if absent."""
        found = self.members.get(key)
        if found is not None:
            self._delete(found._score, found._key)
        return found

    def get_by_score_range(
        self,
        start: float,
        end: float,
        options: GetByScoreRangeOptions | None = None,
    ) -> list[SortedSetNode]:
        """Members whose score lies between ``start`` and ``end``.

        Without options the interval is closed and unlimited. If ``start`` is
        greater than ``end`` the members come from high to low.
        """
        limit = _MAX_LIMIT
        if options is not None and options.limit > 0:
            limit = options.limit
        exclude_start = options is not None and options.exclude_start
        exclude_end = options is not None and options.exclude_end

        reverse = start > end
        if reverse:
            start, end = end, start
            exclude_start, exclude_end = exclude_end, exclude_start

        if self._length == 0:
            return []
        if reverse:
            return self._search_reverse(exclude_start, exclude_end, start, end, limit)
        return self._search_forward(exclude_start, exclude_end, start, end, limit)

    def _search_forward(
        self, exclude_start: bool, exclude_end: bool, start: float, end: float, limit: int
    ) -> list[SortedSetNode]:
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fw := x.levels[i].forward) is not None and (
                fw._score <= start if exclude_start else fw._score < start
            ):
                x = fw

        nodes: list[SortedSetNode] = []
        node = x.levels[0].forward
        while node is not None and limit > 0:
            if (node._score >= end) if exclude_end else (node._score > end):
                break
            nodes.append(node)
            limit -= 1
            node = node.levels[0].forward
        return nodes

    def _search_reverse(
        self, exclude_start: bool, exclude_end: bool, start: float, end: float, limit: int
    ) -> list[SortedSetNode]:
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fw := x.levels[i].forward) is not None and (
                fw._score < end if exclude_end else fw._score <= end
            ):
                x = fw

        nodes: list[SortedSetNode] = []
        node: SortedSetNode | None = None if x is self._header else x
        while node is not None and limit > 0:
            if (node._score <= start) if exclude_start else (node._score < start):
                break
            nodes.append(node)
            limit -= 1
            node = node.backward
        return nodes

    def _sanitize_indexes(self, start: int, end: int) -> tuple[int, int]:
        if start < 0:
            start = self._length + start + 1
        if end < 0:
            end = self._length + end + 1
        return max(start, 1), max(end, 1)

    def get_by_rank_range(self, start: int, end: int, remove: bool) -> list[SortedSetNode]:
        """Members with 1-based ranks from ``start`` to ``end`` inclusive.

        Negative ranks count from the end; -1 is the last member. If ``start``
        is greater than ``end`` the result is in reverse order. With ``remove``
        the returned members are removed from the set.
        """
        update: list[SortedSetNode | None] = [None] * SKIP_LIST_MAX_LEVEL
        start, end = self._sanitize_indexes(start, end)
        reverse = start > end
        if reverse:
            start, end = end, start

        traversed = 0
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fw := x.levels[i].forward) is not None and traversed + x.levels[i].span < start:
                traversed += x.levels[i].span
                x = fw
            if remove:
                update[i] = x
            elif traversed + 1 == start:
                break

        nodes: list[SortedSetNode] = []
        traversed += 1
        node = x.levels[0].forward
        while node is not None and traversed <= end:
            following = node.levels[0].forward
            nodes.append(node)
            if remove:
                self._delete_node(node, update)
            traversed += 1
            node = following

        if reverse:
            nodes.reverse()
        return nodes

    def get_by_rank(self, rank: int, remove: bool) -> SortedSetNode | None:
        """The member at the 1-based ``rank``, or None; removed if ``remove``."""
        nodes = self.get_by_rank_range(rank, rank, remove)
        return nodes[0] if len(nodes) == 1 else None

    def get_by_key(self, key: str) -> SortedSetNode | None:
        """The member at ``key``, or None."""
        return self.members.get(key)

    def find_rank(self, key: str) -> int:
        """1-based rank of ``key`` from low to high score, or 0 if absent."""
        node = self.members.get(key)
        if node is None:
            return 0
        rank = 0
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fw := x.levels[i].forward) is not None and (
                fw._score < node._score or (fw._score == node._score and fw._key <= node._key)
            ):
                rank += x.levels[i].span
                x = fw
            if x._key == key:
                return rank
        return 0

    def find_rev_rank(self, key: str) -> int:
        """1-based rank of ``key`` from high to low score, or 0 if absent."""
        if self._length == 0 or key not in self.members:
            return 0
        return self.size() - self.find_rank(key) + 1
"""In-memory sets of byte strings keyed by name."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import NutsDBError


class SetKeyNotFoundError(NutsDBError):
    """The set was not found."""

    default_message = "key not found"


class SetKeyNotExistError(NutsDBError):
    """The set does not exist."""

    default_message = "key not exist"


class ItemEmptyError(NutsDBError):
    """No item was given."""

    default_message = "item empty"


@dataclass
class Set:
    """Sets of byte strings stored under string keys."""

    m: dict[str, set[bytes]] = field(default_factory=dict)

    def _require_both(self, key1: str, key2: str) -> tuple[set[bytes], set[bytes]]:
        if key1 not in self.m:
            raise SetKeyNotExistError("set1 is not exists")
        if key2 not in self.m:
            raise SetKeyNotExistError("set2 is not exists")
        return self.m[key1], self.m[key2]

    def sadd(self, key: str, *items: bytes) -> None:
        """Add members to the set at ``key``, creating it if needed."""
        self.m.setdefault(key, set()).update(bytes(item) for item in items)

    def srem(self, key: str, *items: bytes) -> None:
        """Remove members from the set at ``key``."""
        if key not in self.m:
            raise SetKeyNotFoundError()
        if not items or items[0] is None:
            raise ItemEmptyError()
        for item in items:
            self.m[key].discard(bytes(item))

    def shas_key(self, key: str) -> bool:
        """True if a set exists at ``key``."""
        return key in self.m

    def spop(self, key: str) -> bytes | None:
        """Remove and return an arbitrary member, or None if there is none."""
        members = self.m.get(key)
        if not members:
            return None
        return members.pop()

    def scard(self, key: str) -> int:
        """Number of members of the set at ``key``; 0 if it does not exist."""
        return len(self.m.get(key, ()))

    def sdiff(self, key1: str, key2: str) -> list[bytes]:
        """Members of the first set that are not in the second."""
        first, second = self._require_both(key1, key2)
        return [item for item in first if item not in second]

    def sinter(self, key1: str, key2: str) -> list[bytes]:
        """Members present in both sets."""
        first, second = self._require_both(key1, key2)
        return [item for item in first if item in second]

    def sis_member(self, key: str, item: bytes) -> bool:
        """True if ``item`` is a member of the set at ``key``."""
        return bytes(item) in self.m.get(key, ())

    def sare_members(self, key: str, *items: bytes) -> bool:
        """True if every item is a member; raises if the set or an item is missing."""
        if key not in self.m:
            raise SetKeyNotExistError()
        members = self.m[key]
        if any(bytes(item) not in members for item in items):
            raise NutsDBError("item not exits")
        return True

    def smembers(self, key: str) -> list[bytes]:
        """All members of the set at ``key``."""
        if key not in self.m:
            raise SetKeyNotExistError("set not exists")
        return list(self.m[key])

    def smove(self, key1: str, key2: str, item: bytes) -> bool:
        """Move ``item`` from the set at ``key1`` to the set at ``key2``."""
        if key1 not in self.m:
            raise SetKeyNotExistError("key1 is not exists")
        if key2 not in self.m:
            raise SetKeyNotExistError("key2 is not exists")
        item = bytes(item)
        self.m[key2].add(item)
        self.m[key1].discard(item)
        return True

    def sunion(self, key1: str, key2: str) -> list[bytes]:
        """Members of either set, each once."""
        first, second = self._require_both(key1, key2)
        return list(first) + [item for item in second if item not in first]
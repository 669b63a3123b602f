"""An LRU cache of open file handles."""

from __future__ import annotations

import contextlib
import errno
import math
import os
import threading
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

DEFAULT_MAX_FILE_NUMS = 256


@dataclass(eq=False)
class FdInfo:
    """A cached file handle and its reference count."""

    fd: BinaryIO | None = None
    path: str = ""
    using: int = 0
    next: FdInfo | None = field(default=None, repr=False)
    prev: FdInfo | None = field(default=None, repr=False)


class DoubleLinkedList:
    """Doubly linked list of FdInfo nodes between two sentinels; most recent first."""

    def __init__(self) -> None:
        self.head = FdInfo()
        self.tail = FdInfo()
        self.head.next = self.tail
        self.tail.prev = self.head

    def add_node(self, node: FdInfo) -> None:
        """Insert ``node`` at the front."""
        first = self.head.next
        first.prev = node
        node.next = first
        self.head.next = node
        node.prev = self.head

    def remove_node(self, node: FdInfo) -> None:
        """Unlink ``node`` from the list."""
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = None
        node.next = None

    def move_node_to_front(self, node: FdInfo) -> None:
        """Move ``node`` to the front."""
        self.remove_node(node)
        self.add_node(node)

    def clear(self) -> None:
        self.head.next = self.tail
        self.tail.prev = self.head

    def __iter__(self) -> Iterator[FdInfo]:
        node = self.head.next
        while node is not self.tail:
            yield node
            node = node.next

    def __reversed__(self) -> Iterator[FdInfo]:
        node = self.tail.prev
        while node is not self.head:
            yield node
            node = node.prev


def _open_file(path: str) -> BinaryIO:
    fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o644)
    try:
        return os.fdopen(fd, "r+b")
    except BaseException:
        os.close(fd)
        raise


class FdManager:
    """Caches open files by path, closing unused ones when the cache grows."""

    def __init__(self, max_fd_nums: int = 0, clean_threshold: float = 0.0) -> None:
        self._lock = threading.RLock()
        self.cache: dict[str, FdInfo] = {}
        self.fd_list = DoubleLinkedList()
        self.size = 0
        self.max_fd_nums = DEFAULT_MAX_FILE_NUMS
        self.clean_threshold_nums = math.floor(0.5 * self.max_fd_nums)
        if max_fd_nums > 0:
            self.max_fd_nums = max_fd_nums
        if 0.0 < clean_threshold < 1.0:
            self.clean_threshold_nums = math.floor(clean_threshold * self.max_fd_nums)

    def __enter__(self) -> FdManager:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_fd(self, path: str) -> BinaryIO:
        """Return an open file for ``path``, from the cache when possible."""
        with self._lock:
            clean_path = os.path.normpath(path)
            info = self.cache.get(clean_path)
            if info is not None:
                info.using += 1
                self.fd_list.move_node_to_front(info)
                return info.fd

            try:
                fd = _open_file(clean_path)
            except OSError as exc:
                if exc.errno != errno.EMFILE:
                    raise
                try:
                    self._clean_useless_fd()
                except OSError:
                    raise exc from None
                fd = _open_file(clean_path)
                self._add_to_cache(fd, clean_path)
                return fd

            if self.size >= self.clean_threshold_nums:
                # A failure to close stale handles does not affect the new one.
                with contextlib.suppress(OSError):
                    self._clean_useless_fd()
            if self.size >= self.max_fd_nums:
                return fd
            self._add_to_cache(fd, clean_path)
            return fd

    def _add_to_cache(self, fd: BinaryIO, clean_path: str) -> None:
        info = FdInfo(fd=fd, path=clean_path, using=1)
        self.fd_list.add_node(info)
        self.size += 1
        self.cache[clean_path] = info

    def reduce_using(self, path: str) -> None:
        """Release one use of the cached file at ``path``."""
        with self._lock:
            clean_path = os.path.normpath(path)
            info = self.cache.get(clean_path)
            if info is None:
                raise KeyError(f"unexpected the node is not in cache: {clean_path}")
            info.using -= 1

    def close(self) -> None:
        """Close every cached file and empty the cache."""
        with self._lock:
            for node in list(reversed(self.fd_list)):
                node.fd.close()
                self.cache.pop(node.path, None)
                self.size -= 1
            self.fd_list.clear()

    def clean_useless_fd(self) -> None:
        """Close unused files, least recently used first, up to the threshold."""
        with self._lock:
            self._clean_useless_fd()

    def _clean_useless_fd(self) -> None:
        remaining = self.clean_threshold_nums
        for node in list(reversed(self.fd_list)):
            if remaining <= 0:
                break
            if node.using == 0:
                self.fd_list.remove_node(node)
                node.fd.close()
                self.size -= 1
                self.cache.pop(node.path, None)
                remaining -= 1

    def close_by_path(self, path: str) -> None:
        """Close the cached file at ``path``, if any."""
        with self._lock:
            info = self.cache.pop(os.path.normpath(path), None)
            if info is None:
                return
            self.fd_list.remove_node(info)
            self.size -= 1
            info.fd.close()
"""On-disk data entries: metadata, encoding and decoding."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass, field

from .errors import NutsDBError

DATA_ENTRY_HEADER_SIZE = 42

# crc, timestamp, key size, value size, flag, ttl, bucket size, status, ds, tx id
_HEADER = struct.Struct("<IQIIHIIHHQ")


class PayloadSizeMismatchError(NutsDBError):
    """The payload size recorded in the metadata does not match the data."""

    default_message = "the payload size in meta mismatch with the payload size needed"


@dataclass
class MetaData:
    """Meta information of a data item."""

    key_size: int = 0
    value_size: int = 0
    timestamp: int = 0
    ttl: int = 0
    flag: int = 0
    bucket_size: int = 0
    tx_id: int = 0
    status: int = 0
    ds: int = 0
    crc: int = 0

    def payload_size(self) -> int:
        """Total size of bucket, key and value."""
        return self.bucket_size + self.key_size + self.value_size


def _fit(data: bytes, size: int) -> bytes:
    return bytes(data[:size]).ljust(size, b"\0")


@dataclass
class Entry:
    """A data item stored in a data file."""

    key: bytes = b""
    value: bytes = b""
    bucket: bytes = b""
    meta: MetaData = field(default_factory=MetaData)

    def size(self) -> int:
        """Encoded size of the entry in bytes."""
        m = self.meta
        return DATA_ENTRY_HEADER_SIZE + m.key_size + m.value_size + m.bucket_size

    def _header(self) -> bytes:
        m = self.meta
        return _HEADER.pack(
            m.crc,
            m.timestamp,
            m.key_size,
            m.value_size,
            m.flag,
            m.ttl,
            m.bucket_size,
            m.status,
            m.ds,
            m.tx_id,
        )

    def encode(self) -> bytes:
        """Encode the entry: header, bucket, key, value, with a leading crc."""
        m = self.meta
        body = (
            self._header()[4:]
            + _fit(self.bucket, m.bucket_size)
            + _fit(self.key, m.key_size)
            + _fit(self.value, m.value_size)
        )
        return struct.pack("<I", zlib.crc32(body)) + body

    def is_zero(self) -> bool:
        """True if the entry carries no data."""
        m = self.meta
        return m.crc == 0 and m.key_size == 0 and m.value_size == 0 and m.timestamp == 0

    def get_crc(self, buf: bytes) -> int:
        """Crc over the header in ``buf`` (after its crc field) and the payload."""
        crc = zlib.crc32(bytes(buf[4:]))
        crc = zlib.crc32(self.bucket, crc)
        crc = zlib.crc32(self.key, crc)
        return zlib.crc32(self.value, crc)

    def parse_payload(self, data: bytes) -> None:
        """Split ``data`` into bucket, key and value using the metadata sizes."""
        m = self.meta
        if len(data) < m.payload_size():
            raise PayloadSizeMismatchError()
        key_start = m.bucket_size
        value_start = key_start + m.key_size
        value_end = value_start + m.value_size
        self.bucket = bytes(data[:key_start])
        self.key = bytes(data[key_start:value_start])
        self.value = bytes(data[value_start:value_end])

    def parse_meta(self, buf: bytes) -> MetaData:
        """Decode the header at the start of ``buf`` into the entry's metadata."""
        if len(buf) < DATA_ENTRY_HEADER_SIZE:
            raise ValueError(
                f"entry header needs {DATA_ENTRY_HEADER_SIZE} bytes, got {len(buf)}"
            )
        (
            crc,
            timestamp,
            key_size,
            value_size,
            flag,
            ttl,
            bucket_size,
            status,
            ds,
            tx_id,
        ) = _HEADER.unpack_from(buf)
        self.meta = MetaData(
            key_size=key_size,
            value_size=value_size,
            timestamp=timestamp,
            ttl=ttl,
            flag=flag,
            bucket_size=bucket_size,
            tx_id=tx_id,
            status=status,
            ds=ds,
            crc=crc,
        )
        return self.meta

    def check_payload_size(self, size: int) -> None:
        """Raise if ``size`` differs from the payload size in the metadata."""
        if self.meta.payload_size() != size:
            raise PayloadSizeMismatchError()


@dataclass
class Hint:
    """Index record locating a key inside a data file."""

    key: bytes = b""
    file_id: int = 0
    meta: MetaData = field(default_factory=MetaData)
    data_pos: int = 0
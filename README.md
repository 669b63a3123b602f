# nutsdb

Building blocks of an embedded key/value store, in pure Python with no
runtime dependencies.

## Modules

- `nutsdb.entry` – the on-disk record format. `MetaData` holds the header
  fields (sizes, timestamp, TTL, flag, status, data structure, transaction id,
  crc); `Entry` encodes itself as a 42-byte little-endian header followed by
  bucket, key and value, with a CRC32 over everything after the crc field.
  `Entry.parse_meta` and `Entry.parse_payload` decode a header and a payload;
  `Entry.check_payload_size` raises `PayloadSizeMismatchError` when sizes
  disagree. `Hint` locates a key inside a data file.
- `nutsdb.fd_manager` – `FdManager`, a cache of open files keyed by normalised
  path, kept in least-recently-used order in a `DoubleLinkedList` of `FdInfo`
  nodes. Each `get_fd` counts a use and `reduce_using` releases one; once the
  cache reaches its clean threshold, unused files are closed oldest first. The
  manager can be used as a context manager, which closes every cached file.
- `nutsdb.ds.lists` – `List`, lists of byte strings per key: `rpush`, `lpush`,
  `rpop`, `lpop`, `rpeek`, `lpeek`, `size`, `lrange`, `lrem`, `lrem_num`,
  `lset`, `ltrim`, `lrem_by_index`, `lrem_by_index_pre_check`, `is_empty`,
  plus per-key expiry through its `ttl` and `timestamp` maps (`is_expire`,
  `get_list_ttl`). Missing, expired or empty lists raise `ListNotFoundError`.
- `nutsdb.ds.sets` – `Set`, sets of byte strings per key: `sadd`, `srem`,
  `shas_key`, `spop`, `scard`, `sdiff`, `sinter`, `sunion`, `sis_member`,
  `sare_members`, `smembers`, `smove`.
- `nutsdb.ds.zset` – `SortedSet`, a skip list ordered by score and then key,
  with `put`, `remove`, `peek_min`/`peek_max`, `pop_min`/`pop_max`,
  `get_by_key`, `get_by_rank`, `get_by_rank_range`, `get_by_score_range`
  (with `GetByScoreRangeOptions` for a limit and open ends), `find_rank` and
  `find_rev_rank`. It also supports `len()`, `in` and iteration in order.
- `nutsdb.errors` – `NutsDBError` and its subclasses, and `is_*` helpers that
  recognise an error even when it is chained as the cause or context of
  another.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Encoding an entry:

```python
from nutsdb.entry import Entry, MetaData

meta = MetaData(key_size=8, value_size=8, bucket_size=10, timestamp=1547707905, flag=1)
entry = Entry(key=b"key_0001", value=b"val_0001", bucket=b"test_entry", meta=meta)
data = entry.encode()
assert entry.size() == len(data)
```

Lists:

```python
from nutsdb.ds.lists import List

lst = List()
lst.rpush("myList", b"a", b"b", b"c")
lst.lpush("myList", b"z")
assert lst.lrange("myList", 0, -1) == [b"z", b"a", b"b", b"c"]
assert lst.lpop("myList") == b"z"
```

Sets:

```python
from nutsdb.ds.sets import Set

s = Set()
s.sadd("s1", b"a", b"b", b"c")
s.sadd("s2", b"c", b"d")
assert sorted(s.sdiff("s1", "s2")) == [b"a", b"b"]
```

Sorted sets:

```python
from nutsdb.ds.zset import SortedSet, GetByScoreRangeOptions

ss = SortedSet()
ss.put("key1", 1, b"a")
ss.put("key2", 10, b"b")
ss.put("key3", 99.9, b"c")
assert ss.find_rank("key2") == 2
nodes = ss.get_by_score_range(5, 100, GetByScoreRangeOptions(limit=1))
assert [n.key for n in nodes] == ["key2"]
```

Errors:

```python
from nutsdb.errors import KeyNotFoundError, is_key_not_found

try:
    raise RuntimeError("lookup failed") from KeyNotFoundError()
except RuntimeError as exc:
    assert is_key_not_found(exc)
```

## What this package does not do

These are the parts a key/value store is built from, not the store itself.
There is no database to open, no buckets, transactions, data files, indexes,
merging or memory-mapped I/O, and no command-line tool or server. The data
structures live in memory only; nothing here writes them to disk.
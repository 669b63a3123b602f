import random

import pytest

from nutsdb.ds.zset import GetByScoreRangeOptions, SortedSet


@pytest.fixture
def ss():
    s = SortedSet()
    s.put("key1", 1, b"a")
    s.put("key2", 10, b"b")
    s.put("key3", 99.9, b"c")
    s.put("key4", 100, b"d")
    s.put("key5", 100, b"b1")
    return s


def test_put(ss):
    assert ss.size() == 5
    ss.put("key5", 100, b"b2")
    assert ss.get_by_key("key5").value == b"b2"
    assert ss.size() == 5
    ss.put("key5", 91, b"b2")
    assert ss.get_by_key("key5").score == 91
    assert ss.size() == 5


def test_get_by_key(ss):
    assert ss.get_by_key("key1").value == b"a"
    assert ss.get_by_key("missing") is None


def test_get_by_rank(ss):
    assert ss.get_by_rank(1, False).value == b"a"
    assert ss.get_by_rank(4, False).value == b"d"
    assert ss.get_by_rank(5, False).value == b"b1"
    assert ss.size() == 5

    n = ss.get_by_rank(5, True)
    assert n.value == b"b1"
    assert ss.size() == 4

    assert ss.get_by_rank(-1, False).key == "key4"
    assert ss.get_by_rank(-3, False).key == "key2"


@pytest.mark.parametrize(
    "start,end,want",
    [
        (1, 2, ["key1", "key2"]),
        (-1, -2, ["key5", "key4"]),
        (-2, -1, ["key4", "key5"]),
        (-1, 1, ["key5", "key4", "key3", "key2", "key1"]),
        (1, -1, ["key1", "key2", "key3", "key4", "key5"]),
    ],
)
def test_get_by_rank_range(ss, start, end, want):
    assert [n.key for n in ss.get_by_rank_range(start, end, False)] == want


def test_get_by_rank_range_remove(ss):
    removed = ss.get_by_rank_range(1, 2, True)
    assert [n.key for n in removed] == ["key1", "key2"]
    assert ss.size() == 3
    assert [n.key for n in ss.get_by_rank_range(1, -1, False)] == ["key3", "key4", "key5"]
    assert ss.get_by_key("key1") is None


def test_find_rank():
    s = SortedSet()
    s.put("key0", 0, b"a0")
    assert s.find_rank("key1") == 0

    s = SortedSet()
    for key, score, value in [
        ("key1", 1, b"a"),
        ("key2", 10, b"b"),
        ("key3", 99.9, b"c"),
        ("key4", 100, b"d"),
        ("key5", 100, b"b1"),
    ]:
        s.put(key, score, value)
    assert s.find_rank("key1") == 1
    assert s.find_rank("key4") == 4
    assert s.find_rank("key5") == 5


def test_find_rev_rank(ss):
    empty = SortedSet()
    assert empty.find_rev_rank("key1") == 0
    empty.put("key0", 0, b"a0")
    assert empty.find_rev_rank("key1") == 0

    assert ss.find_rev_rank("key1") == 5
    assert ss.find_rev_rank("key2") == 4
    assert ss.find_rev_rank("key3") == 3
    assert ss.find_rev_rank("key5") == 1


@pytest.mark.parametrize(
    "start,end,options,want",
    [
        (90, 100, None, ["key5", "key4", "key3"]),
        (90, 100, GetByScoreRangeOptions(exclude_end=True), ["key3"]),
        (10, 100, GetByScoreRangeOptions(exclude_start=True), ["key5", "key4", "key3"]),
        (10, 100, GetByScoreRangeOptions(exclude_start=True, exclude_end=True), ["key3"]),
        (10, 100, GetByScoreRangeOptions(limit=3), ["key2", "key3", "key4"]),
        (100, 99.999, None, ["key4", "key5"]),
        (100, 99.9, GetByScoreRangeOptions(exclude_end=True), ["key5", "key4"]),
        (100, 99.9, GetByScoreRangeOptions(exclude_start=True), ["key3"]),
    ],
)
def test_get_by_score_range(ss, start, end, options, want):
    got = [n.key for n in ss.get_by_score_range(start, end, options)]
    assert sorted(got) == sorted(want)


def test_get_by_score_range_order(ss):
    assert [n.key for n in ss.get_by_score_range(1, 99.9)] == ["key1", "key2", "key3"]
    assert [n.key for n in ss.get_by_score_range(99.9, 1)] == ["key3", "key2", "key1"]


def test_get_by_score_range_empty_and_out_of_range(ss):
    assert SortedSet().get_by_score_range(0, 10) == []
    assert ss.get_by_score_range(-5, -10) == []
    assert ss.get_by_score_range(200, 300) == []


def test_peek_max(ss):
    n = ss.peek_max()
    assert n.key == "key5"
    assert n.score == 100


def test_peek_min(ss):
    assert ss.peek_min().key == "key1"


def test_pop_min(ss):
    assert ss.pop_min().key == "key1"
    assert set(ss.members) == {"key2", "key3", "key4", "key5"}


def test_pop_max(ss):
    assert ss.pop_max().key == "key5"
    assert set(ss.members) == {"key1", "key2", "key3", "key4"}
    assert ss.peek_max().key == "key4"


def test_pop_on_empty():
    s = SortedSet()
    assert s.pop_min() is None
    assert s.pop_max() is None
    assert s.peek_min() is None


def test_remove(ss):
    assert ss.remove("key1").key == "key1"
    assert set(ss.members) == {"key2", "key3", "key4", "key5"}
    assert ss.remove("key1") is None
    assert ss.size() == 4


def test_size(ss):
    assert ss.size() == 5
    assert len(ss) == 5


def test_random_insertion_stays_ordered():
    rng = random.Random(7)
    s = SortedSet()
    scores = {f"k{i:03d}": rng.randint(0, 50) for i in range(200)}
    for key, score in scores.items():
        s.put(key, score, key.encode())
    expected = sorted(scores, key=lambda k: (scores[k], k))
    assert [n.key for n in s.get_by_rank_range(1, -1, False)] == expected
    assert [n.key for n in s] == expected
    for rank, key in enumerate(expected, start=1):
        assert s.find_rank(key) == rank
    for key in expected[::3]:
        s.remove(key)
    remaining = [k for k in expected if k not in set(expected[::3])]
    assert [n.key for n in s.get_by_rank_range(1, -1, False)] == remaining
    assert s.size() == len(remaining)
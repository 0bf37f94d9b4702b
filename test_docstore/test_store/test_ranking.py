"""Test module for the `RankingIndex`."""

from threading import Thread

import pytest

from docstore.errors import TypeMismatchError
from docstore.models import NOT_FOUND
from docstore.store import RankingIndex


@pytest.fixture(name="ranking")
def _ranking():
    ranking = RankingIndex()
    for member, score in (("c", 30), ("a", 10), ("d", 20), ("b", 20)):
        ranking.add(member, score)
    return ranking


def test_incrby_rank():
    """Test methods `incrby`, `score` and `rank`."""
    ranking = RankingIndex()
    assert ranking.incrby("p1", 100) == 100
    assert ranking.incrby("p1", 50) == 150
    assert ranking.score("p1") == 150
    ranking.incrby("p2", 200)
    assert ranking.rank("p1") == 1
    assert ranking.rank("p2") == 0
    assert ranking.rank("p1", descending=False) == 0


def test_not_found(ranking: RankingIndex):
    """Test queries for unknown members."""
    assert ranking.score("x") is NOT_FOUND
    assert ranking.rank("x") is NOT_FOUND
    assert "x" not in ranking


def test_tie_break(ranking: RankingIndex):
    """Test that equal scores are ordered by member ascending."""
    assert ranking.range_by_rank(0, -1) == [
        ("c", 30), ("b", 20), ("d", 20), ("a", 10)
    ]
    assert ranking.range_by_rank(0, -1, descending=False) == [
        ("a", 10), ("b", 20), ("d", 20), ("c", 30)
    ]
    assert ranking.rank("b") == 1
    assert ranking.rank("d") == 2
    assert ranking.rank("b", descending=False) == 1
    assert ranking.rank("d", descending=False) == 2


def test_update_resorts(ranking: RankingIndex):
    """Test that updating a member re-sorts it."""
    assert ranking.incrby("a", 25) == 35
    assert ranking.rank("a") == 0
    ranking.add("c", 0)
    assert ranking.range_by_rank(0, -1) == [
        ("a", 35), ("b", 20), ("d", 20), ("c", 0)
    ]
    assert len(ranking) == 4


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (0, 9, ["c", "b", "d", "a"]),
        (1, 2, ["b", "d"]),
        (2, 2, ["d"]),
        (-2, -1, ["d", "a"]),
        (-10, 0, ["c"]),
        (3, 10, ["a"]),
        (4, 10, []),
        (2, 1, []),
        (-10, -5, []),
    ],
)
def test_range_by_rank(ranking: RankingIndex, start, end, expected):
    """Test method `range_by_rank` including clamping."""
    assert [
        member for member, _ in ranking.range_by_rank(start, end)
    ] == expected


def test_range_by_rank_empty():
    """Test method `range_by_rank` on an empty index."""
    assert RankingIndex().range_by_rank(0, 9) == []


def test_range_by_score(ranking: RankingIndex):
    """Test method `range_by_score`."""
    assert ranking.range_by_score(15, 25) == [("b", 20), ("d", 20)]
    assert ranking.range_by_score(maximum=20) == [
        ("a", 10), ("b", 20), ("d", 20)
    ]
    assert ranking.range_by_score(20, descending=True) == [
        ("c", 30), ("b", 20), ("d", 20)
    ]
    assert ranking.range_by_score(31) == []


def test_remove(ranking: RankingIndex):
    """Test method `remove`."""
    assert ranking.remove("b")
    assert not ranking.remove("b")
    assert ranking.rank("d") == 1
    assert len(ranking) == 3


def test_float_scores():
    """Test mixed integer and float scores."""
    ranking = RankingIndex()
    ranking.add("a", 1)
    ranking.add("b", 1.5)
    ranking.incrby("a", 0.5)
    assert ranking.score("a") == 1.5
    assert ranking.range_by_rank(0, -1) == [("a", 1.5), ("b", 1.5)]


@pytest.mark.parametrize(
    ("member", "value"),
    [
        (1, 1),
        ("a", "1"),
        ("a", True),
        ("a", float("nan")),
        ("a", float("inf")),
    ],
)
def test_validation(ranking: RankingIndex, member, value):
    """Test that bad members and scores are rejected without changes."""
    before = ranking.range_by_rank(0, -1)
    with pytest.raises(TypeMismatchError):
        ranking.incrby(member, value)
    with pytest.raises(TypeMismatchError):
        ranking.add(member, value)
    assert ranking.range_by_rank(0, -1) == before


def test_incrby_overflow():
    """Test that an increment leaving the finite range is rejected."""
    ranking = RankingIndex()
    ranking.incrby("a", 1e308)
    with pytest.raises(TypeMismatchError):
        ranking.incrby("a", 1e308)
    assert ranking.score("a") == 1e308
    assert ranking.range_by_rank(0, -1) == [("a", 1e308)]
    assert ranking.incrby("a", -1e308) == 0


def test_range_by_score_bounds():
    """Test that `range_by_score` bounds are inclusive on both ends."""
    ranking = RankingIndex()
    for member, score in (("a", 1), ("b", 2.0), ("c", 2), ("d", 3)):
        ranking.add(member, score)
    assert ranking.range_by_score(2, 2) == [("b", 2.0), ("c", 2)]
    assert ranking.range_by_score(1.5, 2.5) == [("b", 2.0), ("c", 2)]
    assert ranking.range_by_score(3, 1) == []


def test_many_members():
    """Test ranks and windows for a larger number of members."""
    ranking = RankingIndex()
    n = 2000
    for index in range(n):
        ranking.incrby(f"m{index:04d}", (index * 7919) % n)
    for index in range(0, n, 97):
        ranking.incrby(f"m{index:04d}", n)
    expected = sorted(
        ((ranking.score(f"m{i:04d}"), f"m{i:04d}") for i in range(n)),
        key=lambda entry: (-entry[0], entry[1]),
    )
    assert ranking.range_by_rank(0, -1) == [
        (member, score) for score, member in expected
    ]
    for rank in range(0, n, 131):
        assert ranking.rank(expected[rank][1]) == rank
    assert len(ranking) == n


def test_concurrent_incrby():
    """Test that concurrent increments are not lost."""
    ranking = RankingIndex()
    n = 50

    def increment(index):
        ranking.incrby("shared", 1)
        ranking.incrby(f"member-{index}", index)

    threads = [Thread(target=increment, args=(i,)) for i in range(n)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert ranking.score("shared") == n
    assert len(ranking) == n + 1
    assert ranking.rank("shared") == 0

import itertools
import math

from models import Album, Catalog, Track
from solver.deadline import DeadlineGuard
from solver.split import is_maximum_too_long, is_minimum_too_short, pack_sides, split_tracks


def _catalog(*seconds):
    return Catalog([Track(f"t{i}", s) for i, s in enumerate(seconds)])


def test_pack_sides_first_fit_in_order():
    album = pack_sides(_catalog(5, 5, 5, 5), 10)
    assert album.totals() == [10, 10]
    assert [s.title for s in album] == ["Side 1", "Side 2"]


def test_pack_sides_keeps_catalog_order():
    album = pack_sides(_catalog(6, 3, 5, 2), 10)
    assert album.totals() == [9, 7]
    assert [t.title for t in album[0].tracks] == ["t0", "t1"]


def test_pack_sides_oversized_track_sits_alone():
    album = pack_sides(_catalog(12, 3), 10)
    assert album.totals() == [12, 3]


def test_pack_sides_empty():
    assert len(pack_sides(Catalog([]), 10)) == 0


def test_acceptance_checks():
    album = pack_sides(_catalog(5, 5, 5), 10)
    assert is_minimum_too_short(1, album)
    assert not is_minimum_too_short(2, album)
    assert is_maximum_too_long(album, 1.0)
    assert not is_maximum_too_long(album, 5.0)
    single = pack_sides(_catalog(5, 1), 10)
    assert not is_maximum_too_long(single, 0.0)
    assert not is_maximum_too_long(Album(), 0.0)


def test_split_accepts_first_balanced_capacity():
    res = split_tracks(_catalog(*[300] * 6), 3, 600, 900, DeadlineGuard(0))
    assert res.album.totals() == [600, 600, 600]
    assert res.capacity == 750
    assert res.iterations == 1
    assert not res.timed_out


def test_split_narrows_from_above():
    res = split_tracks(_catalog(*[100] * 10), 2, 500, 1000, DeadlineGuard(0))
    assert res.album.totals() == [500, 500]
    assert res.iterations == 3


def test_split_narrows_from_below():
    res = split_tracks(_catalog(*[100] * 10), 2, 300, 1000, DeadlineGuard(0))
    assert res.album.totals() == [500, 500]
    assert res.capacity == 563


def test_split_stops_at_bracket_edge():
    res = split_tracks(_catalog(4, 4, 4), 3, 4, 4, DeadlineGuard(0))
    assert res.iterations == 1
    assert res.album.totals() == [4, 4, 4]


def test_split_places_every_track():
    cat = _catalog(250, 562, 337, 575, 686, 300, 412, 199)
    res = split_tracks(cat, 2, cat.total // 2, cat.total, DeadlineGuard(0))
    assert res.album.track_count() == len(cat)
    assert res.album.seconds == cat.total


def test_split_guard_expiry_returns_last_album():
    ticks = itertools.count(0, 10)
    guard = DeadlineGuard(1, clock=lambda: next(ticks))
    res = split_tracks(_catalog(*[100] * 10), 2, 500, 1000, guard)
    assert res.timed_out
    assert res.iterations == 1
    assert res.album.totals() == [700, 300]


def test_pack_sides_even_pairs():
    album = pack_sides(_catalog(300, 300, 300, 300), 650)
    assert album.totals() == [600, 600]
    assert album.deviation() == 0.0


def test_split_iterations_bounded_by_bracket_width():
    cat = _catalog(130, 45, 90, 210, 75, 60, 180, 20)
    for low in range(0, 40, 3):
        for high in range(low, 200, 7):
            res = split_tracks(cat, 3, low, high, DeadlineGuard(0))
            bound = math.ceil(math.log2(high - low)) + 1 if high > low else 1
            assert res.iterations <= bound, (low, high)

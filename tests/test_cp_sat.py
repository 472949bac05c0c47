import pytest

pytest.importorskip("ortools")

from models import Catalog, Track  # noqa: E402
from solver import cp_sat  # noqa: E402


def _catalog(*seconds):
    return Catalog([Track(f"t{i}", s) for i, s in enumerate(seconds)])


def test_balances_to_perfect_split():
    ok, album, reason = cp_sat.balance_cp_sat(_catalog(7, 5, 4, 3, 1), 2, 11, max_seconds=10)
    assert ok, reason
    assert reason is None
    assert sorted(album.totals()) == [10, 10]
    assert album.track_count() == 5
    meta = cp_sat.balance_cp_sat.last_meta
    assert meta["status"] in ("OPTIMAL", "FEASIBLE")


def test_sides_ordered_longest_first():
    ok, album, _ = cp_sat.balance_cp_sat(_catalog(9, 8, 7, 6, 5, 4, 3), 3, 16, max_seconds=10)
    assert ok
    totals = album.totals()
    assert totals == sorted(totals, reverse=True)
    assert all(t <= 16 for t in totals)
    assert sum(totals) == 42


def test_proven_infeasible():
    ok, album, reason = cp_sat.balance_cp_sat(_catalog(6, 6, 6), 2, 10, max_seconds=5)
    assert not ok
    assert album is None
    assert reason == "Proven infeasible under current constraints"


def test_track_longer_than_capacity_short_circuits():
    ok, _, reason = cp_sat.balance_cp_sat(_catalog(50, 1), 2, 10, max_seconds=5)
    assert not ok
    assert reason == "Proven infeasible under current constraints"
    assert cp_sat.balance_cp_sat.last_meta["status"] == "track_exceeds_capacity"


def test_empty_catalog():
    ok, album, reason = cp_sat.balance_cp_sat(Catalog([]), 2, 10)
    assert ok
    assert album.totals() == [0, 0]


def test_solver_parameters_follow_config(monkeypatch):
    monkeypatch.setattr(cp_sat.CFG, "WORKERS", 2)
    monkeypatch.setattr(cp_sat.CFG, "RANDOM_SEED", 7)
    solver = cp_sat._cp.CpSolver()
    cp_sat._configure(solver, 3)
    assert solver.parameters.max_time_in_seconds == pytest.approx(3.0)
    assert solver.parameters.num_search_workers == 2
    assert solver.parameters.random_seed == 7

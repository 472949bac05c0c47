# solver/cp_sat.py
import time
from typing import Dict, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Album, Catalog


def _configure(solver, max_seconds: Optional[float]) -> None:
    seconds = float(max_seconds) if max_seconds else float(getattr(CFG, "CP_SAT_MAX_SECONDS", 60.0))
    solver.parameters.max_time_in_seconds = max(0.1, seconds)
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
    solver.parameters.num_search_workers = max(1, int(getattr(CFG, "WORKERS", 1)))
    solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
    solver.parameters.log_search_progress = False


def balance_cp_sat(
    catalog: Catalog,
    side_count: int,
    capacity: int,
    *,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, Optional[Album], Optional[str]]:
    """Assignment model: every track on exactly one side, no side over
    ``capacity``, minimise the sum of squared side totals.

    With the total and the side count fixed, the sum of squares only moves
    with the variance, so the best model answer is the best balanced album
    the solver could prove or find inside the time box.
    """
    meta: Dict[str, object] = {
        "tracks": len(catalog),
        "sides": int(side_count),
        "capacity": int(capacity),
    }
    setattr(balance_cp_sat, "last_meta", meta)

    n = len(catalog)
    S = int(side_count)
    if S <= 0:
        meta["status"] = "no_sides"
        return False, None, "Bad target: no sides to fill"
    if n == 0:
        meta["status"] = "empty"
        return True, Album.with_sides(S), None
    if catalog.longest > capacity:
        meta["status"] = "track_exceeds_capacity"
        return False, None, "Proven infeasible under current constraints"

    m = _cp.CpModel()

    x = [[m.NewBoolVar(f"x_{i}_{s}") for s in range(S)] for i in range(n)]
    for i in range(n):
        m.AddExactlyOne(x[i])

    loads = []
    for s in range(S):
        load = m.NewIntVar(0, int(capacity), f"load_{s}")
        m.Add(load == sum(catalog[i].seconds * x[i][s] for i in range(n)))
        loads.append(load)

    # symmetry breaking: sides ordered longest first
    for a, b in zip(loads, loads[1:]):
        m.Add(a >= b)

    squares = []
    for s, load in enumerate(loads):
        sq = m.NewIntVar(0, int(capacity) * int(capacity), f"sq_{s}")
        m.AddMultiplicationEquality(sq, [load, load])
        squares.append(sq)
    m.Minimize(sum(squares))

    solver = _cp.CpSolver()
    _configure(solver, max_seconds)

    t0 = time.time()
    res = solver.Solve(m)
    meta["elapsed"] = time.time() - t0
    meta["status"] = solver.StatusName(res)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        album = Album.with_sides(S)
        for i in range(n):
            for s in range(S):
                if solver.BooleanValue(x[i][s]):
                    album.push_track(s, catalog[i].track)
                    break
        meta["objective"] = solver.ObjectiveValue()
        meta["optimal"] = res == _cp.OPTIMAL
        return True, album, None

    if res == _cp.INFEASIBLE:
        return False, None, "Proven infeasible under current constraints"
    if res == _cp.MODEL_INVALID:
        return False, None, "Model invalid (configuration error)"
    return False, None, "Stopped before solution (timebox)"

# Orchestrator: validate the request, resolve targets, run one solver
from __future__ import annotations

import time
import traceback
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from config import CFG
from models import Album, Catalog, Track
from progress import (
    set_status, set_mode, set_attempt, set_targets, set_best_deviation,
    set_elapsed, set_message, log_attempt_detail,
)
from solver.cp_sat import balance_cp_sat
from solver.deadline import DeadlineGuard
from solver.force import ForceSolver
from solver.shuffle import ShuffleSolver
from solver.split import pack_sides, split_tracks
from solver.targets import Targets, resolve_targets
from tracks import coerce_duration, format_seconds, parse_track_lines

MODES = ("split", "shuffle", "force", "cp_sat")

NO_ASSIGNMENT = "No complete assignment found"
TIMEBOX = "Stopped before solution (timebox)"

Result = Tuple[bool, Optional[Album], str, Optional[str], Dict[str, Any]]


# ---------- helpers ----------

def _coerce_tracks(inbound: Union[str, Iterable[Any], None]) -> List[Track]:
    """Accept raw listing text, a list of lines or a list of Track records."""
    if inbound is None:
        return []
    if isinstance(inbound, str):
        return parse_track_lines(inbound.splitlines())
    items = list(inbound)
    if all(isinstance(t, Track) for t in items):
        return items
    return parse_track_lines(str(t) for t in items)


def _coerce_count(value: Any) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1


def _validate(catalog: Catalog, duration: Optional[int], boxes: Optional[int], mode: str) -> Optional[str]:
    if mode not in MODES:
        return f"Bad mode: {mode!r} (expected one of {', '.join(MODES)})"
    if len(catalog) == 0:
        return "Bad input: no tracks parsed"
    if catalog.total <= 0:
        return "Bad input: total duration is zero"
    if duration is None and boxes is None:
        return "Bad constraints: either duration or boxes must be specified"
    if duration is not None and boxes is not None:
        return "Bad constraints: duration and boxes are mutually exclusive"
    if duration is not None and duration <= 0:
        return "Bad constraints: duration must be positive"
    if boxes is not None and boxes <= 0:
        return "Bad constraints: boxes must be positive"
    return None


def _fail(reason: str, meta: Dict[str, Any]) -> Result:
    set_status("Error")
    set_message(reason)
    meta["reason"] = reason
    return False, None, "error", reason, meta


def _split_bracket(catalog: Catalog, targets: Targets, duration: Optional[int], even: bool) -> Tuple[int, int, int]:
    """Side count and capacity bracket for the binary search."""
    if duration:
        # Greedy packing at the full duration may need more sides than the
        # arithmetic minimum; that count is the one to aim for, and the
        # shortest side worth probing is the total spread over it.
        packed = len(pack_sides(catalog, duration))
        optimum = max(targets.optimum, packed)
        if (optimum & 1) and even:
            optimum += 1
        return optimum, catalog.total // optimum, int(duration)
    upper = max(targets.capacity, targets.length + catalog.longest)
    return targets.optimum, targets.length, upper


def _run_split(catalog, targets, duration, even, guard, meta) -> Tuple[Optional[Album], bool]:
    optimum, low, high = _split_bracket(catalog, targets, duration, even)
    meta["split_bracket"] = (low, high)
    meta["optimum"] = optimum
    set_targets(optimum, len(catalog))
    set_attempt(f"{optimum} sides in {format_seconds(low)}..{format_seconds(high)}")
    res = split_tracks(catalog, optimum, low, high, guard)
    meta["iterations"] = res.iterations
    meta["capacity"] = res.capacity
    album = res.album if res.album.track_count() == len(catalog) else None
    return album, res.timed_out


def _run_search(solver_cls, catalog, targets, guard, meta) -> Tuple[Optional[Album], bool]:
    set_attempt(f"{targets.optimum} sides <= {format_seconds(targets.capacity)}")
    solver = solver_cls(catalog, targets.capacity, targets.optimum, guard)
    solver.add_tracks_to_sides()
    meta["nodes"] = solver.nodes
    return solver.best, solver.timed_out


def _run_cp_sat(catalog, targets, timeout, meta) -> Tuple[Optional[Album], bool, Optional[str]]:
    set_attempt(f"CP-SAT {targets.optimum} sides <= {format_seconds(targets.capacity)}")
    seconds = timeout if timeout else getattr(CFG, "CP_SAT_MAX_SECONDS", 60)
    ok, album, reason = balance_cp_sat(catalog, targets.optimum, targets.capacity, max_seconds=seconds)
    detail = dict(getattr(balance_cp_sat, "last_meta", {}) or {})
    meta["cp_sat"] = detail
    log_attempt_detail(
        "Solver detail",
        status=detail.get("status"),
        objective=detail.get("objective"),
        optimal=detail.get("optimal"),
    )
    return (album if ok else None), reason == TIMEBOX, reason


# ---------- entry point ----------

def solve_orchestrator(
    tracks: Union[str, Iterable[Any], None],
    *,
    duration: Any = None,
    boxes: Any = None,
    even: bool = False,
    mode: str = "split",
    timeout: Optional[float] = None,
) -> Result:
    """
    Returns: (ok, album, strategy, reason, meta)
    ``strategy`` is the mode that produced the album, or ``"error"``.
    """
    t0 = time.time()
    meta: Dict[str, Any] = {"mode": mode}
    try:
        mode = (mode or "split").strip().lower().replace("-", "_")
        meta["mode"] = mode
        duration_s = coerce_duration(duration)
        if duration is not None and str(duration).strip() and duration_s is None:
            duration_s = -1
        boxes_n = _coerce_count(boxes)
        timeout_s = float(CFG.TIMEOUT if timeout is None else timeout)

        try:
            track_list = _coerce_tracks(tracks)
        except ValueError as e:
            return _fail(f"Bad input: {e}", meta)

        catalog = Catalog(track_list, sort_descending=(mode == "shuffle"))
        problem = _validate(catalog, duration_s, boxes_n, mode)
        if problem:
            return _fail(problem, meta)

        if even and boxes_n is not None:
            log_attempt_detail("Even flag ignored", boxes=boxes_n)

        targets = resolve_targets(
            catalog.total, catalog.longest,
            duration=duration_s, boxes=boxes_n, even=bool(even),
        )
        meta["targets"] = {
            "optimum": targets.optimum,
            "length": targets.length,
            "capacity": targets.capacity,
        }
        log_attempt_detail(
            "Run setup",
            mode=mode,
            tracks=len(catalog),
            total=format_seconds(catalog.total),
            longest=format_seconds(catalog.longest),
            track_deviation=round(catalog.deviation, 3),
            timeout=timeout_s or None,
        )
        log_attempt_detail(
            "Targets resolved",
            sides=targets.optimum,
            length=format_seconds(targets.length),
            capacity=format_seconds(targets.capacity),
        )

        set_status("Solving")
        set_mode(mode)
        set_targets(targets.optimum, len(catalog))

        guard = DeadlineGuard(timeout_s)
        reason: Optional[str] = None
        if mode == "split":
            album, timed_out = _run_split(catalog, targets, duration_s, even, guard, meta)
        elif mode == "shuffle":
            album, timed_out = _run_search(ShuffleSolver, catalog, targets, guard, meta)
        elif mode == "force":
            album, timed_out = _run_search(ForceSolver, catalog, targets, guard, meta)
        else:
            album, timed_out, reason = _run_cp_sat(catalog, targets, timeout_s, meta)

        elapsed = time.time() - t0
        meta["elapsed"] = elapsed
        meta["timed_out"] = bool(timed_out)
        set_elapsed(elapsed)

        if album is None:
            failure = reason or (TIMEBOX if timed_out else NO_ASSIGNMENT)
            log_attempt_detail("Solver outcome", mode=mode, ok=False, reason=failure)
            return _fail(failure, meta)

        deviation = album.deviation()
        meta["deviation"] = deviation
        meta["sides"] = len(album)
        set_best_deviation(deviation)
        log_attempt_detail(
            "Solver outcome",
            mode=mode,
            ok=True,
            sides=len(album),
            deviation=round(deviation, 3),
            timed_out=bool(timed_out),
            elapsed=f"{elapsed:.2f}s",
        )
        set_status("Solved")
        message = f"{len(album)} sides, deviation {deviation:.2f}s"
        if timed_out:
            message += " (time limit reached, best found so far)"
        set_message(message)
        return True, album, mode, None, meta

    except Exception as e:
        set_status("Error")
        reason = f"orchestrator exception: {type(e).__name__}: {e}"
        traceback.print_exc()
        meta["trace"] = reason
        return False, None, "error", reason, meta

# solver/targets.py
from dataclasses import dataclass
from typing import Optional

from config import CFG


@dataclass(frozen=True)
class Targets:
    optimum: int   # number of sides to fill
    length: int    # minimum side length (floor of total / optimum)
    capacity: int  # maximum side length the solvers may use


def _ceil_div(a: int, b: int) -> int:
    return -(-int(a) // int(b))


def resolve_targets(
    total: int,
    longest: int,
    *,
    duration: Optional[int] = None,
    boxes: Optional[int] = None,
    even: bool = False,
    slack_pct: Optional[int] = None,
) -> Targets:
    """Derive the side count and side-length bounds from the user constraints.

    Exactly one of ``duration`` and ``boxes`` is expected; callers reject
    anything else (and an empty catalog) before getting here.

    - ``duration``: sides needed to hold ``total`` at that length, bumped to
      an even count when ``even`` is set. The duration is the capacity.
    - ``boxes``: the count is fixed and the capacity is the total spread
      over the boxes plus ``slack_pct`` percent, never shorter than the
      longest track.
    """
    if duration:
        optimum = _ceil_div(total, duration)
        if (optimum & 1) and even:
            optimum += 1
        return Targets(optimum, int(total) // optimum, int(duration))

    if slack_pct is None:
        slack_pct = int(getattr(CFG, "CAPACITY_SLACK_PCT", 10))
    optimum = int(boxes)
    padded = _ceil_div(int(total) * (100 + slack_pct), 100 * optimum)
    return Targets(optimum, int(total) // optimum, max(int(longest), padded))

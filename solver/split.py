# solver/split.py
from dataclasses import dataclass
from typing import Optional

from config import CFG
from models import Album, Catalog, Side
from progress import log_search_step
from solver.deadline import DeadlineGuard
from tracks import format_seconds


@dataclass
class SplitResult:
    album: Album
    capacity: int
    iterations: int
    timed_out: bool


def _close(album: Album, side: Side) -> None:
    side.title = f"Side {len(album) + 1}"
    album.push(side)


def pack_sides(catalog: Catalog, capacity: int) -> Album:
    """Walk the catalog once, starting a new side whenever the next track
    would push the current one past ``capacity``.

    Catalog order is kept; a track longer than ``capacity`` ends up alone on
    its own side.
    """
    album = Album()
    side = Side("")
    for entry in catalog:
        if side.tracks and side.seconds + entry.seconds > capacity:
            _close(album, side)
            side = Side("")
        side.push(entry.track)
    if side.tracks:
        _close(album, side)
    return album


def is_minimum_too_short(required: int, album: Album) -> bool:
    """More sides than required means the capacity under test is too small."""
    return len(album) > required


def is_maximum_too_long(album: Album, tolerance: float) -> bool:
    """Greedy packing at a generous capacity overfills the early sides and
    leaves the last ones sparse, which shows up as a large deviation."""
    if len(album) <= 1:
        return False
    return album.deviation() > tolerance


def split_tracks(
    catalog: Catalog,
    optimum: int,
    minimum: int,
    maximum: int,
    guard: DeadlineGuard,
    *,
    tolerance: Optional[float] = None,
) -> SplitResult:
    """Binary search for the side capacity that greedy packing turns into
    ``optimum`` evenly filled sides.

    The median rounds up so the bracket always shrinks. The search stops when
    the median hits either end of the bracket, when an album is accepted, or
    when the guard runs out; the album packed last is returned.
    """
    if tolerance is None:
        tolerance = float(getattr(CFG, "SPLIT_TOLERANCE", 10.0))
    minimum = min(int(minimum), int(maximum))
    maximum = int(maximum)

    album = Album()
    median = maximum
    iterations = 0
    guard.start()
    try:
        while minimum <= maximum:
            median = (minimum + maximum + 1) // 2
            album = pack_sides(catalog, median)
            iterations += 1
            log_search_step(
                "Split probe",
                capacity=format_seconds(median),
                sides=len(album),
                deviation=round(album.deviation(), 3),
            )

            if median == minimum or median == maximum:
                break
            if is_minimum_too_short(optimum, album):
                minimum = median
            elif is_maximum_too_long(album, tolerance):
                maximum = median
            else:
                break

            if not guard.is_working():
                log_search_step("Split aborted", iterations=iterations)
                break
    finally:
        guard.terminate()

    return SplitResult(album, median, iterations, guard.expired)

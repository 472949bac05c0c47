# solver/shuffle.py
import math
from itertools import islice
from typing import Iterator, Optional

from config import CFG
from models import Album, Catalog, CatalogEntry
from progress import log_search_step
from solver.deadline import DeadlineGuard
from solver.force import ensure_recursion_headroom


def cyclic_indices(first: int, limit: int) -> Iterator[int]:
    """Endless side order for the track at position ``first``.

    Even positions walk upwards from ``(first // 2) % limit``; odd positions
    walk downwards from the mirror of that index. Both wrap around. Taking
    ``limit`` values visits every side once, and alternating the direction
    keeps the low-numbered sides from soaking up the long tracks.
    """
    step, start, end = 1, 0, limit - 1
    index = (first // 2) % limit
    if first & 1:
        step = -1
        index = limit - 1 - index
        start, end = end, start
    while True:
        yield index
        index = start if index == end else index + step


class ShuffleSolver:
    """Per-track recursive placement using the cyclic side order.

    Expects a catalog sorted longest-first. Gives up looking once an album
    with a deviation under ``quality_threshold`` has been found.
    """

    def __init__(
        self,
        catalog: Catalog,
        capacity: int,
        side_count: int,
        guard: DeadlineGuard,
        *,
        quality_threshold: Optional[float] = None,
    ):
        self.catalog = catalog
        self.capacity = int(capacity)
        self.side_count = int(side_count)
        self.guard = guard
        if quality_threshold is None:
            quality_threshold = float(getattr(CFG, "QUALITY_THRESHOLD", 20.0))
        self.quality_threshold = float(quality_threshold)

        self.sides = Album.with_sides(self.side_count)
        self.best: Optional[Album] = None
        self.deviation = math.inf
        self.success = False
        self.timed_out = False
        self.nodes = 0

        self._last = len(catalog) - 1
        self._stopped = False

    def add_tracks_to_sides(self) -> bool:
        self.catalog.clear_usage()
        ensure_recursion_headroom(len(self.catalog))
        self.guard.start()
        try:
            if self._last < 0:
                self._snapshot(self.sides.deviation())
            else:
                self._look(0)
        finally:
            self.guard.terminate()
        self.timed_out = self.guard.expired
        self.success = self.best is not None
        return self.success

    def _should_stop(self) -> bool:
        if not self._stopped:
            if self.deviation < self.quality_threshold or not self.guard.is_working():
                self._stopped = True
        return self._stopped

    def _snapshot(self, latest: float) -> None:
        self.deviation = latest
        self.best = self.sides.snapshot()
        log_search_step("Shuffle snapshot", deviation=round(latest, 3), nodes=self.nodes)

    def _place(self, side_index: int, entry: CatalogEntry) -> None:
        self.sides.push_track(side_index, entry.track)
        entry.in_use = True

    def _unplace(self, side_index: int, entry: CatalogEntry) -> None:
        entry.in_use = False
        self.sides.pop_track(side_index)

    def _look(self, position: int) -> None:
        if self._should_stop():
            return
        self.nodes += 1

        entry = self.catalog[position]
        order = islice(cyclic_indices(position, self.side_count), self.side_count)
        for side_index in order:
            if self.sides[side_index].seconds + entry.seconds > self.capacity:
                continue

            self._place(side_index, entry)
            if position == self._last:
                latest = self.sides.deviation()
                if latest < self.deviation:
                    self._snapshot(latest)
            else:
                self._look(position + 1)
            self._unplace(side_index, entry)

            if self._stopped:
                return

# solver/force.py
"""Exhaustive depth-first placement of tracks onto sides.

Sides are filled one at a time. For the side being filled every unused
track that still fits is tried in catalog order, and once the side has had
its chance the search moves on to the next side. Any complete assignment is
scored by the deviation of the side totals and the best one is kept, so
the search can be stopped at any time and still hand back an answer.
"""
import math
import sys
from typing import Optional

from models import Album, Catalog, CatalogEntry
from progress import log_search_step
from solver.deadline import DeadlineGuard


def ensure_recursion_headroom(depth: int, margin: int = 200) -> None:
    """Raise the interpreter recursion limit to fit a ``depth``-deep search."""
    needed = int(depth) + margin
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


class ForceSolver:
    def __init__(self, catalog: Catalog, capacity: int, side_count: int, guard: DeadlineGuard):
        self.catalog = catalog
        self.capacity = int(capacity)
        self.side_count = int(side_count)
        self.guard = guard

        self.sides = Album.with_sides(self.side_count)
        self.best: Optional[Album] = None
        self.deviation = math.inf
        self.success = False
        self.timed_out = False
        self.nodes = 0

        self._track_count = len(catalog)
        self._used = 0
        self._stopped = False

    def add_tracks_to_sides(self) -> bool:
        self.catalog.clear_usage()
        ensure_recursion_headroom(self._track_count * 2 + self.side_count)
        self.guard.start()
        try:
            if self._track_count == 0:
                self._snapshot(self.sides.deviation())
            else:
                self._look(0, 0)
        finally:
            self.guard.terminate()
        self.timed_out = self.guard.expired
        self.success = self.best is not None
        return self.success

    def _should_stop(self) -> bool:
        if not self._stopped:
            # Nothing beats a perfect balance.
            if self.deviation == 0.0 or not self.guard.is_working():
                self._stopped = True
        return self._stopped

    def _proceed(self, side_index: int, entry: CatalogEntry) -> None:
        self._used += 1
        self.sides.push_track(side_index, entry.track)
        entry.in_use = True

    def _reject(self, side_index: int, entry: CatalogEntry) -> None:
        self._used -= 1
        entry.in_use = False
        self.sides.pop_track(side_index)

    def _snapshot(self, latest: float) -> None:
        self.deviation = latest
        self.best = self.sides.snapshot()
        log_search_step("Force snapshot", deviation=round(latest, 3), nodes=self.nodes)

    def _look(self, side_index: int, track_index: int) -> None:
        if self._should_stop() or side_index == self.side_count:
            return
        self.nodes += 1

        side = self.sides[side_index]
        opening = not side.tracks
        for index in range(track_index, self._track_count):
            entry = self.catalog[index]
            if entry.in_use:
                continue

            if side.seconds + entry.seconds <= self.capacity:
                self._proceed(side_index, entry)
                if self._used == self._track_count:
                    latest = self.sides.deviation()
                    if latest < self.deviation:
                        self._snapshot(latest)
                else:
                    self._look(side_index, index + 1)
                self._reject(side_index, entry)
                if self._stopped:
                    return

            # A fresh side always starts with the lowest unused track; any
            # other opening is the same partition with the sides reordered.
            if opening:
                break

        if not side.tracks or self._used == self._track_count:
            return
        remaining = self.catalog.total - self.sides.seconds
        if remaining <= (self.side_count - side_index - 1) * self.capacity:
            self._look(side_index + 1, 0)

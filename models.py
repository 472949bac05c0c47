import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence


@dataclass(frozen=True)
class Track:
    title: str
    seconds: int


@dataclass
class CatalogEntry:
    index: int
    track: Track
    in_use: bool = False

    @property
    def seconds(self) -> int:
        return self.track.seconds


def population_deviation(values: Sequence[int]) -> float:
    """Population standard deviation; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    mean = float(sum(values)) / len(values)
    variance = sum((mean - v) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


class Catalog:
    """Ordered track list for one run plus its aggregates.

    Entries keep their position in ``index`` and carry the ``in_use`` flag
    that a running solver flips while it places tracks.
    """

    def __init__(self, tracks: Iterable[Track], *, sort_descending: bool = False):
        ordered = list(tracks)
        if sort_descending:
            ordered.sort(key=lambda t: t.seconds, reverse=True)
        self.entries: List[CatalogEntry] = [
            CatalogEntry(i, track) for i, track in enumerate(ordered)
        ]
        self.total = sum(t.seconds for t in ordered)
        self.longest = max((t.seconds for t in ordered), default=0)
        self.deviation = population_deviation([t.seconds for t in ordered])

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> CatalogEntry:
        return self.entries[index]

    @property
    def tracks(self) -> List[Track]:
        return [e.track for e in self.entries]

    def in_use_count(self) -> int:
        return sum(1 for e in self.entries if e.in_use)

    def clear_usage(self) -> None:
        for e in self.entries:
            e.in_use = False


@dataclass
class Side:
    title: str
    seconds: int = 0
    tracks: List[Track] = field(default_factory=list)

    def push(self, track: Track) -> None:
        self.tracks.append(track)
        self.seconds += track.seconds

    def pop(self) -> Track:
        track = self.tracks.pop()
        self.seconds -= track.seconds
        return track

    def clear(self) -> None:
        self.seconds = 0
        self.tracks.clear()

    def copy(self) -> "Side":
        return Side(self.title, self.seconds, list(self.tracks))

    def __len__(self) -> int:
        return len(self.tracks)


class Album:
    """Ordered collection of sides forming one candidate assignment."""

    def __init__(self, sides: Optional[Iterable[Side]] = None):
        self.sides: List[Side] = []
        self.seconds = 0
        for side in sides or ():
            self.push(side)

    @classmethod
    def with_sides(cls, count: int) -> "Album":
        return cls(Side(f"Side {i + 1}") for i in range(count))

    def push(self, side: Side) -> None:
        self.sides.append(side)
        self.seconds += side.seconds

    def pop(self) -> Side:
        side = self.sides.pop()
        self.seconds -= side.seconds
        return side

    def push_track(self, side_index: int, track: Track) -> None:
        self.sides[side_index].push(track)
        self.seconds += track.seconds

    def pop_track(self, side_index: int) -> Track:
        track = self.sides[side_index].pop()
        self.seconds -= track.seconds
        return track

    def totals(self) -> List[int]:
        return [s.seconds for s in self.sides]

    def track_count(self) -> int:
        return sum(len(s) for s in self.sides)

    def deviation(self) -> float:
        return population_deviation(self.totals())

    def snapshot(self) -> "Album":
        return Album(s.copy() for s in self.sides)

    def clear(self) -> None:
        self.sides.clear()
        self.seconds = 0

    def to_dict(self) -> dict:
        return {
            "seconds": self.seconds,
            "deviation": self.deviation(),
            "sides": [
                {
                    "title": s.title,
                    "seconds": s.seconds,
                    "tracks": [{"title": t.title, "seconds": t.seconds} for t in s.tracks],
                }
                for s in self.sides
            ],
        }

    def __len__(self) -> int:
        return len(self.sides)

    def __iter__(self) -> Iterator[Side]:
        return iter(self.sides)

    def __getitem__(self, index: int) -> Side:
        return self.sides[index]

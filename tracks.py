# tracks.py: track list parser
from __future__ import annotations
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from models import Track

# Accept "ss", "mm:ss" or "hh:mm:ss" (any field count, each field base 60).
_TIME_RE = re.compile(r"^\d+(?::\d+)*$")
_LINE_RE = re.compile(r"^\s*(?P<time>\S+)(?:\s+(?P<title>.*?))?\s*$")


def parse_time_string(text: str) -> int:
    """Convert ``"1:02:03"``, ``"3:25"`` or ``"205"`` to whole seconds."""
    token = (text or "").strip()
    if not _TIME_RE.match(token):
        raise ValueError(f"Bad duration: {text!r}")
    seconds = 0
    for field in token.split(":"):
        seconds = seconds * 60 + int(field)
    return seconds


def format_seconds(seconds: int, sep: str = ":") -> str:
    m, s = divmod(max(0, int(seconds)), 60)
    h, m = divmod(m, 60)
    return f"{h:02d}{sep}{m:02d}{sep}{s:02d}"


def _to_seconds(x: Any) -> Optional[int]:
    if x is None:
        return None
    if isinstance(x, (int, float)):
        return int(x) if x >= 0 else None
    try:
        return parse_time_string(str(x))
    except ValueError:
        return None


def parse_track_line(line: str, lineno: int = 0) -> Optional[Track]:
    """Return the track on ``line``, or None for a blank line."""
    text = line.rstrip("\r\n")
    if not text.strip():
        return None
    m = _LINE_RE.match(text)
    seconds = _to_seconds(m.group("time")) if m else None
    if seconds is None:
        where = f" on line {lineno}" if lineno else ""
        raise ValueError(f"Bad track{where}: {text!r}")
    return Track(m.group("title") or "", seconds)


def parse_track_lines(lines: Iterable[str]) -> List[Track]:
    tracks: List[Track] = []
    for lineno, line in enumerate(lines, start=1):
        track = parse_track_line(line, lineno)
        if track is not None:
            tracks.append(track)
    return tracks


def load_tracks(path: Union[str, Path]) -> List[Track]:
    """Read a ``DURATION TITLE`` listing, one track per line."""
    with open(path, "r", encoding="utf-8") as fh:
        return parse_track_lines(fh)


def coerce_duration(value: Any) -> Optional[int]:
    """Tolerant conversion used for constraint inputs (seconds or hh:mm:ss)."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _to_seconds(value)


__all__ = [
    "parse_time_string",
    "format_seconds",
    "parse_track_line",
    "parse_track_lines",
    "load_tracks",
    "coerce_duration",
]

from typing import List, Optional

from config import CFG
from models import Album, Side
from tracks import format_seconds


def _time(seconds: int, plain: bool) -> str:
    return str(int(seconds)) if plain else format_seconds(seconds)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _side_text(side: Side, plain: bool) -> List[str]:
    lines = [f"{side.title} - {len(side)} tracks"]
    for t in side.tracks:
        lines.append(f"{_time(t.seconds, plain)} - {t.title}")
    lines.append(_time(side.seconds, plain))
    lines.append("")
    return lines


def _side_csv(side: Side, plain: bool, d: str) -> List[str]:
    lines = [d.join(("Side", _time(side.seconds, plain), _quote(f"{side.title}, {len(side)} tracks")))]
    for t in side.tracks:
        lines.append(d.join(("Track", _time(t.seconds, plain), _quote(t.title))))
    return lines


def render_album(album: Album, *, plain: bool = False, csv: bool = False, delimiter: Optional[str] = None) -> str:
    """Render the sides either as a readable listing or as CSV rows."""
    d = (delimiter or getattr(CFG, "DELIMITER", ",") or ",")[:1]
    lines: List[str] = []
    for side in album:
        lines.extend(_side_csv(side, plain, d) if csv else _side_text(side, plain))
    return "\n".join(lines) + ("\n" if lines else "")


def render_header(boxes: bool = False) -> str:
    return "\nThe recommended {} are\n".format("boxes" if boxes else "sides")

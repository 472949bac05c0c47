import pytest

from models import Track
from tracks import (
    coerce_duration,
    format_seconds,
    load_tracks,
    parse_time_string,
    parse_track_line,
    parse_track_lines,
)


@pytest.mark.parametrize(
    "text, expected",
    [("205", 205), ("3:25", 205), ("1:02:03", 3723), ("00:00:00", 0), (" 4:00 ", 240)],
)
def test_parse_time_string(text, expected):
    assert parse_time_string(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "1:", ":30", "1.5", "-3"])
def test_parse_time_string_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_time_string(text)


def test_format_seconds_round_trip():
    assert format_seconds(3723) == "01:02:03"
    assert parse_time_string(format_seconds(3723)) == 3723
    assert format_seconds(59) == "00:00:59"
    assert format_seconds(0) == "00:00:00"
    assert format_seconds(3723, sep=".") == "01.02.03"


def test_parse_track_line():
    assert parse_track_line("3:25 Blue in Green") == Track("Blue in Green", 205)
    assert parse_track_line("  90   Interlude  \n") == Track("Interlude", 90)
    assert parse_track_line("42") == Track("", 42)
    assert parse_track_line("   \n") is None


def test_parse_track_line_names_line_number():
    with pytest.raises(ValueError, match="line 7"):
        parse_track_line("Untimed Song", 7)


def test_parse_track_lines_skips_blank_lines():
    tracks = parse_track_lines(["1:00 A", "", "2:00 B", "   "])
    assert tracks == [Track("A", 60), Track("B", 120)]


def test_parse_track_lines_reports_physical_line():
    with pytest.raises(ValueError, match="line 3"):
        parse_track_lines(["1:00 A", "", "oops B"])


def test_load_tracks(tmp_path):
    path = tmp_path / "album.txt"
    path.write_text("4:10 So What\n9:22 Freddie Freeloader\n\n5:37 Blue in Green\n", encoding="utf-8")
    tracks = load_tracks(path)
    assert [t.seconds for t in tracks] == [250, 562, 337]
    assert tracks[1].title == "Freddie Freeloader"


def test_coerce_duration():
    assert coerce_duration("20:00") == 1200
    assert coerce_duration(1200) == 1200
    assert coerce_duration(["15:00"]) == 900
    assert coerce_duration("") is None
    assert coerce_duration(None) is None
    assert coerce_duration("soon") is None
    assert coerce_duration(-5) is None

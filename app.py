# app.py: JSON front end for the balancer; progress no-cache
from __future__ import annotations
import os
from typing import Any, Dict, Optional, Tuple

from flask import Flask, request, send_from_directory, jsonify

from solver.orchestrator import solve_orchestrator
from config import CFG
from io_files import _resolve_output_path, write_sides
from render import render_album

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer, set_status, set_done,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _sides_location() -> Tuple[str, str]:
    path = os.path.abspath(_resolve_output_path(BASE_DIR, CFG.SIDES_OUT, "sides.txt"))
    return os.path.dirname(path), os.path.basename(path)


SIDES_FILENAME = _sides_location()[1]

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "strategy": "error",
    "reason": None,
    "deviation": None,
    "sides": [],
    "text": "",
    "timed_out": False,
    "track_count": 0,
    "elapsed_str": "0s",
    "sides_filename": SIDES_FILENAME,
}

app = Flask(__name__, static_folder=None)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress3":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return send_from_directory(BASE_DIR, "track_form.html")


@app.route("/result/latest")
def result_latest():
    return jsonify(LAST_RESULT)


def _merge_like_mapping() -> Dict[str, Any]:
    """JSON body first, then form fields, then query arguments."""
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)
    for source in (request.form, request.args):
        for k, v in source.to_dict(flat=True).items():
            merged.setdefault(k, v)
    return merged


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _timeout(value: Any) -> Optional[float]:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return None


@app.route("/solve", methods=["POST"])
def solve():
    like = _merge_like_mapping()

    progress_reset()
    start_timer()
    set_status("Solving")

    ok, album, strategy, reason, meta = solve_orchestrator(
        like.get("tracks"),
        duration=_blank_to_none(like.get("duration")),
        boxes=_blank_to_none(like.get("boxes")),
        even=_flag(like.get("even")),
        mode=str(like.get("mode") or "split"),
        timeout=_timeout(like.get("timeout")),
    )
    set_done(ok, reason=reason)

    text = ""
    sides = []
    deviation = None
    if ok and album is not None:
        text = render_album(
            album,
            plain=_flag(like.get("plain")),
            csv=_flag(like.get("csv")),
            delimiter=str(like.get("delimiter") or CFG.DELIMITER),
        )
        sides = album.to_dict()["sides"]
        deviation = album.deviation()
    sides_path = write_sides(text, BASE_DIR)

    LAST_RESULT.update({
        "ok": bool(ok),
        "strategy": strategy,
        "reason": reason,
        "deviation": deviation,
        "sides": sides,
        "text": text,
        "timed_out": bool(meta.get("timed_out")),
        "track_count": sum(len(s["tracks"]) for s in sides),
        "elapsed_str": progress_json()["elapsed_str"],
        "sides_filename": os.path.basename(sides_path) or SIDES_FILENAME,
    })
    return jsonify(LAST_RESULT), (200 if ok else 422)


@app.route("/download/sides")
def download_sides():
    directory, filename = _sides_location()
    return send_from_directory(directory, filename, as_attachment=True)


@app.route("/progress3")
def progress3():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)

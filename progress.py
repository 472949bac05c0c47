"""Run progress for the web poller plus the attempt log.

``PROGRESS`` is read by ``GET /progress3`` while a solve request writes it,
hence the lock. Every state change that matters for a post-mortem (mode,
attempt start/finish, run end) also lands in ``logs/balancer_attempts.log``
as an ``event | key=value`` line.
"""
from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

PROGRESS_LOCK = threading.Lock()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


# ---------- attempt log ----------

def _log_path() -> Path:
    log_dir = Path(CFG.LOG_DIR)
    if not log_dir.is_absolute():
        log_dir = Path(__file__).resolve().parent / log_dir
    return log_dir / "balancer_attempts.log"


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("balancer.attempt_log")
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    logger.propagate = False
    path = _log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # read-only install: run without the file log
        return logger
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger


ATTEMPT_LOGGER = _init_logger()


def enable_console_log(level: int = logging.DEBUG) -> logging.Handler:
    """Mirror the attempt log on stderr (``balancer -x``)."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    ATTEMPT_LOGGER.addHandler(handler)
    if ATTEMPT_LOGGER.level > level:
        ATTEMPT_LOGGER.setLevel(level)
    return handler


def _emit_log(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    if not ATTEMPT_LOGGER.handlers or not ATTEMPT_LOGGER.isEnabledFor(level):
        return
    pairs = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    try:
        if pairs:
            ATTEMPT_LOGGER.log(level, "%s | %s", event, pairs)
        else:
            ATTEMPT_LOGGER.log(level, "%s", event)
    except Exception:
        # never let a broken log handler fail a solve
        pass


def log_attempt_detail(event: str, **fields: Any) -> None:
    _emit_log(event, **fields)


def log_search_step(event: str, **fields: Any) -> None:
    """Per-iteration solver chatter, only visible at DEBUG level."""
    _emit_log(event, level=logging.DEBUG, **fields)


def _seconds_label(seconds: Optional[float]) -> Optional[str]:
    return None if seconds is None else f"{max(0.0, seconds):.2f}s"


# mode/attempt bookkeeping for the log; guarded by PROGRESS_LOCK
LOG_STATE: Dict[str, Any] = {
    "run_start": None,
    "mode": "",
    "attempt": "",
    "attempt_start": None,
}


def _close_attempt_locked(why: str) -> None:
    name = LOG_STATE["attempt"]
    if not name:
        return
    started = LOG_STATE["attempt_start"]
    took = None if started is None else time.time() - started
    _emit_log(
        "Attempt finished",
        mode=LOG_STATE["mode"],
        attempt=name,
        duration=_seconds_label(took),
        reason=why,
    )
    LOG_STATE["attempt"] = ""
    LOG_STATE["attempt_start"] = None


def _open_attempt_locked(name: str) -> None:
    if name == LOG_STATE["attempt"]:
        return
    _close_attempt_locked("switch")
    if name:
        LOG_STATE["attempt"] = name
        LOG_STATE["attempt_start"] = time.time()
        _emit_log("Attempt started", mode=LOG_STATE["mode"], attempt=name)


# ---------- progress snapshot ----------

def _fresh_progress(run_id: int) -> Dict[str, Any]:
    return {
        "status": "Idle",          # Idle | Solving | Solved | Error
        "mode": "",                # split | shuffle | force | cp_sat
        "attempt": "",             # e.g. "4 sides <= 00:20:00"
        "sides": 0,                # target side count
        "track_count": 0,
        "best_deviation": None,    # seconds
        "elapsed_start": None,     # wall clock when the run started
        "elapsed": 0.0,
        "message": "",
        "done": False,
        "ok": None,
        "run_id": run_id,
    }


PROGRESS: Dict[str, Any] = _fresh_progress(0)


def _elapsed_label(seconds: float) -> str:
    whole = int(max(0.0, seconds))
    if whole < 60:
        return f"{whole}s"
    m, s = divmod(whole, 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"


def _refresh_elapsed_locked() -> None:
    t0 = PROGRESS["elapsed_start"]
    if t0 is not None:
        PROGRESS["elapsed"] = time.time() - t0


def _as_float(value: Any) -> Optional[float]:
    try:
        return None if value is None else float(value)
    except (TypeError, ValueError):
        return None


def _as_count(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def reset() -> None:
    with PROGRESS_LOCK:
        _close_attempt_locked("reset")
        PROGRESS.update(_fresh_progress(int(PROGRESS["run_id"] or 0) + 1))
        LOG_STATE.update(run_start=None, mode="", attempt="", attempt_start=None)


def start_timer() -> None:
    with PROGRESS_LOCK:
        now = time.time()
        PROGRESS["elapsed_start"] = now
        PROGRESS["elapsed"] = 0.0
        LOG_STATE["run_start"] = now
    _emit_log("Run timer started")


def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = str(v)


def set_mode(v: Any) -> None:
    mode = "" if v is None else str(v)
    with PROGRESS_LOCK:
        if mode and mode != LOG_STATE["mode"]:
            _emit_log("Mode selected", mode=mode)
        LOG_STATE["mode"] = mode
        PROGRESS["mode"] = mode


def set_attempt(v: Any) -> None:
    name = "" if v is None else str(v)
    with PROGRESS_LOCK:
        PROGRESS["attempt"] = name
        _open_attempt_locked(name)


def set_targets(sides: Any, track_count: Any) -> None:
    try:
        sides_n, tracks_n = int(sides), int(track_count)
    except (TypeError, ValueError):
        sides_n = tracks_n = 0
    with PROGRESS_LOCK:
        PROGRESS["sides"] = _as_count(sides_n)
        PROGRESS["track_count"] = _as_count(tracks_n)


def set_best_deviation(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["best_deviation"] = _as_float(v)
        _refresh_elapsed_locked()


def set_elapsed(seconds: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed"] = max(0.0, _as_float(seconds) or 0.0)


def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    An explicit ``ok`` decides between Solved and Error; without one an idle
    run counts as solved. ``reason`` replaces the message when given.
    """
    with PROGRESS_LOCK:
        _refresh_elapsed_locked()
        if ok is not None:
            PROGRESS["ok"] = bool(ok)
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS["status"] in ("", "Idle", None):
            PROGRESS["ok"] = True
            PROGRESS["status"] = "Solved"
        if reason is not None:
            PROGRESS["message"] = str(reason)
        PROGRESS["done"] = True

        _close_attempt_locked("run_complete")
        started = LOG_STATE["run_start"]
        LOG_STATE["run_start"] = None
        _emit_log(
            "Run finished",
            status=PROGRESS["status"],
            ok=PROGRESS["ok"],
            mode=PROGRESS["mode"],
            duration=_seconds_label(None if started is None else time.time() - started),
            deviation=PROGRESS["best_deviation"],
            message=PROGRESS["message"],
        )


def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _refresh_elapsed_locked()
        out = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    out["elapsed_str"] = _elapsed_label(out["elapsed"])
    return out


def as_json() -> Dict[str, Any]:
    # alias used by /progress3
    return snapshot()

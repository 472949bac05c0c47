import logging

import progress
from progress import (
    reset, set_status, set_done, set_mode, set_attempt, set_targets,
    set_best_deviation, snapshot, log_attempt_detail,
)


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["done"] is True
    assert snap["ok"] is True


def test_set_done_failure_records_reason():
    reset()
    set_status("Solving")
    set_done(False, reason="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["message"] == "boom"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert isinstance(first, int)
    assert second == first + 1


def test_setters_are_tolerant():
    reset()
    set_targets("three", None)
    set_best_deviation("n/a")
    snap = snapshot()
    assert snap["sides"] == 0
    assert snap["track_count"] == 0
    assert snap["best_deviation"] is None

    set_targets(4, 12)
    set_best_deviation(1.5)
    snap = snapshot()
    assert snap["sides"] == 4
    assert snap["track_count"] == 12
    assert snap["best_deviation"] == 1.5


def test_snapshot_hides_timer_start():
    reset()
    snap = snapshot()
    assert "elapsed_start" not in snap
    assert snap["elapsed_str"] == "0s"


def test_attempt_transitions_are_logged(monkeypatch):
    reset()
    events = []
    monkeypatch.setattr(progress, "_emit_log", lambda event, **fields: events.append((event, fields)))
    set_mode("force")
    set_attempt("2 sides <= 00:20:00")
    set_attempt("3 sides <= 00:20:00")
    set_done(True)
    names = [e for e, _ in events]
    assert "Mode selected" in names
    assert names.count("Attempt started") == 2
    assert names.count("Attempt finished") == 2
    assert names[-1] == "Run finished"


def test_attempt_log_writes_key_values(tmp_path, monkeypatch):
    logger = logging.getLogger("balancer.test_attempts")
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(logging.INFO)
    path = tmp_path / "attempts.log"
    logger.addHandler(logging.FileHandler(path, encoding="utf-8"))
    monkeypatch.setattr(progress, "ATTEMPT_LOGGER", logger)

    log_attempt_detail("Targets resolved", sides=3, capacity="00:20:00", skipped=None)
    for h in logger.handlers:
        h.flush()

    line = path.read_text(encoding="utf-8").strip()
    assert line == "Targets resolved | sides=3 capacity=00:20:00"
    for h in list(logger.handlers):
        h.close()
        logger.removeHandler(h)

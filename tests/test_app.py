import pytest

pytest.importorskip("flask")
pytest.importorskip("ortools")

import app as app_module  # noqa: E402

LISTING = "7 A\n5 B\n4 C\n3 D\n1 E\n"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module.CFG, "SIDES_OUT", str(tmp_path / "sides.txt"))
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()


def test_index_serves_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Balance tracks" in resp.data


def test_solve_json(client):
    resp = client.post(
        "/solve",
        json={"tracks": LISTING, "boxes": 2, "mode": "force", "timeout": 0},
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["strategy"] == "force"
    assert data["deviation"] == 0.0
    assert sorted(s["seconds"] for s in data["sides"]) == [10, 10]
    assert data["track_count"] == 5
    assert "Side 1 - " in data["text"]


def test_solve_form_csv(client):
    resp = client.post(
        "/solve",
        data={"tracks": LISTING, "boxes": "2", "duration": "", "csv": "on", "plain": "1", "delimiter": ";"},
    )
    data = resp.get_json()
    assert data["ok"] is True
    assert data["strategy"] == "split"
    assert data["text"].startswith("Side;")


def test_solve_rejects_bad_constraints(client):
    resp = client.post("/solve", json={"tracks": LISTING, "boxes": 2, "duration": "10:00"})
    assert resp.status_code == 422
    data = resp.get_json()
    assert data["ok"] is False
    assert "mutually exclusive" in data["reason"]
    assert data["sides"] == []


def test_latest_result_and_download(client, tmp_path):
    client.post("/solve", json={"tracks": LISTING, "boxes": 2, "mode": "force", "timeout": 0})

    latest = client.get("/result/latest").get_json()
    assert latest["ok"] is True
    assert latest["sides_filename"] == "sides.txt"

    resp = client.get("/download/sides")
    assert resp.status_code == 200
    assert "attachment" in resp.headers.get("Content-Disposition", "")
    assert resp.data.decode("utf-8") == latest["text"]
    assert (tmp_path / "sides.txt").read_text(encoding="utf-8") == latest["text"]


def test_progress_endpoint_is_not_cached(client):
    client.post("/solve", json={"tracks": LISTING, "boxes": 2})
    resp = client.get("/progress3")
    assert resp.headers["Cache-Control"].startswith("no-store")
    snap = resp.get_json()
    assert snap["done"] is True
    assert snap["status"] == "Solved"
    assert "elapsed_str" in snap

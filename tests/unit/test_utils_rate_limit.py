import time
import pytest
from fastapi import FastAPI, Depends, Request
from fastapi.testclient import TestClient

from travel_checkout.utils.rate_limit import RATE_LIMIT_DETAIL, optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.post("/intentA", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def intent_a():
        return {"ok": True}

    @app.post("/intentB", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def intent_b():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    client = TestClient(_make_app(times=2, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/intentA").status_code == 200
    assert client.post("/intentA").status_code == 200
    blocked = client.post("/intentA")
    assert blocked.status_code == 429
    assert blocked.json()["detail"] == RATE_LIMIT_DETAIL

def test_rate_limit_is_per_path_and_token(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    alice = {"Authorization": "Bearer alice"}
    bob = {"Authorization": "Bearer bob"}
    assert client.post("/intentA", headers=alice).status_code == 200
    assert client.post("/intentA", headers=alice).status_code == 429
    # Autre token ou autre chemin: compteur indépendant
    assert client.post("/intentA", headers=bob).status_code == 200
    assert client.post("/intentB", headers=alice).status_code == 200

def test_rate_limit_resets_after_window(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=1))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/intentA").status_code == 200
    assert client.post("/intentA").status_code == 429
    time.sleep(1.1)
    assert client.post("/intentA").status_code == 200

def test_rate_limit_disabled_flag_bypasses_limit(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1, seconds=60)
    client = TestClient(app)
    app.state.rate_limit_enabled = False

    for _ in range(3):
        assert client.post("/intentA").status_code == 200

def test_rate_limit_health_info():
    app = _make_app()
    client = TestClient(app)
    app.state.rate_limit_enabled = False
    info = client.get("/rl_info").json()
    assert info["enabled"] is False
    assert info["ready"] in (True, False)

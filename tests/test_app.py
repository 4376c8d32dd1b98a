import pytest
from fastapi.testclient import TestClient

import app as app_module
import usi_bridge
from usi_bridge import UsiBridge

HIRATE = "lnsgkgsnl/1b5r1/ppppppppp/9/9/9/PPPPPPPPP/1R5B1/LNSGKGSNL b - 1"


@pytest.fixture
def client(monkeypatch, engine_cmd):
    bridge = UsiBridge()
    monkeypatch.setattr(app_module, "bridge", bridge)
    monkeypatch.setattr(app_module, "ENGINE_PATH", engine_cmd("ok"))
    yield TestClient(app_module.app)
    bridge.terminate()


def test_health(client) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_ready_before_init(client) -> None:
    assert client.get("/engine/ready").json() == {"ready": False}


def test_move_before_init_is_conflict(client) -> None:
    r = client.post("/engine/move", json={"sfen": HIRATE, "timeMs": 100})
    assert r.status_code == 409


def test_shutdown_before_init_is_conflict(client) -> None:
    r = client.post("/engine/shutdown")
    assert r.status_code == 409
    assert r.json()["detail"] == "Engine not running"


def test_full_lifecycle(client) -> None:
    r = client.post("/engine/init")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "message": "Engine initialized successfully"}
    assert client.get("/engine/ready").json() == {"ready": True}

    r = client.post("/engine/move", json={"sfen": HIRATE, "timeMs": 100, "moves": ["7g7f"]})
    assert r.status_code == 200
    assert r.json() == {"move": "2g2f"}

    assert client.post("/engine/stop").status_code == 200

    r = client.post("/engine/shutdown")
    assert r.status_code == 200
    assert r.json()["message"] == "Engine shutdown successfully"
    assert client.get("/engine/ready").json() == {"ready": False}


def test_init_with_explicit_path(client, engine_cmd) -> None:
    r = client.post("/engine/init", json={"enginePath": engine_cmd("ponder")})
    assert r.status_code == 200
    assert client.post("/engine/move", json={"sfen": HIRATE}).json() == {"move": "7g7f"}


def test_init_spawn_failure(client) -> None:
    r = client.post("/engine/init", json={"enginePath": "/nonexistent/usi-engine"})
    assert r.status_code == 500
    assert r.json()["detail"].startswith("Failed to start engine")


def test_init_handshake_timeout(client, engine_cmd, monkeypatch) -> None:
    monkeypatch.setattr(usi_bridge, "HANDSHAKE_TIMEOUT_S", 0.3)
    r = client.post("/engine/init", json={"enginePath": engine_cmd("mute")})
    assert r.status_code == 504
    assert "usi handshake" in r.json()["detail"]


def test_move_engine_crash(client, engine_cmd) -> None:
    client.post("/engine/init", json={"enginePath": engine_cmd("crash")})
    r = client.post("/engine/move", json={"sfen": HIRATE, "timeMs": 100})
    assert r.status_code == 502


def test_move_request_validation(client) -> None:
    assert client.post("/engine/move", json={"sfen": ""}).status_code == 422
    assert client.post("/engine/move", json={"sfen": HIRATE, "timeMs": 0}).status_code == 422
    assert client.post("/engine/move", json={"sfen": HIRATE, "extra": 1}).status_code == 422

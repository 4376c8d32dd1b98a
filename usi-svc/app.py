# Path: usi-svc/app.py
"""
USI Engine Service: one engine process per instance.

Exposes:
  - GET  /health            -> {"ok": true}
  - POST /engine/init       -> start engine + usi/isready handshake
        {enginePath?}
  - POST /engine/move       -> {"move": "<usi move>"}
        {sfen, timeMs, moves[]}
  - POST /engine/shutdown   -> quit + kill engine
  - GET  /engine/ready      -> {"ready": bool}
  - POST /engine/stop       -> send `stop` to a running search (best-effort)

Notes:
  * The bridge blocks, so endpoints are plain `def` (FastAPI runs them in its threadpool).
  * All session calls are serialized by one lock; /engine/stop bypasses it on purpose
    so it can reach an engine that is in the middle of a search.
"""
from __future__ import annotations

import os
import shlex
import sys
import threading
from typing import Optional

from fastapi import FastAPI, HTTPException

from errors import (
    EngineExited,
    HandshakeTimeout,
    NotStarted,
    ReadinessTimeout,
    SearchTimeout,
    SpawnFailed,
    StreamCaptureFailed,
    Timeout,
    UsiError,
    WriteFailed,
)
from schemas import InitRequest, MoveRequest, MoveResponse, ReadyResponse, StatusResponse
from usi_bridge import UsiBridge

app = FastAPI(title="usi-svc", version="1.0")

# Default to the bundled stand-in engine
_MOCK_ENGINE = os.path.abspath(os.path.join(os.path.dirname(__file__), "usi_main.py"))
ENGINE_PATH = os.getenv("USI_ENGINE_PATH") or shlex.join([sys.executable, _MOCK_ENGINE])
print(f"[DBG] ENGINE_PATH={ENGINE_PATH}", flush=True)

bridge = UsiBridge(ENGINE_PATH)
_lock = threading.Lock()


def _http_error(e: UsiError) -> HTTPException:
    """Translate core errors into user-facing messages."""
    if isinstance(e, NotStarted):
        return HTTPException(409, f"Engine not initialized: {e}")
    if isinstance(e, HandshakeTimeout):
        return HTTPException(504, "Engine did not answer the usi handshake")
    if isinstance(e, ReadinessTimeout):
        return HTTPException(504, "Engine did not report readyok")
    if isinstance(e, SearchTimeout):
        return HTTPException(504, "Engine did not return a move in time")
    if isinstance(e, Timeout):
        return HTTPException(504, f"Engine timed out: {e}")
    if isinstance(e, EngineExited):
        return HTTPException(502, f"Engine process exited: {e}")
    if isinstance(e, (SpawnFailed, StreamCaptureFailed)):
        return HTTPException(500, f"Failed to start engine: {e}")
    if isinstance(e, WriteFailed):
        return HTTPException(500, f"Failed to talk to engine: {e}")
    return HTTPException(500, f"Engine error: {e}")


@app.get("/health")
def health():
    return {"ok": True}


@app.post("/engine/init", response_model=StatusResponse)
def engine_init(req: Optional[InitRequest] = None):
    path = (req.enginePath if req else None) or ENGINE_PATH
    print(f"[ENGINE] init path='{path}'", flush=True)
    with _lock:
        try:
            bridge.initialize(path)
        except UsiError as e:
            print(f"[ENGINE] init failed: {e!r}", flush=True)
            raise _http_error(e)
    return StatusResponse(message="Engine initialized successfully")


@app.post("/engine/move", response_model=MoveResponse)
def engine_move(req: MoveRequest):
    print(f"[ENGINE] move req sfen='{req.sfen}' timeMs={req.timeMs} moves={len(req.moves)}", flush=True)
    with _lock:
        try:
            move = bridge.request_move(req.sfen, req.timeMs, req.moves)
        except UsiError as e:
            print(f"[ENGINE] move failed: {e!r}", flush=True)
            raise _http_error(e)
    print(f"[ENGINE] move: bestmove={move}", flush=True)
    return MoveResponse(move=move)


@app.post("/engine/shutdown", response_model=StatusResponse)
def engine_shutdown():
    with _lock:
        if bridge.process.proc is None:
            raise HTTPException(409, "Engine not running")
        bridge.terminate()
    print("[ENGINE] shutdown: done", flush=True)
    return StatusResponse(message="Engine shutdown successfully")


@app.get("/engine/ready", response_model=ReadyResponse)
def engine_ready():
    return ReadyResponse(ready=bridge.is_ready)


@app.post("/engine/stop", response_model=StatusResponse)
def engine_stop():
    """Stop the current search (best-effort; the move request still returns its bestmove)."""
    try:
        bridge.halt()
    except UsiError as e:
        raise _http_error(e)
    return StatusResponse(message="Stop sent")


@app.on_event("shutdown")
def _shutdown():
    print("[DBG] app shutdown: stopping bridge", flush=True)
    bridge.terminate()
    print("[DBG] app shutdown: done", flush=True)

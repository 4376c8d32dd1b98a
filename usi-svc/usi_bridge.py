# Path: usi-svc/usi_bridge.py
"""
Purpose: Drive a USI engine through handshake, move search and shutdown as a
small state machine with timeouts.

NOT_STARTED -> STARTING -> READY -> SEARCHING -> READY ... -> STOPPED

- Receive loops ignore any line that is not the awaited response, so engines
  may emit diagnostics before/interleaved with it.
- Info lines during a search are telemetry only (optional on_info callback).
- A search that timed out is marked stale; the next search sends STOP first
  and drains the late bestmove so it cannot be mistaken for a fresh answer.
  halt() on an idle session marks it stale as well: some engines answer an
  idle STOP with a bestmove.
- One command in flight per session; callers serialize access.
"""
from __future__ import annotations

import enum
import os
import time
from typing import Callable, Iterable, Optional

import usi_commands
from errors import (
    EngineExited,
    HandshakeTimeout,
    NotReady,
    ReadinessTimeout,
    SearchTimeout,
    Timeout,
    UsiError,
)
from usi_parser import BestMove, HandshakeAck, ReadyAck, SearchInfo, ThinkingInfo, classify
from usi_process import UsiProcess

PRINT_DBG = os.getenv("USI_DEBUG", "1") != "0"
def _dbg(msg: str):
    if PRINT_DBG:
        print(f"[DBG] usi_bridge: {msg}", flush=True)

HANDSHAKE_TIMEOUT_S = 5.0     # per line, while waiting for usiok / readyok
SEARCH_GRACE_MS = 5000        # added to the think time for the whole search
DRAIN_TIMEOUT_S = 0.8         # stale-search drain window


class SessionState(enum.Enum):
    NOT_STARTED = "not_started"
    STARTING = "starting"
    READY = "ready"
    SEARCHING = "searching"
    STOPPED = "stopped"


class UsiBridge:
    def __init__(self, engine_path: Optional[str] = None, process: Optional[UsiProcess] = None):
        self.engine_path = engine_path
        self.process = process or UsiProcess()
        self.state = SessionState.NOT_STARTED
        self.last_info: Optional[ThinkingInfo] = None
        self._stale_search = False
        self._stop_sent = False
        _dbg(f"__init__ engine_path={engine_path}")

    # ---------------- lifecycle ----------------
    def initialize(self, executable_path: Optional[str] = None) -> None:
        path = executable_path or self.engine_path
        if not path:
            raise ValueError("no engine path given")
        # re-initialize replaces whatever was running before
        if self.process.proc is not None:
            self.terminate()

        self.state = SessionState.STARTING
        self._stale_search = False
        self._stop_sent = False
        self.process.start(path)

        try:
            self.process.send_line(usi_commands.handshake())
            try:
                self._await(HandshakeAck, HANDSHAKE_TIMEOUT_S)
            except Timeout as e:
                raise HandshakeTimeout(f"no usiok within {HANDSHAKE_TIMEOUT_S}s") from e
            _dbg("handshake ok")

            self.process.send_line(usi_commands.readiness_check())
            try:
                self._await(ReadyAck, HANDSHAKE_TIMEOUT_S)
            except Timeout as e:
                raise ReadinessTimeout(f"no readyok within {HANDSHAKE_TIMEOUT_S}s") from e
            _dbg("isready ok")
        except EngineExited:
            # engine died mid-handshake; reap it so it does not linger until the next initialize
            self.terminate()
            raise

        self.engine_path = path
        self.state = SessionState.READY

    def terminate(self) -> None:
        """Quit the engine from any state. Safe to call repeatedly."""
        if self.process.proc is not None:
            try:
                self.process.send_line(usi_commands.quit())
            except UsiError as e:
                _dbg(f"terminate: quit not delivered ({e})")
        self.process.stop()
        self.state = SessionState.STOPPED

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.terminate()
        return False

    # ---------------- fire-and-forget commands ----------------
    def halt(self) -> None:
        """Ask the engine to stop thinking. Does not wait for bestmove."""
        self.process.send_line(usi_commands.stop())
        if self.state is SessionState.READY:
            # a bestmove answering this stop must not be read as the next search's move
            self._stale_search = True
            self._stop_sent = True

    def new_game(self) -> None:
        self._require_ready()
        self.process.send_line(usi_commands.new_game())

    def set_option(self, name: str, value: str) -> None:
        self._require_ready()
        self.process.send_line(usi_commands.set_option(name, value))

    # ---------------- search ----------------
    def request_move(
        self,
        board: str,
        think_ms: int,
        moves: Iterable[str] = (),
        on_info: Optional[Callable[[ThinkingInfo], None]] = None,
    ) -> str:
        """Search `board` (+ moves) for `think_ms` byoyomi and return the best move token."""
        return self._search(board, moves, usi_commands.search_fixed_time(think_ms), think_ms, on_info)

    def request_move_with_clock(
        self,
        board: str,
        black_ms: int,
        white_ms: int,
        black_inc_ms: int = 0,
        white_inc_ms: int = 0,
        moves: Iterable[str] = (),
        on_info: Optional[Callable[[ThinkingInfo], None]] = None,
    ) -> str:
        go = usi_commands.search_with_clock(black_ms, white_ms, black_inc_ms, white_inc_ms)
        # whichever side is to move, it cannot think longer than its clock plus increment
        budget_ms = max(black_ms + black_inc_ms, white_ms + white_inc_ms)
        return self._search(board, moves, go, budget_ms, on_info)

    def request_move_to_depth(
        self,
        board: str,
        depth: int,
        timeout_ms: int,
        moves: Iterable[str] = (),
        on_info: Optional[Callable[[ThinkingInfo], None]] = None,
    ) -> str:
        return self._search(board, moves, usi_commands.search_fixed_depth(depth), timeout_ms, on_info)

    def _search(self, board, moves, go_cmd, budget_ms, on_info) -> str:
        self._require_ready()
        if self._stale_search:
            self._drain_stale_search()

        self.process.send_line(usi_commands.position(board, moves))
        self.process.send_line(go_cmd)
        self.state = SessionState.SEARCHING
        self.last_info = None

        timeout_s = (budget_ms + SEARCH_GRACE_MS) / 1000.0
        deadline = time.monotonic() + timeout_s
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self._mark_stale()
                    raise SearchTimeout(f"no bestmove within {timeout_s:.1f}s")
                try:
                    line = self.process.receive_line(remaining)
                except Timeout as e:
                    self._mark_stale()
                    raise SearchTimeout(f"no bestmove within {timeout_s:.1f}s") from e
                except EngineExited:
                    # reap the dead process; caller must initialize again
                    self.terminate()
                    raise
                resp = classify(line)
                if isinstance(resp, SearchInfo):
                    self.last_info = resp.info
                    if on_info is not None:
                        on_info(resp.info)
                elif isinstance(resp, BestMove):
                    _dbg(f"bestmove={resp.move} ponder={resp.ponder}")
                    return resp.move
                # anything else: ignore
        finally:
            if self.state is SessionState.SEARCHING:
                self.state = SessionState.READY

    def _drain_stale_search(self) -> None:
        """STOP the abandoned search and swallow its late bestmove (best-effort)."""
        _dbg(f"stale bestmove pending; draining (stop_sent={self._stop_sent})")
        self._stale_search = False
        if not self._stop_sent:
            self.process.send_line(usi_commands.stop())
        self._stop_sent = False
        deadline = time.monotonic() + DRAIN_TIMEOUT_S
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            try:
                line = self.process.receive_line(remaining)
            except Timeout:
                return
            except EngineExited:
                self.terminate()
                raise
            if isinstance(classify(line), BestMove):
                return

    # ---------------- helpers ----------------
    def _await(self, kind, timeout_s: float):
        """Read lines until one classifies as `kind`; each read waits up to timeout_s."""
        while True:
            resp = classify(self.process.receive_line(timeout_s))
            if isinstance(resp, kind):
                return resp

    def _mark_stale(self) -> None:
        self._stale_search = True
        self._stop_sent = False

    def _require_ready(self) -> None:
        if self.state is not SessionState.READY:
            raise NotReady(f"engine not ready (state={self.state.value})")


# Path: usi-svc/engines/mock_engine.py
"""
Deterministic stand-in USI engine: lookup-table moves, no shogi rules.
Lets the service and its tests run without a real engine binary.
"""
from __future__ import annotations
import time
from typing import Dict, List

from .base import Engine as BaseEngine

HIRATE_SFEN = "lnsgkgsnl/1b5r1/ppppppppp/9/9/9/PPPPPPPPP/1R5B1/LNSGKGSNL b - 1"

# Keyed by the four sfen fields; first entry is played
OPENING_MOVES: Dict[str, List[str]] = {
    HIRATE_SFEN: ["7g7f", "2g2f", "5g5f", "6g6f"],
}
FALLBACK_MOVE = "7g7f"

INFO_DEPTH = 3              # number of `info` lines emitted per search
MAX_THINK_S = 0.05          # never actually sleep the full byoyomi


class MockEngine(BaseEngine):
    def engine_name(self) -> str:
        return "PyMockUSI"

    def _lookup(self) -> str:
        key = " ".join(self.sfen.split()[:4])
        candidates = OPENING_MOVES.get(key)
        if candidates and not self.moves:
            return candidates[0]
        return FALLBACK_MOVE

    def go(self, cmd: str) -> str:
        best = self._lookup()
        t0 = time.monotonic()
        for depth in range(1, INFO_DEPTH + 1):
            nodes = 100 * depth
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            print(f"info depth {depth} score cp {10 * depth} nodes {nodes} nps {nodes * 1000} time {elapsed_ms} pv {best}", flush=True)
        if "byoyomi" in cmd.split():
            time.sleep(MAX_THINK_S)
        return best

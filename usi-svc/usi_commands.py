# Path: usi-svc/usi_commands.py
"""
Purpose: Build exact USI command lines (no trailing newline).
Usage: Called by usi_bridge; usi_process appends the line terminator.

Tokens are interpolated verbatim. USI is whitespace-delimited, so callers
must not pass tokens that contain whitespace.
"""
from __future__ import annotations

from typing import Iterable


def handshake() -> str:
    return "usi"


def readiness_check() -> str:
    return "isready"


def new_game() -> str:
    return "usinewgame"


def position(board: str, moves: Iterable[str] = ()) -> str:
    # Examples:
    #   position sfen lnsgkgsnl/1b5r1/ppppppppp/9/9/9/PPPPPPPPP/1R5B1/LNSGKGSNL b - 1
    #   position sfen <sfen> moves 7g7f 3c3d
    moves = list(moves)
    if not moves:
        return f"position sfen {board}"
    return f"position sfen {board} moves {' '.join(moves)}"


def search_fixed_time(ms: int) -> str:
    """Byoyomi: a fixed per-move allotment in milliseconds."""
    return f"go byoyomi {int(ms)}"


def search_with_clock(black_ms: int, white_ms: int, black_inc_ms: int, white_inc_ms: int) -> str:
    return f"go btime {int(black_ms)} wtime {int(white_ms)} binc {int(black_inc_ms)} winc {int(white_inc_ms)}"


def search_fixed_depth(depth: int) -> str:
    return f"go depth {int(depth)}"


def stop() -> str:
    return "stop"


def quit() -> str:
    return "quit"


def set_option(name: str, value: str) -> str:
    return f"setoption name {name} value {value}"

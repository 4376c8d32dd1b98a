# Path: usi-svc/usi_parser.py
"""
Purpose: Classify single USI output lines into typed responses.
Usage: Called by usi_bridge for every line drained from the engine.

Never raises: malformed lines degrade to Unrecognized, partial info lines
to a SearchInfo with missing fields.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class ThinkingInfo:
    depth: Optional[int] = None
    score_cp: Optional[int] = None      # centipawns, signed
    nodes: Optional[int] = None
    nps: Optional[int] = None
    time: Optional[int] = None          # elapsed ms
    pv: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class HandshakeAck:
    pass


@dataclass(frozen=True)
class ReadyAck:
    pass


@dataclass(frozen=True)
class BestMove:
    move: str
    ponder: Optional[str] = None


@dataclass(frozen=True)
class SearchInfo:
    info: ThinkingInfo


@dataclass(frozen=True)
class Unrecognized:
    raw: str


Response = Union[HandshakeAck, ReadyAck, BestMove, SearchInfo, Unrecognized]


def _int_or_none(tok: str, signed: bool = False) -> Optional[int]:
    # plain ASCII digits only; int() alone would take "1_0" and full-width digits
    signs = "+-" if signed else "+"
    digits = tok[1:] if tok[:1] in signs else tok
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(tok)


def classify(line: str) -> Response:
    txt = line.strip()
    if not txt:
        return Unrecognized("")
    if txt == "usiok":
        return HandshakeAck()
    if txt == "readyok":
        return ReadyAck()
    if txt.startswith("bestmove"):
        return parse_bestmove(txt)
    if txt.startswith("info"):
        return parse_info(txt)
    return Unrecognized(txt)


def parse_bestmove(line: str) -> Response:
    # bestmove <move> [ponder <move>]
    parts = line.split()
    if len(parts) < 2:
        return Unrecognized(line.strip())
    ponder = parts[3] if len(parts) >= 4 and parts[2] == "ponder" else None
    return BestMove(parts[1], ponder)


def parse_info(line: str) -> SearchInfo:
    # Examples:
    #   info depth 5 score cp 100 nodes 1000 nps 50000 time 20 pv 7g7f 3c3d
    #   info depth 12 score mate 3 pv ...      (mate is skipped, cp only)
    parts = line.split()
    info = ThinkingInfo()
    n = len(parts)
    i = 1  # skip "info"
    while i < n:
        tok = parts[i]
        if tok in ("depth", "nodes", "nps", "time"):
            if i + 1 < n:
                setattr(info, tok, _int_or_none(parts[i + 1]))
                i += 2
            else:
                i += 1
        elif tok == "score":
            if i + 2 < n and parts[i + 1] == "cp":
                info.score_cp = _int_or_none(parts[i + 2], signed=True)
                i += 3
            else:
                i += 1
        elif tok == "pv":
            info.pv = parts[i + 1:]
            break
        else:
            i += 1
    return SearchInfo(info)

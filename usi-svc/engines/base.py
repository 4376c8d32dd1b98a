# Path: usi-svc/engines/base.py
from __future__ import annotations
import sys
from abc import ABC, abstractmethod
from typing import Dict, List

_DEFAULT_ID_NAME = "PyMockUSI"
_DEFAULT_ID_AUTHOR = "open-source"

class Engine(ABC):
    """
    Base USI Engine (stdin/stdout loop).

    Subclasses must implement:
      - go(cmd) -> str          (may print `info ...` lines, returns bestmove)
      - on_new_game() (optional)
      - on_quit() (optional)

    Positions are stored opaquely: `sfen` plus the list of moves after it.
    """

    def __init__(self) -> None:
        self.sfen: str = ""
        self.moves: List[str] = []
        self.options: Dict[str, str] = {}

    # ---- Hooks / metadata (override if needed) ----
    def engine_name(self) -> str:
        return _DEFAULT_ID_NAME

    def engine_author(self) -> str:
        return _DEFAULT_ID_AUTHOR

    # ---- Lifecycle (optional overrides) ----
    def on_new_game(self) -> None:
        pass

    def on_quit(self) -> None:
        pass

    # ---- Abstract engine ops ----
    @abstractmethod
    def go(self, cmd: str) -> str:
        """Handle a full `go ...` line and return the bestmove token."""
        raise NotImplementedError

    # ---- Shared helpers ----
    def handle_position_cmd(self, cmd: str) -> None:
        # position sfen <4 sfen fields> [moves m1 m2 ...]
        # position startpos [moves ...]
        parts = cmd.split()
        if "moves" in parts:
            idx = parts.index("moves")
            head, self.moves = parts[1:idx], parts[idx + 1:]
        else:
            head, self.moves = parts[1:], []
        if head and head[0] == "sfen":
            self.sfen = " ".join(head[1:])
        else:
            self.sfen = " ".join(head)

    def handle_setoption_cmd(self, cmd: str) -> None:
        # setoption name <name> value <value>
        parts = cmd.split()
        if len(parts) >= 5 and parts[1] == "name" and parts[3] == "value":
            self.options[parts[2]] = " ".join(parts[4:])

    def _print_usi_id(self) -> None:
        print(f"id name {self.engine_name()}")
        print(f"id author {self.engine_author()}")
        print("usiok")
        sys.stdout.flush()

    # ---- Shared USI loop ----
    def usi_loop(self) -> None:
        while True:
            line = sys.stdin.readline()
            if not line:
                break
            cmd = line.strip()

            if cmd == "usi":
                self._print_usi_id()

            elif cmd == "isready":
                print("readyok")
                sys.stdout.flush()

            elif cmd == "usinewgame":
                self.on_new_game()

            elif cmd.startswith("setoption "):
                self.handle_setoption_cmd(cmd)

            elif cmd.startswith("position "):
                self.handle_position_cmd(cmd)

            elif cmd.startswith("go"):
                best = self.go(cmd)
                print(f"bestmove {best}")
                sys.stdout.flush()

            elif cmd == "stop":
                # go is synchronous, so any stop read here is idle: no reply
                continue

            elif cmd == "quit":
                self.on_quit()
                break

# Path: usi-svc/usi_process.py
"""
Purpose: Own one USI engine subprocess and bridge its stdout into a
blocking-with-timeout line interface.

- One daemon reader thread per started process drains stdout into a queue.
- The reader is the only producer, receive_line() the only consumer.
- End of stdout is pushed into the queue as a marker, so a dead engine
  surfaces as EngineExited instead of a silent timeout.
- stop() is idempotent and swallows teardown errors.
"""
from __future__ import annotations

import os
import queue
import shlex
import subprocess
import threading
import time
from typing import Optional

import usi_commands
from errors import (
    AlreadyStarted,
    EngineExited,
    NotStarted,
    SpawnFailed,
    StreamCaptureFailed,
    Timeout,
    WriteFailed,
)

PRINT_DBG = os.getenv("USI_DEBUG", "1") != "0"
def _dbg(msg: str):
    if PRINT_DBG:
        print(f"[DBG] usi_process: {msg}", flush=True)

QUIT_GRACE_S = 0.1          # time given to the engine to exit on its own
READER_JOIN_S = 1.0

# Pushed by the reader thread when stdout closes
_EOF = None


class UsiProcess:
    def __init__(self) -> None:
        self.proc: Optional[subprocess.Popen] = None
        self._stdin = None
        self._lines: "queue.Queue[Optional[str]]" = queue.Queue()
        self._reader: Optional[threading.Thread] = None
        self._eof = False

    # ---------------- lifecycle ----------------
    def start(self, executable_path: str) -> None:
        """Spawn the engine. `executable_path` may carry arguments ("python engine.py")."""
        if self.proc is not None:
            raise AlreadyStarted(f"engine already running (pid={self.proc.pid})")

        argv = shlex.split(executable_path)
        if not argv:
            raise SpawnFailed("empty engine command")
        _dbg(f"starting engine: {argv}")
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError) as e:
            raise SpawnFailed(f"failed to start engine process {argv[0]!r}: {e}") from e

        if proc.stdin is None or proc.stdout is None:
            proc.kill()
            proc.wait()
            raise StreamCaptureFailed("failed to capture engine stdin/stdout")

        # fresh buffer per process; lines from a previous run never leak in
        self._lines = queue.Queue()
        self._eof = False
        self.proc = proc
        self._stdin = proc.stdin
        self._reader = threading.Thread(
            target=self._read_loop,
            args=(proc.stdout, self._lines),
            name=f"usi-reader-{proc.pid}",
            daemon=True,
        )
        self._reader.start()
        _dbg(f"engine started pid={proc.pid}")

    def stop(self) -> None:
        """Send quit, give the engine a moment, then kill and reap. Safe to repeat."""
        proc = self.proc
        if proc is None:
            return
        try:
            self.send_line(usi_commands.quit())
        except (WriteFailed, NotStarted) as e:
            _dbg(f"stop: quit not delivered ({e})")
        time.sleep(QUIT_GRACE_S)

        try:
            proc.kill()
        except OSError:
            pass
        try:
            proc.wait(timeout=5)
        except (OSError, subprocess.TimeoutExpired) as e:
            _dbg(f"stop: wait failed ({e})")
        # reader sees EOF once the process is gone; join before closing its stream
        if self._reader is not None and self._reader is not threading.current_thread():
            self._reader.join(timeout=READER_JOIN_S)
        for stream in (proc.stdin, proc.stdout):
            try:
                if stream is not None:
                    stream.close()
            except OSError:
                pass
        _dbg(f"engine stopped pid={proc.pid} code={proc.returncode}")

        self.proc = None
        self._stdin = None
        self._reader = None

    @property
    def is_running(self) -> bool:
        return self.proc is not None and self.proc.poll() is None

    @property
    def pid(self) -> Optional[int]:
        return self.proc.pid if self.proc is not None else None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False

    # ---------------- reader thread ----------------
    @staticmethod
    def _read_loop(stdout, lines: "queue.Queue[Optional[str]]") -> None:
        try:
            for raw in stdout:
                lines.put(raw.rstrip("\r\n"))
        except (OSError, ValueError):
            # stream closed under us during stop()
            pass
        finally:
            lines.put(_EOF)

    # ---------------- i/o ----------------
    def send_line(self, text: str) -> None:
        if self._stdin is None:
            raise NotStarted("engine not started")
        _dbg(f">> {text}")
        try:
            self._stdin.write(text + "\n")
            self._stdin.flush()
        except (OSError, ValueError) as e:
            raise WriteFailed(f"failed to write to engine: {e}") from e

    def receive_line(self, timeout: float) -> str:
        """
        Pop the oldest buffered line, waiting at most `timeout` seconds.
        Raises:
          Timeout      -> nothing arrived in time
          EngineExited -> stdout closed and the buffer is drained
          NotStarted   -> no process
        """
        if self.proc is None:
            raise NotStarted("engine not started")
        if self._eof and self._lines.empty():
            raise EngineExited(self._exit_message())
        try:
            if timeout <= 0:
                line = self._lines.get_nowait()
            else:
                line = self._lines.get(timeout=timeout)
        except queue.Empty:
            raise Timeout(f"no engine output within {timeout:.3f}s") from None
        if line is _EOF:
            self._eof = True
            raise EngineExited(self._exit_message())
        _dbg(f"<< {line}")
        return line

    def _exit_message(self) -> str:
        code = self.proc.poll() if self.proc is not None else None
        return f"engine terminated unexpectedly (code={code})"

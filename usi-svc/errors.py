# Path: usi-svc/errors.py
"""
Purpose: Error taxonomy for the USI process and session layers.

Supervisor (usi_process) raises the low-level errors; the session (usi_bridge)
re-raises timeouts with protocol context, chained from the original Timeout.
"""
from __future__ import annotations


class UsiError(Exception):
    """Base class for everything raised by the USI core."""


# ---------------- supervisor ----------------
class SpawnFailed(UsiError):
    pass


class StreamCaptureFailed(UsiError):
    pass


class NotStarted(UsiError):
    pass


class NotReady(NotStarted):
    """Session exists but is not in a state that accepts the command."""


class AlreadyStarted(UsiError):
    pass


class WriteFailed(UsiError):
    pass


class Timeout(UsiError):
    pass


class EngineExited(UsiError):
    """Engine stdout reached end of stream (process exited or crashed)."""


# ---------------- session ----------------
class HandshakeTimeout(Timeout):
    pass


class ReadinessTimeout(Timeout):
    pass


class SearchTimeout(Timeout):
    pass

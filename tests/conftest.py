import os
import shlex
import sys

import pytest

# Service modules are flat (`import usi_bridge`), as inside the container.
svc_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "usi-svc"))
if svc_dir not in sys.path:
    sys.path.insert(0, svc_dir)

SCRIPTED_ENGINE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scripted_engine.py")
MOCK_ENGINE = os.path.join(svc_dir, "usi_main.py")


@pytest.fixture
def engine_cmd(tmp_path):
    """Build a command line for tests/scripted_engine.py running `scenario`.

    The engine appends every command it receives to `<tmp_path>/recv.log`.
    """
    log_path = tmp_path / "recv.log"

    def build(scenario: str) -> str:
        return shlex.join([sys.executable, SCRIPTED_ENGINE, scenario, str(log_path)])

    build.log_path = log_path
    build.received = lambda: _read_log(log_path)
    return build


@pytest.fixture
def mock_engine_cmd() -> str:
    return shlex.join([sys.executable, MOCK_ENGINE])


def _read_log(path) -> list:
    if not os.path.exists(path):
        return []
    with open(path, encoding="utf-8") as fh:
        return [line.rstrip("\n") for line in fh]

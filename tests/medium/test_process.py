import signal
import subprocess
import sys
from pathlib import Path

import pytest

from electrsd.errors import SpawnError
from electrsd.utils.process import Process
from tests.utils.polling import wait_for_event

pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX signals")

SLEEPER = [sys.executable, "-c", "import time; time.sleep(100)"]
INTERRUPTIBLE = (
    "import pathlib, signal, sys, time\n"
    "signal.signal(signal.SIGINT, lambda *_: sys.exit(7))\n"
    "pathlib.Path(sys.argv[1]).touch()\n"
    "while True: time.sleep(0.05)\n"
)


@pytest.fixture()
def sleeper():
    process = Process.start(SLEEPER)
    yield process
    process.kill()
    process.wait(timeout=5)


# ============================================================================
# Status Checks
# ============================================================================


def test_running_process_has_no_exit_code(sleeper: Process):
    """
    A live process reports no exit code
    """
    assert sleeper.is_running()
    assert sleeper.exit_code() is None
    assert sleeper.psutil.pid == sleeper.pid


def test_exit_code_after_exit():
    """
    The exit status is reported once the process is gone
    """
    process = Process.start([sys.executable, "-c", "import sys; sys.exit(4)"])
    process.wait(timeout=5)

    assert not process.is_running()
    assert process.exit_code() == 4


def test_spawn_missing_executable(tmp_path: Path):
    with pytest.raises(SpawnError, match="Error while executing"):
        Process.start([str(tmp_path / "missing")])


# ============================================================================
# Lifecycle Management
# ============================================================================


def test_kill(sleeper: Process):
    """
    kill sends SIGKILL
    """
    sleeper.kill()

    assert sleeper.wait(timeout=5) == -signal.SIGKILL


def test_kill_twice(sleeper: Process):
    """
    kill on an exited process is a no-op
    """
    sleeper.kill()
    sleeper.wait(timeout=5)

    sleeper.kill()
    sleeper.interrupt()


def test_interrupt_lets_process_exit_cleanly(tmp_path: Path):
    """
    interrupt delivers SIGINT to the handler installed by the child
    """
    ready = tmp_path / "ready"
    process = Process.start([sys.executable, "-c", INTERRUPTIBLE, str(ready)])
    assert wait_for_event(ready.exists, interval=0.05, timeout=10)

    process.interrupt()
    assert process.wait(timeout=5) == 7


def test_signal_after_exit_is_ignored():
    process = Process.start([sys.executable, "-c", "pass"])
    process.wait(timeout=5)

    process.send_signal(signal.SIGUSR1)


def test_stderr_inherited(capfd: pytest.CaptureFixture[str]):
    """
    view_stderr lets the child write to our stderr, otherwise it is discarded
    """
    script = [sys.executable, "-c", "import sys; sys.stderr.write('from child')"]

    Process.start(script, view_stderr=True).wait(timeout=5)
    assert "from child" in capfd.readouterr().err

    Process.start(script).wait(timeout=5)
    assert "from child" not in capfd.readouterr().err


def test_wait_timeout(sleeper: Process):
    with pytest.raises(subprocess.TimeoutExpired):
        sleeper.wait(timeout=0.1)

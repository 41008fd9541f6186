from __future__ import annotations

import signal
import sys
from collections.abc import Sequence
from subprocess import DEVNULL, Popen

import psutil

from electrsd.errors import SignalError, SpawnError

IS_WINDOWS = sys.platform.startswith("win")


class Process:
    """
    A child process we spawned and exclusively own.

    Signals are never delivered once the child has been reaped, so a pid
    recycled by the OS cannot receive them.
    """

    # ============================================================================
    # Initialization
    # ============================================================================

    def __init__(self, popen: Popen):
        self._popen = popen
        self._proc = psutil.Process(popen.pid)

    @staticmethod
    def start(args: Sequence[str], view_stderr: bool = False) -> Process:
        try:
            popen = Popen(
                list(args),
                stdin=DEVNULL,
                stdout=DEVNULL,
                stderr=None if view_stderr else DEVNULL,
            )
        except OSError as e:
            raise SpawnError(args[0], e) from e

        return Process(popen)

    # ============================================================================
    # Properties
    # ============================================================================

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def psutil(self) -> psutil.Process:
        return self._proc

    # ============================================================================
    # Status Checks
    # ============================================================================

    def exit_code(self) -> int | None:
        """Exit status if the process has exited, reaping it; None while alive."""
        return self._popen.poll()

    def is_running(self) -> bool:
        return self.exit_code() is None

    # ============================================================================
    # Lifecycle Management
    # ============================================================================

    def send_signal(self, sig: signal.Signals) -> None:
        if not self.is_running():
            return

        try:
            self._proc.send_signal(sig)
        except psutil.NoSuchProcess:
            return
        except (psutil.AccessDenied, OSError) as e:
            raise SignalError(self.pid, sig.name, e) from e

    def interrupt(self) -> None:
        self.send_signal(signal.SIGINT)

    def kill(self) -> None:
        if not self.is_running():
            return

        try:
            self._proc.kill()
        except psutil.NoSuchProcess:
            return
        except (psutil.AccessDenied, OSError) as e:
            raise SignalError(self.pid, "SIGKILL", e) from e

    def wait(self, timeout: float | None = None) -> int:
        return self._popen.wait(timeout)

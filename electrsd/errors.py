from __future__ import annotations

from pathlib import Path


class ElectrsdError(Exception):
    """Base class for every error raised by electrsd."""


class BothDirsSpecified(ElectrsdError):
    """Both `tmpdir` and `staticdir` were set on the same Conf."""

    def __init__(self, tmpdir: Path, staticdir: Path):
        super().__init__(f"tmpdir ({tmpdir}) and staticdir ({staticdir}) cannot be used together")
        self.tmpdir = tmpdir
        self.staticdir = staticdir


class NoElectrsExecutableFound(ElectrsdError):
    """
    No electrs executable: no env override, no downloaded release
    and nothing named `electrs` in PATH.
    """

    def __init__(self):
        super().__init__("no electrs executable found (set ELECTRS_EXEC or put electrs in PATH)")


class BothEnvVars(ElectrsdError):
    def __init__(self):
        super().__init__("ELECTRS_EXEC and ELECTRS_EXE are both set, use only one")


class EarlyExit(ElectrsdError):
    """The electrs process exited before its electrum port became reachable."""

    def __init__(self, exit_code: int):
        super().__init__(f"electrs exited early with status {exit_code}")
        self.exit_code = exit_code


class MissingP2PSocket(ElectrsdError):
    def __init__(self):
        super().__init__("--daemon-p2p-addr mode requires the upstream node to expose a p2p socket")


class SpawnError(ElectrsdError):
    def __init__(self, exe: Path | str, cause: OSError):
        super().__init__(f"Error while executing {str(exe)!r}: {cause}")
        self.exe = exe


class SignalError(ElectrsdError):
    def __init__(self, pid: int, signal_name: str, cause: Exception):
        super().__init__(f"Failed to send {signal_name} to pid {pid}: {cause}")
        self.pid = pid
        self.signal_name = signal_name


class NodeRpcError(ElectrsdError):
    """Upstream node JSON-RPC failure, transport or application level."""

    def __init__(self, method: str, message: str, code: int | None = None):
        detail = f" (code {code})" if code is not None else ""
        super().__init__(f"node rpc {method} failed{detail}: {message}")
        self.method = method
        self.code = code


class ElectrumClientError(ElectrsdError):
    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class TransactionDecodeError(ElectrsdError):
    pass

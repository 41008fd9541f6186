from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from electrsd.errors import BothDirsSpecified

DEFAULT_ATTEMPTS = 3


@dataclass(frozen=True, slots=True)
class Conf:
    """
    How to start an electrs process.

    `args` must not contain the flags the launcher manages itself:
    `--db-dir`, `--network`, `--cookie`, `--cookie-file`, `--daemon-rpc-addr`,
    `--daemon-p2p-addr`, `--jsonrpc-import`, `--electrum-rpc-addr`,
    `--monitoring-addr` and `--http-addr`.

    Work directory selection:
      - tmpdir and staticdir both set: BothDirsSpecified
      - tmpdir only: temporary directory created inside `tmpdir`
      - staticdir only: persistent directory at `staticdir`, created if missing
      - neither: temporary directory in TEMPDIR_ROOT or the OS default

    `attempts` bounds how many times the whole launch is retried when electrs
    exits before its electrum port is reachable. The OS hands out free ports
    but does not book them, so another process may take one in between.
    """
    args: tuple[str, ...] = ()
    view_stderr: bool = False
    http_enabled: bool = False
    network: str = "dev"
    tmpdir: Path | None = None
    staticdir: Path | None = None
    attempts: int = DEFAULT_ATTEMPTS

    # Pass the cookie inline with --cookie instead of --cookie-file. Implies jsonrpc_import.
    legacy: bool = False
    # electrs 0.5.x imports blocks over JSON-RPC instead of the node p2p port
    jsonrpc_import: bool = False

    def __post_init__(self):
        if self.attempts < 0:
            raise ValueError(f"attempts must be >= 0, got {self.attempts}")

    @staticmethod
    def for_jsonrpc_import(legacy: bool = False) -> Conf:
        return Conf(args=("-vvv",), jsonrpc_import=True, legacy=legacy)

    @property
    def uses_jsonrpc_import(self) -> bool:
        return self.jsonrpc_import or self.legacy

    def validate(self) -> None:
        if self.tmpdir is not None and self.staticdir is not None:
            raise BothDirsSpecified(self.tmpdir, self.staticdir)

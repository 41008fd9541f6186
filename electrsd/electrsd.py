from __future__ import annotations

import os
import signal
import time
import weakref
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

from electrsd import ext
from electrsd.conf import Conf
from electrsd.config import Settings
from electrsd.data_dir import DataDir, Persistent, Temporary, resolve_data_dir
from electrsd.electrum import ElectrumClient
from electrsd.errors import EarlyExit, ElectrumClientError, MissingP2PSocket, NodeRpcError
from electrsd.logging_config import get_logger
from electrsd.node import NodeParams, UpstreamNode
from electrsd.utils.errors import fail_gracefully
from electrsd.utils.ports import LOCALHOST, format_addr, get_available_port
from electrsd.utils.process import IS_WINDOWS, Process

log = get_logger(__name__)

READINESS_POLL_INTERVAL = 0.5


@dataclass(frozen=True, slots=True)
class Addresses:
    electrum: str
    monitoring: str
    http: str | None


def allocate_addresses(http_enabled: bool, host: str = LOCALHOST) -> Addresses:
    """Fresh OS-assigned ports for one launch attempt."""
    return Addresses(
        electrum=format_addr(host, get_available_port(host)),
        # electrs always opens it and has no flag to turn it off
        monitoring=format_addr(host, get_available_port(host)),
        http=format_addr(host, get_available_port(host)) if http_enabled else None,
    )


def build_args(conf: Conf, node: NodeParams, db_dir: Path, addresses: Addresses) -> list[str]:
    args = list(conf.args)
    args += ["--db-dir", str(db_dir)]
    args += ["--network", conf.network]

    if conf.legacy:
        cookie = node.cookie_file.read_text(encoding="utf-8").strip()
        args += ["--cookie", cookie]
    else:
        args += ["--cookie-file", str(node.cookie_file)]

    args += ["--daemon-rpc-addr", node.rpc_socket]

    if conf.uses_jsonrpc_import:
        args.append("--jsonrpc-import")
    else:
        if node.p2p_socket is None:
            raise MissingP2PSocket()
        args += ["--daemon-p2p-addr", node.p2p_socket]

    args += ["--electrum-rpc-addr", addresses.electrum]
    args += ["--monitoring-addr", addresses.monitoring]
    if addresses.http is not None:
        args += ["--http-addr", addresses.http]

    return args


class ElectrsD:
    """
    A running electrs process connected to an upstream node.

    Owns the process and its work directory. Both are released exactly once,
    by `close()`, by leaving a `with` block, or when the object is collected.
    """

    def __init__(
        self,
        process: Process,
        client: ElectrumClient,
        work_dir: DataDir,
        electrum_url: str,
        esplora_url: str | None,
    ):
        self._process = process
        self.client = client
        self._work_dir = work_dir
        self.electrum_url = electrum_url
        self.esplora_url = esplora_url

        self._finalizer = weakref.finalize(self, _dispose, process, client, work_dir)

    # ------------
    # -- Launch --
    # ------------
    @staticmethod
    def new(exe: str | os.PathLike[str], node: UpstreamNode) -> ElectrsD:
        return ElectrsD.with_conf(exe, node, Conf())

    @staticmethod
    def with_conf(
        exe: str | os.PathLike[str],
        node: UpstreamNode,
        conf: Conf,
        settings: Settings | None = None,
    ) -> ElectrsD:
        if settings is None:
            settings = Settings.from_env()

        conf.validate()

        attempts = conf.attempts
        while True:
            try:
                return ElectrsD._launch_once(exe, node, conf, settings)
            except EarlyExit as e:
                if attempts == 0:
                    log.error("electrs early exit", exit_code=e.exit_code)
                    raise

                log.warning(
                    "electrs early exit, launching again, maybe another process used our port",
                    exit_code=e.exit_code,
                    attempts_remaining=attempts,
                )
                attempts -= 1

    @staticmethod
    def _launch_once(
        exe: str | os.PathLike[str],
        node: UpstreamNode,
        conf: Conf,
        settings: Settings,
    ) -> ElectrsD:
        _nudge_out_of_ibd(node)

        work_dir = resolve_data_dir(conf, settings.tempdir_root)
        try:
            addresses = allocate_addresses(conf.http_enabled)
            args = build_args(conf, node.params, work_dir.path, addresses)

            log.debug("Starting electrs", exe=str(exe), args=args)
            process = Process.start([os.fspath(exe), *args], view_stderr=conf.view_stderr)
            log.info("electrs started", pid=process.pid, electrum_url=addresses.electrum)

            try:
                client = _wait_until_ready(process, addresses.electrum)
            except BaseException:
                process.kill()
                raise

        except BaseException:
            work_dir.cleanup()
            raise

        log.info("electrs ready", pid=process.pid, work_dir=str(work_dir.path))
        return ElectrsD(process, client, work_dir, addresses.electrum, addresses.http)

    # ------------
    # -- Public --
    # ------------
    @property
    def workdir(self) -> Path:
        return self._work_dir.path

    @property
    def pid(self) -> int:
        return self._process.pid

    def is_running(self) -> bool:
        return self._process.is_running()

    def trigger(self) -> None:
        """Ask electrs to sync now (SIGUSR1), useful right after mining a block."""
        if IS_WINDOWS:
            return

        self._process.send_signal(signal.SIGUSR1)

    def kill(self) -> None:
        """
        Terminate electrs. Safe to call again once the process is gone.

        A persistent work directory gets SIGINT and a blocking wait so the
        index is flushed before the directory can be reused. A temporary one
        is thrown away, so the process is killed without waiting.
        """
        _terminate(self._process, self._work_dir)

    def wait_height(self, height: int) -> bool:
        return ext.wait_height(self.client, height)

    def wait_tx(self, txid: str) -> bool:
        return ext.wait_tx(self.client, txid)

    def close(self) -> None:
        """Kill electrs and remove a temporary work directory, once."""
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __enter__(self) -> ElectrsD:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ElectrsD(pid={self.pid}, electrum_url={self.electrum_url!r}, workdir={str(self.workdir)!r})"


# -------------
# -- Helpers --
# -------------
def _nudge_out_of_ibd(node: UpstreamNode) -> None:
    # electrs stays idle while the node reports initial block download, and the
    # node only leaves it after seeing a recent block, so mine one.
    info = node.client.call("getblockchaininfo")
    if not (isinstance(info, dict) and info.get("initialblockdownload") is True):
        return

    address = node.client.call("getnewaddress")
    params: Sequence[object] = [1, address]
    if node.params.private_key is not None:
        params = [1, address, node.params.private_key]

    try:
        node.client.call("generatetoaddress", params)
    except NodeRpcError:
        log.warning("Could not mine a block to leave initial block download", exc_info=True)


def _wait_until_ready(process: Process, electrum_url: str) -> ElectrumClient:
    while True:
        exit_code = process.exit_code()
        if exit_code is not None:
            raise EarlyExit(exit_code)

        try:
            return ElectrumClient.connect(electrum_url)
        except ElectrumClientError:
            time.sleep(READINESS_POLL_INTERVAL)


def _terminate(process: Process, work_dir: DataDir) -> None:
    match work_dir:
        case Persistent():
            if IS_WINDOWS:
                process.kill()
            else:
                process.interrupt()
            process.wait()

        case Temporary():
            process.kill()


@fail_gracefully(log)
def _close_client(client: ElectrumClient) -> None:
    client.close()


@fail_gracefully(log)
def _terminate_quietly(process: Process, work_dir: DataDir) -> None:
    _terminate(process, work_dir)


def _dispose(process: Process, client: ElectrumClient, work_dir: DataDir) -> None:
    _close_client(client)
    _terminate_quietly(process, work_dir)
    work_dir.cleanup()

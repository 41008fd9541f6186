"""
The upstream full node electrs indexes from.

electrsd only borrows the node: it reads its connection parameters and
issues a handful of JSON-RPC calls, it never starts or stops it.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import requests

from electrsd.errors import NodeRpcError


@dataclass(frozen=True, slots=True)
class NodeParams:
    cookie_file: Path
    # host:port
    rpc_socket: str
    p2p_socket: str | None = None
    # Tapyrus dev networks need the federation key to mine with generatetoaddress
    private_key: str | None = None


class RpcCaller(Protocol):
    def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        ...


class UpstreamNode(Protocol):
    """Minimal view of a running node needed to launch electrs against it."""

    @property
    def client(self) -> RpcCaller:
        ...

    @property
    def params(self) -> NodeParams:
        ...


class NodeRpcClient:
    """JSON-RPC 1.0 over HTTP with cookie authentication."""

    def __init__(self, rpc_socket: str, cookie_file: Path, timeout: float = 30.0):
        self._url = f"http://{rpc_socket}/"
        self._cookie_file = cookie_file
        self._timeout = timeout
        self._session = requests.Session()
        self._ids = itertools.count()

    def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        payload = {
            "jsonrpc": "1.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        try:
            response = self._session.post(
                self._url,
                json=payload,
                auth=self._auth(),
                timeout=self._timeout,
            )
        except (requests.RequestException, OSError) as e:
            raise NodeRpcError(method, str(e)) from e

        # the node answers application errors with HTTP 500 and a JSON body
        try:
            body = response.json()
        except ValueError as e:
            raise NodeRpcError(method, f"HTTP {response.status_code}: {response.text[:200]!r}") from e

        if not isinstance(body, dict):
            raise NodeRpcError(method, f"HTTP {response.status_code}: expected a JSON object, got {type(body).__name__}")

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise NodeRpcError(method, str(error.get("message", error)), error.get("code"))
            raise NodeRpcError(method, str(error))

        return body.get("result")

    def ping(self) -> None:
        self.call("ping")

    def close(self) -> None:
        self._session.close()

    def _auth(self) -> tuple[str, str]:
        # re-read on every call, the node rewrites its cookie when it restarts
        user, _, password = self._cookie_file.read_text(encoding="utf-8").strip().partition(":")
        return user, password


@dataclass(slots=True)
class AttachedNode:
    """A node started elsewhere, reachable through its RPC socket and cookie file."""
    params: NodeParams
    client: NodeRpcClient = field(init=False)

    def __post_init__(self):
        self.client = NodeRpcClient(self.params.rpc_socket, self.params.cookie_file)

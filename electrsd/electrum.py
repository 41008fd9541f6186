"""
Blocking Electrum protocol client: newline-delimited JSON-RPC 2.0 over TCP.
"""

from __future__ import annotations

import hashlib
import itertools
import json
import socket
from collections.abc import Sequence
from types import TracebackType
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from electrsd.errors import ElectrumClientError
from electrsd.tx import Transaction
from electrsd.utils.ports import parse_addr


class HeaderNotification(BaseModel):
    height: int
    hex: str

    @property
    def header(self) -> bytes:
        return bytes.fromhex(self.hex)


class GetHistoryRes(BaseModel):
    height: int
    tx_hash: str
    fee: int | None = None


_HISTORY = TypeAdapter(list[GetHistoryRes])


def script_hash(script: bytes) -> str:
    """Electrum addresses scripts by their reversed SHA-256, hex encoded."""
    return hashlib.sha256(script).digest()[::-1].hex()


class ElectrumClient:
    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._file = sock.makefile("rwb")
        self._ids = itertools.count()

    @staticmethod
    def connect(address: str, timeout: float | None = None) -> ElectrumClient:
        host, port = parse_addr(address)
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise ElectrumClientError(f"cannot connect to {address}: {e}") from e

        return ElectrumClient(sock)

    # ------------
    # -- Public --
    # ------------
    def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        request_id = next(self._ids)
        request = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": list(params)}

        try:
            self._file.write(json.dumps(request).encode("utf-8") + b"\n")
            self._file.flush()
            response = self._read_response(request_id)
        except (OSError, ValueError) as e:
            raise ElectrumClientError(f"{method}: {e}") from e

        error = response.get("error")
        if error:
            if isinstance(error, dict):
                raise ElectrumClientError(f"{method}: {error.get('message', error)}", error.get("code"))
            raise ElectrumClientError(f"{method}: {error}")

        return response.get("result")

    def ping(self) -> None:
        self.call("server.ping")

    def block_header_raw(self, height: int) -> bytes:
        return _unhex(self.call("blockchain.block.header", [height]))

    def block_headers_subscribe(self) -> HeaderNotification:
        result = self.call("blockchain.headers.subscribe")
        try:
            return HeaderNotification.model_validate(result)
        except ValidationError as e:
            raise ElectrumClientError(f"malformed header notification: {e}") from e

    def transaction_get_raw(self, txid: str) -> bytes:
        return _unhex(self.call("blockchain.transaction.get", [txid]))

    def transaction_get(self, txid: str) -> Transaction:
        return Transaction.from_bytes(self.transaction_get_raw(txid))

    def script_get_history(self, script: bytes) -> list[GetHistoryRes]:
        result = self.call("blockchain.scripthash.get_history", [script_hash(script)])
        try:
            return _HISTORY.validate_python(result)
        except ValidationError as e:
            raise ElectrumClientError(f"malformed history: {e}") from e

    def close(self) -> None:
        try:
            self._file.close()
        finally:
            self._sock.close()

    def __enter__(self) -> ElectrumClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -------------
    # -- Private --
    # -------------
    def _read_response(self, request_id: int) -> dict[str, Any]:
        while True:
            line = self._file.readline()
            if not line:
                raise ElectrumClientError("connection closed by server")

            message = json.loads(line)
            # subscription notifications carry no id
            if isinstance(message, dict) and message.get("id") == request_id:
                return message


def _unhex(value: Any) -> bytes:
    if not isinstance(value, str):
        raise ElectrumClientError(f"expected a hex string, got {type(value).__name__}")
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise ElectrumClientError(f"invalid hex in response: {e}") from e

"""
Just enough of the raw transaction format to read outputs back from
`blockchain.transaction.get`.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from electrsd.errors import TransactionDecodeError


@dataclass(frozen=True, slots=True)
class TxIn:
    prev_txid: str
    prev_vout: int
    script_sig: bytes
    sequence: int


@dataclass(frozen=True, slots=True)
class TxOut:
    value: int
    script_pubkey: bytes


@dataclass(frozen=True, slots=True)
class Transaction:
    version: int
    inputs: tuple[TxIn, ...]
    outputs: tuple[TxOut, ...]
    lock_time: int

    @staticmethod
    def from_hex(raw_hex: str) -> Transaction:
        try:
            raw = bytes.fromhex(raw_hex)
        except ValueError as e:
            raise TransactionDecodeError(f"transaction is not valid hex: {e}") from e

        return Transaction.from_bytes(raw)

    @staticmethod
    def from_bytes(raw: bytes) -> Transaction:
        r = _Reader(raw)
        version = r.u32()

        # BIP144 marker and flag, never produced by tapyrus but harmless to accept
        has_witness = r.peek(2) == b"\x00\x01"
        if has_witness:
            r.read(2)

        inputs = tuple(_read_input(r) for _ in range(r.varint()))
        outputs = tuple(_read_output(r) for _ in range(r.varint()))

        if has_witness:
            for _ in inputs:
                for _ in range(r.varint()):
                    r.read(r.varint())

        lock_time = r.u32()
        if not r.at_end():
            raise TransactionDecodeError(f"{r.remaining()} trailing bytes after transaction")

        return Transaction(version, inputs, outputs, lock_time)


def _read_input(r: _Reader) -> TxIn:
    prev_txid = r.read(32)[::-1].hex()
    prev_vout = r.u32()
    script_sig = r.read(r.varint())
    sequence = r.u32()
    return TxIn(prev_txid, prev_vout, script_sig, sequence)


def _read_output(r: _Reader) -> TxOut:
    value = r.u64()
    script_pubkey = r.read(r.varint())
    return TxOut(value, script_pubkey)


class _Reader:
    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def read(self, n: int) -> bytes:
        end = self._pos + n
        if end > len(self._data):
            raise TransactionDecodeError(
                f"unexpected end of transaction: wanted {n} bytes at offset {self._pos}",
            )
        out = self._data[self._pos:end]
        self._pos = end
        return out

    def peek(self, n: int) -> bytes:
        return self._data[self._pos:self._pos + n]

    def u32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.read(8))[0]

    def varint(self) -> int:
        prefix = self.read(1)[0]
        if prefix < 0xfd:
            return prefix
        if prefix == 0xfd:
            return struct.unpack("<H", self.read(2))[0]
        if prefix == 0xfe:
            return self.u32()
        return self.u64()

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def at_end(self) -> bool:
        return self.remaining() == 0

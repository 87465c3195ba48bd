"""Block proving report: display, CSV output and binary wire encoding."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

CSV_HEADER = "block_number,success,cycles,proving_seconds,data_fetch_seconds"

_U64 = struct.Struct("<Q")


class ReportDecodeError(ValueError):
    """Raised when report bytes cannot be decoded."""


def _format_float(value: float) -> str:
    """Shortest decimal form without exponent, dropping a zero fraction."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(bytes(data))
        self._offset = 0

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._view):
            raise ReportDecodeError("unexpected end of report data")
        chunk = self._view[self._offset:end].tobytes()
        self._offset = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def u64(self) -> int:
        return _U64.unpack(self.take(_U64.size))[0]

    def boolean(self) -> bool:
        value = self.byte()
        if value not in (0, 1):
            raise ReportDecodeError(f"invalid boolean byte {value}")
        return bool(value)


@dataclass
class BlockProvingReport:
    """Outcome and timings of proving one block."""

    block_number: int = 0
    data_fetch_milliseconds: int = 0
    success: bool = False
    cycles: int = 0
    proving_milliseconds: int = 0
    proof: Optional[bytes] = None

    def __str__(self) -> str:
        return (
            f"Block #{self.block_number} | success: {str(bool(self.success)).lower()} | "
            f"cycles: {self.cycles} | proving: {self.proving_milliseconds} ms | "
            f"data_fetch: {self.data_fetch_milliseconds} ms"
        )

    def on_proving_success(self, cycles: int, proving_milliseconds: int, proof: bytes) -> None:
        """Record a successful proof."""
        self.success = True
        self.cycles = cycles
        self.proving_milliseconds = proving_milliseconds
        self.proof = bytes(proof)

    def on_proving_failure(self) -> None:
        """Record a failed proof."""
        self.success = False

    def append_to_csv(self, csv_file_path: Union[str, "os.PathLike[str]"]) -> None:
        """Append one row, writing the header first if the file is new."""
        path = Path(csv_file_path)
        is_new = not path.exists()
        with path.open("a", encoding="utf-8", newline="") as file:
            if is_new:
                file.write(CSV_HEADER + "\n")
            row = [
                str(self.block_number),
                str(bool(self.success)).lower(),
                str(self.cycles),
                _format_float(self.proving_milliseconds / 1000.0),
                _format_float(self.data_fetch_milliseconds / 1000.0),
            ]
            file.write(",".join(row) + "\n")

    def to_bytes(self) -> bytes:
        """Encode with fixed-width little-endian integers and length-prefixed proof."""
        try:
            parts = [
                bytes([bool(self.success)]),
                _U64.pack(self.block_number),
                _U64.pack(self.cycles),
                _U64.pack(self.proving_milliseconds),
                _U64.pack(self.data_fetch_milliseconds),
            ]
            if self.proof is None:
                parts.append(b"\x00")
            else:
                parts.extend((b"\x01", _U64.pack(len(self.proof)), bytes(self.proof)))
        except struct.error as err:
            raise ValueError(f"report field out of range: {err}") from err
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "BlockProvingReport":
        """Decode bytes produced by to_bytes; trailing bytes are ignored."""
        reader = _Reader(data)
        success = reader.boolean()
        block_number = reader.u64()
        cycles = reader.u64()
        proving_milliseconds = reader.u64()
        data_fetch_milliseconds = reader.u64()
        tag = reader.byte()
        if tag == 0:
            proof = None
        elif tag == 1:
            proof = reader.take(reader.u64())
        else:
            raise ReportDecodeError(f"invalid option tag {tag}")
        return cls(
            block_number=block_number,
            data_fetch_milliseconds=data_fetch_milliseconds,
            success=success,
            cycles=cycles,
            proving_milliseconds=proving_milliseconds,
            proof=proof,
        )
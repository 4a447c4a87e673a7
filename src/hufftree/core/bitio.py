from __future__ import annotations

"""Bit-level I/O over binary file objects.

Bits are packed MSB-first. Reads and writes move 1..32 bits at a time.

End of stream is not an exception: ``BitInputStream.read_bits`` returns ``None``
when fewer than the requested bits are left. OS-level failures (``OSError``)
are re-raised as ``IoError``.
"""

from typing import BinaryIO

from hufftree.errors import IoError

MAX_BITS = 32
CHUNK_SIZE = 64 * 1024


def _check_width(nbits: int) -> None:
    if nbits < 1 or nbits > MAX_BITS:
        raise ValueError(f"larghezza non supportata: {nbits} bit (1..{MAX_BITS})")


class BitInputStream:
    def __init__(self, fp: BinaryIO, *, close_fp: bool = True):
        self._fp = fp
        self._close_fp = close_fp
        self._chunk = b""
        self._pos = 0
        self._acc = 0
        self._acc_bits = 0
        self._closed = False
        self.bits_read = 0

    def _next_byte(self) -> int | None:
        if self._pos >= len(self._chunk):
            try:
                self._chunk = self._fp.read(CHUNK_SIZE)
            except OSError as e:
                raise IoError(f"lettura fallita: {e}") from e
            self._pos = 0
            if not self._chunk:
                return None
        b = self._chunk[self._pos]
        self._pos += 1
        return b

    def read_bits(self, nbits: int) -> int | None:
        """Return the next ``nbits`` as an unsigned int, or None at end of stream."""
        if self._closed:
            raise ValueError("BitInputStream: read su stream chiuso")
        _check_width(nbits)
        while self._acc_bits < nbits:
            b = self._next_byte()
            if b is None:
                return None
            self._acc = (self._acc << 8) | b
            self._acc_bits += 8
        self._acc_bits -= nbits
        value = (self._acc >> self._acc_bits) & ((1 << nbits) - 1)
        self._acc &= (1 << self._acc_bits) - 1
        self.bits_read += nbits
        return value

    def reset(self) -> None:
        """Rewind to the first bit of the underlying stream."""
        if self._closed:
            raise ValueError("BitInputStream: reset su stream chiuso")
        try:
            self._fp.seek(0)
        except OSError as e:
            raise IoError(f"reset non supportato dallo stream: {e}") from e
        self._chunk = b""
        self._pos = 0
        self._acc = 0
        self._acc_bits = 0
        self.bits_read = 0

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._close_fp:
            try:
                self._fp.close()
            except OSError as e:
                raise IoError(f"chiusura fallita: {e}") from e

    def __enter__(self) -> "BitInputStream":
        return self

    def __exit__(self, exc_type: type[BaseException] | None, *exc: object) -> None:
        try:
            self.close()
        except IoError:
            # keep the error already propagating
            if exc_type is None:
                raise


class BitOutputStream:
    def __init__(self, fp: BinaryIO, *, close_fp: bool = True):
        self._fp = fp
        self._close_fp = close_fp
        self._out = bytearray()
        self._acc = 0
        self._acc_bits = 0
        self._closed = False
        self.bits_written = 0

    def write_bits(self, nbits: int, value: int) -> None:
        if self._closed:
            raise ValueError("BitOutputStream: write su stream chiuso")
        _check_width(nbits)
        if value < 0 or value >> nbits:
            raise ValueError(f"valore {value} non rappresentabile in {nbits} bit")
        self._acc = (self._acc << nbits) | value
        self._acc_bits += nbits
        while self._acc_bits >= 8:
            self._acc_bits -= 8
            self._out.append((self._acc >> self._acc_bits) & 0xFF)
        self._acc &= (1 << self._acc_bits) - 1
        self.bits_written += nbits
        if len(self._out) >= CHUNK_SIZE:
            self._drain()

    def _drain(self) -> None:
        if not self._out:
            return
        data = bytes(self._out)
        # a failed write is not retried on close()
        self._out.clear()
        try:
            self._fp.write(data)
        except OSError as e:
            raise IoError(f"scrittura fallita: {e}") from e

    def flush(self) -> None:
        """Pad the last partial byte with zero bits and push everything to the file."""
        if self._closed:
            return
        if self._acc_bits:
            self._out.append((self._acc << (8 - self._acc_bits)) & 0xFF)
            self._acc = 0
            self._acc_bits = 0
        self._drain()
        try:
            self._fp.flush()
        except OSError as e:
            raise IoError(f"flush fallito: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._closed = True
            if self._close_fp:
                try:
                    self._fp.close()
                except OSError as e:
                    raise IoError(f"chiusura fallita: {e}") from e

    def __enter__(self) -> "BitOutputStream":
        return self

    def __exit__(self, exc_type: type[BaseException] | None, *exc: object) -> None:
        try:
            self.close()
        except IoError:
            # keep the error already propagating
            if exc_type is None:
                raise

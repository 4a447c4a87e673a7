"""Verification helpers.

Verify = full dry-run decode: magic check, tree parse, body walk until PSEUDO_EOF.
Nothing is written; the same typed errors as decompress() are raised.
"""

from __future__ import annotations

import io
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from hufftree.core.bitio import BitInputStream
from hufftree.engine.processor import decode_body, read_header, require_input_file


@dataclass(frozen=True)
class VerifyReport:
    leaves: int
    header_bits: int
    symbols: int
    body_bits: int
    trailing_bits: int  # padding after the PSEUDO_EOF code

    def to_json(self) -> dict[str, Any]:
        return {"schema": "hufftree.verify.v1", "ok": True, **asdict(self)}


def _verify_stream(bit_in: BitInputStream, total_bits: int) -> VerifyReport:
    tree = read_header(bit_in)
    header_bits = bit_in.bits_read
    symbols = decode_body(bit_in, tree, lambda _sym: None)
    return VerifyReport(
        leaves=len(tree.leaves()),
        header_bits=header_bits,
        symbols=symbols,
        body_bits=bit_in.bits_read - header_bits,
        trailing_bits=total_bits - bit_in.bits_read,
    )


def verify_compressed_bytes(blob: bytes) -> VerifyReport:
    return _verify_stream(BitInputStream(io.BytesIO(blob)), len(blob) * 8)


def verify_compressed_file(path: str | Path) -> VerifyReport:
    p = require_input_file(path)
    total_bits = p.stat().st_size * 8
    with BitInputStream(p.open("rb")) as bit_in:
        return _verify_stream(bit_in, total_bits)

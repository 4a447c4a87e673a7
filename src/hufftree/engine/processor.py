"""HuffTree processor: compress / decompress over bit streams.

File layout (MSB-first):
  [MAGIC(32)][TREE(pre-order, variable)][BODY(codes..., code(PSEUDO_EOF))][PAD(0..7)]

Compression makes two passes over the input (frequencies, then encode),
so the input stream must support reset().
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from hufftree.core.bitio import MAX_BITS, BitInputStream, BitOutputStream
from hufftree.core.freq import BITS_PER_WORD, PSEUDO_EOF, count_frequencies
from hufftree.core.tree import (
    TIE_BREAK_FIFO,
    Code,
    HuffTree,
    Internal,
    build_tree,
    derive_codes,
)
from hufftree.core.tree_codec import read_tree, write_tree
from hufftree.errors import BadMagicNumberError, CorruptBodyError, HuffTreeError, UsageError

BITS_PER_INT = 32
HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1


@dataclass
class ProcessStats:
    symbols: int = 0  # literal bytes encoded / decoded
    header_bits: int = 0  # magic + tree
    bits_read: int = 0
    bits_written: int = 0


@contextmanager
def _phase(name: str) -> Iterator[None]:
    try:
        yield
    except HuffTreeError as e:
        if e.phase is None:
            e.phase = name
        raise


def _write_code(bit_out: BitOutputStream, code: Code) -> None:
    # codes can be longer than one write (deep trees): emit in <= 32-bit chunks
    remaining = code.nbits
    while remaining > MAX_BITS:
        remaining -= MAX_BITS
        bit_out.write_bits(MAX_BITS, (code.value >> remaining) & 0xFFFFFFFF)
    bit_out.write_bits(remaining, code.value & ((1 << remaining) - 1))


def compress(
    bit_in: BitInputStream, bit_out: BitOutputStream, *, tie_break: str = TIE_BREAK_FIFO
) -> ProcessStats:
    """Compress ``bit_in`` into ``bit_out``; ``bit_out`` is finalized on exit."""
    stats = ProcessStats()
    # flush/close errors on exit are tagged "finalize"
    with _phase("finalize"), bit_out:
        with _phase("frequency"):
            freq = count_frequencies(bit_in)
            stats.bits_read += bit_in.bits_read
        tree = build_tree(freq, tie_break=tie_break)
        codes = derive_codes(tree)

        with _phase("header"):
            bit_out.write_bits(BITS_PER_INT, HUFF_TREE)
            stats.header_bits = BITS_PER_INT + write_tree(tree, bit_out)

        with _phase("encode"):
            bit_in.reset()
            while True:
                word = bit_in.read_bits(BITS_PER_WORD)
                if word is None:
                    break
                _write_code(bit_out, codes[word])
                stats.symbols += 1
            _write_code(bit_out, codes[PSEUDO_EOF])
            stats.bits_read += bit_in.bits_read
        stats.bits_written = bit_out.bits_written
    return stats


def read_header(bit_in: BitInputStream) -> HuffTree:
    """Check the magic number, then read the tree."""
    with _phase("magic"):
        magic = bit_in.read_bits(BITS_PER_INT)
        if magic is None:
            raise BadMagicNumberError("magic number mancante (file troppo corto)")
        if magic != HUFF_TREE:
            raise BadMagicNumberError(
                f"magic number non valido: 0x{magic:08x} (atteso 0x{HUFF_TREE:08x})"
            )
    with _phase("tree"):
        return read_tree(bit_in)


def decode_body(bit_in: BitInputStream, tree: HuffTree, emit: Callable[[int], None]) -> int:
    """
    Walk the tree one bit at a time until PSEUDO_EOF.

    States: AtRoot (node is the root) -> AtNode (path in progress) -> leaf:
    PSEUDO_EOF => Done; literal => emit(symbol) and back to AtRoot.
    Returns the number of literal symbols emitted.
    """
    n = 0
    node = tree.node(tree.root)
    with _phase("body"):
        while True:
            bit = bit_in.read_bits(1)
            if bit is None:
                raise CorruptBodyError(
                    f"body troncato: fine stream prima di PSEUDO_EOF (decodificati {n} byte)"
                )
            assert isinstance(node, Internal)
            node = tree.node(node.right if bit else node.left)
            if isinstance(node, Internal):
                continue
            if node.symbol == PSEUDO_EOF:
                return n
            emit(node.symbol)
            n += 1
            node = tree.node(tree.root)


def decompress(bit_in: BitInputStream, bit_out: BitOutputStream) -> ProcessStats:
    """Decompress ``bit_in`` into ``bit_out``; ``bit_out`` is finalized on exit.

    On a body failure the bytes already decoded stay in the output.
    """
    stats = ProcessStats()
    with _phase("finalize"), bit_out:
        tree = read_header(bit_in)
        stats.header_bits = bit_in.bits_read
        stats.symbols = decode_body(
            bit_in, tree, lambda sym: bit_out.write_bits(BITS_PER_WORD, sym)
        )
        stats.bits_read = bit_in.bits_read
        stats.bits_written = bit_out.bits_written
    return stats


# -------------------
# Helpers: bytes / files
# -------------------
def require_input_file(path: str | Path) -> Path:
    p = Path(path)
    if not p.is_file():
        raise UsageError(f"input non è un file: {p}")
    return p


def compress_bytes(data: bytes, *, tie_break: str = TIE_BREAK_FIFO) -> bytes:
    buf = io.BytesIO()
    compress(
        BitInputStream(io.BytesIO(data)),
        BitOutputStream(buf, close_fp=False),
        tie_break=tie_break,
    )
    return buf.getvalue()


def decompress_bytes(blob: bytes) -> bytes:
    buf = io.BytesIO()
    decompress(BitInputStream(io.BytesIO(blob)), BitOutputStream(buf, close_fp=False))
    return buf.getvalue()


def compress_file(
    input_path: str | Path, output_path: str | Path, *, tie_break: str = TIE_BREAK_FIFO
) -> ProcessStats:
    with BitInputStream(require_input_file(input_path).open("rb")) as bit_in:
        return compress(
            bit_in, BitOutputStream(Path(output_path).open("wb")), tie_break=tie_break
        )


def decompress_file(input_path: str | Path, output_path: str | Path) -> ProcessStats:
    with BitInputStream(require_input_file(input_path).open("rb")) as bit_in:
        return decompress(bit_in, BitOutputStream(Path(output_path).open("wb")))

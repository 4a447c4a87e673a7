from __future__ import annotations

"""Tree header codec.

Pre-order layout:
  internal node -> bit 0, then left subtree, then right subtree
  leaf          -> bit 1, then the symbol as a 9-bit unsigned int (0..256)

Weights are not stored: a tree read back has every weight set to 0.
The header is self-terminating, so read_tree() stops exactly after the last leaf.
"""

from typing import List

from hufftree.core.bitio import BitInputStream, BitOutputStream
from hufftree.core.freq import BITS_PER_WORD, PSEUDO_EOF
from hufftree.core.tree import HuffTree, Internal, Leaf, Node
from hufftree.errors import CorruptHeaderError

SYMBOL_BITS = BITS_PER_WORD + 1


def write_tree(tree: HuffTree, bit_out: BitOutputStream) -> int:
    """Write ``tree`` in pre-order; return the number of bits written."""
    written = 0
    stack = [tree.root]
    while stack:
        n = tree.node(stack.pop())
        if isinstance(n, Internal):
            bit_out.write_bits(1, 0)
            written += 1
            stack.append(n.right)
            stack.append(n.left)
        else:
            bit_out.write_bits(1, 1)
            bit_out.write_bits(SYMBOL_BITS, n.symbol)
            written += 1 + SYMBOL_BITS
    return written


def _read(bit_in: BitInputStream, nbits: int) -> int:
    v = bit_in.read_bits(nbits)
    if v is None:
        raise CorruptHeaderError("header albero troncato: fine stream prima dell'ultima foglia")
    return v


def read_tree(bit_in: BitInputStream) -> HuffTree:
    nodes: List[Node] = []
    # one frame per open internal node: the child indices read so far
    frames: List[List[int]] = []

    while True:
        if _read(bit_in, 1) == 0:
            frames.append([])
            continue

        sym = _read(bit_in, SYMBOL_BITS)
        if sym > PSEUDO_EOF:
            raise CorruptHeaderError(f"simbolo fuori range nel header: {sym}")
        idx = len(nodes)
        nodes.append(Leaf(symbol=sym, weight=0))

        while frames:
            frames[-1].append(idx)
            if len(frames[-1]) < 2:
                break
            left, right = frames.pop()
            idx = len(nodes)
            nodes.append(Internal(weight=0, left=left, right=right))
        else:
            if len(nodes) == 1:
                raise CorruptHeaderError("header albero degenerato: una sola foglia")
            return HuffTree(nodes=tuple(nodes), root=idx)

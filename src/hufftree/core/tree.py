from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Sequence, Tuple, Union

import heapq
import itertools

from hufftree.core.freq import NUM_SYMBOLS, used_symbols

TIE_BREAK_FIFO = "fifo"
TIE_BREAK_SYMBOL = "symbol"
TIE_BREAKS: Tuple[str, ...] = (TIE_BREAK_FIFO, TIE_BREAK_SYMBOL)

# -------------------
# Nodi (arena indicizzata)
# -------------------
@dataclass(frozen=True, slots=True)
class Leaf:
    symbol: int
    weight: int


@dataclass(frozen=True, slots=True)
class Internal:
    weight: int
    left: int
    right: int


Node = Union[Leaf, Internal]


@dataclass(frozen=True)
class HuffTree:
    """Strict binary tree stored as an arena; children are indices into ``nodes``."""

    nodes: Tuple[Node, ...]
    root: int

    def node(self, idx: int) -> Node:
        return self.nodes[idx]

    @property
    def weight(self) -> int:
        return self.nodes[self.root].weight

    def leaves(self) -> List[Leaf]:
        """Leaves in left-to-right (depth-first) order."""
        out: List[Leaf] = []
        stack = [self.root]
        while stack:
            n = self.nodes[stack.pop()]
            if isinstance(n, Leaf):
                out.append(n)
            else:
                stack.append(n.right)
                stack.append(n.left)
        return out


class Code(NamedTuple):
    nbits: int
    value: int

    def bits(self) -> str:
        return format(self.value, f"0{self.nbits}b") if self.nbits else ""


# -------------------
# Costruzione greedy
# -------------------
def _heap_key(tie_break: str, weight: int, min_sym: int, seq: int) -> Tuple[int, ...]:
    if tie_break == TIE_BREAK_FIFO:
        return (weight, seq)
    return (weight, min_sym, seq)


def build_tree(freq: Sequence[int], tie_break: str = TIE_BREAK_FIFO) -> HuffTree:
    """
    Merge greedy dei due nodi di peso minimo fino a un'unica radice.

    Pareggi (stesso peso):
      - "fifo": ordine di inserimento; foglie in ordine di simbolo, poi i nodi fusi in coda
      - "symbol": vince il sottoalbero con il simbolo più piccolo
    """
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"tie_break non supportato: {tie_break!r} (attesi: {', '.join(TIE_BREAKS)})")
    if len(freq) > NUM_SYMBOLS:
        raise ValueError(f"freq troppo lunga: {len(freq)} (max {NUM_SYMBOLS})")

    nodes: List[Node] = []
    min_sym: List[int] = []
    heap: List[Tuple[Tuple[int, ...], int]] = []
    counter = itertools.count()

    def push(node: Node, lowest: int) -> None:
        idx = len(nodes)
        nodes.append(node)
        min_sym.append(lowest)
        heapq.heappush(heap, (_heap_key(tie_break, node.weight, lowest, next(counter)), idx))

    used = used_symbols(list(freq))
    if not used:
        raise ValueError("build_tree: nessun simbolo con peso > 0")

    for sym, f in used:
        push(Leaf(symbol=sym, weight=f), sym)

    # Caso speciale: un solo simbolo (input vuoto, solo PSEUDO_EOF) => aggiungo dummy
    if len(used) == 1:
        only = used[0][0]
        dummy = (only + 1) % NUM_SYMBOLS
        push(Leaf(symbol=dummy, weight=0), dummy)

    while len(heap) > 1:
        _, i1 = heapq.heappop(heap)
        _, i2 = heapq.heappop(heap)
        w = nodes[i1].weight + nodes[i2].weight
        push(Internal(weight=w, left=i1, right=i2), min(min_sym[i1], min_sym[i2]))

    return HuffTree(nodes=tuple(nodes), root=heap[0][1])


def derive_codes(tree: HuffTree) -> Dict[int, Code]:
    """symbol -> Code; left edge = 0, right edge = 1."""
    root = tree.node(tree.root)
    assert isinstance(root, Internal), "albero degenerato: la radice è una foglia"

    codes: Dict[int, Code] = {}
    stack: List[Tuple[int, int, int]] = [(tree.root, 0, 0)]
    while stack:
        idx, depth, path = stack.pop()
        n = tree.node(idx)
        if isinstance(n, Leaf):
            codes[n.symbol] = Code(nbits=depth, value=path)
            continue
        stack.append((n.right, depth + 1, (path << 1) | 1))
        stack.append((n.left, depth + 1, path << 1))
    return codes


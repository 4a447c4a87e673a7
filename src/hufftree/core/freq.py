from __future__ import annotations

from typing import List, Tuple

from hufftree.core.bitio import BitInputStream

BITS_PER_WORD = 8
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE  # sentinel, mai presente nei dati
NUM_SYMBOLS = ALPH_SIZE + 1


def count_frequencies(bit_in: BitInputStream) -> List[int]:
    """
    Un passaggio completo sull'input: conta i 256 simboli letterali,
    poi forza freq[PSEUDO_EOF] = 1.
    Lo stream resta consumato: il chiamante fa reset() prima dell'encode.
    """
    freq = [0] * NUM_SYMBOLS
    while True:
        word = bit_in.read_bits(BITS_PER_WORD)
        if word is None:
            break
        freq[word] += 1
    freq[PSEUDO_EOF] = 1
    return freq


def used_symbols(freq: List[int]) -> List[Tuple[int, int]]:
    """(symbol, weight) for every symbol with weight > 0, symbol ascending."""
    return [(sym, f) for sym, f in enumerate(freq) if f > 0]

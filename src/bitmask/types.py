"""Type aliases, named tuples and word-size constants for bitmask."""

from typing import NamedTuple

import numpy as np

# Array type alias (numpy arrays)
Array = np.ndarray

# Storage word geometry. Columns are packed WORD_BITS per word, so
# x // WORD_BITS is the strip and x & WORD_MODULO the bit inside it.
WORD_BITS = 64
WORD_MODULO = WORD_BITS - 1  # x % N == x & (N-1) for N a power of 2
FULL_WORD = (1 << WORD_BITS) - 1


class Point(NamedTuple):
    """A grid cell reported by a ray query.

    x: column index in [0, width)
    y: row index in [0, height)
    """
    x: int
    y: int

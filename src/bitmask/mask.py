"""Packed 2D occupancy mask for pixel-accurate collision queries.

Cells are stored one bit each in uint64 words. Columns are grouped into
strips of WORD_BITS columns; strip s, row y lives at flat index
s * height + y, and bit b of that word holds column s * WORD_BITS + b.

Bits at columns >= width in the last strip are always zero. The rectangle
and row scans rely on this and only clip against width.
"""

import logging

import numpy as np

from bitmask.types import Array, Point, WORD_BITS, WORD_MODULO, FULL_WORD

log = logging.getLogger(__name__)


def _span_mask(shift: int, span: int) -> int:
    """Word mask with `span` consecutive bits set, starting at bit `shift`."""
    return ((2 << (span - 1)) - 1) << shift


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _project(offset: int, num: int, den: int) -> int:
    """offset * num / den rounded to nearest, ties away from zero.

    Exact integer arithmetic; den must be non-zero.
    """
    n = offset * num
    q = (2 * abs(n) + abs(den)) // (2 * abs(den))
    return q if (n >= 0) == (den > 0) else -q


class Mask:
    """Fixed-size bit grid answering point, rectangle and ray queries.

    Queries never mutate the mask and may run from several readers at once.
    set_at and fill need exclusive access, so build the mask completely
    before handing it to readers.
    """

    __slots__ = ["_width", "_height", "_bits"]

    def __init__(self, width: int, height: int):
        if width < 0 or height < 0:
            raise ValueError(
                f"Mask dimensions must be non-negative, got {width}x{height}"
            )
        self._width = int(width)
        self._height = int(height)
        self._bits = np.zeros(self.strip_count * self._height, dtype=np.uint64)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def strip_count(self) -> int:
        return -(-self._width // WORD_BITS)

    def __repr__(self) -> str:
        return f"Mask(width={self._width}, height={self._height}, count={self.count()})"

    @classmethod
    def from_array(cls, array) -> "Mask":
        """Build a mask from a 2-D array indexed [y, x].

        Args:
            array: (H, W) array-like; truthy cells become occupied.

        Returns:
            Mask of width W and height H.
        """
        cells = np.asarray(array).astype(bool)
        if cells.ndim != 2:
            raise ValueError(f"Expected a 2-D array, got shape {cells.shape}")
        height, width = cells.shape
        mask = cls(width, height)

        shifts = np.arange(WORD_BITS, dtype=np.uint64)
        for strip in range(mask.strip_count):
            block = cells[:, strip * WORD_BITS:(strip + 1) * WORD_BITS].astype(np.uint64)
            words = np.bitwise_or.reduce(block << shifts[:block.shape[1]], axis=1)
            mask._bits[strip * height:(strip + 1) * height] = words

        log.debug(f"Packed {width}x{height} array into {mask.strip_count} strips")
        return mask

    def to_array(self) -> Array:
        """Unpack into an (H, W) bool array indexed [y, x]."""
        shifts = np.arange(WORD_BITS, dtype=np.uint64)
        words = self._bits.reshape(self.strip_count, self._height)  # (S, H)
        bits = (words[:, :, None] >> shifts) & np.uint64(1)  # (S, H, WORD_BITS)
        cells = bits.transpose(1, 0, 2).reshape(
            self._height, self.strip_count * WORD_BITS
        )
        return cells[:, :self._width].astype(bool)

    def count(self) -> int:
        """Number of occupied cells."""
        return int(np.unpackbits(self._bits.view(np.uint8)).sum())

    def fill(self) -> "Mask":
        """Mark every in-bounds cell occupied. Returns self for chaining."""
        if self._bits.size == 0:
            return self
        n_full = self._height * ((self._width - 1) // WORD_BITS)
        self._bits[:n_full] = np.uint64(FULL_WORD)

        # Last strip keeps only the columns below width
        remainder = (self._width & WORD_MODULO) or WORD_BITS
        self._bits[n_full:] = np.uint64(FULL_WORD >> (WORD_BITS - remainder))

        log.debug(f"Filled {self._width}x{self._height} mask")
        return self

    def _contains(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def _index(self, x: int, y: int) -> int:
        return (x // WORD_BITS) * self._height + y

    def _get_at(self, x: int, y: int) -> bool:
        # Unchecked: caller guarantees 0 <= x < width and 0 <= y < height.
        return (int(self._bits[self._index(x, y)]) >> (x & WORD_MODULO)) & 1 != 0

    def set_at(self, x: int, y: int) -> None:
        """Mark cell (x, y) occupied.

        Raises:
            IndexError: if (x, y) lies outside [0, width) x [0, height).
        """
        x, y = int(x), int(y)
        if not self._contains(x, y):
            raise IndexError(
                f"Cell ({x}, {y}) outside {self._width}x{self._height} mask"
            )
        self._bits[self._index(x, y)] |= np.uint64(1 << (x & WORD_MODULO))

    def is_set(self, x: int, y: int) -> bool:
        """Whether (x, y) is occupied. False for any cell outside the mask."""
        x, y = int(x), int(y)
        return self._contains(x, y) and self._get_at(x, y)

    def overlaps_rect(self, x: int, y: int, width: int, height: int) -> bool:
        """Whether any occupied cell lies in [x, x+width) x [y, y+height).

        Rectangles with non-positive width or height never overlap.
        """
        x, y, width, height = int(x), int(y), int(width), int(height)
        if (x >= self._width or y >= self._height
                or x + width <= 0 or y + height <= 0
                or self._width == 0 or self._height == 0
                or width <= 0 or height <= 0):
            return False

        row_start = max(0, y)
        row_end = min(y + height, self._height)
        strip_start = max(0, x)
        end = min(x + width, self._width)
        while strip_start < end:
            strip = strip_start // WORD_BITS
            next_strip = (strip + 1) * WORD_BITS
            strip_end = min(next_strip, end)
            strip_mask = np.uint64(
                _span_mask(strip_start & WORD_MODULO, strip_end - strip_start)
            )
            base = strip * self._height
            if np.any(self._bits[base + row_start:base + row_end] & strip_mask):
                return True
            strip_start = next_strip
        return False

    def overlaps_ray(
        self,
        start_x: int,
        start_y: int,
        end_x: int,
        end_y: int,
    ) -> Point | None:
        """First occupied cell walking from start toward end, both inclusive.

        Endpoints may lie anywhere; the walk is clamped to the mask. Only the
        existence of a hit is symmetric in start and end. The reported cell
        depends on the walking direction.

        Returns:
            Point of the first hit, or None if the segment misses.
        """
        start_x, start_y = int(start_x), int(start_y)
        end_x, end_y = int(end_x), int(end_y)
        w, h = self._width, self._height
        if (w == 0 or h == 0
                or max(start_x, end_x) < 0 or min(start_x, end_x) >= w
                or max(start_y, end_y) < 0 or min(start_y, end_y) >= h):
            return None

        dx = end_x - start_x
        dy = end_y - start_y
        if dx == 0 and dy == 0:
            return Point(start_x, start_y) if self._get_at(start_x, start_y) else None
        if dx == 0:
            return self._scan_column(
                start_x, _clamp(start_y, 0, h - 1), _clamp(end_y, 0, h - 1)
            )
        if dy == 0:
            return self._scan_row(
                start_y, _clamp(start_x, 0, w - 1), _clamp(end_x, 0, w - 1)
            )
        if abs(dx) >= abs(dy):
            return self._scan_diagonal(start_x, start_y, dx, dy, w, h, transposed=False)
        return self._scan_diagonal(start_y, start_x, dy, dx, h, w, transposed=True)

    def _scan_column(self, x: int, y_from: int, y_to: int) -> Point | None:
        lo, hi = min(y_from, y_to), max(y_from, y_to)
        base = (x // WORD_BITS) * self._height
        bit = np.uint64(1 << (x & WORD_MODULO))
        hits = np.flatnonzero(self._bits[base + lo:base + hi + 1] & bit)
        if hits.size == 0:
            return None
        offset = hits[0] if y_to >= y_from else hits[-1]
        return Point(x, lo + int(offset))

    def _scan_row(self, y: int, x_from: int, x_to: int) -> Point | None:
        """Bit-parallel scan of row y, one strip word at a time."""
        pos = x_from
        if x_to >= x_from:
            while pos <= x_to:
                strip = pos // WORD_BITS
                strip_end = min(x_to, strip * WORD_BITS + WORD_MODULO)
                word = int(self._bits[strip * self._height + y])
                word &= _span_mask(pos & WORD_MODULO, strip_end - pos + 1)
                if word:
                    # Trailing zero count: lowest set bit
                    return Point(strip * WORD_BITS + (word & -word).bit_length() - 1, y)
                pos = (strip + 1) * WORD_BITS
        else:
            while pos >= x_to:
                strip = pos // WORD_BITS
                strip_start = max(x_to, strip * WORD_BITS)
                word = int(self._bits[strip * self._height + y])
                word &= _span_mask(strip_start & WORD_MODULO, pos - strip_start + 1)
                if word:
                    # Leading zero count: highest set bit
                    return Point(strip * WORD_BITS + word.bit_length() - 1, y)
                pos = strip * WORD_BITS - 1
        return None

    def _scan_diagonal(
        self,
        start_u: int,
        start_v: int,
        du: int,
        dv: int,
        size_u: int,
        size_v: int,
        transposed: bool,
    ) -> Point | None:
        """Step the major axis u one cell at a time; v follows the line.

        u is x and v is y unless transposed. Requires |du| >= |dv| > 0.
        """
        # v is monotonic in u, so a line outside the mask at both u edges
        # on the same side never enters it.
        v_first = start_v + _project(-start_u, dv, du)
        v_last = start_v + _project(size_u - 1 - start_u, dv, du)
        if (v_first < 0 and v_last < 0) or (v_first >= size_v and v_last >= size_v):
            return None

        step = 1 if du > 0 else -1
        u_from = _clamp(start_u, 0, size_u - 1)
        u_to = _clamp(start_u + du, 0, size_u - 1)
        for u in range(u_from, u_to + step, step):
            v = start_v + _project(u - start_u, dv, du)
            if not 0 <= v < size_v:
                continue
            x, y = (v, u) if transposed else (u, v)
            if self._get_at(x, y):
                return Point(x, y)
        return None

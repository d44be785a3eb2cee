"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src is on the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bitmask.mask import Mask  # noqa: E402

WIDTH = 8
HEIGHT = 16


def box_mask(width: int, height: int) -> Mask:
    """Mask with only its border cells set."""
    mask = Mask(width, height)
    for x in (0, mask.width - 1):
        for y in range(mask.height):
            mask.set_at(x, y)
    for y in (0, mask.height - 1):
        for x in range(1, mask.width - 1):
            mask.set_at(x, y)
    return mask


@pytest.fixture
def filled_mask():
    """Fully occupied WIDTH x HEIGHT mask."""
    return Mask(WIDTH, HEIGHT).fill()


@pytest.fixture
def empty_mask():
    return Mask(WIDTH, HEIGHT)

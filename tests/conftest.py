"""Pytest configuration for skewfinder tests.

Provides factories for synthetic 1-bit pages with textlines at a known
angle. Lines are drawn rising to the right for a positive angle, which is
the skew a clockwise rotation of that angle corrects.
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_text_lines(
    height: int = 1000,
    width: int = 1000,
    angle: float = 0.0,
    line_height: int = 6,
    spacing: int = 24,
    margin: int = 80,
    word_gaps: bool = True,
) -> np.ndarray:
    """Draw horizontal bars ("textlines") skewed by ``angle`` degrees."""
    img = np.zeros((height, width), dtype=np.uint8)
    xs = np.arange(margin, width - margin)
    if word_gaps:
        xs = xs[(xs // 40) % 5 != 4]
    offsets = np.rint(-(xs - width / 2.0) * math.tan(math.radians(angle))).astype(int)

    for top in range(margin, height - margin - line_height, spacing):
        for k in range(line_height):
            rows = top + k + offsets
            inside = (rows >= 0) & (rows < height)
            img[rows[inside], xs[inside]] = 1

    return img


def make_single_line(
    height: int = 1000,
    width: int = 1000,
    angle: float = 0.0,
    thickness: int = 3,
) -> np.ndarray:
    """Draw one full-width straight line through the center."""
    img = np.zeros((height, width), dtype=np.uint8)
    xs = np.arange(width)
    offsets = np.rint(-(xs - width / 2.0) * math.tan(math.radians(angle))).astype(int)
    for k in range(thickness):
        rows = height // 2 + k + offsets
        inside = (rows >= 0) & (rows < height)
        img[rows[inside], xs[inside]] = 1
    return img


@pytest.fixture
def text_page():
    """Factory for synthetic textline pages."""
    return make_text_lines


@pytest.fixture
def line_page():
    """Factory for a page with a single straight line."""
    return make_single_line


@pytest.fixture
def blank_page():
    """All-background 500x500 page."""
    return np.zeros((500, 500), dtype=np.uint8)

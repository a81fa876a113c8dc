"""
skewfinder
==========

Skew detection and correction for scanned 1-bit document pages.

Main components:
- Differential square sum scoring of row pixel profiles
- Coarse angle sweep on a reduced image
- Interval-halving binary search refinement
- Confidence estimate gating whether to trust the angle
- Deskewing by shear rotation
"""

__version__ = "1.0.0"
__author__ = "skewfinder developers"

from .config import SkewConfig, get_config
from .exceptions import SkewFinderError, InvalidImageError, DegenerateImageError
from .skew import (
    SkewStatus,
    SkewResult,
    deskew,
    find_skew_and_deskew,
    find_skew,
    find_skew_sweep,
    find_skew_sweep_and_search,
    find_skew_sweep_and_search_score,
)
from .utils.scoring import Sample, find_differential_square_sum

__all__ = [
    # Config
    "SkewConfig", "get_config",
    # Errors
    "SkewFinderError", "InvalidImageError", "DegenerateImageError",
    # Results
    "SkewStatus", "SkewResult", "Sample",
    # Skew
    "deskew", "find_skew_and_deskew", "find_skew",
    "find_skew_sweep", "find_skew_sweep_and_search", "find_skew_sweep_and_search_score",
    "find_differential_square_sum",
]

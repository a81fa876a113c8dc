"""
Utility modules for skew detection.
"""

from .io import load_image, load_pdf, load_pages, save_image, save_json, ensure_dir
from .images import (
    check_binary_image, to_binary, from_binary, downsample,
    v_shear, h_shear, v_shear_corner, rotate_by_shear,
    row_foreground_counts, is_all_background,
)
from .scoring import Sample, find_differential_square_sum
from .sweep import sweep, fit_max
from .search import SearchWindow, SearchResult, refine
from .confidence import estimate_confidence, gate_confidence

__all__ = [
    # IO
    "load_image", "load_pdf", "load_pages", "save_image", "save_json", "ensure_dir",
    # Images
    "check_binary_image", "to_binary", "from_binary", "downsample",
    "v_shear", "h_shear", "v_shear_corner", "rotate_by_shear",
    "row_foreground_counts", "is_all_background",
    # Scoring
    "Sample", "find_differential_square_sum",
    # Search
    "sweep", "fit_max", "SearchWindow", "SearchResult", "refine",
    "estimate_confidence", "gate_confidence",
]

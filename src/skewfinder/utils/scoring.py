"""
Differential square sum scoring of row pixel profiles.

The score of an image is the sum of squared differences between the
foreground counts of adjacent rows. When textlines are aligned with the
raster, baselines and x-height lines produce sharp steps in the profile and
the score peaks. Differencing rejects the slowly varying total ink count and
works on multicolumn pages where lines do not align across columns.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .images import row_foreground_counts
from ..exceptions import InvalidImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """Score of an image sheared by ``angle`` degrees."""
    angle: float
    score: float


def border_skip(width: int, height: int) -> int:
    """
    Number of rows excluded at each of the top and bottom of the profile.

    Shearing an (almost) all-dark image produces a spurious signal at the top
    and bottom edges. The skip covers a max shear of about 0.025 radians but
    never removes more than 10% of the image, and is always at least 1.
    """
    skip_h = int(0.05 * width)
    skip = min(height // 10, skip_h)
    return max(skip // 2, 1)


def find_differential_square_sum(image: Optional[np.ndarray]) -> float:
    """
    Score an image by the differential square sum of its row profile.

    Args:
        image: 2-D image; nonzero pixels are counted as foreground

    Returns:
        Sum over the interior rows i of (profile[i] - profile[i-1])^2

    Raises:
        InvalidImageError: If the image is undefined or not 2-D
    """
    if image is None:
        raise InvalidImageError("image not defined")
    if getattr(image, "ndim", None) != 2:
        raise InvalidImageError("image must be a 2-D array")

    h, w = image.shape
    profile = row_foreground_counts(image)
    nskip = border_skip(w, h)

    # Differences for rows nskip .. h-1-nskip, each against the row above
    if h - nskip <= nskip:
        return 0.0
    diffs = np.diff(profile[nskip - 1:h - nskip]).astype(np.float64)

    return float(np.dot(diffs, diffs))


def max_sample(samples: Sequence[Sample]) -> int:
    """Index of the first sample with the highest score."""
    if not samples:
        raise ValueError("no samples")
    return int(np.argmax([s.score for s in samples]))


def min_score(samples: Sequence[Sample]) -> float:
    """Lowest score among the samples."""
    if not samples:
        raise ValueError("no samples")
    return min(s.score for s in samples)

"""
Coarse angle sweep.

Shears the image about its upper-left corner at evenly spaced angles and
scores each result. The shear makes lines at the candidate angle horizontal,
so the score can be computed along the raster rows.
"""

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from .images import v_shear_corner, is_all_background
from .scoring import Sample, find_differential_square_sum, max_sample
from ..exceptions import InvalidImageError, DegenerateImageError

logger = logging.getLogger(__name__)


def sweep_angles(sweep_center: float, sweep_range: float, sweep_delta: float) -> List[float]:
    """
    Candidate angles of a sweep, in degrees.

    The count is floor(2 * range / delta) + 1, starting at center - range.
    """
    if sweep_delta <= 0:
        raise InvalidImageError(f"sweep delta must be positive, got {sweep_delta}")
    if sweep_range < 0:
        raise InvalidImageError(f"sweep range must not be negative, got {sweep_range}")

    nangles = int(2.0 * sweep_range / sweep_delta + 1)
    start = sweep_center - sweep_range
    return [start + i * sweep_delta for i in range(nangles)]


def score_at(image: np.ndarray, angle: float) -> float:
    """Score the image after a corner shear by ``angle`` degrees."""
    return find_differential_square_sum(v_shear_corner(image, math.radians(angle)))


def sweep(
    image: np.ndarray,
    sweep_center: float,
    sweep_range: float,
    sweep_delta: float
) -> List[Sample]:
    """
    Score the image at every angle of the sweep.

    Args:
        image: 1-bit image (usually reduced)
        sweep_center: Angle about which the sweep is taken
        sweep_range: Half the full range
        sweep_delta: Angle increment

    Returns:
        Samples in evaluation order (increasing angle)

    Raises:
        DegenerateImageError: If the image has no foreground pixels
    """
    if is_all_background(image):
        raise DegenerateImageError(image.shape)

    samples = []
    for theta in sweep_angles(sweep_center, sweep_range, sweep_delta):
        score = score_at(image, theta)
        logger.debug(f"sweep score({theta:7.2f}) = {score:.0f}")
        samples.append(Sample(theta, score))

    return samples


def max_at_edge(samples: Sequence[Sample]) -> bool:
    """True if the best sample is the first or the last of the sweep."""
    index = max_sample(samples)
    return index == 0 or index == len(samples) - 1


def raw_max(samples: Sequence[Sample]) -> Sample:
    """The best sample itself, with no interpolation."""
    return samples[max_sample(samples)]


def fit_max(samples: Sequence[Sample]) -> Tuple[float, float]:
    """
    Locate the maximum by fitting a quadratic to the best sample and its
    two neighbours (Lagrangian interpolation).

    At either end of the sweep, or when the three points do not bend
    downwards, the best sample is returned as is.

    Returns:
        (angle, score) of the fitted maximum
    """
    index = max_sample(samples)
    best = samples[index]
    if index == 0 or index == len(samples) - 1:
        return best.angle, best.score

    x1, y1 = samples[index - 1].angle, samples[index - 1].score
    x2, y2 = best.angle, best.score
    x3, y3 = samples[index + 1].angle, samples[index + 1].score

    c1 = y1 / ((x1 - x2) * (x1 - x3))
    c2 = y2 / ((x2 - x1) * (x2 - x3))
    c3 = y3 / ((x3 - x1) * (x3 - x2))
    a = c1 + c2 + c3
    if a >= 0:
        return best.angle, best.score

    b = c1 * (x2 + x3) + c2 * (x1 + x3) + c3 * (x1 + x2)
    xmax = b / (2.0 * a)
    ymax = (c1 * (xmax - x2) * (xmax - x3)
            + c2 * (xmax - x1) * (xmax - x3)
            + c3 * (xmax - x1) * (xmax - x2))

    return xmax, ymax

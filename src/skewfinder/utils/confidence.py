"""
Confidence of a skew estimate.

The confidence is the ratio of the best to the worst score seen during the
binary search. The ratio is meaningless when the worst score is tiny, which
happens for an image that is almost all foreground with a few background
pixels: shearing it gives a contribution from the top and bottom edges that
vanishes at zero shear. The signal is expected to scale as width^2 * height,
so the minimum score is compared against a threshold normalized by those
dimensions.
"""

import logging
from typing import Sequence

from .scoring import Sample, min_score
from ..config import SkewConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


def min_score_threshold(width: int, height: int, constant: float = DEFAULT_CONFIG.min_score_threshold_constant) -> float:
    return constant * width * width * height


def estimate_confidence(
    samples: Sequence[Sample],
    max_score: float,
    width: int,
    height: int,
    config: SkewConfig = DEFAULT_CONFIG
) -> float:
    """
    Ratio of max score to min score, or 0 when the min score is too small.

    Args:
        samples: Samples evaluated during the binary search
        max_score: Score at the final angle
        width: Width of the searched image
        height: Height of the searched image
        config: Thresholds

    Returns:
        Confidence (0.0 if invalid)
    """
    lowest = min_score(samples)
    threshold = min_score_threshold(width, height, config.min_score_threshold_constant)
    logger.debug(f"min score = {lowest:.2f}, threshold = {threshold:.2f}")

    if lowest > threshold:
        return max_score / lowest
    return 0.0


def gate_confidence(
    confidence: float,
    angle: float,
    max_score: float,
    sweep_center: float,
    sweep_range: float,
    sweep_delta: float,
    config: SkewConfig = DEFAULT_CONFIG
) -> float:
    """
    Zero the confidence when the angle is within one sweep step of the edge
    of the swept range, or when the max score is too small to trust.
    """
    range_left = sweep_center - sweep_range
    if angle > range_left + 2 * sweep_range - sweep_delta or angle < range_left + sweep_delta:
        logger.debug(f"angle {angle:.3f} too close to the sweep edge; confidence set to 0")
        return 0.0
    if max_score < config.min_valid_max_score:
        logger.debug(f"max score {max_score:.0f} below {config.min_valid_max_score:.0f}; confidence set to 0")
        return 0.0
    return confidence

"""
Page skew detection and deskewing for 1-bit document images.

Skew is found from row pixel profiles. Vertically shearing the image by a
candidate angle makes lines at that angle horizontal, so their pixel counts
can be taken along raster rows. The score is the sum of squared differences
of adjacent row counts, and the skew angle is the angle that maximizes it.

The search sweeps coarsely over angles on a reduced image (4x by default)
to get within about half a degree, then does an interval-halving binary
search at higher resolution. Accuracy is roughly the inverse width of the
searched image in radians, and a couple of text lines are enough.

Angles are in degrees and are the angle required to deskew the image:
clockwise rotations are positive.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from .config import SkewConfig, DEFAULT_CONFIG, VALID_REDUCTIONS, VALID_DESKEW_REDUCTIONS
from .exceptions import InvalidImageError, DegenerateImageError
from .utils.images import (
    check_binary_image,
    downsample,
    downsample_ratio,
    is_all_background,
    rotate_by_shear,
)
from .utils.scoring import Sample, find_differential_square_sum
from .utils.sweep import sweep, max_at_edge, raw_max, fit_max
from .utils.search import refine
from .utils.confidence import estimate_confidence, gate_confidence

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

class SkewStatus(Enum):
    """Outcome of a skew measurement."""
    OK = "ok"
    EDGE_OF_SWEEP = "edge_of_sweep"
    DEGENERATE = "degenerate"
    ALLOCATION_FAILED = "allocation_failed"


@dataclass
class SkewResult:
    """
    Result of a skew measurement.

    ``angle`` is only meaningful when ``ok`` is True, and should only be
    trusted when ``confidence`` is high enough as well: a measurement at the
    edge of the sweep still returns an angle, but with zero confidence.
    """
    angle: float = 0.0
    confidence: float = 0.0
    max_score: Optional[float] = None
    status: SkewStatus = SkewStatus.OK
    sweep_samples: List[Sample] = field(default_factory=list)
    search_samples: List[Sample] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (SkewStatus.OK, SkewStatus.EDGE_OF_SWEEP)

    def should_deskew(self, config: Optional[SkewConfig] = None) -> bool:
        """True if the angle is both large enough and trustworthy enough to correct."""
        config = config or DEFAULT_CONFIG
        return (
            self.ok
            and abs(self.angle) >= config.min_deskew_angle
            and self.confidence >= config.min_allowed_confidence
        )

    def to_dict(self, include_samples: bool = False) -> dict:
        data = {
            "angle": self.angle,
            "confidence": self.confidence,
            "max_score": self.max_score,
            "status": self.status.value,
        }
        if include_samples:
            data["sweep_samples"] = [[s.angle, s.score] for s in self.sweep_samples]
            data["search_samples"] = [[s.angle, s.score] for s in self.search_samples]
        return data


# ============================================================================
# Validation
# ============================================================================

def _check_reduction(value: int, name: str, allowed=VALID_REDUCTIONS) -> None:
    if value not in allowed:
        allowed_str = ",".join(str(r) for r in allowed)
        raise InvalidImageError(f"{name} must be in {{{allowed_str}}}, got {value}")


# ============================================================================
# Top-level Interfaces
# ============================================================================

def deskew(
    image: np.ndarray,
    search_reduction: int = 2,
    config: Optional[SkewConfig] = None
) -> np.ndarray:
    """
    Find the skew angle of a 1-bit image and correct it if large enough.

    Args:
        image: 1-bit image (0 background, 1 foreground)
        search_reduction: Reduction for the binary search: 1, 2 or 4
        config: Thresholds and sweep parameters

    Returns:
        Deskewed image, or an unmodified copy when the angle is too small
        or not trustworthy

    Raises:
        InvalidImageError: If the image is undefined or not 1 bpp, or the
            reduction is not in {1,2,4}
    """
    check_binary_image(image, "image")
    _check_reduction(search_reduction, "search reduction", VALID_DESKEW_REDUCTIONS)

    deskewed, _ = find_skew_and_deskew(image, search_reduction, config)
    return deskewed


def find_skew_and_deskew(
    image: np.ndarray,
    search_reduction: int = 2,
    config: Optional[SkewConfig] = None
) -> Tuple[np.ndarray, SkewResult]:
    """
    Find the skew angle and deskew if the angle is large enough.

    The image is rotated only when |angle| >= min_deskew_angle and the
    confidence is at least min_allowed_confidence; otherwise an unmodified
    copy is returned. The measured result is returned in either case.

    Args:
        image: 1-bit image
        search_reduction: Reduction for the binary search: 1, 2 or 4
        config: Thresholds and sweep parameters

    Returns:
        Tuple of (image, SkewResult)
    """
    config = config or DEFAULT_CONFIG
    check_binary_image(image, "image")
    _check_reduction(search_reduction, "search reduction", VALID_DESKEW_REDUCTIONS)

    result = find_skew_sweep_and_search(
        image,
        sweep_reduction=config.sweep_reduction,
        search_reduction=search_reduction,
        sweep_range=config.sweep_range,
        sweep_delta=config.sweep_delta,
        min_search_delta=config.min_search_delta,
        config=config,
    )

    if not result.ok:
        logger.debug(f"No skew measurement ({result.status.value}); returning copy")
        return image.copy(), result

    if not result.should_deskew(config):
        logger.debug(
            f"Skipping deskew: angle = {result.angle:.3f} deg, confidence = {result.confidence:.2f}"
        )
        return image.copy(), result

    try:
        rotated = rotate_by_shear(image, math.radians(result.angle))
    except MemoryError:
        logger.error("Out of memory rotating image; returning copy")
        return image.copy(), result

    logger.info(f"Deskewed image by {result.angle:.2f}° (confidence {result.confidence:.2f})")
    return rotated, result


def find_skew(image: np.ndarray, config: Optional[SkewConfig] = None) -> SkewResult:
    """
    Find the skew angle with default parameters.

    Uses a 4x reduced sweep of +-5 degrees in 1 degree steps, then a binary
    search at 2x reduction down to 0.01 degrees (unless overridden by
    ``config``).

    Args:
        image: 1-bit image
        config: Thresholds and sweep parameters

    Returns:
        SkewResult; check ``ok`` and ``confidence`` before trusting ``angle``
    """
    config = config or DEFAULT_CONFIG
    check_binary_image(image, "image")

    return find_skew_sweep_and_search(
        image,
        sweep_reduction=config.sweep_reduction,
        search_reduction=config.search_reduction,
        sweep_range=config.sweep_range,
        sweep_delta=config.sweep_delta,
        min_search_delta=config.min_search_delta,
        config=config,
    )


# ============================================================================
# Angle-finding Functions with all Parameters
# ============================================================================

def find_skew_sweep(
    image: np.ndarray,
    reduction: int = 4,
    sweep_range: float = 5.0,
    sweep_delta: float = 1.0
) -> SkewResult:
    """
    Find the skew angle with a sweep alone.

    The maximum is located by a quadratic fit through the best score and its
    two neighbours, so the result can fall between sweep angles. No
    confidence is computed.

    Args:
        image: 1-bit image
        reduction: 1, 2, 4 or 8
        sweep_range: Half the full range, about 0 (degrees)
        sweep_delta: Angle increment (degrees)

    Returns:
        SkewResult with status DEGENERATE and angle 0 for an empty image,
        EDGE_OF_SWEEP when the best angle is at either end of the range
    """
    check_binary_image(image, "image")
    _check_reduction(reduction, "reduction")

    reduced = downsample(image, reduction)
    try:
        samples = sweep(reduced, 0.0, sweep_range, sweep_delta)
    except DegenerateImageError as e:
        logger.warning(f"Cannot measure skew: {e}")
        return SkewResult(status=SkewStatus.DEGENERATE)

    angle, score = fit_max(samples)
    status = SkewStatus.OK
    if max_at_edge(samples):
        logger.warning("max found at sweep edge")
        status = SkewStatus.EDGE_OF_SWEEP

    logger.debug(f"From sweep: angle = {angle:7.3f}, score = {score:.0f}")
    return SkewResult(
        angle=angle,
        max_score=score,
        status=status,
        sweep_samples=samples,
    )


def find_skew_sweep_and_search(
    image: np.ndarray,
    sweep_reduction: int = 4,
    search_reduction: int = 2,
    sweep_range: float = 5.0,
    sweep_delta: float = 1.0,
    min_search_delta: float = 0.01,
    config: Optional[SkewConfig] = None
) -> SkewResult:
    """
    Find the skew angle by a sweep followed by a binary search, with the
    sweep centered on 0. See find_skew_sweep_and_search_score().
    """
    return find_skew_sweep_and_search_score(
        image,
        sweep_reduction=sweep_reduction,
        search_reduction=search_reduction,
        sweep_center=0.0,
        sweep_range=sweep_range,
        sweep_delta=sweep_delta,
        min_search_delta=min_search_delta,
        config=config,
    )


def find_skew_sweep_and_search_score(
    image: np.ndarray,
    sweep_reduction: int = 4,
    search_reduction: int = 2,
    sweep_center: float = 0.0,
    sweep_range: float = 5.0,
    sweep_delta: float = 1.0,
    min_search_delta: float = 0.01,
    config: Optional[SkewConfig] = None
) -> SkewResult:
    """
    Find the skew angle by a sweep followed by a binary search.

    The sweep runs on the image reduced by ``sweep_reduction`` and picks the
    best sweep angle without interpolation. The binary search then runs on
    the image reduced by ``search_reduction``, starting from that angle with
    outer points one sweep step away, until the step is below
    ``min_search_delta``.

    The confidence is zero when the min score of the search is below
    ``min_score_threshold_constant * width^2 * height``, when the final angle
    is within one sweep step of the edge of the swept range, or when the max
    score is below ``min_valid_max_score``. ``max_score`` is returned so the
    angle can be judged independently of the confidence.

    Args:
        image: 1-bit image
        sweep_reduction: 1, 2, 4 or 8
        search_reduction: 1, 2, 4 or 8; must not exceed sweep_reduction
        sweep_center: Angle about which the sweep is taken (degrees)
        sweep_range: Half the full range, about sweep_center (degrees)
        sweep_delta: Angle increment of the sweep (degrees)
        min_search_delta: Minimum binary search increment (degrees)
        config: Thresholds

    Returns:
        SkewResult. For an empty image the status is DEGENERATE with angle
        and confidence 0. When the sweep max is at either end of the range,
        the search is skipped and the status is EDGE_OF_SWEEP with the sweep
        angle and confidence 0.

    Raises:
        InvalidImageError: On bad input or parameters
    """
    config = config or DEFAULT_CONFIG
    check_binary_image(image, "image")
    _check_reduction(sweep_reduction, "sweep reduction")
    _check_reduction(search_reduction, "search reduction")
    if search_reduction > sweep_reduction:
        raise InvalidImageError("search reduction must not exceed sweep reduction")
    if min_search_delta <= 0:
        raise InvalidImageError(f"min search delta must be positive, got {min_search_delta}")

    try:
        return _sweep_and_search(
            image, sweep_reduction, search_reduction, sweep_center,
            sweep_range, sweep_delta, min_search_delta, config
        )
    except DegenerateImageError as e:
        logger.warning(f"Cannot measure skew: {e}")
        return SkewResult(status=SkewStatus.DEGENERATE)
    except MemoryError:
        logger.error(f"Out of memory measuring skew of {image.shape} image")
        return SkewResult(status=SkewStatus.ALLOCATION_FAILED)


def _sweep_and_search(
    image: np.ndarray,
    sweep_reduction: int,
    search_reduction: int,
    sweep_center: float,
    sweep_range: float,
    sweep_delta: float,
    min_search_delta: float,
    config: SkewConfig
) -> SkewResult:
    search_image = downsample(image, search_reduction)
    if is_all_background(search_image):
        raise DegenerateImageError(image.shape)
    sweep_image = downsample_ratio(search_image, sweep_reduction // search_reduction)

    logger.debug(f"sweeping {sweep_image.shape} image over {sweep_center:.2f} +- {sweep_range:.2f} deg")
    sweep_samples = sweep(sweep_image, sweep_center, sweep_range, sweep_delta)
    seed = raw_max(sweep_samples)
    logger.debug(f"From sweep: angle = {seed.angle:7.3f}, score = {seed.score:.0f}")

    if max_at_edge(sweep_samples):
        logger.warning("max found at sweep edge")
        return SkewResult(
            angle=seed.angle,
            confidence=0.0,
            max_score=None,
            status=SkewStatus.EDGE_OF_SWEEP,
            sweep_samples=sweep_samples,
        )

    logger.debug(f"searching {search_image.shape} image from {seed.angle:.3f} deg")
    found = refine(search_image, seed.angle, sweep_delta, min_search_delta)

    height, width = search_image.shape
    confidence = estimate_confidence(found.samples, found.score, width, height, config)
    confidence = gate_confidence(
        confidence, found.angle, found.score,
        sweep_center, sweep_range, sweep_delta, config
    )

    logger.debug(f"From binary search: angle = {found.angle:7.3f}, score ratio = {confidence:8.2f}")
    return SkewResult(
        angle=found.angle,
        confidence=confidence,
        max_score=found.score,
        status=SkewStatus.OK,
        sweep_samples=sweep_samples,
        search_samples=found.samples,
    )


__all__ = [
    "SkewStatus",
    "SkewResult",
    "deskew",
    "find_skew_and_deskew",
    "find_skew",
    "find_skew_sweep",
    "find_skew_sweep_and_search",
    "find_skew_sweep_and_search_score",
    "find_differential_square_sum",
]

"""
Configuration and constants for skew detection and deskewing.

This module provides:
- Default sweep and binary-search parameters
- Validity thresholds for the confidence estimate
- Allowed reduction factors
- Environment overrides for the defaults
"""

import os
import logging
from dataclasses import dataclass, replace, fields
from typing import Tuple

logger = logging.getLogger(__name__)


# ============================================================================
# Reduction Factors
# ============================================================================

# Reduction factors accepted by the sweep / search stages
VALID_REDUCTIONS: Tuple[int, ...] = (1, 2, 4, 8)

# Reduction factors accepted by deskew() for its binary search
VALID_DESKEW_REDUCTIONS: Tuple[int, ...] = (1, 2, 4)


# ============================================================================
# Skew Configuration
# ============================================================================

@dataclass(frozen=True)
class SkewConfig:
    """Skew detection configuration.

    All angles are in degrees.
    """
    # Half-width of the coarse sweep, taken about the sweep center
    sweep_range: float = 5.0
    # Angle increment of the coarse sweep
    sweep_delta: float = 1.0
    # Binary search stops once the step falls below this angle.
    # Accuracy is not better than ~1/width radians (about 0.03 deg at 2000 px).
    min_search_delta: float = 0.01
    # Reduction used for the sweep; 4 is a good speed/accuracy tradeoff
    sweep_reduction: int = 4
    # Reduction used for the binary search
    search_reduction: int = 2
    # Deskew is skipped for angles smaller than this
    min_deskew_angle: float = 0.1
    # Deskew is skipped below this confidence (max/min score ratio)
    min_allowed_confidence: float = 3.0
    # Max score below this gives zero confidence
    min_valid_max_score: float = 10000.0
    # Min score must exceed this constant * width^2 * height
    min_score_threshold_constant: float = 2e-6

    def with_overrides(self, **kwargs) -> "SkewConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **kwargs)


DEFAULT_CONFIG = SkewConfig()


# ============================================================================
# Default Configuration Instance
# ============================================================================

ENV_PREFIX = "SKEWFINDER_"


def get_config() -> SkewConfig:
    """Get the default skew configuration with environment overrides.

    Every field of SkewConfig can be overridden with an environment variable
    named ``SKEWFINDER_<FIELD>``, e.g. ``SKEWFINDER_SWEEP_RANGE=7``.
    """
    overrides = {}

    for f in fields(SkewConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw.strip() == "":
            continue
        cast = int if f.type in (int, "int") else float
        try:
            overrides[f.name] = cast(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}")

    if overrides:
        logger.debug(f"Configuration overrides from environment: {overrides}")
        return DEFAULT_CONFIG.with_overrides(**overrides)

    return DEFAULT_CONFIG

"""
Interval-halving binary search for the skew angle.

Starting from the sweep estimate, the search keeps a window of five scores
at offsets -2, -1, 0, +1, +2 steps around the current center. Each
iteration fills the inner offsets at the current step, moves the center to
the best of the three inner scores and halves the step. The score is
assumed unimodal near the sweep estimate, so the outer offsets are carried
along for the next iteration but never chosen as the new center.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .scoring import Sample
from .sweep import score_at
from ..exceptions import InvalidImageError

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class SearchWindow:
    """
    Five scores around ``center``, indexed 0..4 for offsets -2..+2.

    Slots not yet evaluated at the current step hold None.
    """
    center: float
    scores: Tuple[Optional[float], ...]

    @classmethod
    def initial(cls, center: float, center_score: float,
                left_score: float, right_score: float) -> "SearchWindow":
        return cls(center, (left_score, None, center_score, None, right_score))

    @property
    def center_score(self) -> float:
        return self.scores[2]

    def with_inner(self, left_score: float, right_score: float) -> "SearchWindow":
        """Fill offsets -1 and +1."""
        s = self.scores
        return SearchWindow(self.center, (s[0], left_score, s[2], right_score, s[4]))

    def best_inner_index(self) -> int:
        """Slot (1, 2 or 3) of the best inner score; ties go to the lowest slot."""
        inner = self.scores[1:4]
        if any(score is None for score in inner):
            raise ValueError("inner scores not evaluated")
        return int(np.argmax(inner)) + 1

    def recenter(self, delta: float) -> "SearchWindow":
        """
        Move the center to the best inner slot.

        The neighbours of the new center, at distance ``delta``, become the
        outer slots of the window for the next (halved) step.
        """
        index = self.best_inner_index()
        s = self.scores
        return SearchWindow(
            self.center + delta * (index - 2),
            (s[index - 1], None, s[index], None, s[index + 1]),
        )


@dataclass
class SearchResult:
    """Result of the binary search."""
    angle: float
    score: float
    samples: List[Sample] = field(default_factory=list)
    iterations: int = 0


# ============================================================================
# Binary Search
# ============================================================================

def refine(
    image: np.ndarray,
    center_angle: float,
    initial_delta: float,
    min_delta: float
) -> SearchResult:
    """
    Refine a skew estimate by interval-halving binary search.

    Args:
        image: 1-bit image at search resolution
        center_angle: Starting estimate in degrees
        initial_delta: Distance of the initial outer points (degrees)
        min_delta: Search stops once the step falls below this angle

    Returns:
        SearchResult with the final center, its score and every sample
        evaluated, in evaluation order
    """
    if min_delta <= 0:
        raise InvalidImageError(f"min search delta must be positive, got {min_delta}")
    if initial_delta <= 0:
        raise InvalidImageError(f"initial search delta must be positive, got {initial_delta}")

    samples = []

    def evaluate(angle: float) -> float:
        score = score_at(image, angle)
        samples.append(Sample(angle, score))
        return score

    center_score = evaluate(center_angle)
    left_score = evaluate(center_angle - initial_delta)
    right_score = evaluate(center_angle + initial_delta)
    window = SearchWindow.initial(center_angle, center_score, left_score, right_score)

    delta = 0.5 * initial_delta
    iterations = 0
    while delta >= min_delta:
        window = window.with_inner(
            evaluate(window.center - delta),
            evaluate(window.center + delta),
        )
        window = window.recenter(delta)
        delta = 0.5 * delta
        iterations += 1

    logger.debug(
        f"binary search: angle = {window.center:7.3f}, score = {window.center_score:.0f} "
        f"after {iterations} iterations"
    )
    return SearchResult(window.center, window.center_score, samples, iterations)

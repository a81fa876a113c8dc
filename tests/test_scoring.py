"""
Tests for differential square sum scoring.
"""

import math

import pytest
import numpy as np


class TestBorderSkip:
    """Test the rows excluded at top and bottom."""

    @pytest.mark.parametrize("width,height,expected", [
        (1000, 1000, 25),   # skip limited by 5% of width
        (100, 100, 2),
        (1000, 100, 5),     # skip limited by 10% of height
        (10, 10, 1),        # always at least one row
        (3, 500, 1),
    ])
    def test_border_skip(self, width, height, expected):
        from skewfinder.utils.scoring import border_skip

        assert border_skip(width, height) == expected


class TestDifferentialSquareSum:
    """Test the scoring function."""

    def test_known_profile(self):
        from skewfinder.utils.scoring import find_differential_square_sum

        img = np.zeros((20, 10), dtype=np.uint8)
        img[5, :] = 1
        img[6, :5] = 1

        # Steps 0 -> 10 -> 5 -> 0
        assert find_differential_square_sum(img) == 100 + 25 + 25

    def test_border_rows_are_ignored(self):
        from skewfinder.utils.scoring import find_differential_square_sum

        img = np.zeros((100, 100), dtype=np.uint8)
        # nskip = 2: the step between rows 0 and 1 is excluded, as is
        # the step between rows 97 and 98
        img[0, :] = 1
        img[98:, :] = 1

        assert find_differential_square_sum(img) == 0.0

    def test_blank_image_scores_zero(self, blank_page):
        from skewfinder.utils.scoring import find_differential_square_sum

        assert find_differential_square_sum(blank_page) == 0.0

    def test_tiny_image(self):
        from skewfinder.utils.scoring import find_differential_square_sum

        assert find_differential_square_sum(np.ones((1, 5), dtype=np.uint8)) == 0.0
        assert find_differential_square_sum(np.ones((2, 5), dtype=np.uint8)) == 0.0

    def test_undefined_image(self):
        from skewfinder.utils.scoring import find_differential_square_sum
        from skewfinder.exceptions import InvalidImageError

        with pytest.raises(InvalidImageError):
            find_differential_square_sum(None)
        with pytest.raises(InvalidImageError):
            find_differential_square_sum(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_invariant_under_row_reversal(self):
        from skewfinder.utils.scoring import find_differential_square_sum

        rng = np.random.default_rng(7)
        for _ in range(20):
            img = np.zeros((60, 80), dtype=np.uint8)
            # Keep the excluded border rows empty
            img[5:55] = rng.integers(0, 2, size=(50, 80), dtype=np.uint8)

            assert find_differential_square_sum(img) == find_differential_square_sum(img[::-1])

    def test_aligned_lines_score_higher(self, text_page):
        from skewfinder.utils.scoring import find_differential_square_sum
        from skewfinder.utils.images import v_shear_corner

        img = text_page(400, 400, angle=0.0, word_gaps=False)

        aligned = find_differential_square_sum(img)
        tilted = find_differential_square_sum(v_shear_corner(img, math.radians(2)))

        assert aligned > 5 * tilted


class TestSampleHelpers:
    """Test sample helpers."""

    def test_max_sample_picks_first_maximum(self):
        from skewfinder.utils.scoring import Sample, max_sample

        samples = [Sample(-1.0, 5.0), Sample(0.0, 9.0), Sample(1.0, 9.0)]

        assert max_sample(samples) == 1

    def test_min_score(self):
        from skewfinder.utils.scoring import Sample, min_score

        samples = [Sample(-1.0, 5.0), Sample(0.0, 9.0), Sample(1.0, 2.5)]

        assert min_score(samples) == 2.5

    def test_empty_samples(self):
        from skewfinder.utils.scoring import max_sample, min_score

        with pytest.raises(ValueError):
            max_sample([])
        with pytest.raises(ValueError):
            min_score([])

"""
Tests for skew measurement and deskewing.

Angles found by the binary search are only resolved to about 1/width
radians of the searched image (0.057 deg at 500 px), since the score is
flat over shears that move no pixel. Tolerances below are set from that.
"""

import logging
import math

import pytest
import numpy as np


class TestScenarios:
    """End-to-end behaviour on synthetic pages."""

    def test_straight_line_at_two_degrees(self, line_page):
        from skewfinder.skew import find_skew_sweep_and_search, SkewStatus

        result = find_skew_sweep_and_search(
            line_page(1000, 1000, angle=2.0),
            sweep_reduction=4,
            search_reduction=2,
            sweep_range=5.0,
            sweep_delta=1.0,
            min_search_delta=0.01,
        )

        seed = max(result.sweep_samples, key=lambda s: s.score)
        assert 1.0 <= seed.angle <= 3.0
        assert result.status == SkewStatus.OK
        assert result.angle == pytest.approx(2.0, abs=0.1)
        assert result.confidence >= 3.0

    def test_blank_page_fails(self, blank_page):
        from skewfinder.skew import find_skew_sweep, SkewStatus

        result = find_skew_sweep(blank_page)

        assert result.status == SkewStatus.DEGENERATE
        assert not result.ok
        assert result.angle == 0.0
        assert result.max_score is None

    def test_aligned_text(self, text_page):
        from skewfinder.skew import find_skew, deskew

        page = text_page(1000, 1000, angle=0.0)

        result = find_skew(page)
        assert result.ok
        assert abs(result.angle) <= 0.1
        assert result.confidence >= 3.0
        assert not result.should_deskew()

        deskewed = deskew(page)
        np.testing.assert_array_equal(deskewed, page)
        assert deskewed is not page

    def test_angle_at_sweep_edge(self, text_page, caplog):
        from skewfinder.skew import find_skew, SkewStatus

        with caplog.at_level(logging.WARNING, logger="skewfinder"):
            result = find_skew(text_page(1000, 1000, angle=4.9))

        assert "max found at sweep edge" in caplog.text
        assert result.status == SkewStatus.EDGE_OF_SWEEP
        assert result.ok
        assert result.confidence == 0.0
        # The raw sweep angle is still returned
        assert result.angle == 5.0
        assert not result.should_deskew()


class TestFindSkew:
    """Test the measurement entry points."""

    @pytest.mark.parametrize("angle", [-3.0, -1.4, 0.6, 2.5])
    def test_text_angles(self, text_page, angle):
        from skewfinder.skew import find_skew

        result = find_skew(text_page(1000, 1000, angle=angle))

        assert result.angle == pytest.approx(angle, abs=0.1)
        assert result.max_score > 0
        assert len(result.search_samples) > 3

    def test_full_resolution_search(self, text_page):
        from skewfinder.skew import find_skew_sweep_and_search

        result = find_skew_sweep_and_search(
            text_page(800, 800, angle=1.2), sweep_reduction=4, search_reduction=1
        )

        assert result.angle == pytest.approx(1.2, abs=0.1)
        assert len(result.search_samples) > 3

    def test_sweep_about_nonzero_center(self, text_page):
        from skewfinder.skew import find_skew_sweep_and_search_score

        result = find_skew_sweep_and_search_score(
            text_page(1000, 1000, angle=6.0), sweep_center=5.0, sweep_range=3.0
        )

        assert result.sweep_samples[0].angle == 2.0
        assert result.sweep_samples[-1].angle == 8.0
        assert result.angle == pytest.approx(6.0, abs=0.1)

    def test_sweep_only(self, text_page):
        from skewfinder.skew import find_skew_sweep, SkewStatus

        result = find_skew_sweep(text_page(1000, 1000, angle=2.0), reduction=4)

        assert result.status == SkewStatus.OK
        assert result.angle == pytest.approx(2.0, abs=0.5)
        assert result.confidence == 0.0
        assert len(result.sweep_samples) == 11

    def test_sweep_only_at_edge(self, text_page, caplog):
        from skewfinder.skew import find_skew_sweep, SkewStatus

        with caplog.at_level(logging.WARNING, logger="skewfinder"):
            result = find_skew_sweep(text_page(1000, 1000, angle=-4.9))

        assert result.status == SkewStatus.EDGE_OF_SWEEP
        assert result.angle == -5.0
        assert "max found at sweep edge" in caplog.text

    def test_blank_page_search(self, blank_page):
        from skewfinder.skew import find_skew, SkewStatus

        result = find_skew(blank_page)

        assert result.status == SkewStatus.DEGENERATE
        assert result.angle == 0.0
        assert result.confidence == 0.0

    def test_out_of_memory(self, text_page, monkeypatch):
        import skewfinder.skew as skew

        def fail(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(skew, "refine", fail)

        result = skew.find_skew(text_page(400, 400, angle=1.0))

        assert result.status == skew.SkewStatus.ALLOCATION_FAILED
        assert not result.ok

    def test_config_is_used(self, text_page):
        from skewfinder.config import SkewConfig
        from skewfinder.skew import find_skew

        config = SkewConfig(sweep_range=7.0, sweep_delta=0.5, sweep_reduction=8)
        result = find_skew(text_page(1000, 1000, angle=1.0), config)

        assert len(result.sweep_samples) == 29
        assert result.sweep_samples[0].angle == -7.0


class TestValidation:
    """Test rejection of bad input."""

    def test_undefined_image(self):
        from skewfinder.skew import find_skew, deskew, find_skew_sweep
        from skewfinder.exceptions import InvalidImageError

        for fn in (find_skew, deskew, find_skew_sweep):
            with pytest.raises(InvalidImageError):
                fn(None)

    def test_grayscale_image(self):
        from skewfinder.skew import find_skew
        from skewfinder.exceptions import InvalidImageError

        with pytest.raises(InvalidImageError, match="1 bpp"):
            find_skew(np.full((100, 100), 255, dtype=np.uint8))

    def test_deskew_reduction(self, text_page):
        from skewfinder.skew import deskew
        from skewfinder.exceptions import InvalidImageError

        with pytest.raises(InvalidImageError):
            deskew(text_page(200, 200), search_reduction=8)
        with pytest.raises(InvalidImageError):
            deskew(text_page(200, 200), search_reduction=3)

    def test_search_coarser_than_sweep(self, text_page):
        from skewfinder.skew import find_skew_sweep_and_search
        from skewfinder.exceptions import InvalidImageError

        with pytest.raises(InvalidImageError):
            find_skew_sweep_and_search(text_page(200, 200), sweep_reduction=2, search_reduction=4)

    def test_bad_sweep_reduction(self, text_page):
        from skewfinder.skew import find_skew_sweep
        from skewfinder.exceptions import InvalidImageError

        with pytest.raises(InvalidImageError):
            find_skew_sweep(text_page(200, 200), reduction=16)

    def test_bad_min_delta(self, text_page):
        from skewfinder.skew import find_skew_sweep_and_search
        from skewfinder.exceptions import InvalidImageError

        with pytest.raises(InvalidImageError):
            find_skew_sweep_and_search(text_page(200, 200), min_search_delta=0.0)


class TestDeskew:
    """Test correction of measured skew."""

    def test_rotates_skewed_page(self, text_page):
        from skewfinder.skew import find_skew_and_deskew, find_skew

        page = text_page(1000, 1000, angle=3.0)

        deskewed, result = find_skew_and_deskew(page)

        assert result.angle == pytest.approx(3.0, abs=0.1)
        assert result.should_deskew()
        assert deskewed.shape == page.shape
        assert not np.array_equal(deskewed, page)

        remeasured = find_skew(deskewed)
        assert abs(remeasured.angle) <= 0.2

    def test_deskew_returns_image(self, text_page):
        from skewfinder.skew import deskew

        page = text_page(1000, 1000, angle=-2.0)

        deskewed = deskew(page, search_reduction=4)

        assert deskewed.shape == page.shape
        assert set(np.unique(deskewed)) <= {0, 1}
        assert not np.array_equal(deskewed, page)

    def test_low_confidence_is_not_corrected(self, text_page):
        from skewfinder.config import SkewConfig
        from skewfinder.skew import find_skew_and_deskew

        page = text_page(1000, 1000, angle=3.0)
        config = SkewConfig(min_allowed_confidence=1e9)

        deskewed, result = find_skew_and_deskew(page, config=config)

        assert result.angle == pytest.approx(3.0, abs=0.1)
        np.testing.assert_array_equal(deskewed, page)

    def test_blank_page_is_copied(self, blank_page):
        from skewfinder.skew import deskew

        deskewed = deskew(blank_page)

        np.testing.assert_array_equal(deskewed, blank_page)
        assert deskewed is not blank_page

    def test_rotation_out_of_memory(self, text_page, monkeypatch):
        import skewfinder.skew as skew

        def fail(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(skew, "rotate_by_shear", fail)
        page = text_page(1000, 1000, angle=3.0)

        deskewed, result = skew.find_skew_and_deskew(page)

        assert result.ok
        np.testing.assert_array_equal(deskewed, page)


class TestSkewResult:
    """Test the result record."""

    def test_defaults(self):
        from skewfinder.skew import SkewResult, SkewStatus

        result = SkewResult()

        assert result.angle == 0.0
        assert result.confidence == 0.0
        assert result.max_score is None
        assert result.status == SkewStatus.OK

    @pytest.mark.parametrize("angle,confidence,status,expected", [
        (2.0, 5.0, "OK", True),
        (0.05, 5.0, "OK", False),
        (-0.1, 5.0, "OK", True),
        (2.0, 2.9, "OK", False),
        (2.0, 5.0, "DEGENERATE", False),
        (2.0, 5.0, "ALLOCATION_FAILED", False),
    ])
    def test_should_deskew(self, angle, confidence, status, expected):
        from skewfinder.skew import SkewResult, SkewStatus

        result = SkewResult(angle=angle, confidence=confidence, status=SkewStatus[status])

        assert result.should_deskew() is expected

    def test_to_dict(self):
        from skewfinder.skew import SkewResult, SkewStatus
        from skewfinder.utils.scoring import Sample

        result = SkewResult(
            angle=1.5, confidence=4.0, max_score=2e5, status=SkewStatus.OK,
            sweep_samples=[Sample(1.0, 10.0)], search_samples=[Sample(1.5, 20.0)],
        )

        assert result.to_dict() == {
            "angle": 1.5, "confidence": 4.0, "max_score": 2e5, "status": "ok",
        }
        full = result.to_dict(include_samples=True)
        assert full["sweep_samples"] == [[1.0, 10.0]]
        assert full["search_samples"] == [[1.5, 20.0]]

    def test_public_api(self):
        import skewfinder

        assert skewfinder.find_skew is not None
        assert skewfinder.deskew is not None
        assert skewfinder.__version__ == "1.0.0"
        assert math.isfinite(skewfinder.find_differential_square_sum(np.eye(50, dtype=np.uint8)))

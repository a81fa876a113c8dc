#!/usr/bin/env python
"""
Generate synthetic skewed pages for trying out skewfinder.

This script creates scanned-looking pages with:
- A title and paragraphs of text
- A two-column block
- A known skew applied by rotating the whole page

Each page is written with a JSON file holding the skew angle that
skewfinder should report for it.

Usage:
    python examples/generate_samples.py
    skewfinder --input examples/sample_pages --output ./deskewed --report
"""

import json
from pathlib import Path

import numpy as np

WORDS = (
    "skew detection uses the pixel profile along raster rows of the sheared "
    "page and finds the angle where textlines are most sharply aligned"
).split()

# (name, angle in degrees)
SAMPLES = [
    ("sample_flat", 0.0),
    ("sample_ccw_2", 2.0),
    ("sample_cw_3", -3.5),
    ("sample_small", 0.4),
    ("sample_edge", 4.9),
]


def create_text_page(seed: int = 0):
    """Create an unskewed page of text lines."""
    import cv2

    rng = np.random.default_rng(seed)

    # Letter size at 100 DPI
    img = np.ones((1100, 850), dtype=np.uint8) * 255

    cv2.putText(img, "Skew Detection Demo", (220, 80),
                cv2.FONT_HERSHEY_DUPLEX, 1.0, 0, 2)

    # Full-width paragraphs
    y = 150
    for _ in range(3):
        for _ in range(6):
            line = " ".join(rng.choice(WORDS, size=9))
            cv2.putText(img, line, (70, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, 0, 1)
            y += 26
        y += 20

    # Two columns
    for x in (70, 450):
        col_y = y
        for _ in range(12):
            line = " ".join(rng.choice(WORDS, size=4))
            cv2.putText(img, line, (x, col_y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, 0, 1)
            col_y += 24

    return img


def skew_page(img: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotate a page counterclockwise by ``angle`` degrees.

    skewfinder reports the clockwise rotation that undoes this, so the
    expected measurement is ``angle`` itself.
    """
    import cv2

    h, w = img.shape[:2]
    matrix = cv2.getRotationMatrix2D((w / 2, h / 2), angle, 1.0)
    return cv2.warpAffine(img, matrix, (w, h), flags=cv2.INTER_LINEAR,
                          borderMode=cv2.BORDER_CONSTANT, borderValue=255)


def create_expected_output(name: str, angle: float) -> dict:
    """Expected skewfinder result for a generated page."""
    return {
        "page": name,
        "angle": angle,
        "notes": "Angles at or beyond the sweep edge (5 deg) are reported with zero confidence",
    }


def main():
    import cv2

    # Create output directories
    samples_dir = Path(__file__).parent / "sample_pages"
    expected_dir = Path(__file__).parent / "expected_outputs"
    samples_dir.mkdir(exist_ok=True)
    expected_dir.mkdir(exist_ok=True)

    for i, (name, angle) in enumerate(SAMPLES):
        img = skew_page(create_text_page(seed=i), angle)

        img_path = samples_dir / f"{name}.png"
        cv2.imwrite(str(img_path), img)
        print(f"Created: {img_path} ({angle:+.1f} deg)")

        expected_path = expected_dir / f"{name}.json"
        with open(expected_path, 'w') as f:
            json.dump(create_expected_output(name, angle), f, indent=2)
        print(f"Created: {expected_path}")

    print("\nSample generation complete!")


if __name__ == "__main__":
    main()

"""
Binary image primitives used by skew detection.

Provides:
- Validation of 1-bit images (2-D arrays of 0/1 or bool)
- Conversion between grayscale pages and 1-bit images
- Rank-order 2x reduction and reduction cascades
- Horizontal and vertical shear
- Rotation by three shears
- Row pixel profiles

A binary image here is a 2-D numpy array where 1 (or True) is foreground
ink and 0 is background. All operations return new arrays; inputs are never
modified. Shears and rotations bring in background at the vacated edges.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..exceptions import InvalidImageError

logger = logging.getLogger(__name__)


# Rank levels for each reduction factor applied to a full resolution image
REDUCTION_CASCADES = {
    2: (1,),
    4: (1, 1),
    8: (1, 1, 2),
}

# Rank levels for further reducing an already reduced image by a ratio
RATIO_CASCADES = {
    2: (1,),
    4: (1, 2),
    8: (1, 2, 2),
}


# ============================================================================
# Validation and Conversion
# ============================================================================

def check_binary_image(image: Optional[np.ndarray], name: str = "image") -> np.ndarray:
    """
    Validate that an array is a usable 1-bit image.

    Args:
        image: Candidate image
        name: Name used in error messages

    Returns:
        The same array, unchanged

    Raises:
        InvalidImageError: If the image is undefined, empty, not 2-D,
            or has values other than 0 and 1
    """
    if image is None:
        raise InvalidImageError(f"{name} not defined")
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"{name} is not a numpy array", details=f"type={type(image).__name__}")
    if image.ndim != 2:
        raise InvalidImageError(f"{name} not 1 bpp", details=f"shape={image.shape}")
    if image.size == 0:
        raise InvalidImageError(f"{name} is empty", details=f"shape={image.shape}")

    if image.dtype == np.bool_:
        return image
    if not np.issubdtype(image.dtype, np.integer):
        raise InvalidImageError(f"{name} not 1 bpp", details=f"dtype={image.dtype}")
    if image.min() < 0 or image.max() > 1:
        raise InvalidImageError(
            f"{name} not 1 bpp",
            details=f"values in [{image.min()}, {image.max()}]"
        )

    return image


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to grayscale if it's color.

    Args:
        image: Input image (BGR or grayscale)

    Returns:
        Grayscale image
    """
    import cv2

    if len(image.shape) == 2:
        return image
    elif len(image.shape) == 3:
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        elif image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.shape[2] == 1:
            return image.squeeze()

    raise ValueError(f"Unexpected image shape: {image.shape}")


def to_binary(image: np.ndarray, threshold: int = 0) -> np.ndarray:
    """
    Convert a scanned page to a 1-bit image with dark ink as foreground.

    Args:
        image: Input page (BGR or grayscale, uint8)
        threshold: Fixed threshold; 0 selects Otsu's method

    Returns:
        uint8 array of 0 (background) and 1 (ink)
    """
    import cv2

    gray = to_grayscale(image)
    if gray.dtype != np.uint8:
        gray = np.clip(gray, 0, 255).astype(np.uint8)

    if threshold == 0:
        _, inverted = cv2.threshold(
            gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU
        )
    else:
        _, inverted = cv2.threshold(gray, threshold, 255, cv2.THRESH_BINARY_INV)

    logger.debug(f"Binarized {gray.shape} page ({'otsu' if threshold == 0 else threshold})")
    return (inverted > 0).astype(np.uint8)


def from_binary(image: np.ndarray) -> np.ndarray:
    """Render a 1-bit image as a black-on-white uint8 page."""
    return np.where(image > 0, 0, 255).astype(np.uint8)


# ============================================================================
# Profiles
# ============================================================================

def row_foreground_counts(image: np.ndarray) -> np.ndarray:
    """Number of foreground pixels in each row (length = image height)."""
    return np.count_nonzero(image, axis=1).astype(np.int64)


def is_all_background(image: np.ndarray) -> bool:
    """True if the image has no foreground pixels."""
    return not np.any(image)


# ============================================================================
# Rank Reduction
# ============================================================================

def reduce_rank_binary_2(image: np.ndarray, level: int) -> np.ndarray:
    """
    Reduce a binary image by 2x using a rank-order filter.

    Each output pixel covers a 2x2 block of the source and is ON when at
    least ``level`` of its four pixels are ON. Level 1 is an OR, level 4 an
    AND. An odd trailing row or column is dropped.

    Args:
        image: 1-bit image
        level: Rank threshold in 1..4

    Returns:
        uint8 image of half the size
    """
    if level not in (1, 2, 3, 4):
        raise InvalidImageError(f"rank level must be in 1..4, got {level}")

    h, w = image.shape
    h2, w2 = h // 2, w // 2
    if h2 == 0 or w2 == 0:
        raise InvalidImageError("image too small to reduce", details=f"shape={image.shape}")

    blocks = image[:2 * h2, :2 * w2].astype(np.uint8).reshape(h2, 2, w2, 2)
    counts = blocks.sum(axis=(1, 3))

    return (counts >= level).astype(np.uint8)


def reduce_rank_binary_cascade(image: np.ndarray, levels: Sequence[int]) -> np.ndarray:
    """
    Apply successive 2x rank reductions.

    Args:
        image: 1-bit image
        levels: Rank level for each 2x stage; a 0 stops the cascade

    Returns:
        Reduced image (a copy when no stage runs)
    """
    reduced = image.astype(np.uint8)
    for level in levels:
        if level == 0:
            break
        reduced = reduce_rank_binary_2(reduced, level)
    return reduced


def downsample(image: np.ndarray, factor: int) -> np.ndarray:
    """Reduce a full resolution binary image by 1, 2, 4 or 8."""
    if factor == 1:
        return image.astype(np.uint8)
    if factor not in REDUCTION_CASCADES:
        raise InvalidImageError(f"reduction must be in {{1,2,4,8}}, got {factor}")
    return reduce_rank_binary_cascade(image, REDUCTION_CASCADES[factor])


def downsample_ratio(image: np.ndarray, ratio: int) -> np.ndarray:
    """Further reduce an already reduced binary image by 1, 2, 4 or 8."""
    if ratio == 1:
        return image
    if ratio not in RATIO_CASCADES:
        raise InvalidImageError(f"reduction ratio must be in {{1,2,4,8}}, got {ratio}")
    return reduce_rank_binary_cascade(image, RATIO_CASCADES[ratio])


# ============================================================================
# Shear
# ============================================================================

def _shift_columns(image: np.ndarray, shifts: np.ndarray) -> np.ndarray:
    """Move column x down by shifts[x] pixels, filling with background."""
    h = image.shape[0]
    src_rows = np.arange(h)[:, None] - shifts[None, :]
    inside = (src_rows >= 0) & (src_rows < h)
    out = np.take_along_axis(image, np.clip(src_rows, 0, h - 1), axis=0)
    out[~inside] = 0
    return out


def _shift_rows(image: np.ndarray, shifts: np.ndarray) -> np.ndarray:
    """Move row y right by shifts[y] pixels, filling with background."""
    w = image.shape[1]
    src_cols = np.arange(w)[None, :] - shifts[:, None]
    inside = (src_cols >= 0) & (src_cols < w)
    out = np.take_along_axis(image, np.clip(src_cols, 0, w - 1), axis=1)
    out[~inside] = 0
    return out


def v_shear(image: np.ndarray, xloc: float, radang: float) -> np.ndarray:
    """
    Vertical shear about the column ``x = xloc``.

    Column x is displaced down by round((x - xloc) * tan(radang)), so a
    positive angle is a clockwise shear. The output has the same size.

    Args:
        image: Input image
        xloc: Column that stays fixed
        radang: Shear angle in radians

    Returns:
        Sheared image
    """
    if radang == 0.0:
        return image.copy()
    w = image.shape[1]
    shifts = np.rint((np.arange(w) - xloc) * math.tan(radang)).astype(np.intp)
    return _shift_columns(image, shifts)


def h_shear(image: np.ndarray, yloc: float, radang: float) -> np.ndarray:
    """
    Horizontal shear about the row ``y = yloc``.

    Row y is displaced left by round((y - yloc) * tan(radang)), so a positive
    angle is a clockwise shear.
    """
    if radang == 0.0:
        return image.copy()
    h = image.shape[0]
    shifts = np.rint(-(np.arange(h) - yloc) * math.tan(radang)).astype(np.intp)
    return _shift_rows(image, shifts)


def v_shear_corner(image: np.ndarray, radang: float) -> np.ndarray:
    """Vertical shear about the upper-left corner."""
    return v_shear(image, 0, radang)


# ============================================================================
# Rotation
# ============================================================================

def rotate_by_shear(
    image: np.ndarray,
    radang: float,
    xcen: Optional[float] = None,
    ycen: Optional[float] = None
) -> np.ndarray:
    """
    Rotate an image by three successive shears.

    Uses the decomposition H(tan(a/2)) V(sin a) H(tan(a/2)), which keeps
    every pixel exact (no interpolation), so a 1-bit image stays 1-bit.
    Positive angles rotate clockwise. The output has the input's size;
    corners rotated out are lost and background is brought in.

    Args:
        image: Input image
        radang: Rotation angle in radians
        xcen: Rotation center column (default: image center)
        ycen: Rotation center row (default: image center)

    Returns:
        Rotated image
    """
    h, w = image.shape[:2]
    if xcen is None:
        xcen = w / 2.0
    if ycen is None:
        ycen = h / 2.0

    if radang == 0.0:
        return image.copy()
    if abs(radang) >= math.pi / 2:
        raise InvalidImageError(f"rotation angle too large for shear rotation: {radang:.4f} rad")

    half = radang / 2.0
    rotated = h_shear(image, ycen, half)
    rotated = v_shear(rotated, xcen, math.atan(math.sin(radang)))
    rotated = h_shear(rotated, ycen, half)

    logger.debug(f"Rotated {image.shape} image by {math.degrees(radang):.3f} deg about ({xcen:.1f}, {ycen:.1f})")
    return rotated

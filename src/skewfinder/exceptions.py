"""
Custom exceptions for skew detection.

InvalidImageError is raised fail-fast on bad arguments. DegenerateImageError
is raised when there is nothing to measure; the public find-functions turn it
into a failed SkewResult instead of propagating it.
"""

from typing import Optional


class SkewFinderError(Exception):
    """Base exception for all skewfinder errors."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class InvalidImageError(SkewFinderError, ValueError):
    """Raised for an undefined or non-binary image, or a bad parameter."""


class DegenerateImageError(SkewFinderError):
    """Raised when an image has no foreground pixels."""

    def __init__(self, shape: tuple, message: Optional[str] = None) -> None:
        self.shape = shape
        msg = message or "Image is entirely background"
        super().__init__(msg, details=f"shape={shape}")

"""
Common type definitions for the VIN scan pipeline.

This module provides the Pydantic-based rectangle type shared by the OCR
provider adapters, the geometric filter and the candidate merger.

The rectangle is coordinate-system agnostic: screen/image space (Y grows
downwards) and normalized Y-up space (Y grows upwards) are both accepted.
Callers choose the ordering direction when sorting, not when building
rectangles.
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, model_validator


class Rect(BaseModel):
    """
    Immutable axis-aligned rectangle [left, top, right, bottom].

    ``top`` is simply the smaller Y coordinate and ``bottom`` the larger one,
    regardless of which direction Y grows in the producing subsystem.

    Attributes:
        left: Minimum X-coordinate.
        top: Minimum Y-coordinate.
        right: Maximum X-coordinate.
        bottom: Maximum Y-coordinate.

    Example:
        >>> rect = Rect(left=10, top=20, right=110, bottom=50)
        >>> print(rect.width, rect.height)  # 100.0 30.0
        >>> rect.intersection(Rect(left=60, top=0, right=200, bottom=40))
        Rect(left=60.0, top=20.0, right=110.0, bottom=40.0)
    """

    model_config = {"frozen": True}

    left: float = Field(..., description="Minimum X-coordinate")
    top: float = Field(..., description="Minimum Y-coordinate")
    right: float = Field(..., description="Maximum X-coordinate")
    bottom: float = Field(..., description="Maximum Y-coordinate")

    @model_validator(mode="after")
    def _validate_rect(self) -> "Rect":
        """
        Validate rectangle coordinates after initialization.

        Raises:
            ValueError: If right < left or bottom < top.
        """
        if self.right < self.left:
            raise ValueError(
                f"Invalid rect: left ({self.left}) must be <= right ({self.right})"
            )
        if self.bottom < self.top:
            raise ValueError(
                f"Invalid rect: top ({self.top}) must be <= bottom ({self.bottom})"
            )
        return self

    @classmethod
    def from_xywh(cls, x: float, y: float, width: float, height: float) -> "Rect":
        """Create Rect from origin and size."""
        return cls(left=x, top=y, right=x + width, bottom=y + height)

    @classmethod
    def from_tuple(cls, coords: Tuple[float, float, float, float]) -> "Rect":
        """
        Create Rect from (left, top, right, bottom) tuple.

        Raises:
            ValueError: If tuple does not contain exactly 4 elements.
        """
        if len(coords) != 4:
            raise ValueError(f"Expected tuple with 4 elements, got {len(coords)}")
        return cls(left=coords[0], top=coords[1], right=coords[2], bottom=coords[3])

    @classmethod
    def from_points(cls, points: Union[np.ndarray, Sequence]) -> "Rect":
        """
        Create the bounding Rect of a polygon, e.g. a 4-corner OCR box.

        Args:
            points: Sequence of [x, y] points, shape (N, 2).

        Returns:
            Smallest Rect containing all points.

        Raises:
            ValueError: If points is not an (N, 2) array with N >= 1.
        """
        arr = np.asarray(points, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] != 2 or arr.shape[0] == 0:
            raise ValueError(f"Expected points of shape (N, 2), got {arr.shape}")
        return cls(
            left=float(arr[:, 0].min()),
            top=float(arr[:, 1].min()),
            right=float(arr[:, 0].max()),
            bottom=float(arr[:, 1].max()),
        )

    def to_tuple(self) -> Tuple[float, float, float, float]:
        """Convert Rect to (left, top, right, bottom) tuple."""
        return (self.left, self.top, self.right, self.bottom)

    @property
    def width(self) -> float:
        """Get rectangle width (right - left)."""
        return self.right - self.left

    @property
    def height(self) -> float:
        """Get rectangle height (bottom - top)."""
        return self.bottom - self.top

    @property
    def area(self) -> float:
        """Get rectangle area (width * height)."""
        return self.width * self.height

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2

    @property
    def is_empty(self) -> bool:
        """True when the rectangle has zero width or zero height."""
        return self.width <= 0 or self.height <= 0

    def intersection(self, other: "Rect") -> Optional["Rect"]:
        """
        Calculate intersection (overlap) with another rect.

        Rectangles that only touch along an edge do not intersect.

        Args:
            other: Rect to intersect with.

        Returns:
            New Rect representing the overlap, or None if disjoint.
        """
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)

        if left >= right or top >= bottom:
            return None

        return Rect(left=left, top=top, right=right, bottom=bottom)

    def __repr__(self) -> str:
        """String representation of Rect."""
        return (
            f"Rect(left={self.left}, top={self.top}, "
            f"right={self.right}, bottom={self.bottom})"
        )

"""
Geometric filtering of recognized text blocks.

Decides whether an OCR block is considered at all before normalization:

- Live camera path: the block must lie mostly inside the guide rectangle.
  Overlap is measured relative to the block's own width and height, so a
  guide smaller than a multi-line block is tolerated while blocks that only
  graze the guide edge are rejected.
- Still-image path: there is no guide; tiny blocks are dropped by a minimum
  relative text height instead.
"""

import logging
from typing import Optional

from src.common.types import Rect

from .types import FilterPolicy, GuideRegion, TextObservation

logger = logging.getLogger(__name__)


def is_mostly_inside(
    block_rect: Rect,
    guide_rect: Rect,
    min_overlap_ratio: float = 0.6,
) -> bool:
    """
    Check whether a block lies mostly inside the guide rectangle.

    Args:
        block_rect: Bounding box of the recognized block.
        guide_rect: Guide rectangle in the same coordinate space.
        min_overlap_ratio: Required fraction (exclusive) of the block's
            height and width that must overlap the guide.

    Returns:
        True if both overlap ratios exceed ``min_overlap_ratio``.

    Example:
        >>> guide = Rect(left=0, top=0, right=100, bottom=100)
        >>> is_mostly_inside(Rect(left=10, top=10, right=50, bottom=50), guide)
        True
        >>> is_mostly_inside(Rect(left=50, top=0, right=150, bottom=100), guide)
        False
    """
    if block_rect.is_empty:
        return False

    intersection = block_rect.intersection(guide_rect)
    if intersection is None:
        return False

    height_ratio = intersection.height / block_rect.height
    width_ratio = intersection.width / block_rect.width

    return height_ratio > min_overlap_ratio and width_ratio > min_overlap_ratio


def meets_min_text_height(
    block_rect: Rect,
    image_height: float,
    min_relative_height: float = 0.015,
) -> bool:
    """
    Check whether a block is tall enough relative to the image.

    Args:
        block_rect: Bounding box of the recognized block.
        image_height: Height of the analysed image in the same units
            (1.0 for normalized coordinates).
        min_relative_height: Minimum block height / image height.

    Returns:
        True if the block is at least the minimum relative height.
    """
    if image_height <= 0:
        return False
    return block_rect.height / image_height >= min_relative_height


def guide_region_for_frame(
    frame_width: float,
    frame_height: float,
    rotation_degrees: int = 0,
    width_fraction: float = 0.85,
    height_fraction: float = 0.12,
) -> GuideRegion:
    """
    Build the centered guide region for a captured frame.

    A rotation of 90 or 270 degrees swaps width and height so the guide is
    expressed in the upright image space the OCR provider reports in.

    Args:
        frame_width: Raw frame width in pixels.
        frame_height: Raw frame height in pixels.
        rotation_degrees: Sensor rotation reported by the capture pipeline.
        width_fraction: Guide width relative to the upright frame width.
        height_fraction: Guide height relative to the upright frame height.

    Returns:
        GuideRegion centered in the upright frame.

    Raises:
        ValueError: If frame dimensions are not positive.

    Example:
        >>> region = guide_region_for_frame(1000, 500)
        >>> region.rect.width, region.rect.height
        (850.0, 60.0)
    """
    if frame_width <= 0 or frame_height <= 0:
        raise ValueError(
            f"Frame dimensions must be positive, got {frame_width}x{frame_height}"
        )

    if rotation_degrees % 360 in (90, 270):
        frame_width, frame_height = frame_height, frame_width

    guide_width = frame_width * width_fraction
    guide_height = frame_height * height_fraction
    left = (frame_width - guide_width) / 2
    top = (frame_height - guide_height) / 2

    return GuideRegion(rect=Rect.from_xywh(left, top, guide_width, guide_height))


class GeometricFilter:
    """Applies one named pre-filter policy to recognized blocks.

    Args:
        policy: GUIDE_OVERLAP or MIN_TEXT_HEIGHT.
        min_overlap_ratio: Threshold for GUIDE_OVERLAP.
        min_relative_text_height: Threshold for MIN_TEXT_HEIGHT.
    """

    def __init__(
        self,
        policy: FilterPolicy,
        min_overlap_ratio: float = 0.6,
        min_relative_text_height: float = 0.015,
    ):
        self.policy = policy
        self.min_overlap_ratio = min_overlap_ratio
        self.min_relative_text_height = min_relative_text_height

    def accepts(
        self,
        observation: TextObservation,
        guide: Optional[GuideRegion] = None,
        image_height: Optional[float] = None,
    ) -> bool:
        """
        Decide whether an observation passes the configured filter.

        Args:
            observation: Recognized block.
            guide: Guide region, required for GUIDE_OVERLAP.
            image_height: Image height, required for MIN_TEXT_HEIGHT.

        Returns:
            True if the block should be considered.

        Raises:
            ValueError: If the input required by the policy is missing.
        """
        block = observation.bounding_box

        if self.policy == FilterPolicy.GUIDE_OVERLAP:
            if guide is None:
                raise ValueError("GUIDE_OVERLAP filter requires a guide region")
            inside = is_mostly_inside(block, guide.rect, self.min_overlap_ratio)
            if inside:
                logger.debug(f"Block INSIDE guide: '{observation.text}' at {block}")
            else:
                logger.debug(
                    f"Block OUTSIDE or intersecting weakly: '{observation.text}' at {block}"
                )
            return inside

        if image_height is None:
            raise ValueError("MIN_TEXT_HEIGHT filter requires the image height")
        tall_enough = meets_min_text_height(
            block, image_height, self.min_relative_text_height
        )
        if not tall_enough:
            logger.debug(f"Block below minimum text height: '{observation.text}'")
        return tall_enough

"""Candidate building and VIN search over multiple text blocks.

A single frame usually yields several recognized blocks. A VIN may appear
in one block (possibly behind a "VIN"/"CHASSIS" label) or be split across
two lines of a label. The search:

1. Drops blocks shorter than ``min_block_length`` after cleaning, strips a
   known label prefix and drops blocks outside the VIN alphabet
2. Sorts blocks top-to-bottom by vertical center
3. Single-line pass: validate each block
4. Two-line pass: concatenate ordered pairs (top + bottom) of exactly
   17 characters and validate them

The first outcome that is not INVALID wins; a structurally plausible VIN
with a failing check digit stops the search just like a valid one.

Example:
    >>> merger = CandidateMerger()
    >>> blocks = [("1M8GDM9A", Rect(left=0, top=0, right=80, bottom=10)),
    ...           ("XKP042788", Rect(left=0, top=12, right=90, bottom=22))]
    >>> merger.find_vin(blocks, verify_checksum=True).vin
    '1M8GDM9AXKP042788'
"""

import logging
from typing import List, Optional, Sequence, Tuple

from src.common.types import Rect

from .geometric_filter import GeometricFilter
from .normalizer import normalize_with_policy, strip_known_prefix
from .types import (
    Candidate,
    ConfusablePolicy,
    CoordinateSystem,
    GuideRegion,
    TextObservation,
    ValidationOutcome,
)
from .validator import VIN_LENGTH, is_vin_alphabet, validate

logger = logging.getLogger(__name__)


class CandidateMerger:
    """Finds the first valid VIN among the blocks of one frame.

    The merger is stateless between calls; the same input always yields the
    same outcome.

    Args:
        confusable_policy: O/I/Q handling during normalization.
        coordinate_system: Y-axis direction of the block rectangles.
        min_block_length: Minimum cleaned length for a block to be kept.
    """

    def __init__(
        self,
        confusable_policy: ConfusablePolicy = ConfusablePolicy.SUBSTITUTE,
        coordinate_system: CoordinateSystem = CoordinateSystem.Y_DOWN,
        min_block_length: int = 6,
    ):
        self.confusable_policy = confusable_policy
        self.coordinate_system = coordinate_system
        self.min_block_length = min_block_length

    @property
    def substitute_confusables(self) -> bool:
        return self.confusable_policy == ConfusablePolicy.SUBSTITUTE

    def build_candidates(
        self,
        blocks: Sequence[Tuple[str, Rect]],
    ) -> List[Candidate]:
        """Normalize, filter and order raw blocks.

        Args:
            blocks: (text, rect) pairs already accepted by the geometric filter.

        Returns:
            Candidates sorted top-to-bottom with ``vertical_order`` assigned,
            label prefixes already stripped.
        """
        kept: List[Tuple[str, Rect]] = []
        for text, rect in blocks:
            cleaned = normalize_with_policy(text, self.confusable_policy)

            if len(cleaned) < self.min_block_length:
                continue

            # Labels such as "VIN" contain I, so strip before the alphabet check
            cleaned = strip_known_prefix(cleaned)

            if not is_vin_alphabet(cleaned):
                logger.debug(f"Discarding block outside VIN alphabet: '{cleaned}'")
                continue

            kept.append((cleaned, rect))

        kept.sort(key=self._sort_key)

        return [
            Candidate(normalized_text=text, source_rect=rect, vertical_order=order)
            for order, (text, rect) in enumerate(kept)
        ]

    def _sort_key(self, block: Tuple[str, Rect]) -> Tuple[float, float, str]:
        """Top-to-bottom key; left edge and text break ties deterministically."""
        text, rect = block
        if self.coordinate_system == CoordinateSystem.Y_UP:
            return (-rect.center_y, rect.left, text)
        return (rect.center_y, rect.left, text)

    def find_in_candidates(
        self,
        candidates: Sequence[Candidate],
        verify_checksum: bool,
    ) -> ValidationOutcome:
        """Run the single-line then two-line search over ordered candidates.

        Args:
            candidates: Candidates in top-to-bottom order.
            verify_checksum: Require a passing ISO 3779 check digit.

        Returns:
            First non-INVALID outcome, or INVALID.
        """
        texts = [candidate.normalized_text for candidate in candidates]

        for text in texts:
            outcome = validate(
                text,
                verify_checksum,
                substitute_confusables=self.substitute_confusables,
            )
            if not outcome.is_invalid():
                logger.debug(f"Single-line match: {outcome.status.value} '{outcome.vin}'")
                return outcome

        for i in range(len(texts)):
            for j in range(i + 1, len(texts)):
                merged = texts[i] + texts[j]
                if len(merged) != VIN_LENGTH:
                    continue
                outcome = validate(
                    merged,
                    verify_checksum,
                    substitute_confusables=self.substitute_confusables,
                )
                if not outcome.is_invalid():
                    logger.debug(
                        f"Two-line match ({i}+{j}): {outcome.status.value} '{outcome.vin}'"
                    )
                    return outcome

        return ValidationOutcome.invalid()

    def find_vin(
        self,
        blocks: Sequence[Tuple[str, Rect]],
        verify_checksum: bool,
    ) -> ValidationOutcome:
        """Find the first valid VIN standalone or across two blocks.

        Args:
            blocks: (text, rect) pairs in any order.
            verify_checksum: Require a passing ISO 3779 check digit.

        Returns:
            ValidationOutcome for the first plausible candidate.
        """
        return self.find_in_candidates(self.build_candidates(blocks), verify_checksum)


class FrameAnalyzer:
    """Runs one frame's observations through filter and merger.

    Args:
        geometric_filter: Pre-filter deciding which blocks are considered.
        merger: Candidate merger for the entry point.
    """

    def __init__(self, geometric_filter: GeometricFilter, merger: CandidateMerger):
        self.geometric_filter = geometric_filter
        self.merger = merger

    def analyze(
        self,
        observations: Sequence[TextObservation],
        verify_checksum: bool,
        guide: Optional[GuideRegion] = None,
        image_height: Optional[float] = None,
    ) -> ValidationOutcome:
        """Analyze one frame.

        Args:
            observations: OCR observations of the frame (may be empty).
            verify_checksum: Require a passing ISO 3779 check digit.
            guide: Guide region for the GUIDE_OVERLAP filter.
            image_height: Image height for the MIN_TEXT_HEIGHT filter.

        Returns:
            ValidationOutcome of the frame.
        """
        ordered = sorted(observations, key=lambda obs: obs.timestamp_order)
        blocks = [
            (obs.text, obs.bounding_box)
            for obs in ordered
            if self.geometric_filter.accepts(obs, guide=guide, image_height=image_height)
        ]

        outcome = self.merger.find_vin(blocks, verify_checksum)
        if outcome.is_valid():
            logger.debug(f"Valid matched VIN: {outcome.vin}")
        return outcome


def find_vin(
    blocks: Sequence[Tuple[str, Rect]],
    verify_checksum: bool,
    confusable_policy: ConfusablePolicy = ConfusablePolicy.SUBSTITUTE,
    coordinate_system: CoordinateSystem = CoordinateSystem.Y_DOWN,
) -> ValidationOutcome:
    """Convenience wrapper around ``CandidateMerger.find_vin``."""
    merger = CandidateMerger(
        confusable_policy=confusable_policy,
        coordinate_system=coordinate_system,
    )
    return merger.find_vin(blocks, verify_checksum)

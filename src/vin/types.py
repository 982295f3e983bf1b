"""Type definitions for the VIN scan module.

This module defines the core data structures used throughout the VIN
pipeline: OCR observations, filtered candidates, validation outcomes, scan
results and the scan session state machine.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from src.common.types import Rect


class OutcomeStatus(Enum):
    """Validation outcome tag."""

    VALID = "valid"
    INVALID_CHECKSUM = "invalid_checksum"  # Structurally valid, ISO 3779 check failed
    INVALID = "invalid"


class ErrorKind(Enum):
    """Error taxonomy for the scan pipeline.

    None of these are raised across the pipeline boundary; they describe why
    a frame or session did not produce a VIN.
    """

    STRUCTURAL_MISMATCH = "structural_mismatch"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    TIMEOUT = "timeout"


class ScanSessionState(Enum):
    """Scan session lifecycle states."""

    IDLE = "idle"
    ALIGNING = "aligning"
    DETECTING = "detecting"
    MATCHED = "matched"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ScanSessionState.MATCHED,
            ScanSessionState.TIMED_OUT,
            ScanSessionState.CANCELLED,
        )


class ScanStatus(Enum):
    """User-facing status delivered to the status sink."""

    ALIGNING = "aligning"
    SCANNING = "scanning"
    PLAUSIBLE_UNVERIFIED = "plausible_unverified"
    MATCHED = "matched"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TextObservation:
    """A recognized text block produced by the OCR provider.

    Attributes:
        text: Raw recognized string.
        bounding_box: Block bounds in the provider's coordinate system.
        timestamp_order: Recognition order within the frame.
    """

    text: str
    bounding_box: Rect
    timestamp_order: int = 0


@dataclass(frozen=True)
class GuideRegion:
    """Rectangle the user aligns the VIN within. Constant for a session."""

    rect: Rect


@dataclass(frozen=True)
class Candidate:
    """A filtered, normalized block ready for merging.

    Attributes:
        normalized_text: Cleaned text, VIN alphabet only.
        source_rect: Bounding box of the originating observation.
        vertical_order: Position in the top-to-bottom ordering (0 = top).
    """

    normalized_text: str
    source_rect: Rect
    vertical_order: int


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a candidate string.

    Attributes:
        status: VALID, INVALID_CHECKSUM or INVALID.
        vin: Canonical 17-character VIN when VALID, the checked text when
            INVALID_CHECKSUM, None when INVALID.
    """

    status: OutcomeStatus
    vin: Optional[str] = None

    @classmethod
    def valid(cls, vin: str) -> "ValidationOutcome":
        return cls(status=OutcomeStatus.VALID, vin=vin)

    @classmethod
    def invalid_checksum(cls, text: str) -> "ValidationOutcome":
        return cls(status=OutcomeStatus.INVALID_CHECKSUM, vin=text)

    @classmethod
    def invalid(cls) -> "ValidationOutcome":
        return cls(status=OutcomeStatus.INVALID)

    def is_valid(self) -> bool:
        """Check if outcome is VALID."""
        return self.status == OutcomeStatus.VALID

    def is_invalid(self) -> bool:
        """Check if outcome is INVALID (neither valid nor a checksum miss)."""
        return self.status == OutcomeStatus.INVALID

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        """Map the outcome onto the error taxonomy (None when VALID)."""
        if self.status == OutcomeStatus.INVALID_CHECKSUM:
            return ErrorKind.CHECKSUM_MISMATCH
        if self.status == OutcomeStatus.INVALID:
            return ErrorKind.STRUCTURAL_MISMATCH
        return None


@dataclass(frozen=True)
class ScanResult:
    """Terminal artifact of a successful scan session."""

    vin: str
    captured_at: datetime


@dataclass(frozen=True)
class StatusUpdate:
    """Notification delivered to the status sink.

    Attributes:
        status: Current user-facing status.
        vin: Matched VIN for MATCHED, None otherwise.
    """

    status: ScanStatus
    vin: Optional[str] = None


class ConfusablePolicy(Enum):
    """How OCR-confusable letters (O, I, Q) are handled before validation."""

    SUBSTITUTE = "substitute"  # O->0, I->1, Q->0 (live camera path)
    REJECT = "reject"  # leave as-is, the structural alphabet rejects them


class FilterPolicy(Enum):
    """Which pre-filter decides whether a recognized block is considered."""

    GUIDE_OVERLAP = "guide_overlap"  # block must sit mostly inside the guide
    MIN_TEXT_HEIGHT = "min_text_height"  # block must be tall enough (still image)


class CoordinateSystem(Enum):
    """Vertical axis direction of the producing subsystem."""

    Y_DOWN = "y_down"  # screen/image space, top-to-bottom = ascending Y
    Y_UP = "y_up"  # normalized Vision-style space, top-to-bottom = descending Y

"""Unit tests for VIN type definitions."""

from datetime import datetime

import pytest

from src.common.types import Rect
from src.vin.types import (
    Candidate,
    ErrorKind,
    OutcomeStatus,
    ScanResult,
    ScanSessionState,
    ScanStatus,
    StatusUpdate,
    TextObservation,
    ValidationOutcome,
)


class TestValidationOutcome:
    """Test ValidationOutcome constructors and helpers."""

    def test_valid(self):
        outcome = ValidationOutcome.valid("1M8GDM9AXKP042788")

        assert outcome.status == OutcomeStatus.VALID
        assert outcome.is_valid() is True
        assert outcome.is_invalid() is False
        assert outcome.error_kind is None

    def test_invalid_checksum_keeps_text(self):
        outcome = ValidationOutcome.invalid_checksum("1M8GDM9A1KP042788")

        assert outcome.vin == "1M8GDM9A1KP042788"
        assert outcome.is_valid() is False
        assert outcome.is_invalid() is False
        assert outcome.error_kind == ErrorKind.CHECKSUM_MISMATCH

    def test_invalid(self):
        outcome = ValidationOutcome.invalid()

        assert outcome.vin is None
        assert outcome.is_invalid() is True
        assert outcome.error_kind == ErrorKind.STRUCTURAL_MISMATCH

    def test_value_equality(self):
        """Test outcomes compare by value."""
        assert ValidationOutcome.valid("11111111111111111") == ValidationOutcome.valid(
            "11111111111111111"
        )


class TestScanSessionState:
    """Test ScanSessionState enum."""

    @pytest.mark.parametrize(
        "state",
        [ScanSessionState.MATCHED, ScanSessionState.TIMED_OUT, ScanSessionState.CANCELLED],
    )
    def test_terminal_states(self, state):
        assert state.is_terminal is True

    @pytest.mark.parametrize(
        "state",
        [ScanSessionState.IDLE, ScanSessionState.ALIGNING, ScanSessionState.DETECTING],
    )
    def test_active_states(self, state):
        assert state.is_terminal is False


class TestDataclasses:
    """Test frozen data containers."""

    def test_observation_defaults(self):
        """Test timestamp_order defaults to 0."""
        obs = TextObservation(text="VIN", bounding_box=Rect(left=0, top=0, right=1, bottom=1))
        assert obs.timestamp_order == 0

    def test_observation_frozen(self):
        """Test observations cannot be mutated."""
        obs = TextObservation(text="VIN", bounding_box=Rect(left=0, top=0, right=1, bottom=1))
        with pytest.raises(AttributeError):
            obs.text = "CHASSIS"

    def test_candidate_fields(self):
        rect = Rect(left=0, top=0, right=10, bottom=2)
        candidate = Candidate(normalized_text="1M8GDM9A", source_rect=rect, vertical_order=0)

        assert candidate.source_rect is rect

    def test_scan_result(self):
        captured = datetime(2026, 3, 1, 8, 0, 0)
        result = ScanResult(vin="1M8GDM9AXKP042788", captured_at=captured)

        assert result.captured_at == captured

    def test_status_update_default_vin(self):
        assert StatusUpdate(ScanStatus.SCANNING).vin is None

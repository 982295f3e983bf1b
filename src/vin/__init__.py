"""VIN Extraction & Validation.

This module turns noisy per-frame OCR output into a single confirmed
17-character Vehicle Identification Number (ISO 3779).

Core Components:
    - types: Data structures (TextObservation, ValidationOutcome, ScanResult, etc.)
    - config_loader: Configuration loading with Pydantic validation
    - normalizer: Text cleaning and label prefix stripping
    - validator: Structure and ISO 3779 check digit validation
    - geometric_filter: Guide-rectangle and text-height block filters
    - merger: Single-line and two-line candidate search
    - session: Frame-throttled scan session state machine
    - provider: OCR provider interface and RapidOCR adapter
    - processor: Entry point for camera sessions and still images

Example:
    >>> from src.vin import VINProcessor
    >>> processor = VINProcessor()
    >>> session = processor.create_session(guide, on_result=print)
    >>> session.start()
"""

from .config_loader import (
    Config,
    FilterConfig,
    GuideConfig,
    MergerConfig,
    NormalizationConfig,
    ProviderConfig,
    SessionConfig,
    VINModuleConfig,
    get_default_config,
    load_config,
)
from .geometric_filter import (
    GeometricFilter,
    guide_region_for_frame,
    is_mostly_inside,
    meets_min_text_height,
)
from .merger import CandidateMerger, FrameAnalyzer, find_vin
from .normalizer import normalize, strip_known_prefix
from .processor import VINProcessor
from .provider import OCRProvider, RapidOCRProvider
from .session import ScanSession
from .types import (
    Candidate,
    ConfusablePolicy,
    CoordinateSystem,
    ErrorKind,
    FilterPolicy,
    GuideRegion,
    OutcomeStatus,
    ScanResult,
    ScanSessionState,
    ScanStatus,
    StatusUpdate,
    TextObservation,
    ValidationOutcome,
)
from .validator import (
    calculate_check_digit,
    is_valid_structure,
    validate,
    validate_checksum,
)

__all__ = [
    # Types
    "Candidate",
    "ConfusablePolicy",
    "CoordinateSystem",
    "ErrorKind",
    "FilterPolicy",
    "GuideRegion",
    "OutcomeStatus",
    "ScanResult",
    "ScanSessionState",
    "ScanStatus",
    "StatusUpdate",
    "TextObservation",
    "ValidationOutcome",
    # Configuration
    "Config",
    "VINModuleConfig",
    "NormalizationConfig",
    "FilterConfig",
    "GuideConfig",
    "MergerConfig",
    "SessionConfig",
    "ProviderConfig",
    "load_config",
    "get_default_config",
    # Normalization & validation
    "normalize",
    "strip_known_prefix",
    "is_valid_structure",
    "calculate_check_digit",
    "validate_checksum",
    "validate",
    # Filtering & merging
    "is_mostly_inside",
    "meets_min_text_height",
    "guide_region_for_frame",
    "GeometricFilter",
    "CandidateMerger",
    "FrameAnalyzer",
    "find_vin",
    # Session & entry points
    "ScanSession",
    "OCRProvider",
    "RapidOCRProvider",
    "VINProcessor",
]

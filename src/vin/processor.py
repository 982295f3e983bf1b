"""Main VIN processor tying configuration, OCR provider and pipeline together.

Two entry points share one core:

    1. LIVE CAMERA: ``create_session`` builds a ScanSession whose frames are
       filtered against the guide rectangle, with O/I/Q substitution.
    2. STILL IMAGE: ``scan_image`` recognizes one already-cropped image,
       filters blocks by minimum text height and rejects O/I/Q outright.

Each entry point's normalization, filter and coordinate convention come from
named configuration settings rather than separate code paths.

Example:
    >>> processor = VINProcessor()
    >>> outcome = processor.scan_image(cv2.imread("vin_label.jpg"))
    >>> if outcome.is_valid():
    ...     print(f"VIN: {outcome.vin}")
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np

from .config_loader import Config, get_default_config, load_config
from .geometric_filter import GeometricFilter, guide_region_for_frame
from .merger import CandidateMerger, FrameAnalyzer
from .provider import OCRProvider, RapidOCRProvider
from .session import ResultSink, ScanSession, StatusSink, TimerFactory
from .types import GuideRegion, TextObservation, ValidationOutcome

logger = logging.getLogger(__name__)


class VINProcessor:
    """Entry point for VIN extraction from camera frames and still images.

    Args:
        config_path: Optional path to config YAML file. If None, uses default config.
        provider: Optional OCR provider. If None, a RapidOCRProvider is created.

    Attributes:
        config: Full configuration object
        provider: OCR provider
        camera_analyzer: Filter + merger for live camera frames
        still_image_analyzer: Filter + merger for still images
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        provider: Optional[OCRProvider] = None,
    ):
        if config_path is None:
            self.config: Config = get_default_config()
        else:
            self.config: Config = load_config(config_path)

        vin_config = self.config.vin

        if provider is not None:
            self.provider = provider
        elif vin_config.provider.type.lower() == "rapidocr":
            self.provider = RapidOCRProvider(config=vin_config.provider)
        else:
            logger.warning(
                f"Unknown provider type '{vin_config.provider.type}', defaulting to RapidOCR"
            )
            self.provider = RapidOCRProvider(config=vin_config.provider)

        self.camera_analyzer = FrameAnalyzer(
            geometric_filter=GeometricFilter(
                policy=vin_config.filter.camera_policy,
                min_overlap_ratio=vin_config.filter.min_overlap_ratio,
                min_relative_text_height=vin_config.filter.min_relative_text_height,
            ),
            merger=CandidateMerger(
                confusable_policy=vin_config.normalization.camera_confusable_policy,
                coordinate_system=vin_config.merger.camera_coordinate_system,
                min_block_length=vin_config.merger.min_block_length,
            ),
        )
        self.still_image_analyzer = FrameAnalyzer(
            geometric_filter=GeometricFilter(
                policy=vin_config.filter.still_image_policy,
                min_overlap_ratio=vin_config.filter.min_overlap_ratio,
                min_relative_text_height=vin_config.filter.min_relative_text_height,
            ),
            merger=CandidateMerger(
                confusable_policy=vin_config.normalization.still_image_confusable_policy,
                coordinate_system=vin_config.merger.still_image_coordinate_system,
                min_block_length=vin_config.merger.min_block_length,
            ),
        )

        logger.info(
            f"VINProcessor initialized: "
            f"camera={vin_config.filter.camera_policy.value}/"
            f"{vin_config.normalization.camera_confusable_policy.value}, "
            f"still_image={vin_config.filter.still_image_policy.value}/"
            f"{vin_config.normalization.still_image_confusable_policy.value}"
        )

    def guide_for_frame(
        self, frame_width: float, frame_height: float, rotation_degrees: int = 0
    ) -> GuideRegion:
        """Build the configured guide region for a frame size."""
        guide = self.config.vin.guide
        return guide_region_for_frame(
            frame_width,
            frame_height,
            rotation_degrees=rotation_degrees,
            width_fraction=guide.width_fraction,
            height_fraction=guide.height_fraction,
        )

    def analyze_observations(
        self,
        observations: Sequence[TextObservation],
        guide: Optional[GuideRegion] = None,
        image_height: Optional[float] = None,
        verify_checksum: Optional[bool] = None,
    ) -> ValidationOutcome:
        """Analyze already-recognized observations without a session.

        With a guide the camera policies apply; otherwise the still-image
        policies apply and ``image_height`` is required.

        Args:
            observations: OCR observations of one frame.
            guide: Guide region (camera path).
            image_height: Image height (still-image path).
            verify_checksum: Overrides the configured checksum policy.

        Returns:
            ValidationOutcome of the frame.

        Raises:
            ValueError: If neither ``guide`` nor ``image_height`` is given.
        """
        if guide is None and image_height is None:
            raise ValueError("Either a guide region or the image height is required")

        if verify_checksum is None:
            verify_checksum = self.config.vin.session.verify_checksum

        if guide is not None:
            return self.camera_analyzer.analyze(
                observations, verify_checksum, guide=guide
            )
        return self.still_image_analyzer.analyze(
            observations, verify_checksum, image_height=image_height
        )

    def scan_image(
        self, image: np.ndarray, verify_checksum: Optional[bool] = None
    ) -> ValidationOutcome:
        """Scan a single still image (preferably cropped to the VIN area).

        Recognition failures yield INVALID rather than raising.

        Args:
            image: BGR or grayscale image.
            verify_checksum: Overrides the configured checksum policy.

        Returns:
            ValidationOutcome for the image.
        """
        if image is None or image.size == 0:
            logger.error("Invalid image: empty or None")
            return ValidationOutcome.invalid()

        if image.ndim == 3 and image.shape[2] == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image

        try:
            observations = self.provider.recognize(gray)
        except Exception as e:
            logger.warning(f"Text recognition failed: {e}")
            return ValidationOutcome.invalid()

        outcome = self.analyze_observations(
            observations,
            image_height=float(gray.shape[0]),
            verify_checksum=verify_checksum,
        )
        logger.info(
            f"Still image scan: {outcome.status.value} "
            f"({len(observations)} blocks recognized)"
        )
        return outcome

    def scan_image_file(
        self, image_path: Path, verify_checksum: Optional[bool] = None
    ) -> ValidationOutcome:
        """Load an image from disk and scan it.

        Raises:
            FileNotFoundError: If the image cannot be read.
        """
        image = cv2.imread(str(image_path))
        if image is None:
            raise FileNotFoundError(f"Image not found or unreadable: {image_path}")
        return self.scan_image(image, verify_checksum=verify_checksum)

    def create_session(
        self,
        guide: GuideRegion,
        on_result: ResultSink,
        on_status: Optional[StatusSink] = None,
        verify_checksum: Optional[bool] = None,
        timer_factory: Optional[TimerFactory] = None,
    ) -> ScanSession:
        """Create a live camera scan session (not yet started).

        Args:
            guide: Guide region for the session.
            on_result: Receives the ScanResult on match.
            on_status: Optional status sink.
            verify_checksum: Overrides the configured checksum policy.
            timer_factory: Optional timer factory (defaults to threading.Timer).

        Returns:
            ScanSession in IDLE state.
        """
        kwargs = {}
        if timer_factory is not None:
            kwargs["timer_factory"] = timer_factory

        return ScanSession(
            guide=guide,
            analyzer=self.camera_analyzer,
            on_result=on_result,
            on_status=on_status,
            config=self.config.vin.session,
            verify_checksum=verify_checksum,
            **kwargs,
        )

    def get_processing_stats(self) -> dict:
        """Get processor configuration summary.

        Returns:
            Dictionary with the active policies and session timing
        """
        vin_config = self.config.vin
        return {
            "provider_type": vin_config.provider.type,
            "verify_checksum": vin_config.session.verify_checksum,
            "frame_stride": vin_config.session.frame_stride,
            "alignment_delay_s": vin_config.session.alignment_delay_s,
            "timeout_s": vin_config.session.timeout_s,
            "camera": {
                "filter": vin_config.filter.camera_policy.value,
                "confusables": vin_config.normalization.camera_confusable_policy.value,
            },
            "still_image": {
                "filter": vin_config.filter.still_image_policy.value,
                "confusables": vin_config.normalization.still_image_confusable_policy.value,
            },
        }

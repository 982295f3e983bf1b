"""OCR provider interface and RapidOCR adapter.

The scan core never looks inside the OCR model. It only needs, per frame, a
list of recognized blocks with their bounding boxes. ``OCRProvider`` is that
boundary; ``RapidOCRProvider`` implements it on top of RapidOCR (PaddleOCR
ONNX backend).

Example:
    >>> from src.vin.config_loader import ProviderConfig
    >>> provider = RapidOCRProvider(ProviderConfig())
    >>> observations = provider.recognize(cv2.imread("vin_plate.jpg"))
    >>> for obs in observations:
    ...     print(obs.text, obs.bounding_box)
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from src.common.types import Rect

from .config_loader import ProviderConfig
from .types import TextObservation

logger = logging.getLogger(__name__)


class OCRProvider(ABC):
    """Recognizes text blocks in a frame.

    Implementations may be slow, but must return a (possibly empty) list or
    raise; callers treat an exception as an empty frame.
    """

    @abstractmethod
    def recognize(self, frame: np.ndarray) -> List[TextObservation]:
        """Recognize text blocks in a frame.

        Args:
            frame: Image as numpy array (H, W) or (H, W, C).

        Returns:
            Observations in recognition order.
        """


class RapidOCRProvider(OCRProvider):
    """RapidOCR-backed provider.

    Args:
        config: Provider configuration.

    Attributes:
        config: Provider configuration instance.
        engine: RapidOCR engine instance (lazy-loaded).
    """

    def __init__(self, config: Optional[ProviderConfig] = None):
        """Initialize provider wrapper.

        Note:
            The actual RapidOCR engine is lazy-loaded on first use to
            avoid initialization overhead if not needed.
        """
        self.config = config or ProviderConfig()
        self._engine: Optional[object] = None

        logger.info(
            f"RapidOCRProvider initialized: "
            f"text_score={self.config.text_score}, "
            f"use_angle_cls={self.config.use_angle_cls}"
        )

    @property
    def engine(self):
        """Lazy-load RapidOCR engine on first access.

        Raises:
            ImportError: If rapidocr_onnxruntime is not installed.
            RuntimeError: If engine initialization fails.
        """
        if self._engine is None:
            try:
                from rapidocr_onnxruntime import RapidOCR

                self._engine = RapidOCR(
                    use_angle_cls=self.config.use_angle_cls,
                    text_score=self.config.text_score,
                    det_db_box_thresh=self.config.det_db_box_thresh,
                    det_db_thresh=self.config.det_db_thresh,
                    det_limit_side_len=self.config.det_limit_side_len,
                )
                logger.info("RapidOCR engine loaded")

            except ImportError as e:
                logger.error(
                    "Failed to import rapidocr_onnxruntime. "
                    "Install with: pip install rapidocr-onnxruntime"
                )
                raise ImportError(
                    "rapidocr-onnxruntime not installed. "
                    "Run: pip install rapidocr-onnxruntime"
                ) from e

            except Exception as e:
                logger.error(f"Failed to initialize RapidOCR engine: {e}")
                raise RuntimeError(f"RapidOCR initialization failed: {e}") from e

        return self._engine

    def recognize(self, frame: np.ndarray) -> List[TextObservation]:
        """Run RapidOCR and convert detections into observations.

        RapidOCR returns ``(results, timings)`` where each result is
        ``[box, text, score]`` and ``box`` holds four corner points.

        Args:
            frame: Image as numpy array.

        Returns:
            Observations with axis-aligned bounding boxes in pixel space.

        Raises:
            ValueError: If the frame is empty.
        """
        if frame is None or frame.size == 0:
            raise ValueError("Invalid frame: empty or None")

        result = self.engine(frame)
        results_list = result[0] if isinstance(result, tuple) else result

        if not results_list:
            logger.debug("RapidOCR returned no text detections")
            return []

        return self.parse_results(results_list)

    def parse_results(self, results_list: list) -> List[TextObservation]:
        """Convert raw ``[box, text, score]`` entries into observations.

        Entries below ``text_score`` or with malformed boxes are skipped.
        """
        observations: List[TextObservation] = []

        for item in results_list:
            box, text, score = item[0], str(item[1]), float(item[2])

            if score < self.config.text_score:
                logger.debug(f"Skipping low-score detection '{text}' ({score:.2f})")
                continue

            try:
                rect = Rect.from_points(box)
            except ValueError:
                logger.warning(f"Unexpected bbox format: {box}")
                continue

            observations.append(
                TextObservation(
                    text=text,
                    bounding_box=rect,
                    timestamp_order=len(observations),
                )
            )

        logger.debug(f"Recognized {len(observations)} text blocks")
        return observations

"""Configuration loader with Pydantic validation for the VIN scan module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values. The two entry points
(live camera frames and still images) historically used different cleaning
and filtering policies; both are expressed here as named settings.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .types import ConfusablePolicy, CoordinateSystem, FilterPolicy


class NormalizationConfig(BaseModel):
    """Text normalization configuration.

    Attributes:
        camera_confusable_policy: O/I/Q handling for live camera frames
        still_image_confusable_policy: O/I/Q handling for still images
    """

    camera_confusable_policy: ConfusablePolicy = ConfusablePolicy.SUBSTITUTE
    still_image_confusable_policy: ConfusablePolicy = ConfusablePolicy.REJECT


class FilterConfig(BaseModel):
    """Block filtering configuration.

    Attributes:
        camera_policy: Pre-filter used for live camera frames
        still_image_policy: Pre-filter used for still images
        min_overlap_ratio: Fraction of the block's width and height that must
            fall inside the guide rectangle (strictly greater than)
        min_relative_text_height: Minimum block height relative to the image
            height for the still-image filter
    """

    camera_policy: FilterPolicy = FilterPolicy.GUIDE_OVERLAP
    still_image_policy: FilterPolicy = FilterPolicy.MIN_TEXT_HEIGHT
    min_overlap_ratio: float = Field(default=0.6, ge=0.0, le=1.0)
    min_relative_text_height: float = Field(default=0.015, ge=0.0, le=1.0)


class GuideConfig(BaseModel):
    """Guide rectangle geometry, as fractions of the (rotated) frame.

    Attributes:
        width_fraction: Guide width relative to the frame width
        height_fraction: Guide height relative to the frame height
    """

    width_fraction: float = Field(default=0.85, gt=0.0, le=1.0)
    height_fraction: float = Field(default=0.12, gt=0.0, le=1.0)


class MergerConfig(BaseModel):
    """Candidate merging configuration.

    Attributes:
        min_block_length: Blocks shorter than this after cleaning are dropped
        camera_coordinate_system: Y-axis direction of camera observations
        still_image_coordinate_system: Y-axis direction of still-image observations
    """

    min_block_length: int = Field(default=6, ge=1)
    camera_coordinate_system: CoordinateSystem = CoordinateSystem.Y_DOWN
    still_image_coordinate_system: CoordinateSystem = CoordinateSystem.Y_DOWN


class SessionConfig(BaseModel):
    """Scan session timing configuration.

    Attributes:
        alignment_delay_s: Grace period before frames are analysed
        timeout_s: Session-wide budget before TIMED_OUT
        frame_stride: Analyse only every Nth frame
        verify_checksum: Require a passing ISO 3779 check digit
    """

    alignment_delay_s: float = Field(default=2.5, ge=0.0)
    timeout_s: float = Field(default=60.0, gt=0.0)
    frame_stride: int = Field(default=6, ge=1)
    verify_checksum: bool = False


class ProviderConfig(BaseModel):
    """OCR provider configuration.

    Attributes:
        type: Provider type (currently only "rapidocr" supported)
        use_angle_cls: Enable angle classification for rotated text
        text_score: Minimum text recognition confidence (0.0-1.0)
        det_db_box_thresh: Detection box filtering threshold (0.0-1.0)
        det_db_thresh: Detection threshold (0.0-1.0)
        det_limit_side_len: Maximum side length for detection image
    """

    type: str = "rapidocr"
    use_angle_cls: bool = True
    text_score: float = Field(default=0.5, ge=0.0, le=1.0)
    det_db_box_thresh: float = Field(default=0.5, ge=0.0, le=1.0)
    det_db_thresh: float = Field(default=0.3, ge=0.0, le=1.0)
    det_limit_side_len: int = Field(default=960, gt=0)


class VINModuleConfig(BaseModel):
    """Complete VIN scan module configuration.

    Attributes:
        normalization: Confusable-character policies per entry point
        filter: Block pre-filter policies and thresholds
        guide: Guide rectangle geometry
        merger: Candidate merging settings
        session: Scan session timing
        provider: OCR provider settings
    """

    normalization: NormalizationConfig = NormalizationConfig()
    filter: FilterConfig = FilterConfig()
    guide: GuideConfig = GuideConfig()
    merger: MergerConfig = MergerConfig()
    session: SessionConfig = SessionConfig()
    provider: ProviderConfig = ProviderConfig()


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        vin: VIN scan module configuration
    """

    vin: VINModuleConfig = VINModuleConfig()


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from YAML file.

    The file may either be flat (sections at the top level) or wrapped in a
    ``vin:`` key.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated Config object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/vin/config.yaml"))
        >>> print(config.vin.session.frame_stride)
        6
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    if "vin" in config_dict:
        return Config(**config_dict)

    return Config(vin=VINModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/vin/config.yaml

    Example:
        >>> config = get_default_config()
        >>> print(config.vin.filter.min_overlap_ratio)
        0.6
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        # Fallback to hardcoded defaults if config file is missing
        return Config()

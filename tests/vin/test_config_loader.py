"""Unit tests for VIN configuration loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.vin.config_loader import (
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
from src.vin.types import ConfusablePolicy, CoordinateSystem, FilterPolicy


class TestNormalizationConfig:
    """Test NormalizationConfig model."""

    def test_default_values(self):
        """Test camera substitutes and still images reject confusables."""
        config = NormalizationConfig()
        assert config.camera_confusable_policy == ConfusablePolicy.SUBSTITUTE
        assert config.still_image_confusable_policy == ConfusablePolicy.REJECT

    def test_policy_from_string(self):
        """Test enum values are parsed from strings."""
        config = NormalizationConfig(still_image_confusable_policy="substitute")
        assert config.still_image_confusable_policy == ConfusablePolicy.SUBSTITUTE

    def test_unknown_policy(self):
        """Test unknown policy names are rejected."""
        with pytest.raises(ValidationError):
            NormalizationConfig(camera_confusable_policy="guess")


class TestFilterConfig:
    """Test FilterConfig model with validation."""

    def test_default_values(self):
        """Test default filter thresholds."""
        config = FilterConfig()
        assert config.camera_policy == FilterPolicy.GUIDE_OVERLAP
        assert config.still_image_policy == FilterPolicy.MIN_TEXT_HEIGHT
        assert config.min_overlap_ratio == 0.6
        assert config.min_relative_text_height == 0.015

    def test_ratio_out_of_range(self):
        """Test ratios outside 0-1 are rejected."""
        with pytest.raises(ValidationError):
            FilterConfig(min_overlap_ratio=1.5)

        with pytest.raises(ValidationError):
            FilterConfig(min_relative_text_height=-0.1)


class TestGuideConfig:
    """Test GuideConfig model."""

    def test_default_values(self):
        config = GuideConfig()
        assert config.width_fraction == 0.85
        assert config.height_fraction == 0.12

    def test_zero_fraction_rejected(self):
        with pytest.raises(ValidationError):
            GuideConfig(width_fraction=0.0)


class TestMergerConfig:
    """Test MergerConfig model."""

    def test_default_values(self):
        config = MergerConfig()
        assert config.min_block_length == 6
        assert config.camera_coordinate_system == CoordinateSystem.Y_DOWN
        assert config.still_image_coordinate_system == CoordinateSystem.Y_DOWN

    def test_min_block_length_positive(self):
        with pytest.raises(ValidationError):
            MergerConfig(min_block_length=0)


class TestSessionConfig:
    """Test SessionConfig model with validation."""

    def test_default_values(self):
        """Test default session timing."""
        config = SessionConfig()
        assert config.alignment_delay_s == 2.5
        assert config.timeout_s == 60.0
        assert config.frame_stride == 6
        assert config.verify_checksum is False

    def test_invalid_stride(self):
        """Test frame stride must be at least 1."""
        with pytest.raises(ValidationError):
            SessionConfig(frame_stride=0)

    def test_invalid_timeout(self):
        """Test timeout must be positive."""
        with pytest.raises(ValidationError):
            SessionConfig(timeout_s=0)


class TestProviderConfig:
    """Test ProviderConfig model."""

    def test_default_values(self):
        config = ProviderConfig()
        assert config.type == "rapidocr"
        assert config.use_angle_cls is True
        assert config.text_score == 0.5
        assert config.det_limit_side_len == 960


class TestVINModuleConfig:
    """Test complete module configuration."""

    def test_default_sections(self):
        """Test every section is populated by default."""
        config = VINModuleConfig()
        assert isinstance(config.normalization, NormalizationConfig)
        assert isinstance(config.filter, FilterConfig)
        assert isinstance(config.guide, GuideConfig)
        assert isinstance(config.merger, MergerConfig)
        assert isinstance(config.session, SessionConfig)
        assert isinstance(config.provider, ProviderConfig)


class TestLoadConfig:
    """Test loading configuration from YAML files."""

    def test_load_flat_config(self, tmp_path):
        """Test loading sections at the top level."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.safe_dump(
                {
                    "session": {"frame_stride": 3, "verify_checksum": True},
                    "filter": {"min_overlap_ratio": 0.7},
                }
            )
        )

        config = load_config(config_file)

        assert config.vin.session.frame_stride == 3
        assert config.vin.session.verify_checksum is True
        assert config.vin.filter.min_overlap_ratio == 0.7
        # Untouched sections keep defaults
        assert config.vin.session.timeout_s == 60.0
        assert config.vin.guide.width_fraction == 0.85

    def test_load_wrapped_config(self, tmp_path):
        """Test loading sections under a 'vin' key."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
vin:
  normalization:
    camera_confusable_policy: reject
  merger:
    camera_coordinate_system: y_up
"""
        )

        config = load_config(config_file)

        assert config.vin.normalization.camera_confusable_policy == ConfusablePolicy.REJECT
        assert config.vin.merger.camera_coordinate_system == CoordinateSystem.Y_UP

    def test_load_empty_file(self, tmp_path):
        """Test an empty file yields defaults."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_config(config_file) == Config()

    def test_missing_file(self, tmp_path):
        """Test loading a nonexistent file raises."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_values(self, tmp_path):
        """Test invalid values fail validation."""
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("session:\n  frame_stride: 0\n")

        with pytest.raises(ValidationError):
            load_config(config_file)

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises a parser error."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("session: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_config(config_file)


class TestGetDefaultConfig:
    """Test bundled default configuration."""

    def test_bundled_file_exists(self):
        """Test config.yaml ships next to the loader."""
        import src.vin.config_loader as config_loader

        assert (Path(config_loader.__file__).parent / "config.yaml").exists()

    def test_matches_model_defaults(self):
        """Test the bundled file mirrors the model defaults."""
        assert get_default_config() == Config()

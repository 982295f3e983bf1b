"""
Common types and utilities shared across all modules.

This module provides standardized data types for the VIN scan pipeline,
ensuring consistency between OCR providers, filters and the scan session.
"""

from src.common.types import Rect

__all__ = ["Rect"]

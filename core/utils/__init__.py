"""Utilities package for ChatDesk."""

from core.utils.artifacts import (
    ExtractionResult,
    extract_artifacts,
    message_artifacts,
    wrap_artifact,
)
from core.utils.media import classify_media_type, is_image

__all__ = [
    "ExtractionResult",
    "extract_artifacts",
    "message_artifacts",
    "wrap_artifact",
    "classify_media_type",
    "is_image",
]

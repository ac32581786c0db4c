"""Settings subsystem."""

from .model_settings import AVAILABLE_MODELS, ModelSettings

__all__ = ["AVAILABLE_MODELS", "ModelSettings"]

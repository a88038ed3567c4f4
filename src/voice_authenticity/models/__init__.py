"""Classifier loading and the process-wide model registry."""

from voice_authenticity.models.registry import ModelRegistry, SpoofingConfig
from voice_authenticity.models.torchscript_model import LoadedModel, load_torchscript_model

__all__ = ["ModelRegistry", "SpoofingConfig", "LoadedModel", "load_torchscript_model"]

"""Model registry: language (required), accent and spoofing (optional) classifiers plus metadata.

One registry is built per process and passed to consumers. load() is
idempotent; unload() disposes every model explicitly.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from voice_authenticity.audio.config import FeatureConfig
from voice_authenticity.errors import ResourceLoadError
from voice_authenticity.models.torchscript_model import load_torchscript_model
from voice_authenticity.settings import get_settings

logger = logging.getLogger(__name__)

LANGUAGE = "language"
ACCENT = "accent"
SPOOFING = "spoofing"
MODEL_NAMES = (LANGUAGE, ACCENT, SPOOFING)
OPTIONAL_MODELS = (ACCENT, SPOOFING)

MODEL_PATHS = {
    LANGUAGE: "language/model.pt",
    ACCENT: "accent/model.pt",
    SPOOFING: "spoofing/model.pt",
}
LANGUAGE_LABELS_PATH = "language/labels.json"
SPOOFING_CONFIG_PATH = "spoofing/config.json"

DEFAULT_LANGUAGE_LABELS = ["Español", "Inglés", "Francés", "Alemán"]


@dataclass
class SpoofingConfig:
    """Decision threshold and class labels for the spoofing classifier."""

    threshold: float = 0.5
    labels: List[str] = field(default_factory=lambda: ["human", "spoof"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpoofingConfig":
        default = cls()
        threshold = float(data.get("threshold", default.threshold))
        labels = data.get("labels", default.labels)
        if not isinstance(labels, list) or not all(isinstance(x, str) for x in labels):
            raise ValueError(f"labels must be a list of strings, got {labels!r}")
        return cls(threshold=threshold, labels=list(labels))


# (path, device, input_shape, name) -> object with predict(features) and dispose()
ModelLoader = Callable[..., Any]


class ModelRegistry:
    """Holds the classifiers and their label metadata for the process lifetime.

    Usage:
        registry = ModelRegistry().load()  # VOICE_MODELS_DIR, VOICE_DEVICE
        language = registry.get("language")
        ...
        registry.unload()
    """

    def __init__(
        self,
        models_dir: Optional[str | Path] = None,
        config: Optional[FeatureConfig] = None,
        device: Optional[str] = None,
        loader: Optional[ModelLoader] = None,
    ):
        settings = get_settings()
        self.models_dir = Path(models_dir if models_dir is not None else settings.MODELS_DIR)
        self.config = config or FeatureConfig()
        self.device = device or settings.DEVICE
        self.loader = loader or load_torchscript_model
        self._models: Dict[str, Any] = {}
        self._labels: Optional[List[str]] = None
        self._spoof_config: Optional[SpoofingConfig] = None
        self._loaded = False
        self._lock = threading.Lock()

    def __enter__(self) -> "ModelRegistry":
        return self.load()

    def __exit__(self, *exc_info: object) -> None:
        self.unload()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def labels(self) -> Optional[List[str]]:
        """Language labels, ordered as the language model's outputs."""
        return self._labels

    @property
    def spoof_config(self) -> Optional[SpoofingConfig]:
        return self._spoof_config

    def available(self) -> List[str]:
        """Names of the models currently loaded."""
        return [name for name in MODEL_NAMES if self._models.get(name) is not None]

    def get(self, name: str) -> Optional[Any]:
        """Loaded model by name, or None if it is unavailable."""
        if name not in MODEL_NAMES:
            raise KeyError(f"Unknown model '{name}', expected one of {MODEL_NAMES}")
        return self._models.get(name)

    def _load_json(self, relative: str) -> Optional[Any]:
        path = self.models_dir / relative
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _load_labels(self) -> List[str]:
        try:
            data = self._load_json(LANGUAGE_LABELS_PATH)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read language labels (%s), using defaults", exc)
            return list(DEFAULT_LANGUAGE_LABELS)
        if data is None:
            logger.warning("Language labels not found, using defaults")
            return list(DEFAULT_LANGUAGE_LABELS)
        if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
            logger.warning("Language labels malformed, using defaults")
            return list(DEFAULT_LANGUAGE_LABELS)
        logger.info("Language labels loaded: %s", data)
        return data

    def _load_spoof_config(self) -> SpoofingConfig:
        try:
            data = self._load_json(SPOOFING_CONFIG_PATH)
            if data is None:
                logger.warning("Spoofing config not found, using defaults")
                return SpoofingConfig()
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            spoof_config = SpoofingConfig.from_dict(data)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not read spoofing config (%s), using defaults", exc)
            return SpoofingConfig()
        logger.info("Spoofing config loaded: %s", spoof_config)
        return spoof_config

    def _load_model(self, name: str) -> Any:
        return self.loader(
            self.models_dir / MODEL_PATHS[name],
            device=self.device,
            input_shape=self.config.input_shape,
            name=name,
        )

    def load(self) -> "ModelRegistry":
        """Load metadata and models once.

        Raises:
            ResourceLoadError: the language model could not be loaded. Nothing
                stays loaded in that case.
        """
        with self._lock:
            if self._loaded:
                logger.info("Models already loaded")
                return self

            labels = self._load_labels()
            spoof_config = self._load_spoof_config()
            models: Dict[str, Any] = {}
            try:
                models[LANGUAGE] = self._load_model(LANGUAGE)
            except Exception as exc:
                logger.error("Language model failed to load from %s: %s", self.models_dir, exc)
                if isinstance(exc, ResourceLoadError):
                    raise
                raise ResourceLoadError(
                    f"Could not load language model: {exc}",
                    resource=str(self.models_dir / MODEL_PATHS[LANGUAGE]),
                ) from exc

            for name in OPTIONAL_MODELS:
                try:
                    models[name] = self._load_model(name)
                except Exception as exc:
                    logger.warning("%s model not available: %s", name.capitalize(), exc)
                    models[name] = None

            self._models = models
            self._labels = labels
            self._spoof_config = spoof_config
            self._loaded = True
            logger.info("Models loaded: %s", ", ".join(self.available()))
            return self

    def unload(self) -> None:
        """Dispose every model and clear metadata."""
        with self._lock:
            _dispose_all(self._models.values())
            self._models = {}
            self._labels = None
            self._spoof_config = None
            self._loaded = False
        logger.info("Models unloaded and memory freed")


def _dispose_all(models: Iterable[Any]) -> None:
    for model in list(models):
        if model is not None:
            model.dispose()

"""In-process analysis: audio -> band-energy features -> language / accent / spoofing classifiers.

Features are extracted once per utterance and shared by every classifier.
Classifiers come from a ModelRegistry; accent and spoofing are skipped when
the registry has no model for them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from voice_authenticity.audio.collector import AudioCollector, AudioSource
from voice_authenticity.audio.features import BandEnergyExtractor
from voice_authenticity.audio.signal import RawSignal
from voice_authenticity.models.registry import ACCENT, LANGUAGE, SPOOFING, ModelRegistry

logger = logging.getLogger(__name__)


@dataclass
class Prediction:
    """Top label and the full label -> probability mapping of one classifier."""

    label: str
    confidence: float
    probabilities: Dict[str, float]


@dataclass
class SpoofingResult:
    """Spoofing score against the configured decision threshold."""

    spoof_probability: float
    threshold: float
    is_spoof: bool
    label: str


@dataclass
class AnalysisResult:
    language: Prediction
    accent: Optional[Prediction] = None
    spoofing: Optional[SpoofingResult] = None


def _label_probabilities(probs: np.ndarray, labels: Optional[List[str]]) -> Prediction:
    probs = np.asarray(probs, dtype=np.float32).reshape(-1)
    names = list(labels or [])
    # pad with index names when the model has more outputs than labels
    while len(names) < len(probs):
        names.append(f"class_{len(names)}")
    mapping = {names[i]: float(p) for i, p in enumerate(probs)}
    top = int(np.argmax(probs)) if probs.size else 0
    return Prediction(
        label=names[top] if probs.size else "",
        confidence=float(probs[top]) if probs.size else 0.0,
        probabilities=mapping,
    )


class VoiceAnalyzer:
    """Scores one utterance at a time with the registry's classifiers.

    Interface:
        analyzer = VoiceAnalyzer(registry)
        result = analyzer.analyze(collector.record())
    """

    def __init__(
        self,
        registry: ModelRegistry,
        extractor: Optional[BandEnergyExtractor] = None,
        collector: Optional[AudioCollector] = None,
    ):
        self.registry = registry
        self.extractor = extractor or BandEnergyExtractor(registry.config)
        self.collector = collector or AudioCollector(self.extractor.config)

    def analyze_features(self, features: np.ndarray) -> AnalysisResult:
        """Run every available classifier on a (1, T, F) model input."""
        if not self.registry.is_loaded:
            self.registry.load()

        language_model = self.registry.get(LANGUAGE)
        language = _label_probabilities(language_model.predict(features), self.registry.labels)

        accent = None
        accent_model = self.registry.get(ACCENT)
        if accent_model is not None:
            accent = _label_probabilities(accent_model.predict(features), None)

        spoofing = None
        spoof_model = self.registry.get(SPOOFING)
        if spoof_model is not None:
            spoofing = self._score_spoofing(spoof_model.predict(features))

        return AnalysisResult(language=language, accent=accent, spoofing=spoofing)

    def _score_spoofing(self, probs: np.ndarray) -> SpoofingResult:
        spoof_config = self.registry.spoof_config
        probs = np.asarray(probs, dtype=np.float32).reshape(-1)
        # single sigmoid output or [p_human, p_spoof]
        p_spoof = float(probs[-1]) if probs.size else 0.0
        is_spoof = p_spoof >= spoof_config.threshold
        labels = spoof_config.labels
        if len(labels) >= 2:
            label = labels[1] if is_spoof else labels[0]
        else:
            label = "spoof" if is_spoof else "human"
        return SpoofingResult(
            spoof_probability=p_spoof,
            threshold=spoof_config.threshold,
            is_spoof=is_spoof,
            label=label,
        )

    def analyze(self, signal: RawSignal | np.ndarray) -> AnalysisResult:
        """Extract normalized features from one utterance and classify it."""
        features = self.extractor.to_model_input(signal)
        logger.debug("Features extracted: shape %s", features.shape)
        result = self.analyze_features(features)
        logger.info("Language: %s (%.2f)", result.language.label, result.language.confidence)
        return result

    def analyze_file(self, source: AudioSource) -> AnalysisResult:
        """Decode an audio file and classify it."""
        return self.analyze(self.collector.load_file(source))

    def analyze_recording(
        self,
        duration_sec: Optional[float] = None,
        device: Optional[int] = None,
    ) -> AnalysisResult:
        """Record from the microphone and classify the recording."""
        return self.analyze(self.collector.record(duration_sec, device=device))

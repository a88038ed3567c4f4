"""Unit tests for VoiceAnalyzer: features -> registry classifiers -> result."""

from __future__ import annotations

import tempfile
import unittest

import numpy as np

from voice_authenticity.audio import FeatureConfig, RawSignal, encode_wav
from voice_authenticity.models import ModelRegistry
from voice_authenticity.pipeline import VoiceAnalyzer

from test_registry import ALL_MODELS, FakeLoader


class TestVoiceAnalyzer(unittest.TestCase):
    """Tests for VoiceAnalyzer."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config = FeatureConfig()
        rng = np.random.default_rng(0)
        self.signal = RawSignal((rng.random(self.config.target_length) - 0.5) * 0.2, 16_000)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _registry(self, outputs) -> ModelRegistry:
        self.loader = FakeLoader(outputs)
        return ModelRegistry(self._tmp.name, config=self.config, loader=self.loader)

    def test_full_analysis(self) -> None:
        analyzer = VoiceAnalyzer(self._registry(ALL_MODELS))
        result = analyzer.analyze(self.signal)

        self.assertEqual(result.language.label, "Inglés")
        self.assertAlmostEqual(result.language.confidence, 0.7, places=5)
        self.assertEqual(list(result.language.probabilities), ["Español", "Inglés", "Francés", "Alemán"])

        self.assertIsNotNone(result.accent)
        self.assertEqual(result.accent.label, "class_1")

        self.assertIsNotNone(result.spoofing)
        self.assertAlmostEqual(result.spoofing.spoof_probability, 0.8, places=5)
        self.assertTrue(result.spoofing.is_spoof)
        self.assertEqual(result.spoofing.label, "spoof")

    def test_models_receive_normalized_input(self) -> None:
        analyzer = VoiceAnalyzer(self._registry(ALL_MODELS))
        analyzer.analyze(self.signal)
        for model in self.loader.created:
            self.assertEqual(len(model.inputs), 1)
            x = model.inputs[0]
            self.assertEqual(x.shape, self.config.input_shape)
            np.testing.assert_allclose(x[0].mean(axis=0), 0.0, atol=1e-4)
        # one extraction shared by every classifier
        self.assertIs(self.loader.created[0].inputs[0], self.loader.created[2].inputs[0])

    def test_below_threshold_is_human(self) -> None:
        outputs = dict(ALL_MODELS, spoofing=[0.9, 0.1])
        result = VoiceAnalyzer(self._registry(outputs)).analyze(self.signal)
        self.assertFalse(result.spoofing.is_spoof)
        self.assertEqual(result.spoofing.label, "human")

    def test_optional_models_missing(self) -> None:
        registry = self._registry({"language": ALL_MODELS["language"]})
        result = VoiceAnalyzer(registry).analyze(self.signal)
        self.assertEqual(result.language.label, "Inglés")
        self.assertIsNone(result.accent)
        self.assertIsNone(result.spoofing)

    def test_analyze_file(self) -> None:
        analyzer = VoiceAnalyzer(self._registry(ALL_MODELS))
        result = analyzer.analyze_file(encode_wav(self.signal))
        self.assertEqual(result.language.label, "Inglés")

    def test_silence_is_finite(self) -> None:
        analyzer = VoiceAnalyzer(self._registry(ALL_MODELS))
        analyzer.analyze(np.zeros(self.config.target_length, dtype=np.float32))
        x = self.loader.created[0].inputs[0]
        self.assertTrue(np.all(np.isfinite(x)))
        np.testing.assert_allclose(x, 0.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)

"""Unit tests for the WAV container and the RawSignal length policy."""

from __future__ import annotations

import struct
import unittest

import numpy as np

from voice_authenticity.audio import RawSignal, decode_wav, encode_wav, fit_length
from voice_authenticity.audio.wav import WAV_HEADER_BYTES, float_to_pcm16
from voice_authenticity.errors import DecodeError


class TestEncodeWav(unittest.TestCase):
    """Tests for encode_wav."""

    def test_header_layout(self) -> None:
        """44-byte RIFF/WAVE header: PCM, mono, 16-bit."""
        samples = np.zeros(100, dtype=np.float32)
        data = encode_wav(samples, sample_rate=16_000)
        self.assertEqual(len(data), WAV_HEADER_BYTES + 2 * len(samples))
        self.assertEqual(data[0:4], b"RIFF")
        self.assertEqual(struct.unpack("<I", data[4:8])[0], 36 + 2 * len(samples))
        self.assertEqual(data[8:12], b"WAVE")
        self.assertEqual(data[12:16], b"fmt ")
        fmt_size, audio_format, channels, rate, byte_rate, block_align, bits = struct.unpack(
            "<IHHIIHH", data[16:36]
        )
        self.assertEqual(fmt_size, 16)
        self.assertEqual(audio_format, 1)
        self.assertEqual(channels, 1)
        self.assertEqual(rate, 16_000)
        self.assertEqual(byte_rate, 32_000)
        self.assertEqual(block_align, 2)
        self.assertEqual(bits, 16)
        self.assertEqual(data[36:40], b"data")
        self.assertEqual(struct.unpack("<I", data[40:44])[0], 2 * len(samples))

    def test_clamping(self) -> None:
        pcm = float_to_pcm16(np.array([1.5, 1.0, -1.0, -2.0, 0.0], dtype=np.float32))
        self.assertEqual(pcm.tolist(), [32767, 32767, -32768, -32768, 0])

    def test_raw_signal_uses_its_sample_rate(self) -> None:
        data = encode_wav(RawSignal(np.zeros(10), 8_000))
        self.assertEqual(struct.unpack("<I", data[24:28])[0], 8_000)

    def test_round_trip_within_quantization_error(self) -> None:
        rng = np.random.default_rng(0)
        samples = (rng.random(4800) * 2 - 1).astype(np.float32)
        samples[:3] = [1.0, -1.0, 0.0]
        decoded = decode_wav(encode_wav(samples, 16_000))
        self.assertEqual(decoded.sample_rate, 16_000)
        self.assertEqual(len(decoded), len(samples))
        self.assertLessEqual(float(np.max(np.abs(decoded.samples - samples))), 1 / 32768)

    def test_decode_garbage(self) -> None:
        with self.assertRaises(DecodeError):
            decode_wav(b"definitely not a wav file")


class TestRawSignal(unittest.TestCase):
    """Tests for RawSignal and fit_length."""

    def test_fit_length(self) -> None:
        self.assertEqual(len(fit_length(np.ones(10), 20)), 20)
        self.assertEqual(len(fit_length(np.ones(30), 20)), 20)
        self.assertEqual(len(fit_length(np.ones(20), 20)), 20)
        padded = fit_length(np.ones(10), 20)
        np.testing.assert_array_equal(padded[10:], 0.0)
        truncated = fit_length(np.arange(30, dtype=np.float32), 20)
        np.testing.assert_array_equal(truncated, np.arange(20))

    def test_fit_length_does_not_alias_input(self) -> None:
        samples = np.ones(20, dtype=np.float32)
        out = fit_length(samples, 20)
        out[0] = 0.0
        self.assertEqual(samples[0], 1.0)

    def test_samples_clipped(self) -> None:
        signal = RawSignal(np.array([2.0, -3.0, 0.5]), 16_000)
        np.testing.assert_allclose(signal.samples, [1.0, -1.0, 0.5])
        self.assertEqual(signal.samples.dtype, np.float32)

    def test_multichannel_keeps_first_channel(self) -> None:
        signal = RawSignal(np.array([[0.1, 0.9], [0.2, 0.8]]), 16_000)
        np.testing.assert_allclose(signal.samples, [0.1, 0.2], rtol=1e-6)

    def test_duration(self) -> None:
        signal = RawSignal(np.zeros(8_000), 16_000)
        self.assertAlmostEqual(signal.duration_sec, 0.5)
        self.assertEqual(len(signal.fit(48_000)), 48_000)


if __name__ == "__main__":
    unittest.main(verbosity=2)

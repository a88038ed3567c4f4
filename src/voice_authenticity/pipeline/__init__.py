"""End-to-end in-process analysis pipeline."""

from voice_authenticity.pipeline.analyzer import (
    AnalysisResult,
    Prediction,
    SpoofingResult,
    VoiceAnalyzer,
)

__all__ = ["AnalysisResult", "Prediction", "SpoofingResult", "VoiceAnalyzer"]

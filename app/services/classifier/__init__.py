"""
Issue classification.

Gemini when configured, deterministic keyword rules otherwise.
Classification never blocks or fails report submission.
"""

from app.services.classifier.base import (
    AnalysisOutcome,
    ClassificationError,
    ClassifierProvider,
    ExternalAnalysis,
    FallbackAnalysis,
    InlineImage,
)
from app.services.classifier.fallback_provider import KeywordFallbackProvider, fallback_analysis
from app.services.classifier.gemini_provider import GeminiClassifierProvider
from app.services.classifier.registry import IssueClassifier

__all__ = [
    "AnalysisOutcome",
    "ClassificationError",
    "ClassifierProvider",
    "ExternalAnalysis",
    "FallbackAnalysis",
    "InlineImage",
    "KeywordFallbackProvider",
    "fallback_analysis",
    "GeminiClassifierProvider",
    "IssueClassifier",
]

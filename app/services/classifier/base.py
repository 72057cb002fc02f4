"""
Classifier Provider Base Interface.

Defines the contract for classification providers and the two outcome
variants they produce. Both variants collapse into a single AIAnalysis
at the classifier boundary.
"""

from abc import ABC, abstractmethod
from typing import Dict, NamedTuple, Optional
import logging

from app.models.issue import AIAnalysis
from app.services.category_mapper import Category

logger = logging.getLogger(__name__)


class InlineImage(NamedTuple):
    """Decoded photo bytes with their MIME type."""
    mime_type: str
    data: bytes


class AnalysisOutcome:
    """
    Result of one provider attempt.

    Subclasses tag where the result came from so callers and logs can tell
    an upstream answer from the deterministic fallback.
    """

    source = "unknown"

    def __init__(
        self,
        domain: str,
        category: Category,
        severity: str,
        confidence: float,
        reasoning: str,
        model_name: str,
    ):
        self.domain = domain
        self.category = category
        self.severity = severity
        self.confidence = confidence
        self.reasoning = reasoning
        self.model_name = model_name

    def to_analysis(self) -> AIAnalysis:
        return AIAnalysis(
            domain=self.domain,
            category=self.category,
            severity=self.severity,
            confidence=self.confidence,
            reasoning=self.reasoning,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(domain={self.domain!r}, category={self.category.value!r}, "
            f"severity={self.severity!r}, confidence={self.confidence})"
        )


class ExternalAnalysis(AnalysisOutcome):
    """Answer produced by the upstream AI service."""
    source = "external"


class FallbackAnalysis(AnalysisOutcome):
    """Answer produced by the keyword rules."""
    source = "fallback"


class ClassificationError(Exception):
    """Raised by external providers on any failure; always absorbed by the classifier."""


class ClassifierProvider(ABC):
    """
    Abstract base class for classification providers.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        Check if this provider is configured and ready.
        """
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """
        Get model information.

        Returns:
            Dict with 'name' and 'version' keys
        """
        pass

    @abstractmethod
    def analyze(self, description: str, image: Optional[InlineImage] = None) -> AnalysisOutcome:
        """
        Classify a maintenance report.

        External providers raise ClassificationError on failure.
        The fallback provider must never raise.
        """
        pass

    @abstractmethod
    def get_timeout_seconds(self) -> float:
        pass

"""
Classifier Registry - provider selection and fallback logic.

classify() is the main entry point. It makes at most one external attempt
per call and always returns a complete AIAnalysis.
"""

from typing import List, Optional
import logging

from app.core.settings import settings
from app.models.issue import AIAnalysis
from app.services.classifier.base import AnalysisOutcome, ClassifierProvider, InlineImage
from app.services.classifier.fallback_provider import KeywordFallbackProvider
from app.services.classifier.gemini_provider import GeminiClassifierProvider

logger = logging.getLogger(__name__)


class IssueClassifier:
    """
    Tries the external provider (if configured) and falls back to the
    keyword rules on any failure. No retries.
    """

    def __init__(
        self,
        external: Optional[ClassifierProvider] = None,
        fallback: Optional[ClassifierProvider] = None,
    ):
        self.external = external
        self.fallback = fallback or KeywordFallbackProvider()

    @classmethod
    def from_settings(cls) -> "IssueClassifier":
        if not settings.AI_ENABLED:
            logger.info("⚠️ AI is disabled globally (AI_ENABLED=false), using keyword fallback only")
            return cls(external=None)

        gemini = GeminiClassifierProvider()
        return cls(external=gemini if gemini.is_enabled() else None)

    @property
    def providers(self) -> List[ClassifierProvider]:
        if self.external is not None and self.external.is_enabled():
            return [self.external, self.fallback]
        return [self.fallback]

    def active_provider(self) -> ClassifierProvider:
        return self.providers[0]

    def analyze(self, description: str, image: Optional[InlineImage] = None) -> AnalysisOutcome:
        """Return the tagged outcome (external or fallback)."""
        if self.external is not None and self.external.is_enabled():
            name = self.external.get_model_info()["name"]
            try:
                outcome = self.external.analyze(description, image)
                logger.info(f"✅ Classification served by {name}: {outcome!r}")
                return outcome
            except Exception as e:
                logger.warning(f"⚠️ Provider {name} failed, using fallback analysis: {e}")
        else:
            logger.info("No external classifier configured, using fallback analysis")

        outcome = self.fallback.analyze(description, image)
        logger.info(f"Fallback classification: {outcome!r}")
        return outcome

    def classify(self, description: str, image: Optional[InlineImage] = None) -> AIAnalysis:
        """Classify a report. Never raises."""
        outcome = self.analyze(description, image)
        try:
            return outcome.to_analysis()
        except Exception as e:
            # An external outcome that fails model validation still gets a usable answer
            logger.warning(f"⚠️ Discarding {outcome.source} outcome that failed validation: {e}")
            return self.fallback.analyze(description, image).to_analysis()


"""
Keyword Fallback Provider - used when Gemini is unavailable or fails.

Rule-based and deterministic: the same description always yields the
same domain, category and severity. No network calls.
"""

from typing import Dict, List, Optional, Tuple
import logging

from app.services.category_mapper import map_domain_to_category
from app.services.classifier.base import ClassifierProvider, FallbackAnalysis, InlineImage

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.6
FALLBACK_REASONING = (
    "Fallback analysis due to AI service unavailability. "
    "Manual review recommended for accurate assessment."
)
DEFAULT_DOMAIN = "General Maintenance"

# Checked in order; the first domain with any keyword in the text wins.
DOMAIN_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Plumbing", ("water", "leak", "pipe", "plumb")),
    ("Electrical", ("light", "electric", "power", "outlet")),
    ("Infrastructure & Road Safety", ("pothole", "road", "pavement")),
    ("Traffic Management", ("traffic", "sign", "signal")),
    ("Waste Management", ("trash", "garbage", "waste")),
]

EMERGENCY_KEYWORDS = (
    "leak", "flood", "fire", "exposed", "emergency", "urgent", "danger", "broken", "burst",
)
CRITICAL_WORDS = ("urgent", "immediate", "danger")
MAJOR_WORDS = ("major", "significant")
MINOR_WORDS = ("minor", "cosmetic", "routine")


def detect_domain(text: str) -> str:
    for domain, keywords in DOMAIN_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return domain
    return DEFAULT_DOMAIN


def detect_severity(text: str) -> str:
    is_emergency = any(keyword in text for keyword in EMERGENCY_KEYWORDS)
    if is_emergency or any(word in text for word in CRITICAL_WORDS):
        return "critical"
    if any(word in text for word in MAJOR_WORDS):
        return "major"
    if any(word in text for word in MINOR_WORDS):
        return "minor"
    return "moderate"


class KeywordFallbackProvider(ClassifierProvider):
    """
    Keyword classifier. Always enabled, never fails.

    The image is ignored; only the description text is used.
    """

    MODEL_NAME = "keyword-fallback"
    MODEL_VERSION = "1.0.0"

    def is_enabled(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.MODEL_NAME, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        # Local rules, no call to wait on
        return 0.0

    def analyze(self, description: str, image: Optional[InlineImage] = None) -> FallbackAnalysis:
        text = (description or "").lower()
        domain = detect_domain(text)

        return FallbackAnalysis(
            domain=domain,
            category=map_domain_to_category(domain),
            severity=detect_severity(text),
            confidence=FALLBACK_CONFIDENCE,
            reasoning=FALLBACK_REASONING,
            model_name=self.MODEL_NAME,
        )


def fallback_analysis(description: str) -> FallbackAnalysis:
    """Shortcut used by the classifier and tests."""
    return KeywordFallbackProvider().analyze(description)

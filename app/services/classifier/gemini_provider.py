"""
Gemini Classifier Provider - real vision/language classification.

Calls the Gemini generateContent REST endpoint with the report text and,
when present, the photo as inline data. The response is constrained to a
JSON schema and validated before use. Any failure raises
ClassificationError so the classifier can fall back.
"""

from typing import Dict, Optional
import base64
import json
import logging

import requests
from pydantic import BaseModel, ValidationError, field_validator

from app.core.settings import settings
from app.models.issue import Severity
from app.services.category_mapper import map_domain_to_category
from app.services.classifier.base import (
    ClassificationError,
    ClassifierProvider,
    ExternalAnalysis,
    InlineImage,
)

logger = logging.getLogger(__name__)


RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "domain": {"type": "string"},
        "severity": {"type": "string"},
        "confidence": {"type": "number"},
        "reasoning": {"type": "string"},
    },
    "required": ["domain", "severity", "confidence", "reasoning"],
}


class GeminiAnalysisPayload(BaseModel):
    """Shape the model is asked to return. Strict on types."""
    domain: str
    severity: Severity
    confidence: float
    reasoning: str
    category: Optional[str] = None

    @field_validator("domain", "reasoning")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("must be a non-empty string")
        return value.strip()

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value):
        if not isinstance(value, str):
            raise ValueError("severity must be a string")
        return value.strip().lower()

    @field_validator("confidence", mode="before")
    @classmethod
    def numeric_confidence(cls, value):
        # bool is an int subclass; "0.9" strings are rejected too
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("confidence must be a number")
        return min(max(float(value), 0.0), 1.0)


class GeminiClassifierProvider(ClassifierProvider):
    """
    Google Gemini provider.

    Requires GEMINI_API_KEY. Disabled (never called) without it.
    """

    MODEL_VERSION = "v1beta"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model_name = model_name or settings.GEMINI_MODEL
        self.timeout_seconds = timeout_seconds or settings.AI_TIMEOUT_SECONDS
        self.base_url = (base_url or settings.GEMINI_API_BASE_URL).rstrip("/")
        self.enabled = bool(self.api_key and self.api_key.strip())

        if self.enabled:
            logger.info(f"✅ Gemini classifier initialized: {self.model_name} (key {self.api_key[:4]}...)")
        else:
            logger.info("⚠️ Gemini classifier disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.model_name, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        return self.timeout_seconds

    def analyze(self, description: str, image: Optional[InlineImage] = None) -> ExternalAnalysis:
        if not self.enabled:
            raise ClassificationError("Gemini API key not configured")

        payload = self._build_payload(description, image)
        text = self._call_gemini_api(payload)
        parsed = self._parse_response(text)

        category = map_domain_to_category(parsed.category or parsed.domain)

        return ExternalAnalysis(
            domain=parsed.domain,
            category=category,
            severity=parsed.severity.value,
            confidence=parsed.confidence,
            reasoning=parsed.reasoning,
            model_name=self.model_name,
        )

    def _build_prompt(self, description: str) -> str:
        return f"""You are an expert civic infrastructure analyst. Analyze this maintenance issue using the image (if provided) and the description.

DESCRIPTION: "{description}"

ANALYSIS INSTRUCTIONS:
1. Examine any uploaded image for visual evidence of the maintenance issue
2. Describe what you observe - damage patterns, structural issues, safety hazards
3. Use the description as context, but prioritize visual evidence when an image is present
4. Assess the severity based on the evidence
5. Keep your reasoning CONCISE - maximum 2-3 sentences

SEVERITY LEVELS (use lowercase exactly as shown):
- critical: Immediate danger to public safety, major infrastructure failure requiring emergency response
- major: Significant safety risk or operational disruption requiring urgent attention
- moderate: Moderate impact with noticeable inconvenience or minor safety concerns
- minor: Minimal impact, aesthetic issues, or preventive maintenance needs

DOMAINS: Infrastructure & Road Safety, Public Utilities & Safety, Traffic Management & Child Safety, Waste Management & Public Health, Plumbing, Electrical, etc.

Respond with valid JSON only:
{{
  "domain": "specific domain name",
  "severity": "critical|major|moderate|minor",
  "confidence": 0.95,
  "reasoning": "Brief analysis in 2-3 sentences"
}}"""

    def _build_payload(self, description: str, image: Optional[InlineImage]) -> Dict:
        parts = []
        if image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": image.mime_type,
                    "data": base64.b64encode(image.data).decode("ascii"),
                }
            })
        parts.append({"text": self._build_prompt(description)})

        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def _call_gemini_api(self, payload: Dict) -> str:
        """POST to generateContent and return the first candidate's text."""
        url = f"{self.base_url}/{self.model_name}:generateContent"

        try:
            response = requests.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise ClassificationError(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            raise ClassificationError(
                f"Gemini API returned status {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassificationError(f"Unexpected Gemini response structure: {e}") from e

        if not text:
            raise ClassificationError("Empty response from Gemini")
        return text

    def _parse_response(self, text: str) -> GeminiAnalysisPayload:
        """Parse and validate the JSON body produced by the model."""
        cleaned = text.strip()
        # Models sometimes wrap JSON in markdown fences despite the mime type
        if "```json" in cleaned:
            cleaned = cleaned.split("```json")[1].split("```")[0].strip()
        elif cleaned.startswith("```"):
            cleaned = cleaned.split("```")[1].split("```")[0].strip()

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Gemini response is not valid JSON: {e}") from e

        if not isinstance(parsed, dict):
            raise ClassificationError("Gemini response is not a JSON object")

        try:
            return GeminiAnalysisPayload(**parsed)
        except ValidationError as e:
            raise ClassificationError(f"Invalid analysis format: {e.errors()}") from e

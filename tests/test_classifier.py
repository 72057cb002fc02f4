# tests/test_classifier.py - Gemini classification with keyword fallback
import base64
import json

import pytest
import requests

from app.core.settings import settings
from app.models.issue import Severity
from app.services.category_mapper import Category
from app.services.classifier import (
    ClassificationError,
    ExternalAnalysis,
    FallbackAnalysis,
    GeminiClassifierProvider,
    InlineImage,
    IssueClassifier,
    fallback_analysis,
)
from app.services.classifier.fallback_provider import FALLBACK_REASONING, KeywordFallbackProvider
from app.utils.images import decode_data_url
from tests.conftest import FakeResponse, gemini_body

GEMINI_POST = "app.services.classifier.gemini_provider.requests.post"


@pytest.fixture
def gemini():
    return GeminiClassifierProvider(api_key="test-key", model_name="gemini-test", timeout_seconds=2.0)


@pytest.fixture
def gemini_classifier(gemini):
    return IssueClassifier(external=gemini)


def _answer(**fields):
    body = {
        "domain": "Infrastructure & Road Safety",
        "severity": "major",
        "confidence": 0.91,
        "reasoning": "Deep pothole on a busy road.",
    }
    body.update(fields)
    return FakeResponse(200, gemini_body(json.dumps(body)))


# ── Fallback rules ─────────────────────────────────────────


def test_fallback_water_leak_emergency():
    result = IssueClassifier(external=None).classify("Water leak near the main pipe, emergency!")
    assert result.domain == "Plumbing"
    assert result.severity == Severity.CRITICAL
    assert result.category == Category.WATER_DRAINAGE
    assert result.confidence == 0.6
    assert result.reasoning == FALLBACK_REASONING


def test_fallback_routine_minor_pothole():
    result = IssueClassifier(external=None).classify("Routine minor pothole touch-up")
    assert result.domain == "Infrastructure & Road Safety"
    assert result.severity == Severity.MINOR
    assert result.category == Category.ROADS_TRANSPORT


@pytest.mark.parametrize(
    "description, domain, severity",
    [
        ("Streetlight out on 5th avenue", "Electrical", "moderate"),
        ("Garbage piling up, major smell", "Waste Management", "major"),
        # "significant" contains "sign", which the traffic rule matches first
        ("Garbage piling up, significant smell", "Traffic Management", "major"),
        ("Traffic signal stuck on red", "Traffic Management", "moderate"),
        ("Cosmetic paint chipping on bench", "General Maintenance", "minor"),
        ("Exposed wires near the power outlet", "Electrical", "critical"),
        ("Needs immediate attention at the park", "General Maintenance", "critical"),
        ("Major crack in the pavement", "Infrastructure & Road Safety", "major"),
    ],
)
def test_fallback_keyword_table(description, domain, severity):
    result = fallback_analysis(description)
    assert result.domain == domain
    assert result.severity == severity


def test_fallback_domain_priority_uses_list_order_not_text_position():
    # "road" appears first in the text but plumbing keywords win by rule order
    result = fallback_analysis("Road flooded because a pipe burst")
    assert result.domain == "Plumbing"
    assert result.severity == "critical"


def test_fallback_is_deterministic():
    description = "Broken streetlight and trash everywhere"
    first = fallback_analysis(description)
    for _ in range(10):
        again = fallback_analysis(description)
        assert (again.domain, again.category, again.severity) == (first.domain, first.category, first.severity)


def test_fallback_outcome_is_tagged():
    outcome = IssueClassifier(external=None).analyze("Pothole")
    assert isinstance(outcome, FallbackAnalysis)
    assert outcome.source == "fallback"


# ── External path ──────────────────────────────────────────


def test_disabled_without_api_key():
    provider = GeminiClassifierProvider(api_key="")
    assert not provider.is_enabled()
    with pytest.raises(ClassificationError):
        provider.analyze("anything")
    classifier = IssueClassifier(external=provider)
    assert classifier.active_provider() is classifier.fallback


def test_external_success_derives_category(monkeypatch, gemini_classifier):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return _answer()

    monkeypatch.setattr(GEMINI_POST, fake_post)

    outcome = gemini_classifier.analyze("Pothole on the highway")
    assert isinstance(outcome, ExternalAnalysis)

    result = outcome.to_analysis()
    assert result.domain == "Infrastructure & Road Safety"
    assert result.category == Category.ROADS_TRANSPORT
    assert result.severity == Severity.MAJOR
    assert result.confidence == pytest.approx(0.91)

    assert len(calls) == 1
    url, kwargs = calls[0]
    assert url.endswith("/gemini-test:generateContent")
    assert kwargs["params"] == {"key": "test-key"}
    assert kwargs["timeout"] == 2.0
    config = kwargs["json"]["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert set(config["responseSchema"]["required"]) == {"domain", "severity", "confidence", "reasoning"}


def test_external_uppercase_severity_is_canonicalized(monkeypatch, gemini_classifier):
    monkeypatch.setattr(GEMINI_POST, lambda url, **kw: _answer(severity="CRITICAL"))
    assert gemini_classifier.classify("Sinkhole").severity == Severity.CRITICAL


def test_external_sends_image_inline(monkeypatch, gemini_classifier):
    captured = {}

    def fake_post(url, **kwargs):
        captured.update(kwargs)
        return _answer()

    monkeypatch.setattr(GEMINI_POST, fake_post)

    image = InlineImage(mime_type="image/png", data=b"\x89PNG fake")
    gemini_classifier.classify("Pothole", image)

    parts = captured["json"]["contents"][0]["parts"]
    assert parts[0]["inline_data"]["mime_type"] == "image/png"
    assert base64.b64decode(parts[0]["inline_data"]["data"]) == b"\x89PNG fake"
    assert "Pothole" in parts[-1]["text"]


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(500, text="internal error"),
        FakeResponse(200, {"candidates": []}),
        FakeResponse(200, gemini_body("not json at all")),
        FakeResponse(200, gemini_body("[1, 2, 3]")),
        FakeResponse(200, gemini_body(json.dumps({"domain": "Plumbing", "severity": "major"}))),
        FakeResponse(200, gemini_body(json.dumps({
            "domain": "Plumbing", "severity": "major", "confidence": "high", "reasoning": "x",
        }))),
        FakeResponse(200, gemini_body(json.dumps({
            "domain": "Plumbing", "severity": "catastrophic", "confidence": 0.9, "reasoning": "x",
        }))),
        FakeResponse(200, gemini_body(json.dumps({
            "domain": "", "severity": "major", "confidence": 0.9, "reasoning": "x",
        }))),
    ],
)
def test_malformed_responses_fall_back(monkeypatch, gemini_classifier, response):
    monkeypatch.setattr(GEMINI_POST, lambda url, **kw: response)

    result = gemini_classifier.classify("Water leak near the main pipe, emergency!")
    assert result.domain == "Plumbing"
    assert result.severity == Severity.CRITICAL
    assert result.confidence == 0.6


def test_network_error_falls_back_after_single_attempt(monkeypatch, gemini_classifier):
    attempts = []

    def boom(url, **kwargs):
        attempts.append(url)
        raise requests.Timeout("timed out")

    monkeypatch.setattr(GEMINI_POST, boom)

    result = gemini_classifier.classify("Routine minor pothole touch-up")
    assert result.severity == Severity.MINOR
    assert result.confidence == 0.6
    assert len(attempts) == 1


def test_unexpected_exception_falls_back(monkeypatch, gemini_classifier):
    def explode(url, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(GEMINI_POST, explode)
    assert gemini_classifier.classify("Trash everywhere").domain == "Waste Management"


def test_markdown_fenced_json_is_accepted(monkeypatch, gemini_classifier):
    text = "```json\n" + json.dumps({
        "domain": "Plumbing", "severity": "moderate", "confidence": 0.8, "reasoning": "Leaking tap.",
    }) + "\n```"
    monkeypatch.setattr(GEMINI_POST, lambda url, **kw: FakeResponse(200, gemini_body(text)))

    result = gemini_classifier.classify("tap")
    assert result.confidence == pytest.approx(0.8)
    assert result.category == Category.WATER_DRAINAGE


def test_confidence_is_clamped(monkeypatch, gemini_classifier):
    monkeypatch.setattr(GEMINI_POST, lambda url, **kw: _answer(confidence=1.7))
    assert gemini_classifier.classify("x").confidence == 1.0


# ── Settings ───────────────────────────────────────────


def test_from_settings_ai_disabled_uses_fallback_only(monkeypatch):
    monkeypatch.setattr(settings, "AI_ENABLED", False)
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "configured-key")

    classifier = IssueClassifier.from_settings()
    assert classifier.external is None
    assert isinstance(classifier.active_provider(), KeywordFallbackProvider)


def test_from_settings_without_key_uses_fallback(monkeypatch):
    monkeypatch.setattr(settings, "AI_ENABLED", True)
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

    classifier = IssueClassifier.from_settings()
    assert classifier.active_provider() is classifier.fallback


def test_from_settings_with_key_activates_gemini(monkeypatch):
    monkeypatch.setattr(settings, "AI_ENABLED", True)
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "configured-key")
    monkeypatch.setattr(settings, "GEMINI_MODEL", "gemini-configured")
    monkeypatch.setattr(settings, "AI_TIMEOUT_SECONDS", 3.0)

    provider = IssueClassifier.from_settings().active_provider()
    assert isinstance(provider, GeminiClassifierProvider)
    assert provider.api_key == "configured-key"
    assert provider.get_model_info()["name"] == "gemini-configured"
    assert provider.get_timeout_seconds() == 3.0


def test_fallback_reports_no_timeout():
    assert KeywordFallbackProvider().get_timeout_seconds() == 0


# ── Data URLs ──────────────────────────────────────────────


def test_decode_data_url():
    encoded = base64.b64encode(b"jpegbytes").decode()
    image = decode_data_url(f"data:image/jpeg;base64,{encoded}")
    assert image == InlineImage(mime_type="image/jpeg", data=b"jpegbytes")


@pytest.mark.parametrize("value", [None, "", "https://example.com/a.jpg", "data:image/png;base64,@@@"])
def test_decode_data_url_rejects_bad_input(value):
    assert decode_data_url(value) is None

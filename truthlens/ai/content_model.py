"""
truthlens.ai.content_model – model-backed misinformation analysis.

ContentAnalyzer wraps text, URLs and images in prompts, sends them to the
hosted model and validates the JSON answer against AnalysisResult.  Any
failure (no API key, transport error, malformed JSON, schema mismatch)
produces an "Unverified" result instead of an exception.
"""
from __future__ import annotations

import logging
import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from truthlens.ai.gemini_client import GeminiClient, image_part, text_part
from truthlens.config import get_settings
from truthlens.errors import GeminiConfigurationError, GeminiError

logger = logging.getLogger(__name__)

Classification = Literal["Real", "Fake", "Misleading", "Satire", "Unverified"]
ContentKind = Literal["text", "url", "image"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH"]
Sensitivity = Literal["low", "medium", "high"]


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class FactCheck(BaseModel):
    claim:   str
    verdict: str
    source:  str = "General Knowledge"


class AnalysisResult(BaseModel):
    """Validated verdict for one piece of content."""
    model_config = ConfigDict(populate_by_name=True)

    classification:     Classification
    confidence:         int = Field(ge=0, le=100)
    summary:            str = "No summary available."
    reasoning:          list[str]
    fact_checks:        list[FactCheck] = Field(default_factory=list, alias="factChecks")
    emotional_triggers: list[str] = Field(default_factory=list, alias="emotionalTriggers")
    virality_score:     int = Field(ge=0, le=100, alias="viralityScore")
    is_ai_generated:    bool = Field(default=False, alias="isAiGenerated")
    timestamp:          int | None = None

    @classmethod
    def unverified(cls, summary: str, reason: str) -> AnalysisResult:
        """Fail-closed result used whenever the model output can't be trusted."""
        return cls(
            classification="Unverified",
            confidence=0,
            summary=summary,
            reasoning=[reason],
            virality_score=0,
            timestamp=_now_ms(),
        )


def _now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SYSTEM_INSTRUCTION = """
You are TruthLens, an advanced misinformation detection engine.
Your goal is to analyze content for veracity, bias, and manipulation.
You must classify content as Real, Fake, Misleading, Satire, or Unverified.
You must provide explainable reasoning, detect emotional manipulation, and estimate virality.
If the content is harmless or true, verify it. If it is harmful or false, debunk it with clear logic.
""".strip()

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "classification": {
            "type": "STRING",
            "enum": ["Real", "Fake", "Misleading", "Satire", "Unverified"],
        },
        "confidence": {"type": "INTEGER", "description": "Confidence score between 0 and 100"},
        "summary": {"type": "STRING"},
        "reasoning": {"type": "ARRAY", "items": {"type": "STRING"}},
        "factChecks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "claim": {"type": "STRING"},
                    "verdict": {"type": "STRING"},
                    "source": {
                        "type": "STRING",
                        "description": "A likely source or 'General Knowledge'",
                    },
                },
            },
        },
        "emotionalTriggers": {"type": "ARRAY", "items": {"type": "STRING"}},
        "viralityScore": {"type": "INTEGER", "description": "Predicted virality score 0-100"},
        "isAiGenerated": {"type": "BOOLEAN"},
    },
    "required": ["classification", "confidence", "reasoning", "viralityScore"],
}

URL_PROMPT = """
Analyze this URL: "{url}".
1. Assess the domain reputation and credibility history.
2. If it is a known satire or fake news site, flag it immediately.
3. If the URL looks like a phishing pattern (e.g. typosquatting), flag it.
4. Analyze the likely content structure based on the URL parameters.
Return the response in the requested JSON schema.
""".strip()

IMAGE_PROMPT = """
Analyze this image and any text within it for misinformation.
Return a valid JSON object with the following structure:
{
  "classification": "Real" | "Fake" | "Misleading" | "Satire" | "Unverified",
  "confidence": number (0-100),
  "summary": "string",
  "reasoning": ["string", "string"],
  "factChecks": [{"claim": "string", "verdict": "string", "source": "string"}],
  "emotionalTriggers": ["string"],
  "viralityScore": number (0-100),
  "isAiGenerated": boolean
}
Only return the JSON.
""".strip()


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------

class ContentAnalyzer:
    """
    Misinformation analyzer backed by the hosted model.

    Text and URLs go to the text model with a response schema; images are
    sent inline to the multimodal model with the schema spelled out in the
    prompt.
    """

    def __init__(self, client: GeminiClient | None = None) -> None:
        settings = get_settings()
        self.client = client or GeminiClient()
        self.text_model = settings.gemini_text_model
        self.image_model = settings.gemini_image_model

    async def analyze(
        self,
        content: str,
        kind: ContentKind,
        image_bytes: bytes | None = None,
        mime_type: str = "image/jpeg",
    ) -> AnalysisResult:
        """
        Analyse one piece of content.

        Args:
            content      Text body, URL, or optional context for an image.
            kind         "text" | "url" | "image".
            image_bytes  Raw image bytes (required when kind == "image").
            mime_type    MIME type of image_bytes.

        Returns:
            A validated AnalysisResult; "Unverified" on any failure.
        """
        try:
            if kind == "image":
                if not image_bytes:
                    return AnalysisResult.unverified(
                        "No image data was provided for analysis.",
                        "Image content missing.",
                    )
                raw = await self._analyze_image(content, image_bytes, mime_type)
            else:
                raw = await self._analyze_text(content, kind)
        except GeminiConfigurationError as exc:
            logger.error("Analysis unavailable: %s", exc)
            return AnalysisResult.unverified(
                "Analysis service is not configured.",
                "Analysis service unavailable.",
            )
        except GeminiError as exc:
            logger.error("Gemini analysis error: %s", exc)
            return AnalysisResult.unverified(
                "An error occurred while analyzing the content. Please try again.",
                "Analysis service unavailable.",
            )

        return self._validate(raw)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _analyze_text(self, content: str, kind: ContentKind):
        prompt = URL_PROMPT.format(url=content) if kind == "url" else content
        return await self.client.generate_json(
            self.text_model,
            prompt,
            system_instruction=SYSTEM_INSTRUCTION,
            response_schema=RESPONSE_SCHEMA,
        )

    async def _analyze_image(self, context: str, image_bytes: bytes, mime_type: str):
        prompt = f"Context provided: {context}. {IMAGE_PROMPT}" if context else IMAGE_PROMPT
        return await self.client.generate_json(
            self.image_model,
            [image_part(image_bytes, mime_type), text_part(prompt)],
            json_mode=False,
        )

    @staticmethod
    def _validate(raw) -> AnalysisResult:
        if not isinstance(raw, dict):
            logger.warning("Model response is not a JSON object: %r", type(raw))
            return AnalysisResult.unverified(
                "The analysis response could not be verified.",
                "Model response did not match the expected schema.",
            )
        try:
            result = AnalysisResult.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Model response failed schema validation (%d errors)",
                exc.error_count(),
            )
            return AnalysisResult.unverified(
                "The analysis response could not be verified.",
                "Model response did not match the expected schema.",
            )
        return result.model_copy(update={"timestamp": _now_ms()})


# ---------------------------------------------------------------------------
# Risk mapping
# ---------------------------------------------------------------------------

# (HIGH cut-off, MEDIUM cut-off) on confidence for flagged classifications
_SENSITIVITY_THRESHOLDS: dict[str, tuple[int, int]] = {
    "low":    (85, 60),
    "medium": (70, 40),
    "high":   (50, 20),
}
_FLAGGED: set[str] = {"Fake", "Misleading"}


def risk_level(result: AnalysisResult, sensitivity: Sensitivity = "medium") -> RiskLevel:
    """
    Map a verdict onto LOW / MEDIUM / HIGH.

    Higher sensitivity lowers the confidence needed to flag Fake or
    Misleading content, and treats Unverified content as MEDIUM.
    """
    if result.classification in _FLAGGED:
        high_cut, medium_cut = _SENSITIVITY_THRESHOLDS[sensitivity]
        if result.confidence >= high_cut:
            return "HIGH"
        if result.confidence >= medium_cut:
            return "MEDIUM"
        return "LOW"
    if result.classification == "Unverified" and sensitivity == "high":
        return "MEDIUM"
    return "LOW"

"""
truthlens.ai.gemini_client – thin async client for the Gemini REST API.

Only ``models/{model}:generateContent`` is used.  The client returns raw
text or parsed JSON and raises GeminiError on any failure; deciding how to
degrade is left to the analyzers.
"""
from __future__ import annotations

import asyncio
import base64
import json
import logging
import re
from typing import Any

import httpx

from truthlens.config import get_settings
from truthlens.errors import GeminiConfigurationError, GeminiError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*\n?|\n?```")
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def clean_json_string(text: str) -> str:
    """Strip Markdown code fences the model sometimes wraps JSON in."""
    return _CODE_FENCE.sub("", text).strip()


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def image_part(data: bytes, mime_type: str = "image/jpeg") -> dict[str, Any]:
    return {
        "inlineData": {
            "mimeType": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
        }
    }


class GeminiClient:
    """
    Minimal Gemini client built on httpx.

    Usage::

        client = GeminiClient(api_key="...")
        data = await client.generate_json("gemini-3-flash-preview", "Say hi as JSON")
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        retry_delay_seconds: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = httpx.Timeout(
            timeout_seconds if timeout_seconds is not None
            else settings.gemini_timeout_seconds
        )
        self.max_retries = (
            settings.gemini_max_retries if max_retries is None else max_retries
        )
        self.retry_delay_seconds = retry_delay_seconds
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def generate(
        self,
        model: str,
        contents: str | list[dict[str, Any]],
        *,
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
        json_mode: bool = True,
    ) -> str:
        """
        Call generateContent and return the text of the first candidate.

        Args:
            model               Model name, e.g. "gemini-3-flash-preview".
            contents            A prompt string or a list of content parts.
            system_instruction  Optional persona / system prompt.
            response_schema     Optional OpenAPI-style response schema.
            json_mode           Ask for an application/json response.

        Raises:
            GeminiConfigurationError  No API key configured.
            GeminiError               Transport, HTTP or payload failure.
        """
        if not self.api_key:
            raise GeminiConfigurationError("Gemini API key not configured")

        parts = [text_part(contents)] if isinstance(contents, str) else contents
        body: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if system_instruction:
            body["systemInstruction"] = {"parts": [text_part(system_instruction)]}

        generation_config: dict[str, Any] = {}
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        if response_schema is not None:
            generation_config["responseSchema"] = response_schema
        if generation_config:
            body["generationConfig"] = generation_config

        payload = await self._post(f"/models/{model}:generateContent", body)
        return self._extract_text(payload)

    async def generate_json(self, model: str, contents, **kwargs) -> Any:
        """Like generate(), but parse the answer as JSON."""
        text = await self.generate(model, contents, **kwargs)
        cleaned = clean_json_string(text or "")
        if not cleaned:
            raise GeminiError("Model returned an empty response")
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise GeminiError(f"Model returned invalid JSON: {exc}") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        attempt = 0
        while True:
            try:
                async with httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self.timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.post(
                        path,
                        json=body,
                        headers={"x-goog-api-key": self.api_key},
                    )
            except httpx.HTTPError as exc:
                raise GeminiError(f"Gemini request failed: {exc}") from exc

            if (
                response.status_code in _RETRYABLE_STATUS
                and attempt < self.max_retries
            ):
                attempt += 1
                wait = self.retry_delay_seconds * attempt
                logger.warning(
                    "Gemini returned %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code, wait, attempt, self.max_retries,
                )
                await asyncio.sleep(wait)
                continue

            if response.status_code != 200:
                raise GeminiError(
                    f"Gemini returned HTTP {response.status_code}: "
                    f"{response.text[:200]}"
                )
            try:
                return response.json()
            except ValueError as exc:
                raise GeminiError("Gemini response body is not JSON") from exc

    @staticmethod
    def _extract_text(payload: Any) -> str:
        if not isinstance(payload, dict):
            raise GeminiError("Gemini response body is not a JSON object")
        candidates = payload.get("candidates") or []
        if not isinstance(candidates, list) or not candidates:
            feedback = payload.get("promptFeedback")
            raise GeminiError(f"Gemini returned no candidates ({feedback})")
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise GeminiError("Gemini candidate has no content parts")
        return "".join(
            p["text"] for p in parts
            if isinstance(p, dict) and isinstance(p.get("text"), str)
        )

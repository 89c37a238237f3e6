"""Classify street animal photos and fetch first-aid guidance from an OpenAI-compatible model."""
import asyncio
import json
import logging
import re

import httpx
import openai
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.schemas.triage import ANALYSIS_FIELDS, AnalysisResult
from app.utils.exceptions import TriageUnavailable

logger = logging.getLogger(__name__)

CLASSIFY_PROMPT = """\
Analyze this street animal image. Identify:
1. Animal type
2. Condition (Injured, Abandoned, Healthy)
3. Severity (Low, Medium, High, Critical)
4. Brief description of the distress

Respond ONLY with a JSON object (no additional text):
{
  "animalType": "string",
  "condition": "string",
  "severity": "Low" | "Medium" | "High" | "Critical",
  "description": "string",
  "priorityScore": number from 1 to 10
}
"""

GUIDANCE_PROMPT = (
    "Provide immediate first-aid guidance for a street animal with the following "
    "condition: {condition}. Keep it concise and actionable for a non-professional responder."
)

_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(;[\w=-]+)*;base64,", re.IGNORECASE)


def _mask_secrets(message: str) -> str:
    return re.sub(r"sk-[A-Za-z0-9_-]+", "sk-***", message)


def _image_url(image: str) -> str:
    """Return an ``image_url`` value for a data URI, bare base64 payload or http(s) URL."""
    image = image.strip()
    if image.startswith(("http://", "https://")):
        return image
    match = _DATA_URI.match(image)
    if match:
        mime = match.group("mime") or "image/jpeg"
        return f"data:{mime};base64,{image[match.end():]}"
    return f"data:image/jpeg;base64,{image}"


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [l for l in lines if not l.strip().startswith("```")]
        text = "\n".join(lines)
    return text


def parse_analysis(raw: str) -> AnalysisResult:
    """Decode the model's reply into a normalized AnalysisResult."""
    try:
        parsed = json.loads(_strip_code_fence(raw))
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError and over-long integer literals
        raise TriageUnavailable("Model returned invalid JSON") from e

    if not isinstance(parsed, dict):
        raise TriageUnavailable("Model returned JSON that is not an object")
    if not any(field in parsed for field in ANALYSIS_FIELDS):
        raise TriageUnavailable("Model response has none of the expected fields")

    try:
        return AnalysisResult.model_validate(parsed)
    except PydanticValidationError as e:
        raise TriageUnavailable("Model response failed validation") from e


class TriageClient:
    """Wraps the two model calls. Both are side-effect free and safe to retry."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: float,
        base_url: str | None = None,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout_seconds
        if client is None and api_key:
            client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout_seconds,
                max_retries=0,
            )
        self._client = client

    @classmethod
    def from_settings(cls) -> "TriageClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_seconds=settings.triage_timeout_seconds,
            base_url=settings.openai_base_url,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def _complete(self, **kwargs) -> str:
        if self._client is None:
            logger.error("OPENAI_API_KEY not configured, triage unavailable")
            raise TriageUnavailable("Triage model is not configured")

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(model=self._model, **kwargs),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError, httpx.TimeoutException) as e:
            logger.warning("Triage call timed out after %.1fs", self._timeout)
            raise TriageUnavailable("Triage model timed out") from e
        except (openai.APIError, httpx.HTTPError) as e:
            logger.warning("Triage call failed: %s", _mask_secrets(str(e)))
            raise TriageUnavailable("Triage model request failed") from e

        if not response.choices:
            raise TriageUnavailable("Model returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise TriageUnavailable("Model returned an empty response")
        return content

    async def classify(self, image: str) -> AnalysisResult:
        logger.info("Classifying image with model=%s", self._model)
        raw = await self._complete(
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": CLASSIFY_PROMPT},
                    {"type": "image_url", "image_url": {"url": _image_url(image), "detail": "low"}},
                ],
            }],
            response_format={"type": "json_object"},
            max_tokens=512,
            temperature=0.1,
        )
        logger.debug("Classification raw response (%d chars): %s", len(raw), raw[:500])

        result = parse_analysis(raw)
        logger.info(
            "Classified %s as %s/%s (score=%d)",
            result.animal_type, result.condition, result.severity, result.priority_score,
        )
        return result

    async def guidance(self, condition: str) -> str:
        logger.info("Requesting first-aid guidance for condition=%s", condition)
        text = await self._complete(
            messages=[{"role": "user", "content": GUIDANCE_PROMPT.format(condition=condition)}],
            max_tokens=600,
            temperature=0.3,
        )
        return text.strip()

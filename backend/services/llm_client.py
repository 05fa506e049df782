"""Google Gemini API wrapper with error handling.

Every failure (no key, transport error, empty reply) yields ``None`` so
callers can fall back to deterministic output.
"""

import json
import logging
from typing import Any

from google import genai
from google.genai import types

from config import settings

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


def is_configured() -> bool:
    return bool(settings.gemini_api_key)


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - AI interpretation disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


async def generate(system_prompt: str, user_prompt: str) -> str | None:
    """Send one system+user prompt pair and return the raw reply text."""
    client = get_client()
    if client is None:
        return None

    try:
        response = await client.aio.models.generate_content(
            model=settings.gemini_model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                temperature=settings.llm_temperature,
                max_output_tokens=4096,
                response_mime_type="application/json",
            ),
        )
    except Exception as e:
        logger.error("Gemini API error: %s", e)
        return None

    text = (response.text or "").strip()
    if not text:
        logger.warning("Gemini returned an empty response")
        return None
    return text


def parse_json(text: str | None) -> Any | None:
    """Parse a reply as JSON, tolerating markdown code fences."""
    if not text:
        return None
    text = text.strip()
    # Strip markdown code fences if present
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse Gemini response as JSON: %s", e)
        return None

"""Anthropic API client for resume analysis and the chat assistant.

Provides a singleton client, tolerant JSON extraction for model output and
result caching for resume analyses.
"""

import hashlib
import json
import logging
import re

import anthropic

from ..config import settings
from ..prompts import CHAT_SYSTEM_PROMPT, RESUME_ANALYSIS_SYSTEM_PROMPT, RESUME_ANALYSIS_USER_PROMPT
from .cache import CacheService
from .validation import unparseable_analysis, validate_resume_analysis

logger = logging.getLogger(__name__)

CACHE_TTL = 86400  # 24 hours
MAX_TOKENS = 2000

_DATA_URL = re.compile(r"^data:(?P<media_type>image/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)
_SUPPORTED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

_client: anthropic.Anthropic | None = None


class AIConfigurationError(RuntimeError):
    """Raised when the AI integration is used without an API key."""


def get_client() -> anthropic.Anthropic:
    """Get or create the singleton Anthropic client."""
    global _client
    if not settings.anthropic_api_key:
        raise AIConfigurationError("ANTHROPIC_API_KEY not configured")
    if _client is None:
        _client = anthropic.Anthropic(api_key=settings.anthropic_api_key)
    return _client


def content_hash(resume_text: str, job_description: str) -> str:
    """SHA-256 of resume + job description, used as the cache key."""
    return hashlib.sha256(f"{resume_text}:{job_description}".encode()).hexdigest()


def _strip_markdown_wrapper(text: str) -> str:
    """Remove ```json ... ``` fences."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if "```" in text:
            text = text.rsplit("```", 1)[0]
        text = text.strip()
    return text


def _clean_json_text(text: str) -> str:
    """Fix trailing commas, line comments and NaN/Infinity."""
    text = re.sub(r",\s*([}\]])", r"\1", text)
    text = re.sub(r"^\s*//[^\n]*$", "", text, flags=re.MULTILINE)
    return re.sub(r"-?\b(?:NaN|Infinity)\b", "null", text)


def _extract_and_parse_json(raw_text: str) -> dict:
    """Parse the model's JSON, trying progressively looser extractions."""
    text = _strip_markdown_wrapper(raw_text)
    candidates = [text, _clean_json_text(text)]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(_clean_json_text(text[start : end + 1]))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise json.JSONDecodeError("No JSON object found in AI response", text[:200], 0)


def _response_text(message) -> str:
    return "".join(block.text for block in message.content if getattr(block, "type", "") == "text")


def analyze_resume(resume_text: str, job_description: str, cache: CacheService | None = None) -> dict:
    """Score a resume against a job description.

    Returns ``atsScore``, ``matchingSkills`` and ``areasForImprovement``.
    Unusable model output yields ``atsScore = -1`` plus ``rawResponse``.
    """
    cache_key = f"resume:{settings.ai_model}:{content_hash(resume_text, job_description)[:16]}"
    if cache:
        cached = cache.get_json(cache_key)
        if cached:
            logger.info("Resume analysis served from cache")
            return cached | {"fromCache": True}

    message = get_client().messages.create(
        model=settings.ai_model,
        max_tokens=MAX_TOKENS,
        system=RESUME_ANALYSIS_SYSTEM_PROMPT,
        messages=[
            {
                "role": "user",
                "content": RESUME_ANALYSIS_USER_PROMPT.format(
                    resume_text=resume_text, job_description=job_description
                ),
            }
        ],
    )
    raw_text = _response_text(message)
    if not raw_text:
        raise RuntimeError("AI model returned no content")
    logger.info(
        "Resume analysis done: model=%s tokens_in=%d tokens_out=%d",
        settings.ai_model, message.usage.input_tokens, message.usage.output_tokens,
    )

    try:
        parsed = _extract_and_parse_json(raw_text)
    except json.JSONDecodeError:
        logger.warning("Failed to parse AI analysis as JSON (len=%d, first_100=%r)", len(raw_text), raw_text[:100])
        return unparseable_analysis(raw_text, "Failed to parse AI analysis. Please review raw output.")

    result = validate_resume_analysis(parsed, raw_text)
    if cache and "rawResponse" not in result:
        cache.set_json(cache_key, result, CACHE_TTL)
    return result


def _image_block(data_url: str) -> dict | None:
    match = _DATA_URL.match(data_url.strip())
    if not match:
        return None
    media_type = match["media_type"].lower()
    if media_type == "image/jpg":
        media_type = "image/jpeg"
    if media_type not in _SUPPORTED_IMAGE_TYPES:
        return None
    return {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": match["data"]}}


def build_chat_messages(messages: list[dict]) -> list[dict]:
    """Convert client chat history into Anthropic message format.

    Consecutive messages from the same role are merged and leading assistant
    turns dropped, since the API expects alternating turns starting with user.
    """
    converted: list[dict] = []
    for msg in messages:
        role = "user" if msg.get("role") == "user" else "assistant"
        blocks: list[dict] = []
        image_url = msg.get("image_url") or msg.get("imageUrl")
        if image_url and role == "user":
            image = _image_block(image_url)
            if image:
                blocks.append(image)
            else:
                logger.warning("Ignoring unsupported chat image attachment")
        text = (msg.get("content") or "").strip()
        if not text and blocks:
            text = "What is in this image?"
        if text:
            blocks.append({"type": "text", "text": text})
        if not blocks:
            continue
        if converted and converted[-1]["role"] == role:
            converted[-1]["content"].extend(blocks)
        elif converted or role == "user":
            converted.append({"role": role, "content": blocks})
    return converted


def chat(messages: list[dict]) -> str:
    """Send the conversation to the model and return its reply text."""
    payload = build_chat_messages(messages)
    if not payload:
        raise ValueError("Conversation has no user message")

    message = get_client().messages.create(
        model=settings.ai_model,
        max_tokens=MAX_TOKENS,
        system=CHAT_SYSTEM_PROMPT,
        messages=payload,
    )
    logger.info(
        "Chat reply: model=%s tokens_in=%d tokens_out=%d",
        settings.ai_model, message.usage.input_tokens, message.usage.output_tokens,
    )
    return _response_text(message) or "Sorry, I could not generate a response."

# =============================================================================
# core/services/ai_service.py - OpenAI Content Generation
# =============================================================================
# Wraps the OpenAI API for:
# - Blog pipeline steps (topic, outline, article, SEO, summary)
# - Lab drafting from a GitHub README
# - Voicemail transcription (Whisper)
# =============================================================================

import io
import json
import logging
from typing import Any

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from app.config import settings
from app.exceptions import UpstreamServiceError
from core.models.lab import LabSections

logger = logging.getLogger(__name__)

# Lazy-loaded OpenAI client
_client = None

SYSTEM_PROMPT = (
    "You are a content writer for Novique AI, a consultancy that helps small "
    "businesses adopt practical AI and automation. Write in a clear, friendly, "
    "expert voice for non-technical business owners."
)

SUMMARY_MAX_LENGTH = 300


def get_openai_client() -> OpenAI:
    """Get or create OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        _client = OpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


def _parse_json(text: str) -> dict[str, Any]:
    """Parse a JSON object, tolerating ```json fences around it."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.startswith("json"):
            cleaned = cleaned[4:]
    try:
        result = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning(f"Model returned invalid JSON: {text[:200]}")
        return {}
    return result if isinstance(result, dict) else {}


class AIService:
    """Prompt helpers over the chat and audio APIs."""

    @staticmethod
    def complete(
        prompt: str,
        system: str = SYSTEM_PROMPT,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        """
        Run a single chat completion and return the message text.

        Raises:
            UpstreamServiceError: If the OpenAI call fails
        """
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = get_openai_client().chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamServiceError("OpenAI", str(e))

        return (response.choices[0].message.content or "").strip()

    # -------------------------------------------------------------------------
    # Blog pipeline
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_topic(keywords: list[str], research_summary: str = "") -> str:
        prompt = (
            "Suggest one specific, timely blog post topic for small business owners "
            f"about: {', '.join(keywords)}.\n"
        )
        if research_summary:
            prompt += f"\nRecent news for context:\n{research_summary}\n"
        prompt += "\nRespond with the topic only, no quotes."
        return AIService.complete(prompt, temperature=0.8, max_tokens=100).strip('"')

    @staticmethod
    def generate_outline(topic: str, research_summary: str = "") -> str:
        prompt = f"Create a markdown outline (H2/H3 headings with bullets) for a blog post titled: {topic}\n"
        if research_summary:
            prompt += f"\nUse these research notes where relevant:\n{research_summary}\n"
        return AIService.complete(prompt, temperature=0.6, max_tokens=800)

    @staticmethod
    def generate_content(topic: str, outline: str, keywords: list[str] | None = None) -> str:
        """Full article body in markdown."""
        prompt = (
            f"Write a 1200-1500 word blog post in markdown titled '{topic}'.\n"
            f"Follow this outline:\n{outline}\n"
            "Do not repeat the title as an H1. End with a short call to action "
            "inviting readers to book a free consultation with Novique AI."
        )
        if keywords:
            prompt += f"\nNaturally include these keywords: {', '.join(keywords)}."
        return AIService.complete(prompt, max_tokens=3500)

    @staticmethod
    def generate_seo(topic: str, content: str) -> dict[str, Any]:
        """
        SEO metadata for an article.

        Returns:
            {"title", "metaDescription", "tags"}; falls back to the topic
            when the model response can't be parsed
        """
        prompt = (
            "Return a JSON object with keys title (max 70 chars), "
            "metaDescription (max 160 chars) and tags (3-6 lowercase strings) "
            f"for this blog post about '{topic}':\n\n{content[:4000]}"
        )
        data = _parse_json(AIService.complete(prompt, temperature=0.3, max_tokens=400, json_mode=True))

        tags = data.get("tags")
        return {
            "title": data.get("title") or topic,
            "metaDescription": (data.get("metaDescription") or "")[:160],
            "tags": [str(tag) for tag in tags] if isinstance(tags, list) else [],
        }

    @staticmethod
    def generate_summary(content: str) -> str:
        prompt = f"Summarize this blog post in 2-3 sentences (under 300 characters):\n\n{content[:4000]}"
        return AIService.complete(prompt, temperature=0.3, max_tokens=200)[:SUMMARY_MAX_LENGTH]

    # -------------------------------------------------------------------------
    # Labs
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_lab_sections(repo: dict[str, Any], readme: str) -> LabSections:
        """
        Draft lab page sections from a repository's metadata and README.

        Returns:
            LabSections with markdown section bodies

        Raises:
            UpstreamServiceError: The draft lacks a title or overview
        """
        prompt = (
            "You are documenting an open-source automation project as a case study. "
            "Return a JSON object with keys: title, overview, architecture, "
            "setup_deployment, troubleshooting, business_use (markdown strings), "
            "meta_description (max 160 chars) and tags (list of strings).\n\n"
            f"Repository: {repo.get('full_name')}\n"
            f"Description: {repo.get('description') or 'n/a'}\n"
            f"Language: {repo.get('language') or 'n/a'}\n"
            f"Topics: {', '.join(repo.get('topics') or [])}\n\n"
            f"README:\n{readme[:8000]}"
        )
        data = _parse_json(AIService.complete(prompt, temperature=0.4, max_tokens=3500, json_mode=True))
        try:
            return LabSections.model_validate(data)
        except ValidationError:
            raise UpstreamServiceError("OpenAI", "Lab draft is missing a title or overview")

    # -------------------------------------------------------------------------
    # Audio
    # -------------------------------------------------------------------------

    @staticmethod
    def transcribe(audio: bytes, filename: str = "voicemail.mp3") -> str:
        """
        Transcribe English audio with Whisper.

        Raises:
            UpstreamServiceError: If the OpenAI call fails
        """
        buffer = io.BytesIO(audio)
        buffer.name = filename

        try:
            result = get_openai_client().audio.transcriptions.create(
                model=settings.OPENAI_TRANSCRIPTION_MODEL,
                file=buffer,
                language="en",
            )
        except OpenAIError as e:
            logger.error(f"Transcription failed: {e}")
            raise UpstreamServiceError("OpenAI", str(e))

        return result.text.strip()

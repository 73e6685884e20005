# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - Timestamp helpers for Supabase payloads
# - Slug generation and text previews
# - Markdown to HTML conversion for generated content
# =============================================================================

from datetime import datetime, timezone

import markdown as markdown_lib
from slugify import slugify as _slugify


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (what Supabase expects)."""
    return utc_now().isoformat()


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse a Supabase/ISO timestamp, tolerating a trailing 'Z'.

    Returns None for empty or unparseable values.
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


# =============================================================================
# Text Utilities
# =============================================================================

def slugify(text: str, max_length: int = 100) -> str:
    """
    Build a URL slug from a title.

    Example:
        slugify("AI for Small Business: A Guide!")  # "ai-for-small-business-a-guide"
    """
    return _slugify(text, max_length=max_length, word_boundary=True)


def truncate(text: str | None, length: int, suffix: str = "...") -> str:
    """
    Shorten text to `length` characters, appending `suffix` only when cut.

    Example:
        truncate("hello world", 5)  # "hello..."
    """
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length] + suffix


def markdown_to_html(content: str) -> str:
    """Render markdown (generated posts and labs) to HTML."""
    return markdown_lib.markdown(content, extensions=["extra", "sane_lists"])



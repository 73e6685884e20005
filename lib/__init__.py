# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - roi.py: ROI calculator, plan tiers and pricing
# - utils.py: Timestamps, slugs, text previews, markdown rendering
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import markdown_to_html, slugify, truncate, utc_now_iso

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "markdown_to_html",
    "slugify",
    "truncate",
    "utc_now_iso",
]

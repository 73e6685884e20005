# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides the lookups shared by several services:
# - Single-row fetches by id / unique column (blog slugs, lab slugs)
# - Profile lookups for the authorization layer
# - Exact row counts for dashboards and the Jarvis summary
#
# The client uses the service_role key, so every caller is responsible for
# its own authorization check before touching data.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and an actionable suggestion alongside the message.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        post = SupabaseClient.fetch_one("blog_posts", "slug", "hello-world")
        unread = SupabaseClient.count_rows(
            "communications",
            lambda q: q.eq("type", "sms").eq("status", "unread"),
        )
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Single Rows
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(
        cls,
        table: str,
        column: str,
        value: Any,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row where `column == value`.

        Args:
            table: Table name
            column: Column to match (usually "id" or "slug")
            value: Value to match; UUIDs are converted to strings
            columns: PostgREST select expression

        Returns:
            Row dict, or None if no row matches

        Raises:
            SupabaseClientError: If the query fails for another reason
        """
        client = cls.get_client()
        if isinstance(value, UUID):
            value = cls._normalize_uuid(value)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if "PGRST116" in str(e):  # PostgREST code for no rows
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code="FETCH_FAILED",
                details={"table": table, column: str(value)}
            )

    @classmethod
    def fetch_by_id(cls, table: str, row_id: str | UUID, columns: str = "*") -> dict[str, Any] | None:
        """Fetch a single row by primary key."""
        return cls.fetch_one(table, "id", row_id, columns=columns)

    @classmethod
    def exists(cls, table: str, column: str, value: Any) -> bool:
        """Return True when at least one row has `column == value`."""
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select("id")
                .eq(column, value)
                .limit(1)
                .execute()
            )
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to check {table}.{column}: {e}",
                code="FETCH_FAILED",
                details={"table": table, column: str(value)}
            )

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    @classmethod
    def count_rows(
        cls,
        table: str,
        apply_filters: Callable[[Any], Any] | None = None,
    ) -> int:
        """
        Count rows in a table with an optional filter callback.

        Args:
            table: Table name
            apply_filters: Receives the query builder and returns it with
                filters applied, e.g. `lambda q: q.eq("status", "unread")`

        Returns:
            Exact row count (0 when PostgREST reports none)
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id", count="exact")
            if apply_filters is not None:
                query = apply_filters(query)
            response = query.limit(1).execute()
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table}
            )

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the profile row for an auth user.

        Returns:
            Profile dict with id, email, full_name, avatar_url, role,
            is_active, created_at, updated_at; None if missing
        """
        return cls.fetch_one(
            "profiles",
            "id",
            user_id,
            columns="id, email, full_name, avatar_url, role, is_active, created_at, updated_at",
        )

    @classmethod
    def fetch_admin_profile(cls, preferred_email: str | None = None) -> dict[str, Any] | None:
        """
        Find an admin profile to attribute system-generated content to.

        Tries `preferred_email` first, then any admin.
        """
        client = cls.get_client()

        try:
            if preferred_email:
                response = (
                    client.table("profiles")
                    .select("id, email, full_name")
                    .eq("email", preferred_email)
                    .eq("role", "admin")
                    .limit(1)
                    .execute()
                )
                if response.data:
                    return response.data[0]

            response = (
                client.table("profiles")
                .select("id, email, full_name")
                .eq("role", "admin")
                .limit(1)
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch admin profile: {e}",
                code="FETCH_FAILED",
                suggestion="Make sure at least one profile has role 'admin'"
            )

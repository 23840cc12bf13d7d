# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for the Supabase database reads the
# gate depends on. It implements the singleton pattern to reuse a single
# client connection and provides specialized methods for fetching:
# - User rows (onboarding flag, profile fields)
# - A cheap connectivity probe for readiness checks
#
# Every read is a single round trip; nothing is cached here.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   row = SupabaseClient.fetch_user(user_id, columns="id, is_onboarded")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError, normalize_user_id

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

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
        row = SupabaseClient.fetch_user("550e8400-...", columns="is_onboarded")
        onboarded = bool(row and row.get("is_onboarded"))
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

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
    def reset(cls) -> None:
        """Drop the cached client (used by tests and on credential rotation)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user(
        cls,
        user_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single user row by ID.

        Uses limit(1) rather than single() so a missing row is an empty
        result instead of a PostgREST error.

        Args:
            user_id: The user identifier
            columns: Comma-separated column list to select

        Returns:
            User dict with the selected columns, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = normalize_user_id(user_id)

        try:
            response = (
                client.table(settings.USERS_TABLE)
                .select(columns)
                .eq("id", user_id_str)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch user: {e}",
                code="FETCH_USER_FAILED",
                suggestion=f"Check that the {settings.USERS_TABLE} table exists and is readable",
                details={"user_id": user_id_str, "columns": columns}
            )

        rows = response.data or []
        if not rows:
            logger.debug(f"No user row for {user_id_str}")
            return None
        return rows[0]

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @classmethod
    def check_connection(cls) -> None:
        """
        Run the cheapest possible query against the users table.

        Raises:
            SupabaseClientError: If the database is unreachable
        """
        client = cls.get_client()

        try:
            client.table(settings.USERS_TABLE).select("id").limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Database connectivity check failed: {e}",
                code="CONNECTION_CHECK_FAILED",
                suggestion="Run the database migrations and verify network access to Supabase",
            )

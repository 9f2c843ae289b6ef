# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides small helpers shared by every service:
# - Single-row lookups that treat "no rows" as None
# - Role checks against the user_roles table
# - Recognising constraint-violation errors by their message
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_one("profiles", "email", "a@b.com")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"

# Fragments Supabase/Postgres use when a unique constraint is hit
DUPLICATE_MARKERS = ("duplicate", "already been registered", "already exists")


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion so callers can surface an actionable
    message to the operator.
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


def is_no_rows_error(exc: Exception) -> bool:
    """True if the exception is PostgREST's "no rows returned" error."""
    return NO_ROWS_CODE in str(exc)


def is_duplicate_error(exc: Exception | str) -> bool:
    """
    True if the error text looks like a unique-constraint violation.

    Supabase surfaces these as free-form strings, so this is a substring
    match, not a structured check.
    """
    text = str(exc).lower()
    return any(marker in text for marker in DUPLICATE_MARKERS)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Admin checks therefore happen in the API layer.

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
        """Drop the cached client (used by tests)."""
        cls._instance = None

    @staticmethod
    def user_client(access_token: str) -> Client:
        """
        Create a client that acts as the signed-in user.

        Needed for database functions that read auth.uid(). Not cached,
        since each request carries its own token.
        """
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        client.postgrest.auth(access_token)
        return client

    # -------------------------------------------------------------------------
    # Generic Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(
        cls,
        table: str,
        column: str,
        value: str | UUID | int,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row where `column = value`.

        Returns:
            Row dict, or None if no row matches

        Raises:
            SupabaseClientError: If the query fails for another reason
        """
        client = cls.get_client()
        lookup = normalize_uuid(value) if isinstance(value, UUID) else value

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, lookup)
                .maybe_single()
                .execute()
            )
            # maybe_single() returns None instead of a response on no rows
            if response is None:
                return None
            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table is accessible",
                details={"table": table, column: str(lookup)}
            )

    # -------------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_roles(cls, user_id: str | UUID) -> list[str]:
        """Return every role stored for a user (usually zero or one)."""
        client = cls.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table("user_roles")
                .select("role")
                .eq("user_id", user_id_str)
                .execute()
            )
            return [row["role"] for row in (response.data or [])]

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch roles: {e}",
                code="FETCH_ROLES_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def has_role(cls, user_id: str | UUID, role: str) -> bool:
        """Check whether a user holds a role."""
        return role in cls.fetch_roles(user_id)

    # -------------------------------------------------------------------------
    # Remote Procedures
    # -------------------------------------------------------------------------

    @classmethod
    def call_rpc(cls, function: str, params: dict[str, Any]) -> Any:
        """
        Call a Postgres function exposed through PostgREST.

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(function, params).execute()
            return response.data

        except Exception as e:
            raise SupabaseClientError(
                message=f"RPC {function} failed: {e}",
                code="RPC_FAILED",
                suggestion=f"Check that the {function} function exists and its arguments are valid",
                details={"function": function}
            )

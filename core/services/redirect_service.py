# =============================================================================
# core/services/redirect_service.py - URL Redirect Management
# =============================================================================
# CRUD for the redirections table plus the lookup the web front end uses to
# turn an old path into its replacement.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DuplicateRedirectError, InvalidRequestError, ResourceNotFoundError
from core.models.redirects import RedirectionCreate, RedirectionUpdate
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_duplicate_error
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "redirections"


class RedirectService:
    """Service for admin-managed redirects."""

    @staticmethod
    def list_redirects() -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = client.table(TABLE).select("*").order("created_at", desc=True).execute()
        return response.data or []

    @staticmethod
    def create_redirect(redirect: RedirectionCreate) -> dict[str, Any]:
        """
        Store a new redirect.

        Raises:
            DuplicateRedirectError: If the source path already has one
        """
        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(redirect.model_dump()).execute()
        except Exception as e:
            if is_duplicate_error(e):
                raise DuplicateRedirectError(redirect.source_url)
            raise SupabaseClientError(
                message=f"Failed to create redirect: {e}",
                code="CREATE_REDIRECT_FAILED",
                details={"source_url": redirect.source_url},
            )

        created = response.data[0]
        logger.info(f"Created redirect {redirect.source_url} -> {redirect.target_url} ({redirect.status_code})")
        return created

    @staticmethod
    def update_redirect(redirect_id: str | UUID, changes: RedirectionUpdate) -> dict[str, Any]:
        """
        Apply a partial update.

        Raises:
            InvalidRequestError: If no fields were given
            ResourceNotFoundError: If the redirect doesn't exist
            DuplicateRedirectError: If the new source path is taken
        """
        redirect_id_str = normalize_uuid(redirect_id)
        data = changes.model_dump(exclude_none=True)
        if not data:
            raise InvalidRequestError("No fields to update")
        data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(data).eq("id", redirect_id_str).execute()
        except Exception as e:
            if is_duplicate_error(e):
                raise DuplicateRedirectError(data.get("source_url", ""))
            raise SupabaseClientError(
                message=f"Failed to update redirect: {e}",
                code="UPDATE_REDIRECT_FAILED",
                details={"redirect_id": redirect_id_str},
            )

        if not response.data:
            raise ResourceNotFoundError("redirect", redirect_id_str)
        return response.data[0]

    @staticmethod
    def delete_redirect(redirect_id: str | UUID) -> None:
        redirect_id_str = normalize_uuid(redirect_id)
        client = SupabaseClient.get_client()
        response = client.table(TABLE).delete().eq("id", redirect_id_str).execute()
        if not response.data:
            raise ResourceNotFoundError("redirect", redirect_id_str)
        logger.info(f"Deleted redirect {redirect_id_str}")

    @staticmethod
    def resolve(path: str) -> dict[str, Any] | None:
        """Return the active redirect for an exact source path, if any."""
        client = SupabaseClient.get_client()
        response = (
            client.table(TABLE)
            .select("target_url, status_code")
            .eq("source_url", path)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

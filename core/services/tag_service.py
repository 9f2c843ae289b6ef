# =============================================================================
# core/services/tag_service.py - Tags and Email Sequence Enrolment
# =============================================================================
# Tags mark users (or bare email addresses) for CRM segmentation. Adding a
# tag can start email sequences whose trigger is that tag.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any

from app.exceptions import InvalidRequestError, ResourceNotFoundError
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_email, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_TAG_COLOR = "#6366F1"


class TagService:
    """Service for tag assignment and sequence enrolment."""

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    @staticmethod
    def find_tag_id(name: str) -> str | None:
        tag = SupabaseClient.fetch_one("email_tags", "name", name, columns="id")
        return tag["id"] if tag else None

    @staticmethod
    def find_or_create_tag(name: str, description: str | None = None, color: str = DEFAULT_TAG_COLOR) -> str:
        """Return the ID of the tag called `name`, creating it if needed."""
        tag_id = TagService.find_tag_id(name)
        if tag_id:
            return tag_id

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("email_tags")
                .insert({"name": name, "description": description, "color": color})
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create tag {name}: {e}",
                code="CREATE_TAG_FAILED",
                details={"name": name},
            )

        tag_id = response.data[0]["id"]
        logger.info(f"Created tag '{name}' ({tag_id})")
        return tag_id

    @staticmethod
    def assign_tag(
        user_id: str | None = None,
        email: str | None = None,
        tag_id: str | None = None,
        tag_name: str | None = None,
        source: str = "manual",
        source_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Tag a user or email and start any sequences the tag triggers.

        Assigning a tag twice is a no-op.

        Returns:
            {"success": True, "tag_id": ..., "sequences_enrolled": n}

        Raises:
            InvalidRequestError: If the tag or the target is missing
            ResourceNotFoundError: If `tag_name` doesn't match a tag
        """
        if not tag_id and not tag_name:
            raise InvalidRequestError("Either tagId or tagName is required")
        if not user_id and not email:
            raise InvalidRequestError("Either userId or email is required")

        email = normalize_email(email) or None

        if not tag_id:
            tag_id = TagService.find_tag_id(tag_name)
            if not tag_id:
                raise ResourceNotFoundError("tag", tag_name)

        data: dict[str, Any] = {
            "tag_id": tag_id,
            "source": source or "manual",
            "source_id": source_id,
            "assigned_at": utc_now_iso(),
        }
        if user_id:
            data["user_id"] = user_id
        if email:
            data["email"] = email

        client = SupabaseClient.get_client()
        try:
            (
                client.table("user_tags")
                .upsert(
                    data,
                    on_conflict="user_id,tag_id" if user_id else "email,tag_id",
                    ignore_duplicates=True,
                )
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to assign tag: {e}",
                code="ASSIGN_TAG_FAILED",
                details={"tag_id": tag_id},
            )

        logger.info(f"Tag {tag_id} assigned to {user_id or email}")
        enrolled = TagService.enroll_for_tag(tag_id, user_id=user_id, email=email)
        return {"success": True, "tag_id": tag_id, "sequences_enrolled": enrolled}

    # -------------------------------------------------------------------------
    # Sequences
    # -------------------------------------------------------------------------

    @staticmethod
    def enroll_for_tag(tag_id: str, user_id: str | None = None, email: str | None = None) -> int:
        """
        Enrol in active tag_added sequences configured for this tag.

        Skips sequences the user is already in, unless that enrolment has
        completed. Returns the number of new enrolments.
        """
        client = SupabaseClient.get_client()
        response = (
            client.table("email_sequences")
            .select("id")
            .eq("trigger_type", "tag_added")
            .eq("is_active", True)
            .contains("trigger_config", {"tag_id": tag_id})
            .execute()
        )
        sequences = response.data or []
        if not sequences:
            return 0

        logger.info(f"Found {len(sequences)} sequences triggered by tag {tag_id}")
        contact_id = TagService._contact_id(email)

        enrolled = 0
        for sequence in sequences:
            existing = TagService._existing_enrollment(sequence["id"], user_id, email)
            if existing and existing.get("status") != "completed":
                continue
            TagService.enroll(
                sequence["id"],
                user_id=user_id,
                email=email,
                contact_id=contact_id,
                metadata={"source": "tag_added", "tag_id": tag_id},
            )
            enrolled += 1
        return enrolled

    @staticmethod
    def enroll_for_purchase(user_id: str, email: str, metadata: dict[str, Any]) -> int:
        """Enrol a buyer in every active purchase-triggered sequence."""
        client = SupabaseClient.get_client()
        response = (
            client.table("email_sequences")
            .select("id")
            .eq("trigger_type", "purchase")
            .eq("is_active", True)
            .execute()
        )
        sequences = response.data or []
        contact_id = TagService._contact_id(email)

        for sequence in sequences:
            TagService.enroll(
                sequence["id"],
                user_id=user_id,
                email=email,
                contact_id=contact_id,
                metadata={"source": "purchase", **metadata},
            )
        return len(sequences)

    @staticmethod
    def enroll(
        sequence_id: str,
        user_id: str | None,
        email: str | None,
        contact_id: str | None,
        metadata: dict[str, Any],
    ) -> None:
        """Start a sequence; the first email is due after the first step's delay."""
        client = SupabaseClient.get_client()
        delay_minutes = TagService.first_step_delay(sequence_id)
        next_email_at = (utc_now() + timedelta(minutes=delay_minutes)).isoformat()

        client.table("email_sequence_enrollments").insert({
            "sequence_id": sequence_id,
            "contact_id": contact_id,
            "user_id": user_id,
            "email": email or "",
            "status": "active",
            "current_step": 0,
            "next_email_at": next_email_at,
            "metadata": metadata,
        }).execute()
        logger.info(f"Enrolled {user_id or email} in sequence {sequence_id}")

    @staticmethod
    def first_step_delay(sequence_id: str) -> int:
        client = SupabaseClient.get_client()
        response = (
            client.table("email_sequence_steps")
            .select("delay_minutes")
            .eq("sequence_id", sequence_id)
            .order("step_order")
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return int(rows[0].get("delay_minutes") or 0) if rows else 0

    @staticmethod
    def _contact_id(email: str | None) -> str | None:
        if not email:
            return None
        contact = SupabaseClient.fetch_one("email_contacts", "email", email, columns="id")
        return contact["id"] if contact else None

    @staticmethod
    def _existing_enrollment(sequence_id: str, user_id: str | None, email: str | None) -> dict[str, Any] | None:
        client = SupabaseClient.get_client()
        query = (
            client.table("email_sequence_enrollments")
            .select("id, status")
            .eq("sequence_id", sequence_id)
        )
        if user_id and email:
            query = query.or_(f"user_id.eq.{user_id},email.eq.{email}")
        elif user_id:
            query = query.eq("user_id", user_id)
        else:
            query = query.eq("email", email)

        rows = query.order("created_at", desc=True).limit(1).execute().data or []
        return rows[0] if rows else None

# =============================================================================
# core/services/user_service.py - Privileged User Operations
# =============================================================================
# Admin-only account management that needs the service-role key:
# - Creating users with a confirmed email
# - Replacing a user's role
# - Resetting passwords
# - Deleting an account with all of its media and owned rows
#
# None of these flows run in a transaction. A failure partway through
# leaves earlier writes in place and is reported to the caller.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    DuplicateEmailError,
    InvalidRequestError,
    MusicMethodException,
    SelfDeletionError,
)
from core.models.users import UserRole
from lib.object_storage import ObjectStorage, ObjectStorageError
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_duplicate_error
from lib.utils import normalize_email, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Tables cleared by user_id during account deletion, in this order.
# profiles and user_roles are removed afterwards since other rows point at them.
USER_OWNED_TABLES = [
    "appreciations",
    "comments",
    "messages",
    "posts",
    "friendships",
    "user_blocks",
    "group_members",
    "group_invites",
    "group_join_requests",
    "group_posts",
    "group_post_comments",
    "group_poll_votes",
    "notifications",
    "profile_gallery",
    "profile_projects",
    "profile_sections",
    "profile_pages",
    "extended_profiles",
    "pinned_audio",
    "events",
    "expenses",
    "invoices",
    "contracts",
    "other_income",
    "income_proof_shares",
    "course_enrollments",
    "email_logs",
    "email_templates",
    "availability_templates",
    "calendar_connections",
    "lesson_bookings",
    "lesson_conversations",
    "lesson_messages",
    "cart_abandonment",
    "tech_specs",
    "account_deletion_requests",
    "media_library",
    "play_events",
    "credit_transactions",
    "user_credits",
    "referrals",
    "username_history",
    "user_tags",
    "digital_products",
    "digital_product_purchases",
    "artist_dashboard_access",
    "connected_account_subscriptions",
]

# (table, owner column, url columns) holding public URLs of uploaded media
MEDIA_URL_SOURCES = [
    ("profile_gallery", "user_id", ["image_url"]),
    ("posts", "user_id", ["image_url"]),
    ("group_posts", "user_id", ["media_url"]),
    ("pinned_audio", "user_id", ["audio_url", "cover_image_url"]),
]


class UserService:
    """
    Service for admin user management.

    Every method assumes the caller has already been checked for the admin
    role (see app.auth.require_admin).
    """

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    @staticmethod
    def create_user(
        email: str,
        password: str,
        full_name: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> dict[str, Any]:
        """
        Create a confirmed account.

        Args:
            email: Email address (normalised before use)
            password: Initial password
            full_name: Stored in auth user metadata
            role: ADMIN grants the admin role after creation

        Returns:
            {"id": ..., "email": ...}

        Raises:
            DuplicateEmailError: If a profile or auth user already has the email
        """
        email = normalize_email(email)
        client = SupabaseClient.get_client()

        if SupabaseClient.fetch_one("profiles", "email", email, columns="id"):
            raise DuplicateEmailError(email)

        logger.info(f"Creating user: {email} with role: {role.value}")

        try:
            response = client.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"full_name": full_name or ""},
            })
        except Exception as e:
            if is_duplicate_error(e):
                raise DuplicateEmailError(email)
            logger.error(f"Failed to create auth user {email}: {e}")
            raise SupabaseClientError(
                message=f"Failed to create user: {e}",
                code="CREATE_USER_FAILED",
                details={"email": email},
            )

        user = response.user
        user_id = str(user.id)
        logger.info(f"User created: {user_id}")

        # Admin-created accounts skip the verification email
        try:
            (
                client.table("profiles")
                .update({"email_verified": True, "email_verified_at": utc_now_iso()})
                .eq("id", user_id)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not mark email verified for {user_id}: {e}")

        if role == UserRole.ADMIN:
            UserService.set_role(user_id, UserRole.ADMIN)

        return {"id": user_id, "email": user.email or email}

    # -------------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------------

    @staticmethod
    def get_role(user_id: str | UUID) -> UserRole:
        """Return the user's role; users without a role row are USER."""
        roles = SupabaseClient.fetch_roles(user_id)
        for role in (UserRole.ADMIN, UserRole.MODERATOR, UserRole.USER):
            if role.value in roles:
                return role
        return UserRole.USER

    @staticmethod
    def set_role(user_id: str | UUID, role: UserRole) -> UserRole:
        """
        Replace a user's role.

        The new role is written first and other role rows are removed after,
        so a failure between the two steps leaves the user with an extra
        role rather than none.

        Raises:
            SupabaseClientError: If either write fails
        """
        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            (
                client.table("user_roles")
                .upsert({"user_id": user_id_str, "role": role.value}, on_conflict="user_id,role")
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to set role {role.value} for {user_id_str}: {e}")
            raise SupabaseClientError(
                message=f"Failed to set role: {e}",
                code="SET_ROLE_FAILED",
                details={"user_id": user_id_str, "role": role.value},
            )

        try:
            (
                client.table("user_roles")
                .delete()
                .eq("user_id", user_id_str)
                .neq("role", role.value)
                .execute()
            )
        except Exception as e:
            logger.error(f"Role {role.value} written but old roles not removed for {user_id_str}: {e}")
            raise SupabaseClientError(
                message=f"New role saved but previous roles could not be removed: {e}",
                code="ROLE_CLEANUP_FAILED",
                suggestion="Retry the role change to remove the stale role",
                details={"user_id": user_id_str, "role": role.value},
            )

        logger.info(f"Role set to {role.value} for user: {user_id_str}")
        return role

    # -------------------------------------------------------------------------
    # Passwords
    # -------------------------------------------------------------------------

    @staticmethod
    def reset_password(user_id: str | UUID, new_password: str) -> None:
        """
        Set a new password for a user.

        Raises:
            InvalidRequestError: If the password is too short
            SupabaseClientError: If the auth update fails
        """
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidRequestError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                suggestion="Choose a longer password",
            )

        user_id_str = normalize_uuid(user_id)
        client = SupabaseClient.get_client()

        try:
            client.auth.admin.update_user_by_id(user_id_str, {"password": new_password})
        except Exception as e:
            logger.error(f"Failed to reset password for {user_id_str}: {e}")
            raise SupabaseClientError(
                message=f"Failed to reset password: {e}",
                code="PASSWORD_RESET_FAILED",
                details={"user_id": user_id_str},
            )

        logger.info(f"Password reset for user: {user_id_str}")

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    @staticmethod
    def delete_user(requesting_admin_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Delete an account and everything it owns.

        Order:
        1. Uploaded media in object storage (known URLs, then the user's folder)
        2. Booking rows (children before requests)
        3. Every table in USER_OWNED_TABLES
        4. profiles, user_roles, conversations the user takes part in
        5. The auth user

        Failures in steps 1-4 are logged and skipped. Step 5 must succeed.

        Returns:
            {"success", "user_id", "media_deleted", "failed_tables"}

        Raises:
            SelfDeletionError: If an admin targets their own account
            MusicMethodException: If the auth user can't be deleted
        """
        admin_id = normalize_uuid(requesting_admin_id)
        target_id = normalize_uuid(user_id)

        if admin_id == target_id:
            raise SelfDeletionError()

        logger.info(f"Admin {admin_id} deleting user {target_id}")
        client = SupabaseClient.get_client()

        media_deleted = UserService._delete_user_media(target_id)
        failed_tables = UserService._delete_user_rows(target_id)

        try:
            client.auth.admin.delete_user(target_id)
        except Exception as e:
            logger.error(f"Failed to delete auth user {target_id}: {e}")
            raise MusicMethodException(
                message="Failed to delete auth user",
                code="AUTH_DELETE_FAILED",
                status_code=500,
                suggestion="The user's data was removed; retry to remove the login",
                details={"user_id": target_id, "error": str(e)},
            )

        logger.info(f"User {target_id} deleted successfully by admin {admin_id}")
        return {
            "success": True,
            "user_id": target_id,
            "media_deleted": media_deleted,
            "failed_tables": failed_tables,
        }

    @staticmethod
    def collect_media_keys(user_id: str) -> list[str]:
        """
        Gather object keys for every uploaded file referenced by the user's rows.

        URLs outside the user bucket are ignored. Keys are de-duplicated and
        keep discovery order.
        """
        client = SupabaseClient.get_client()
        keys: list[str] = []

        def add_url(url: str | None) -> None:
            key = ObjectStorage.key_from_public_url(url)
            if key and key not in keys:
                keys.append(key)

        profile = SupabaseClient.fetch_one("profiles", "id", user_id, columns="avatar_url, cover_image_url")
        if profile:
            add_url(profile.get("avatar_url"))
            add_url(profile.get("cover_image_url"))

        for table, owner_column, url_columns in MEDIA_URL_SOURCES:
            rows = UserService._select_owned(table, owner_column, user_id, ", ".join(url_columns))
            for row in rows:
                for column in url_columns:
                    add_url(row.get(column))

        for message in UserService._select_owned("messages", "sender_id", user_id, "metadata"):
            add_url((message.get("metadata") or {}).get("mediaUrl"))

        for item in UserService._select_owned("media_library", "user_id", user_id, "id, metadata"):
            object_key = (item.get("metadata") or {}).get("object_key")
            if object_key and object_key not in keys:
                keys.append(object_key)

        return keys

    @staticmethod
    def _select_owned(table: str, owner_column: str, user_id: str, columns: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = client.table(table).select(columns).eq(owner_column, user_id).execute()
            return response.data or []
        except Exception as e:
            logger.warning(f"Could not read {table} for media cleanup: {e}")
            return []

    @staticmethod
    def _delete_user_media(user_id: str) -> int:
        if not ObjectStorage.is_configured():
            logger.warning("Object storage not configured, skipping media deletion")
            return 0

        deleted = 0
        for key in UserService.collect_media_keys(user_id):
            if ObjectStorage.delete_object(key):
                deleted += 1

        # Anything left in the user's folder
        try:
            deleted += ObjectStorage.delete_prefix(f"{user_id}/")
        except ObjectStorageError as e:
            logger.error(f"Error cleaning up user folder: {e}")

        logger.info(f"Deleted {deleted} media objects for user {user_id}")
        return deleted

    @staticmethod
    def _delete_user_rows(user_id: str) -> list[str]:
        """Delete owned rows; returns the tables whose delete failed."""
        client = SupabaseClient.get_client()
        failed: list[str] = []

        # Booking children reference booking_requests, which reference the student
        try:
            requests = (
                client.table("booking_requests")
                .select("id")
                .eq("student_id", user_id)
                .execute()
            )
            request_ids = [row["id"] for row in (requests.data or [])]
            if request_ids:
                client.table("booking_participants").delete().in_("request_id", request_ids).execute()
                client.table("booking_slots").delete().in_("request_id", request_ids).execute()
                client.table("booking_requests").delete().eq("student_id", user_id).execute()
        except Exception as e:
            logger.warning(f"Could not delete bookings for {user_id}: {e}")
            failed.append("booking_requests")

        for table in USER_OWNED_TABLES:
            try:
                client.table(table).delete().eq("user_id", user_id).execute()
            except Exception as e:
                logger.warning(f"Could not delete from {table}: {e}")
                failed.append(table)

        final_steps = [
            ("profiles", lambda: client.table("profiles").delete().eq("id", user_id).execute()),
            ("user_roles", lambda: client.table("user_roles").delete().eq("user_id", user_id).execute()),
            (
                "conversations",
                lambda: client.table("conversations").delete().contains("participant_ids", [user_id]).execute(),
            ),
        ]
        for table, step in final_steps:
            try:
                step()
            except Exception as e:
                logger.warning(f"Could not delete from {table}: {e}")
                failed.append(table)

        return failed

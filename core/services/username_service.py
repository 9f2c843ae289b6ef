# =============================================================================
# core/services/username_service.py - Username Availability
# =============================================================================
# Format rules are checked locally first; only well-formed names hit the
# database. A name someone else gave up less than 90 days ago stays blocked
# so links to the old profile can't be hijacked.
# =============================================================================

import logging
import re
from datetime import timedelta
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-z0-9_-]{3,30}$")
EDGE_SPECIAL = re.compile(r"^[-_]|[-_]$")
CONSECUTIVE_SPECIAL = re.compile(r"[-_]{2,}")

MIN_LENGTH = 3
MAX_LENGTH = 30
HISTORY_HOLD = timedelta(days=90)

RESERVED_USERNAMES = frozenset({
    "admin", "administrator", "root", "system", "support", "help",
    "mod", "moderator", "staff", "official", "team", "api",
    "www", "mail", "ftp", "blog", "shop", "store", "app",
    "dashboard", "settings", "account", "profile", "login",
    "signup", "auth", "register", "about", "contact", "terms",
    "privacy", "legal", "billing", "pricing", "checkout", "cart",
    "media", "events", "courses", "messages", "notifications",
    "social", "community", "groups", "meet", "video",
    "null", "undefined", "test", "demo",
})


def clean_username(username: str | None) -> str:
    return (username or "").strip().lower()


def validate_username(username: str | None) -> str | None:
    """
    Check a username's format.

    Returns:
        None if the name is acceptable, otherwise the message to show

    Example:
        >>> validate_username("ab")
        'Username must be at least 3 characters'
    """
    cleaned = clean_username(username)
    if not cleaned:
        return "Username is required"

    if not USERNAME_PATTERN.match(cleaned):
        if len(cleaned) < MIN_LENGTH:
            return "Username must be at least 3 characters"
        if len(cleaned) > MAX_LENGTH:
            return "Username must be 30 characters or less"
        return "Username must be 3-30 characters using only letters, numbers, hyphens, and underscores"

    if EDGE_SPECIAL.search(cleaned):
        return "Username cannot start or end with a hyphen or underscore"
    if CONSECUTIVE_SPECIAL.search(cleaned):
        return "Username cannot have consecutive hyphens or underscores"
    if cleaned in RESERVED_USERNAMES:
        return "This username is reserved"
    return None


class UsernameService:
    """Service for username availability checks."""

    @staticmethod
    def check_username(username: str | None, current_user_id: str | None = None) -> dict[str, Any]:
        """
        Tell the profile editor whether a username can be claimed.

        The caller's own username counts as available.

        Returns:
            {"available": bool, "error"?: str, "message"?: str}
        """
        error = validate_username(username)
        if error:
            return {"available": False, "error": error}

        cleaned = clean_username(username)
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("profiles")
                .select("id")
                .eq("username", cleaned)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"DB error checking username: {e}")
            return {"available": False, "error": "Unable to check availability. Please try again."}

        existing = response.data or []
        if existing:
            if current_user_id and existing[0]["id"] == current_user_id:
                return {"available": True, "message": "This is your current username"}
            return {"available": False, "error": "Username is already taken"}

        try:
            history = (
                client.table("username_history")
                .select("user_id, changed_at")
                .eq("old_username", cleaned)
                .order("changed_at", desc=True)
                .limit(1)
                .execute()
            ).data or []
        except Exception as e:
            # History is advisory; a failed lookup doesn't block the name
            logger.warning(f"Username history lookup failed for {cleaned}: {e}")
            history = []

        if history:
            changed_at = parse_timestamp(history[0].get("changed_at"))
            recently = changed_at is not None and utc_now() - changed_at < HISTORY_HOLD
            if recently and history[0].get("user_id") != current_user_id:
                return {
                    "available": False,
                    "error": "This username was recently used and is temporarily unavailable",
                }

        logger.info(f'Username check: "{cleaned}" is available')
        return {"available": True}

# =============================================================================
# core/services/import_service.py - Member Import Business Logic
# =============================================================================
# Two admin imports, both run from background tasks:
#
# 1. WordPress users: create confirmed accounts for members of the old site.
#    WordPress password hashes (PHPass) can't be used by Supabase Auth, so
#    accounts get a random password and the hash is kept on the profile.
#
# 2. Tag repair: send a student contact export to the
#    repair_profile_tags_from_csv database function in fixed-size batches,
#    one batch at a time, and add up its counts.
# =============================================================================

import logging
import uuid
from typing import Any, Callable

from app.config import settings
from core.models.imports import (
    ImportMode,
    ImportRowStatus,
    TagRepairResult,
    TagRepairSummary,
    WordPressImportResult,
)
from lib.csv_import import ContactTags
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_duplicate_error
from lib.utils import chunked, normalize_email, utc_now_iso

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]

# Sample unmatched emails kept per batch, and overall
UNMATCHED_SAMPLES_PER_BATCH = 5
UNMATCHED_SAMPLES_MAX = 10

REPAIR_FUNCTION = "repair_profile_tags_from_csv"


def _temporary_password() -> str:
    # Random, but still satisfies upper/lower/digit/symbol password rules
    return f"{uuid.uuid4()}Aa1!"


def _display_name(user: dict[str, Any], email: str) -> str:
    return (
        user.get("display_name")
        or user.get("name")
        or user.get("user_nicename")
        or email.split("@")[0]
    )


class ImportService:
    """Service for bulk member imports."""

    # -------------------------------------------------------------------------
    # WordPress Users
    # -------------------------------------------------------------------------

    @staticmethod
    def import_wordpress_users(
        users: list[dict[str, Any]],
        mode: ImportMode = ImportMode.PREVIEW,
        progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """
        Preview or run a WordPress member import.

        In PREVIEW mode nothing is written; each row is reported as
        will_create or exists. In IMPORT mode accounts are created and
        rows are reported as created, exists or exists_in_auth. Per-row
        failures are collected in `errors` and don't stop the run.

        Returns:
            {"total", "created", "skipped", "errors", "preview", "message"}
        """
        client = SupabaseClient.get_client()
        results: dict[str, Any] = {
            "total": len(users),
            "created": 0,
            "skipped": 0,
            "errors": [],
            "preview": [],
        }
        logger.info(f"Processing WordPress import: {len(users)} users, mode={mode.value}")

        for index, wp_user in enumerate(users, start=1):
            if progress and (index == 1 or index % 25 == 0 or index == len(users)):
                progress(index, len(users), f"Processing user {index} of {len(users)}")

            email = normalize_email(wp_user.get("email") or wp_user.get("user_email"))
            name = _display_name(wp_user, email)
            password_hash = wp_user.get("user_pass") or wp_user.get("password_hash")

            if not email:
                results["errors"].append({"email": "unknown", "error": "Missing email address"})
                continue

            if SupabaseClient.fetch_one("profiles", "email", email, columns="id"):
                results["skipped"] += 1
                results["preview"].append({"email": email, "name": name, "status": ImportRowStatus.EXISTS.value})
                continue

            if mode == ImportMode.PREVIEW:
                results["preview"].append({"email": email, "name": name, "status": ImportRowStatus.WILL_CREATE.value})
                continue

            try:
                response = client.auth.admin.create_user({
                    "email": email,
                    "password": _temporary_password(),
                    "email_confirm": True,
                    "user_metadata": {
                        "full_name": name,
                        "imported_from": "wordpress",
                        "wp_password_hash": "stored" if password_hash else "none",
                    },
                })
            except Exception as e:
                if is_duplicate_error(e):
                    results["skipped"] += 1
                    results["preview"].append(
                        {"email": email, "name": name, "status": ImportRowStatus.EXISTS_IN_AUTH.value}
                    )
                else:
                    logger.warning(f"Error creating user {email}: {e}")
                    results["errors"].append({"email": email, "error": str(e)})
                continue

            user_id = str(response.user.id)
            profile_update: dict[str, Any] = {
                "full_name": name,
                "email_verified": True,
                "email_verified_at": utc_now_iso(),
            }
            if password_hash:
                profile_update["wp_password_hash"] = password_hash

            try:
                client.table("profiles").update(profile_update).eq("id", user_id).execute()
            except Exception as e:
                logger.warning(f"Profile update error for {email}: {e}")

            results["created"] += 1
            results["preview"].append({"email": email, "name": name, "status": ImportRowStatus.CREATED.value})

        if mode == ImportMode.PREVIEW:
            will_create = sum(1 for row in results["preview"] if row["status"] == ImportRowStatus.WILL_CREATE.value)
            results["message"] = f"Preview: {will_create} users will be created, {results['skipped']} already exist"
        else:
            results["message"] = (
                f"Created {results['created']} users, skipped {results['skipped']} existing users, "
                f"{len(results['errors'])} errors"
            )

        logger.info(results["message"])
        return WordPressImportResult.model_validate(results).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Tag Repair
    # -------------------------------------------------------------------------

    @staticmethod
    def repair_tags(
        contacts: list[ContactTags],
        batch_size: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """
        Repair profile tags from contact rows, batch by batch.

        Batches run sequentially. A failing batch stops the run; batches
        already sent stay applied.

        Returns:
            {"success", "summary", "message"}

        Raises:
            SupabaseClientError: If a batch fails (details include how many
                batches completed)
        """
        batch_size = batch_size or settings.IMPORT_BATCH_SIZE
        batches = list(chunked([contact.to_dict() for contact in contacts], batch_size))
        summary: dict[str, Any] = {
            "total_students_processed": len(contacts),
            "matched_profiles": 0,
            "updated_profiles": 0,
            "user_tags_created": 0,
            "unmatched_count": 0,
            "sample_unmatched_emails": [],
        }
        logger.info(f"Repairing tags for {len(contacts)} students in {len(batches)} batches")

        for number, batch in enumerate(batches, start=1):
            if progress:
                progress(number, len(batches), f"Processing batch {number} of {len(batches)}")

            try:
                data = SupabaseClient.call_rpc(REPAIR_FUNCTION, {"csv_data": batch}) or {}
            except SupabaseClientError as e:
                logger.error(f"Batch {number} failed: {e}")
                e.details.update({"batch": number, "batches_completed": number - 1})
                raise

            if isinstance(data, list):
                data = data[0] if data else {}

            summary["matched_profiles"] += int(data.get("matched_profiles") or 0)
            summary["updated_profiles"] += int(data.get("updated_profiles") or 0)
            summary["user_tags_created"] += int(data.get("user_tags_created") or 0)
            summary["unmatched_count"] += int(data.get("unmatched_count") or 0)

            samples = data.get("sample_unmatched") or []
            summary["sample_unmatched_emails"].extend(samples[:UNMATCHED_SAMPLES_PER_BATCH])

        summary["sample_unmatched_emails"] = summary["sample_unmatched_emails"][:UNMATCHED_SAMPLES_MAX]
        message = (
            f"Processed {summary['total_students_processed']} students: "
            f"{summary['matched_profiles']} matched, {summary['updated_profiles']} profiles updated, "
            f"{summary['user_tags_created']} tags created, {summary['unmatched_count']} unmatched"
        )
        logger.info(message)
        result = TagRepairResult(summary=TagRepairSummary(**summary), message=message)
        return result.model_dump()

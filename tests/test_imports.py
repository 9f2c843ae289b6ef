# =============================================================================
# tests/test_imports.py - Member Import and Tag Repair Tests
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from core.models.imports import ImportMode
from core.services.import_service import ImportService
from lib.csv_import import ContactTags
from lib.supabase_client import SupabaseClient, SupabaseClientError


def _profiles(*existing_emails):
    """fetch_one stand-in that finds a profile for the given emails only."""

    def fetch_one(table, column, value, columns="*"):
        return {"id": f"id-{value}"} if value in existing_emails else None

    return fetch_one


class TestWordPressPreview:

    def test_preview_writes_nothing(self, supabase_mock):
        users = [
            {"email": "old@example.com"},
            {"email": "New@Example.com", "display_name": "New Member"},
            {"email": ""},
        ]

        with patch.object(SupabaseClient, "fetch_one", side_effect=_profiles("old@example.com")):
            result = ImportService.import_wordpress_users(users, ImportMode.PREVIEW)

        assert result["total"] == 3
        assert result["skipped"] == 1
        assert result["errors"] == [{"email": "unknown", "error": "Missing email address"}]
        assert result["preview"] == [
            {"email": "old@example.com", "name": "old", "status": "exists"},
            {"email": "new@example.com", "name": "New Member", "status": "will_create"},
        ]
        assert result["message"] == "Preview: 1 users will be created, 1 already exist"
        supabase_mock.auth.admin.create_user.assert_not_called()


class TestWordPressImport:

    def test_row_outcomes(self, supabase_mock):
        supabase_mock.auth.admin.create_user.side_effect = [
            MagicMock(user=MagicMock(id="u1")),
            Exception("A user with this email address has already been registered"),
            Exception("rate limit exceeded"),
        ]
        users = [
            {"email": "a@example.com", "user_pass": "$P$Bhash"},
            {"email": "b@example.com"},
            {"email": "c@example.com"},
        ]
        progress = MagicMock()

        with patch.object(SupabaseClient, "fetch_one", side_effect=_profiles()):
            result = ImportService.import_wordpress_users(users, ImportMode.IMPORT, progress=progress)

        assert result["created"] == 1
        assert result["skipped"] == 1
        assert result["errors"] == [{"email": "c@example.com", "error": "rate limit exceeded"}]
        assert [row["status"] for row in result["preview"]] == ["created", "exists_in_auth"]
        assert result["message"] == "Created 1 users, skipped 1 existing users, 1 errors"

        profile_update = supabase_mock.table.return_value.update.call_args.args[0]
        assert profile_update["wp_password_hash"] == "$P$Bhash"
        assert profile_update["email_verified"] is True

        metadata = supabase_mock.auth.admin.create_user.call_args_list[0].args[0]["user_metadata"]
        assert metadata["imported_from"] == "wordpress"
        assert metadata["wp_password_hash"] == "stored"

        progress.assert_any_call(1, 3, "Processing user 1 of 3")
        progress.assert_any_call(3, 3, "Processing user 3 of 3")


class TestRepairTags:

    @staticmethod
    def _contacts(count):
        return [ContactTags(email=f"s{i}@example.com", tags="Student") for i in range(count)]

    def test_batches_are_summed(self):
        rpc_results = [
            {"matched_profiles": 2, "updated_profiles": 1, "user_tags_created": 3, "unmatched_count": 0},
            [{"matched_profiles": 0, "unmatched_count": 1, "sample_unmatched": ["s2@example.com"]}],
        ]
        progress = MagicMock()

        with patch.object(SupabaseClient, "call_rpc", side_effect=rpc_results) as rpc:
            result = ImportService.repair_tags(self._contacts(3), batch_size=2, progress=progress)

        summary = result["summary"]
        assert result["success"] is True
        assert summary["total_students_processed"] == 3
        assert summary["matched_profiles"] == 2
        assert summary["user_tags_created"] == 3
        assert summary["unmatched_count"] == 1
        assert summary["sample_unmatched_emails"] == ["s2@example.com"]

        first_batch = rpc.call_args_list[0].args[1]["csv_data"]
        assert first_batch == [
            {"email": "s0@example.com", "tags": "Student"},
            {"email": "s1@example.com", "tags": "Student"},
        ]
        assert progress.call_count == 2

    def test_failed_batch_stops_run(self):
        rpc_results = [{"matched_profiles": 2}, SupabaseClientError("RPC failed", code="RPC_FAILED")]

        with patch.object(SupabaseClient, "call_rpc", side_effect=rpc_results) as rpc:
            with pytest.raises(SupabaseClientError) as exc_info:
                ImportService.repair_tags(self._contacts(5), batch_size=2)

        assert rpc.call_count == 2
        assert exc_info.value.details == {"batch": 2, "batches_completed": 1}


class TestWorkerTasks:
    """Tasks hand JSON arguments to the services."""

    def test_repair_task_rebuilds_contacts(self):
        from workers.tasks import repair_tags_from_csv

        with patch.object(ImportService, "repair_tags", return_value={"success": True}) as repair:
            repair_tags_from_csv.run([{"email": "a@example.com", "tags": "Student"}], batch_size=10)

        contacts = repair.call_args.args[0]
        assert contacts == [ContactTags(email="a@example.com", tags="Student")]
        assert repair.call_args.kwargs["batch_size"] == 10

    def test_import_task_mode(self):
        from workers.tasks import import_wordpress_users

        with patch.object(ImportService, "import_wordpress_users", return_value={}) as run_import:
            import_wordpress_users.run([{"email": "a@example.com"}], "import")

        assert run_import.call_args.args[1] == ImportMode.IMPORT

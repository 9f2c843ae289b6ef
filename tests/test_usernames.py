# =============================================================================
# tests/test_usernames.py - Username Availability Tests
# =============================================================================

from datetime import timedelta

import pytest

from core.services.username_service import UsernameService, validate_username
from lib.utils import utc_now


class TestValidateUsername:
    """Format rules, checked before any database call."""

    @pytest.mark.parametrize("name", ["abc", "jane_doe", "oud-player-42", "A_B_C", "x" * 30])
    def test_accepted(self, name):
        assert validate_username(name) is None

    @pytest.mark.parametrize("name, message", [
        ("", "Username is required"),
        ("   ", "Username is required"),
        ("ab", "Username must be at least 3 characters"),
        ("x" * 31, "Username must be 30 characters or less"),
        ("jane.doe", "Username must be 3-30 characters using only letters, numbers, hyphens, and underscores"),
        ("-jane", "Username cannot start or end with a hyphen or underscore"),
        ("jane_", "Username cannot start or end with a hyphen or underscore"),
        ("jane__doe", "Username cannot have consecutive hyphens or underscores"),
        ("ja-_ne", "Username cannot have consecutive hyphens or underscores"),
        ("Admin", "This username is reserved"),
    ])
    def test_rejected(self, name, message):
        assert validate_username(name) == message


class TestCheckUsername:

    @staticmethod
    def _set_profiles(supabase_mock, rows):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value
        query.limit.return_value.execute.return_value.data = rows

    @staticmethod
    def _set_history(supabase_mock, rows):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value
        query.order.return_value.limit.return_value.execute.return_value.data = rows

    def test_format_error_skips_database(self, supabase_mock):
        result = UsernameService.check_username("ab")

        assert result == {"available": False, "error": "Username must be at least 3 characters"}
        supabase_mock.table.assert_not_called()

    def test_available(self, supabase_mock):
        self._set_profiles(supabase_mock, [])
        self._set_history(supabase_mock, [])

        assert UsernameService.check_username("New_Name") == {"available": True}
        supabase_mock.table.return_value.select.return_value.eq.assert_any_call("username", "new_name")

    def test_taken(self, supabase_mock):
        self._set_profiles(supabase_mock, [{"id": "someone-else"}])

        result = UsernameService.check_username("taken", current_user_id="me")

        assert result == {"available": False, "error": "Username is already taken"}

    def test_own_username(self, supabase_mock):
        self._set_profiles(supabase_mock, [{"id": "me"}])

        result = UsernameService.check_username("mine", current_user_id="me")

        assert result == {"available": True, "message": "This is your current username"}

    def test_recently_released_by_someone_else(self, supabase_mock):
        self._set_profiles(supabase_mock, [])
        changed_at = (utc_now() - timedelta(days=10)).isoformat()
        self._set_history(supabase_mock, [{"user_id": "old-owner", "changed_at": changed_at}])

        result = UsernameService.check_username("released", current_user_id="me")

        assert result["available"] is False
        assert "recently used" in result["error"]

    def test_recently_released_by_caller(self, supabase_mock):
        self._set_profiles(supabase_mock, [])
        changed_at = (utc_now() - timedelta(days=10)).isoformat()
        self._set_history(supabase_mock, [{"user_id": "me", "changed_at": changed_at}])

        assert UsernameService.check_username("released", current_user_id="me") == {"available": True}

    def test_released_long_ago(self, supabase_mock):
        self._set_profiles(supabase_mock, [])
        changed_at = (utc_now() - timedelta(days=120)).isoformat()
        self._set_history(supabase_mock, [{"user_id": "old-owner", "changed_at": changed_at}])

        assert UsernameService.check_username("released") == {"available": True}

    def test_database_error(self, supabase_mock):
        supabase_mock.table.side_effect = RuntimeError("connection refused")

        result = UsernameService.check_username("anyone")

        assert result == {"available": False, "error": "Unable to check availability. Please try again."}

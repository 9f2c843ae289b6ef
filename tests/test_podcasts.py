# =============================================================================
# tests/test_podcasts.py - Podcast Sync and Tag Service Tests
# =============================================================================

from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.exceptions import InvalidRequestError, PodcastFeedError, ResourceNotFoundError
from core.services.podcast_service import PodcastService
from core.services.tag_service import TagService
from lib.supabase_client import SupabaseClient

PODCAST = {"id": "pod-1", "rss_url": "https://feeds.test/show.xml", "title": "Our Own Title"}


class TestSyncPodcast:

    def test_only_new_episodes_inserted(self, supabase_mock, sample_feed_xml):
        supabase_mock.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            {"audio_url": "https://cdn.test/ep1.mp3"},
        ]

        with patch.object(SupabaseClient, "fetch_one", return_value=dict(PODCAST)), \
                patch("core.services.podcast_service.fetch_feed_xml", return_value=sample_feed_xml):
            result = PodcastService.sync_podcast("pod-1")

        assert result["new_episodes"] == 1
        assert result["total_episodes"] == 2
        assert result["message"] == "Imported 1 new episodes"

        inserted = supabase_mock.table.return_value.insert.call_args.args[0]
        assert [row["audio_url"] for row in inserted] == ["https://cdn.test/ep3.mp3"]
        assert inserted[0]["podcast_id"] == "pod-1"

    def test_blank_metadata_filled(self, supabase_mock, sample_feed_xml):
        supabase_mock.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []

        with patch.object(SupabaseClient, "fetch_one", return_value=dict(PODCAST)), \
                patch("core.services.podcast_service.fetch_feed_xml", return_value=sample_feed_xml):
            PodcastService.sync_podcast("pod-1")

        update = supabase_mock.table.return_value.update.call_args.args[0]
        assert "title" not in update
        assert update["author"] == "World Music Method"
        assert update["cover_image_url"] == "https://cdn.test/show.jpg"
        assert "last_fetched_at" in update

    def test_missing_podcast(self):
        with patch.object(SupabaseClient, "fetch_one", return_value=None):
            with pytest.raises(ResourceNotFoundError):
                PodcastService.sync_podcast("pod-x")

    def test_no_rss_url(self):
        with patch.object(SupabaseClient, "fetch_one", return_value={"id": "pod-1", "rss_url": None}):
            with pytest.raises(InvalidRequestError, match="no RSS URL"):
                PodcastService.sync_podcast("pod-1")

    def test_feed_unreachable(self, supabase_mock):
        with patch.object(SupabaseClient, "fetch_one", return_value=dict(PODCAST)), \
                patch("core.services.podcast_service.fetch_feed_xml", side_effect=httpx.ConnectError("dns")):
            with pytest.raises(PodcastFeedError):
                PodcastService.sync_podcast("pod-1")

        supabase_mock.table.return_value.insert.assert_not_called()


class TestAssignTag:

    def test_email_assignment(self, supabase_mock):
        with patch.object(TagService, "enroll_for_tag", return_value=2) as enroll:
            result = TagService.assign_tag(email=" Fan@Example.com ", tag_id="t1", source="form")

        assert result == {"success": True, "tag_id": "t1", "sequences_enrolled": 2}
        upsert = supabase_mock.table.return_value.upsert
        row = upsert.call_args.args[0]
        assert row["email"] == "fan@example.com"
        assert "user_id" not in row
        assert upsert.call_args.kwargs["on_conflict"] == "email,tag_id"
        enroll.assert_called_once_with("t1", user_id=None, email="fan@example.com")

    def test_unknown_tag_name(self):
        with patch.object(SupabaseClient, "fetch_one", return_value=None):
            with pytest.raises(ResourceNotFoundError):
                TagService.assign_tag(user_id="u1", tag_name="Nope")

    def test_target_required(self):
        with pytest.raises(InvalidRequestError):
            TagService.assign_tag(tag_id="t1")


class TestEnrollForTag:

    def test_skips_active_enrollments(self, supabase_mock):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value.eq.return_value
        query.contains.return_value.execute.return_value.data = [{"id": "s1"}, {"id": "s2"}, {"id": "s3"}]
        existing = [None, {"status": "active"}, {"status": "completed"}]

        with patch.object(TagService, "_contact_id", return_value="c1"), \
                patch.object(TagService, "_existing_enrollment", side_effect=existing), \
                patch.object(TagService, "enroll") as enroll:
            enrolled = TagService.enroll_for_tag("t1", user_id="u1", email="fan@example.com")

        assert enrolled == 2
        assert [c.args[0] for c in enroll.call_args_list] == ["s1", "s3"]

    def test_no_sequences(self, supabase_mock):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value.eq.return_value
        query.contains.return_value.execute.return_value.data = []

        assert TagService.enroll_for_tag("t1", email="fan@example.com") == 0

    def test_first_email_delay(self, supabase_mock):
        steps = supabase_mock.table.return_value.select.return_value.eq.return_value.order.return_value
        steps.limit.return_value.execute.return_value = MagicMock(data=[{"delay_minutes": 30}])

        assert TagService.first_step_delay("s1") == 30

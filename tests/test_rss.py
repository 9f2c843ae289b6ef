# =============================================================================
# tests/test_rss.py - Podcast Feed Parsing Tests
# =============================================================================

import pytest

from lib.rss import FeedParseError, parse_duration, parse_feed, parse_pub_date


class TestParseDuration:
    """itunes:duration formats."""

    @pytest.mark.parametrize("value, expected", [
        ("1:02:03", 3723),
        ("45:10", 2710),
        ("900", 900),
        ("900.7", 900),
        (" 05:00 ", 300),
    ])
    def test_valid_durations(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", [None, "", "soon", "1:2:3:4", "a:b"])
    def test_unparseable_durations(self, value):
        assert parse_duration(value) is None


class TestParsePubDate:

    def test_rfc822_to_iso_utc(self):
        assert parse_pub_date("Tue, 02 Jan 2024 10:00:00 GMT") == "2024-01-02T10:00:00+00:00"

    def test_offset_converted_to_utc(self):
        assert parse_pub_date("Tue, 02 Jan 2024 12:00:00 +0200") == "2024-01-02T10:00:00+00:00"

    def test_garbage_is_none(self):
        assert parse_pub_date("yesterday") is None


class TestParseFeed:
    """Channel and item extraction."""

    def test_channel_metadata(self, sample_feed_xml):
        feed = parse_feed(sample_feed_xml)

        assert feed.title == "World Music Conversations"
        assert feed.description == "Talks with <b>musicians</b>"
        assert feed.author == "World Music Method"
        assert feed.image_url == "https://cdn.test/show.jpg"

    def test_items_without_enclosure_are_skipped(self, sample_feed_xml):
        feed = parse_feed(sample_feed_xml)

        assert [ep.title for ep in feed.episodes] == ["Episode Three", "Episode One"]
        assert feed.skipped == 1

    def test_episode_numbers_count_down_from_item_count(self, sample_feed_xml):
        """Newest item gets the highest number; skipped items don't use one."""
        feed = parse_feed(sample_feed_xml)

        assert [ep.episode_number for ep in feed.episodes] == [3, 2]

    def test_episode_fields(self, sample_feed_xml):
        newest, oldest = parse_feed(sample_feed_xml).episodes

        assert newest.duration_seconds == 3723
        assert newest.description == "Third"
        assert newest.release_date == "2024-01-02T10:00:00+00:00"
        assert newest.cover_image_url == "https://cdn.test/show.jpg"
        assert oldest.cover_image_url == "https://cdn.test/ep1.jpg"
        assert oldest.release_date is None

    def test_track_row_shape(self, sample_feed_xml):
        row = parse_feed(sample_feed_xml).episodes[0].to_track_row("pod-1")

        assert row["podcast_id"] == "pod-1"
        assert row["content_type"] == "podcast_episode"
        assert row["media_type"] == "audio"
        assert row["is_published"] is True

    def test_malformed_xml(self):
        with pytest.raises(FeedParseError, match="Failed to parse RSS XML"):
            parse_feed("<rss><channel>")

    def test_missing_channel(self):
        with pytest.raises(FeedParseError, match="no channel"):
            parse_feed("<rss version='2.0'></rss>")

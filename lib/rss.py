# =============================================================================
# lib/rss.py - Podcast RSS Parsing
# =============================================================================
# Turns a podcast RSS 2.0 document into plain dataclasses that the podcast
# sync service can write to media_tracks.
#
# iTunes tags (itunes:author, itunes:image, itunes:duration, itunes:summary)
# are preferred over their plain RSS equivalents when both exist.
#
# Usage:
#   from lib.rss import parse_feed
#   feed = parse_feed(xml_text)
#   for episode in feed.episodes:
#       print(episode.episode_number, episode.title)
# =============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timezone
from email.utils import parsedate_to_datetime
from xml.etree import ElementTree as ET

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)


class FeedParseError(Exception):
    """Raised when the document isn't a usable RSS feed."""


@dataclass
class FeedEpisode:
    """One <item> with the fields stored on a media_tracks row."""
    title: str
    audio_url: str
    description: str | None = None
    cover_image_url: str | None = None
    duration_seconds: int | None = None
    release_date: str | None = None
    episode_number: int | None = None

    def to_track_row(self, podcast_id: str) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "audio_url": self.audio_url,
            "cover_image_url": self.cover_image_url,
            "duration_seconds": self.duration_seconds,
            "release_date": self.release_date,
            "episode_number": self.episode_number,
            "podcast_id": podcast_id,
            "media_type": "audio",
            "content_type": "podcast_episode",
            "is_published": True,
        }


@dataclass
class Feed:
    """Channel-level metadata plus the parsed episodes (newest first, as in the feed)."""
    title: str | None = None
    description: str | None = None
    author: str | None = None
    image_url: str | None = None
    episodes: list[FeedEpisode] = field(default_factory=list)
    skipped: int = 0


def parse_duration(value: str | None) -> int | None:
    """
    Parse an itunes:duration value into seconds.

    Accepts "HH:MM:SS", "MM:SS" or a plain number of seconds.

    Example:
        parse_duration("1:02:03")  # 3723
        parse_duration("45:10")    # 2710
        parse_duration("900")      # 900
        parse_duration("soon")     # None
    """
    if not value:
        return None
    value = value.strip()

    if ":" in value:
        try:
            parts = [int(part) for part in value.split(":")]
        except ValueError:
            return None
        if len(parts) == 3:
            return parts[0] * 3600 + parts[1] * 60 + parts[2]
        if len(parts) == 2:
            return parts[0] * 60 + parts[1]
        return None

    try:
        return int(float(value))
    except ValueError:
        return None


def parse_pub_date(value: str | None) -> str | None:
    """Convert an RFC 822 pubDate to an ISO-8601 UTC string."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    cleaned = _CDATA_RE.sub(r"\1", text).strip()
    return cleaned or None


def _text(element: ET.Element, tag: str) -> str | None:
    child = element.find(tag)
    return _clean(child.text) if child is not None else None


def _itunes(tag: str) -> str:
    return f"{{{ITUNES_NS}}}{tag}"


def _attr(element: ET.Element, tag: str, attribute: str) -> str | None:
    child = element.find(tag)
    if child is None:
        return None
    return child.get(attribute) or None


def parse_feed(xml_text: str | bytes) -> Feed:
    """
    Parse an RSS document.

    Items missing a title or an enclosure URL are skipped and counted in
    `Feed.skipped`. Episode numbers count down from the number of items, so
    the first (newest) item gets the highest number; skipped items don't
    consume a number.

    Raises:
        FeedParseError: If the XML is malformed or has no <channel>
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise FeedParseError(f"Failed to parse RSS XML: {e}") from e

    channel = root if root.tag == "channel" else root.find("channel")
    if channel is None:
        raise FeedParseError("Invalid RSS: no channel element found")

    feed = Feed(
        title=_text(channel, "title"),
        description=_text(channel, "description"),
        author=_text(channel, _itunes("author")) or _text(channel, "author"),
        image_url=_attr(channel, _itunes("image"), "href") or _text(channel, "image/url"),
    )

    items = channel.findall("item")
    episode_number = len(items)

    for item in items:
        title = _text(item, "title")
        audio_url = _attr(item, "enclosure", "url")

        if not title or not audio_url:
            feed.skipped += 1
            continue

        feed.episodes.append(FeedEpisode(
            title=title,
            audio_url=audio_url,
            description=_text(item, "description") or _text(item, _itunes("summary")),
            cover_image_url=_attr(item, _itunes("image"), "href") or feed.image_url,
            duration_seconds=parse_duration(_text(item, _itunes("duration"))),
            release_date=parse_pub_date(_text(item, "pubDate")),
            episode_number=episode_number,
        ))
        episode_number -= 1

    return feed

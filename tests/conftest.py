# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Replaces the Supabase singleton with a MagicMock per test
# - Builds signed access tokens for auth tests
# =============================================================================

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("R2_USER_PUBLIC_URL", "https://media.test")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from jose import jwt

from lib.supabase_client import SupabaseClient

TEST_JWT_SECRET = "test-jwt-secret"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def supabase_mock():
    """
    The service-role client, replaced by a MagicMock.

    Query builders chain, so `client.table(...).select(...).execute()`
    returns the same mock whatever the arguments; set
    `execute.return_value` (or a `table.side_effect`) per test.
    """
    client = MagicMock(name="supabase")
    with patch.object(SupabaseClient, "_instance", client):
        yield client


@pytest.fixture
def make_token():
    """Factory for HS256 access tokens signed with the test secret."""

    def _make(sub: str | None = None, email: str = "fan@example.com", expires_in: int = 3600, **claims) -> str:
        payload = {
            "sub": sub or str(uuid4()),
            "email": email,
            "aud": "authenticated",
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            **claims,
        }
        return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def sample_products():
    """Products as stored in the products table."""
    return [
        {
            "id": "course-guitar",
            "name": "Flamenco Guitar",
            "product_type": "course",
            "course_id": "c-1",
            "base_price_usd": 100,
        },
        {
            "id": "pwyf-album",
            "name": "Album (pay what you feel)",
            "product_type": "course",
            "is_pwyf": True,
            "min_price": 10,
            "max_price": 50,
            "suggested_price": 20,
        },
        {
            "id": "membership",
            "name": "Monthly Membership",
            "product_type": "membership",
            "trial_enabled": True,
            "trial_price_usd": 1,
            "trial_length_days": 7,
            "base_price_usd": 25,
        },
        {
            "id": "free-trial-sub",
            "name": "Free Trial Subscription",
            "product_type": "subscription",
            "trial_enabled": True,
            "trial_price_usd": 0,
            "trial_length_days": 14,
            "base_price_usd": 15,
        },
    ]


@pytest.fixture
def sample_feed_xml():
    """A small podcast feed: two good episodes and one without enclosure."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>World Music Conversations</title>
    <description><![CDATA[Talks with <b>musicians</b>]]></description>
    <itunes:author>World Music Method</itunes:author>
    <itunes:image href="https://cdn.test/show.jpg"/>
    <item>
      <title>Episode Three</title>
      <enclosure url="https://cdn.test/ep3.mp3" type="audio/mpeg"/>
      <itunes:duration>1:02:03</itunes:duration>
      <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
      <itunes:summary>Third</itunes:summary>
    </item>
    <item>
      <title>Trailer without audio</title>
    </item>
    <item>
      <title>Episode One</title>
      <enclosure url="https://cdn.test/ep1.mp3" type="audio/mpeg"/>
      <itunes:duration>45:10</itunes:duration>
      <itunes:image href="https://cdn.test/ep1.jpg"/>
    </item>
  </channel>
</rss>"""

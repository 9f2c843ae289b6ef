# =============================================================================
# tests/test_sitemap.py - Sitemap and Redirect Service Tests
# =============================================================================

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from app.exceptions import DuplicateRedirectError, InvalidRequestError, ResourceNotFoundError
from core.models.redirects import RedirectionCreate, RedirectionUpdate
from core.services.redirect_service import RedirectService
from core.services.sitemap_service import SitemapService


class TestSitemapService:

    def test_static_and_dynamic_urls(self, supabase_mock):
        table = supabase_mock.table.return_value.select.return_value
        table.eq.return_value.not_.is_.return_value.execute.return_value.data = [
            {"slug": "flamenco-101", "updated_at": "2024-02-10T08:00:00+00:00"},
        ]
        table.not_.is_.return_value.execute.return_value.data = [
            {"slug": "oud-master", "updated_at": None},
            {"slug": None},
        ]

        urls = SitemapService.collect_urls("https://site.test/")
        by_loc = {url.loc: url for url in urls}

        assert list(by_loc)[:5] == [
            "https://site.test/",
            "https://site.test/courses",
            "https://site.test/listen",
            "https://site.test/membership",
            "https://site.test/auth",
        ]
        assert by_loc["https://site.test/course/flamenco-101"].lastmod == "2024-02-10"
        assert by_loc["https://site.test/course/flamenco-101"].priority == 0.8
        assert by_loc["https://site.test/artist/oud-master"].priority == 0.7
        assert len(urls) == 7

    def test_generate_sitemap(self, supabase_mock):
        table = supabase_mock.table.return_value.select.return_value
        table.eq.return_value.not_.is_.return_value.execute.return_value.data = []
        table.not_.is_.return_value.execute.return_value.data = []

        xml = SitemapService.generate_sitemap("https://site.test")

        assert xml.count("<url>") == 5
        assert "<loc>https://site.test/auth</loc>" in xml
        assert "<priority>0.3</priority>" in xml


class TestRedirectModels:

    def test_defaults(self):
        redirect = RedirectionCreate(source_url=" /old ", target_url="https://site.test/new")

        assert redirect.source_url == "/old"
        assert redirect.status_code == 301
        assert redirect.is_active is True

    @pytest.mark.parametrize("data", [
        {"source_url": "old", "target_url": "/new"},
        {"source_url": "/old", "target_url": "ftp://new"},
        {"source_url": "/old", "target_url": "/new", "status_code": 404},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValidationError):
            RedirectionCreate(**data)

    def test_partial_update(self):
        assert RedirectionUpdate(is_active=False).model_dump(exclude_none=True) == {"is_active": False}


class TestRedirectService:

    def test_duplicate_source(self, supabase_mock):
        supabase_mock.table.return_value.insert.return_value.execute.side_effect = Exception(
            'duplicate key value violates unique constraint "redirections_source_url_key"'
        )

        with pytest.raises(DuplicateRedirectError):
            RedirectService.create_redirect(RedirectionCreate(source_url="/a", target_url="/b"))

    def test_create(self, supabase_mock):
        row = {"id": "r1", "source_url": "/a", "target_url": "/b", "status_code": 302, "is_active": True}
        supabase_mock.table.return_value.insert.return_value.execute.return_value.data = [row]

        created = RedirectService.create_redirect(
            RedirectionCreate(source_url="/a", target_url="/b", status_code=302)
        )

        assert created == row
        supabase_mock.table.assert_called_with("redirections")

    def test_empty_update(self, supabase_mock):
        with pytest.raises(InvalidRequestError, match="No fields"):
            RedirectService.update_redirect("r1", RedirectionUpdate())

    def test_update_missing(self, supabase_mock):
        supabase_mock.table.return_value.update.return_value.eq.return_value.execute.return_value.data = []

        with pytest.raises(ResourceNotFoundError):
            RedirectService.update_redirect("r1", RedirectionUpdate(is_active=False))

    def test_update_adds_timestamp(self, supabase_mock):
        update = supabase_mock.table.return_value.update
        update.return_value.eq.return_value.execute.return_value.data = [{"id": "r1"}]

        RedirectService.update_redirect("r1", RedirectionUpdate(target_url="/c"))

        sent = update.call_args.args[0]
        assert sent["target_url"] == "/c"
        assert "updated_at" in sent

    def test_delete_missing(self, supabase_mock):
        supabase_mock.table.return_value.delete.return_value.eq.return_value.execute.return_value.data = []

        with pytest.raises(ResourceNotFoundError):
            RedirectService.delete_redirect("r1")

    def test_resolve(self, supabase_mock):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value.eq.return_value
        query.limit.return_value.execute.return_value = MagicMock(data=[{"target_url": "/b", "status_code": 301}])

        assert RedirectService.resolve("/a") == {"target_url": "/b", "status_code": 301}

    def test_resolve_none(self, supabase_mock):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value.eq.return_value
        query.limit.return_value.execute.return_value.data = []

        assert RedirectService.resolve("/missing") is None

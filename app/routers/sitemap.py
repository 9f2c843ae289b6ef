# =============================================================================
# app/routers/sitemap.py - Public Sitemap
# =============================================================================

from fastapi import APIRouter
from fastapi.responses import Response

from core.services.sitemap_service import SitemapService

router = APIRouter()

CACHE_CONTROL = "public, max-age=3600"


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap():
    return Response(
        content=SitemapService.generate_sitemap(),
        media_type="application/xml; charset=utf-8",
        headers={"Cache-Control": CACHE_CONTROL},
    )

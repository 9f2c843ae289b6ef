# =============================================================================
# lib/sitemap.py - XML Sitemap Rendering
# =============================================================================
# Renders a sitemaps.org <urlset> document from a list of SitemapUrl
# entries. Data gathering lives in core/services/sitemap_service.py.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from xml.sax.saxutils import escape

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# Quotes too, on top of &, < and >
_ENTITIES = {"\"": "&quot;", "'": "&apos;"}


@dataclass
class SitemapUrl:
    loc: str
    lastmod: str | None = None
    changefreq: str = "weekly"
    priority: float = 0.5


def build_sitemap_xml(urls: list[SitemapUrl]) -> str:
    """
    Render sitemap entries as XML.

    `loc` and `lastmod` are escaped; priority is printed with one decimal.

    Example:
        build_sitemap_xml([SitemapUrl("https://example.com/", priority=1)])
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NS}">',
    ]
    for url in urls:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape(url.loc, _ENTITIES)}</loc>")
        if url.lastmod:
            lines.append(f"    <lastmod>{escape(url.lastmod, _ENTITIES)}</lastmod>")
        lines.append(f"    <changefreq>{url.changefreq}</changefreq>")
        lines.append(f"    <priority>{url.priority:.1f}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"

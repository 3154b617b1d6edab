from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Dict, List, Optional, Sequence

from .models import Document, SiteConfig
from .render import Renderer


def rfc822(value: datetime) -> str:
    return format_datetime(value.replace(tzinfo=timezone.utc))


def feed_items(
    posts: Sequence[Document], site: SiteConfig, limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """RSS items for dated posts, in the order given, capped at `limit`."""
    base = site.site_url.rstrip("/")
    items = [
        {
            "title": p.title,
            "link": f"{base}{p.url}",
            "pub_date": rfc822(p.date),
            "description": p.excerpt,
        }
        for p in posts
        if p.date is not None and not p.is_journal
    ]
    limit = site.feed_limit if limit is None else limit
    return items[:limit]


def render_feed(renderer: Renderer, posts: Sequence[Document]) -> str:
    site = renderer.site
    dated = [p.date for p in posts if p.date is not None]
    return renderer.render(
        "rss.xml.j2",
        site_url=site.site_url.rstrip("/"),
        items=feed_items(posts, site),
        last_build=rfc822(max(dated)) if dated else None,
    )

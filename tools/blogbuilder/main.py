#!/usr/bin/env python3
"""
Static site builder for the Rafter blog.

- content/blog/**/*.md|mdx|ipynb -> public/<slug>/index.html
- index page: regular posts newest first, then the journals box
- post pages: prev/next links between regular posts only
- public/404.html, public/rss.xml
- static/ mirrored into public/, stale static files and pages removed

Key features:
- Frontmatter validated once at load (bad dates sort last, unknown types
  count as posts)
- Heading anchors `{#id}` on every heading, code/math-safe
- Linked local files copied next to the page with hashed names
- Notebook cells filtered by hide/remove tags, outputs kept as images
- Pages rewritten only when their bytes change
"""

from __future__ import annotations

import pathlib
import sys
from typing import Dict

from .assets import mirror_tree, prune_pages, write_if_changed
from .classify import classify, navigation
from .config import CONTENT_DIR, PUBLIC_DIR, SITE_CONFIG, STATIC_DIR
from .documents import collect_documents
from .feed import render_feed
from .models import SiteConfig
from .render import Renderer
from .typography import Typography
from .utils import read_yaml


def _write(path: pathlib.Path, text: str, label: str, stats: Dict[str, int]) -> None:
    if write_if_changed(path, text):
        stats["written"] += 1
        print(f"✓ rendered {label}")
    else:
        stats["unchanged"] += 1
        print(f"= {label} unchanged, skip")


def build_site(
    site: SiteConfig,
    content_root: pathlib.Path = CONTENT_DIR,
    out_dir: pathlib.Path = PUBLIC_DIR,
    static_dir: pathlib.Path = STATIC_DIR,
) -> Dict[str, int]:
    out_dir.mkdir(parents=True, exist_ok=True)

    docs = collect_documents(
        content_root, out_root=out_dir, include_drafts=site.include_drafts
    )
    posts, journals = classify(docs)
    nav = navigation(posts)

    renderer = Renderer(site, Typography.from_config(site.typography))
    stats = {"written": 0, "unchanged": 0}
    pages = {
        "index.html": renderer.index(posts, journals),
        "404.html": renderer.not_found(),
        "rss.xml": render_feed(renderer, posts),
    }
    for doc in posts + journals:
        previous, nxt = nav.get(doc.slug, (None, None))
        pages[doc.slug.strip("/") + "/index.html"] = renderer.post(doc, previous, nxt)

    for rel, text in pages.items():
        label = "/" if rel == "index.html" else "/" + rel.replace("index.html", "")
        _write(out_dir / rel, text, label, stats)

    stale = prune_pages(out_dir, set(pages))

    copied, removed = mirror_tree(static_dir, out_dir)
    if copied:
        print(f"✓ copied {copied} static files")

    stats.update(
        posts=len(posts), journals=len(journals), removed=stale + removed
    )
    print(
        f"✓ built {len(posts)} posts and {len(journals)} journals"
        f" ({stats['written']} written, {stats['unchanged']} unchanged)"
    )
    return stats


def main():
    if not SITE_CONFIG.exists():
        print(
            "ERROR: site.yml missing at repo root",
            file=sys.stderr,
        )
        sys.exit(1)

    site = SiteConfig.from_dict(read_yaml(SITE_CONFIG))
    build_site(site)


if __name__ == "__main__":
    main()

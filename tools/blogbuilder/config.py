#!/usr/bin/env python3
from __future__ import annotations

import pathlib
import re

# ---------- Paths

# This assumes config.py sits in tools/blogbuilder/ at the repo root.
ROOT = pathlib.Path(__file__).resolve().parents[2]
CONTENT_DIR = ROOT / "content" / "blog"
STATIC_DIR = ROOT / "static"
PUBLIC_DIR = ROOT / "public"
TEMPLATE_DIR = ROOT / "tools" / "templates" / "blog"
SITE_CONFIG = ROOT / "site.yml"

# ---------- Config

MARKDOWN_SUFFIXES = (".md", ".mdx")
NOTEBOOK_SUFFIX = ".ipynb"
ASSET_SOURCE_DIR_CANDIDATES = ("assets", "_assets")
STATIC_MANIFEST = ".static-files"
PAGE_MANIFEST = ".pages"
EXCERPT_LENGTH = 140
DESCRIPTION_LENGTH = 160
DATE_FORMAT = "%B %d, %Y"
JOURNAL = "journal"
POST = "post"

MARKDOWN_EXTENSIONS = ("extra", "smarty", "sane_lists")

# Some shared regexes

MD_LINK_IMG = re.compile(
    r'(!?)\[(?P<alt>[^\]]*)\]\((?P<url>[^)\s]+)(?:\s+"[^"]*")?\)'
)
HTML_SRC_OR_HREF = re.compile(
    r'(?P<attr>\bsrc\b|\bhref\b)\s*=\s*([\'"])(?P<url>[^\'"]+)\2'
)
MD_HEADING = re.compile(r'^(?P<hash>#{1,6})\s+(?P<text>.+?)\s*$',
                        re.MULTILINE)
SETEXT_RE = re.compile(
    r'^(?P<text>[^\n#>|`-][^\n]*?)\n(?P<underline>=+|-+)[ \t]*$',
    re.MULTILINE,
)
HEADING_ID = re.compile(r"\s*\{\s*#(?P<id>[-a-z0-9]+)\s*\}\s*$")
BLOCK_HTML = re.compile(
    r'^(<(?P<tag>(div|table|figure|video|iframe|details|summary|blockquote)\b)'
    r'[\s\S]*?>[\s\S]*?</(?P=tag)>)$',
    re.MULTILINE,
)
FENCE = re.compile(r"(^```.*?$)(.*?)(^```$)",
                   re.MULTILINE | re.DOTALL)
INLINE_MATH = re.compile(r'(?<!\\)\$(.+?)(?<!\\)\$')
BLOCK_MATH = re.compile(
    r'(^\$\$.*?^\$\$)', re.MULTILINE | re.DOTALL
)
HTML_TAG = re.compile(r"<[^>]+>")
WHITESPACE = re.compile(r"\s+")
SPACES_EOL = re.compile(r'[ \t]+$', re.MULTILINE)
SLUG_RE = re.compile(r"[^a-z0-9-]+")

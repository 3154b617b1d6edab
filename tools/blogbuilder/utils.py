from __future__ import annotations

import hashlib
import html
import pathlib
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Tuple

import yaml

from .config import (
    DATE_FORMAT,
    HTML_TAG,
    SPACES_EOL,
    SLUG_RE,
    WHITESPACE,
)


def slugify(s: str) -> str:
    return re.sub(r"-{2,}", "-", SLUG_RE.sub("-", s.lower()).strip("-"))


def natural_key(s: str):
    return [int(t) if t.isdigit() else t for t in re.split(r'(\d+)', s.lower())]


def read_yaml(path: pathlib.Path) -> Dict[str, Any]:
    if path.exists():
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return {}


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()[:8]


def _norm_text(s: str) -> str:
    return s.replace('\r\n', '\n').replace('\r', '\n').lstrip('\ufeff')


def coerce_datetime(v) -> Optional[datetime]:
    """
    Turn a YAML date/datetime or an ISO 8601 string into a naive datetime.

    Aware values are converted to UTC first so every date compares with
    every other. Returns None for anything that is not date-like.
    """
    if isinstance(v, datetime):
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v
    if isinstance(v, date):
        return datetime(v.year, v.month, v.day)
    if isinstance(v, str):
        s = v.strip().strip('"').strip("'")
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return coerce_datetime(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def coerce_bool(v) -> Optional[bool]:
    """YAML-ish truthiness; None for values that are not a yes/no."""
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("true", "yes", "y", "on", "1"):
        return True
    if s in ("false", "no", "n", "off", "0", ""):
        return False
    return None


def format_date(value: Optional[datetime], fmt: str = DATE_FORMAT) -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


def parse_frontmatter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    text = _norm_text(text)
    if not text.startswith("---\n"):
        return None, text

    lines = text.splitlines(keepends=True)
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            fm_text = "".join(lines[1:i])
            body = "".join(lines[i + 1 :])
            fm = yaml.safe_load(fm_text) or {}
            if not isinstance(fm, dict):
                return None, text
            return fm, body
    return None, text


def plain_text(fragment: str) -> str:
    text = HTML_TAG.sub(" ", fragment)
    return WHITESPACE.sub(" ", html.unescape(text)).strip()


def prune(text: str, length: int) -> str:
    """Cut `text` at a word boundary so that it fits in `length` chars."""
    if len(text) <= length:
        return text
    cut = text[: length - 1]
    if " " in cut and not text[length - 1].isspace():
        cut = cut[: cut.rfind(" ")]
    return cut.rstrip(" ,.;:") + "…"


def normalize_markdown_light(md: str) -> str:
    md = SPACES_EOL.sub("", md)
    md = re.sub(r'\n{3,}', '\n\n', md)
    md = re.sub(r'([^\n])\n(#{1,6}\s)', r'\1\n\n\2', md)
    return md

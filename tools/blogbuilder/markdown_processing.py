from __future__ import annotations

import base64
import pathlib
import re
from typing import Dict, Optional

import markdown

from .assets import ensure_dir
from .config import (
    BLOCK_HTML,
    BLOCK_MATH,
    FENCE,
    HEADING_ID,
    INLINE_MATH,
    MARKDOWN_EXTENSIONS,
    MD_HEADING,
    SETEXT_RE,
)
from .utils import (
    content_hash,
    normalize_markdown_light,
    slugify,
)

ATTACHMENT_URL = re.compile(r'\battachment:(?P<name>[^)\s]+)')
ATTACHMENT_EXT = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
    "image/webp": ".webp",
}


def pad_block_html(md: str) -> str:
    lines, out, in_code = md.split("\n"), [], False
    for i, line in enumerate(lines):
        if line.strip().startswith(("```", "~~~")):
            in_code = not in_code
        if (not in_code) and BLOCK_HTML.match(line):
            if out and out[-1] != "":
                out.append("")
            out.append(line)
            if i + 1 < len(lines) and lines[i + 1].strip() != "":
                out.append("")
            continue
        out.append(line)
    return "\n".join(out)


def map_noncode(md: str, fn):
    parts, last = [], 0
    for m in FENCE.finditer(md):
        pre = md[last : m.start()]
        parts.append(fn(pre))
        parts.append(md[m.start() : m.end()])
        last = m.end()
    parts.append(fn(md[last:]))
    return "".join(parts)


def map_noncode_nonmath(md: str, fn):
    def _strip_math(s):
        spans, tokens = [], []

        def _hold(regex, text):
            def repl(m):
                token = f"@@M{len(spans)}@@"
                spans.append(m.group(0))
                tokens.append(token)
                return token

            return regex.sub(repl, text)

        t = _hold(BLOCK_MATH, s)
        t = _hold(INLINE_MATH, t)
        t = fn(t)
        for token, span in zip(tokens, spans):
            t = t.replace(token, span, 1)
        return t

    return map_noncode(md, _strip_math)


def slugify_heading(text: str) -> str:
    s = text.strip().lower()
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"[^a-z0-9\-]", "", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    return s or "section"


def anchor_headings(md_text: str, used_ids: Dict[str, int]) -> str:
    """
    Give every heading an inline `{#id}` anchor.

    Setext headings are rewritten as ATX first. Ids already present are
    kept and reserved in `used_ids`; new ones are suffixed `-1`, `-2`...
    when the same heading text repeats.
    """

    def unique_id(base: str) -> str:
        n = used_ids.get(base, 0)
        used_ids[base] = n + 1
        return base if n == 0 else f"{base}-{n}"

    def _setext(m):
        level = 1 if m.group("underline").startswith("=") else 2
        return f"{'#' * level} {m.group('text').strip()}"

    text = SETEXT_RE.sub(_setext, md_text)

    lines = text.split("\n")
    for i, line in enumerate(lines):
        m = MD_HEADING.match(line)
        if not m:
            continue
        level = len(m.group("hash"))
        head_txt = m.group("text").strip()
        existing = HEADING_ID.search(head_txt)
        if existing:
            hid = existing.group("id")
            used_ids[hid] = used_ids.get(hid, 0) + 1
            continue
        hid = unique_id(slugify_heading(head_txt))
        lines[i] = f"{'#' * level} {head_txt} {{#{hid}}}"
    return "\n".join(lines)


def extract_markdown_attachments(
    source: str,
    attachments: Dict[str, Dict[str, str]],
    out_dir: Optional[pathlib.Path],
    url_prefix: str,
) -> str:
    """Write notebook `attachment:` images out and point the source at them."""
    if out_dir is None or not attachments:
        return source

    def _repl(m):
        name = m.group("name")
        blob = attachments.get(name)
        if not blob:
            return m.group(0)
        mime, b64 = next(iter(blob.items()))
        ext = ATTACHMENT_EXT.get(mime, ".bin")
        data = base64.b64decode(b64)
        stem = slugify(pathlib.Path(name).stem) or "image"
        fname = f"att-{stem}.{content_hash(data)}{ext}"
        ensure_dir(out_dir)
        (out_dir / fname).write_bytes(data)
        return f"{url_prefix.rstrip('/')}/{fname}"

    return ATTACHMENT_URL.sub(_repl, source)


def prepare_markdown(md: str) -> str:
    """Anchor headings and tidy blank lines, leaving code and math alone."""
    used_ids: Dict[str, int] = {}
    md = map_noncode(md, pad_block_html)
    md = map_noncode_nonmath(md, lambda s: anchor_headings(s, used_ids))
    return map_noncode_nonmath(md, normalize_markdown_light)


def markdown_to_html(md: str) -> str:
    return markdown.markdown(md, extensions=list(MARKDOWN_EXTENSIONS))

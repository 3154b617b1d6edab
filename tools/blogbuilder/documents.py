from __future__ import annotations

import pathlib
import re
from typing import Any, Dict, List, Optional

import nbformat
from nbconvert import MarkdownExporter
from nbformat.validator import validate

from .assets import ensure_dir, rewrite_urls_and_copy_assets
from .config import (
    DESCRIPTION_LENGTH,
    EXCERPT_LENGTH,
    MARKDOWN_SUFFIXES,
    NOTEBOOK_SUFFIX,
)
from .markdown_processing import (
    extract_markdown_attachments,
    markdown_to_html,
    prepare_markdown,
)
from .models import Document, Frontmatter
from .utils import (
    _norm_text,
    content_hash,
    natural_key,
    parse_frontmatter,
    plain_text,
    prune,
    slugify,
)
from .visibility import filter_and_apply_visibility

FRONTMATTER_KEYS = ("title", "date", "type", "description", "draft", "wide")
H1_RE = re.compile(r'^\s*#\s+(.+?)\s*(?:\{\s*#[-a-z0-9]+\s*\})?\s*$', re.MULTILINE)


def slug_for(path: pathlib.Path, content_root: pathlib.Path) -> str:
    """
    Path of a document relative to the content root, as a URL.

    `hello/index.md` and `hello.md` both become `/hello/`.
    """
    parts = list(path.relative_to(content_root).with_suffix("").parts)
    if parts and parts[-1] == "index":
        parts = parts[:-1]
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


def page_dir(out_root: Optional[pathlib.Path], slug: str) -> Optional[pathlib.Path]:
    if out_root is None:
        return None
    return out_root / slug.strip("/")


def make_document(
    slug: str,
    fm: Frontmatter,
    body_html: str,
    source: Optional[pathlib.Path] = None,
) -> Document:
    text = plain_text(body_html)
    return Document(
        slug=slug,
        frontmatter=fm,
        excerpt=prune(text, EXCERPT_LENGTH),
        description=fm.description or prune(text, DESCRIPTION_LENGTH),
        body=body_html,
        source=source,
    )


def compile_markdown(
    md: str,
    base_dir: pathlib.Path,
    slug: str,
    out_dir: Optional[pathlib.Path] = None,
) -> str:
    if out_dir is not None:
        md = rewrite_urls_and_copy_assets(md, base_dir, out_dir, url_prefix=slug)
    return markdown_to_html(prepare_markdown(md))


def load_markdown(
    md: pathlib.Path,
    content_root: pathlib.Path,
    out_root: Optional[pathlib.Path] = None,
) -> Document:
    slug = slug_for(md, content_root)
    raw, body = parse_frontmatter(md.read_text(encoding="utf-8"))
    fm = Frontmatter.from_mapping(raw, source=md)
    html = compile_markdown(body, md.parent, slug, page_dir(out_root, slug))
    return make_document(slug, fm, html, source=md)


def _notebook_frontmatter(nb) -> Dict[str, Any]:
    """
    Frontmatter for a notebook: a `blog` metadata mapping, top-level
    metadata keys, then a leading raw/markdown cell holding a YAML block
    (which is removed from the notebook).
    """
    fm: Dict[str, Any] = {}
    blog_meta = nb.metadata.get("blog")
    if isinstance(blog_meta, dict):
        fm.update(blog_meta)
    for key in FRONTMATTER_KEYS:
        if key in nb.metadata and key not in fm:
            fm[key] = nb.metadata[key]

    if nb.cells and nb.cells[0].get("cell_type") in ("raw", "markdown"):
        parsed, rest = parse_frontmatter(_norm_text(nb.cells[0].get("source", "")))
        if parsed is not None:
            fm.update(parsed)
            if rest.strip():
                nb.cells[0]["source"] = rest
            else:
                nb.cells = nb.cells[1:]
    return fm


def load_notebook(
    ipynb: pathlib.Path,
    content_root: pathlib.Path,
    out_root: Optional[pathlib.Path] = None,
) -> Document:
    slug = slug_for(ipynb, content_root)
    out_dir = page_dir(out_root, slug)

    nb = nbformat.read(str(ipynb), as_version=4)
    validate(nb)

    raw = _notebook_frontmatter(nb)
    filter_and_apply_visibility(nb)

    for cell in nb.cells:
        if cell.get("cell_type") != "markdown":
            continue
        source = _norm_text(cell.get("source", ""))
        source = extract_markdown_attachments(
            source, cell.get("attachments") or {}, out_dir, url_prefix=slug
        )
        if out_dir is not None:
            source = rewrite_urls_and_copy_assets(
                source, ipynb.parent, out_dir, url_prefix=slug
            )
        cell["source"] = source

    if not raw.get("title"):
        for cell in nb.cells:
            if cell.get("cell_type") != "markdown":
                continue
            m = H1_RE.search(cell.get("source", ""))
            if m:
                raw["title"] = m.group(1).strip()
                break
    fm = Frontmatter.from_mapping(raw, source=ipynb)

    body, res = MarkdownExporter().from_notebook_node(nb)

    # nbconvert output blobs (plots etc.) get content-hashed names
    outputs = res.get("outputs") or {}
    for name, data in list(outputs.items()):
        if out_dir is None:
            break
        p = pathlib.Path(name)
        new_name = f"{slugify(p.stem) or 'output'}.{content_hash(data)}{p.suffix}"
        ensure_dir(out_dir)
        (out_dir / new_name).write_bytes(data)
        body = body.replace(name, f"{slug}{new_name}")

    html = markdown_to_html(prepare_markdown(body))
    return make_document(slug, fm, html, source=ipynb)


def _is_content_file(path: pathlib.Path, content_root: pathlib.Path) -> bool:
    rel = path.relative_to(content_root)
    if any(part.startswith((".", "_")) for part in rel.parts):
        return False
    return path.is_file() and path.suffix.lower() in (
        MARKDOWN_SUFFIXES + (NOTEBOOK_SUFFIX,)
    )


def collect_documents(
    content_root: pathlib.Path,
    out_root: Optional[pathlib.Path] = None,
    include_drafts: bool = False,
) -> List[Document]:
    """
    Load every document under `content_root` in natural path order.

    When `out_root` is given, linked local files and notebook outputs are
    copied next to each page under it. Drafts are dropped unless
    `include_drafts` is set. Two files mapping to the same slug abort the
    build with ValueError.
    """
    if not content_root.exists():
        print(f"- no content in {content_root}")
        return []

    paths = sorted(
        (p for p in content_root.rglob("*") if _is_content_file(p, content_root)),
        key=lambda p: natural_key(p.relative_to(content_root).as_posix()),
    )

    docs: List[Document] = []
    seen: Dict[str, pathlib.Path] = {}
    for p in paths:
        if p.suffix.lower() == NOTEBOOK_SUFFIX:
            doc = load_notebook(p, content_root, out_root)
        else:
            doc = load_markdown(p, content_root, out_root)

        if doc.slug == "/":
            print(f"! {p} would replace the index page, skipping")
            continue
        if doc.slug in seen:
            raise ValueError(
                f"duplicate slug {doc.slug}: {seen[doc.slug]} and {p}"
            )
        seen[doc.slug] = p

        if doc.frontmatter.draft and not include_drafts:
            print(f"- skipping draft {doc.slug}")
            continue
        docs.append(doc)
    return docs

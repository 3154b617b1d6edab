from __future__ import annotations

import hashlib
import pathlib
import re
import shutil
from typing import Optional, Set, Tuple

from .config import (
    ASSET_SOURCE_DIR_CANDIDATES,
    HTML_SRC_OR_HREF,
    MD_LINK_IMG,
    PAGE_MANIFEST,
    STATIC_MANIFEST,
)
from .utils import content_hash, slugify


def ensure_dir(p: pathlib.Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def is_relative_local(url: str) -> bool:
    if not url:
        return False
    if re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*:', url):
        return False
    if url.startswith(("#", "/")):
        return False
    return True


def copy_asset_make_name(
    src: pathlib.Path, out_dir: pathlib.Path
) -> str:
    data = src.read_bytes()
    safe_stem = slugify(src.stem) or "asset"
    fname = f"{safe_stem}.{content_hash(data)}{src.suffix.lower()}"
    ensure_dir(out_dir)
    dest = out_dir / fname
    if not dest.exists():
        dest.write_bytes(data)
    return fname


def resolve_asset_candidate(
    base_dir: pathlib.Path, url: str
) -> Optional[pathlib.Path]:
    url = url.split("#", 1)[0].split("?", 1)[0]
    if not url:
        return None
    cand = (base_dir / url).resolve()
    if cand.is_file():
        return cand
    for adir in ASSET_SOURCE_DIR_CANDIDATES:
        cand2 = (base_dir / adir / url).resolve()
        if cand2.is_file():
            return cand2
    return None


def rewrite_urls_and_copy_assets(
    text: str,
    base_dir: pathlib.Path,
    out_dir: pathlib.Path,
    url_prefix: str,
) -> str:
    """
    Rewrite markdown/HTML URLs that are local relative paths by:
    - looking up the source file near the document
    - copying it to out_dir with a hashed name
    - returning "<url_prefix>/<hashed name>"

    Links to other documents (.md/.mdx/.ipynb) or to directories are left
    alone, and so are files that do not exist (a warning is printed).
    """

    def _local_file(url: str) -> Optional[str]:
        if not is_relative_local(url):
            return None
        suffix = pathlib.Path(url.split("#", 1)[0]).suffix.lower()
        if not suffix or suffix in (".md", ".mdx", ".ipynb"):
            return None
        src = resolve_asset_candidate(base_dir, url)
        if src is None:
            print(f"! asset not found near {base_dir}: {url}")
            return None
        fname = copy_asset_make_name(src, out_dir)
        return f"{url_prefix.rstrip('/')}/{fname}"

    def _md_repl(m):
        new_url = _local_file(m.group("url"))
        if new_url is None:
            return m.group(0)
        return f"{m.group(1)}[{m.group('alt')}]({new_url})"

    def _html_repl(m):
        new_url = _local_file(m.group("url"))
        if new_url is None:
            return m.group(0)
        return f'{m.group("attr")}="{new_url}"'

    text = MD_LINK_IMG.sub(_md_repl, text)
    text = HTML_SRC_OR_HREF.sub(_html_repl, text)
    return text


def _same_bytes(a: pathlib.Path, b: pathlib.Path) -> bool:
    return (
        hashlib.sha256(a.read_bytes()).hexdigest()
        == hashlib.sha256(b.read_bytes()).hexdigest()
    )


def _walk_files(base: pathlib.Path) -> Set[str]:
    out = set()
    for p in base.rglob("*"):
        if p.is_file():
            out.add(p.relative_to(base).as_posix())
    return out


def _read_manifest(path: pathlib.Path) -> Set[str]:
    if not path.exists():
        return set()
    return {
        line for line in path.read_text(encoding="utf-8").splitlines() if line
    }


def _write_manifest(path: pathlib.Path, entries: Set[str]) -> None:
    ensure_dir(path.parent)
    path.write_text(
        "".join(f"{e}\n" for e in sorted(entries)), encoding="utf-8"
    )


def mirror_tree(
    src_dir: pathlib.Path,
    dst_dir: pathlib.Path,
    manifest: str = STATIC_MANIFEST,
) -> Tuple[int, int]:
    """
    Mirror src_dir into dst_dir and return (copied, removed).

    dst_dir also holds rendered pages, so only files listed in the
    manifest from the previous run are candidates for removal.
    """
    src_files = _walk_files(src_dir) if src_dir.exists() else set()
    previous = _read_manifest(dst_dir / manifest)

    copied = 0
    for rel in sorted(src_files):
        s = src_dir / rel
        d = dst_dir / rel
        d.parent.mkdir(parents=True, exist_ok=True)
        if (not d.exists()) or not _same_bytes(s, d):
            shutil.copy2(s, d)
            copied += 1

    removed = 0
    for rel in sorted(previous - src_files):
        stale = dst_dir / rel
        if stale.is_file():
            stale.unlink()
            removed += 1
            print(f"- removed stale static file {rel}")

    _write_manifest(dst_dir / manifest, src_files)
    return copied, removed


def prune_pages(
    out_dir: pathlib.Path,
    pages: Set[str],
    manifest: str = PAGE_MANIFEST,
) -> int:
    """
    Delete pages written by an earlier build but not by this one.

    A stale page's directory (with its copied assets) goes too, unless a
    page still lives below it.
    """
    removed = 0
    for rel in sorted(_read_manifest(out_dir / manifest) - pages):
        stale = out_dir / rel
        if stale.is_file():
            stale.unlink()
            removed += 1
            print(f"- removed stale page {rel}")
        page_dir = stale.parent
        if (
            page_dir != out_dir
            and page_dir.is_dir()
            and not any(page_dir.rglob("index.html"))
        ):
            shutil.rmtree(page_dir)
    _write_manifest(out_dir / manifest, pages)
    return removed


def write_if_changed(path: pathlib.Path, text: str) -> bool:
    """Write `text` to `path` unless it already holds exactly that."""
    data = text.encode("utf-8")
    if path.exists() and path.read_bytes() == data:
        return False
    ensure_dir(path.parent)
    path.write_bytes(data)
    return True

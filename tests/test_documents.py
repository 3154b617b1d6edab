"""Tests for loading markdown and notebook documents from disk."""

from datetime import datetime

import nbformat
import pytest
from nbformat.v4 import (
    new_code_cell,
    new_markdown_cell,
    new_notebook,
    new_output,
    new_raw_cell,
)

from blogbuilder.documents import (
    collect_documents,
    load_markdown,
    load_notebook,
    slug_for,
)

POST = """\
---
title: Deploying Laravel to Cloud Run
date: 2019-10-01T09:30:00
---

Cloud Run makes it easy to run **containers** without managing servers.

![diagram](diagram.png)

## Setting up

Build the image, push it and deploy.
"""

JOURNAL = """\
---
title: Journal 2
date: 2019-10-03
type: journal
---

Queue workers are still flaky.
"""


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestSlugFor:
    @pytest.mark.parametrize(
        "rel, slug",
        [
            ("hello-world/index.md", "/hello-world/"),
            ("hello-world.md", "/hello-world/"),
            ("notes/first.mdx", "/notes/first/"),
            ("notes/deep/index.ipynb", "/notes/deep/"),
            ("index.md", "/"),
        ],
    )
    def test_paths(self, tmp_path, rel, slug):
        assert slug_for(tmp_path / rel, tmp_path) == slug


class TestLoadMarkdown:
    def test_fields(self, tmp_path):
        md = write(tmp_path / "cloud-run" / "index.md", POST)
        doc = load_markdown(md, tmp_path)
        assert doc.slug == "/cloud-run/"
        assert doc.title == "Deploying Laravel to Cloud Run"
        assert doc.date == datetime(2019, 10, 1, 9, 30)
        assert not doc.is_journal
        assert doc.source == md
        assert "<strong>containers</strong>" in doc.body
        assert '<h2 id="setting-up">Setting up</h2>' in doc.body

    def test_excerpt_is_plain_text(self, tmp_path):
        md = write(tmp_path / "cloud-run.md", POST)
        doc = load_markdown(md, tmp_path)
        assert doc.excerpt.startswith("Cloud Run makes it easy to run containers")
        assert "<" not in doc.excerpt
        assert len(doc.excerpt) <= 140

    def test_long_body_is_pruned(self, tmp_path):
        md = write(tmp_path / "long.md", "word " * 200)
        doc = load_markdown(md, tmp_path)
        assert doc.excerpt.endswith("…")
        assert len(doc.excerpt) <= 140
        assert len(doc.description) <= 160
        assert len(doc.description) > len(doc.excerpt)

    def test_description_override(self, tmp_path):
        md = write(tmp_path / "d.md", "---\ndescription: Short blurb\n---\nBody text\n")
        assert load_markdown(md, tmp_path).description == "Short blurb"

    def test_no_frontmatter(self, tmp_path):
        md = write(tmp_path / "bare.md", "Just words.\n")
        doc = load_markdown(md, tmp_path)
        assert doc.title == "/bare/"
        assert doc.date is None
        assert doc.frontmatter.type == "post"

    def test_journal(self, tmp_path):
        md = write(tmp_path / "journal-2" / "index.md", JOURNAL)
        doc = load_markdown(md, tmp_path)
        assert doc.is_journal
        assert doc.date == datetime(2019, 10, 3)

    def test_linked_assets_copied(self, tmp_path):
        content = tmp_path / "content"
        out = tmp_path / "public"
        md = write(content / "cloud-run" / "index.md", POST)
        (md.parent / "diagram.png").write_bytes(b"\x89PNG fake")
        doc = load_markdown(md, content, out)
        copied = list((out / "cloud-run").glob("diagram.*.png"))
        assert len(copied) == 1
        assert f'src="/cloud-run/{copied[0].name}"' in doc.body

    def test_assets_untouched_without_out_root(self, tmp_path):
        md = write(tmp_path / "cloud-run" / "index.md", POST)
        (md.parent / "diagram.png").write_bytes(b"\x89PNG fake")
        doc = load_markdown(md, tmp_path)
        assert 'src="diagram.png"' in doc.body


class TestLoadNotebook:
    def _notebook(self, path, cells, **metadata):
        nb = new_notebook(cells=cells, metadata=metadata)
        path.parent.mkdir(parents=True, exist_ok=True)
        nbformat.write(nb, str(path))
        return path

    def test_title_from_first_h1_and_metadata_date(self, tmp_path):
        path = self._notebook(
            tmp_path / "analysis.ipynb",
            [
                new_markdown_cell("# Cold Start Times\n\nMeasured over a week."),
                new_code_cell(
                    "print(42)",
                    outputs=[new_output("stream", name="stdout", text="42\n")],
                ),
            ],
            date="2019-11-02",
        )
        doc = load_notebook(path, tmp_path)
        assert doc.slug == "/analysis/"
        assert doc.title == "Cold Start Times"
        assert doc.date == datetime(2019, 11, 2)
        assert "print(42)" in doc.body
        assert '<h1 id="cold-start-times">' in doc.body

    def test_raw_frontmatter_cell(self, tmp_path):
        path = self._notebook(
            tmp_path / "nb" / "index.ipynb",
            [
                new_raw_cell("---\ntitle: Notebook Journal\ntype: journal\n---\n"),
                new_markdown_cell("Some notes."),
            ],
        )
        doc = load_notebook(path, tmp_path)
        assert doc.slug == "/nb/"
        assert doc.title == "Notebook Journal"
        assert doc.is_journal
        assert "title:" not in doc.body

    def test_blog_metadata(self, tmp_path):
        path = self._notebook(
            tmp_path / "meta.ipynb",
            [new_markdown_cell("Body.")],
            blog={"title": "From Metadata", "type": "journal"},
        )
        doc = load_notebook(path, tmp_path)
        assert doc.title == "From Metadata"
        assert doc.is_journal

    def test_hidden_cells_removed(self, tmp_path):
        secret = new_code_cell("SECRET_TOKEN = 'x'")
        secret.metadata["tags"] = ["remove-cell"]
        hidden_md = new_markdown_cell("draft paragraph")
        hidden_md.metadata["jupyter"] = {"source_hidden": True}
        path = self._notebook(
            tmp_path / "vis.ipynb",
            [new_markdown_cell("# Visible"), secret, hidden_md],
        )
        doc = load_notebook(path, tmp_path)
        assert "SECRET_TOKEN" not in doc.body
        assert "draft paragraph" not in doc.body
        assert "Visible" in doc.body


class TestCollectDocuments:
    def test_collects_supported_files(self, tmp_path):
        write(tmp_path / "a" / "index.md", POST)
        write(tmp_path / "b.mdx", JOURNAL)
        write(tmp_path / "notes.txt", "ignored")
        write(tmp_path / ".ipynb_checkpoints" / "c.md", POST)
        write(tmp_path / "_drafts" / "d.md", POST)
        docs = collect_documents(tmp_path)
        assert [d.slug for d in docs] == ["/a/", "/b/"]

    def test_natural_order(self, tmp_path):
        for name in ("post-10.md", "post-2.md", "post-1.md"):
            write(tmp_path / name, "text\n")
        docs = collect_documents(tmp_path)
        assert [d.slug for d in docs] == ["/post-1/", "/post-2/", "/post-10/"]

    def test_drafts_skipped_by_default(self, tmp_path):
        write(tmp_path / "wip.md", "---\ntitle: WIP\ndraft: true\n---\ntext\n")
        write(tmp_path / "done.md", "---\ntitle: Done\n---\ntext\n")
        assert [d.slug for d in collect_documents(tmp_path)] == ["/done/"]
        assert len(collect_documents(tmp_path, include_drafts=True)) == 2

    def test_duplicate_slug_raises(self, tmp_path):
        write(tmp_path / "same" / "index.md", "one\n")
        write(tmp_path / "same.md", "two\n")
        with pytest.raises(ValueError, match="duplicate slug /same/"):
            collect_documents(tmp_path)

    def test_root_index_skipped(self, tmp_path, capsys):
        write(tmp_path / "index.md", "root\n")
        assert collect_documents(tmp_path) == []
        assert "would replace the index page" in capsys.readouterr().out

    def test_missing_root(self, tmp_path):
        assert collect_documents(tmp_path / "nope") == []

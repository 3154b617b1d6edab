"""Tests for heading anchors, code/math-safe rewriting and HTML output."""

from blogbuilder.markdown_processing import (
    anchor_headings,
    extract_markdown_attachments,
    map_noncode,
    markdown_to_html,
    pad_block_html,
    prepare_markdown,
)


class TestAnchorHeadings:
    def test_atx_headings_get_ids(self):
        out = anchor_headings("# Intro\n\ntext\n\n## Next Steps\n", {})
        assert "# Intro {#intro}" in out
        assert "## Next Steps {#next-steps}" in out
        assert out.endswith("\n")

    def test_repeated_headings_get_suffixes(self):
        out = anchor_headings("# Intro\n\n# Intro\n\n# Intro\n", {})
        assert "{#intro}" in out
        assert "{#intro-1}" in out
        assert "{#intro-2}" in out

    def test_existing_id_is_kept(self):
        used = {}
        out = anchor_headings("## Custom {#mine}\n\n## Mine\n", used)
        assert "## Custom {#mine}" in out
        assert "## Mine {#mine-1}" in out

    def test_setext_headings(self):
        out = anchor_headings("Title\n=====\n\nSub\n---\n", {})
        assert "# Title {#title}" in out
        assert "## Sub {#sub}" in out

    def test_symbols_only_heading(self):
        assert "{#section}" in anchor_headings("# ???\n", {})


class TestCodeSafety:
    def test_map_noncode_skips_fences(self):
        md = "a\n```\na\n```\na"
        assert map_noncode(md, lambda s: s.replace("a", "b")) == "b\n```\na\n```\nb"

    def test_prepare_leaves_code_comments_alone(self):
        md = "# Title\n\n```\n# not a heading\n```\n"
        out = prepare_markdown(md)
        assert "# Title {#title}" in out
        assert "# not a heading\n" in out
        assert "{#not-a-heading}" not in out

    def test_prepare_leaves_math_alone(self):
        out = prepare_markdown("Cost is $a_1 + b_1$ here\n")
        assert "$a_1 + b_1$" in out

    def test_pad_block_html(self):
        out = pad_block_html("text\n<div>hi</div>\nmore\n")
        assert out == "text\n\n<div>hi</div>\n\nmore\n"


class TestMarkdownToHtml:
    def test_heading_ids_become_attributes(self):
        html = markdown_to_html(prepare_markdown("## Hello World\n"))
        assert '<h2 id="hello-world">Hello World</h2>' in html

    def test_fenced_code(self):
        html = markdown_to_html("```python\nx = 1\n```\n")
        assert "<code" in html
        assert "x = 1" in html

    def test_tables(self):
        html = markdown_to_html("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in html


class TestAttachments:
    def test_attachment_written_and_linked(self, tmp_path):
        # 1x1 transparent GIF
        gif = "R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"
        src = extract_markdown_attachments(
            "![dot](attachment:dot.gif)",
            {"dot.gif": {"image/gif": gif}},
            tmp_path,
            url_prefix="/nb/",
        )
        written = list(tmp_path.glob("att-dot.*.gif"))
        assert len(written) == 1
        assert src == f"![dot](/nb/{written[0].name})"

    def test_no_out_dir_leaves_source(self):
        src = extract_markdown_attachments(
            "![dot](attachment:dot.gif)", {"dot.gif": {"image/gif": ""}}, None, "/nb/"
        )
        assert src == "![dot](attachment:dot.gif)"

from __future__ import annotations

import pathlib
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import TEMPLATE_DIR
from .models import Document, SiteConfig
from .typography import Typography, style
from .utils import format_date


class Renderer:
    """Turns classified documents into HTML pages with the site's templates."""

    def __init__(
        self,
        site: SiteConfig,
        typography: Typography,
        template_dir: pathlib.Path = TEMPLATE_DIR,
    ):
        self.site = site
        self.typography = typography
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(
                enabled_extensions=("html.j2", "xml.j2"),
                default_for_string=True,
            ),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["date"] = format_date
        self.env.filters["style"] = style
        self.env.globals.update(
            site=site,
            typography=typography,
            rhythm=typography.rhythm,
            scale=typography.scale,
        )

    def render(self, template: str, **context) -> str:
        return self.env.get_template(template).render(**context)

    def index(
        self, posts: Sequence[Document], journals: Sequence[Document]
    ) -> str:
        return self.render(
            "index.html.j2",
            is_root=True,
            page_title="All posts",
            posts=posts,
            journals=journals,
        )

    def post(
        self,
        doc: Document,
        previous: Optional[Document] = None,
        next: Optional[Document] = None,
    ) -> str:
        return self.render(
            "post.html.j2",
            is_root=False,
            page_title=doc.title,
            description=doc.description,
            post=doc,
            wide=doc.frontmatter.wide,
            previous=previous,
            next=next,
        )

    def not_found(self) -> str:
        return self.render("404.html.j2", is_root=False, page_title="404: Not Found")

"""Validated shapes for frontmatter, documents and site configuration."""

from __future__ import annotations

import pathlib
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .config import JOURNAL, POST
from .utils import coerce_bool, coerce_datetime


class Frontmatter(BaseModel):
    """Metadata block at the top of a content document."""

    model_config = {"frozen": True, "extra": "allow"}

    title: Optional[str] = None
    date: Optional[datetime] = None
    type: Literal["post", "journal"] = POST
    description: Optional[str] = None
    draft: bool = False
    wide: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        if v is None:
            return None
        return coerce_datetime(v)

    @classmethod
    def from_mapping(
        cls, data: Optional[Dict[str, Any]], source: Any = None
    ) -> "Frontmatter":
        """
        Validate raw YAML frontmatter, defaulting malformed values.

        A date that cannot be parsed becomes None (the document then sorts
        after every dated one), an unknown `type` becomes "post" and a
        flag that is not boolean becomes False. Non-string keys are
        stringified. Each of these prints a warning naming `source`.
        """
        where = f"{source}: " if source is not None else ""
        fm: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if not isinstance(key, str):
                print(f"! {where}frontmatter key {key!r} is not a string")
                key = str(key)
            fm.setdefault(key, value)

        if fm.get("date") is not None and coerce_datetime(fm["date"]) is None:
            print(f"! {where}unparseable date {fm['date']!r}, sorting last")
            fm["date"] = None

        kind = fm.get("type")
        if kind is None:
            fm.pop("type", None)
        elif kind not in (POST, JOURNAL):
            print(f"! {where}unknown type {kind!r}, treating as {POST}")
            fm["type"] = POST

        for key in ("draft", "wide"):
            if key not in fm:
                continue
            flag = coerce_bool(fm[key])
            if flag is None:
                print(f"! {where}{key} {fm[key]!r} is not a boolean, using false")
                flag = False
            fm[key] = flag

        for key in ("title", "description"):
            if fm.get(key) is not None and not isinstance(fm[key], str):
                fm[key] = str(fm[key])

        return cls.model_validate(fm)


class Document(BaseModel):
    """A compiled content entry, ready for classification and rendering."""

    model_config = {"frozen": True}

    slug: str
    frontmatter: Frontmatter = Field(default_factory=Frontmatter)
    excerpt: str = ""
    description: str = ""
    body: str = ""
    source: Optional[pathlib.Path] = None

    @property
    def title(self) -> str:
        return self.frontmatter.title or self.slug

    @property
    def date(self) -> Optional[datetime]:
        return self.frontmatter.date

    @property
    def is_journal(self) -> bool:
        return self.frontmatter.type == JOURNAL

    @property
    def url(self) -> str:
        return self.slug


class NewsletterConfig(BaseModel):
    heading: str = "Get Rafter news in your inbox"
    action: str = "https://buttondown.email/api/emails/embed-subscribe/jplhomer"
    popup_url: str = "https://buttondown.email/jplhomer"
    provider_name: str = "Buttondown"
    provider_url: str = "https://buttondown.email"


class TypographyConfig(BaseModel):
    base_font_size: float = 16.0
    base_line_height: float = 1.5625
    scale_ratio: float = 2.0
    header_font_family: List[str] = Field(
        default_factory=lambda: ["Source Serif Pro", "serif"]
    )
    body_font_family: List[str] = Field(
        default_factory=lambda: ["Source Sans Pro", "sans-serif"]
    )


class SiteConfig(BaseModel):
    """Site-wide settings read from site.yml."""

    title: str = "Rafter Blog"
    author: str = ""
    description: str = ""
    site_url: str = ""
    bio: str = ""
    include_drafts: bool = False
    feed_limit: int = Field(default=20, ge=0)
    newsletter: NewsletterConfig = Field(default_factory=NewsletterConfig)
    typography: TypographyConfig = Field(default_factory=TypographyConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SiteConfig":
        if data is None:
            return cls()
        return cls(**data)

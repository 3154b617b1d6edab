"""
Vertical rhythm and modular scale helpers for the page templates.

A `Typography` value is built once from site configuration and handed to
the renderer; templates call `rhythm()` and `scale()` on it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

from .models import TypographyConfig


def _fmt(value: float) -> str:
    return f"{round(value, 4):g}rem"


@dataclass(frozen=True)
class Typography:
    base_font_size: float = 16.0
    base_line_height: float = 1.5625
    scale_ratio: float = 2.0
    header_font_family: Tuple[str, ...] = ("Source Serif Pro", "serif")
    body_font_family: Tuple[str, ...] = ("Source Sans Pro", "sans-serif")

    @classmethod
    def from_config(cls, cfg: TypographyConfig) -> "Typography":
        return cls(
            base_font_size=cfg.base_font_size,
            base_line_height=cfg.base_line_height,
            scale_ratio=cfg.scale_ratio,
            header_font_family=tuple(cfg.header_font_family),
            body_font_family=tuple(cfg.body_font_family),
        )

    def rhythm(self, lines: float) -> str:
        """Height of `lines` baseline rows, in rem."""
        return _fmt(lines * self.base_line_height)

    def scale(self, value: float) -> Dict[str, str]:
        """
        Font size `value` steps up the modular scale, with a line height
        that keeps text on the baseline grid.
        """
        font_size = self.scale_ratio ** value
        rows = math.ceil(font_size / self.base_line_height)
        line_height = rows * self.base_line_height / font_size
        return {
            "fontSize": _fmt(font_size),
            "lineHeight": f"{round(line_height, 4):g}",
        }

    def font_stack(self, families: Tuple[str, ...]) -> str:
        return ", ".join(
            f"'{f}'" if " " in f else f for f in families
        )

    def base_css(self) -> str:
        return (
            f"html{{font-size:{self.base_font_size:g}px;"
            f"line-height:{self.base_line_height:g};"
            f"font-family:{self.font_stack(self.body_font_family)}}}"
            f"h1,h2,h3,h4,h5,h6{{font-family:"
            f"{self.font_stack(self.header_font_family)}}}"
        )


def style(props: Dict[str, str]) -> str:
    """Render a style mapping (camelCase keys allowed) as an inline CSS string."""
    out = []
    for key, value in props.items():
        css_key = "".join(f"-{c.lower()}" if c.isupper() else c for c in key)
        out.append(f"{css_key}: {value}")
    return "; ".join(out)

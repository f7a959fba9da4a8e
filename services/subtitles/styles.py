"""Resolve caller style options against the style defaults table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from shared.config import config
from shared.models import StyleConfig

# Single source of default caption styling; render.yaml `style_defaults` overrides entries.
STYLE_DEFAULTS: dict[str, Any] = {
    "font_top": "Lexend",
    "font_bottom": "Cormorant Garamond",
    "font_size_top": 64,
    "font_size_bottom": 100,
    "color_top": "white",
    "color_bottom": "#FFD100",
    "font_weight_top": "700",
    "font_weight_bottom": "400",
    "is_italic_top": False,
    "is_italic_bottom": True,
    "padding_bottom": 160,
}

BOLD_WEIGHT_THRESHOLD = 600
_BOLD_KEYWORDS = {"bold", "bolder", "black", "heavy"}


@dataclass(frozen=True)
class LineStyle:
    """Fully resolved style for one caption line, in reference-height pixels."""

    font: str
    font_size: float
    color: Any
    bold: bool
    italic: bool


@dataclass(frozen=True)
class ResolvedStyle:
    top: LineStyle
    bottom: LineStyle
    padding_bottom: float


def is_bold_weight(weight: Any) -> bool:
    """Return True for CSS font weights that should render bold."""
    if weight is None or isinstance(weight, bool):
        return False
    if isinstance(weight, (int, float)):
        return weight >= BOLD_WEIGHT_THRESHOLD
    token = str(weight).strip().lower()
    if token in _BOLD_KEYWORDS:
        return True
    try:
        return float(token) >= BOLD_WEIGHT_THRESHOLD
    except ValueError:
        return False


def _clean_font_name(font: str) -> str:
    # Style records are comma separated
    return " ".join(font.replace(",", " ").split())


class StyleResolver:
    """Merge a request's StyleConfig with the defaults table, once per job."""

    def __init__(self, defaults: dict[str, Any] | None = None) -> None:
        configured = config.get_pipeline_value("style_defaults", {}) or {}
        self.defaults: dict[str, Any] = {**STYLE_DEFAULTS, **configured, **(defaults or {})}

    def _pick(self, value: Any, key: str) -> Any:
        return self.defaults[key] if value is None else value

    def _font(self, role_font: str | None, shared_font: str | None, key: str) -> str:
        for candidate in (role_font, shared_font):
            if candidate and candidate.strip():
                return _clean_font_name(candidate)
        return _clean_font_name(str(self.defaults[key]))

    def resolve(self, style: StyleConfig | None) -> ResolvedStyle:
        style = style or StyleConfig()

        top = LineStyle(
            font=self._font(style.font_top, style.font, "font_top"),
            font_size=float(self._pick(style.font_size_top, "font_size_top")),
            color=self._pick(style.color_top, "color_top"),
            bold=is_bold_weight(self._pick(style.font_weight_top, "font_weight_top")),
            italic=bool(self._pick(style.is_italic_top, "is_italic_top")),
        )
        bottom = LineStyle(
            font=self._font(style.font_bottom, style.font, "font_bottom"),
            font_size=float(self._pick(style.font_size_bottom, "font_size_bottom")),
            color=self._pick(style.color_bottom, "color_bottom"),
            bold=is_bold_weight(self._pick(style.font_weight_bottom, "font_weight_bottom")),
            italic=bool(self._pick(style.is_italic_bottom, "is_italic_bottom")),
        )
        return ResolvedStyle(
            top=top,
            bottom=bottom,
            padding_bottom=float(self._pick(style.padding_bottom, "padding_bottom")),
        )

"""Caption layout: scale authored style values to the real video resolution."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from services.subtitles.styles import ResolvedStyle
from shared.config import config
from shared.logging_utils import setup_logging
from shared.models import VideoMetadata

logger = setup_logging("caption-layout")

REFERENCE_HEIGHT = 1080
DAMPED_REFERENCE_HEIGHT = 360

ScalePolicy = Callable[[int], float]


def linear_scale(height: int) -> float:
    """Scale proportionally to the reference height."""
    return height / REFERENCE_HEIGHT


def damped_scale(height: int) -> float:
    """Square-root scaling; grows slower than linear on tall videos."""
    return math.sqrt(height / DAMPED_REFERENCE_HEIGHT)


SCALE_POLICIES: dict[str, ScalePolicy] = {
    "linear": linear_scale,
    "damped": damped_scale,
}


def get_scale_policy(name: str | None) -> ScalePolicy:
    """Look up a registered scale policy by name, defaulting to linear."""
    policy = SCALE_POLICIES.get((name or "linear").lower())
    if policy is None:
        logger.warning(f"Unknown scale policy {name!r}, using linear")
        return linear_scale
    return policy


@dataclass(frozen=True)
class LineAnchor:
    """Bottom-center anchor of a caption line in video pixels."""

    x: int
    y: int


@dataclass(frozen=True)
class CaptionLayout:
    width: int
    height: int
    scale: float
    center_x: int
    top_font_size: int
    bottom_font_size: int
    outline: int
    shadow: int
    top_y: int
    bottom_y: int
    stacked_top_y: int
    stacked_bottom_y: int

    def anchors(self, has_top: bool, has_bottom: bool) -> tuple[LineAnchor, LineAnchor]:
        """Anchors for the top and bottom lines of one frame."""
        if has_top and has_bottom:
            return (
                LineAnchor(self.center_x, self.stacked_top_y),
                LineAnchor(self.center_x, self.stacked_bottom_y),
            )
        return LineAnchor(self.center_x, self.top_y), LineAnchor(self.center_x, self.bottom_y)


class LayoutCalculator:
    """Derive font sizes and line anchors for a resolved style and resolution.

    Lines are anchored bottom-center (ASS alignment 2), so a Y value is the
    bottom edge of the line. The top line sits above the bottom line by the
    bottom line's height plus a scaled gap.
    """

    def __init__(
        self,
        scale_policy: ScalePolicy | None = None,
        min_font_size: int | None = None,
        max_font_size: int | None = None,
        line_gap: float | None = None,
        stacked_nudge_ratio: float | None = None,
        outline: float | None = None,
        shadow: float | None = None,
    ) -> None:
        self.scale_policy = scale_policy or get_scale_policy(
            config.get_pipeline_value("layout.scale_policy", "linear")
        )
        self.min_font_size = int(
            min_font_size if min_font_size is not None else config.get_pipeline_value("layout.min_font_size", 16)
        )
        self.max_font_size = int(
            max_font_size if max_font_size is not None else config.get_pipeline_value("layout.max_font_size", 220)
        )
        self.line_gap = float(
            line_gap if line_gap is not None else config.get_pipeline_value("layout.line_gap", 12)
        )
        self.stacked_nudge_ratio = float(
            stacked_nudge_ratio
            if stacked_nudge_ratio is not None
            else config.get_pipeline_value("layout.stacked_nudge_ratio", 0.25)
        )
        self.outline = float(outline if outline is not None else config.get_pipeline_value("layout.outline", 3))
        self.shadow = float(shadow if shadow is not None else config.get_pipeline_value("layout.shadow", 2))

    def _font_size(self, authored: float, scale: float) -> int:
        return min(max(int(round(authored * scale)), self.min_font_size), self.max_font_size)

    @staticmethod
    def _bottom_edge(raw_y: float, height: int) -> int:
        return min(max(int(round(raw_y)), 1), height)

    @staticmethod
    def _top_edge(bottom_y: int, bottom_font_size: int, gap: float) -> int:
        raw = int(round(bottom_y - bottom_font_size - gap))
        return min(max(raw, 0), bottom_y - 1)

    def compute(self, style: ResolvedStyle, metadata: VideoMetadata) -> CaptionLayout:
        scale = self.scale_policy(metadata.height)
        top_font_size = self._font_size(style.top.font_size, scale)
        bottom_font_size = self._font_size(style.bottom.font_size, scale)

        padding = style.padding_bottom * scale
        gap = self.line_gap * scale
        nudge = bottom_font_size * self.stacked_nudge_ratio

        bottom_y = self._bottom_edge(metadata.height - padding, metadata.height)
        stacked_bottom_y = self._bottom_edge(metadata.height - padding + nudge, metadata.height)

        layout = CaptionLayout(
            width=metadata.width,
            height=metadata.height,
            scale=scale,
            center_x=metadata.width // 2,
            top_font_size=top_font_size,
            bottom_font_size=bottom_font_size,
            outline=max(1, int(round(self.outline * scale))),
            shadow=max(0, int(round(self.shadow * scale))),
            top_y=self._top_edge(bottom_y, bottom_font_size, gap),
            bottom_y=bottom_y,
            stacked_top_y=self._top_edge(stacked_bottom_y, bottom_font_size, gap),
            stacked_bottom_y=stacked_bottom_y,
        )
        logger.debug(
            f"Layout for {metadata.width}x{metadata.height}: scale={scale:.3f} "
            f"fonts={top_font_size}/{bottom_font_size} y={layout.top_y}/{layout.bottom_y}"
        )
        return layout

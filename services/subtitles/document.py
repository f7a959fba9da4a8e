"""ASS subtitle document value objects and serialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from services.subtitles.layout import LineAnchor
from shared.media_utils import format_ass_timestamp

SCRIPT_INFO_TEMPLATE = """[Script Info]
ScriptType: v4.00+
PlayResX: {width}
PlayResY: {height}
WrapStyle: 0
ScaledBorderAndShadow: yes
YCbCr Matrix: None
"""

STYLE_FORMAT = (
    "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, "
    "Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, "
    "Shadow, Alignment, MarginL, MarginR, MarginV, Encoding"
)
EVENT_FORMAT = "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text"

# Numpad alignment: bottom-center
ALIGN_BOTTOM_CENTER = 2


@dataclass(frozen=True)
class SubtitleStyleRecord:
    name: str
    font: str
    font_size: int
    primary_color: str
    outline_color: str
    back_color: str
    bold: bool
    italic: bool
    outline: int
    shadow: int
    secondary_color: str = "&H000000FF"
    alignment: int = ALIGN_BOTTOM_CENTER

    def render(self) -> str:
        bold = -1 if self.bold else 0
        italic = -1 if self.italic else 0
        return (
            f"Style: {self.name},{self.font},{self.font_size},{self.primary_color},"
            f"{self.secondary_color},{self.outline_color},{self.back_color},{bold},{italic},0,0,"
            f"100,100,0,0,1,{self.outline},{self.shadow},{self.alignment},0,0,0,1"
        )


@dataclass(frozen=True)
class SubtitleEvent:
    """One Dialogue line. Text is already escaped for the ASS payload."""

    start: float
    end: float
    style_name: str
    position: LineAnchor
    text: str
    layer: int = 0

    @property
    def start_timestamp(self) -> str:
        return format_ass_timestamp(self.start)

    @property
    def end_timestamp(self) -> str:
        return format_ass_timestamp(self.end)

    def render(self) -> str:
        override = f"{{\\an{ALIGN_BOTTOM_CENTER}\\pos({self.position.x},{self.position.y})}}"
        return (
            f"Dialogue: {self.layer},{self.start_timestamp},{self.end_timestamp},"
            f"{self.style_name},,0,0,0,,{override}{self.text}"
        )


@dataclass(frozen=True)
class SubtitleDocument:
    width: int
    height: int
    styles: tuple[SubtitleStyleRecord, ...]
    events: tuple[SubtitleEvent, ...] = field(default_factory=tuple)

    @property
    def style_names(self) -> set[str]:
        return {style.name for style in self.styles}

    def render(self) -> str:
        sections = [
            SCRIPT_INFO_TEMPLATE.format(width=self.width, height=self.height),
            "\n".join(["[V4+ Styles]", STYLE_FORMAT, *(style.render() for style in self.styles)]) + "\n",
            "\n".join(["[Events]", EVENT_FORMAT, *(event.render() for event in self.events)]) + "\n",
        ]
        return "\n".join(sections)

    def write(self, path: Path) -> Path:
        path.write_text(self.render(), encoding="utf-8")
        return path

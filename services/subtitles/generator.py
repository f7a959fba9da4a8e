"""Build the ASS subtitle document for a render job."""

from shared.enums import CaptionRole
from shared.logging_utils import setup_logging
from shared.media_utils import css_to_ass_color, escape_ass_text, ms_to_seconds
from shared.models import CaptionFrame, VideoMetadata

from services.subtitles.document import SubtitleDocument, SubtitleEvent, SubtitleStyleRecord
from services.subtitles.layout import CaptionLayout, LayoutCalculator
from services.subtitles.styles import LineStyle, ResolvedStyle
from services.subtitles.validator import SubtitleValidator

logger = setup_logging("subtitle-generator")

STYLE_NAMES = {
    CaptionRole.TOP: "CaptionTop",
    CaptionRole.BOTTOM: "CaptionBottom",
}
OUTLINE_COLOR = "&H00000000"
SHADOW_COLOR = "&H80000000"


class SubtitleGenerator:
    """Compile caption frames and a resolved style into a SubtitleDocument.

    ``line1`` renders with the top style, ``line2`` with the bottom style.
    Each event carries its own absolute position so the document does not
    depend on style margins.
    """

    def __init__(
        self,
        layout_calculator: LayoutCalculator | None = None,
        validator: SubtitleValidator | None = None,
    ):
        self.layout_calculator = layout_calculator or LayoutCalculator()
        self.validator = validator or SubtitleValidator()

    def build(
        self,
        frames: list[CaptionFrame],
        style: ResolvedStyle,
        metadata: VideoMetadata,
    ) -> SubtitleDocument:
        layout = self.layout_calculator.compute(style, metadata)
        styles = (
            self._style_record(STYLE_NAMES[CaptionRole.TOP], style.top, layout.top_font_size, layout),
            self._style_record(STYLE_NAMES[CaptionRole.BOTTOM], style.bottom, layout.bottom_font_size, layout),
        )

        events: list[SubtitleEvent] = []
        for frame in frames:
            events.extend(self._frame_events(frame, layout))

        document = SubtitleDocument(
            width=metadata.width,
            height=metadata.height,
            styles=styles,
            events=tuple(events),
        )
        self.validator.validate(document)

        logger.info(
            f"Built subtitle document with {len(events)} events from {len(frames)} frames "
            f"at {metadata.width}x{metadata.height}"
        )
        return document

    @staticmethod
    def _style_record(name: str, line: LineStyle, font_size: int, layout: CaptionLayout) -> SubtitleStyleRecord:
        return SubtitleStyleRecord(
            name=name,
            font=line.font,
            font_size=font_size,
            primary_color=css_to_ass_color(line.color),
            outline_color=OUTLINE_COLOR,
            back_color=SHADOW_COLOR,
            bold=line.bold,
            italic=line.italic,
            outline=layout.outline,
            shadow=layout.shadow,
        )

    @staticmethod
    def _frame_events(frame: CaptionFrame, layout: CaptionLayout) -> list[SubtitleEvent]:
        top_text = escape_ass_text(frame.line1)
        bottom_text = escape_ass_text(frame.line2)
        if not top_text and not bottom_text:
            return []

        start = ms_to_seconds(frame.start_ms)
        end = ms_to_seconds(frame.effective_end_ms)
        top_anchor, bottom_anchor = layout.anchors(bool(top_text), bool(bottom_text))

        events = []
        if top_text:
            events.append(
                SubtitleEvent(
                    start=start,
                    end=end,
                    style_name=STYLE_NAMES[CaptionRole.TOP],
                    position=top_anchor,
                    text=top_text,
                )
            )
        if bottom_text:
            events.append(
                SubtitleEvent(
                    start=start,
                    end=end,
                    style_name=STYLE_NAMES[CaptionRole.BOTTOM],
                    position=bottom_anchor,
                    text=bottom_text,
                )
            )
        return events

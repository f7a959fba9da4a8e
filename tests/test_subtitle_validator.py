"""Tests for subtitle document validation."""

import pytest

from services.subtitles.document import SubtitleDocument, SubtitleEvent, SubtitleStyleRecord
from services.subtitles.layout import LineAnchor
from services.subtitles.validator import SubtitleValidationError, SubtitleValidator

STYLE = SubtitleStyleRecord(
    name="CaptionTop",
    font="Lexend",
    font_size=64,
    primary_color="&H00FFFFFF",
    outline_color="&H00000000",
    back_color="&H80000000",
    bold=True,
    italic=False,
    outline=3,
    shadow=2,
)


def _document(*events: SubtitleEvent) -> SubtitleDocument:
    return SubtitleDocument(width=1920, height=1080, styles=(STYLE,), events=events)


def _event(start: float = 0.0, end: float = 1.0, style: str = "CaptionTop", x: int = 960, y: int = 900, text: str = "Hi") -> SubtitleEvent:
    return SubtitleEvent(start=start, end=end, style_name=style, position=LineAnchor(x, y), text=text)


class TestSubtitleValidator:
    """Test document invariants."""

    def test_valid_document(self) -> None:
        result = SubtitleValidator().validate(_document(_event(), _event(1.0, 2.0)))

        assert result["valid"] is True
        assert result["violations"] == []
        assert result["total_events"] == 2

    def test_non_positive_duration(self) -> None:
        """Durations are checked at centisecond precision."""
        validator = SubtitleValidator()
        result = validator.validate(_document(_event(1.0, 1.004)), strict=False)

        assert result["valid"] is False
        assert result["violations"][0]["type"] == "non_positive_duration"

    def test_unknown_style(self) -> None:
        result = SubtitleValidator().validate(_document(_event(style="Missing")), strict=False)
        assert [v["type"] for v in result["violations"]] == ["unknown_style"]

    @pytest.mark.parametrize("x, y", [(-1, 10), (10, 1081), (1921, 10)])
    def test_position_outside_canvas(self, x: int, y: int) -> None:
        result = SubtitleValidator().validate(_document(_event(x=x, y=y)), strict=False)
        assert [v["type"] for v in result["violations"]] == ["position_out_of_canvas"]

    def test_long_text_is_only_a_warning(self) -> None:
        result = SubtitleValidator(max_chars_per_event=5).validate(_document(_event(text="too long text")))

        assert result["valid"] is True
        assert result["warnings"][0]["type"] == "text_too_long"

    def test_strict_mode_raises(self) -> None:
        with pytest.raises(SubtitleValidationError) as excinfo:
            SubtitleValidator().validate(_document(_event(2.0, 1.0), _event(style="Nope")))

        assert len(excinfo.value.violations) == 2

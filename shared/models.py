from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.enums import PlanTier

DEFAULT_FRAME_DURATION_MS = 2000
MIN_EVENT_DURATION_MS = 10


class CaptionFrame(BaseModel):
    """One timed caption frame: up to two lines shown between start and end."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    start_ms: int = Field(default=0, ge=0, alias="start", description="Start offset in milliseconds")
    end_ms: int | None = Field(default=None, ge=0, alias="end", description="End offset in milliseconds")
    line1: str | None = Field(None, description="Top caption line")
    line2: str | None = Field(None, description="Bottom caption line")

    @field_validator("start_ms", mode="before")
    @classmethod
    def _missing_start_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def effective_end_ms(self) -> int:
        """End offset, falling back to a two second display when absent or degenerate."""
        if self.end_ms is None or self.end_ms - self.start_ms < MIN_EVENT_DURATION_MS:
            return self.start_ms + DEFAULT_FRAME_DURATION_MS
        return self.end_ms


class StyleConfig(BaseModel):
    """Caller supplied caption style. Unset fields resolve from the style defaults table."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    font: str | None = Field(None, description="Font family applied to both lines")
    font_top: str | None = Field(None, alias="fontTop")
    font_bottom: str | None = Field(None, alias="fontBottom")
    font_size_top: float | None = Field(None, gt=0, le=1000, alias="fontSizeTop")
    font_size_bottom: float | None = Field(None, gt=0, le=1000, alias="fontSizeBottom")
    color_top: Any = Field(None, alias="colorTop", description="CSS color; anything unparseable renders white")
    color_bottom: Any = Field(None, alias="colorBottom")
    font_weight_top: str | int | None = Field(None, alias="fontWeightTop")
    font_weight_bottom: str | int | None = Field(None, alias="fontWeightBottom")
    is_italic_top: bool | None = Field(None, alias="isItalicTop")
    is_italic_bottom: bool | None = Field(None, alias="isItalicBottom")
    padding_bottom: float | None = Field(None, ge=0, le=10000, alias="paddingBottom")


class VideoMetadata(BaseModel):
    """Resolution of the source video."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


DEFAULT_VIDEO_METADATA = VideoMetadata(width=1920, height=1080)


class RenderJob(BaseModel):
    """A single caption burn-in request."""

    model_config = ConfigDict(extra="ignore")

    job_id: str = Field(..., min_length=1, description="Caller job identifier, used to name artifacts")
    video_url: str = Field(..., min_length=1, description="Source video to caption")
    frames: list[CaptionFrame] = Field(..., description="Caption frames in display order")
    style: StyleConfig = Field(default_factory=StyleConfig)
    plan_tier: PlanTier = Field(default=PlanTier.FREE)
    watermark_url: str | None = Field(None, description="Watermark image for tiers that require branding")
    callback_url: str | None = Field(None, description="Webhook notified after a successful render")
    reservation_id: str | None = Field(None, description="Opaque caller reference echoed in responses")

    @field_validator("style", mode="before")
    @classmethod
    def _null_style_is_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("plan_tier", mode="before")
    @classmethod
    def _normalize_tier(cls, value: Any) -> Any:
        if value is None:
            return PlanTier.FREE
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("watermark_url", "callback_url", mode="before")
    @classmethod
    def _blank_url_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

"""Composition graph: watermark and subtitle layers over the source video.

The graph is a list of stages with explicit pad labels. It renders to an
ffmpeg ``-filter_complex`` string, and ``build_ffmpeg_command`` turns it into
the encoder argument list. Input pads are derived from the position of each
declared input, so ``[0:v]`` is always the source video.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from services.render.errors import RenderError
from services.render.fonts import FontIndex
from services.render.watermark import WatermarkDecision
from shared.config import config
from shared.enums import WatermarkMode
from shared.logging_utils import setup_logging

logger = setup_logging("composition-graph")

VIDEO_INPUT = "video"
WATERMARK_INPUT = "watermark"
OUTPUT_PAD = "vout"
WATERMARKED_PAD = "watermarked"
SCALED_WATERMARK_PAD = "wm"

# Characters that need escaping inside a filter option value
_FILTER_RESERVED = re.compile(r"[\\':\[\],;]")


class CompositionGraphError(RenderError):
    code = "invalid_composition_graph"


def escape_filter_value(value: str) -> str:
    """Escape a value (path or text) for use as a filter option in a filtergraph.

    ffmpeg unescapes twice: once when splitting the graph into filters and
    once when splitting a filter's options, so both levels are applied.
    """
    if not _FILTER_RESERVED.search(value):
        return value
    option_level = value.replace("\\", "\\\\").replace("'", "\\'").replace(":", "\\:")
    graph_level = option_level
    for char in ("\\", "'", "[", "]", ",", ";"):
        graph_level = graph_level.replace(char, "\\" + char)
    return graph_level


@dataclass(frozen=True)
class GraphInput:
    label: str
    path: Path


@dataclass(frozen=True)
class GraphStage:
    name: str
    filter: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]

    def render(self) -> str:
        pads_in = "".join(f"[{pad}]" for pad in self.inputs)
        pads_out = "".join(f"[{pad}]" for pad in self.outputs)
        return f"{pads_in}{self.filter}{pads_out}"


@dataclass(frozen=True)
class CompositionGraph:
    inputs: tuple[GraphInput, ...]
    stages: tuple[GraphStage, ...]
    output_pad: str
    mode: WatermarkMode

    def input_index(self, label: str) -> int:
        for index, item in enumerate(self.inputs):
            if item.label == label:
                return index
        raise CompositionGraphError(f"Composition graph has no {label!r} input")

    @property
    def video_input_index(self) -> int:
        return self.input_index(VIDEO_INPUT)

    def external_pads(self) -> set[str]:
        pads: set[str] = set()
        for index, _ in enumerate(self.inputs):
            pads.update({f"{index}:v", f"{index}:a"})
        return pads

    def validate(self) -> None:
        """Every consumed pad must be an input stream or produced by an earlier stage, once."""
        available = self.external_pads()
        produced: set[str] = set()
        consumed: set[str] = set()

        for stage in self.stages:
            for pad in stage.inputs:
                if pad not in available:
                    raise CompositionGraphError(
                        f"Stage {stage.name!r} consumes pad [{pad}] before it is produced"
                    )
                if pad in produced and pad in consumed:
                    raise CompositionGraphError(f"Pad [{pad}] is consumed more than once")
                consumed.add(pad)
            for pad in stage.outputs:
                if pad in produced or pad in self.external_pads():
                    raise CompositionGraphError(f"Pad [{pad}] is produced more than once")
                produced.add(pad)
                available.add(pad)

        if self.output_pad not in produced:
            raise CompositionGraphError(f"Output pad [{self.output_pad}] is never produced")

        dangling = produced - consumed - {self.output_pad}
        if dangling:
            raise CompositionGraphError(f"Pads {sorted(dangling)} are produced but never used")

    def filter_complex(self) -> str:
        return ";".join(stage.render() for stage in self.stages)


@dataclass(frozen=True)
class EncodeSettings:
    video_codec: str = "libx264"
    preset: str = "veryfast"
    crf: int = 18
    audio_codec: str = "copy"
    pixel_format: str = "yuv420p"

    @classmethod
    def from_config(cls) -> "EncodeSettings":
        return cls(
            video_codec=str(config.get_pipeline_value("encode.video_codec", cls.video_codec)),
            preset=str(config.get_pipeline_value("encode.preset", cls.preset)),
            crf=int(config.get_pipeline_value("encode.crf", cls.crf)),
            audio_codec=str(config.get_pipeline_value("encode.audio_codec", cls.audio_codec)),
        )


def build_ffmpeg_command(
    graph: CompositionGraph,
    output_path: Path,
    settings: EncodeSettings | None = None,
    ffmpeg_binary: str = "ffmpeg",
) -> list[str]:
    """Translate a composition graph into an ffmpeg argument list."""
    settings = settings or EncodeSettings()
    command = [ffmpeg_binary, "-hide_banner", "-nostdin", "-y"]
    for item in graph.inputs:
        command += ["-i", str(item.path)]
    command += [
        "-filter_complex",
        graph.filter_complex(),
        "-map",
        f"[{graph.output_pad}]",
        # Optional audio: copied from the source when present, skipped otherwise
        "-map",
        f"{graph.video_input_index}:a?",
        "-c:v",
        settings.video_codec,
        "-preset",
        settings.preset,
        "-crf",
        str(settings.crf),
        "-pix_fmt",
        settings.pixel_format,
        "-c:a",
        settings.audio_codec,
        "-movflags",
        "+faststart",
        str(output_path),
    ]
    return command


class CompositionGraphBuilder:
    """Build the layer graph for a job's watermark decision and subtitle document."""

    def __init__(
        self,
        font_index: FontIndex | None = None,
        watermark_text: str | None = None,
        watermark_font: str | None = None,
        watermark_font_size: int | None = None,
        watermark_image_height: int | None = None,
        watermark_margin: int | None = None,
    ) -> None:
        self.font_index = font_index if font_index is not None else FontIndex([])
        self.watermark_text = watermark_text or config.get_pipeline_value(
            "watermark.text", "Made with CaptionBurn"
        )
        self.watermark_font = watermark_font or config.get_pipeline_value("watermark.font", "DejaVu Sans")
        self.watermark_font_size = int(
            watermark_font_size or config.get_pipeline_value("watermark.font_size", 36)
        )
        self.watermark_image_height = int(
            watermark_image_height or config.get_pipeline_value("watermark.image_height", 96)
        )
        self.watermark_margin = int(
            watermark_margin if watermark_margin is not None else config.get_pipeline_value("watermark.margin", 32)
        )

    def build(
        self,
        video_path: Path,
        subtitle_path: Path,
        decision: WatermarkDecision,
        caption_fonts: Sequence[str] = (),
    ) -> CompositionGraph:
        inputs = [GraphInput(VIDEO_INPUT, video_path)]
        stages: list[GraphStage] = []
        video_pad = f"{len(inputs) - 1}:v"

        if decision.mode is WatermarkMode.IMAGE:
            if decision.asset_path is None:
                raise CompositionGraphError("Image watermark selected without a downloaded asset")
            inputs.append(GraphInput(WATERMARK_INPUT, decision.asset_path))
            watermark_index = len(inputs) - 1
            stages.append(
                GraphStage(
                    name="watermark_scale",
                    filter=f"scale=-2:{self.watermark_image_height}",
                    inputs=(f"{watermark_index}:v",),
                    outputs=(SCALED_WATERMARK_PAD,),
                )
            )
            stages.append(
                GraphStage(
                    name="watermark_overlay",
                    filter=(
                        f"overlay=x=main_w-overlay_w-{self.watermark_margin}"
                        f":y={self.watermark_margin}:eof_action=repeat"
                    ),
                    inputs=(video_pad, SCALED_WATERMARK_PAD),
                    outputs=(WATERMARKED_PAD,),
                )
            )
            video_pad = WATERMARKED_PAD
        elif decision.mode is WatermarkMode.TEXT:
            stages.append(
                GraphStage(
                    name="watermark_text",
                    filter=self._drawtext_filter(),
                    inputs=(video_pad,),
                    outputs=(WATERMARKED_PAD,),
                )
            )
            video_pad = WATERMARKED_PAD

        stages.append(
            GraphStage(
                name="subtitles",
                filter=self._subtitle_filter(subtitle_path, caption_fonts),
                inputs=(video_pad,),
                outputs=(OUTPUT_PAD,),
            )
        )

        graph = CompositionGraph(
            inputs=tuple(inputs),
            stages=tuple(stages),
            output_pad=OUTPUT_PAD,
            mode=decision.mode,
        )
        graph.validate()
        logger.info(f"Composition graph ({decision.mode.value}): {[stage.name for stage in stages]}")
        return graph

    def _drawtext_filter(self) -> str:
        font_path = self.font_index.lookup(self.watermark_font)
        if font_path is not None:
            font_option = f"fontfile={escape_filter_value(str(font_path))}"
        else:
            logger.warning(f"Watermark font {self.watermark_font!r} not indexed, using fontconfig lookup")
            font_option = f"font={escape_filter_value(self.watermark_font)}"
        margin = self.watermark_margin
        return (
            f"drawtext={font_option}"
            f":text={escape_filter_value(self.watermark_text)}"
            ":expansion=none"
            f":fontsize={self.watermark_font_size}"
            ":fontcolor=white@0.7:borderw=2:bordercolor=black@0.4"
            f":x=w-tw-{margin}:y={margin}"
        )

    def _subtitle_filter(self, subtitle_path: Path, caption_fonts: Sequence[str] = ()) -> str:
        options = f"ass=filename={escape_filter_value(str(subtitle_path))}"
        fonts_dir = self.font_index.fonts_dir_for(caption_fonts)
        if fonts_dir is not None:
            options += f":fontsdir={escape_filter_value(str(fonts_dir))}"
        return options

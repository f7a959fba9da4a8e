"""Render pipeline orchestrator.

Runs one job through AUTH -> VALIDATE -> DOWNLOAD_VIDEO -> PROBE_RESOLUTION ->
(DOWNLOAD_WATERMARK) -> BUILD_SUBTITLES -> BUILD_GRAPH -> ENCODE -> UPLOAD ->
(CALLBACK) -> RESPOND. Fatal errors abort at the failing step; degradations
are absorbed where they occur. All scratch files live in a JobWorkspace that
is removed on every exit path.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

import aiohttp
from pydantic import ValidationError

from services.auth import authorize_request
from services.render.composition import (
    CompositionGraph,
    CompositionGraphBuilder,
    EncodeSettings,
    build_ffmpeg_command,
)
from services.render.encoder import FFmpegRunner
from services.render.errors import (
    DownloadError,
    JobValidationError,
    ProbeDegradation,
    RenderError,
    WatermarkDownloadError,
)
from services.render.fonts import FontIndex
from services.render.notifier import CallbackNotifier
from services.render.storage import ArtifactStore
from services.render.watermark import WatermarkDecision, WatermarkSelector
from services.render.workspace import JobWorkspace
from services.subtitles.document import SubtitleDocument
from services.subtitles.generator import SubtitleGenerator
from services.subtitles.styles import StyleResolver
from shared.config import config
from shared.enums import PipelineStep
from shared.http_client import AsyncHTTPClient
from shared.logging_utils import setup_logging
from shared.models import DEFAULT_VIDEO_METADATA, RenderJob, VideoMetadata
from shared.response_models import RenderErrorResponse, RenderSuccessResponse

logger = setup_logging("render-pipeline", config.get("log_level", "INFO"))

Fetcher = Callable[[str, Path], Awaitable[int]]

FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


@dataclass(frozen=True)
class RenderOutcome:
    """Everything a successful run produced, kept for logging and inspection."""

    job: RenderJob
    metadata: VideoMetadata
    watermark: WatermarkDecision
    document: SubtitleDocument
    graph: CompositionGraph
    video_url: str

    def response(self) -> dict[str, Any]:
        return RenderSuccessResponse(
            job_id=self.job.job_id,
            video_url=self.video_url,
            reservation_id=self.job.reservation_id,
        ).model_dump(exclude_none=True)


class RenderPipeline:
    """Turns a render request into a published, captioned video."""

    def __init__(
        self,
        font_index: FontIndex | None = None,
        style_resolver: StyleResolver | None = None,
        subtitle_generator: SubtitleGenerator | None = None,
        watermark_selector: WatermarkSelector | None = None,
        graph_builder: CompositionGraphBuilder | None = None,
        ffmpeg: FFmpegRunner | None = None,
        store: ArtifactStore | None = None,
        notifier: CallbackNotifier | None = None,
        fetch: Fetcher | None = None,
        encode_settings: EncodeSettings | None = None,
        render_secret: str | None = None,
        tmp_dir: str | None = None,
        download_timeout: float | None = None,
    ) -> None:
        self.font_index = font_index if font_index is not None else FontIndex([])
        self.style_resolver = style_resolver or StyleResolver()
        self.subtitle_generator = subtitle_generator or SubtitleGenerator()
        self.watermark_selector = watermark_selector or WatermarkSelector()
        self.graph_builder = graph_builder or CompositionGraphBuilder(font_index=self.font_index)
        self.ffmpeg = ffmpeg or FFmpegRunner()
        self.store = store or ArtifactStore()
        self.notifier = notifier or CallbackNotifier()
        self.fetch = fetch or self._http_fetch
        self.encode_settings = encode_settings or EncodeSettings.from_config()
        self.render_secret = render_secret
        self.tmp_dir = tmp_dir
        self.download_timeout = (
            download_timeout if download_timeout is not None else config.get("download_timeout", 300.0)
        )

    async def process_request(
        self, payload: Any, header_secret: str | None = None
    ) -> tuple[int, dict[str, Any]]:
        """Authorize, validate and run a request, returning (status code, response body)."""
        job_id = payload.get("job_id") if isinstance(payload, dict) else None
        try:
            self._step(PipelineStep.AUTH, job_id)
            authorize_request(header_secret, payload, self.render_secret)

            self._step(PipelineStep.VALIDATE, job_id)
            job = self.validate(payload)

            outcome = await self.run(job)
            self._step(PipelineStep.RESPOND, job.job_id)
            return 200, outcome.response()
        except RenderError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(f"Render request for job {job_id} failed ({e.code}): {e.message}")
            return e.status_code, RenderErrorResponse(error=e.message).model_dump()
        except Exception as e:
            logger.exception(f"Unexpected failure rendering job {job_id}: {e}")
            return 500, RenderErrorResponse(error=str(e) or e.__class__.__name__).model_dump()

    @staticmethod
    def validate(payload: Any) -> RenderJob:
        """Parse the request body into a RenderJob.

        Raises:
            JobValidationError: If the body is not an object or fields are missing/invalid
        """
        if not isinstance(payload, dict):
            raise JobValidationError("Request body must be a JSON object")
        try:
            return RenderJob.model_validate(payload)
        except ValidationError as e:
            fields = sorted({".".join(str(part) for part in error["loc"]) for error in e.errors()})
            raise JobValidationError(f"Invalid or missing fields: {', '.join(fields)}") from e

    async def run(self, job: RenderJob) -> RenderOutcome:
        """Run the pipeline for a validated job."""
        with JobWorkspace(job.job_id, self.tmp_dir) as workspace:
            self._step(PipelineStep.DOWNLOAD_VIDEO, job.job_id)
            video_path = workspace.source_video(job.video_url)
            await self._download_video(job.video_url, video_path)

            self._step(PipelineStep.PROBE_RESOLUTION, job.job_id)
            metadata = await self._probe(video_path)

            self._step(PipelineStep.DOWNLOAD_WATERMARK, job.job_id)
            decision = await self.watermark_selector.select(
                job.plan_tier,
                job.watermark_url,
                lambda url: self._download_watermark(url, workspace.watermark(url)),
            )
            logger.info(f"Job {job.job_id}: watermark {decision.mode.value} ({decision.reason})")

            self._step(PipelineStep.BUILD_SUBTITLES, job.job_id)
            style = self.style_resolver.resolve(job.style)
            document = self.subtitle_generator.build(job.frames, style, metadata)
            document.write(workspace.subtitles)

            self._step(PipelineStep.BUILD_GRAPH, job.job_id)
            graph = self.graph_builder.build(
                video_path, workspace.subtitles, decision, caption_fonts=(style.top.font, style.bottom.font)
            )

            self._step(PipelineStep.ENCODE, job.job_id)
            command = build_ffmpeg_command(
                graph, workspace.output, self.encode_settings, self.ffmpeg.ffmpeg_binary
            )
            await self.ffmpeg.encode(command)

            self._step(PipelineStep.UPLOAD, job.job_id)
            video_url = await self.store.upload(workspace.output, job.job_id)

        if job.callback_url:
            self._step(PipelineStep.CALLBACK, job.job_id)
            self.notifier.dispatch(job.callback_url, self._callback_payload(job, video_url))

        return RenderOutcome(
            job=job,
            metadata=metadata,
            watermark=decision,
            document=document,
            graph=graph,
            video_url=video_url,
        )

    async def _http_fetch(self, url: str, destination: Path) -> int:
        async with AsyncHTTPClient(timeout=self.download_timeout) as client:
            return await client.download(url, destination)

    async def _download_video(self, url: str, destination: Path) -> None:
        try:
            size = await self.fetch(url, destination)
        except FETCH_ERRORS as e:
            raise DownloadError(f"Failed to download video: {str(e) or e.__class__.__name__}") from e
        if not size:
            raise DownloadError("Failed to download video: empty response body")
        logger.info(f"Downloaded source video ({size} bytes)")

    async def _download_watermark(self, url: str, destination: Path) -> Path:
        try:
            size = await self.fetch(url, destination)
        except FETCH_ERRORS as e:
            raise WatermarkDownloadError(str(e) or e.__class__.__name__) from e
        if not size:
            raise WatermarkDownloadError("empty response body")
        return destination

    async def _probe(self, video_path: Path) -> VideoMetadata:
        try:
            metadata = await self.ffmpeg.probe_resolution(video_path)
        except ProbeDegradation as e:
            logger.warning(
                f"Resolution probe failed, assuming "
                f"{DEFAULT_VIDEO_METADATA.width}x{DEFAULT_VIDEO_METADATA.height}: {e}"
            )
            return DEFAULT_VIDEO_METADATA
        logger.info(f"Source resolution {metadata.width}x{metadata.height}")
        return metadata

    def _callback_payload(self, job: RenderJob, video_url: str) -> dict[str, Any]:
        payload = {
            "render_secret": self.render_secret or config.get("render_secret"),
            "job_id": job.job_id,
            "status": "success",
            "video_url": video_url,
        }
        if job.reservation_id:
            payload["reservation_id"] = job.reservation_id
        return payload

    @staticmethod
    def _step(step: PipelineStep, job_id: Any) -> None:
        logger.info(f"[{job_id}] {step.value}")

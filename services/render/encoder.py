"""ffprobe / ffmpeg process wrappers. Each call runs as its own child process."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from services.render.errors import EncodeError, ProbeDegradation
from shared.config import config
from shared.logging_utils import setup_logging
from shared.models import VideoMetadata

logger = setup_logging("ffmpeg-runner")


class FFmpegRunner:
    """Run ffprobe and ffmpeg without blocking the event loop."""

    def __init__(self, ffmpeg_binary: str | None = None, ffprobe_binary: str | None = None) -> None:
        self.ffmpeg_binary = ffmpeg_binary or config.get("ffmpeg_binary", "ffmpeg")
        self.ffprobe_binary = ffprobe_binary or config.get("ffprobe_binary", "ffprobe")

    async def _run(self, command: list[str]) -> tuple[int, bytes, bytes]:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        return process.returncode, stdout, stderr

    async def probe_resolution(self, video_path: Path) -> VideoMetadata:
        """Return the display resolution of the first video stream.

        Raises:
            ProbeDegradation: If ffprobe is missing, fails, or reports no usable stream
        """
        command = [
            self.ffprobe_binary,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height:stream_tags=rotate:stream_side_data=rotation",
            "-of",
            "json",
            str(video_path),
        ]
        try:
            returncode, stdout, stderr = await self._run(command)
        except OSError as e:
            raise ProbeDegradation(f"ffprobe could not be started: {e}") from e

        if returncode != 0:
            raise ProbeDegradation(
                f"ffprobe exited with code {returncode}: {stderr.decode(errors='replace').strip()[:500]}"
            )

        try:
            payload = json.loads(stdout.decode() or "{}")
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProbeDegradation(f"ffprobe returned unreadable output: {e}") from e

        return self._parse_probe(payload)

    @staticmethod
    def _rotation(stream: dict[str, Any]) -> int:
        rotation: Any = (stream.get("tags") or {}).get("rotate")
        for side_data in stream.get("side_data_list") or []:
            if "rotation" in side_data:
                rotation = side_data["rotation"]
        try:
            return int(float(rotation or 0)) % 360
        except (TypeError, ValueError):
            return 0

    @classmethod
    def _parse_probe(cls, payload: dict[str, Any]) -> VideoMetadata:
        streams = payload.get("streams") or []
        if not streams:
            raise ProbeDegradation("ffprobe reported no video stream")

        stream = streams[0]
        try:
            width = int(stream["width"])
            height = int(stream["height"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProbeDegradation(f"ffprobe stream has no usable dimensions: {stream}") from e
        if width <= 0 or height <= 0:
            raise ProbeDegradation(f"ffprobe reported invalid dimensions {width}x{height}")

        # Portrait phone footage is often stored landscape with a rotation flag
        if cls._rotation(stream) in (90, 270):
            width, height = height, width

        return VideoMetadata(width=width, height=height)

    async def encode(self, command: list[str]) -> None:
        """Run an ffmpeg invocation, raising EncodeError with its stderr tail on failure."""
        logger.debug(f"Running: {' '.join(command)}")
        try:
            returncode, _, stderr = await self._run(command)
        except OSError as e:
            raise EncodeError("ffmpeg could not be started", str(e)) from e

        if returncode != 0:
            raise EncodeError(
                f"ffmpeg exited with code {returncode}",
                stderr.decode(errors="replace"),
            )

"""Per-job scratch directory for downloaded inputs and intermediate files."""

from __future__ import annotations

import shutil
import tempfile
import time
from pathlib import Path
from types import TracebackType

from shared.config import config
from shared.file_utils import ensure_directory, extension_from_url, sanitize_filename
from shared.logging_utils import setup_logging

logger = setup_logging("job-workspace")


class JobWorkspace:
    """Scratch directory removed on every exit path, success or failure."""

    def __init__(self, job_id: str, tmp_dir: str | None = None) -> None:
        self.job_id = job_id
        self.tmp_dir = tmp_dir or config.get("tmp_dir", tempfile.gettempdir())
        self.root: Path | None = None

    def __enter__(self) -> "JobWorkspace":
        ensure_directory(self.tmp_dir)
        prefix = f"{sanitize_filename(self.job_id, max_length=40)}-{int(time.time() * 1000)}-"
        self.root = Path(tempfile.mkdtemp(prefix=prefix, dir=self.tmp_dir))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        if self.root is None:
            return
        shutil.rmtree(self.root, ignore_errors=True)
        logger.debug(f"Removed workspace {self.root}")
        self.root = None

    def _path(self, name: str) -> Path:
        if self.root is None:
            raise RuntimeError("Workspace is not open. Use it as a context manager.")
        return self.root / name

    def source_video(self, url: str) -> Path:
        return self._path(f"source.{extension_from_url(url, 'mp4')}")

    def watermark(self, url: str) -> Path:
        return self._path(f"watermark.{extension_from_url(url, 'png')}")

    @property
    def subtitles(self) -> Path:
        return self._path("captions.ass")

    @property
    def output(self) -> Path:
        return self._path("output.mp4")

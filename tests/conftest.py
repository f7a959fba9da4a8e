import os
import sys
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Must be set before shared.config is imported
os.environ.setdefault("BUCKET_NAME", "test-renders")
os.environ.setdefault("FONTS_DIR", str(ROOT_DIR / "tests" / "missing-fonts"))

from services.render.composition import EncodeSettings
from services.render.orchestrator import RenderPipeline
from services.subtitles.styles import StyleResolver
from shared.config import config as service_config
from shared.models import VideoMetadata

TEST_SECRET = "test-render-secret"
SIGNED_URL = "https://storage.googleapis.com/test-renders/renders/job-1-1700000000000.mp4?X-Goog-Signature=abc"


@pytest.fixture(autouse=True)
def reset_config() -> Any:
    """Give every test the same secret and restore config afterwards."""
    saved_config = dict(service_config.config)
    saved_pipeline = service_config.pipeline_config
    service_config.set("render_secret", TEST_SECRET)
    yield
    service_config.config = saved_config
    service_config.set_pipeline_config(saved_pipeline)


@pytest.fixture
def resolved_style() -> Any:
    """Default caption style resolved against the defaults table."""
    return StyleResolver().resolve(None)


@pytest.fixture
def fonts_dir(tmp_path: Path) -> Path:
    """Directory with placeholder font files."""
    directory = tmp_path / "fonts"
    (directory / "lexend").mkdir(parents=True)
    for name in (
        "lexend/Lexend-Regular.ttf",
        "lexend/Lexend-Bold.ttf",
        "CormorantGaramond-Italic.ttf",
        "CormorantGaramond-Regular.otf",
        "DejaVuSans.ttf",
        "README.txt",
    ):
        (directory / name).write_bytes(b"\x00")
    return directory


@pytest.fixture
def fake_fetch() -> Callable[[str, Path], Any]:
    """Fetcher that writes a few bytes, or fails for hosts named 'unreachable'."""
    calls: list[str] = []

    async def _fetch(url: str, destination: Path) -> int:
        calls.append(url)
        if "unreachable" in url:
            raise aiohttp.ClientConnectionError(f"Cannot connect to host for {url}")
        destination.write_bytes(b"fake-media")
        return len(b"fake-media")

    _fetch.calls = calls  # type: ignore[attr-defined]
    return _fetch


@pytest.fixture
def mock_ffmpeg() -> MagicMock:
    runner = MagicMock()
    runner.ffmpeg_binary = "ffmpeg"
    runner.probe_resolution = AsyncMock(return_value=VideoMetadata(width=1080, height=1920))
    runner.encode = AsyncMock(return_value=None)
    return runner


@pytest.fixture
def mock_store() -> MagicMock:
    store = MagicMock()
    store.upload = AsyncMock(return_value=SIGNED_URL)
    return store


@pytest.fixture
def mock_notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def render_pipeline(
    fake_fetch: Any,
    mock_ffmpeg: MagicMock,
    mock_store: MagicMock,
    mock_notifier: MagicMock,
    work_dir: Path,
) -> RenderPipeline:
    """Pipeline with every external collaborator mocked."""
    return RenderPipeline(
        ffmpeg=mock_ffmpeg,
        store=mock_store,
        notifier=mock_notifier,
        fetch=fake_fetch,
        encode_settings=EncodeSettings(),
        tmp_dir=str(work_dir),
    )


@pytest.fixture
def render_payload() -> dict[str, Any]:
    return {
        "job_id": "job-1",
        "video_url": "https://cdn.example.com/uploads/source.mp4",
        "frames": [
            {"start": 0, "end": 2000, "line1": "Hello", "line2": "World"},
            {"start": 2000, "end": 4000, "line1": "", "line2": "Bye"},
        ],
        "style": {},
        "plan_tier": "paid",
    }

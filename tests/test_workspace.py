"""Tests for per-job scratch directories."""

from pathlib import Path

import pytest

from services.render.workspace import JobWorkspace


class TestJobWorkspace:
    """Test scratch directory lifecycle."""

    def test_paths_live_under_unique_root(self, tmp_path: Path) -> None:
        with JobWorkspace("job/1", str(tmp_path)) as first, JobWorkspace("job/1", str(tmp_path)) as second:
            assert first.root != second.root
            assert first.root.parent == tmp_path
            assert first.root.name.startswith("job_1-")
            assert first.source_video("https://cdn.example.com/a/b.mov?sig=1").name == "source.mov"
            assert first.source_video("https://cdn.example.com/stream").name == "source.mp4"
            assert first.watermark("https://cdn.example.com/logo.PNG").name == "watermark.png"
            assert first.subtitles.name == "captions.ass"
            assert first.output.parent == first.root

    def test_removed_on_success(self, tmp_path: Path) -> None:
        with JobWorkspace("job", str(tmp_path)) as workspace:
            workspace.output.write_bytes(b"data")
            root = workspace.root

        assert not root.exists()
        assert list(tmp_path.iterdir()) == []

    def test_removed_on_failure(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            with JobWorkspace("job", str(tmp_path)) as workspace:
                workspace.subtitles.write_text("x")
                raise RuntimeError("encode failed")

        assert list(tmp_path.iterdir()) == []

    def test_paths_require_open_workspace(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            JobWorkspace("job", str(tmp_path)).subtitles

    def test_creates_missing_tmp_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "tmp"
        with JobWorkspace("job", str(target)) as workspace:
            assert workspace.root.parent == target

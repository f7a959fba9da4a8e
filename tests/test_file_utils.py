"""Tests for file utilities module."""

from pathlib import Path

import pytest

from shared.file_utils import ensure_directory, extension_from_url, sanitize_filename


class TestFileUtils:
    """Test file utility functions."""

    def test_sanitize_filename_basic(self) -> None:
        assert sanitize_filename("job-123_abc.v2") == "job-123_abc.v2"

    def test_sanitize_filename_invalid_chars(self) -> None:
        result = sanitize_filename('bad/file\\name:with*invalid"chars<>|?')

        for char in '<>:"/\\|?* ':
            assert char not in result

    def test_sanitize_filename_empty(self) -> None:
        assert sanitize_filename("") == "render"
        assert sanitize_filename("///") == "render"

    def test_sanitize_filename_length(self) -> None:
        assert len(sanitize_filename("a" * 500)) == 80
        assert len(sanitize_filename("a" * 500, max_length=10)) == 10

    def test_ensure_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b"
        ensure_directory(str(target))
        ensure_directory(str(target))
        assert target.is_dir()

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://cdn.example.com/v.MOV", "mov"),
            ("https://cdn.example.com/v.webm?token=a.b", "webm"),
            ("https://cdn.example.com/video", "mp4"),
            ("https://cdn.example.com/v.tar.gz!!", "mp4"),
            ("https://cdn.example.com/v.verylongext", "mp4"),
        ],
    )
    def test_extension_from_url(self, url: str, expected: str) -> None:
        assert extension_from_url(url, "mp4") == expected

"""Render pipeline error taxonomy."""

from __future__ import annotations

DIAGNOSTIC_LIMIT = 2000


class RenderError(Exception):
    """Fatal pipeline error carrying the HTTP status it maps to."""

    status_code = 500
    code = "render_failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(RenderError):
    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str = "unauthorized") -> None:
        super().__init__(message)


class JobValidationError(RenderError):
    status_code = 400
    code = "invalid_request"


class DownloadError(RenderError):
    code = "download_failed"


class EncodeError(RenderError):
    """ffmpeg exited non-zero. ``diagnostics`` holds the tail of its stderr."""

    code = "encode_failed"

    def __init__(self, message: str, diagnostics: str = "") -> None:
        self.diagnostics = truncate_diagnostics(diagnostics)
        if self.diagnostics:
            message = f"{message}: {self.diagnostics}"
        super().__init__(message)


class UploadError(RenderError):
    code = "upload_failed"


class ProbeDegradation(Exception):
    """Resolution probe failed; callers fall back to the default resolution."""


class WatermarkDownloadError(Exception):
    """Watermark asset could not be fetched; callers fall back to a text watermark."""


class CallbackError(Exception):
    """Callback delivery failed; logged only."""


def truncate_diagnostics(output: str, limit: int = DIAGNOSTIC_LIMIT) -> str:
    """Keep the last ``limit`` characters of process output, where errors usually are."""
    output = (output or "").strip()
    if len(output) <= limit:
        return output
    return "..." + output[-limit:]

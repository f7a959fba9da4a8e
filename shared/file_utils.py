"""
File and path utilities.
"""

import re
from pathlib import Path
from urllib.parse import urlparse

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str, max_length: int = 80) -> str:
    """Sanitize a caller supplied name for use in file and object names."""
    cleaned = _UNSAFE_NAME_CHARS.sub("_", filename).strip("._")
    return cleaned[:max_length] or "render"


def ensure_directory(path: str) -> None:
    """Ensure directory exists, create if not."""
    Path(path).mkdir(parents=True, exist_ok=True)


def extension_from_url(url: str, default: str) -> str:
    """Return the lowercase file extension of a URL path, or the default."""
    suffix = Path(urlparse(url).path).suffix.lower().lstrip(".")
    if suffix and suffix.isalnum() and len(suffix) <= 5:
        return suffix
    return default

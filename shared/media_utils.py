"""
Subtitle script encoding utilities: colors, caption text and timestamps.
"""

import math
import re
import unicodedata
from typing import Any

DEFAULT_ASS_COLOR = "&H00FFFFFF"

NAMED_COLORS = {
    "white": "#FFFFFF",
    "yellow": "#FFFF00",
    "black": "#000000",
    "gold": "#FFD100",
}

_HEX_COLOR_PATTERN = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")
_ASS_TIMESTAMP_PATTERN = re.compile(r"(\d+):([0-5]\d):([0-5]\d)\.(\d{2})")

ASS_LINE_BREAK = "\\N"
# libass has no backslash escape; a word joiner stops a literal backslash from
# pairing with the next character (\N, \n, \h, \{).
ASS_LITERAL_BACKSLASH = "\\\u2060"


def css_to_ass_color(value: Any, alpha: int = 0) -> str:
    """Convert a CSS color (#RGB, #RRGGBB or a known name) to ASS &HAABBGGRR.

    Anything unrecognized resolves to opaque white instead of raising.
    """
    if not isinstance(value, str):
        return DEFAULT_ASS_COLOR

    token = value.strip()
    token = NAMED_COLORS.get(token.lower(), token)

    match = _HEX_COLOR_PATTERN.fullmatch(token)
    if not match:
        return DEFAULT_ASS_COLOR

    digits = match.group(1).upper()
    if len(digits) == 3:
        digits = "".join(nibble * 2 for nibble in digits)

    red, green, blue = digits[0:2], digits[2:4], digits[4:6]
    alpha = min(max(int(alpha), 0), 255)
    return f"&H{alpha:02X}{blue}{green}{red}"


def _is_control_character(char: str) -> bool:
    return unicodedata.category(char) == "Cc" and char != "\n"


def escape_ass_text(text: str | None) -> str:
    """Make caption text safe to embed as a Dialogue payload.

    Line breaks become the explicit \\N marker. Literal backslashes are
    followed by a word joiner and override braces are escaped, so no
    caller text can form a tag. Non-printable control characters are dropped.
    """
    if not text:
        return ""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ")
    normalized = "".join(char for char in normalized if not _is_control_character(char))
    normalized = normalized.strip()

    lines = []
    for line in normalized.split("\n"):
        line = line.replace("\\", ASS_LITERAL_BACKSLASH)
        line = line.replace("{", "\\{").replace("}", "\\}")
        lines.append(line)

    return ASS_LINE_BREAK.join(lines)


def format_ass_timestamp(seconds: Any) -> str:
    """Format seconds as an ASS timestamp (H:MM:SS.cc).

    Missing, negative, or non-finite input formats as zero.
    """
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        value = 0.0
    if not math.isfinite(value) or value < 0:
        value = 0.0

    # Truncate to centiseconds; the epsilon absorbs float error such as 1.23 * 100 = 122.99999
    total_cs = int(math.floor(value * 100 + 1e-6))
    hours, remainder = divmod(total_cs, 3600 * 100)
    minutes, remainder = divmod(remainder, 60 * 100)
    secs, cs = divmod(remainder, 100)
    return f"{hours}:{minutes:02d}:{secs:02d}.{cs:02d}"


def parse_ass_timestamp(timestamp: str) -> float:
    """Parse an ASS timestamp (H:MM:SS.cc) back into seconds."""
    match = _ASS_TIMESTAMP_PATTERN.fullmatch(timestamp.strip())
    if not match:
        raise ValueError(f"Invalid ASS timestamp: {timestamp!r}")
    hours, minutes, secs, cs = (int(part) for part in match.groups())
    return hours * 3600 + minutes * 60 + secs + cs / 100


def ms_to_seconds(value: Any) -> float:
    """Convert a millisecond offset to seconds, treating bad input as zero."""
    try:
        millis = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(millis) or millis < 0:
        return 0.0
    return millis / 1000.0

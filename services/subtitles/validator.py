"""Subtitle document validation: timing, style references and canvas bounds."""

from __future__ import annotations

from typing import Any

from services.subtitles.document import SubtitleDocument
from shared.logging_utils import setup_logging
from shared.media_utils import parse_ass_timestamp

logger = setup_logging("subtitle-validator")


class SubtitleValidationError(Exception):
    """Raised when a generated subtitle document breaks its invariants."""

    def __init__(self, message: str, violations: list[dict[str, Any]]):
        super().__init__(message)
        self.violations = violations


class SubtitleValidator:
    """Validate a subtitle document before it is handed to the rasterizer."""

    def __init__(self, max_chars_per_event: int = 200):
        """
        Initialize validator with configurable thresholds.

        Args:
            max_chars_per_event: Payload length above which a warning is reported
        """
        self.max_chars_per_event = max_chars_per_event

    def validate(self, document: SubtitleDocument, strict: bool = True) -> dict[str, Any]:
        """
        Validate a subtitle document and return validation results.

        Args:
            document: Document to validate
            strict: If True, raise exception on violations. If False, only report them.

        Returns:
            Dict with keys: valid (bool), violations (list), warnings (list)

        Raises:
            SubtitleValidationError: If strict=True and violations found
        """
        violations: list[dict[str, Any]] = []
        warnings: list[dict[str, Any]] = []

        violations.extend(self._check_durations(document))
        violations.extend(self._check_style_references(document))
        violations.extend(self._check_positions(document))
        warnings.extend(self._check_text_length(document))

        is_valid = len(violations) == 0
        result = {
            "valid": is_valid,
            "violations": violations,
            "warnings": warnings,
            "total_events": len(document.events),
        }

        if warnings:
            logger.warning(f"Subtitle document has {len(warnings)} warning(s)")

        if strict and not is_valid:
            raise SubtitleValidationError(
                f"Subtitle validation failed with {len(violations)} violation(s)",
                violations,
            )

        return result

    def _check_durations(self, document: SubtitleDocument) -> list[dict[str, Any]]:
        """Every event must end after it starts, at timestamp precision."""
        violations = []
        for index, event in enumerate(document.events):
            start = parse_ass_timestamp(event.start_timestamp)
            end = parse_ass_timestamp(event.end_timestamp)
            if start >= end:
                violations.append(
                    {
                        "type": "non_positive_duration",
                        "event": index,
                        "message": f"Event {index} starts at {event.start_timestamp} "
                        f"but ends at {event.end_timestamp}",
                    }
                )
        return violations

    def _check_style_references(self, document: SubtitleDocument) -> list[dict[str, Any]]:
        known = document.style_names
        return [
            {
                "type": "unknown_style",
                "event": index,
                "message": f"Event {index} references undefined style {event.style_name!r}",
            }
            for index, event in enumerate(document.events)
            if event.style_name not in known
        ]

    def _check_positions(self, document: SubtitleDocument) -> list[dict[str, Any]]:
        violations = []
        for index, event in enumerate(document.events):
            x, y = event.position.x, event.position.y
            if not (0 <= x <= document.width and 0 <= y <= document.height):
                violations.append(
                    {
                        "type": "position_out_of_canvas",
                        "event": index,
                        "message": f"Event {index} anchor ({x}, {y}) outside "
                        f"{document.width}x{document.height}",
                    }
                )
        return violations

    def _check_text_length(self, document: SubtitleDocument) -> list[dict[str, Any]]:
        return [
            {
                "type": "text_too_long",
                "event": index,
                "length": len(event.text),
                "message": f"Event {index} payload has {len(event.text)} characters",
            }
            for index, event in enumerate(document.events)
            if len(event.text) > self.max_chars_per_event
        ]

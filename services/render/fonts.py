"""Font resource index, built once at startup."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from shared.logging_utils import setup_logging

logger = setup_logging("font-index")

FONT_EXTENSIONS = {".ttf", ".otf", ".ttc"}
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_font_name(name: str) -> str:
    """Lowercase a family or file name and drop spaces, dashes and underscores."""
    return _NON_ALNUM.sub("", name.lower())


class FontIndex:
    """Maps normalized font names to font files found under the search directories.

    Both the full file stem ("CormorantGaramond-Italic") and its family part
    ("CormorantGaramond") are indexed; a "Regular" file wins its family key.
    """

    def __init__(self, directories: Iterable[str | Path]) -> None:
        self.directories = [Path(directory) for directory in directories]
        self._paths: dict[str, Path] = {}

    @classmethod
    def build(cls, directories: Iterable[str | Path]) -> "FontIndex":
        index = cls(directories)
        index.scan()
        return index

    def scan(self) -> int:
        self._paths.clear()
        for directory in self.directories:
            if not directory.is_dir():
                logger.debug(f"Font directory {directory} does not exist, skipping")
                continue
            for path in sorted(directory.rglob("*")):
                if path.is_file() and path.suffix.lower() in FONT_EXTENSIONS:
                    self._register(path)
        logger.info(f"Indexed {len(self._paths)} font names from {len(self.directories)} directories")
        return len(self._paths)

    def _register(self, path: Path) -> None:
        stem = path.stem
        self._paths.setdefault(normalize_font_name(stem), path)

        family, _, variant = stem.partition("-")
        family_key = normalize_font_name(family)
        if variant.lower() == "regular" or family_key not in self._paths:
            self._paths[family_key] = path

    def lookup(self, family: str | None) -> Path | None:
        if not family:
            return None
        return self._paths.get(normalize_font_name(family))

    @property
    def fonts_dir(self) -> Path | None:
        """First existing search directory, handed to libass as its fontsdir."""
        for directory in self.directories:
            if directory.is_dir():
                return directory
        return self.directories[0] if self.directories else None

    def fonts_dir_for(self, families: Iterable[str | None]) -> Path | None:
        """Directory holding the first indexed family, else the first search directory.

        libass takes a single, non-recursive fontsdir. Families that live
        elsewhere are left to fontconfig.
        """
        for family in families:
            path = self.lookup(family)
            if path is not None:
                return path.parent
        return self.fonts_dir

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, family: str) -> bool:
        return self.lookup(family) is not None

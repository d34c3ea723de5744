"""Maps fully-qualified class names to their source text."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from ..logging import get_logger

SOURCE_SUFFIX = ".java"

_PACKAGE_DECLARATION = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)


class SourceLocator:
    """Finds a class's source file under a source root.

    The conventional ``<package path>/<SimpleName>.java`` location is tried
    first; otherwise the tree is searched for a file with the right name whose
    package declaration matches.
    """

    def __init__(self, suffix: str = SOURCE_SUFFIX) -> None:
        self.suffix = suffix
        self.logger = get_logger("source.locator")

    def find_source(self, class_name: str, source_dir: Path) -> str:
        """Return the source text for ``class_name`` or an empty string."""
        package, simple_name = split_class_name(class_name)
        file_name = f"{simple_name}{self.suffix}"

        relative = Path(*package.split(".")) / file_name if package else Path(file_name)
        primary = source_dir / relative
        if primary.is_file():
            text = self._read(primary)
            if text is not None:
                return text

        if not source_dir.is_dir():
            self.logger.debug("Source directory %s does not exist", source_dir)
            return ""

        for candidate in sorted(source_dir.rglob(file_name)):
            if candidate == primary or not candidate.is_file():
                continue
            text = self._read(candidate)
            if text is None:
                continue
            if declares_package(text, package):
                self.logger.debug("Found %s at %s", class_name, candidate)
                return text
        return ""

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Error reading source %s: %s", path, exc)
            return None


def declares_package(text: str, package: str) -> bool:
    """True when ``text`` declares ``package``; an empty package means no declaration."""
    match = _PACKAGE_DECLARATION.search(text)
    if not package:
        return match is None
    return match is not None and match.group(1) == package


def split_class_name(class_name: str) -> tuple[str, str]:
    """Split ``a.b.Outer$Inner`` into ``("a.b", "Outer")``."""
    package, _, simple_name = class_name.rpartition(".")
    return package, simple_name.split("$", 1)[0]


__all__ = ["SOURCE_SUFFIX", "SourceLocator", "declares_package", "split_class_name"]

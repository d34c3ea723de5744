"""Persists generated test sources."""

from __future__ import annotations

from pathlib import Path

from .logging import get_logger
from .prompting.builder import generated_test_name
from .source.locator import SOURCE_SUFFIX, split_class_name

GENERATED_PACKAGE = "generated"


class WriteError(RuntimeError):
    """Raised when a generated test cannot be written."""


class ArtifactWriter:
    """Writes ``<Simple>_<method>Test`` files under ``<root>/<package>/generated``."""

    def __init__(self, suffix: str = SOURCE_SUFFIX) -> None:
        self.suffix = suffix
        self.logger = get_logger("writer")

    def destination(self, class_name: str, method_name: str, output_root: Path) -> Path:
        package, _ = split_class_name(class_name)
        directory = output_root.joinpath(*package.split(".")) if package else output_root
        return directory / GENERATED_PACKAGE / f"{generated_test_name(class_name, method_name)}{self.suffix}"

    def save(self, class_name: str, method_name: str, test_source: str, output_root: Path) -> Path:
        """Write ``test_source`` and return its path; existing files are overwritten."""
        package, _ = split_class_name(class_name)
        if not test_source.startswith("package "):
            generated_package = f"{package}.{GENERATED_PACKAGE}" if package else GENERATED_PACKAGE
            test_source = f"package {generated_package};\n\n{test_source}"

        path = self.destination(class_name, method_name, output_root)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(test_source, encoding="utf-8")
        except OSError as exc:
            raise WriteError(f"Error saving generated test to {path}: {exc}") from exc
        self.logger.info("Saved test to: %s", path)
        return path


__all__ = ["ArtifactWriter", "GENERATED_PACKAGE", "WriteError"]

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Callable, Iterator, Mapping

import pytest

from testgen.config import BackendSettings, CoverageSettings, GenerationConfig, OutputSettings
from tests._fixtures.report_builder import JacocoReportBuilder


@pytest.fixture
def report_builder() -> JacocoReportBuilder:
    """Provide an empty JaCoCo report builder."""
    return JacocoReportBuilder()


@pytest.fixture
def write_sources(tmp_path: Path) -> Callable[[Mapping[str, str]], Path]:
    """Write ``relative path -> Java source`` entries under ``tmp_path/src``."""
    root = tmp_path / "src"

    def _write(files: Mapping[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return root

    return _write


@pytest.fixture
def generation_config(tmp_path: Path) -> GenerationConfig:
    """A config rooted at ``tmp_path`` with the trace at ``build/jacoco.xml``."""
    return GenerationConfig(
        root=tmp_path,
        coverage=CoverageSettings(
            exec_file=tmp_path / "build" / "jacoco.xml",
            class_dir=tmp_path / "build" / "classes",
            source_dir=tmp_path / "src",
            threshold=80.0,
        ),
        output=OutputSettings(dir=tmp_path / "out"),
        backend=BackendSettings(type="openai", api_key="test-key", delay_seconds=0.0),
    )


@pytest.fixture(autouse=True)
def _reset_testgen_logger() -> Iterator[None]:
    """Drop handlers installed by ``configure_logging`` so they do not outlive a test."""
    yield
    logger = logging.getLogger("testgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

"""Pipeline orchestration: coverage gaps -> prompts -> backend -> test files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .backends import AIBackend, create_backend
from .config import GenerationConfig
from .coverage import CoverageAnalyzer, TraceError, TraceNotFound
from .logging import get_logger
from .models import CoverageGap, GapsByClass
from .pacing import FixedIntervalRateLimiter, RateLimiter
from .prompting.builder import PromptBuilder
from .source.extractor import FALLBACK_NOTICE, MethodExtractor
from .source.locator import SourceLocator
from .writer import ArtifactWriter, WriteError


@dataclass
class RunSummary:
    """Outcome of a generation run."""

    classes_with_gaps: int = 0
    gaps_found: int = 0
    generated: List[Path] = field(default_factory=list)
    skipped: List[Tuple[str, str, str]] = field(default_factory=list)

    def skip(self, class_name: str, method_name: str, reason: str) -> None:
        self.skipped.append((class_name, method_name, reason))


class Orchestrator:
    """Drives the generation pipeline sequentially, one backend call at a time.

    Failures are contained to the gap (or class) they occur in; only a missing
    or unreadable trace ends the run early.
    """

    def __init__(
        self,
        config: GenerationConfig,
        *,
        analyzer: CoverageAnalyzer | None = None,
        locator: SourceLocator | None = None,
        extractor: MethodExtractor | None = None,
        prompt_builder: PromptBuilder | None = None,
        backend: AIBackend | None = None,
        writer: ArtifactWriter | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.config = config
        self.analyzer = analyzer or CoverageAnalyzer()
        self.locator = locator or SourceLocator()
        self.extractor = extractor or MethodExtractor()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.backend = backend or create_backend(config.backend)
        self.writer = writer or ArtifactWriter()
        self.rate_limiter = rate_limiter or FixedIntervalRateLimiter(config.backend.delay_seconds)
        self.logger = get_logger("orchestrator")

    def run(self) -> RunSummary:
        """Analyze coverage and generate a test for every gap."""
        summary = RunSummary()
        self.logger.info("Starting test generation process...")

        gaps_by_class = self._analyze()
        if not gaps_by_class:
            self.logger.info("No coverage gaps found. Exiting.")
            return summary

        summary.classes_with_gaps = len(gaps_by_class)
        summary.gaps_found = sum(len(gaps) for gaps in gaps_by_class.values())
        self.logger.info(
            "Found %d coverage gaps in %d classes", summary.gaps_found, summary.classes_with_gaps
        )

        for class_name, gaps in gaps_by_class.items():
            self._process_class(class_name, gaps, summary)

        self.logger.info(
            "Test generation complete: %d generated, %d skipped",
            len(summary.generated),
            len(summary.skipped),
        )
        return summary

    def _analyze(self) -> GapsByClass:
        coverage = self.config.coverage
        try:
            return self.analyzer.analyze(
                coverage.exec_file,
                coverage.class_dir,
                coverage.threshold,
                self.config.target_packages,
                self.config.exclusions,
            )
        except TraceNotFound as exc:
            self.logger.error("%s", exc)
            self.logger.error("Run your tests with JaCoCo enabled and generate the XML report first.")
        except TraceError as exc:
            self.logger.error("Error analyzing coverage: %s", exc)
        return {}

    def _process_class(self, class_name: str, gaps: List[CoverageGap], summary: RunSummary) -> None:
        self.logger.info("Generating tests for: %s", class_name)
        source = self.locator.find_source(class_name, self.config.coverage.source_dir)
        if not source:
            self.logger.warning("Could not find source code for %s. Skipping.", class_name)
            for gap in gaps:
                summary.skip(class_name, gap.method_name, "source_not_found")
            return

        for gap in gaps:
            self.logger.info("  - Method: %s", gap.method_name)
            try:
                outcome = self._process_gap(class_name, gap, source)
            except Exception as exc:
                self._log_exception(f"Test generation failed for {class_name}.{gap.method_name}", exc)
                summary.skip(class_name, gap.method_name, "error")
                continue
            if isinstance(outcome, Path):
                summary.generated.append(outcome)
            else:
                summary.skip(class_name, gap.method_name, outcome)

    def _process_gap(self, class_name: str, gap: CoverageGap, source: str) -> Path | str:
        method_source = self.extractor.extract(source, gap)
        if not method_source:
            self.logger.debug("Method %s not found in source; using whole class", gap.method_name)
            method_source = FALLBACK_NOTICE + source

        prompt = self.prompt_builder.build(class_name, gap, method_source)

        self.rate_limiter.acquire()
        generated = self.backend.generate(prompt)
        if not generated:
            return "backend_empty"

        try:
            return self.writer.save(class_name, gap.method_name, generated, self.config.output.dir)
        except WriteError as exc:
            self.logger.error("%s", exc)
            return "write_error"

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["Orchestrator", "RunSummary"]

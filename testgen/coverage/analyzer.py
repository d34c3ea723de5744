"""Per-method coverage analysis and gap classification."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from ..logging import get_logger
from ..models import ClassCoverage, CoverageGap, GapsByClass, MethodCoverage
from .patterns import is_excluded, is_included
from .reader import JacocoXmlReader, TraceNotFound, TraceReader

_SKIPPED_METHODS = frozenset({"<init>", "<clinit>"})


class CoverageAnalyzer:
    """Reads a coverage trace and yields the methods that fall below a threshold."""

    def __init__(self, reader: TraceReader | None = None) -> None:
        self.reader = reader or JacocoXmlReader()
        self.logger = get_logger("coverage.analyzer")

    def analyze(
        self,
        trace_file: Path,
        class_dir: Path | None,
        threshold: float,
        include_patterns: Sequence[str] = (),
        exclude_patterns: Sequence[str] = (),
    ) -> GapsByClass:
        """Return gaps grouped by fully-qualified class name.

        Raises :class:`TraceNotFound` when ``trace_file`` does not exist.
        Classes without gaps are left out of the result.
        """
        if not trace_file.is_file():
            raise TraceNotFound(trace_file)

        gaps_by_class: GapsByClass = {}
        for class_coverage in self.reader.read(trace_file, class_dir):
            name = class_coverage.name
            if not is_included(name, include_patterns):
                self.logger.debug("Skipping %s: not in target packages", name)
                continue
            if is_excluded(name, exclude_patterns):
                self.logger.debug("Skipping %s: excluded", name)
                continue
            gaps = self.find_gaps(class_coverage, threshold)
            if gaps:
                gaps_by_class[name] = gaps
        self.logger.debug(
            "Found %d gaps across %d classes",
            sum(len(gaps) for gaps in gaps_by_class.values()),
            len(gaps_by_class),
        )
        return gaps_by_class

    def find_gaps(self, class_coverage: ClassCoverage, threshold: float) -> List[CoverageGap]:
        gaps: List[CoverageGap] = []
        for method in class_coverage.methods:
            if method.name in _SKIPPED_METHODS:
                continue
            gap = self.classify(method, threshold)
            if gap is not None:
                gaps.append(gap)
        return gaps

    def classify(self, method: MethodCoverage, threshold: float) -> CoverageGap | None:
        """Return a gap for ``method`` or None when it meets the threshold."""
        total_instructions = method.instructions.total
        if total_instructions == 0:
            return None
        total_branches = method.branches.total

        instruction_pct = method.instructions.covered / total_instructions * 100
        branch_pct = method.branches.covered / total_branches * 100 if total_branches > 0 else 100.0

        if instruction_pct < threshold or (total_branches > 0 and branch_pct < threshold):
            return CoverageGap(
                method_name=method.name,
                method_signature=method.descriptor,
                instruction_coverage_pct=instruction_pct,
                branch_coverage_pct=branch_pct,
                missing_case_notes=tuple(self.missing_cases(method)),
                first_line=method.first_line,
                last_line=method.last_line,
            )
        return None

    @staticmethod
    def missing_cases(method: MethodCoverage) -> List[str]:
        notes: List[str] = []
        if method.branches.missed > 0:
            notes.append(f"Missing {method.branches.missed} branch conditions")

        if method.first_line <= 0:
            return notes
        for number in range(method.first_line, method.last_line + 1):
            line = method.line(number)
            if line.branches.total > 0 and line.branches.covered < line.branches.total:
                notes.append(f"Line {number} has missing branch coverage")
            if line.instructions.covered == 0 and line.instructions.total > 0:
                notes.append(f"Line {number} is not covered")
        return notes


__all__ = ["CoverageAnalyzer"]

"""Core data models shared across testgen components."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Counter:
    """Missed/covered pair for instructions or branches."""

    missed: int = 0
    covered: int = 0

    @property
    def total(self) -> int:
        return self.missed + self.covered


@dataclass(frozen=True)
class LineCoverage:
    """Coverage counters recorded for a single source line."""

    number: int
    instructions: Counter = field(default_factory=Counter)
    branches: Counter = field(default_factory=Counter)


@dataclass
class MethodCoverage:
    """Coverage of one method as reported by the trace."""

    name: str
    descriptor: str
    instructions: Counter
    branches: Counter
    first_line: int = 0
    last_line: int = 0
    lines: Dict[int, LineCoverage] = field(default_factory=dict)

    def line(self, number: int) -> LineCoverage:
        """Return the counters for ``number``; lines without code have empty counters."""
        return self.lines.get(number) or LineCoverage(number=number)


@dataclass
class ClassCoverage:
    """Coverage of one compiled class, keyed by its dotted name."""

    name: str
    methods: List[MethodCoverage]
    source_file_name: Optional[str] = None


@dataclass(frozen=True)
class CoverageGap:
    """An under-tested method selected for test generation."""

    method_name: str
    method_signature: str
    instruction_coverage_pct: float
    branch_coverage_pct: float
    missing_case_notes: Tuple[str, ...] = ()
    first_line: int = 0
    last_line: int = 0


GapsByClass = Dict[str, List[CoverageGap]]

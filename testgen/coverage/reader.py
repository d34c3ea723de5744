"""Coverage trace readers.

The analyzer only depends on :class:`TraceReader`; the trace format itself is
an implementation detail of each reader. :class:`JacocoXmlReader` consumes the
XML report produced by JaCoCo's ``report`` task (``jacocoTestReport.xml``).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..logging import get_logger
from ..models import ClassCoverage, Counter, LineCoverage, MethodCoverage

logger = get_logger("coverage.reader")

MethodStart = Tuple[str, str, int]
_SYNTHETIC_PREFIXES = ("lambda$", "access$")


class TraceError(RuntimeError):
    """Raised when a coverage trace cannot be read."""


class TraceNotFound(TraceError):
    """Raised when the coverage trace file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Coverage file not found: {path}")
        self.path = path


class TraceReader(ABC):
    """Contract for readers that turn a trace file into per-class coverage."""

    @abstractmethod
    def read(self, trace_file: Path, class_dir: Path | None = None) -> Iterable[ClassCoverage]:
        """Return coverage for every class covered by the trace."""


class JacocoXmlReader(TraceReader):
    """Reads JaCoCo XML reports."""

    def read(self, trace_file: Path, class_dir: Path | None = None) -> List[ClassCoverage]:
        if not trace_file.is_file():
            raise TraceNotFound(trace_file)
        try:
            tree = ET.parse(trace_file)
        except (ET.ParseError, OSError) as exc:
            raise TraceError(f"Failed to read coverage report {trace_file}: {exc}") from exc

        restrict = class_dir is not None and class_dir.is_dir()
        if class_dir is not None and not restrict:
            logger.debug("Class directory %s not found; analysing every class in the report", class_dir)

        classes: List[ClassCoverage] = []
        for package in tree.getroot().iter("package"):
            line_tables = {
                source.get("name", ""): self._read_lines(source)
                for source in package.findall("sourcefile")
            }
            method_starts = self._method_starts(package)
            for class_el in package.findall("class"):
                internal_name = class_el.get("name", "")
                if not internal_name:
                    continue
                if restrict and not (class_dir / f"{internal_name}.class").is_file():
                    logger.debug("Skipping %s: no compiled class under %s", internal_name, class_dir)
                    continue
                source_name = class_el.get("sourcefilename")
                lines = line_tables.get(source_name or "", {})
                starts = _boundaries(method_starts.get(source_name or "", []), internal_name)
                methods = [
                    self._read_method(method_el, lines, starts)
                    for method_el in class_el.findall("method")
                ]
                classes.append(
                    ClassCoverage(
                        name=internal_name.replace("/", "."),
                        methods=methods,
                        source_file_name=source_name,
                    )
                )
        return classes

    def _read_method(
        self,
        method_el: ET.Element,
        lines: Dict[int, LineCoverage],
        starts: List[int],
    ) -> MethodCoverage:
        counters = self._read_counters(method_el)
        first_line = _as_int(method_el.get("line"))
        last_line = first_line
        method_lines: Dict[int, LineCoverage] = {}
        if first_line > 0:
            last_line = self._last_line(first_line, lines, starts)
            method_lines = {
                number: line
                for number, line in lines.items()
                if first_line <= number <= last_line
            }
        return MethodCoverage(
            name=method_el.get("name", ""),
            descriptor=method_el.get("desc", ""),
            instructions=counters.get("INSTRUCTION", Counter()),
            branches=counters.get("BRANCH", Counter()),
            first_line=first_line,
            last_line=last_line,
            lines=method_lines,
        )

    @staticmethod
    def _last_line(first_line: int, lines: Dict[int, LineCoverage], starts: List[int]) -> int:
        next_start: Optional[int] = next((start for start in starts if start > first_line), None)
        candidates = [
            number
            for number, line in lines.items()
            if number >= first_line
            and (next_start is None or number < next_start)
            and line.instructions.total > 0
        ]
        return max(candidates) if candidates else first_line

    @staticmethod
    def _method_starts(package: ET.Element) -> Dict[str, List[MethodStart]]:
        """Collect ``(owner class, method, first line)`` per source file."""
        starts: Dict[str, List[MethodStart]] = {}
        for class_el in package.findall("class"):
            source_name = class_el.get("sourcefilename") or ""
            owner = class_el.get("name", "")
            for method_el in class_el.findall("method"):
                line = _as_int(method_el.get("line"))
                if line > 0:
                    starts.setdefault(source_name, []).append((owner, method_el.get("name", ""), line))
        return starts

    @staticmethod
    def _read_counters(element: ET.Element) -> Dict[str, Counter]:
        counters: Dict[str, Counter] = {}
        for counter_el in element.findall("counter"):
            counter_type = counter_el.get("type")
            if not counter_type:
                continue
            counters[counter_type] = Counter(
                missed=_as_int(counter_el.get("missed")),
                covered=_as_int(counter_el.get("covered")),
            )
        return counters

    @staticmethod
    def _read_lines(source_el: ET.Element) -> Dict[int, LineCoverage]:
        lines: Dict[int, LineCoverage] = {}
        for line_el in source_el.findall("line"):
            number = _as_int(line_el.get("nr"))
            if number <= 0:
                continue
            lines[number] = LineCoverage(
                number=number,
                instructions=Counter(_as_int(line_el.get("mi")), _as_int(line_el.get("ci"))),
                branches=Counter(_as_int(line_el.get("mb")), _as_int(line_el.get("cb"))),
            )
        return lines


def _boundaries(starts: List[MethodStart], class_name: str) -> List[int]:
    """Lines that may end a method of ``class_name``.

    Lambda bodies and methods of anonymous or local classes nested in
    ``class_name`` sit inside one of its methods, so they never end a range.
    """
    return sorted(
        {
            line
            for owner, method_name, line in starts
            if not method_name.startswith(_SYNTHETIC_PREFIXES)
            and not _is_local_to(owner, class_name)
        }
    )


def _is_local_to(owner: str, class_name: str) -> bool:
    """True for ``Outer$1`` or ``Outer$Inner$1Local`` relative to ``Outer``."""
    prefix = f"{class_name}$"
    if not owner.startswith(prefix):
        return False
    return any(segment[:1].isdigit() for segment in owner[len(prefix):].split("$"))


def _as_int(value: Optional[str]) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


__all__ = ["JacocoXmlReader", "TraceError", "TraceNotFound", "TraceReader"]

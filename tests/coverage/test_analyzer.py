from __future__ import annotations

from pathlib import Path

import pytest

from testgen.coverage import CoverageAnalyzer, TraceNotFound
from testgen.models import Counter, MethodCoverage


def _analyze(builder, tmp_path: Path, threshold: float = 80.0, **kwargs):
    report = builder.write(tmp_path / "jacoco.xml")
    return CoverageAnalyzer().analyze(report, None, threshold, **kwargs)


def test_method_below_threshold_becomes_gap(report_builder, tmp_path: Path) -> None:
    report_builder.add_method("com.acme.PaymentService", "charge", instructions=(4, 6), line=10)
    report_builder.add_method("com.acme.PaymentService", "refund", instructions=(1, 9), line=20)

    gaps = _analyze(report_builder, tmp_path)

    assert list(gaps) == ["com.acme.PaymentService"]
    [gap] = gaps["com.acme.PaymentService"]
    assert gap.method_name == "charge"
    assert gap.method_signature == "()V"
    assert gap.instruction_coverage_pct == pytest.approx(60.0)
    assert gap.branch_coverage_pct == pytest.approx(100.0)


def test_method_exactly_at_threshold_is_not_a_gap(report_builder, tmp_path: Path) -> None:
    report_builder.add_method("com.acme.Ledger", "post", instructions=(2, 8), branches=(1, 4))
    assert _analyze(report_builder, tmp_path) == {}


def test_low_branch_coverage_alone_creates_gap(report_builder, tmp_path: Path) -> None:
    report_builder.add_method("com.acme.Ledger", "post", instructions=(0, 10), branches=(3, 1))

    [gap] = _analyze(report_builder, tmp_path)["com.acme.Ledger"]
    assert gap.instruction_coverage_pct == pytest.approx(100.0)
    assert gap.branch_coverage_pct == pytest.approx(25.0)
    assert gap.missing_case_notes[0] == "Missing 3 branch conditions"


def test_zero_instruction_methods_are_skipped(report_builder, tmp_path: Path) -> None:
    report_builder.add_method("com.acme.Marker", "tag", instructions=(0, 0))
    assert _analyze(report_builder, tmp_path) == {}


def test_constructors_and_static_initialisers_are_never_gaps(report_builder, tmp_path: Path) -> None:
    report_builder.add_method("com.acme.Cart", "<init>", instructions=(5, 0))
    report_builder.add_method("com.acme.Cart", "<clinit>", instructions=(5, 0))
    report_builder.add_method("com.acme.Cart", "total", instructions=(5, 0))

    gaps = _analyze(report_builder, tmp_path)
    assert [gap.method_name for gap in gaps["com.acme.Cart"]] == ["total"]


def test_include_and_exclude_patterns_filter_classes(report_builder, tmp_path: Path) -> None:
    report_builder.add_method("com.acme.PaymentService", "charge", instructions=(5, 5))
    report_builder.add_method("com.acme.DemoApplication", "main", instructions=(5, 5))
    report_builder.add_method("org.other.Util", "help", instructions=(5, 5))

    gaps = _analyze(
        report_builder,
        tmp_path,
        include_patterns=["com.acme.*"],
        exclude_patterns=["**/*Application"],
    )
    assert list(gaps) == ["com.acme.PaymentService"]


def test_line_level_notes_are_recorded(report_builder, tmp_path: Path) -> None:
    report_builder.add_method(
        "com.acme.PaymentService",
        "charge",
        line=10,
        instructions=(4, 6),
        branches=(1, 1),
        lines={
            10: (0, 3, 1, 1),
            11: (4, 0, 0, 0),
            12: (0, 3, 0, 0),
        },
    )

    [gap] = _analyze(report_builder, tmp_path)["com.acme.PaymentService"]
    assert gap.missing_case_notes == (
        "Missing 1 branch conditions",
        "Line 10 has missing branch coverage",
        "Line 11 is not covered",
    )
    assert (gap.first_line, gap.last_line) == (10, 12)


def test_lambda_and_anonymous_class_do_not_cut_enclosing_method(report_builder, tmp_path: Path) -> None:
    report_builder.add_method(
        "com.acme.PaymentService",
        "charge",
        line=10,
        instructions=(6, 4),
        lines={
            10: (0, 4, 0, 0),
            12: (0, 2, 0, 0),
            13: (0, 1, 0, 0),
            14: (3, 0, 0, 0),
            15: (3, 0, 0, 0),
        },
    )
    report_builder.add_method("com.acme.PaymentService", "lambda$charge$0", line=12, instructions=(0, 2))
    report_builder.add_method("com.acme.PaymentService$1", "run", line=13, instructions=(0, 1))
    report_builder.add_method(
        "com.acme.PaymentService",
        "refund",
        line=20,
        instructions=(0, 5),
        lines={20: (0, 5, 0, 0)},
    )

    [gap] = _analyze(report_builder, tmp_path)["com.acme.PaymentService"]

    assert gap.method_name == "charge"
    assert (gap.first_line, gap.last_line) == (10, 15)
    assert gap.missing_case_notes == ("Line 14 is not covered", "Line 15 is not covered")


def test_missing_trace_raises(tmp_path: Path) -> None:
    with pytest.raises(TraceNotFound):
        CoverageAnalyzer().analyze(tmp_path / "none.xml", None, 80.0)


def test_classify_without_lines_only_reports_branch_note() -> None:
    method = MethodCoverage(
        name="apply",
        descriptor="(I)I",
        instructions=Counter(missed=5, covered=5),
        branches=Counter(missed=2, covered=2),
    )
    gap = CoverageAnalyzer().classify(method, 80.0)
    assert gap is not None
    assert gap.missing_case_notes == ("Missing 2 branch conditions",)

"""Tests for method text extraction."""

from __future__ import annotations

from testgen.models import CoverageGap
from testgen.source import MethodExtractor

_SOURCE = """package com.acme;

public class PaymentService {
    private final Gateway gateway;

    public int charge(int amount) {
        if (amount > 0) {
            return gateway.submit(amount);
        }
        return 0;
    }

    protected List<String> history() throws IOException {
        return gateway.history();
    }

    public void refund() {
    }
}
"""


def _gap(name: str) -> CoverageGap:
    return CoverageGap(
        method_name=name,
        method_signature="()V",
        instruction_coverage_pct=50.0,
        branch_coverage_pct=100.0,
    )


def test_extracts_method_with_nested_braces() -> None:
    text = MethodExtractor().extract(_SOURCE, _gap("charge")).strip()

    assert text.startswith("public int charge(int amount) {")
    assert text.endswith("return 0;\n    }")
    assert "refund" not in text


def test_extracts_method_declaring_throws() -> None:
    text = MethodExtractor().extract(_SOURCE, _gap("history")).strip()

    assert text.startswith("protected List<String> history()")
    assert "gateway.history()" in text
    assert "refund" not in text


def test_missing_method_returns_empty_string() -> None:
    assert MethodExtractor().extract(_SOURCE, _gap("capture")) == ""


def test_unbalanced_body_returns_empty_string() -> None:
    truncated = "class A {\n    public void run() {\n        if (x) {\n"
    assert MethodExtractor().extract(truncated, _gap("run")) == ""


def test_method_name_is_matched_literally() -> None:
    source = "class A {\n    public void run$now() {\n    }\n}\n"
    assert MethodExtractor().extract(source, _gap("run$now")).strip().startswith("public void run$now()")

"""Builds backend-agnostic test generation prompts."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import CoverageGap
from ..source.locator import split_class_name

DEFAULT_TEMPLATE = "test_prompt.j2"


def format_percentage(value: float) -> str:
    """Render a coverage percentage with one decimal, e.g. ``60.0%``."""
    return f"{value:.1f}%"


def generated_test_name(class_name: str, method_name: str) -> str:
    """Name of the generated test class: ``<SimpleClassName>_<methodName>Test``."""
    _, simple_name = split_class_name(class_name)
    return f"{simple_name}_{method_name}Test"


class PromptBuilder:
    """Renders a coverage gap and its method source into an instruction prompt.

    Output is deterministic for a given input; every backend receives the same
    text.
    """

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        template_name: str = DEFAULT_TEMPLATE,
        language: str = "Java",
        framework: str = "JUnit 5",
        mocking_library: str = "Mockito",
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.template_name = template_name
        self.language = language
        self.framework = framework
        self.mocking_library = mocking_library
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            autoescape=False,
        )

    def build(self, class_name: str, gap: CoverageGap, method_source: str) -> str:
        template = self._env.get_template(self.template_name)
        return template.render(
            language=self.language,
            framework=self.framework,
            mocking_library=self.mocking_library,
            fence_language=self.language.lower(),
            class_name=class_name,
            method_name=gap.method_name,
            method_source=method_source,
            missing_cases=list(gap.missing_case_notes),
            instruction_coverage=format_percentage(gap.instruction_coverage_pct),
            branch_coverage=format_percentage(gap.branch_coverage_pct),
            test_class_name=generated_test_name(class_name, gap.method_name),
        )


__all__ = ["PromptBuilder", "format_percentage", "generated_test_name"]

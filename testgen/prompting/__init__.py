"""Prompt rendering for test generation."""

from .builder import PromptBuilder, format_percentage, generated_test_name

__all__ = ["PromptBuilder", "format_percentage", "generated_test_name"]

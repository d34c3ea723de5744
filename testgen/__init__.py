"""Coverage-gap-driven test generation."""

__version__ = "0.1.0"

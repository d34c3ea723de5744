"""Source lookup and method extraction."""

from .extractor import FALLBACK_NOTICE, MethodExtractor
from .locator import SOURCE_SUFFIX, SourceLocator, split_class_name

__all__ = ["FALLBACK_NOTICE", "MethodExtractor", "SOURCE_SUFFIX", "SourceLocator", "split_class_name"]

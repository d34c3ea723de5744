"""Best-effort extraction of a single method's text from class source.

This is a heuristic, not a parser: the signature is found with a regular
expression and the body end with a brace count. Braces inside string or char
literals and comments are counted like any other, so such a literal can move
the detected end of the method.
"""

from __future__ import annotations

import re

from ..models import CoverageGap

FALLBACK_NOTICE = "// Method code not found, using whole class\n"

_SIGNATURE_TEMPLATE = r"\s*(public|protected|private|static|\s) +[\w<>\[\]]+\s+{name}\s*\([^)]*\)\s*(\{{|throws)"


class MethodExtractor:
    """Isolates one method's source text by name."""

    def extract(self, class_source: str, gap: CoverageGap) -> str:
        """Return the method text for ``gap`` or an empty string.

        Lookup is by name only, so with overloads the first declaration wins.
        """
        pattern = re.compile(_SIGNATURE_TEMPLATE.format(name=re.escape(gap.method_name)))
        match = pattern.search(class_source)
        if match is None:
            return ""

        start = match.start()
        depth = 0
        in_body = False
        for index in range(start, len(class_source)):
            char = class_source[index]
            if char == "{":
                depth += 1
                in_body = True
            elif char == "}":
                depth -= 1
                if in_body and depth == 0:
                    return class_source[start : index + 1]
        return ""


__all__ = ["FALLBACK_NOTICE", "MethodExtractor"]

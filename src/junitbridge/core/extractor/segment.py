"""Split Java test source into ``@Test`` method bodies."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..scanner.braces import find_matching_brace, mask

logger = logging.getLogger(__name__)

# Runs on masked text, so annotations or braces inside comments and
# strings are invisible here.
TEST_METHOD_RE = re.compile(
    r"@Test\b(?:\s*\([^)]*\))?"
    r"(?:\s+@\w+(?:\.\w+)*(?:\s*\([^)]*\))?)*"
    r"\s+(?:(?:public|protected|private|static|final|synchronized)\s+)*"
    r"void\s+(\w+)\s*\([^)]*\)\s*"
    r"(?:throws\s+[\w.]+(?:\s*,\s*[\w.]+)*\s*)?\{"
)


@dataclass
class MethodSegment:
    name: str
    body: str  # from the opening '{' through its matching '}' inclusive
    start: int
    end: int  # exclusive
    terminated: bool = True


def split_test_methods(code: str) -> list[MethodSegment]:
    """Extract every ``@Test`` method body from ``code`` in source order.

    A method whose closing brace never arrives is returned with the rest
    of the text as its body and ``terminated=False``.
    """
    masked = mask(code)
    segments: list[MethodSegment] = []
    pos = 0
    while True:
        m = TEST_METHOD_RE.search(masked, pos)
        if not m:
            break
        start = m.end() - 1
        close = find_matching_brace(masked, start)
        if close is None:
            segments.append(
                MethodSegment(
                    name=m.group(1),
                    body=code[start:],
                    start=start,
                    end=len(code),
                    terminated=False,
                )
            )
            logger.debug(f"Unterminated test method body: {m.group(1)}")
            break
        segments.append(
            MethodSegment(name=m.group(1), body=code[start : close + 1], start=start, end=close + 1)
        )
        pos = close + 1

    logger.debug(f"Segmented {len(segments)} test method(s)")
    return segments

"""Static well-formedness check for JUnit5 + Selenium sources.

Not a compiler: this verifies brace/literal/comment balance and the
presence of the declarations every generated test class must have. All
presence checks run on masked source so commented-out code does not
count.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ..extractor.segment import split_test_methods
from ..scanner.braces import CODE, mask, scan

_OPEN_STATE_LABELS = {
    "string": "string literal",
    "char": "char literal",
    "text_block": "text block",
    "block_comment": "block comment",
}


@dataclass
class SyntaxReport:
    valid: bool
    test_count: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "testCount": self.test_count,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def validate_syntax(code: str, min_tests: int = 3) -> SyntaxReport:
    errors: list[str] = []
    warnings: list[str] = []

    result = scan(code)
    masked = result.masked

    if result.min_depth < 0:
        errors.append("Unbalanced braces: closing '}' without matching '{'")
    if result.depth != 0:
        errors.append(f"Unbalanced braces: depth={result.depth} at end of file")
    if result.open_state != CODE:
        errors.append(f"Unterminated {_OPEN_STATE_LABELS[result.open_state]} at end of file")
    for state, line in result.unterminated_literals:
        errors.append(f"Unterminated {_OPEN_STATE_LABELS[state]} at line {line}")

    if not re.search(r"\bpublic\s+(?:(?:final|abstract)\s+)*class\s+\w+", masked):
        errors.append("Missing: public class declaration")

    if "org.junit.jupiter.api.Test" not in masked:
        errors.append("Missing import: org.junit.jupiter.api.Test")

    test_count = len(re.findall(r"@Test\b", masked))
    if test_count == 0:
        errors.append("No @Test methods found")
    elif test_count < min_tests:
        warnings.append(f"@Test count is {test_count} (expected >= {min_tests})")

    if "@BeforeEach" not in masked:
        errors.append("Missing @BeforeEach (WebDriver initialization)")
    if "@AfterEach" not in masked:
        errors.append("Missing @AfterEach (WebDriver teardown)")

    if not re.search(r"\bWebDriver\b", masked):
        errors.append("Missing: WebDriver (Selenium not used)")
    if "WebDriverWait" not in masked:
        warnings.append("WebDriverWait not found; fixed sleep dependency suspected")
    if re.search(r"\bThread\s*\.\s*sleep\b", masked):
        warnings.append("Thread.sleep detected; use WebDriverWait instead")

    if re.search(r"\bassertTrue\s*\(\s*true\s*\)", masked):
        warnings.append("assertTrue(true) found; possible dummy test")

    empty = sum(
        1 for seg in split_test_methods(code) if seg.terminated and not mask(seg.body)[1:-1].strip()
    )
    if empty:
        warnings.append(f"{empty} empty @Test method(s) found")

    return SyntaxReport(
        valid=not errors,
        test_count=test_count,
        errors=errors,
        warnings=warnings,
    )

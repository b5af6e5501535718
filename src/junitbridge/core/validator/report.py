"""Structure & rule validation of an LLM test-design report.

A report has three sections: (A) the test case list, (B) a fenced
```java block with the JUnit implementation, and an optional (C). The
parsed form is checked against ``REPORT_SCHEMA`` and then against the
count rules the generation prompt demands.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import jsonschema

CATEGORIES = ("正常系", "異常系", "境界値", "セキュリティ")
PRIORITIES = ("高", "中", "低")
MIN_CASES = 15
MIN_PER_CATEGORY = 3
MIN_TEST_METHODS = 3
REQUIRED_JAVA_SNIPPETS = (
    "org.junit.jupiter",
    "WebDriver",
    "WebDriverWait",
    "@BeforeEach",
    "@AfterEach",
    "@Test",
)

REPORT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["sections", "java", "cases"],
    "properties": {
        "sections": {
            "type": "object",
            "required": ["A", "B", "C"],
            "properties": {
                "A": {"type": "string", "minLength": 1},
                "B": {"type": "string", "minLength": 1},
                "C": {"type": "string"},
            },
        },
        "java": {
            "type": "object",
            "required": ["code", "testCount"],
            "properties": {
                "code": {"type": "string", "minLength": 1},
                "testCount": {"type": "integer", "minimum": 0},
            },
        },
        "cases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "category", "priority", "steps", "expected"],
                "properties": {
                    "id": {"type": "string", "pattern": r"^TC-\d{3}$"},
                    "category": {"enum": list(CATEGORIES)},
                    "priority": {"enum": list(PRIORITIES)},
                    "preconditions": {"type": "string"},
                    "steps": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                    "expected": {"type": "string", "minLength": 1},
                    "evidence": {"type": "string"},
                },
            },
        },
    },
}

_JAVA_BLOCK_RE = re.compile(r"```java\s*([\s\S]*?)\s*```")
_CASE_SPLIT_RE = re.compile(r"(?=テストケースID:\s*TC-\d{3})")


class ReportFormatError(ValueError):
    """A required section or code block is missing."""


@dataclass
class ReportValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)
    case_count: int = 0
    test_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "caseCount": self.case_count,
            "testCount": self.test_count,
        }


def extract_sections(text: str) -> dict[str, str]:
    a_idx = text.find("(A)")
    b_idx = text.find("(B)")
    c_idx = text.find("(C)")
    if a_idx == -1 or b_idx == -1:
        raise ReportFormatError("Missing required sections: (A) and/or (B).")
    a = text[a_idx:b_idx].strip()
    b = text[b_idx:].strip() if c_idx == -1 else text[b_idx:c_idx].strip()
    c = "" if c_idx == -1 else text[c_idx:].strip()
    return {"A": a, "B": b, "C": c}


def extract_java_code(section_b: str) -> dict[str, Any]:
    m = _JAVA_BLOCK_RE.search(section_b)
    if not m:
        raise ReportFormatError("Missing ```java code block in (B).")
    code = m.group(1)
    return {"code": code, "testCount": len(re.findall(r"@Test\b", code))}


def _field(chunk: str, pattern: str) -> str:
    m = re.search(pattern, chunk)
    return m.group(1).strip() if m else ""


def parse_test_cases(section_a: str) -> list[dict[str, Any]]:
    cases: list[dict[str, Any]] = []
    for chunk in (c.strip() for c in _CASE_SPLIT_RE.split(section_a)):
        m = re.search(r"テストケースID:\s*(TC-\d{3})", chunk)
        if not chunk or not m:
            continue
        steps_raw = _field(chunk, r"テスト手順:\s*([\s\S]*?)\n期待結果:")
        steps = [s.strip() for s in re.split(r"\n\d+\.\s*", "\n" + steps_raw) if s.strip()]
        case: dict[str, Any] = {
            "id": m.group(1),
            "preconditions": _field(chunk, r"前提条件:\s*([\s\S]*?)\nテスト手順:"),
            "steps": steps,
            "expected": _field(chunk, r"期待結果:\s*([\s\S]*?)\n実装根拠:"),
            "evidence": _field(chunk, r"実装根拠:\s*([\s\S]*)$"),
        }
        category = _field(chunk, r"カテゴリ:\s*\[(" + "|".join(CATEGORIES) + r")\]")
        priority = _field(chunk, r"優先度:\s*\[(" + "|".join(PRIORITIES) + r")\]")
        if category:
            case["category"] = category
        if priority:
            case["priority"] = priority
        cases.append(case)
    return cases


def rule_checks(parsed: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    cases = parsed["cases"]

    if len(cases) < MIN_CASES:
        errors.append(f"Test case count too low: {len(cases)} (expected >= {MIN_CASES})")

    per_category = {cat: 0 for cat in CATEGORIES}
    for case in cases:
        if case.get("category") in per_category:
            per_category[case["category"]] += 1
    for cat, count in per_category.items():
        if count < MIN_PER_CATEGORY:
            errors.append(f'Category "{cat}" too few: {count} (expected >= {MIN_PER_CATEGORY})')

    seen: set[str] = set()
    for case in cases:
        if case["id"] in seen:
            errors.append(f"Duplicate test case id found: {case['id']}")
        seen.add(case["id"])

    code = parsed["java"]["code"]
    missing = [s for s in REQUIRED_JAVA_SNIPPETS if s not in code]
    if missing:
        errors.append(f"Missing required Java snippets: {', '.join(missing)}")

    if parsed["java"]["testCount"] < MIN_TEST_METHODS:
        errors.append(
            f"Too few @Test methods: {parsed['java']['testCount']} (expected >= {MIN_TEST_METHODS})"
        )
    return errors


def validate_report(text: str) -> ReportValidation:
    """Parse a report and apply schema and rule checks; never raises."""
    try:
        sections = extract_sections(text)
        java = extract_java_code(sections["B"])
    except ReportFormatError as e:
        return ReportValidation(valid=False, errors=[str(e)])

    parsed = {"sections": sections, "java": java, "cases": parse_test_cases(sections["A"])}

    validator = jsonschema.Draft202012Validator(REPORT_SCHEMA)
    errors = [
        f"{'/'.join(str(p) for p in err.absolute_path) or '(root)'} {err.message}"
        for err in sorted(validator.iter_errors(parsed), key=lambda e: [str(p) for p in e.absolute_path])
    ]
    if not errors:
        errors = rule_checks(parsed)

    return ReportValidation(
        valid=not errors,
        errors=errors,
        case_count=len(parsed["cases"]),
        test_count=java["testCount"],
    )

"""Selenium/JUnit method body → semantic actions.

Recognition is a table of (pattern, builder) pairs. Each pattern is
applied over the whole body independently, so adding a construct means
adding a row, not another branch.

Two orderings are supported:
- ``grouped``: all matches of the first pattern, then all of the second,
  and so on. This is the historical output order and is the default.
- ``source``: every match is tagged with its offset and the result is
  sorted by position, which gives the order the statements run in.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from ..ir.model import (
    AssertFalse,
    AssertText,
    AssertTrue,
    Clear,
    Click,
    CountElements,
    ExtractionResult,
    Fill,
    GetText,
    Navigate,
    SemanticAction,
    TestMethod,
    Wait,
    deferred,
)
from ..scanner.braces import mask
from .locators import BY_PATTERN, normalize_locator, unescape_java
from .segment import split_test_methods

logger = logging.getLogger(__name__)

GROUPED = "grouped"
SOURCE = "source"

_STRING_LITERAL_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"$')


def _literal_or_deferred(expr: str) -> str:
    expr = expr.strip()
    m = _STRING_LITERAL_RE.match(expr)
    if m:
        return unescape_java(m.group(1))
    return deferred(expr)


def _find(by: str) -> str:
    return rf"findElement\s*\(\s*(?P<{by}>{BY_PATTERN})\s*\)"


@dataclass
class ActionPattern:
    kind: str
    regex: re.Pattern[str]
    build: Callable[[re.Match[str]], SemanticAction | None]


def _navigate(m: re.Match[str]) -> SemanticAction:
    return Navigate(url=_literal_or_deferred(m.group("url")))


def _fill(m: re.Match[str]) -> SemanticAction:
    return Fill(selector=normalize_locator(m.group("by")), value=_literal_or_deferred(m.group("value")))


def _assert_true(m: re.Match[str]) -> SemanticAction | None:
    expr = m.group("expr").strip()
    if expr == "true":
        return None
    return AssertTrue(expression=expr)


ACTION_PATTERNS: list[ActionPattern] = [
    ActionPattern(
        "navigate",
        re.compile(r"\bdriver\s*\.\s*(?:get|navigate\s*\(\s*\)\s*\.\s*to)\s*\(\s*(?P<url>[^;]+?)\s*\)\s*;"),
        _navigate,
    ),
    ActionPattern(
        "fill",
        re.compile(_find("by") + r"\s*\.\s*sendKeys\s*\(\s*(?P<value>[^;]+?)\s*\)\s*;"),
        _fill,
    ),
    ActionPattern(
        "clear",
        re.compile(_find("by") + r"\s*\.\s*clear\s*\(\s*\)"),
        lambda m: Clear(selector=normalize_locator(m.group("by"))),
    ),
    ActionPattern(
        "click",
        re.compile(_find("by") + r"\s*\.\s*click\s*\(\s*\)"),
        lambda m: Click(selector=normalize_locator(m.group("by"))),
    ),
    ActionPattern(
        "get_text",
        re.compile(_find("by") + r"\s*\.\s*getText\s*\(\s*\)"),
        lambda m: GetText(selector=normalize_locator(m.group("by"))),
    ),
    ActionPattern(
        "assert_text",
        re.compile(
            r'assertEquals\s*\(\s*"(?P<expected>(?:[^"\\]|\\.)*)"\s*,\s*[^;]*?'
            + _find("by")
            + r"\s*\.\s*getText"
        ),
        lambda m: AssertText(
            selector=normalize_locator(m.group("by")),
            expected=unescape_java(m.group("expected")),
        ),
    ),
    ActionPattern(
        "assert_true",
        re.compile(r"assertTrue\s*\(\s*(?P<expr>[^;]+?)\s*\)\s*;"),
        _assert_true,
    ),
    ActionPattern(
        "assert_false",
        re.compile(r"assertFalse\s*\(\s*(?P<expr>[^;]+?)\s*\)\s*;"),
        lambda m: AssertFalse(expression=m.group("expr").strip()),
    ),
    ActionPattern(
        "wait",
        re.compile(rf"ExpectedConditions\s*\.\s*(?P<cond>\w+)\s*\(\s*(?P<by>{BY_PATTERN})\s*\)"),
        lambda m: Wait(selector=normalize_locator(m.group("by")), condition=m.group("cond")),
    ),
    ActionPattern(
        "count_elements",
        re.compile(rf"findElements\s*\(\s*(?P<by>{BY_PATTERN})\s*\)\s*\.\s*size\s*\(\s*\)"),
        lambda m: CountElements(selector=normalize_locator(m.group("by"))),
    ),
]


def extract_actions_from_body(body: str, order: str = GROUPED) -> list[SemanticAction]:
    """Recognize browser actions in one method body.

    Commented-out statements are ignored. A body with nothing recognizable
    yields an empty list.
    """
    text = mask(body, strings=False, comments=True)
    found: list[tuple[int, int, SemanticAction]] = []
    for rank, pattern in enumerate(ACTION_PATTERNS):
        for m in pattern.regex.finditer(text):
            action = pattern.build(m)
            if action is not None:
                found.append((m.start(), rank, action))

    if order == SOURCE:
        found.sort(key=lambda item: (item[0], item[1]))
    return [action for _, _, action in found]


def extract_actions(
    code: str, test_name: str | None = None, order: str = GROUPED
) -> ExtractionResult:
    """Segment ``code`` into test methods and recognize each body's actions."""
    methods: list[TestMethod] = []
    for seg in split_test_methods(code):
        if test_name and seg.name != test_name:
            continue
        actions = extract_actions_from_body(seg.body, order=order)
        logger.debug(f"{seg.name}: {len(actions)} action(s)")
        methods.append(TestMethod(name=seg.name, actions=actions))
    return ExtractionResult(test_methods=methods)

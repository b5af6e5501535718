"""Locator normalization: Selenium ``By.*`` expressions to canonical selectors.

The forward table (``normalize_locator``) and the reverse table
(``describe_selector``) must stay in sync; the description is what the
snapshot backend uses to find the element by accessible name.
"""

from __future__ import annotations

import re

# Matches By.kind("value") with escaped quotes allowed inside value.
BY_PATTERN = r'By\.\w+\s*\(\s*"(?:[^"\\]|\\.)*"\s*\)'

_BY_RE = re.compile(r'^\s*By\.(\w+)\s*\(\s*"((?:[^"\\]|\\.)*)"\s*\)\s*$')


def _by_id(v: str) -> str:
    return f"#{v}"


def _by_name(v: str) -> str:
    return f'[name="{v}"]'


def _by_css(v: str) -> str:
    return v


def _by_xpath(v: str) -> str:
    return f"xpath={v}"


def _by_class(v: str) -> str:
    return f".{v}"


def _by_tag(v: str) -> str:
    return v


def _by_link_text(v: str) -> str:
    return f'text="{v}"'


LOCATOR_RULES = {
    "id": _by_id,
    "name": _by_name,
    "cssSelector": _by_css,
    "xpath": _by_xpath,
    "className": _by_class,
    "tagName": _by_tag,
    "linkText": _by_link_text,
}


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", '"': '"', "'": "'", "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def unescape_java(value: str) -> str:
    """Decode the simple escapes of a Java string literal body in one pass."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), value)


def normalize_locator(by_expr: str) -> str:
    """Map a ``By.*(...)`` expression to one canonical selector string.

    Args:
        by_expr: Locator expression as written in source, e.g. ``By.id("user")``

    Returns:
        Canonical selector (``#user``), or ``by_expr`` unchanged if the
        locator kind is not recognized
    """
    m = _BY_RE.match(by_expr)
    if not m:
        return by_expr
    rule = LOCATOR_RULES.get(m.group(1))
    if rule is None:
        return by_expr
    return rule(unescape_java(m.group(2)))


_NAME_ATTR_RE = re.compile(r'^\[name="(.*)"\]$')
_TEXT_RE = re.compile(r'^text="(.*)"$')


def describe_selector(selector: str) -> str:
    """Turn a canonical selector into a human-readable element description."""
    if selector.startswith("#"):
        return f'element with id="{selector[1:]}"'
    if selector.startswith("."):
        return f'element with class="{selector[1:]}"'
    m = _NAME_ATTR_RE.match(selector)
    if m:
        return f'input with name="{m.group(1)}"'
    m = _TEXT_RE.match(selector)
    if m:
        return f'element with text "{m.group(1)}"'
    if selector.startswith("xpath="):
        return f"element at xpath {selector[len('xpath='):]}"
    if re.fullmatch(r"[A-Za-z][A-Za-z0-9-]*", selector):
        return f"<{selector}> element"
    return selector

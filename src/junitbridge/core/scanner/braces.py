"""Brace/string/comment-aware scanning of Java source.

This is the single lexical primitive shared by method segmentation,
action recognition and the well-formedness checker. It does not tokenize
Java; it only tracks whether a position is code, a string/char literal,
a text block or a comment, and how deep the ``{}`` nesting is.

Masking replaces the *contents* of skipped regions with spaces (newlines
are kept) so that offsets in the masked text line up 1:1 with the
original source. Regexes can then run on the masked text and slice the
original with the same indices.
"""

from __future__ import annotations

from dataclasses import dataclass, field

CODE = "code"
STRING = "string"
CHAR = "char"
TEXT_BLOCK = "text_block"
LINE_COMMENT = "line_comment"
BLOCK_COMMENT = "block_comment"


@dataclass
class ScanResult:
    """Outcome of a full scan over a piece of source."""

    depth: int  # brace depth at end of text (0 when balanced)
    min_depth: int  # lowest depth reached; negative means a stray '}'
    open_state: str  # lexical state at end of text; CODE when everything closed
    masked: str  # source with comments and literal contents blanked
    # (state, line) of string/char literals cut off by a newline
    unterminated_literals: list[tuple[str, int]] = field(default_factory=list)


def _blank(ch: str) -> str:
    return ch if ch == "\n" else " "


def scan(code: str, *, mask_strings: bool = True, mask_comments: bool = True) -> ScanResult:
    """Walk ``code`` once, tracking lexical state and brace depth.

    Args:
        code: Java source text
        mask_strings: blank out string/char/text-block contents in ``masked``
        mask_comments: blank out comments in ``masked``

    Returns:
        ScanResult with final depth, the minimum depth seen and masked text
    """
    out: list[str] = []
    state = CODE
    depth = 0
    unterminated: list[tuple[str, int]] = []
    min_depth = 0
    i = 0
    n = len(code)

    while i < n:
        ch = code[i]
        nxt = code[i + 1] if i + 1 < n else ""

        if state == LINE_COMMENT:
            if ch == "\n":
                state = CODE
                out.append(ch)
            else:
                out.append(_blank(ch) if mask_comments else ch)
            i += 1
            continue

        if state == BLOCK_COMMENT:
            if ch == "*" and nxt == "/":
                state = CODE
                out.append("  " if mask_comments else "*/")
                i += 2
                continue
            out.append(_blank(ch) if mask_comments else ch)
            i += 1
            continue

        if state == TEXT_BLOCK:
            if code.startswith('"""', i):
                state = CODE
                out.append('"""')
                i += 3
                continue
            if ch == "\\" and i + 1 < n:
                out.append((_blank(ch) + _blank(nxt)) if mask_strings else ch + nxt)
                i += 2
                continue
            out.append(_blank(ch) if mask_strings else ch)
            i += 1
            continue

        if state in (STRING, CHAR):
            quote = '"' if state == STRING else "'"
            if ch == "\\" and i + 1 < n:
                out.append((_blank(ch) + _blank(nxt)) if mask_strings else ch + nxt)
                i += 2
                continue
            if ch == quote:
                state = CODE
                out.append(ch)
                i += 1
                continue
            if ch == "\n":
                # Unterminated literal; Java forbids raw newlines here.
                unterminated.append((state, code.count("\n", 0, i) + 1))
                state = CODE
                out.append(ch)
                i += 1
                continue
            out.append(_blank(ch) if mask_strings else ch)
            i += 1
            continue

        # CODE
        if ch == "/" and nxt == "/":
            state = LINE_COMMENT
            out.append("  " if mask_comments else "//")
            i += 2
            continue
        if ch == "/" and nxt == "*":
            state = BLOCK_COMMENT
            out.append("  " if mask_comments else "/*")
            i += 2
            continue
        if code.startswith('"""', i):
            state = TEXT_BLOCK
            out.append('"""')
            i += 3
            continue
        if ch == '"':
            state = STRING
        elif ch == "'":
            state = CHAR
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            min_depth = min(min_depth, depth)
        out.append(ch)
        i += 1

    # A line comment legitimately ends at EOF.
    if state == LINE_COMMENT:
        state = CODE
    return ScanResult(
        depth=depth,
        min_depth=min_depth,
        open_state=state,
        masked="".join(out),
        unterminated_literals=unterminated,
    )


def mask(code: str, *, strings: bool = True, comments: bool = True) -> str:
    """Return ``code`` with comments (and optionally literal contents) blanked."""
    return scan(code, mask_strings=strings, mask_comments=comments).masked


def find_matching_brace(masked: str, open_index: int) -> int | None:
    """Find the index of the '}' matching the '{' at ``open_index``.

    ``masked`` must come from :func:`mask` with strings and comments
    blanked, so every remaining brace is a real one.

    Returns:
        Index of the closing brace, or None if the text ends first
    """
    depth = 0
    for i in range(open_index, len(masked)):
        ch = masked[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None

"""Brace-aware scanning over program text.

Only characters that are real code are reported: string literals (single,
double and template quotes, with backslash escapes) and comments are skipped
so that braces inside them never affect nesting.
"""

from enum import Enum
from typing import Iterator

from ..errors import UnbalancedScanError

_QUOTES = "'\"`"


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the string literal opening at start."""
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            # unterminated single-line string; resume on the next line
            return i
        i += 1
    return n


def iter_code(text: str, start: int = 0) -> Iterator[tuple[int, str]]:
    """Yield (index, char) for every code character from start onwards."""
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == "/" and text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        if ch == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        yield i, ch
        i += 1


def depth_at(text: str, pos: int) -> tuple[int, bool]:
    """Return the brace depth at pos and whether pos is itself code."""
    depth = 0
    for i, ch in iter_code(text):
        if i >= pos:
            return depth, i == pos
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
    return depth, False


def line_depths(text: str) -> list[int | None]:
    """
    Brace depth at the first non-blank character of each line.

    None for blank lines and for lines that begin inside a string literal
    or a comment.
    """
    lines = text.split("\n")
    first_chars: dict[int, int] = {}
    offset = 0
    for line_no, line in enumerate(lines):
        stripped = line.lstrip()
        if stripped:
            first_chars[offset + len(line) - len(stripped)] = line_no
        offset += len(line) + 1

    depths: list[int | None] = [None] * len(lines)
    depth = 0
    for i, ch in iter_code(text):
        line_no = first_chars.get(i)
        if line_no is not None:
            depths[line_no] = depth
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
    return depths


class ScanState(Enum):
    SEEKING = "seeking-signature"
    IN_BODY = "in-body"
    DONE = "done"


def find_block_end(
    text: str,
    start: int,
    name: str = "<block>",
    max_steps: int | None = None,
) -> tuple[int, int]:
    """
    Locate the brace-delimited block following start.

    The first "{" after start opens the body; the scan ends when the nesting
    count returns to zero. Returns (body_start, end) where end is one past
    the closing brace.

    Raises:
        UnbalancedScanError: the text ends before the block closes, or more
            than max_steps code characters were visited.
    """
    state = ScanState.SEEKING
    depth = 0
    body_start = end = -1
    steps = 0

    for i, ch in iter_code(text, start):
        steps += 1
        if max_steps is not None and steps > max_steps:
            raise UnbalancedScanError(name, start, f"exceeded {max_steps} scan steps")

        if ch == "{":
            if state is ScanState.SEEKING:
                state = ScanState.IN_BODY
                body_start = i
            depth += 1
        elif ch == "}" and state is ScanState.IN_BODY:
            depth -= 1
            if depth == 0:
                state = ScanState.DONE
                end = i + 1
                break

    if state is ScanState.DONE:
        return body_start, end
    reason = "no opening brace" if state is ScanState.SEEKING else "block never closes"
    raise UnbalancedScanError(name, start, reason)

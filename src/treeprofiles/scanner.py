# -------------------------------------
# brace-aware scanner
# -------------------------------------
"""
Depth-aware, escape-aware splitting for brace patterns.

A backslash protects the character that follows it (the backslash itself
is kept in the output; nothing is unescaped at this layer).  Unescaped
'{' and '}' track a nesting depth, and a separator only counts at depth 0.
"""
from __future__ import annotations


def require_str(value, what: str = "pattern") -> str:
    """Fail fast on None / non-string input (a caller bug, not bad data)."""
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a str, not {type(value).__name__}")
    return value


def split(text: str, sep: str) -> tuple[str, str | None]:
    """
    Split text on the first unescaped, depth-0 occurrence of sep.

    Returns (left, right) on a match, (text, None) otherwise.  A separator
    at the very end gives (left, "").
    """
    require_str(text, "text")
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            # skip whatever is escaped; the backslash stays in the result
            i += 2
            continue
        if ch == sep and depth == 0:
            return text[:i], text[i + 1:]
        if ch == "{":
            depth += 1
        elif ch == "}":
            # a leading '}' is inert
            if depth > 0:
                depth -= 1
        i += 1
    return text, None


def split_all(text: str, sep: str) -> list[str]:
    """Split text on every depth-0 separator, e.g. the items of a comma list."""
    items: list[str] = []
    rest: str | None = text
    while rest is not None:
        item, rest = split(rest, sep)
        items.append(item)
    return items

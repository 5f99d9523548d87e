# -------------------------------------
# sequence expressions {from..to..step}
# -------------------------------------
"""
Sequence expressions found inside a brace group:

    {1..5}        1 2 3 4 5
    {5..1..2}     5 3 1
    {08..11}      08 09 10 11      (zero padding)
    {a..e..2}     a c e
    {z..x}        z y x

The direction always follows the endpoints; only the magnitude of an
explicit step is used.  A step of 0 is treated as 1, as Bash does.
"""
from __future__ import annotations

import re
from typing import Callable

from .scanner import require_str

# ============================================================
# regexes
# ============================================================

# Tried in this order; the first structural match wins.
_NUM_STEP_RE = re.compile(r"^(-?[0-9]+)\.\.(-?[0-9]+)\.\.(-?[0-9]+)$")
_NUM_RE = re.compile(r"^(-?[0-9]+)\.\.(-?[0-9]+)$")
_CHAR_STEP_RE = re.compile(r"^([A-Za-z])\.\.([A-Za-z])\.\.(-?[0-9]+)$")
_CHAR_RE = re.compile(r"^([A-Za-z])\.\.([A-Za-z])$")

_LEADING_ZERO_RE = re.compile(r"^-?0[0-9]")


# ============================================================
# generators
# ============================================================

def _steps(start: int, stop: int, step: str | None) -> range:
    """Inclusive range from start to stop, direction taken from the endpoints."""
    mag = abs(int(step)) if step is not None else 1
    if mag == 0:
        mag = 1
    if stop < start:
        return range(start, stop - 1, -mag)
    return range(start, stop + 1, mag)


def pad_width(a_s: str, b_s: str) -> int:
    """
    Zero-padding width for a numeric sequence, 0 when no padding applies.

    Padding is lexical: it is switched on by a leading zero on either
    endpoint, and the width counts the sign (printf "%0Nd").
    """
    if _LEADING_ZERO_RE.match(a_s) or _LEADING_ZERO_RE.match(b_s):
        return max(len(a_s), len(b_s))
    return 0


def numeric_sequence(a_s: str, b_s: str, step: str | None = None) -> list[str]:
    width = pad_width(a_s, b_s)
    return [f"{i:0{width}d}" if width else str(i) for i in _steps(int(a_s), int(b_s), step)]


def char_sequence(a_s: str, b_s: str, step: str | None = None) -> list[str]:
    # may walk through non-letters, e.g. {Z..a}
    return [chr(i) for i in _steps(ord(a_s), ord(b_s), step)]


_PATTERNS: list[tuple[re.Pattern, Callable[..., list[str]]]] = [
    (_NUM_STEP_RE, numeric_sequence),
    (_NUM_RE, numeric_sequence),
    (_CHAR_STEP_RE, char_sequence),
    (_CHAR_RE, char_sequence),
]


def generate(body: str) -> list[str] | None:
    """
    Expand the body of a brace group as a sequence expression.

    Returns None when body is not a sequence (the caller then tries a
    comma list); this is not an error.
    """
    require_str(body, "body")
    for rx, func in _PATTERNS:
        m = rx.fullmatch(body)
        if m:
            return func(*m.groups())
    return None
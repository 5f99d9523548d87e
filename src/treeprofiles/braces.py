# -------------------------------------
# Bash-style brace expansion
# -------------------------------------
"""
Brace expansion, as in bash(1):

    a{b,c}d          -> abd acd
    {1,{a..c}}       -> 1 a b c
    x{08..11}        -> x08 x09 x10 x11
    {A,B}{X,Y}       -> AX AY BX BY

A pattern is parsed into an immutable expansion tree:

  - Text(text)                      a literal, yields itself once
  - Group(preamble, choices, tail)  preamble + <each choice> + <each tail>

Iterating a node yields the results lazily; the same tree can be iterated
again and gives the same output.

Only '{', ',', '.' and '}' are special, and a backslash protects them.
Backslashes are left in the results.  Malformed braces never raise; they
are kept as literal text:

    {1,2       -> {1,2        (no closing brace)
    {}1,2}     -> {}1,2}      ('{}' is always literal)
    {1},2}     -> 1} 2        (group widened past a single-item body)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from .scanner import require_str, split, split_all
from .sequences import generate

# ============================================================
# Expansion tree
# ============================================================

@dataclass(frozen=True)
class Text:
    text: str

    def __iter__(self) -> Iterator[str]:
        yield self.text


@dataclass(frozen=True)
class Group:
    preamble: str
    choices: tuple["Node", ...]
    tail: "Node"

    def __iter__(self) -> Iterator[str]:
        for choice in self.choices:
            for item in choice:
                for suffix in self.tail:
                    yield self.preamble + item + suffix


Node = Union[Text, Group]

# choices standing in for an unmatched '{' and for a literal '{}'
_UNMATCHED = (Text(""),)
_EMPTY_BRACES = (Text("{}"),)


# ============================================================
# Parser
# ============================================================

def _parse_body(body: str | None) -> tuple[Node, ...] | None:
    """
    Choices for the text between '{' and '}', or None if body is not a
    valid brace expression (a single item with no comma).
    """
    if body is None:
        return _UNMATCHED
    if body == "":
        return _EMPTY_BRACES

    # sequence syntax wins over a comma list
    seq = generate(body)
    if seq is not None:
        return tuple(Text(v) for v in seq)

    items = split_all(body, ",")
    if len(items) == 1:
        return None
    return tuple(parse(item) for item in items)


def parse(pattern: str) -> Node:
    """Parse a brace pattern into its expansion tree."""
    require_str(pattern)

    preamble, postamble = split(pattern, "{")
    if postamble is None:
        return Text(pattern)

    # Find the first '}' that closes a valid expression, not just the first
    # '}': a rejected body is merged with the text up to the next '}'.
    body: str | None = None
    postscript: str | None = postamble
    choices = None
    while choices is None:
        rejected = body
        body, postscript = split(postscript, "}")
        if rejected is not None:
            body = rejected + "}" + body
        if postscript is None:
            # out of '}': the '{' was literal after all
            preamble += "{"
            body, postscript = None, postamble
        choices = _parse_body(body)

    return Group(preamble, choices, parse(postscript))


# ============================================================
# API
# ============================================================

def iter_braces(pattern: str) -> Iterator[str]:
    """Lazily yield the brace expansion of pattern."""
    return iter(parse(pattern))


def expand_braces(pattern: str) -> list[str]:
    """
    Return every string produced by brace expansion of pattern, in order.

    Never empty: a pattern without braces gives [pattern].
    """
    return list(parse(pattern))

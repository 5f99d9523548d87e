# -------------------------------------
# glob -> regex translation
# -------------------------------------
"""
Compile shell wildcard patterns into anchored regular expressions.

Two passes:

  tokenize(glob)   -> [Tok]   LIT / ESC / ANY_CHAR / ANY_STRING /
                              CLASS_START / COMPLEMENT / DASH / CLASS_END
  translate(glob)  -> str     the tokens rendered as a Python regex

Dialect:
  *        any string, never crossing the separator
  ?        any single character except the separator
  [...]    bracket expression; a leading '!' or '^' complements it,
           '?' and '*' are plain characters inside, the first ']' closes it
  \\c      c is literal

This is a simplified glob(7).  Known differences, kept on purpose:
  - a ']' right after '[' closes the (empty) expression
  - '[' and '\\' are not literal inside brackets
  - wildcards match a leading '.'
  - a separator listed inside brackets is matched like any other character

For fnmatch(3) semantics with FNM_PATHNAME use the "posix" matcher, backed by
wcmatch (see get_matcher).
"""
from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Literal

from wcmatch import fnmatch as wcfnmatch

from .scanner import require_str

logger = logging.getLogger(__name__)

# ============================================================
# Tokens
# ============================================================

TokKind = Literal[
    "LIT",          # ordinary character
    "ESC",          # backslash-escaped character
    "ANY_CHAR",     # ?
    "ANY_STRING",   # *
    "CLASS_START",  # [
    "COMPLEMENT",   # leading ! or ^ in a bracket expression
    "DASH",         # range operator in a bracket expression
    "CLASS_END",    # ]
]


@dataclass(frozen=True)
class Tok:
    kind: TokKind
    char: str = ""


def _is_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def _unescape(glob: str) -> List[tuple[str, bool]]:
    """
    Resolve backslashes into (char, escaped) pairs.

    '\\' + punctuation marks the character as escaped; '\\' + alphanumeric
    just drops the backslash.  A trailing backslash is an ordinary character.
    """
    out: List[tuple[str, bool]] = []
    i = 0
    n = len(glob)
    while i < n:
        ch = glob[i]
        if ch == "\\" and i + 1 < n:
            nxt = glob[i + 1]
            out.append((nxt, not _is_alnum(nxt)))
            i += 2
            continue
        out.append((ch, False))
        i += 1
    return out


def _class_tokens(body: List[tuple[str, bool]]) -> List[Tok]:
    toks = [Tok("CLASS_START")]
    for j, (ch, escaped) in enumerate(body):
        if escaped or ch in "?*":
            toks.append(Tok("ESC", ch))
        elif j == 0 and ch in "!^":
            toks.append(Tok("COMPLEMENT"))
        elif ch == "-":
            toks.append(Tok("DASH"))
        else:
            toks.append(Tok("LIT", ch))
    toks.append(Tok("CLASS_END"))
    return toks


def tokenize(glob: str) -> List[Tok]:
    require_str(glob, "glob")
    units = _unescape(glob)
    toks: List[Tok] = []

    i = 0
    n = len(units)
    while i < n:
        ch, escaped = units[i]

        if escaped:
            toks.append(Tok("ESC", ch))

        elif ch == "[":
            # first unescaped ']' closes; no closing bracket -> literal '['
            end = next((j for j in range(i + 1, n) if units[j] == ("]", False)), None)
            if end is None:
                toks.append(Tok("LIT", ch))
            else:
                toks.extend(_class_tokens(units[i + 1:end]))
                i = end

        elif ch == "*":
            toks.append(Tok("ANY_STRING"))

        elif ch == "?":
            toks.append(Tok("ANY_CHAR"))

        else:
            toks.append(Tok("LIT", ch))

        i += 1

    return toks


# ============================================================
# Rendering
# ============================================================

def _literal(ch: str) -> str:
    """Backslash everything except alphanumerics, '_' and ' '."""
    if _is_alnum(ch) or ch in "_ ":
        return ch
    return "\\" + ch


def _class_member(tok: Tok) -> str:
    return "\\-" if tok.kind == "DASH" else _literal(tok.char)


def _member_char(tok: Tok) -> str:
    return "-" if tok.kind == "DASH" else tok.char


def _render_class(members: List[Tok], complement: bool) -> str:
    # A range is "x - y" with unescaped endpoints; escaped characters always
    # stand for themselves.  Reversed ranges match nothing.
    parts: List[str] = []
    i = 0
    n = len(members)
    while i < n:
        lo = members[i]
        if (
            i + 2 < n
            and members[i + 1].kind == "DASH"
            and lo.kind != "ESC"
            and members[i + 2].kind != "ESC"
        ):
            hi = members[i + 2]
            if _member_char(lo) <= _member_char(hi):
                parts.append(f"{_class_member(lo)}-{_class_member(hi)}")
            i += 3
            continue
        parts.append(_class_member(lo))
        i += 1

    if not parts:
        return "(?s:.)" if complement else "(?!)"
    return "[" + ("^" if complement else "") + "".join(parts) + "]"


def _check_sep(sep: str) -> None:
    if not isinstance(sep, str) or len(sep) != 1:
        raise ValueError(f"separator must be a single character, got {sep!r}")


def translate(glob: str, sep: str = "/") -> str:
    """Translate a glob into an anchored regex string (use with fullmatch)."""
    _check_sep(sep)
    any_char = f"[^{re.escape(sep)}]"
    out: List[str] = []

    members: List[Tok] | None = None
    complement = False
    for tok in tokenize(glob):
        if members is not None:
            if tok.kind == "CLASS_END":
                out.append(_render_class(members, complement))
                members = None
            elif tok.kind == "COMPLEMENT":
                complement = True
            else:
                members.append(tok)
            continue

        if tok.kind == "CLASS_START":
            members = []
            complement = False
        elif tok.kind == "ANY_CHAR":
            out.append(any_char)
        elif tok.kind == "ANY_STRING":
            out.append(any_char + "*")
        else:
            out.append(_literal(tok.char))

    return "^" + "".join(out) + "$"


# ============================================================
# Matching
# ============================================================

def compile_glob(glob: str, sep: str = "/") -> re.Pattern:
    """Compile a glob into a matcher; never rejects a pattern."""
    rx = translate(glob, sep)
    logger.debug("Converted wildcard pattern %r into regex %r", glob, rx)
    return re.compile(rx)


def match_glob(glob: str, candidate: str, sep: str = "/") -> bool:
    """True if candidate matches glob end to end."""
    require_str(candidate, "candidate")
    # fullmatch: '$' alone would also accept a trailing newline
    return compile_glob(glob, sep).fullmatch(candidate) is not None


_POSIX_FLAGS = wcfnmatch.FORCEUNIX | wcfnmatch.DOTMATCH


def _split_pathname(glob: str) -> List[str]:
    """Split a glob at each '/', escaped or not."""
    parts: List[str] = []
    buf: List[str] = []
    i = 0
    n = len(glob)
    while i < n:
        ch = glob[i]
        if ch == "\\" and i + 1 < n:
            if glob[i + 1] == "/":
                parts.append("".join(buf))
                buf = []
            else:
                buf.append(glob[i:i + 2])
            i += 2
            continue
        if ch == "/":
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    parts.append("".join(buf))
    return parts


def _match_segment(glob: str, name: str) -> bool:
    if not name:
        # wcmatch wants a character for a leading '*'; fnmatch(3) does not
        return glob.strip("*") == ""
    return wcfnmatch.fnmatch(name, glob, flags=_POSIX_FLAGS)


def posix_match(glob: str, candidate: str) -> bool:
    """
    fnmatch(3) with FNM_PATHNAME (no FNM_PERIOD), through wcmatch.

    The glob and the candidate are split at '/' and matched segment by
    segment, so '.', '..', empty segments and repeated or trailing slashes
    get no special treatment.
    """
    require_str(glob, "glob")
    require_str(candidate, "candidate")
    globs = _split_pathname(glob)
    names = candidate.split("/")
    if len(globs) != len(names):
        return False
    return all(_match_segment(g, name) for g, name in zip(globs, names))


MATCHERS = ("builtin", "posix")


def get_matcher(name: str = "builtin", sep: str = "/") -> Callable[[str, str], bool]:
    """
    Return a (glob, candidate) -> bool matcher.

    "builtin" is the compiler in this module; "posix" is fnmatch(3) with
    FNM_PATHNAME and only knows '/' as separator.
    """
    if name == "builtin":
        _check_sep(sep)
        return functools.partial(match_glob, sep=sep)
    if name == "posix":
        if sep != "/":
            raise ValueError(f"posix matcher only supports '/' as separator, got {sep!r}")
        return posix_match
    raise ValueError(f"unknown matcher {name!r}, expected one of {', '.join(MATCHERS)}")

"""Pattern compiler: Options -> local matcher and remote pattern string."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from mountgrep.errors import InvalidPatternError
from mountgrep.options import Options

# Metacharacters escaped for -F. Kept to the set every mainstream regex
# dialect agrees on, so the remote engine reads the escaped string the same way.
_REGEX_META = re.compile(r"[.*+?^${}()|[\]\\]")

# Hex escapes carry letter digits that must not be folded.
_ESCAPE_WIDTH = {"x": 2, "u": 4, "U": 8}


@dataclass(frozen=True)
class Span:
    """One match occurrence within a line."""

    start: int
    end: int
    text: str


class Matcher(Protocol):
    """Line matcher used by the local scanner and for re-validation."""

    def test(self, line: str) -> bool: ...
    def find_all(self, line: str) -> list[Span]: ...


class RegexMatcher:
    """Matcher backed by a compiled :mod:`re` pattern."""

    def __init__(self, regex: re.Pattern[str]) -> None:
        self._regex = regex

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def test(self, line: str) -> bool:
        return self._regex.search(line) is not None

    def find_all(self, line: str) -> list[Span]:
        """Return every non-empty, non-overlapping match in ``line``.

        A zero-length match moves the cursor one character forward instead
        of being reported.
        """
        spans: list[Span] = []
        pos = 0
        while pos <= len(line):
            m = self._regex.search(line, pos)
            if m is None:
                break
            start, end = m.span()
            if end == start:
                pos = start + 1
                continue
            spans.append(Span(start=start, end=end, text=m.group(0)))
            pos = end
        return spans


@dataclass(frozen=True)
class CompiledPattern:
    """The two artifacts produced for one invocation.

    ``remote_pattern`` never relies on flags: under ``-i`` it is rewritten
    with :func:`fold_case`.
    """

    matcher: RegexMatcher
    remote_pattern: str


def escape_literal(text: str) -> str:
    """Escape regex metacharacters so ``text`` matches literally."""
    return _REGEX_META.sub(r"\\\g<0>", text)


def _other_case(ch: str) -> str:
    other = ch.swapcase()
    return other if other != ch and len(other) == 1 else ""


def _escape_end(source: str, i: int) -> int:
    """Index just past the escape sequence starting at ``source[i]``."""
    if i + 1 >= len(source):
        return len(source)
    kind = source[i + 1]
    if kind == "N" and source.startswith("{", i + 2):
        close = source.find("}", i + 2)
        return len(source) if close < 0 else close + 1
    return min(len(source), i + 2 + _ESCAPE_WIDTH.get(kind, 0))


def _group_prefix_end(source: str, i: int) -> int:
    """Index just past the ``(?...`` prefix starting at ``source[i]``.

    Group names, backreference names and inline flags are copied verbatim.
    """
    j = i + 2
    if j >= len(source):
        return len(source)
    kind = source[j]
    if kind in ":=!>":
        return j + 1
    if kind == "<" and source[j + 1:j + 2] in ("=", "!"):
        return j + 2
    if kind in "<P#(":
        stop = ">" if kind in "<P" and not source.startswith("P=", j) else ")"
        close = source.find(stop, j)
        return len(source) if close < 0 else close + 1
    for k in range(j, len(source)):
        if source[k] in ":)":
            return k + 1
    return len(source)


def _fold_class(source: str, i: int) -> tuple[str, int]:
    """Fold the bracket class starting at ``source[i]``.

    The other case of every cased member and of every same-case letter
    range is added at the front of the class.
    """
    n = len(source)
    j = i + 1
    if j < n and source[j] == "^":
        j += 1
    # A leading ] or - is literal and must stay first.
    if j < n and source[j] == "]":
        j += 1
    if j < n and source[j] == "-":
        j += 1
    head = source[i:j]
    extras: list[str] = []
    k = j
    while k < n and source[k] != "]":
        if source[k] == "\\":
            k = _escape_end(source, k)
            continue
        lo = source[k]
        if k + 2 < n and source[k + 1] == "-" and source[k + 2] not in "]\\":
            hi = source[k + 2]
            if lo.isalpha() and hi.isalpha() and lo.islower() == hi.islower():
                lo_other, hi_other = _other_case(lo), _other_case(hi)
                if lo_other and hi_other:
                    extras.append(f"{lo_other}-{hi_other}")
            k += 3
            continue
        extras.append(_other_case(lo))
        k += 1
    if k >= n:
        return source[i:], n
    return head + "".join(extras) + source[j:k + 1], k + 1


def fold_case(source: str) -> str:
    """Rewrite a regex so it matches case-insensitively without flags.

    Each cased literal becomes a two-letter class (``h`` -> ``[hH]``) and
    bracket classes gain the other case of their letters. Escapes and group
    syntax pass through unchanged. ``source`` must already compile.
    """
    out: list[str] = []
    i, n = 0, len(source)
    while i < n:
        ch = source[i]
        if ch == "\\":
            end = _escape_end(source, i)
            out.append(source[i:end])
            i = end
        elif ch == "[":
            folded, i = _fold_class(source, i)
            out.append(folded)
        elif source.startswith("(?", i):
            end = _group_prefix_end(source, i)
            out.append(source[i:end])
            i = end
        else:
            other = _other_case(ch)
            out.append(f"[{ch}{other}]" if other else ch)
            i += 1
    return "".join(out)


def pattern_source(options: Options) -> str:
    """Build the OR-joined pattern string with -F and -w applied.

    The remote substrate receives this string, case-folded under ``-i``.
    """
    parts = [escape_literal(p) if options.fixed_strings else p for p in options.patterns]
    if len(parts) == 1:
        source = parts[0]
    else:
        source = "|".join(f"(?:{p})" for p in parts)
    if options.word_regexp:
        source = rf"\b(?:{source})\b"
    return source


def compile_pattern(options: Options) -> CompiledPattern:
    """Compile the local matcher and the remote pattern string.

    Raises:
        InvalidPatternError: naming the first pattern that fails to compile.
    """
    flags = re.IGNORECASE if options.ignore_case else 0
    for p in options.patterns:
        try:
            re.compile(escape_literal(p) if options.fixed_strings else p, flags)
        except re.error as exc:
            raise InvalidPatternError(p, str(exc), cause=exc) from exc

    source = pattern_source(options)
    try:
        regex = re.compile(source, flags)
    except re.error as exc:
        raise InvalidPatternError(source, str(exc), cause=exc) from exc
    remote = fold_case(source) if options.ignore_case else source
    return CompiledPattern(matcher=RegexMatcher(regex), remote_pattern=remote)

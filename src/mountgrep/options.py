"""Flag parser: argv -> Options."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from mountgrep.errors import UsageError

USAGE = "usage: grep [OPTIONS] PATTERN [FILE...]"


@dataclass(frozen=True)
class Options:
    """Parsed grep invocation. ``max_count`` of 0 means unlimited."""

    ignore_case: bool = False
    line_number: bool = False
    invert_match: bool = False
    count: bool = False
    files_with_matches: bool = False
    files_without_match: bool = False
    recursive: bool = False
    extended_regexp: bool = False
    fixed_strings: bool = False
    word_regexp: bool = False
    only_matching: bool = False
    no_filename: bool = False
    quiet: bool = False
    max_count: int = 0
    patterns: tuple[str, ...] = field(default_factory=tuple)
    files: tuple[str, ...] = field(default_factory=tuple)


# Boolean flags: short letter -> Options field.
SHORT_FLAGS: dict[str, str] = {
    "i": "ignore_case",
    "n": "line_number",
    "v": "invert_match",
    "c": "count",
    "l": "files_with_matches",
    "L": "files_without_match",
    "r": "recursive",
    "R": "recursive",
    "E": "extended_regexp",
    "F": "fixed_strings",
    "w": "word_regexp",
    "o": "only_matching",
    "h": "no_filename",
    "q": "quiet",
}

LONG_FLAGS: dict[str, str] = {
    "ignore-case": "ignore_case",
    "line-number": "line_number",
    "invert-match": "invert_match",
    "count": "count",
    "files-with-matches": "files_with_matches",
    "files-without-match": "files_without_match",
    "recursive": "recursive",
    "extended-regexp": "extended_regexp",
    "fixed-strings": "fixed_strings",
    "word-regexp": "word_regexp",
    "only-matching": "only_matching",
    "no-filename": "no_filename",
    "quiet": "quiet",
    "silent": "quiet",
}

# Flags that take a value: short letter -> long name.
VALUE_FLAGS: dict[str, str] = {
    "e": "regexp",
    "m": "max-count",
}


def _parse_max_count(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise UsageError(f"invalid max count: {value}") from None
    if n < 0:
        raise UsageError(f"invalid max count: {value}")
    return n


def _is_known_cluster(cluster: str) -> bool:
    """True if every letter up to the first value-taking flag is a known flag."""
    for ch in cluster:
        if ch in VALUE_FLAGS:
            return True
        if ch not in SHORT_FLAGS:
            return False
    return True


class _ArgParser:
    """Single-use parser state for one argv."""

    def __init__(self, args: list[str]) -> None:
        self.args = args
        self.pos = 0
        self.flags: dict[str, bool] = {}
        self.max_count = 0
        self.patterns: list[str] = []
        self.files: list[str] = []
        self.pattern_claimed = False

    def next_value(self, flag: str) -> str:
        if self.pos >= len(self.args):
            raise UsageError(f"option requires an argument -- {flag}")
        value = self.args[self.pos]
        self.pos += 1
        return value

    def set_value(self, name: str, value: str) -> None:
        if name == "regexp":
            self.patterns.append(value)
            self.pattern_claimed = True
        else:
            self.max_count = _parse_max_count(value)

    def positional(self, token: str) -> None:
        if self.pattern_claimed:
            self.files.append(token)
        else:
            self.patterns.append(token)
            self.pattern_claimed = True

    def long_option(self, token: str) -> None:
        name, eq, value = token[2:].partition("=")
        if name in LONG_FLAGS and not eq:
            self.flags[LONG_FLAGS[name]] = True
        elif name in VALUE_FLAGS.values():
            if eq:
                if not value:
                    raise UsageError(f"option requires an argument -- {name}")
                self.set_value(name, value)
            else:
                self.set_value(name, self.next_value(name))
        elif self.pattern_claimed:
            self.files.append(token)
        else:
            raise UsageError(f"unknown option: {token}")

    def short_cluster(self, token: str) -> None:
        cluster = token[1:]
        if not _is_known_cluster(cluster):
            if self.pattern_claimed:
                self.files.append(token)
                return
            bad = next(ch for ch in cluster if ch not in SHORT_FLAGS)
            raise UsageError(f"unknown option: -{bad}")
        for i, ch in enumerate(cluster):
            if ch in VALUE_FLAGS:
                rest = cluster[i + 1:]
                self.set_value(VALUE_FLAGS[ch], rest if rest else self.next_value(ch))
                return
            self.flags[SHORT_FLAGS[ch]] = True

    def parse(self) -> Options:
        while self.pos < len(self.args):
            token = self.args[self.pos]
            self.pos += 1
            if token == "--":
                for rest in self.args[self.pos:]:
                    self.positional(rest)
                break
            if token.startswith("--"):
                self.long_option(token)
            elif token.startswith("-") and len(token) > 1:
                self.short_cluster(token)
            else:
                self.positional(token)

        if not self.patterns:
            raise UsageError(USAGE)
        return replace(
            Options(**self.flags),
            max_count=self.max_count,
            patterns=tuple(self.patterns),
            files=tuple(self.files),
        )


def parse_args(args: list[str]) -> Options:
    """Parse grep arguments.

    Short flags combine (``-rn``), values go inline or in the next token
    (``-m3``, ``-m 3``, ``--max-count=3``) and ``-e`` repeats. Everything
    after ``--`` is positional. Once the pattern is known, an unrecognised
    dash-led token is taken as a file name.

    Raises:
        UsageError: unknown flag before the pattern, missing flag value,
            or no pattern at all.
    """
    return _ArgParser(list(args)).parse()

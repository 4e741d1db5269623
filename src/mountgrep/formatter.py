"""Aggregator/formatter: merged records -> stdout and exit code."""

from __future__ import annotations

from enum import Enum

from mountgrep.model import CommandResult, MatchRecord
from mountgrep.options import Options

STDIN_LABEL = "(standard input)"


class OutputMode(str, Enum):
    QUIET = "quiet"
    FILES_WITH_MATCHES = "files_with_matches"
    FILES_WITHOUT_MATCH = "files_without_match"
    COUNT = "count"
    NORMAL = "normal"


def select_mode(options: Options) -> OutputMode:
    """Pick exactly one output mode, highest priority first."""
    if options.quiet:
        return OutputMode.QUIET
    if options.files_with_matches:
        return OutputMode.FILES_WITH_MATCHES
    if options.files_without_match:
        return OutputMode.FILES_WITHOUT_MATCH
    if options.count:
        return OutputMode.COUNT
    return OutputMode.NORMAL


def is_multi_file(options: Options, records: list[MatchRecord]) -> bool:
    """Whether output lines get a filename prefix (before ``-h`` applies).

    Stdin-only runs never do.
    """
    if not options.files:
        return False
    if len(options.files) > 1 or options.recursive:
        return True
    return len({r.file for r in records}) > 1


def apply_max_count(records: list[MatchRecord], max_count: int) -> list[MatchRecord]:
    """Keep the first ``max_count`` records of each file, in encounter order."""
    if max_count <= 0:
        return list(records)
    seen: dict[str, int] = {}
    kept: list[MatchRecord] = []
    for record in records:
        n = seen.get(record.file, 0)
        if n < max_count:
            kept.append(record)
            seen[record.file] = n + 1
    return kept


def _display(file: str) -> str:
    return file or STDIN_LABEL


def _distinct_files(records: list[MatchRecord]) -> list[str]:
    return list(dict.fromkeys(r.file for r in records))


def _render(lines: list[str]) -> str:
    return "\n".join(lines) + "\n" if lines else ""


def format_output(
    records: list[MatchRecord],
    options: Options,
    scanned: list[str] | None = None,
) -> CommandResult:
    """Render records per the selected output mode.

    ``scanned`` is the inventory of locally scanned files, used by ``-L``.
    Exit code is 0 when something was selected, 1 otherwise.
    """
    multi_file = is_multi_file(options, records)
    records = apply_max_count(records, options.max_count)
    found = 0 if records else 1
    mode = select_mode(options)

    if mode is OutputMode.QUIET:
        return CommandResult(exit_code=found)

    if mode is OutputMode.FILES_WITH_MATCHES:
        lines = [_display(f) for f in _distinct_files(records)]
        return CommandResult(stdout=_render(lines), exit_code=found)

    if mode is OutputMode.FILES_WITHOUT_MATCH:
        matched = set(_distinct_files(records))
        listed = [f for f in dict.fromkeys(scanned or []) if f not in matched]
        return CommandResult(stdout=_render(listed), exit_code=0 if listed else 1)

    show_name = multi_file and not options.no_filename

    if mode is OutputMode.COUNT:
        if not records:
            return CommandResult(stdout="0\n", exit_code=1)
        counts: dict[str, int] = {}
        for record in records:
            counts[record.file] = counts.get(record.file, 0) + 1
        lines = [
            f"{_display(f)}:{n}" if show_name else str(n)
            for f, n in counts.items()
        ]
        return CommandResult(stdout=_render(lines), exit_code=0)

    lines = []
    for record in records:
        prefix = ""
        if show_name:
            prefix += f"{_display(record.file)}:"
        if options.line_number:
            prefix += f"{record.line_number}:"
        body = record.matched if options.only_matching and record.matched is not None else record.line
        lines.append(prefix + body)
    return CommandResult(stdout=_render(lines), exit_code=found)

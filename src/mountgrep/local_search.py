"""Local matcher: scans files, directory trees and stdin line by line."""

from __future__ import annotations

import logging
import posixpath

from mountgrep.environment.types import Filesystem
from mountgrep.errors import GrepError, LocalIOError
from mountgrep.model import MatchRecord, SearchOutcome
from mountgrep.options import Options
from mountgrep.pattern import Matcher

logger = logging.getLogger("mountgrep")


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``, dropping the empty element a trailing newline leaves."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def search_lines(text: str, label: str, matcher: Matcher, options: Options) -> list[MatchRecord]:
    """Evaluate ``matcher`` against every line of ``text``.

    With ``-o`` each non-overlapping occurrence on a selected line becomes
    its own record; otherwise each selected line is one record.
    """
    records: list[MatchRecord] = []
    for number, line in enumerate(split_lines(text), 1):
        selected = matcher.test(line) != options.invert_match
        if not selected:
            continue
        if options.only_matching:
            for span in matcher.find_all(line):
                records.append(MatchRecord(label, number, line, matched=span.text))
        else:
            records.append(MatchRecord(label, number, line))
    return records


def _describe(exc: Exception) -> str:
    if isinstance(exc, FileNotFoundError):
        return "No such file or directory"
    if isinstance(exc, IsADirectoryError):
        return "Is a directory"
    if isinstance(exc, NotADirectoryError):
        return "Not a directory"
    if isinstance(exc, PermissionError):
        return "Permission denied"
    return str(exc)


class LocalSearcher:
    """Runs the matcher over targets reached through the host filesystem.

    Directory children are visited in name order, depth-first. Files that
    cannot be read below a target are skipped and noted in
    ``SearchOutcome.errors``; a target that cannot be searched at all raises
    :class:`LocalIOError`.
    """

    def __init__(self, fs: Filesystem, matcher: Matcher, options: Options) -> None:
        self._fs = fs
        self._matcher = matcher
        self._options = options

    def search_stdin(self, text: str) -> SearchOutcome:
        return SearchOutcome(
            records=search_lines(text, "", self._matcher, self._options),
            scanned=[""],
        )

    def search_path(self, path: str) -> SearchOutcome:
        try:
            st = self._fs.stat(path)
        except (OSError, GrepError) as exc:
            raise LocalIOError(path, _describe(exc), cause=exc) from exc

        outcome = SearchOutcome()
        if st.is_dir:
            if not self._options.recursive:
                raise LocalIOError(path, "Is a directory")
            self._walk(path, outcome)
            return outcome

        try:
            text = self._fs.read_file(path)
        except (OSError, GrepError) as exc:
            raise LocalIOError(path, _describe(exc), cause=exc) from exc
        self._record(path, text, outcome)
        return outcome

    # --- Private helpers ---

    def _walk(self, directory: str, outcome: SearchOutcome) -> None:
        try:
            entries = self._fs.list_directory(directory)
        except (OSError, GrepError) as exc:
            logger.debug("skipping unreadable directory %s: %s", directory, exc)
            outcome.errors[directory] = _describe(exc)
            return
        for entry in sorted(entries, key=lambda e: e.name):
            child = posixpath.join(directory, entry.name)
            if entry.is_dir:
                self._walk(child, outcome)
                continue
            try:
                text = self._fs.read_file(child)
            except (OSError, GrepError) as exc:
                logger.debug("skipping unreadable file %s: %s", child, exc)
                outcome.errors[child] = _describe(exc)
                continue
            self._record(child, text, outcome)

    def _record(self, path: str, text: str, outcome: SearchOutcome) -> None:
        outcome.scanned.append(path)
        outcome.records.extend(search_lines(text, path, self._matcher, self._options))

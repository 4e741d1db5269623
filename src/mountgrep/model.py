"""Records passed between the search stages and the formatter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from mountgrep.environment.types import Filesystem


@dataclass(frozen=True)
class MatchRecord:
    """One reportable hit. ``file`` is empty for stdin."""

    file: str
    line_number: int
    line: str
    matched: str | None = None


@dataclass
class SearchOutcome:
    """Everything one or more targets produced.

    ``scanned`` lists every file the local scanner actually read, in walk
    order, with stdin as ``""``; remote-delegated targets add nothing to it.
    ``errors`` maps a path that could not be searched to the reason.
    """

    records: list[MatchRecord] = field(default_factory=list)
    scanned: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    def extend(self, other: SearchOutcome) -> None:
        self.records.extend(other.records)
        self.scanned.extend(other.scanned)
        self.errors.update(other.errors)


@dataclass(frozen=True)
class CommandContext:
    """What the host shell hands a command besides its arguments.

    ``stdin_reader``, when set, supplies standard input on demand and takes
    precedence over ``stdin``; commands only call it when they need input.
    """

    fs: Filesystem
    cwd: str = "/"
    stdin: str = ""
    stdin_reader: Callable[[], str] | None = None

    def read_stdin(self) -> str:
        if self.stdin_reader is not None:
            return self.stdin_reader()
        return self.stdin


@dataclass(frozen=True)
class CommandResult:
    """Result of running a command."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0

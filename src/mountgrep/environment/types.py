"""Substrate types and protocols."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DirEntry:
    """A single entry from a directory listing."""

    name: str
    is_dir: bool
    size: int | None = None


@dataclass(frozen=True)
class FileStat:
    """What a stat call reports about a path."""

    is_file: bool
    is_dir: bool
    size: int = 0


@dataclass(frozen=True)
class GrepMatch:
    """One whole-line hit returned by the remote substrate."""

    path: str
    line_number: int
    line: str


class Filesystem(Protocol):
    """Host filesystem capability handed to a command.

    Paths are absolute. ``resolve_path`` turns a user-supplied argument into
    one relative to the shell's working directory.
    """

    def read_file(self, path: str) -> str: ...
    def list_directory(self, path: str) -> list[DirEntry]: ...
    def stat(self, path: str) -> FileStat: ...
    def resolve_path(self, base: str, path: str) -> str: ...


class RemoteBackend(Protocol):
    """The remote storage/search substrate.

    Paths are in the substrate's own namespace, rooted at ``/``. ``grep``
    searches the whole subtree under ``path`` and returns whole-line hits
    only.
    """

    def read(self, path: str) -> str: ...
    def list(self, path: str) -> list[DirEntry]: ...
    def grep(self, pattern: str, path: str = "/") -> list[GrepMatch]: ...

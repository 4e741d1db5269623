"""In-memory substrates for tests and demos."""

from __future__ import annotations

import re

from mountgrep.environment.mount import normalize_path
from mountgrep.environment.types import DirEntry, FileStat, GrepMatch
from mountgrep.errors import BackendNotFoundError


def _children(files: dict[str, str], path: str) -> list[DirEntry]:
    norm = normalize_path(path)
    prefix = "/" if norm == "/" else f"{norm}/"
    seen: dict[str, DirEntry] = {}
    for key, content in files.items():
        if not key.startswith(prefix):
            continue
        rest = key[len(prefix):]
        name, sep, _ = rest.partition("/")
        if not name or name in seen:
            continue
        if sep:
            seen[name] = DirEntry(name=name, is_dir=True)
        else:
            seen[name] = DirEntry(name=name, is_dir=False, size=len(content))
    return sorted(seen.values(), key=lambda e: e.name)


def _is_dir(files: dict[str, str], path: str) -> bool:
    norm = normalize_path(path)
    if norm == "/":
        return True
    prefix = f"{norm}/"
    return any(key.startswith(prefix) for key in files)


class InMemoryFilesystem:
    """Host filesystem backed by a dict of absolute path -> content.

    Directories exist implicitly wherever a file lives beneath them.
    """

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = {
            normalize_path(k): v for k, v in (files or {}).items()
        }
        self._reads: list[str] = []

    def read_file(self, path: str) -> str:
        norm = normalize_path(path)
        self._reads.append(norm)
        if norm in self._files:
            return self._files[norm]
        if _is_dir(self._files, norm):
            raise IsADirectoryError(f"Is a directory: {norm}")
        raise FileNotFoundError(f"No such file or directory: {norm}")

    def list_directory(self, path: str) -> list[DirEntry]:
        norm = normalize_path(path)
        if not _is_dir(self._files, norm):
            raise NotADirectoryError(f"Not a directory: {norm}")
        return _children(self._files, norm)

    def stat(self, path: str) -> FileStat:
        norm = normalize_path(path)
        if norm in self._files:
            return FileStat(is_file=True, is_dir=False, size=len(self._files[norm]))
        if _is_dir(self._files, norm):
            return FileStat(is_file=False, is_dir=True)
        raise FileNotFoundError(f"No such file or directory: {norm}")

    def resolve_path(self, base: str, path: str) -> str:
        return normalize_path(path if path.startswith("/") else f"{base}/{path}")

    def write_file(self, path: str, content: str) -> None:
        self._files[normalize_path(path)] = content

    # --- Test helpers ---

    @property
    def reads(self) -> list[str]:
        """All paths passed to read_file, in order."""
        return list(self._reads)


class InMemoryBackend:
    """Remote substrate double that keeps its files in a dict.

    ``grep`` compiles the pattern with :mod:`re` and reports whole-line hits
    across the subtree, like the real service. Every grep call is recorded.
    Set ``grep_error`` to make grep raise instead.
    """

    def __init__(
        self,
        files: dict[str, str] | None = None,
        grep_error: Exception | None = None,
    ) -> None:
        self._files: dict[str, str] = {
            normalize_path(k): v for k, v in (files or {}).items()
        }
        self.grep_error = grep_error
        self._grep_calls: list[tuple[str, str]] = []

    def read(self, path: str) -> str:
        norm = normalize_path(path)
        if norm not in self._files:
            raise BackendNotFoundError(f"not found: {norm}", status_code=404)
        return self._files[norm]

    def list(self, path: str) -> list[DirEntry]:
        norm = normalize_path(path)
        if not _is_dir(self._files, norm):
            raise BackendNotFoundError(f"not found: {norm}", status_code=404)
        return _children(self._files, norm)

    def grep(self, pattern: str, path: str = "/") -> list[GrepMatch]:
        self._grep_calls.append((pattern, path))
        if self.grep_error is not None:
            raise self.grep_error
        regex = re.compile(pattern)
        prefix = normalize_path(path)
        matches: list[GrepMatch] = []
        for file_path, content in self._files.items():
            if prefix != "/" and file_path != prefix and not file_path.startswith(f"{prefix}/"):
                continue
            lines = content.split("\n")
            if lines and lines[-1] == "":
                lines.pop()
            for i, line in enumerate(lines, 1):
                if regex.search(line):
                    matches.append(GrepMatch(path=file_path, line_number=i, line=line))
        return matches

    def write(self, path: str, content: str) -> None:
        self._files[normalize_path(path)] = content

    # --- Test helpers ---

    @property
    def grep_calls(self) -> list[tuple[str, str]]:
        """All (pattern, path) pairs passed to grep, in order."""
        return list(self._grep_calls)

"""Local filesystem: serves the host capability from the machine's disk."""

from __future__ import annotations

import posixpath
from pathlib import Path

from mountgrep.environment.types import DirEntry, FileStat


class LocalFilesystem:
    """Reads files on the local machine.

    Relative paths resolve against ``root``. File content is decoded as UTF-8
    with replacement so binary files never raise during a scan. Symlinked
    directories are listed as non-directories so recursive walks never loop.
    """

    def __init__(self, root: str | None = None) -> None:
        self._root = root

    def read_file(self, path: str) -> str:
        resolved = self._resolve(path)
        if resolved.is_dir():
            raise IsADirectoryError(f"Is a directory: {path}")
        return resolved.read_text(encoding="utf-8", errors="replace")

    def list_directory(self, path: str) -> list[DirEntry]:
        resolved = self._resolve(path)
        if not resolved.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")
        if not resolved.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")
        entries = []
        for child in sorted(resolved.iterdir()):
            entries.append(DirEntry(
                name=child.name,
                is_dir=child.is_dir() and not child.is_symlink(),
                size=child.stat().st_size if child.is_file() else None,
            ))
        return entries

    def stat(self, path: str) -> FileStat:
        resolved = self._resolve(path)
        st = resolved.stat()
        return FileStat(
            is_file=resolved.is_file(),
            is_dir=resolved.is_dir(),
            size=st.st_size,
        )

    def resolve_path(self, base: str, path: str) -> str:
        return posixpath.normpath(posixpath.join(base, path))

    # --- Private helpers ---

    def _resolve(self, path: str) -> Path:
        p = Path(path)
        if p.is_absolute() or self._root is None:
            return p
        return Path(self._root) / p

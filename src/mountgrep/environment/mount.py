"""Mount points: map between shell paths and the remote substrate's paths."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from mountgrep.environment.types import DirEntry, FileStat, Filesystem, RemoteBackend


def normalize_path(path: str) -> str:
    """Return ``path`` as an absolute path with ``.``/``..`` and trailing slashes removed."""
    resolved = posixpath.normpath(posixpath.join("/", path))
    # normpath keeps a leading "//" (POSIX allows it); we never want it.
    if resolved.startswith("//"):
        resolved = "/" + resolved.lstrip("/")
    return resolved


@dataclass(frozen=True)
class MountPoint:
    """The subtree of the shell namespace owned by the remote substrate.

    ``/data/src/main.rs`` under mount ``/data`` is ``/src/main.rs`` to the
    substrate, and the mount itself is the substrate root ``/``.
    """

    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))

    def contains(self, path: str) -> bool:
        norm = normalize_path(path)
        if self.path == "/":
            return True
        return norm == self.path or norm.startswith(f"{self.path}/")

    def to_backend(self, path: str) -> str:
        norm = normalize_path(path)
        if self.path == "/":
            return norm
        return norm[len(self.path):] or "/"

    def from_backend(self, path: str) -> str:
        norm = normalize_path(path)
        if self.path == "/":
            return norm
        if norm == "/":
            return self.path
        return f"{self.path}{norm}"


class MountedFilesystem:
    """Host filesystem with one subtree served by the remote substrate.

    Calls for paths under the mount go to the backend's ``read``/``list``;
    everything else goes to ``base``. This is how local scanning reaches
    remote files when delegation is not possible.
    """

    def __init__(self, base: Filesystem, mount: MountPoint, backend: RemoteBackend) -> None:
        self._base = base
        self._mount = mount
        self._backend = backend

    def read_file(self, path: str) -> str:
        if self._mount.contains(path):
            return self._backend.read(self._mount.to_backend(path))
        return self._base.read_file(path)

    def list_directory(self, path: str) -> list[DirEntry]:
        if self._mount.contains(path):
            return self._backend.list(self._mount.to_backend(path))
        return self._base.list_directory(path)

    def stat(self, path: str) -> FileStat:
        if not self._mount.contains(path):
            return self._base.stat(path)
        remote = self._mount.to_backend(path)
        if remote == "/":
            return FileStat(is_file=False, is_dir=True)
        parent, name = posixpath.split(remote)
        for entry in self._backend.list(parent):
            if entry.name == name:
                return FileStat(
                    is_file=not entry.is_dir,
                    is_dir=entry.is_dir,
                    size=entry.size or 0,
                )
        raise FileNotFoundError(f"No such file or directory: {path}")

    def resolve_path(self, base: str, path: str) -> str:
        return self._base.resolve_path(base, path)

"""Substrate abstraction and implementations."""

from mountgrep.environment.http import HttpBackend
from mountgrep.environment.local import LocalFilesystem
from mountgrep.environment.memory import InMemoryBackend, InMemoryFilesystem
from mountgrep.environment.mount import MountedFilesystem, MountPoint, normalize_path
from mountgrep.environment.types import DirEntry, FileStat, Filesystem, GrepMatch, RemoteBackend

__all__ = [
    "DirEntry",
    "FileStat",
    "Filesystem",
    "GrepMatch",
    "HttpBackend",
    "InMemoryBackend",
    "InMemoryFilesystem",
    "LocalFilesystem",
    "MountPoint",
    "MountedFilesystem",
    "RemoteBackend",
    "normalize_path",
]

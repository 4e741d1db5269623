from __future__ import annotations

import pytest

from mountgrep.command import GrepCommand
from mountgrep.environment.memory import InMemoryBackend, InMemoryFilesystem
from mountgrep.environment.mount import MountedFilesystem, MountPoint
from mountgrep.model import CommandContext

MOUNT = "/data"


@pytest.fixture
def backend():
    """Remote substrate holding a small code tree."""
    return InMemoryBackend({
        "/code/main.rs": 'fn main() {\n    println!("hello");\n}\n',
        "/code/lib.rs": "pub mod utils;\npub mod auth;\n",
        "/code/db.rs": "fn connect() {\n    // database connection\n}\n",
    })


@pytest.fixture
def local_fs():
    return InMemoryFilesystem({
        "/local/a.txt": "hello world\n",
        "/local/b.txt": "goodbye world\n",
        "/local/c.txt": "hello again\n",
    })


@pytest.fixture
def mounted_fs(local_fs, backend):
    """Host filesystem with the backend mounted at /data."""
    return MountedFilesystem(local_fs, MountPoint(MOUNT), backend)


@pytest.fixture
def grep(backend):
    return GrepCommand(backend, MOUNT)


def make_context(fs=None, cwd: str = MOUNT, stdin: str = "") -> CommandContext:
    return CommandContext(fs=fs if fs is not None else InMemoryFilesystem(), cwd=cwd, stdin=stdin)


class ScriptedBackend:
    """Backend double returning fixed hits and recording grep calls."""

    def __init__(self, matches=None, error: Exception | None = None) -> None:
        self.matches = list(matches or [])
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def read(self, path):
        raise NotImplementedError

    def list(self, path):
        raise NotImplementedError

    def grep(self, pattern, path="/"):
        self.calls.append((pattern, path))
        if self.error is not None:
            raise self.error
        return self.matches

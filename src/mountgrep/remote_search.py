"""Remote delegate: runs the substrate's grep for mount paths."""

from __future__ import annotations

import logging

from mountgrep.environment.mount import MountPoint
from mountgrep.environment.types import GrepMatch, RemoteBackend
from mountgrep.errors import BackendError
from mountgrep.model import MatchRecord, SearchOutcome
from mountgrep.options import Options
from mountgrep.pattern import CompiledPattern

logger = logging.getLogger("mountgrep")


def call_grep(backend: RemoteBackend, pattern: str, path: str) -> list[GrepMatch]:
    """Call ``backend.grep`` once, converting any failure to :class:`BackendError`."""
    try:
        return backend.grep(pattern, path)
    except BackendError:
        raise
    except Exception as exc:
        raise BackendError(str(exc), cause=exc) from exc


class RemoteDelegate:
    """Searches remote-eligible targets with the substrate's own grep.

    Hits come back as whole lines keyed by substrate paths; they are mapped
    back under the mount point. Under ``-i`` every hit is checked again with
    the local matcher and dropped if it does not match.
    """

    def __init__(
        self,
        backend: RemoteBackend,
        mount: MountPoint,
        pattern: CompiledPattern,
        options: Options,
    ) -> None:
        self._backend = backend
        self._mount = mount
        self._pattern = pattern
        self._options = options

    def search(self, path: str) -> SearchOutcome:
        remote_path = self._mount.to_backend(path)
        logger.debug("remote grep: pattern=%r path=%s", self._pattern.remote_pattern, remote_path)
        hits = call_grep(self._backend, self._pattern.remote_pattern, remote_path)

        records: list[MatchRecord] = []
        for hit in hits:
            if self._options.ignore_case and not self._pattern.matcher.test(hit.line):
                logger.debug("dropping remote hit %s:%d", hit.path, hit.line_number)
                continue
            records.append(MatchRecord(
                file=self._mount.from_backend(hit.path),
                line_number=hit.line_number,
                line=hit.line,
            ))
        return SearchOutcome(records=records)

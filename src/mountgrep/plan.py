"""Capability gate and per-invocation routing of targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from mountgrep.environment.mount import MountPoint
from mountgrep.options import Options


def can_delegate(options: Options) -> bool:
    """Whether remote grep can serve this invocation at all.

    The substrate returns whole-line hits only, so inverted selection and
    per-occurrence output must be computed locally. ``-L`` needs the list of
    files searched, which only a local walk produces.
    """
    return not (
        options.invert_match or options.only_matching or options.files_without_match
    )


@dataclass(frozen=True)
class RemoteOnly:
    remote_paths: tuple[str, ...]


@dataclass(frozen=True)
class LocalOnly:
    local_paths: tuple[str, ...]


@dataclass(frozen=True)
class Mixed:
    remote_paths: tuple[str, ...]
    local_paths: tuple[str, ...]
    # Declaration order across both groups, so results merge in argument order.
    order: tuple[str, ...] = field(default_factory=tuple)


ExecutionPlan = Union[RemoteOnly, LocalOnly, Mixed]


def build_plan(
    targets: list[str],
    mount: MountPoint | None,
    delegate: bool,
) -> ExecutionPlan:
    """Partition resolved targets into remote-eligible and local paths.

    With no mount, or when delegation is off, every target is local.
    """
    if mount is None or not delegate:
        return LocalOnly(local_paths=tuple(targets))
    remote = tuple(t for t in targets if mount.contains(t))
    local = tuple(t for t in targets if not mount.contains(t))
    if not local:
        return RemoteOnly(remote_paths=remote)
    if not remote:
        return LocalOnly(local_paths=local)
    return Mixed(remote_paths=remote, local_paths=local, order=tuple(targets))


def routes(plan: ExecutionPlan) -> list[tuple[str, bool]]:
    """Return ``(target, is_remote)`` pairs in declaration order."""
    if isinstance(plan, RemoteOnly):
        return [(p, True) for p in plan.remote_paths]
    if isinstance(plan, LocalOnly):
        return [(p, False) for p in plan.local_paths]
    remote = set(plan.remote_paths)
    return [(p, p in remote) for p in plan.order]

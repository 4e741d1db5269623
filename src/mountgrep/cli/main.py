"""mountgrep CLI entry point: Click group with subcommands."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import replace

import click

from mountgrep import __version__
from mountgrep.command import BackendGrepCommand, GrepCommand
from mountgrep.config import GrepConfig
from mountgrep.environment.http import HttpBackend
from mountgrep.environment.local import LocalFilesystem
from mountgrep.environment.mount import MountedFilesystem, MountPoint
from mountgrep.environment.types import Filesystem, RemoteBackend
from mountgrep.model import CommandContext, CommandResult

# Flags after the subcommand belong to grep, not to click.
PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


class PassthroughCommand(click.Command):
    """Command whose ``args`` parameter receives argv exactly as typed.

    Click consumes a leading ``--``; grep needs it to end its own options.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        raw = tuple(args)
        rest = super().parse_args(ctx, args)
        ctx.params["args"] = raw
        return rest


def build_backend(config: GrepConfig) -> RemoteBackend | None:
    """Create the remote substrate client, or None when none is configured."""
    if not config.remote_enabled:
        return None
    return HttpBackend(
        config.backend_url,
        connect_timeout=config.connect_timeout,
        request_timeout=config.request_timeout,
    )


def _filesystem(config: GrepConfig, backend: RemoteBackend | None) -> Filesystem:
    base = LocalFilesystem()
    if backend is None or not config.mount_point:
        return base
    return MountedFilesystem(base, MountPoint(config.mount_point), backend)


def _read_stdin() -> str:
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def _emit(result: CommandResult) -> None:
    if result.stdout:
        click.echo(result.stdout, nl=False)
    if result.stderr:
        click.echo(result.stderr, nl=False, err=True)
    sys.exit(result.exit_code)


def _close(backend: RemoteBackend | None) -> None:
    close = getattr(backend, "close", None)
    if close is not None:
        close()


@click.group()
@click.version_option(version=__version__, prog_name="mountgrep")
@click.option("--mount", default=None, help="Mount point served by the remote backend")
@click.option("--backend-url", default=None, help="Base URL of the remote search backend")
@click.option("--log-level", default=None, help="Logging level (default: WARNING)")
@click.pass_context
def cli(ctx: click.Context, mount: str | None, backend_url: str | None, log_level: str | None) -> None:
    """mountgrep - grep across local files and a remote search backend."""
    config = GrepConfig.from_env()
    if mount:
        config = replace(config, mount_point=mount)
    if backend_url:
        config = replace(config, backend_url=backend_url)
    if log_level:
        config = replace(config, log_level=log_level.upper())

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


@cli.command(cls=PassthroughCommand, context_settings=PASSTHROUGH)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def grep(config: GrepConfig, args: tuple[str, ...]) -> None:
    """Search files for PATTERN, delegating mounted paths to the backend.

    \b
    Usage: mountgrep grep [OPTIONS] PATTERN [FILE...]
    """
    backend = build_backend(config)
    try:
        context = CommandContext(
            fs=_filesystem(config, backend),
            cwd=os.getcwd(),
            stdin_reader=_read_stdin,
        )
        result = GrepCommand(backend, config.mount_point).execute(list(args), context)
    finally:
        _close(backend)
    _emit(result)


@cli.command("backend-grep", cls=PassthroughCommand, context_settings=PASSTHROUGH)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def backend_grep(config: GrepConfig, args: tuple[str, ...]) -> None:
    """Run the backend's grep directly: backend-grep [-n] PATTERN [PATH]."""
    backend = build_backend(config)
    if backend is None:
        click.echo("backend-grep: no backend configured (set --mount and --backend-url)", err=True)
        sys.exit(2)
    try:
        result = BackendGrepCommand(backend).execute(list(args))
    finally:
        _close(backend)
    _emit(result)


def main() -> None:
    cli()

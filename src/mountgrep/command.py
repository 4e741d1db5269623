"""Shell commands: the unified ``grep`` and the reduced ``backend-grep``."""

from __future__ import annotations

import logging

from mountgrep.environment.mount import MountPoint
from mountgrep.environment.types import RemoteBackend
from mountgrep.errors import BackendError, GrepError, LocalIOError, UsageError
from mountgrep.formatter import format_output
from mountgrep.local_search import LocalSearcher
from mountgrep.model import CommandContext, CommandResult, SearchOutcome
from mountgrep.options import USAGE, parse_args
from mountgrep.pattern import compile_pattern
from mountgrep.plan import build_plan, can_delegate, routes
from mountgrep.remote_search import RemoteDelegate, call_grep

logger = logging.getLogger("mountgrep")


class GrepCommand:
    """``grep [OPTIONS] PATTERN [FILE...]`` over local and mounted paths.

    Targets under ``mount_point`` go to the backend's grep when the flags
    allow it; everything else is scanned through the context's filesystem.
    Without a backend every target is scanned locally.
    """

    name = "grep"

    def __init__(
        self,
        backend: RemoteBackend | None = None,
        mount_point: str | None = None,
    ) -> None:
        self._backend = backend
        self._mount = MountPoint(mount_point) if mount_point else None

    def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        try:
            return self._run(list(args), context)
        except GrepError as exc:
            return CommandResult(stderr=f"{self.name}: {exc}\n", exit_code=2)

    def _run(self, args: list[str], context: CommandContext) -> CommandResult:
        options = parse_args(args)
        pattern = compile_pattern(options)
        searcher = LocalSearcher(context.fs, pattern.matcher, options)

        if not options.files:
            text = context.read_stdin()
            if not text:
                raise UsageError(USAGE)
            outcome = searcher.search_stdin(text)
            return format_output(outcome.records, options, outcome.scanned)

        targets = [context.fs.resolve_path(context.cwd, f) for f in options.files]
        delegate = None
        if self._backend is not None and self._mount is not None:
            delegate = RemoteDelegate(self._backend, self._mount, pattern, options)
        plan = build_plan(targets, self._mount, delegate is not None and can_delegate(options))
        logger.debug("execution plan: %s", plan)

        outcome = SearchOutcome()
        for target, remote in routes(plan):
            try:
                part = delegate.search(target) if remote and delegate else searcher.search_path(target)
            except (BackendError, LocalIOError) as exc:
                if len(targets) == 1:
                    raise
                logger.info("target %s failed: %s", target, exc)
                outcome.errors[target] = str(exc)
                continue
            outcome.extend(part)

        return format_output(outcome.records, options, outcome.scanned)


class BackendGrepCommand:
    """``backend-grep [-n] PATTERN [PATH]``: the substrate's grep, unfiltered.

    No local fallback. Paths are printed as the backend reports them.
    """

    name = "backend-grep"

    def __init__(self, backend: RemoteBackend) -> None:
        self._backend = backend

    def execute(self, args: list[str], context: CommandContext | None = None) -> CommandResult:
        show_line_numbers = False
        positional: list[str] = []

        for i, arg in enumerate(args):
            if arg in ("-n", "--line-number"):
                show_line_numbers = True
            elif arg in ("-r", "--recursive"):
                # The backend always searches the whole subtree.
                continue
            elif arg == "--":
                positional.extend(args[i + 1:])
                break
            elif arg.startswith("-") and not positional:
                return CommandResult(
                    stderr=f"{self.name}: unknown option: {arg}\n",
                    exit_code=2,
                )
            else:
                positional.append(arg)

        if not positional:
            return CommandResult(
                stderr=f"{self.name}: usage: {self.name} [-n] <pattern> [path]\n",
                exit_code=2,
            )

        pattern = positional[0]
        path = positional[1] if len(positional) > 1 else "/"
        try:
            matches = call_grep(self._backend, pattern, path)
        except BackendError as exc:
            return CommandResult(stderr=f"{self.name}: {exc}\n", exit_code=2)

        if not matches:
            return CommandResult(exit_code=1)
        if show_line_numbers:
            lines = [f"{m.path}:{m.line_number}:{m.line}" for m in matches]
        else:
            lines = [f"{m.path}:{m.line}" for m in matches]
        return CommandResult(stdout="\n".join(lines) + "\n")

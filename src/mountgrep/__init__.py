"""mountgrep: grep that delegates to a remote search substrate for mounted paths."""

__version__ = "0.1.0"

from mountgrep.command import BackendGrepCommand, GrepCommand  # noqa: E402
from mountgrep.config import GrepConfig  # noqa: E402
from mountgrep.errors import (  # noqa: E402
    BackendError,
    GrepError,
    InvalidPatternError,
    LocalIOError,
    UsageError,
)
from mountgrep.model import CommandContext, CommandResult, MatchRecord  # noqa: E402
from mountgrep.options import Options, parse_args  # noqa: E402

__all__ = [
    "BackendError",
    "BackendGrepCommand",
    "CommandContext",
    "CommandResult",
    "GrepCommand",
    "GrepConfig",
    "GrepError",
    "InvalidPatternError",
    "LocalIOError",
    "MatchRecord",
    "Options",
    "UsageError",
    "__version__",
    "parse_args",
]

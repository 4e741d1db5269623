"""End-to-end tests for the unified grep command."""

from mountgrep.command import GrepCommand
from mountgrep.environment.memory import InMemoryBackend, InMemoryFilesystem
from mountgrep.environment.mount import MountedFilesystem, MountPoint
from mountgrep.environment.types import GrepMatch
from mountgrep.errors import NetworkError
from mountgrep.model import CommandContext, CommandResult

from tests.test_mountgrep.conftest import MOUNT, ScriptedBackend, make_context


def _run(args, backend=None, **ctx) -> CommandResult:
    cmd = GrepCommand(backend if backend is not None else ScriptedBackend(), MOUNT)
    return cmd.execute(args, make_context(**ctx))


# --- Remote delegation ---


class TestServerSide:
    def test_formatted_output(self):
        backend = ScriptedBackend([
            GrepMatch("/src/main.rs", 10, "fn main() {"),
            GrepMatch("/src/lib.rs", 5, "pub mod lib;"),
        ])
        result = _run(["main", "/data/src"], backend)
        assert result.exit_code == 0
        assert "/data/src/main.rs:fn main() {" in result.stdout

    def test_line_numbers_multi_file(self):
        backend = ScriptedBackend([
            GrepMatch("/src/main.rs", 10, "fn main() {"),
            GrepMatch("/src/lib.rs", 3, "fn helper() {"),
        ])
        result = _run(["-rn", "fn", "/data/src"], backend)
        assert "/data/src/main.rs:10:fn main() {" in result.stdout
        assert "/data/src/lib.rs:3:fn helper() {" in result.stdout

    def test_line_numbers_single_file(self):
        backend = ScriptedBackend([GrepMatch("/f.txt", 42, "the line")])
        assert _run(["-n", "the", "/data/f.txt"], backend).stdout == "42:the line\n"

    def test_single_file_no_prefix(self):
        backend = ScriptedBackend([GrepMatch("/f.txt", 99, "the content")])
        result = _run(["the", "/data/f.txt"], backend)
        assert result.stdout == "the content\n"

    def test_recursive_flags_reach_backend(self):
        for flag in ("-r", "--recursive"):
            backend = ScriptedBackend()
            _run([flag, "pattern", "/data/src"], backend)
            assert backend.calls == [("pattern", "/src")]

    def test_mount_root_maps_to_substrate_root(self):
        backend = ScriptedBackend()
        _run(["pattern", "/data"], backend)
        assert backend.calls == [("pattern", "/")]

    def test_relative_path_resolved_against_cwd(self):
        backend = ScriptedBackend()
        _run(["pattern", "src"], backend, cwd="/data")
        assert backend.calls == [("pattern", "/src")]

    def test_separator_pattern(self):
        backend = ScriptedBackend([GrepMatch("/-n", 1, "-n stuff")])
        result = _run(["--", "-n", "/data/path"], backend)
        assert backend.calls == [("-n", "/path")]
        assert result.exit_code == 0

    def test_combined_n_and_r(self):
        backend = ScriptedBackend([GrepMatch("/a.txt", 5, "match")])
        result = _run(["-r", "-n", "pattern", "/data/dir"], backend)
        assert "/data/a.txt:5:match" in result.stdout

    def test_multiple_matches(self):
        backend = ScriptedBackend([
            GrepMatch("/a.txt", 1, "first"),
            GrepMatch("/a.txt", 2, "second"),
            GrepMatch("/b.txt", 10, "third"),
        ])
        result = _run(["pattern", "/data"], backend)
        assert len(result.stdout.strip().split("\n")) == 3
        assert result.stdout.endswith("\n")
        assert result.stderr == ""

    def test_no_matches(self):
        result = _run(["nope", "/data"])
        assert result == CommandResult(stdout="", stderr="", exit_code=1)

    def test_max_count_applies_to_remote_hits(self):
        backend = ScriptedBackend([
            GrepMatch("/a.txt", 1, "x1"),
            GrepMatch("/a.txt", 2, "x2"),
            GrepMatch("/b.txt", 1, "x3"),
        ])
        result = _run(["-m", "1", "x", "/data"], backend)
        assert result.stdout == "/data/a.txt:x1\n/data/b.txt:x3\n"

    def test_files_with_matches_from_remote(self):
        backend = ScriptedBackend([
            GrepMatch("/a.txt", 1, "x"),
            GrepMatch("/a.txt", 2, "x"),
            GrepMatch("/b.txt", 1, "x"),
        ])
        result = _run(["-l", "x", "/data"], backend)
        assert result.stdout == "/data/a.txt\n/data/b.txt\n"


class TestDelegationRouting:
    def test_recursive_over_mounted_tree(self, grep, mounted_fs, backend):
        result = grep.execute(["-r", "pub", "/data/code"], make_context(mounted_fs))
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert len(lines) == 2
        assert all(line.startswith("/data/code/lib.rs:") for line in lines)
        assert backend.grep_calls == [("pub", "/code")]

    def test_no_match_on_corpus(self, grep, mounted_fs):
        result = grep.execute(["-r", "nonexistent_pattern", "/data/code"], make_context(mounted_fs))
        assert result == CommandResult(stdout="", stderr="", exit_code=1)

    def test_invert_on_mounted_path_stays_local(self, mounted_fs, backend):
        grep = GrepCommand(backend, MOUNT)
        result = grep.execute(["-v", "fn", "/data/code/main.rs"], make_context(mounted_fs))
        assert backend.grep_calls == []
        assert result.exit_code == 0
        assert result.stdout == '    println!("hello");\n}\n'

    def test_invert_reads_remote_file_through_fs(self):
        backend = ScriptedBackend()
        fs = InMemoryFilesystem({"/data/file.txt": "hello\nworld\nhello again\n"})
        result = GrepCommand(backend, MOUNT).execute(["-v", "hello", "/data/file.txt"], make_context(fs))
        assert backend.calls == []
        assert result.exit_code == 0
        assert result.stdout == "world\n"

    def test_only_matching_on_mounted_tree_stays_local(self, grep, mounted_fs, backend):
        result = grep.execute(["-ro", "pub [a-z]+", "/data/code"], make_context(mounted_fs))
        assert backend.grep_calls == []
        assert result.stdout == "/data/code/lib.rs:pub mod\n/data/code/lib.rs:pub mod\n"

    def test_files_without_match_scans_mounted_files(self, grep, backend, mounted_fs):
        result = grep.execute(["-rL", "fn", "/data/code"], make_context(mounted_fs))
        assert result == CommandResult(stdout="/data/code/lib.rs\n", exit_code=0)
        assert backend.grep_calls == []

    def test_repeated_runs_are_identical(self, grep, mounted_fs):
        args = ["-rn", "fn", "/data/code"]
        first = grep.execute(args, make_context(mounted_fs))
        second = grep.execute(args, make_context(mounted_fs))
        assert first == second


# --- Stdin ---


class TestStdin:
    def test_basic(self):
        result = _run(["hello"], stdin="hello\nworld\nhello again\n")
        assert result == CommandResult(stdout="hello\nhello again\n", exit_code=0)

    def test_max_count(self):
        result = _run(["-m", "1", "hello"], stdin="hello one\nhello two\nhello three\n")
        assert result.stdout == "hello one\n"

    def test_ignore_case(self):
        result = _run(["-i", "HELLO"], stdin="Hello World\ngoodbye\nhELLO\n")
        assert result.stdout == "Hello World\nhELLO\n"

    def test_invert(self):
        assert _run(["-v", "hello"], stdin="hello\nworld\nhello again\n").stdout == "world\n"

    def test_count(self):
        assert _run(["-c", "hello"], stdin="hello\nworld\nhello again\n").stdout == "2\n"

    def test_line_number(self):
        assert _run(["-n", "world"], stdin="hello\nworld\n").stdout == "2:world\n"

    def test_extended_regexp(self):
        assert _run(["-E", "he(l)+o"], stdin="hello\nworld\n").stdout == "hello\n"

    def test_fixed_strings(self):
        assert _run(["-F", "a.b"], stdin="a.b\naxb\n").stdout == "a.b\n"

    def test_word_regexp(self):
        result = _run(["-w", "he"], stdin="he said hello\nshe is here\nhe\n")
        assert result.stdout == "he said hello\nhe\n"

    def test_only_matching(self):
        result = _run(["-o", "[0-9]+"], stdin="abc 123 def 456\nno numbers\n789\n")
        assert result.stdout == "123\n456\n789\n"

    def test_quiet(self):
        assert _run(["-q", "hello"], stdin="hello world\n") == CommandResult(exit_code=0)
        assert _run(["-q", "missing"], stdin="hello world\n") == CommandResult(exit_code=1)

    def test_explicit_e(self):
        assert _run(["-e", "hello"], stdin="hello world\ngoodbye\n").stdout == "hello world\n"

    def test_multiple_e(self):
        result = _run(["-e", "hello", "-e", "bye"], stdin="hello\nworld\ngoodbye\n")
        assert result.stdout == "hello\ngoodbye\n"

    def test_combined_in(self):
        assert _run(["-in", "HELLO"], stdin="Hello World\ngoodbye\n").stdout == "1:Hello World\n"

    def test_files_without_match_lists_stdin(self):
        result = _run(["-L", "zzz"], stdin="abc\n")
        assert result == CommandResult(stdout="(standard input)\n", exit_code=0)

    def test_files_without_match_stdin_matched(self):
        assert _run(["-L", "abc"], stdin="abc\n") == CommandResult(exit_code=1)

    def test_files_with_matches_lists_stdin(self):
        assert _run(["-l", "abc"], stdin="abc\n").stdout == "(standard input)\n"

    def test_reader_called_only_without_files(self, local_fs):
        def unreadable() -> str:
            raise AssertionError("stdin must not be read when files are given")

        ctx = CommandContext(fs=local_fs, cwd="/local", stdin_reader=unreadable)
        result = GrepCommand().execute(["hello", "a.txt"], ctx)
        assert result.stdout == "hello world\n"

    def test_reader_supplies_input(self):
        ctx = CommandContext(fs=InMemoryFilesystem(), stdin_reader=lambda: "one\ntwo\n")
        assert GrepCommand().execute(["two"], ctx).stdout == "two\n"

    def test_no_files_and_no_stdin_is_usage_error(self):
        result = _run(["hello"])
        assert result.exit_code == 2
        assert "usage" in result.stderr
        assert result.stdout == ""


# --- Local files ---


class TestLocalFiles:
    def test_local_file(self, local_fs):
        result = _run(["hello", "/local/a.txt"], fs=local_fs)
        assert result.stdout == "hello world\n"

    def test_files_with_matches(self, local_fs):
        result = _run(["-rl", "hello", "/local"], fs=local_fs)
        assert result.exit_code == 0
        assert result.stdout == "/local/a.txt\n/local/c.txt\n"

    def test_files_without_match(self, local_fs):
        result = _run(["-rL", "hello", "/local"], fs=local_fs)
        assert result.stdout == "/local/b.txt\n"
        assert result.exit_code == 0

    def test_count_multi_file(self, local_fs):
        result = _run(["-c", "world", "/local/a.txt", "/local/b.txt"], fs=local_fs)
        assert result.stdout == "/local/a.txt:1\n/local/b.txt:1\n"

    def test_no_filename(self, local_fs):
        result = _run(["-rh", "hello", "/local"], fs=local_fs)
        assert result.stdout == "hello world\nhello again\n"

    def test_directory_without_recursive_sole_target(self, local_fs):
        result = _run(["hello", "/local"], fs=local_fs)
        assert result.exit_code == 2
        assert result.stderr == "grep: /local: Is a directory\n"
        assert result.stdout == ""

    def test_missing_file_among_others_is_skipped(self, local_fs):
        result = _run(["hello", "/local/a.txt", "/local/missing.txt"], fs=local_fs)
        assert result.exit_code == 0
        assert result.stdout == "/local/a.txt:hello world\n"
        assert result.stderr == ""

    def test_missing_sole_file(self, local_fs):
        result = _run(["hello", "/local/missing.txt"], fs=local_fs)
        assert result.exit_code == 2
        assert "No such file or directory" in result.stderr

    def test_dash_led_filename_after_pattern(self):
        fs = InMemoryFilesystem({"/w/-odd.txt": "hello\n"})
        result = _run(["hello", "-odd.txt"], fs=fs, cwd="/w")
        assert result.stdout == "hello\n"


# --- Mixed routing ---


class TestMixed:
    def test_remote_and_local_merge_in_argument_order(self):
        backend = InMemoryBackend({"/notes.txt": "hello remote\n"})
        fs = MountedFilesystem(
            InMemoryFilesystem({"/local/a.txt": "hello local\n"}), MountPoint(MOUNT), backend,
        )
        result = GrepCommand(backend, MOUNT).execute(
            ["hello", "/local/a.txt", "/data/notes.txt"], make_context(fs),
        )
        assert result.stdout == "/local/a.txt:hello local\n/data/notes.txt:hello remote\n"
        assert backend.grep_calls == [("hello", "/notes.txt")]

    def test_remote_failure_degrades_when_other_targets(self, local_fs):
        backend = ScriptedBackend(error=NetworkError("connection lost"))
        result = _run(["hello", "/data", "/local/a.txt"], backend, fs=local_fs)
        assert result.exit_code == 0
        assert result.stdout == "/local/a.txt:hello world\n"
        assert result.stderr == ""

    def test_remote_failure_sole_target_is_fatal(self):
        backend = ScriptedBackend(error=NetworkError("connection lost"))
        result = _run(["pattern", "/data"], backend)
        assert result.exit_code == 2
        assert result.stderr == "grep: connection lost\n"
        assert result.stdout == ""

    def test_non_grep_exception_message_surfaced(self):
        backend = ScriptedBackend(error=RuntimeError("raw string"))
        result = _run(["pattern", "/data"], backend)
        assert result.exit_code == 2
        assert "raw string" in result.stderr

    def test_without_backend_everything_is_local(self, local_fs):
        cmd = GrepCommand()
        result = cmd.execute(["-r", "hello", "/local"], make_context(local_fs))
        assert result.stdout == "/local/a.txt:hello world\n/local/c.txt:hello again\n"


class TestIgnoreCaseParity:
    CONTENT = "Hello world\nhello again\nHELLO\nunrelated\n"

    def _both(self, args):
        backend = InMemoryBackend({"/x.txt": self.CONTENT})
        fs = MountedFilesystem(
            InMemoryFilesystem({"/local/x.txt": self.CONTENT}), MountPoint(MOUNT), backend,
        )
        cmd = GrepCommand(backend, MOUNT)
        remote = cmd.execute(args + ["/data/x.txt"], make_context(fs))
        local = cmd.execute(args + ["/local/x.txt"], make_context(fs))
        return remote, local, backend

    def test_remote_matches_local(self):
        remote, local, backend = self._both(["-i", "hello"])
        assert remote == local
        assert remote.stdout == "Hello world\nhello again\nHELLO\n"
        assert len(backend.grep_calls) == 1

    def test_remote_matches_local_with_class_and_count(self):
        remote, local, _ = self._both(["-ic", "h[a-e]llo"])
        assert remote == local
        assert remote.stdout == "3\n"

    def test_flag_never_forwarded(self):
        _, _, backend = self._both(["-i", "hello"])
        pattern, path = backend.grep_calls[0]
        assert pattern == "[hH][eE][lL][lL][oO]"
        assert path == "/x.txt"


# --- Usage and pattern errors ---


class TestErrors:
    def test_missing_pattern(self):
        result = _run([])
        assert result.exit_code == 2
        assert "usage" in result.stderr

    def test_unknown_flag(self):
        result = _run(["-z", "pattern"])
        assert result.exit_code == 2
        assert "unknown option: -z" in result.stderr

    def test_unknown_long_flag(self):
        result = _run(["--color", "pattern"])
        assert result.exit_code == 2
        assert "unknown option: --color" in result.stderr

    def test_invalid_pattern(self):
        result = _run(["foo(", "/data"])
        assert result.exit_code == 2
        assert "foo(" in result.stderr
        assert result.stdout == ""

    def test_command_name(self):
        assert GrepCommand().name == "grep"

    def test_context_is_plain_data(self):
        ctx = CommandContext(fs=InMemoryFilesystem())
        assert ctx.cwd == "/"
        assert ctx.stdin == ""

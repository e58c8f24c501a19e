"""Tests for pubmirror.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pubmirror.core.result import Err, Ok
from pubmirror.platform.process import ProcessError, run, run_streaming

PY = sys.executable


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(("git", "push"), 1, "", "rejected")
        assert str(error) == "git push failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("yarn", "npm", "publish", "--tag", "latest"), 1, "", "")
        assert str(error) == "yarn npm publish ... failed (exit 1)"

    def test_output_combines_streams(self) -> None:
        assert ProcessError(("x",), 1, "out", "err").output == "out\nerr"
        assert ProcessError(("x",), 1, "", "err").output == "err"
        assert ProcessError(("x",), 1, "merged", "").output == "merged"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"], cwd=tmp_path
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert "bad" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_pubmirror_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr.lower()


class TestRunStreaming:
    def test_reports_each_line(self, tmp_path: Path) -> None:
        lines: list[str] = []
        result = run_streaming(
            [PY, "-c", "print('one'); print('two'); print('three')"],
            cwd=tmp_path,
            on_line=lines.append,
        )

        assert isinstance(result, Ok)
        assert lines == ["one", "two", "three"]
        assert result.value == "one\ntwo\nthree"

    def test_merges_stderr_into_output(self, tmp_path: Path) -> None:
        lines: list[str] = []
        script = (
            "import sys\n"
            "print('out', flush=True)\n"
            "sys.stderr.write('You cannot publish over the previously published versions\\n')\n"
            "sys.exit(1)\n"
        )
        result = run_streaming([PY, "-c", script], cwd=tmp_path, on_line=lines.append)

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert "out" in lines
        assert "previously published versions" in result.error.output

    def test_timeout_kills_process(self, tmp_path: Path) -> None:
        lines: list[str] = []
        script = "import time\nprint('started', flush=True)\ntime.sleep(30)\n"

        result = run_streaming(
            [PY, "-c", script], cwd=tmp_path, on_line=lines.append, timeout=1.0
        )

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr
        assert lines == ["started"]
        assert result.error.stdout == "started"

    def test_finishes_within_timeout(self, tmp_path: Path) -> None:
        result = run_streaming(
            [PY, "-c", "print('done')"], cwd=tmp_path, on_line=lambda _: None, timeout=30.0
        )

        assert result == Ok("done")

    def test_command_not_found(self, tmp_path: Path) -> None:
        lines: list[str] = []
        result = run_streaming(
            ["nonexistent_command_pubmirror_12345"], cwd=tmp_path, on_line=lines.append
        )

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert lines == []

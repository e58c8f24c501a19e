"""Tests for pubmirror.output.console module."""

from __future__ import annotations

import pytest

from pubmirror.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()
        console.print("plain")
        console.print("yarn npm publish", Style.DIM)
        console.success("done")
        console.error("bad")
        console.warning("careful")
        console.info("fyi")
        console.header("@tldraw/editor@2.0.0")

        assert console.messages == [
            "plain",
            "yarn npm publish",
            "OK done",
            "error: bad",
            "warning: careful",
            "info: fyi",
            "@tldraw/editor@2.0.0",
        ]
        assert [o.style for o in console.outputs][:3] == [Style.DEFAULT, Style.DIM, Style.SUCCESS]
        assert console.has_error()
        assert console.has_warning()

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.print("attempt 0 of 10")
        console.print("attempt 1 of 10")

        assert len(console.find("of 10")) == 2
        assert console.text == "attempt 0 of 10\nattempt 1 of 10"

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("x")


class TestRichConsole:
    def test_brackets_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("[1/4] Resolving packages...", Style.DIM)
        console.error("[bold]not markup[/bold]")

        out = capsys.readouterr().out
        assert "[1/4] Resolving packages..." in out
        assert "[bold]not markup[/bold]" in out

"""Tests for ShortcutsRunner with a mocked subprocess layer."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from intentbridge.execution.runner import ActionRunner, RunnerError, ShortcutsRunner


def _proc(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.kill = MagicMock()
    proc.wait = AsyncMock()
    return proc


class TestShortcutsRunner:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(ShortcutsRunner(), ActionRunner)

    async def test_unavailable_when_missing(self, tmp_path) -> None:
        runner = ShortcutsRunner(str(tmp_path / "shortcuts"))
        assert await runner.is_available() is False

    async def test_list_runnables(self) -> None:
        proc = _proc(stdout=b"Create Reminder\n\nMorning Routine\n")
        with patch("asyncio.create_subprocess_exec", return_value=proc) as mock_exec:
            names = await ShortcutsRunner("/bin/shortcuts").list_runnables()
        assert names == ["Create Reminder", "Morning Routine"]
        assert mock_exec.call_args.args[:2] == ("/bin/shortcuts", "list")

    async def test_list_failure_raises(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(returncode=1)):
            with pytest.raises(RunnerError, match="exited with status 1"):
                await ShortcutsRunner().list_runnables()

    async def test_list_oserror_raises(self) -> None:
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("nope")):
            with pytest.raises(RunnerError):
                await ShortcutsRunner().list_runnables()

    async def test_run_success(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(stdout=b"ok")) as mock_exec:
            outcome = await ShortcutsRunner("/bin/shortcuts").run("Create Reminder", '{"a":1}')
        assert outcome.succeeded
        assert outcome.output == "ok"
        assert mock_exec.call_args.args == ("/bin/shortcuts", "run", "Create Reminder", "-i", '{"a":1}')

    async def test_run_without_input(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc()) as mock_exec:
            outcome = await ShortcutsRunner("/bin/shortcuts").run("X")
        assert outcome.succeeded
        assert outcome.output is None
        assert mock_exec.call_args.args == ("/bin/shortcuts", "run", "X")

    async def test_run_failure_uses_stderr(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(returncode=1, stderr=b"not found\n")):
            outcome = await ShortcutsRunner().run("X")
        assert not outcome.succeeded
        assert outcome.error_message == "not found"

    async def test_run_failure_without_stderr(self) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=_proc(returncode=2)):
            outcome = await ShortcutsRunner().run("X")
        assert outcome.error_message == "Unknown error"

    async def test_run_oserror_is_outcome(self) -> None:
        with patch("asyncio.create_subprocess_exec", side_effect=PermissionError("denied")):
            outcome = await ShortcutsRunner().run("X")
        assert not outcome.succeeded
        assert "denied" in (outcome.error_message or "")

    async def test_run_timeout(self) -> None:
        proc = _proc()

        async def hang() -> tuple[bytes, bytes]:
            await asyncio.sleep(10)
            return b"", b""

        proc.communicate = hang
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            outcome = await ShortcutsRunner(timeout=0.01).run("Slow")
        assert not outcome.succeeded
        assert "timed out" in (outcome.error_message or "")
        proc.kill.assert_called_once()

"""Action runners — execute named automations outside this process.

:class:`ShortcutsRunner` drives the ``shortcuts`` command-line tool.  The
coordinator only depends on the :class:`ActionRunner` protocol, so tests
and other backends can substitute their own.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Protocol, runtime_checkable

from intentbridge.execution.models import ExecutionOutcome

logger = logging.getLogger(__name__)

DEFAULT_SHORTCUTS_PATH = "/usr/bin/shortcuts"


class RunnerError(Exception):
    """The runner backend could not be queried."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Runner error" + (f": {detail}" if detail else ""))


@runtime_checkable
class ActionRunner(Protocol):
    """Lists and runs named runnables."""

    async def is_available(self) -> bool:
        """Whether the backend can be used at all on this machine."""
        ...

    async def list_runnables(self) -> list[str]:
        """Names of every registered runnable."""
        ...

    async def run(self, name: str, input: str | None = None) -> ExecutionOutcome:
        """Run *name*, passing *input* as its input text."""
        ...


class ShortcutsRunner:
    """Runs macOS Shortcuts via ``shortcuts list`` / ``shortcuts run``.

    ``timeout`` bounds each ``run`` call; ``None`` waits indefinitely.
    """

    def __init__(self, path: str = DEFAULT_SHORTCUTS_PATH, *, timeout: float | None = None) -> None:
        self.path = path
        self.timeout = timeout

    async def is_available(self) -> bool:
        return os.path.isfile(self.path) and os.access(self.path, os.X_OK)

    async def list_runnables(self) -> list[str]:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.path,
                "list",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
            stdout, _ = await proc.communicate()
        except OSError as exc:
            raise RunnerError(str(exc)) from exc

        if proc.returncode:
            msg = f"'{self.path} list' exited with status {proc.returncode}"
            raise RunnerError(msg)
        text = stdout.decode(errors="replace")
        return [line for line in text.splitlines() if line]

    async def run(self, name: str, input: str | None = None) -> ExecutionOutcome:
        args = ["run", name]
        if input is not None:
            args.extend(["-i", input])

        logger.info("Running shortcut %r", name)
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                self.path,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            return ExecutionOutcome.failure(
                f"Shortcut '{name}' timed out after {self.timeout}s",
                elapsed_seconds=time.monotonic() - start,
            )
        except OSError as exc:
            return ExecutionOutcome.failure(str(exc), elapsed_seconds=time.monotonic() - start)

        elapsed = time.monotonic() - start
        if proc.returncode == 0:
            return ExecutionOutcome.success(
                stdout.decode(errors="replace") if stdout else None,
                elapsed_seconds=elapsed,
            )
        error = stderr.decode(errors="replace").strip() if stderr else ""
        return ExecutionOutcome.failure(error or "Unknown error", elapsed_seconds=elapsed)

"""ExecutionCoordinator — resolve an action id to a runnable and run it."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Literal

from intentbridge.execution.models import ExecutionOutcome
from intentbridge.execution.runner import RunnerError
from intentbridge.utils.telemetry import ATTR_ACTION_ID, ATTR_RUNNABLE, ATTR_SUCCEEDED, get_tracer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from intentbridge.discovery.catalog import ActionCatalog
    from intentbridge.execution.runner import ActionRunner

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

MatchPolicy = Literal["ranked", "first"]


class ExecutionCoordinator:
    """Looks actions up in the catalog and delegates execution to a runner.

    Missing actions and missing runnables are reported as failed
    :class:`ExecutionOutcome` values, never raised.

    Usage::

        coordinator = ExecutionCoordinator(catalog, ShortcutsRunner())
        outcome = await coordinator.execute("com.apple.reminders.Create", {"title": "Milk"})
    """

    def __init__(
        self,
        catalog: ActionCatalog,
        runner: ActionRunner | None,
        *,
        match_policy: MatchPolicy = "ranked",
    ) -> None:
        self._catalog = catalog
        self._runner = runner
        self._match_policy = match_policy

    async def execute(self, action_id: str, arguments: dict[str, Any] | None = None) -> ExecutionOutcome:
        """Run the action *action_id* with *arguments*."""
        start = time.monotonic()
        with _tracer.start_as_current_span("coordinator.execute") as span:
            span.set_attribute(ATTR_ACTION_ID, action_id)
            outcome = await self._execute(action_id, arguments, span)
            outcome = outcome.model_copy(update={"elapsed_seconds": time.monotonic() - start})
            span.set_attribute(ATTR_SUCCEEDED, outcome.succeeded)
        return outcome

    async def _execute(self, action_id: str, arguments: dict[str, Any] | None, span: Any) -> ExecutionOutcome:
        action = self._catalog.get(action_id)
        if action is None:
            return ExecutionOutcome.failure(f"Intent not found: {action_id}")

        runner = self._runner
        runnable = await self._resolve(runner, action.name) if runner is not None else None
        if runner is None or runnable is None:
            return ExecutionOutcome.failure(
                f"No execution strategy available for intent '{action.name}'. "
                f"Create a Shortcut named '{action.name}' to enable execution."
            )

        span.set_attribute(ATTR_RUNNABLE, runnable)
        logger.info("Executing %s via runnable %r", action_id, runnable)
        return await runner.run(runnable, serialize_arguments(arguments))

    async def _resolve(self, runner: ActionRunner, action_name: str) -> str | None:
        if not await runner.is_available():
            logger.debug("Runner unavailable; cannot resolve %r", action_name)
            return None
        try:
            runnables = await runner.list_runnables()
        except RunnerError as exc:
            logger.warning("Listing runnables failed: %s", exc)
            return None
        return match_runnable(action_name, runnables, policy=self._match_policy)


def match_runnable(action_name: str, runnables: Sequence[str], *, policy: MatchPolicy = "ranked") -> str | None:
    """Pick the runnable that best matches *action_name*.

    Both the lowercased name and the same with spaces removed are tried.
    ``"first"`` returns the first runnable containing either needle.
    ``"ranked"`` prefers an exact match, then a prefix match, then a
    substring match, keeping runnable order within a rank.
    """
    lowered = action_name.lower()
    needles = (lowered, lowered.replace(" ", ""))

    best: str | None = None
    best_rank = 3
    for runnable in runnables:
        candidate = runnable.lower()
        if not any(needle in candidate for needle in needles):
            continue
        if policy == "first":
            return runnable
        if candidate in needles:
            rank = 0
        elif any(candidate.startswith(needle) for needle in needles):
            rank = 1
        else:
            rank = 2
        if rank < best_rank:
            best, best_rank = runnable, rank
    return best


def serialize_arguments(arguments: dict[str, Any] | None) -> str | None:
    """Compact JSON for a non-empty argument object, else ``None``."""
    if not arguments:
        return None
    return json.dumps(arguments, separators=(",", ":"))

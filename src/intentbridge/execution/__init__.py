"""Execution — resolving actions to runnables and running them."""

from intentbridge.execution.coordinator import ExecutionCoordinator
from intentbridge.execution.models import ExecutionOutcome
from intentbridge.execution.runner import ActionRunner, RunnerError, ShortcutsRunner

__all__ = [
    "ActionRunner",
    "ExecutionCoordinator",
    "ExecutionOutcome",
    "RunnerError",
    "ShortcutsRunner",
]

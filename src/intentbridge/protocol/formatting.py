"""Human-readable text for tool results and prompt templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from intentbridge.discovery.models import ActionRecord
    from intentbridge.execution.models import ExecutionOutcome


def format_summary(record: ActionRecord) -> str:
    line = f"- {record.name} ({record.id}) [{record.owner_id}]"
    if record.description:
        line += f": {record.description}"
    return line


def format_listing(header: str, records: Sequence[ActionRecord]) -> str:
    return "\n".join([header, *(format_summary(r) for r in records)])


def format_detail(record: ActionRecord) -> str:
    lines = [
        f"Name: {record.name}",
        f"ID: {record.id}",
        f"App: {record.owner_id}",
        f"Description: {record.description or '(none)'}",
        f"Returns result: {'yes' if record.returns_result else 'no'}",
    ]
    if not record.parameters:
        lines.append("Parameters: none")
    else:
        lines.append("Parameters:")
        for param in record.parameters:
            flag = "required" if param.required else "optional"
            entry = f"  - {param.name} ({param.type}, {flag})"
            if param.description:
                entry += f": {param.description}"
            lines.append(entry)
    return "\n".join(lines)


def format_outcome(record_name: str | None, outcome: ExecutionOutcome) -> str:
    label = f"'{record_name}'" if record_name else "intent"
    if outcome.succeeded:
        text = f"Intent {label} succeeded in {outcome.elapsed_seconds:.2f}s."
        if outcome.output:
            text += f"\n\nOutput:\n{outcome.output}"
        return text
    return (
        f"Intent {label} failed after {outcome.elapsed_seconds:.2f}s "
        f"(succeeded: false).\n\nError: {outcome.error_message}"
    )


def format_owner_summary(owners: Sequence[tuple[str, int]]) -> str:
    if not owners:
        return "(no apps with intents were found)"
    return "\n".join(f"- {owner}: {count} intents" for owner, count in owners)


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------


def discover_capabilities_prompt(total: int, owners: Sequence[tuple[str, int]]) -> str:
    return (
        "I'd like to know what I can automate on this Mac.\n\n"
        f"The intent catalog currently holds {total} intents from {len(owners)} apps:\n"
        f"{format_owner_summary(owners)}\n\n"
        "Use the list_intents and search_intents tools to explore them, then "
        "summarize the most useful capabilities grouped by app."
    )


def intent_help_prompt(record: ActionRecord) -> str:
    return (
        "Explain how to use the intent below. Describe what each parameter "
        "means and show an example run_intent call.\n\n"
        f"{format_detail(record)}"
    )


def workflow_builder_prompt(goal: str | None, owners: Sequence[tuple[str, int]]) -> str:
    request = "Help me build a multi-step automation"
    if goal:
        request += f" that accomplishes: {goal}"
    return (
        f"{request}.\n\n"
        f"Apps with available intents:\n{format_owner_summary(owners)}\n\n"
        "Use search_intents to find relevant intents, get_intent to inspect "
        "their parameters, and run_intent to execute each step in order. "
        "Pass the output of one step into the next where it makes sense."
    )

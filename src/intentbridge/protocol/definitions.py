"""Static MCP definitions: the tools and prompts this server exposes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PROTOCOL_VERSION = "2024-11-05"
RESOURCE_SCHEME = "intent://"


class ToolDef(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")


class PromptArgument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    required: bool = False


class PromptDef(BaseModel):
    """A prompt template as returned by ``prompts/list``."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    arguments: tuple[PromptArgument, ...] = ()


def _string_prop(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


TOOLS: tuple[ToolDef, ...] = (
    ToolDef(
        name="list_intents",
        description="List all discovered App Intents, optionally filtered by app",
        input_schema={
            "type": "object",
            "properties": {
                "app_bundle_id": _string_prop("Filter by app bundle ID (optional)"),
            },
        },
    ),
    ToolDef(
        name="search_intents",
        description="Search intents by name or description",
        input_schema={
            "type": "object",
            "properties": {"query": _string_prop("Search query")},
            "required": ["query"],
        },
    ),
    ToolDef(
        name="get_intent",
        description="Get detailed info about a specific intent",
        input_schema={
            "type": "object",
            "properties": {"intent_id": _string_prop("The intent ID")},
            "required": ["intent_id"],
        },
    ),
    ToolDef(
        name="run_intent",
        description="Execute an App Intent with provided parameters",
        input_schema={
            "type": "object",
            "properties": {
                "intent_id": _string_prop("The intent ID to execute"),
                "parameters": {
                    "type": "object",
                    "description": "Parameters to pass to the intent",
                },
            },
            "required": ["intent_id"],
        },
    ),
    ToolDef(
        name="refresh_intents",
        description="Force re-scan of installed apps for intents",
        input_schema={"type": "object", "properties": {}},
    ),
)

PROMPTS: tuple[PromptDef, ...] = (
    PromptDef(
        name="discover_capabilities",
        description="What can I automate on this Mac?",
    ),
    PromptDef(
        name="intent_help",
        description="Get usage help for a specific intent",
        arguments=(
            PromptArgument(name="intent_id", description="The intent to get help for", required=True),
        ),
    ),
    PromptDef(
        name="workflow_builder",
        description="Build a multi-step automation using available intents",
        arguments=(
            PromptArgument(name="goal", description="What the workflow should accomplish"),
        ),
    ),
)

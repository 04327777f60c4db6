"""Dispatcher — maps one JSON-RPC request to one response.

Routes MCP methods to handlers backed by the :class:`ActionCatalog` and the
:class:`ExecutionCoordinator`.  Protocol failures become ``error``
responses; business failures (unknown intent, failed run) are ordinary
results whose text says what went wrong.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from intentbridge import __version__
from intentbridge.protocol import formatting
from intentbridge.protocol.definitions import PROMPTS, PROTOCOL_VERSION, RESOURCE_SCHEME, TOOLS
from intentbridge.protocol.errors import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    RpcError,
    ToolNotFoundError,
)
from intentbridge.protocol.models import JsonRpcRequest, JsonRpcResponse, decode_request
from intentbridge.utils.telemetry import ATTR_RPC_ERROR_CODE, ATTR_RPC_METHOD, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from intentbridge.discovery.catalog import ActionCatalog
    from intentbridge.discovery.models import ActionRecord
    from intentbridge.execution.coordinator import ExecutionCoordinator

    MethodHandler = Callable[[JsonRpcRequest], Awaitable[dict[str, Any]]]
    ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SERVER_NAME = "intentbridge"
_JSON_MIME = "application/json"


class Dispatcher:
    """Stateless router apart from the ``initialized`` lifecycle flag.

    Usage::

        dispatcher = Dispatcher(catalog, coordinator)
        response = await dispatcher.handle_message(b'{"jsonrpc":"2.0","id":1,"method":"ping"}')
    """

    def __init__(
        self,
        catalog: ActionCatalog,
        coordinator: ExecutionCoordinator,
        *,
        server_name: str = SERVER_NAME,
        server_version: str = __version__,
    ) -> None:
        self._catalog = catalog
        self._coordinator = coordinator
        self._server_name = server_name
        self._server_version = server_version
        self._initialized = False
        self._state_lock = asyncio.Lock()

        self._methods: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "initialized": self._initialized_ack,
            "notifications/initialized": self._initialized_ack,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "resources/list": self._resources_list,
            "resources/read": self._resources_read,
            "prompts/list": self._prompts_list,
            "prompts/get": self._prompts_get,
        }
        self._tools: dict[str, ToolHandler] = {
            "list_intents": self._list_intents,
            "search_intents": self._search_intents,
            "get_intent": self._get_intent,
            "run_intent": self._run_intent,
            "refresh_intents": self._refresh_intents,
        }

    @property
    def initialized(self) -> bool:
        """Whether the client has acknowledged initialization."""
        return self._initialized

    @property
    def methods(self) -> list[str]:
        return list(self._methods)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle_message(self, body: bytes) -> JsonRpcResponse:
        """Decode a raw message body and handle it."""
        try:
            request = decode_request(body)
        except ParseError as exc:
            logger.warning("Discarding unparseable message (%d bytes): %s", len(body), exc.data)
            return JsonRpcResponse.failure(None, exc)
        except InvalidRequestError as exc:
            logger.warning("Invalid request envelope: %s", exc.data)
            return JsonRpcResponse.failure(exc.request_id, exc)
        return await self.handle(request)

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Route *request* to its handler and wrap the outcome."""
        with _tracer.start_as_current_span("mcp.request") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            logger.debug("-> %s (id=%r)", request.method, request.id)
            try:
                handler = self._methods.get(request.method)
                if handler is None:
                    raise MethodNotFoundError(data={"method": request.method})
                return JsonRpcResponse.success(request.id, await handler(request))
            except RpcError as exc:
                span.set_attribute(ATTR_RPC_ERROR_CODE, exc.code)
                logger.info("%s failed: [%d] %s", request.method, exc.code, exc.message)
                return JsonRpcResponse.failure(request.id, exc)
            except Exception:
                span.set_attribute(ATTR_RPC_ERROR_CODE, InternalError.code)
                logger.exception("Unhandled error while handling %s", request.method)
                return JsonRpcResponse.failure(request.id, InternalError())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> dict[str, Any]:
        client = request.param_object().get("clientInfo")
        if isinstance(client, dict):
            logger.info("Client connected: %s %s", client.get("name", "?"), client.get("version", ""))
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
            "serverInfo": {"name": self._server_name, "version": self._server_version},
        }

    async def _initialized_ack(self, request: JsonRpcRequest) -> dict[str, Any]:
        async with self._state_lock:
            self._initialized = True
        return {}

    async def _ping(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _tools_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"tools": [tool.model_dump(mode="json", by_alias=True) for tool in TOOLS]}

    async def _tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.param_object()
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParamsError("'name' must be a string", data={"param": "name"})
        handler = self._tools.get(name)
        if handler is None:
            raise ToolNotFoundError(name)

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidParamsError("'arguments' must be an object", data={"param": "arguments"})

        with _tracer.start_as_current_span("mcp.tool") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            return await handler(arguments)

    async def _list_intents(self, args: dict[str, Any]) -> dict[str, Any]:
        owner = _optional_str(args, "app_bundle_id")
        await self._catalog.refresh()
        records = self._catalog.for_owner(owner) if owner else list(self._catalog.records)
        scope = f" for {owner}" if owner else ""
        if not records:
            return _text_result(f"No intents found{scope}.")
        return _text_result(formatting.format_listing(f"Found {len(records)} intents{scope}:", records))

    async def _search_intents(self, args: dict[str, Any]) -> dict[str, Any]:
        query = _require_str(args, "query")
        await self._catalog.refresh()
        matches = self._catalog.search(query)
        if not matches:
            return _text_result(f"No intents match '{query}'.")
        return _text_result(formatting.format_listing(f"Found {len(matches)} intents matching '{query}':", matches))

    async def _get_intent(self, args: dict[str, Any]) -> dict[str, Any]:
        intent_id = _require_str(args, "intent_id")
        await self._catalog.refresh()
        record = self._catalog.get(intent_id)
        if record is None:
            return _text_result(f"Intent not found: {intent_id}", is_error=True)
        return _text_result(formatting.format_detail(record))

    async def _run_intent(self, args: dict[str, Any]) -> dict[str, Any]:
        intent_id = _require_str(args, "intent_id")
        parameters = args.get("parameters")
        if parameters is not None and not isinstance(parameters, dict):
            raise InvalidParamsError("'parameters' must be an object", data={"param": "parameters"})
        await self._catalog.refresh()
        record = self._catalog.get(intent_id)
        outcome = await self._coordinator.execute(intent_id, parameters)
        text = formatting.format_outcome(record.name if record else None, outcome)
        return _text_result(text, is_error=not outcome.succeeded)

    async def _refresh_intents(self, args: dict[str, Any]) -> dict[str, Any]:
        records = await self._catalog.refresh(force=True)
        owners = self._catalog.owners()
        return _text_result(f"Refreshed intent catalog: {len(records)} intents from {len(owners)} apps.")

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def _resources_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        await self._catalog.refresh()
        total = len(self._catalog.records)
        resources = [
            {
                "uri": RESOURCE_SCHEME,
                "name": "All App Intents",
                "description": f"Browse all discovered App Intents ({total} intents)",
                "mimeType": _JSON_MIME,
                "intentCount": total,
            }
        ]
        for owner, count in self._catalog.list_owners():
            resources.append(
                {
                    "uri": f"{RESOURCE_SCHEME}{owner}",
                    "name": owner,
                    "description": f"App Intents published by {owner} ({count} intents)",
                    "mimeType": _JSON_MIME,
                    "intentCount": count,
                }
            )
        return {"resources": resources}

    async def _resources_read(self, request: JsonRpcRequest) -> dict[str, Any]:
        uri = _require_str(request.param_object(), "uri")
        await self._catalog.refresh()
        records = self._resolve_resource(uri)
        text = json.dumps(
            [record.model_dump(mode="json", by_alias=True) for record in records],
            indent=2,
            ensure_ascii=False,
        )
        return {"contents": [{"uri": uri, "mimeType": _JSON_MIME, "text": text}]}

    def _resolve_resource(self, uri: str) -> list[ActionRecord]:
        if uri == RESOURCE_SCHEME:
            return list(self._catalog.records)
        if uri.startswith(RESOURCE_SCHEME):
            owner = uri[len(RESOURCE_SCHEME) :]
            if owner in self._catalog.owners():
                return self._catalog.for_owner(owner)
        raise InvalidParamsError(f"Unknown resource: {uri}", data={"uri": uri})

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    async def _prompts_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"prompts": [prompt.model_dump(mode="json") for prompt in PROMPTS]}

    async def _prompts_get(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.param_object()
        name = _require_str(params, "name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidParamsError("'arguments' must be an object", data={"param": "arguments"})

        prompt = next((p for p in PROMPTS if p.name == name), None)
        if prompt is None:
            raise InvalidParamsError(f"Unknown prompt: {name}", data={"name": name})

        await self._catalog.refresh()
        owners = self._catalog.list_owners()
        if name == "discover_capabilities":
            text = formatting.discover_capabilities_prompt(len(self._catalog.records), owners)
        elif name == "intent_help":
            intent_id = arguments.get("intent_id")
            if not isinstance(intent_id, str):
                raise InvalidParamsError("'intent_id' argument is required", data={"param": "intent_id"})
            record = self._catalog.get(intent_id)
            if record is None:
                raise InvalidParamsError(f"Unknown intent: {intent_id}", data={"intent_id": intent_id})
            text = formatting.intent_help_prompt(record)
        else:
            goal = arguments.get("goal")
            text = formatting.workflow_builder_prompt(goal if isinstance(goal, str) else None, owners)

        return {
            "description": prompt.description,
            "messages": [{"role": "user", "content": {"type": "text", "text": text}}],
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _text_result(text: str, *, is_error: bool = False) -> dict[str, Any]:
    result: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


def _require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str):
        raise InvalidParamsError(f"'{key}' must be a string", data={"param": key})
    return value


def _optional_str(args: dict[str, Any], key: str) -> str | None:
    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidParamsError(f"'{key}' must be a string", data={"param": key})
    return value

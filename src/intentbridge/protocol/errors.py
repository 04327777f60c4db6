"""Shared error types for the protocol layer.

Two families live here: transport errors, which stay local to the server
loop, and :class:`RpcError` subclasses, which the dispatcher turns into
JSON-RPC ``error`` objects.
"""

from __future__ import annotations

from typing import Any

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Handler-defined, outside the reserved set above.
TOOL_NOT_FOUND = -32001


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(ProtocolError):
    """The byte stream could not be framed or written."""


class EndOfInput(TransportError):
    """The input stream ended while waiting for the next message."""

    def __init__(self) -> None:
        super().__init__("End of input")


class FramingError(TransportError):
    """A message could not be delimited from the byte stream."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Framing error" + (f": {detail}" if detail else ""))


class EncodeError(TransportError):
    """A response could not be serialized for sending."""


# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------


class RpcError(ProtocolError):
    """An error that is reported to the client in the response envelope."""

    code: int = INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, *, data: Any = None) -> None:
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ParseError(RpcError):
    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(RpcError):
    """The body was JSON but not a valid request envelope.

    ``request_id`` carries the id when it could be recovered, so the error
    response can still be correlated by the client.
    """

    code = INVALID_REQUEST
    default_message = "Invalid Request"

    def __init__(
        self,
        message: str | None = None,
        *,
        data: Any = None,
        request_id: int | str | None = None,
    ) -> None:
        self.request_id = request_id
        super().__init__(message, data=data)


class MethodNotFoundError(RpcError):
    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParamsError(RpcError):
    code = INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(RpcError):
    code = INTERNAL_ERROR
    default_message = "Internal error"


class ToolNotFoundError(RpcError):
    """``tools/call`` named a tool this server does not expose."""

    code = TOOL_NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}", data={"name": name})

"""MCP models — JSON-RPC 2.0 envelopes and the wire codec.

Untyped payloads (``params``, ``result``, ``error.data``) use pydantic's
:data:`~pydantic.JsonValue`, the recursive union of string, number, bool,
null, array and object.  Unknown keys inside those payloads are kept as-is.
"""

from __future__ import annotations

import json
from typing import Any, Union

from pydantic import BaseModel, JsonValue, StrictInt, StrictStr, ValidationError, model_validator

from intentbridge.protocol.errors import (
    EncodeError,
    InvalidParamsError,
    InvalidRequestError,
    ParseError,
    RpcError,
)

JSONRPC_VERSION = "2.0"

# No coercion between variants: ``1`` and ``"1"`` are different ids.
RequestId = Union[StrictInt, StrictStr, None]

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message."""

    jsonrpc: StrictStr = JSONRPC_VERSION
    id: RequestId = None
    method: StrictStr
    params: JsonValue = None

    def param_object(self) -> dict[str, Any]:
        """Return ``params`` as a mapping, treating absent params as empty."""
        if self.params is None:
            return {}
        if not isinstance(self.params, dict):
            msg = "params must be an object"
            raise InvalidParamsError(msg)
        return self.params


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: JsonValue = None

    @classmethod
    def from_exception(cls, exc: RpcError) -> JsonRpcError:
        return cls(code=exc.code, message=exc.message, data=exc.data)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            wire["data"] = self.data
        return wire


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    Exactly one of ``result`` and ``error`` is set; the validator rejects
    anything else so a malformed response can never be built.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: JsonValue = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: RequestId, result: JsonValue) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: RequestId, exc: RpcError) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError.from_exception(exc))

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_wire(self) -> dict[str, Any]:
        """Build the wire dict: ``id`` always present, one payload key."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.to_wire()
        else:
            wire["result"] = self.result
        return wire


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def decode_request(body: bytes) -> JsonRpcRequest:
    """Decode one message body into a :class:`JsonRpcRequest`.

    Raises:
        ParseError: The body is not valid UTF-8 JSON, or nests too deeply
            to decode.
        InvalidRequestError: The body is JSON but not a request envelope.
    """
    try:
        data: Any = json.loads(body)
    except ValueError as exc:
        raise ParseError(data=str(exc)) from exc
    except RecursionError as exc:
        raise ParseError(data="nesting too deep") from exc

    if not isinstance(data, dict):
        msg = "request must be a JSON object"
        raise InvalidRequestError(msg)

    try:
        return JsonRpcRequest.model_validate(data)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise InvalidRequestError(
            data={"fields": fields},
            request_id=_recover_id(data.get("id")),
        ) from exc
    except RecursionError as exc:
        raise InvalidRequestError(
            data={"fields": ["params"], "reason": "nesting too deep"},
            request_id=_recover_id(data.get("id")),
        ) from exc


def encode_response(response: JsonRpcResponse) -> bytes:
    """Serialize a response to compact, key-sorted UTF-8 JSON.

    Raises:
        EncodeError: The payload has no UTF-8 JSON form, e.g. a NaN or a
            lone surrogate.
    """
    try:
        text = json.dumps(
            response.to_wire(),
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
        return text.encode("utf-8")
    except (TypeError, ValueError, RecursionError) as exc:
        msg = f"Cannot encode response: {exc}"
        raise EncodeError(msg) from exc


def _recover_id(raw: Any) -> RequestId:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, str)):
        return raw
    return None

"""Protocol layer — JSON-RPC envelopes, framing, dispatch and the server loop."""

from intentbridge.protocol.dispatcher import Dispatcher
from intentbridge.protocol.errors import (
    EndOfInput,
    FramingError,
    ProtocolError,
    RpcError,
    TransportError,
)
from intentbridge.protocol.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    decode_request,
    encode_response,
)
from intentbridge.protocol.server import Server
from intentbridge.protocol.transport import (
    Framer,
    HeaderFramer,
    NewlineFramer,
    create_framer,
)

__all__ = [
    "Dispatcher",
    "EndOfInput",
    "Framer",
    "FramingError",
    "HeaderFramer",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "NewlineFramer",
    "ProtocolError",
    "RpcError",
    "Server",
    "TransportError",
    "create_framer",
    "decode_request",
    "encode_response",
]

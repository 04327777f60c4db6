"""Server — the sequential read / dispatch / write loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from intentbridge.protocol.errors import EncodeError, EndOfInput, FramingError, InternalError
from intentbridge.protocol.models import JsonRpcResponse, encode_response

if TYPE_CHECKING:
    from intentbridge.protocol.dispatcher import Dispatcher
    from intentbridge.protocol.transport import ByteSink, Framer

logger = logging.getLogger(__name__)


class Server:
    """Serves one client over a framed byte stream.

    Each request is fully handled and its response written before the next
    message is read, so responses always leave in request order.  Bad
    frames and unexpected errors are logged and the loop moves on; only
    end of input stops it.
    """

    def __init__(self, dispatcher: Dispatcher, framer: Framer, sink: ByteSink) -> None:
        self._dispatcher = dispatcher
        self._framer = framer
        self._sink = sink
        self.handled = 0

    async def serve(self) -> None:
        """Run until the input stream ends."""
        logger.info("Server started")
        while True:
            try:
                body = await self._framer.decode()
            except EndOfInput:
                logger.info("Client disconnected after %d messages", self.handled)
                return
            except FramingError as exc:
                logger.warning("Dropping malformed frame: %s", exc)
                continue

            try:
                await self._serve_one(body)
            except Exception:
                logger.exception("Error while serving message")

    async def _serve_one(self, body: bytes) -> None:
        response = await self._dispatcher.handle_message(body)
        self.handled += 1
        await self._sink.write(self._framer.encode(_encode_or_fallback(response)))


def _encode_or_fallback(response: JsonRpcResponse) -> bytes:
    """Encode *response*, or an internal error when it has no wire form.

    The fallback keeps the request id when that id can be encoded and uses
    ``null`` otherwise, so every handled message is still answered.
    """
    try:
        return encode_response(response)
    except EncodeError as exc:
        logger.warning("Replacing unencodable response (id=%r): %s", response.id, exc)

    error = InternalError("Response could not be encoded")
    try:
        return encode_response(JsonRpcResponse.failure(response.id, error))
    except EncodeError:
        return encode_response(JsonRpcResponse.failure(None, error))

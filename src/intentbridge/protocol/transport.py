"""MCP transports — framing a duplex byte stream into JSON-RPC messages.

Two framing strategies satisfy the :class:`Framer` protocol:

* :class:`NewlineFramer` — one JSON document per line.
* :class:`HeaderFramer` — ``Content-Length`` header block, then the body.

Exactly one is chosen per server via :func:`create_framer`.  Both read from
a :class:`ByteSource` whose ``read`` may return short chunks; unconsumed
bytes stay buffered for the next ``decode()`` call.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import BinaryIO, Literal, NoReturn, Protocol, runtime_checkable

from intentbridge.protocol.errors import EndOfInput, FramingError

logger = logging.getLogger(__name__)

FramingKind = Literal["newline", "header"]

_CONTENT_LENGTH = b"content-length"


@runtime_checkable
class ByteSource(Protocol):
    """Something that yields raw bytes; ``b""`` signals end of stream."""

    async def read(self, n: int) -> bytes: ...


@runtime_checkable
class ByteSink(Protocol):
    """Something that accepts raw outbound bytes."""

    async def write(self, data: bytes) -> None: ...


@runtime_checkable
class Framer(Protocol):
    """Delimits message bodies in both directions."""

    def encode(self, body: bytes) -> bytes: ...
    async def decode(self) -> bytes: ...


class _BufferedFramer:
    """Shared buffering for the concrete framers."""

    chunk_size = 65536

    def __init__(self, source: ByteSource) -> None:
        self._source = source
        self._buffer = bytearray()
        self._eof = False

    @property
    def buffered(self) -> int:
        """Number of bytes read from the source but not yet consumed."""
        return len(self._buffer)

    async def _fill(self) -> bool:
        """Append one chunk from the source. Returns False at end of stream."""
        if self._eof:
            return False
        chunk = await self._source.read(self.chunk_size)
        if not chunk:
            self._eof = True
            return False
        self._buffer.extend(chunk)
        return True

    async def _read_line(self, *, in_message: bool) -> bytes:
        """Consume through the next ``\\n``; return the line minus ``\\r\\n``."""
        while True:
            idx = self._buffer.find(b"\n")
            if idx >= 0:
                line = bytes(self._buffer[:idx])
                del self._buffer[: idx + 1]
                if line.endswith(b"\r"):
                    line = line[:-1]
                return line
            if not await self._fill():
                if not in_message and not self._buffer.strip():
                    self._buffer.clear()
                    raise EndOfInput
                self._truncated()

    async def _read_exact(self, n: int) -> bytes:
        while len(self._buffer) < n:
            if not await self._fill():
                self._truncated()
        body = bytes(self._buffer[:n])
        del self._buffer[:n]
        return body

    def _truncated(self) -> NoReturn:
        pending = len(self._buffer)
        self._buffer.clear()
        logger.debug("Discarding %d buffered bytes at end of stream", pending)
        msg = f"stream ended inside a message ({pending} bytes pending)"
        raise FramingError(msg)


class NewlineFramer(_BufferedFramer):
    """Newline-delimited JSON.

    Outbound bodies have every ``\\n`` and ``\\r`` removed before the single
    terminating ``\\n`` is appended, so a body can never contain a record
    boundary.  JSON escapes newlines inside strings, so nothing is lost.
    """

    name: FramingKind = "newline"

    def encode(self, body: bytes) -> bytes:
        return body.replace(b"\n", b"").replace(b"\r", b"") + b"\n"

    async def decode(self) -> bytes:
        while True:
            line = await self._read_line(in_message=False)
            if line.strip():
                return line


class HeaderFramer(_BufferedFramer):
    """``Content-Length`` framed messages (the LSP-style wire format)."""

    name: FramingKind = "header"

    def encode(self, body: bytes) -> bytes:
        return b"Content-Length: %d\r\n\r\n" % len(body) + body

    async def decode(self) -> bytes:
        length: int | None = None
        problem: str | None = None
        in_message = False

        # Consume the whole header block even when it is bad so the next
        # decode starts at a message boundary.
        while True:
            line = await self._read_line(in_message=in_message)
            if not line:
                if not in_message:
                    continue
                break
            in_message = True
            name, sep, value = line.partition(b":")
            if not sep:
                problem = problem or f"malformed header line {line!r}"
                continue
            if name.strip().lower() == _CONTENT_LENGTH:
                raw = value.strip()
                if raw.isdigit():
                    length = int(raw)
                else:
                    problem = problem or f"invalid Content-Length {raw!r}"

        if problem is not None:
            if length is not None:
                await self._read_exact(length)
            raise FramingError(problem)
        if length is None:
            msg = "missing Content-Length header"
            raise FramingError(msg)
        return await self._read_exact(length)


def create_framer(kind: FramingKind, source: ByteSource) -> NewlineFramer | HeaderFramer:
    """Build the framer for *kind* on top of *source*."""
    if kind == "newline":
        return NewlineFramer(source)
    if kind == "header":
        return HeaderFramer(source)
    msg = f"Unknown framing strategy: {kind!r}"
    raise ValueError(msg)


# ---------------------------------------------------------------------------
# Process stdio
# ---------------------------------------------------------------------------


class StdioSource:
    """Reads the process's stdin file descriptor without blocking the loop."""

    def __init__(self, fd: int | None = None) -> None:
        self._fd = sys.stdin.fileno() if fd is None else fd

    async def read(self, n: int) -> bytes:
        return await asyncio.to_thread(os.read, self._fd, n)


class StdioSink:
    """Writes protocol frames to stdout, flushing after every message."""

    def __init__(self, stream: BinaryIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout.buffer

    async def write(self, data: bytes) -> None:
        self._stream.write(data)
        self._stream.flush()

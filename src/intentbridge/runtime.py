"""Wiring — build a ready-to-serve :class:`Server` from a :class:`ServerConfig`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from intentbridge.discovery.catalog import ActionCatalog
from intentbridge.discovery.scanner import BundleScanner
from intentbridge.execution.coordinator import ExecutionCoordinator
from intentbridge.execution.runner import ShortcutsRunner
from intentbridge.protocol.dispatcher import Dispatcher
from intentbridge.protocol.server import Server
from intentbridge.protocol.transport import StdioSink, StdioSource, create_framer

if TYPE_CHECKING:
    from intentbridge.config import ServerConfig
    from intentbridge.discovery.scanner import ActionScanner
    from intentbridge.execution.runner import ActionRunner
    from intentbridge.protocol.transport import ByteSink, ByteSource


def create_server(
    config: ServerConfig,
    *,
    source: ByteSource | None = None,
    sink: ByteSink | None = None,
    scanner: ActionScanner | None = None,
    runner: ActionRunner | None = None,
) -> Server:
    """Assemble catalog, coordinator, dispatcher and framer.

    Any collaborator left as ``None`` is built from *config*; stdio is the
    default byte stream.
    """
    catalog = ActionCatalog(
        scanner if scanner is not None else BundleScanner(config.app_directories),
        ttl=config.cache_ttl,
    )
    coordinator = ExecutionCoordinator(
        catalog,
        runner if runner is not None else ShortcutsRunner(config.shortcuts_path, timeout=config.run_timeout),
        match_policy=config.match_policy,
    )
    dispatcher = Dispatcher(catalog, coordinator)
    framer = create_framer(config.framing, source if source is not None else StdioSource())
    return Server(dispatcher, framer, sink if sink is not None else StdioSink())


async def serve_stdio(config: ServerConfig) -> None:
    """Serve on the process's stdin/stdout until end of input."""
    await create_server(config).serve()

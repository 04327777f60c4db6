"""intentbridge CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from intentbridge import __version__
from intentbridge.utils.logging import stderr_console

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__, prog_name="intentbridge")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file.",
)
@click.option(
    "--framing",
    type=click.Choice(["newline", "header"]),
    default=None,
    help="Message framing on stdio (overrides config).",
)
@click.option("--log-level", default=None, help="Log level for stderr output (overrides config).")
@click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing.")
def main(config_path: str | None, framing: str | None, log_level: str | None, telemetry: bool) -> None:
    """Serve installed App Intents to an MCP client over stdin/stdout."""
    from intentbridge.config import ConfigError, ConfigLoader, ServerConfig
    from intentbridge.runtime import serve_stdio
    from intentbridge.utils.logging import configure_logging

    try:
        config = ConfigLoader(Path(config_path)).load() if config_path else ServerConfig()
        config = ServerConfig.from_env(config)
    except ConfigError as exc:
        stderr_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    overrides: dict[str, object] = {}
    if framing:
        overrides["framing"] = framing
    if log_level:
        overrides["log_level"] = log_level
    if overrides:
        config = config.model_copy(update=overrides)

    configure_logging(config.log_level)

    if telemetry or config.telemetry.enabled:
        from intentbridge.utils.telemetry import configure_telemetry

        configure_telemetry(otlp_endpoint=config.telemetry.otlp_endpoint)

    logger.info("intentbridge %s starting (%s framing)", __version__, config.framing)
    try:
        asyncio.run(serve_stdio(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()

"""astrasync-bridge CLI entrypoint."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from astrasync_bridge import __version__
from astrasync_bridge.config import AuthMode, BridgeSettings
from astrasync_bridge.errors import ConfigurationError


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout is reserved for command output."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="astrasync-bridge")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file.",
)
@click.option("--api-url", default=None, help="AstraSync registry base URL.")
@click.option(
    "--auth-mode",
    type=click.Choice([m.value for m in AuthMode]),
    default=None,
    help="How register_agent authenticates.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str | None,
    api_url: str | None,
    auth_mode: str | None,
    verbose: bool,
) -> None:
    """AstraSync MCP bridge."""
    try:
        settings = BridgeSettings.load(
            config_path,
            api_url=api_url,
            auth_mode=auth_mode,
            log_level="DEBUG" if verbose else None,
        )
    except ConfigurationError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(2)

    configure_logging(settings.log_level)
    ctx.obj = settings


# Register subcommands
from astrasync_bridge.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()

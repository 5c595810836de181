"""CLI handling for clipbridge.

This module provides the command-line interface for clipbridge, handling
argument parsing via click, logging configuration, and dispatching to server
or client mode based on user-specified options. Every option can also be
set through a CLIPBRIDGE_* environment variable.

Usage:
    clipbridge --server [--addr :8080] [--db clipboard.db] [--verbose]
    clipbridge --client [--server-url URL] [--interval SECONDS] [--source LABEL] [--verbose]
"""

import click
import sys

from clipbridge.client_constants import DEFAULT_INTERVAL, DEFAULT_SERVER_URL
from clipbridge.main_options import ModeOption
from clipbridge.main_logging import configure_logging


@click.command()
@click.option(
    "--server",
    cls=ModeOption,
    conflicts_with=("client",),
    help="Run in server mode",
)
@click.option(
    "--client",
    cls=ModeOption,
    conflicts_with=("server",),
    help="Run in client mode",
)
@click.option(
    "--addr",
    default=":8080",
    show_default=True,
    envvar="CLIPBRIDGE_ADDR",
    help="Server listen address",
)
@click.option(
    "--db",
    "db_path",
    default="clipboard.db",
    show_default=True,
    envvar="CLIPBRIDGE_DB",
    type=click.Path(dir_okay=False),
    help="Path to the SQLite history database (server mode)",
)
@click.option(
    "--server-url",
    default=DEFAULT_SERVER_URL,
    show_default=True,
    envvar="CLIPBRIDGE_SERVER_URL",
    help="Base URL of the clipboard server (client mode)",
)
@click.option(
    "--interval",
    default=DEFAULT_INTERVAL,
    show_default=True,
    envvar="CLIPBRIDGE_INTERVAL",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between clipboard polls (client mode)",
)
@click.option(
    "--source",
    default=None,
    envvar="CLIPBRIDGE_SOURCE",
    help="Source label for this machine (default: hostname)",
)
@click.option(
    "--verbose",
    is_flag=True,
    envvar="CLIPBRIDGE_VERBOSE",
    help="Enable DEBUG-level logging",
)
def main(
    server: bool,
    client: bool,
    addr: str,
    db_path: str,
    server_url: str,
    interval: float,
    source: str | None,
    verbose: bool,
) -> None:
    """Keep a clipboard value and its history in sync over HTTP."""
    if not server and not client:
        raise click.UsageError("Either --server or --client must be specified")

    configure_logging(verbose)

    if server:
        _run_server(addr, db_path, verbose)
    else:
        _run_client(server_url, interval, source)


def _run_server(addr: str, db_path: str, verbose: bool) -> None:
    """Run server mode, exiting with status 1 on configuration errors.

    Args:
        addr: Listen address.
        db_path: Path to the SQLite history database.
        verbose: Whether DEBUG logging is enabled.
    """
    from clipbridge.errors import StorageError
    from clipbridge.server import run_server

    try:
        run_server(addr, db_path, verbose)
    except (StorageError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _run_client(server_url: str, interval: float, source: str | None) -> None:
    """Run client mode, exiting with status 1 on configuration errors.

    Args:
        server_url: Base URL of the clipboard server.
        interval: Seconds between clipboard polls.
        source: Source label, or None for the hostname.
    """
    import asyncio
    from clipbridge.client import default_source, run_client
    from clipbridge.errors import AdapterError

    label = source.strip() if source and source.strip() else default_source()
    try:
        asyncio.run(run_client(server_url, interval, label))
    except AdapterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

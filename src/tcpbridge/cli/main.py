"""
tcpbridge CLI entry point.

Usage:
    tcpbridge [OPTIONS] COMMAND [ARGS]...

Commands:
    serve     Accept clients and relay them to an upstream

Example:
    # Relay local port 9000 to example.com:80, closing after 2h of silence
    tcpbridge serve example.com 80 --listen-port 9000 --idle-timeout 7200
"""

import asyncio
from typing import Annotated

import typer

from tcpbridge.cli.output import console, print_error
from tcpbridge.config import config
from tcpbridge.models.enums import LogLevel
from tcpbridge.relay.exceptions import RelayConfigError
from tcpbridge.relay.session import validate_timing
from tcpbridge.server import start_server
from tcpbridge.utils.logger import configure_logging

app = typer.Typer(
    name="tcpbridge",
    help="Bidirectional TCP relay with traffic-based idle timeout",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main():
    """
    tcpbridge: relay TCP connections to an upstream.

    A session ends when either side closes, an I/O error occurs, or no bytes
    cross in either direction for the idle timeout.
    """


@app.command("serve")
def serve(
    upstream_host: Annotated[str, typer.Argument(help="Upstream host to relay to")],
    upstream_port: Annotated[int, typer.Argument(help="Upstream port to relay to")],
    listen_host: Annotated[
        str,
        typer.Option("--listen-host", "-H", help="Local address to bind to"),
    ] = config.LISTEN_HOST,
    listen_port: Annotated[
        int,
        typer.Option("--listen-port", "-l", help="Local port to listen on"),
    ] = config.LISTEN_PORT,
    rate_check: Annotated[
        int,
        typer.Option("--rate-check", "-r", help="Seconds between idle checks (1-255)"),
    ] = config.RATE_CHECK_SECONDS,
    idle_timeout: Annotated[
        int,
        typer.Option("--idle-timeout", "-t", help="Seconds of silence before closing"),
    ] = config.IDLE_TIMEOUT_SECONDS,
    log_level: Annotated[
        LogLevel,
        typer.Option("--log-level", help="Logging verbosity"),
    ] = config.LOG_LEVEL,
):
    """Accept clients and relay each one to UPSTREAM_HOST:UPSTREAM_PORT."""
    try:
        validate_timing(rate_check, idle_timeout)
    except RelayConfigError as e:
        print_error(str(e))
        raise typer.Exit(1)

    config.LISTEN_HOST = listen_host
    config.LISTEN_PORT = listen_port
    config.UPSTREAM_HOST = upstream_host
    config.UPSTREAM_PORT = upstream_port
    config.RATE_CHECK_SECONDS = rate_check
    config.IDLE_TIMEOUT_SECONDS = idle_timeout
    config.LOG_LEVEL = log_level
    configure_logging(log_level)

    console.print(
        f"[bold green]Relaying[/bold green] "
        f"[cyan]{config.get_listen_address()}[/cyan] "
        f"[dim]→[/dim] "
        f"[yellow]{config.get_upstream_address()}[/yellow] "
        f"[dim](idle timeout {idle_timeout}s)[/dim]"
    )
    console.print("[dim]Press Ctrl+C to stop.[/dim]")

    try:
        asyncio.run(
            start_server(
                listen_host,
                listen_port,
                upstream_host,
                upstream_port,
                rate_check,
                idle_timeout,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")
    except OSError as e:
        if "Address already in use" in str(e):
            print_error(f"Port {listen_port} is already in use.")
        else:
            print_error(f"Error: {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

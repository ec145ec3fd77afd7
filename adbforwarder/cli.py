"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from adbforwarder import bootstrap
from adbforwarder.core.config_loader import load_config
from adbforwarder.core.errors import AdbForwarderError
from adbforwarder.core.service import ForwarderService
from adbforwarder.transports.adb_cli import AdbCliTransport

app = typer.Typer(help="Forward ALVR ports to recognized headsets as they are plugged in")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_service() -> ForwarderService:
    loaded = load_config()
    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    config = loaded.config
    transport = AdbCliTransport(
        str(bootstrap.resolve_adb_path(config)),
        endpoint=config.endpoint,
        timeout_s=config.command_timeout_s,
    )
    return ForwarderService(config=config, transport=transport, sink=typer.echo)


@app.command("run")
def run_forwarder(
    no_bootstrap: bool = typer.Option(
        False, "--no-bootstrap", help="Use the adb on PATH instead of fetching platform-tools"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Watch for devices and forward them until interrupted."""
    _configure_logging(verbose)
    try:
        loaded = load_config()
        for warning in loaded.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        config = loaded.config
        adb_path = config.adb_path or "adb"
        if not no_bootstrap:
            adb_path = bootstrap.ensure_adb(config)
        transport = bootstrap.start_transport(config, adb_path)
        service = ForwarderService(config=config, transport=transport, sink=typer.echo)
        typer.echo("Waiting for devices... (Ctrl+C to quit)")
        service.run_forever()
    except KeyboardInterrupt:
        typer.echo("Stopped")
    except AdbForwarderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices() -> None:
    """List attached devices and whether they would be forwarded."""
    try:
        service = _build_service()
        statuses = service.device_statuses()
        if not statuses:
            typer.echo("No devices attached")
            return

        for device, allowed in statuses:
            verdict = "allowed" if allowed else "skipped"
            typer.echo(f"{device.serial} {device.product or '<unknown-product>'} -> {verdict}")
    except AdbForwarderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config() -> None:
    """Print the effective configuration."""
    try:
        service = _build_service()
        config = service.config
        typer.echo(f"allow_list: {', '.join(sorted(config.allow_list))}")
        ports = ", ".join(f"{r.local_port}->{r.remote_port}" for r in config.forward_ports)
        typer.echo(f"forward_ports: {ports}")
        typer.echo(f"launch_command: {config.launch_command}")
        typer.echo(f"settle_delay_ms: {config.settle_delay_ms}")
        typer.echo(f"adb: {config.endpoint.host}:{config.endpoint.port}")
    except AdbForwarderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()

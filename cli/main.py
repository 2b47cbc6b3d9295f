import signal
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

import typer

from varexport import (
    ConfigurationError, ExportConfig, VariableExporter, format_timestamp,
    serialize_event, SnapshotCollector
)

app = typer.Typer(name="varexport", help="Export process variables to a Cube collector")

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Set up logging configuration."""
    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    if log_file:
        logger.info(f"Logging to file: {log_file}")


def load_config(config: Optional[str], host: Optional[str], port: Optional[int],
                interval: Optional[str], timeout: Optional[float],
                enabled: Optional[bool]) -> ExportConfig:
    """Build the exporter config from a file or the environment, with CLI overrides."""
    overrides = dict(
        collector_host=host,
        collector_port=port,
        export_interval=interval,
        request_timeout=timeout,
        enabled=enabled,
    )
    try:
        if config:
            return ExportConfig.from_file(config, **overrides)
        return ExportConfig.from_env(**overrides)
    except ConfigurationError as e:
        typer.echo(f" Error: {e}", err=True)
        raise typer.Exit(1)


ConfigOption = typer.Option(None, "--config", "-c", help="YAML/JSON config file (default: CUBE_* environment)")
HostOption = typer.Option(None, "--host", help="Cube collector host")
PortOption = typer.Option(None, "--port", help="Cube collector port")
IntervalOption = typer.Option(None, "--interval", help="Export interval, e.g. 10s or 1m30s")
TimeoutOption = typer.Option(None, "--timeout", help="HTTP request timeout in seconds")
EnableOption = typer.Option(None, "--enable/--disable", help="Whether to export at all")
LogLevelOption = typer.Option("INFO", "--log-level", help="Logging level")
LogFileOption = typer.Option(None, "--log-file", help="Also write logs to this file")


@app.command()
def run(
    event_type: str,
    config: Optional[str] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    interval: Optional[str] = IntervalOption,
    timeout: Optional[float] = TimeoutOption,
    enabled: Optional[bool] = EnableOption,
    log_level: str = LogLevelOption,
    log_file: Optional[str] = LogFileOption,
):
    """Export this process's variables periodically until interrupted."""
    setup_logging(log_level, log_file)
    settings = load_config(config, host, port, interval, timeout, enabled)
    exporter = VariableExporter(event_type, settings)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        exporter.scheduler.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        exporter.run()
    except ConfigurationError as e:
        logger.error(f"Failed to start exporter: {e}")
        raise typer.Exit(1)


@app.command()
def once(
    event_type: str,
    config: Optional[str] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    timeout: Optional[float] = TimeoutOption,
    log_level: str = LogLevelOption,
):
    """Send the current variables to the collector once."""
    setup_logging(log_level)
    settings = load_config(config, host, port, None, timeout, None)
    result = VariableExporter(event_type, settings).export_now()

    if result.ok:
        typer.echo(f" Exported variables to {result.url} at {format_timestamp(result.timestamp)}")
    else:
        typer.echo(f" Export failed: {result.error}", err=True)
        raise typer.Exit(1)


@app.command()
def show(event_type: str):
    """Print the event that would be sent, without sending it."""
    payload = serialize_event(event_type, SnapshotCollector().snapshot(), datetime.now())
    typer.echo(payload.decode("utf-8"))


if __name__ == "__main__":
    app()

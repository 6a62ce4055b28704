"""CLI entrypoint for Hyperlook."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from hyperlook.core.config import Settings
from hyperlook.core.errors import HyperlookError
from hyperlook.core.logging import configure_from_settings

app = typer.Typer(name="hyperlook", help="Poll a log store and export pattern metrics")

ConfigOption = typer.Option(None, "--config", help="YAML configuration file")
ContainerOption = typer.Option(None, "--container-name", help="The container name to grab data")
AddrOption = typer.Option(None, "--elastic-search-addr", help="The address of elasticsearch")
PortOption = typer.Option(None, "--elastic-search-port", help="The port of elasticsearch")
SizeOption = typer.Option(None, "--elastic-search-size", help="The size search from elasticsearch")
NamespaceOption = typer.Option(None, "--fabric-namespace", help="The namespace of the fabric network")


def _load_settings(config: Optional[Path], **overrides: object) -> Settings:
    try:
        return Settings.from_yaml(config, **overrides)
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def serve(
    config: Optional[Path] = ConfigOption,
    container_name: Optional[str] = ContainerOption,
    es_host: Optional[str] = AddrOption,
    es_port: Optional[int] = PortOption,
    es_size: Optional[int] = SizeOption,
    namespace: Optional[str] = NamespaceOption,
    interval: Optional[int] = typer.Option(None, "--interval", help="Seconds between polls"),
    listen_addr: Optional[str] = typer.Option(None, "--listen-addr", help="Address to serve /metrics on"),
) -> None:
    """Poll the log store forever and serve /metrics."""
    import uvicorn

    settings = _load_settings(
        config,
        container_name=container_name,
        es_host=es_host,
        es_port=es_port,
        es_size=es_size,
        namespace=namespace,
        interval=interval,
        listen_addr=listen_addr,
    )
    configure_from_settings(settings)

    from hyperlook.api.dependencies import use_settings

    use_settings(settings)
    from hyperlook.app import app as fastapi_app

    host, port = settings.listen_host_port
    uvicorn.run(fastapi_app, host=host, port=port, log_config=None)


@app.command()
def query(
    config: Optional[Path] = ConfigOption,
    container_name: Optional[str] = ContainerOption,
    namespace: Optional[str] = NamespaceOption,
) -> None:
    """Print the query document sent to the log store."""
    from hyperlook.search.query import build_query

    settings = _load_settings(config, container_name=container_name, namespace=namespace)
    document = build_query(settings.namespace, settings.container_name).to_dict()
    typer.echo(json.dumps(document, indent=2))


@app.command("poll-once")
def poll_once(
    config: Optional[Path] = ConfigOption,
    container_name: Optional[str] = ContainerOption,
    es_host: Optional[str] = AddrOption,
    es_port: Optional[int] = PortOption,
    es_size: Optional[int] = SizeOption,
    namespace: Optional[str] = NamespaceOption,
) -> None:
    """Run a single poll cycle and print its statistics."""
    from hyperlook.analysis.analyzer import LogAnalyzer
    from hyperlook.analysis.dedupe import SeenWindow
    from hyperlook.core.metrics import MetricsRegistry
    from hyperlook.poller import Poller
    from hyperlook.search.client import LogStoreClient

    settings = _load_settings(
        config,
        container_name=container_name,
        es_host=es_host,
        es_port=es_port,
        es_size=es_size,
        namespace=namespace,
    )
    configure_from_settings(settings)
    metrics = MetricsRegistry(include_process=False)
    client = LogStoreClient(timeout=settings.request_timeout, strict_status=settings.strict_status)
    poller = Poller(
        settings=settings,
        client=client,
        analyzer=LogAnalyzer(metrics, SeenWindow(settings.window_capacity)),
        sink=metrics,
    )
    try:
        stats = poller.run_once()
    except HyperlookError as exc:
        typer.echo(f"Poll failed: {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        client.close()
    typer.echo(json.dumps(stats.to_dict(), indent=2))


if __name__ == "__main__":
    app()

"""
opentelemetry-infinity CLI.

Usage:
    opentelemetry-infinity run [--debug] [--server_host HOST] [--server_port PORT]

Resolves configuration, builds the reporter, constructs the installed
service and runs it under the lifecycle coordinator.

Exit codes:
    0 - Clean shutdown
    1 - Configuration decode failure or service start failure
"""

import asyncio
import sys
from importlib.metadata import entry_points
from typing import Any, Optional

import click
from click.core import ParameterSource

from otlpinf.config import FlagOverrides, resolve_config
from otlpinf.domain.exceptions import (
    ConfigDecodeError,
    ServiceNotFoundError,
    ServiceStartError,
)
from otlpinf.domain.service import ServiceFactory
from otlpinf.infrastructure.lifecycle import LifecycleCoordinator
from otlpinf.reporter import create_reporter

SERVICE_ENTRY_POINT_GROUP = "otlpinf.services"


def load_service_factory(group: str = SERVICE_ENTRY_POINT_GROUP) -> ServiceFactory:
    """
    Load the installed service factory.

    The entry point named "default" wins; otherwise the first by name.

    Args:
        group: Entry point group to search

    Returns:
        Service factory callable

    Raises:
        ServiceNotFoundError: If nothing is registered in the group
    """
    found = sorted(entry_points(group=group), key=lambda ep: ep.name)
    if not found:
        raise ServiceNotFoundError(group)

    for ep in found:
        if ep.name == "default":
            return ep.load()
    return found[0].load()


def run_service(
    overrides: FlagOverrides,
    service_factory: Optional[ServiceFactory] = None,
) -> int:
    """
    Run the service until shutdown.

    Args:
        overrides: Values given explicitly on the command line
        service_factory: Factory building the service (installed one if None)

    Returns:
        Process exit code
    """
    try:
        config = resolve_config(overrides)
    except ConfigDecodeError as e:
        # No reporter yet
        click.echo(str(e), err=True)
        return 1

    reporter = create_reporter(config.otlp_inf.debug)
    try:
        try:
            factory = service_factory or load_service_factory()
            service = factory(reporter, config)
        except Exception as e:
            reporter.error("otlpinf start up error", context="Startup", error=str(e))
            return 1

        reporter.info(
            "otlpinf starting",
            context="Startup",
            version=config.version,
            server_host=config.otlp_inf.server_host,
            server_port=config.otlp_inf.server_port,
        )

        coordinator = LifecycleCoordinator(service, reporter)
        try:
            asyncio.run(coordinator.run())
        except ServiceStartError:
            return 1

        return 0
    finally:
        reporter.sync()


def _given(ctx: click.Context, name: str, value: Any) -> Any:
    """Return the flag value only if it was set on the command line."""
    source = ctx.get_parameter_source(name)
    if source in (None, ParameterSource.DEFAULT, ParameterSource.DEFAULT_MAP):
        return None
    return value


def create_cli(service_factory: Optional[ServiceFactory] = None) -> click.Group:
    """
    Build the command group.

    Args:
        service_factory: Factory building the service (installed one if None)

    Returns:
        Root click group
    """

    @click.group(name="opentelemetry-infinity")
    def cli():
        """opentelemetry-infinity."""

    @cli.command()
    @click.option(
        "--debug",
        "-d",
        is_flag=True,
        default=False,
        help="Enable verbose (debug level) output",
    )
    @click.option(
        "--server_host",
        "-a",
        default="localhost",
        show_default=True,
        help="Define REST Host",
    )
    @click.option(
        "--server_port",
        "-p",
        type=click.IntRange(min=0),
        default=10222,
        show_default=True,
        help="Define REST Port",
    )
    @click.pass_context
    def run(ctx, debug, server_host, server_port):
        """Run opentelemetry-infinity."""
        overrides = FlagOverrides(
            debug=_given(ctx, "debug", debug),
            server_host=_given(ctx, "server_host", server_host),
            server_port=_given(ctx, "server_port", server_port),
        )
        sys.exit(run_service(overrides, service_factory))

    return cli


cli = create_cli()


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()

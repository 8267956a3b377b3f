"""
Service contract consumed by the lifecycle coordinator.

The service itself is implemented elsewhere and installed through the
``otlpinf.services`` entry point group. The coordinator only relies on
``start(ctx)`` and ``stop(ctx)``; either may be a coroutine function.
"""

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from otlpinf.config.settings import Config
    from otlpinf.infrastructure.lifecycle.root_context import RootContext
    from otlpinf.reporter.system_reporter import SystemReporter


@runtime_checkable
class Service(Protocol):
    """Opaque service handle with start/stop lifecycle methods."""

    def start(self, ctx: "RootContext") -> Any:
        """
        Bring the service up.

        May return immediately or run until told to stop. Raising
        means the service failed to start.
        """
        ...

    def stop(self, ctx: "RootContext") -> Any:
        """Best-effort graceful shutdown. Return value is ignored."""
        ...


ServiceFactory = Callable[["SystemReporter", "Config"], Service]

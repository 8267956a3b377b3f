"""
Lifecycle coordinator.

Handles:
- Service start
- Signal registration (SIGINT, SIGTERM)
- Ordered stop: service stop -> context cancel -> completion signal
- Clean exit coordination

SIGKILL cannot be intercepted by a process and is not registered; it
terminates the process without running any of the sequence below.
"""

import asyncio
import inspect
import signal
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from otlpinf.domain.exceptions import ServiceStartError
from otlpinf.domain.service import Service
from otlpinf.infrastructure.lifecycle.completion_signal import CompletionSignal
from otlpinf.infrastructure.lifecycle.root_context import RootContext
from otlpinf.reporter import SystemReporter

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LifecycleState(Enum):
    """Lifecycle state enum."""

    INIT = "init"
    RUNNING = "running"
    STOPPING = "stopping"
    TERMINATED = "terminated"


async def _invoke(func: Callable, *args: Any) -> Any:
    """
    Call a sync or async service method.

    Plain functions run in a worker thread so a blocking call never
    stalls the event loop that dispatches signals.
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args)

    result = await asyncio.to_thread(func, *args)
    if inspect.isawaitable(result):
        return await result
    return result


class LifecycleCoordinator:
    """
    Runs a service until a termination signal arrives.

    Coordinates the sequence:
    1. Install signal handlers and start the signal watcher
    2. Start the service
    3. On signal: stop the service with the still-live root context
    4. Cancel the root context
    5. Watcher observes cancellation and writes the completion signal
    6. run() returns

    If the service fails to start, no stop is attempted and
    ServiceStartError is raised. A start call that raises once a stop is
    already under way is treated as part of the shutdown.

    Attributes:
        state: Current lifecycle state
        ctx: Root context lent to the service and the watcher
        completion: One-shot signal written by the watcher on exit
        stop_calls: Number of service stop invocations
    """

    def __init__(
        self,
        service: Service,
        reporter: SystemReporter,
        signals: Sequence[int] = HANDLED_SIGNALS,
        routine: str = "mainRoutine",
    ):
        """
        Initialize lifecycle coordinator.

        Args:
            service: Service handle exposing start(ctx) and stop(ctx)
            reporter: Process reporter
            signals: Signals that trigger a graceful stop
            routine: Diagnostic name of the root routine
        """
        self.service = service
        self.signals = tuple(signals)

        self.state = LifecycleState.INIT
        self.ctx = RootContext(routine=routine)
        self.completion = CompletionSignal()
        self.stop_calls = 0
        self.started_at: Optional[datetime] = None
        self.stopped_at: Optional[datetime] = None

        self.reporter = reporter.bind(routine=routine)

        self._signal_queue: Optional[asyncio.Queue] = None
        self._watcher: Optional[asyncio.Task] = None
        self._loop_handlers: List[int] = []
        self._original_handlers: Dict[int, Any] = {}

    # ================================================================
    # Signal handling
    # ================================================================

    def notify_signal(self, signum: int) -> None:
        """
        Hand a received signal to the watcher.

        Must be called from the event loop thread.

        Args:
            signum: Signal number
        """
        if self._signal_queue is not None:
            self._signal_queue.put_nowait(signum)

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Register signal handlers on the running loop.

        Falls back to signal.signal where the loop does not support
        signal handlers, preserving original handlers for restoration.

        Args:
            loop: Running event loop
        """
        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.notify_signal, sig)
                self._loop_handlers.append(sig)
            except NotImplementedError:
                self._original_handlers[sig] = signal.getsignal(sig)
                signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(
                        self.notify_signal, signum
                    ),
                )

    def restore_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Remove installed handlers and restore the originals.

        Args:
            loop: Event loop the handlers were registered on
        """
        for sig in self._loop_handlers:
            loop.remove_signal_handler(sig)
        self._loop_handlers.clear()

        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    # ================================================================
    # Lifecycle
    # ================================================================

    async def run(self) -> None:
        """
        Start the service and block until shutdown has completed.

        Raises:
            ServiceStartError: If the service start call raised
        """
        loop = asyncio.get_running_loop()
        self._signal_queue = asyncio.Queue()
        self.setup_signal_handlers(loop)

        try:
            self._watcher = asyncio.create_task(self._watch_signals())
            self.state = LifecycleState.RUNNING
            self.started_at = datetime.now(timezone.utc)

            try:
                await _invoke(self.service.start, self.ctx)
            except Exception as e:
                if self._shutdown_in_progress():
                    # start ended because of stop; let the watcher finish
                    self.reporter.debug(
                        "otlpinf start ended during shutdown",
                        context="Lifecycle",
                        error=str(e),
                    )
                    await self.completion.wait()
                    return

                self.reporter.error(
                    "otlpinf startup error", context="Lifecycle", error=str(e)
                )
                await self._cancel_watcher()
                self.state = LifecycleState.TERMINATED
                raise ServiceStartError(e) from e

            await self.completion.wait()
        finally:
            self.restore_signal_handlers(loop)

    async def _watch_signals(self) -> None:
        """
        Wait for a stop signal or root context cancellation.

        Cancellation wins when both are pending, so signals that arrive
        while the service is stopping never trigger a second stop.
        """
        while True:
            if self.ctx.cancelled():
                self.reporter.warning(
                    f"{self.ctx.routine} context cancelled", context="Lifecycle"
                )
                self.state = LifecycleState.TERMINATED
                self.stopped_at = datetime.now(timezone.utc)
                self.completion.set()
                return

            signum = await self._next_signal()
            if signum is None:
                continue

            self.reporter.warning(
                "stop signal received, stopping otlpinf",
                context="Lifecycle",
                signal=signal.Signals(signum).name,
            )
            self.state = LifecycleState.STOPPING
            await self._stop_service()
            self.ctx.cancel()

    async def _next_signal(self) -> Optional[int]:
        """
        Wait for the next signal.

        Returns:
            Signal number, or None if the root context was cancelled first
        """
        get_signal = asyncio.ensure_future(self._signal_queue.get())
        cancelled = asyncio.ensure_future(self.ctx.wait())

        try:
            await asyncio.wait(
                {get_signal, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for future in (get_signal, cancelled):
                if not future.done():
                    future.cancel()

        if cancelled.done() and not cancelled.cancelled():
            return None
        return get_signal.result()

    async def _stop_service(self) -> None:
        """Stop the service; failures are logged and shutdown continues."""
        self.stop_calls += 1
        try:
            await _invoke(self.service.stop, self.ctx)
        except Exception as e:
            self.reporter.exception(
                "otlpinf stop error", context="Lifecycle", error=str(e)
            )

    def _shutdown_in_progress(self) -> bool:
        """Check if a stop or cancellation has already been triggered."""
        return self.ctx.cancelled() or self.state in (
            LifecycleState.STOPPING,
            LifecycleState.TERMINATED,
        )

    async def _cancel_watcher(self) -> None:
        """Tear down the watcher task without writing the completion signal."""
        if self._watcher is None:
            return

        self._watcher.cancel()
        try:
            await self._watcher
        except asyncio.CancelledError:
            pass

    # ================================================================
    # Status
    # ================================================================

    def get_lifecycle_info(self) -> dict:
        """
        Get lifecycle status information.

        Returns:
            Dictionary with lifecycle status details
        """
        return {
            "state": self.state.value,
            "routine": self.ctx.routine,
            "context_cancelled": self.ctx.cancelled(),
            "completed": self.completion.is_set(),
            "stop_calls": self.stop_calls,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "stopped_at": self.stopped_at.isoformat() if self.stopped_at else None,
        }

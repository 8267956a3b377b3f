"""
Root context: the process-wide "keep running" handle.
"""

import asyncio


class RootContext:
    """
    Cancellable scope shared by the coordinator, the watcher and the service.

    Cancellation is one-way and idempotent. The ``routine`` tag is
    diagnostic metadata emitted with lifecycle log records.

    Attributes:
        routine: Name of the routine owning this scope
    """

    def __init__(self, routine: str = "mainRoutine"):
        self.routine = routine
        self._cancelled = asyncio.Event()
        self._cancel_count = 0

    def cancel(self) -> bool:
        """
        Cancel the scope.

        Returns:
            True for the effective cancellation, False if already cancelled
        """
        if self._cancelled.is_set():
            return False
        self._cancel_count += 1
        self._cancelled.set()
        return True

    def cancelled(self) -> bool:
        """Check if the scope has been cancelled."""
        return self._cancelled.is_set()

    @property
    def cancel_count(self) -> int:
        """Number of effective cancellations (0 or 1)."""
        return self._cancel_count

    async def wait(self) -> None:
        """Block until the scope is cancelled."""
        await self._cancelled.wait()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled() else "live"
        return f"RootContext(routine={self.routine!r}, {state})"

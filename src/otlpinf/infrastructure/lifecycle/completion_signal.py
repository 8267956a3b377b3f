"""
One-shot completion signal.
"""

import asyncio


class CompletionSignal:
    """
    Single-slot signal telling the main routine that teardown finished.

    Exactly one write is accepted; later writes are rejected.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._writes = 0

    def set(self) -> bool:
        """
        Write the signal.

        Returns:
            True on the first write, False if already written
        """
        if self._event.is_set():
            return False
        self._writes += 1
        self._event.set()
        return True

    def is_set(self) -> bool:
        """Check if the signal has been written."""
        return self._event.is_set()

    @property
    def writes(self) -> int:
        """Number of accepted writes (0 or 1)."""
        return self._writes

    async def wait(self) -> None:
        """Block until the signal is written."""
        await self._event.wait()

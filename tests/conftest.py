"""
Test fixtures and configuration.
"""

import asyncio
import io
import json
from typing import Dict, List, Optional

import pytest

from otlpinf.config.settings import config_keys, env_var_name
from otlpinf.reporter import SystemReporter, create_reporter


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """
    Run each test without otlpinf variables and outside any .env file.
    """
    for key in config_keys():
        monkeypatch.delenv(env_var_name(key), raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def log_stream() -> io.StringIO:
    """In-memory sink for reporter output."""
    return io.StringIO()


@pytest.fixture
def reporter(log_stream) -> SystemReporter:
    """Debug-level reporter writing to log_stream."""
    return create_reporter(debug=True, stream=log_stream)


def read_records(stream: io.StringIO) -> List[Dict]:
    """Parse JSON lines written to stream."""
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class FakeService:
    """
    Recording service double.

    Records every lifecycle call together with the root context state
    observed at call time.
    """

    def __init__(
        self,
        start_error: Optional[Exception] = None,
        stop_error: Optional[Exception] = None,
        block_until_stopped: bool = False,
    ):
        self.start_error = start_error
        self.stop_error = stop_error
        self.block_until_stopped = block_until_stopped

        self.calls: List[tuple] = []
        self.started = asyncio.Event()
        self.stopped = asyncio.Event()
        self.release_stop: Optional[asyncio.Event] = None

    @property
    def stop_calls(self) -> int:
        return sum(1 for name, _ in self.calls if name == "stop")

    async def start(self, ctx):
        self.calls.append(("start", ctx.cancelled()))
        if self.start_error is not None:
            raise self.start_error
        self.started.set()
        if self.block_until_stopped:
            await self.stopped.wait()

    async def stop(self, ctx):
        self.calls.append(("stop", ctx.cancelled()))
        if self.release_stop is not None:
            await self.release_stop.wait()
        self.stopped.set()
        if self.stop_error is not None:
            raise self.stop_error

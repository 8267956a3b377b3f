"""
Service lifecycle management.

Handles service start and graceful shutdown on termination signals.
"""

from otlpinf.infrastructure.lifecycle.completion_signal import CompletionSignal
from otlpinf.infrastructure.lifecycle.lifecycle_coordinator import (
    HANDLED_SIGNALS,
    LifecycleCoordinator,
    LifecycleState,
)
from otlpinf.infrastructure.lifecycle.root_context import RootContext

__all__ = [
    "HANDLED_SIGNALS",
    "CompletionSignal",
    "LifecycleCoordinator",
    "LifecycleState",
    "RootContext",
]

"""
opentelemetry-infinity process entry point.

Resolves configuration, builds the structured logger and drives the
service lifecycle until a termination signal arrives.
"""

__version__ = "0.1.0"

"""
Structured logging for otlpinf.
"""

from otlpinf.reporter.system_reporter import SystemReporter, create_reporter

__all__ = ["SystemReporter", "create_reporter"]

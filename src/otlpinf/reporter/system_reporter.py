"""
System Reporter - Structured JSON logging for otlpinf.

Provides SystemReporter, a leveled logger that writes one JSON object per
line to stdout. Records carry an ISO-8601 timestamp, level, logger name,
call site, message and arbitrary key-value fields.

Rendering is done by structlog on top of a stdlib logging logger, so the
level gate and the output stream stay under stdlib control.
"""

import copy
import logging
import sys
from typing import Any, Dict, Optional, TextIO

import structlog

# Modules skipped when resolving the caller of a log call
_INTERNAL_MODULES = ["otlpinf.reporter"]


def _add_caller(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Collapse call-site parameters into a single ``caller`` field."""
    filename = event_dict.pop("filename", None)
    lineno = event_dict.pop("lineno", None)
    if filename is not None:
        event_dict["caller"] = f"{filename}:{lineno}"
    return event_dict


class SystemReporter:
    """
    Structured logger with a fixed minimum level.

    Example:
        reporter = create_reporter(debug=False)
        reporter.info("Server listening", context="Startup", port=10222)
        reporter.sync()
    """

    def __init__(
        self,
        name: str = "otlpinf",
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
    ) -> None:
        """
        Initialize SystemReporter.

        Args:
            name: Logger name (emitted in every record)
            level: Minimum stdlib logging level
            stream: Output stream (defaults to stdout)
        """
        self.name = name
        self.level = level
        self._init_logger(name, level, stream or sys.stdout)
        self._log = structlog.wrap_logger(
            self.logger,
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.processors.CallsiteParameterAdder(
                    parameters=[
                        structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                    ],
                    additional_ignores=_INTERNAL_MODULES,
                ),
                _add_caller,
                structlog.processors.format_exc_info,
                structlog.processors.EventRenamer("msg"),
                structlog.processors.JSONRenderer(sort_keys=False),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
        )

    def _init_logger(self, name: str, level: int, stream: TextIO) -> None:
        """
        Initialize stdlib logger with a single stream handler.

        Args:
            name: Logger name
            level: Python logging level
            stream: Destination stream
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers.clear()
        self.logger.propagate = False

        # structlog renders the full JSON line
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(handler)

    def bind(self, **fields: Any) -> "SystemReporter":
        """
        Return a reporter sharing this sink with extra fields on every record.

        Args:
            **fields: Key-value pairs added to each record

        Returns:
            Bound SystemReporter
        """
        bound = copy.copy(self)
        bound._log = self._log.bind(**fields)
        return bound

    def is_enabled_for(self, level: int) -> bool:
        """Check if records at ``level`` are emitted."""
        return self.logger.isEnabledFor(level)

    def sync(self) -> None:
        """Flush all handlers."""
        for handler in self.logger.handlers:
            handler.flush()

    # Core logging methods
    def debug(self, msg: str, context: str = "system", **fields: Any) -> None:
        """Log debug message."""
        self._log.debug(msg, context=context, **fields)

    def info(self, msg: str, context: str = "system", **fields: Any) -> None:
        """Log info message."""
        self._log.info(msg, context=context, **fields)

    def warning(self, msg: str, context: str = "system", **fields: Any) -> None:
        """Log warning message."""
        self._log.warning(msg, context=context, **fields)

    def error(self, msg: str, context: str = "system", **fields: Any) -> None:
        """Log error message."""
        self._log.error(msg, context=context, **fields)

    def critical(self, msg: str, context: str = "system", **fields: Any) -> None:
        """Log critical message."""
        self._log.critical(msg, context=context, **fields)

    def exception(self, msg: str, context: str = "system", **fields: Any) -> None:
        """Log error message with the active exception's traceback."""
        self._log.error(msg, context=context, exc_info=True, **fields)


def create_reporter(
    debug: bool,
    name: str = "otlpinf",
    stream: Optional[TextIO] = None,
) -> SystemReporter:
    """
    Build the process-wide reporter.

    Args:
        debug: Emit debug records when True, else start at info
        name: Logger name
        stream: Output stream (defaults to stdout)

    Returns:
        Configured SystemReporter
    """
    level = logging.DEBUG if debug else logging.INFO
    return SystemReporter(name=name, level=level, stream=stream)

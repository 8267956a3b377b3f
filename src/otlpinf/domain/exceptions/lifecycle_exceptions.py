"""
Service lifecycle exceptions.
"""

from otlpinf.domain.exceptions.config_exceptions import OtlpInfError


class ServiceStartError(OtlpInfError):
    """Raised when the service fails to come up."""

    def __init__(self, cause: Exception):
        """
        Initialize ServiceStartError.

        Args:
            cause: Exception raised by the service start call
        """
        super().__init__(f"otlpinf startup error: {cause}")
        self.cause = cause


class ServiceNotFoundError(OtlpInfError):
    """Raised when no service factory is installed."""

    def __init__(self, group: str):
        """
        Initialize ServiceNotFoundError.

        Args:
            group: Entry point group that was searched
        """
        super().__init__(f"No service registered in entry point group '{group}'")
        self.group = group

"""
Configuration exceptions.
"""


class OtlpInfError(Exception):
    """Base exception for otlpinf errors."""

    pass


class ConfigDecodeError(OtlpInfError):
    """Raised when merged configuration does not match the expected shape."""

    def __init__(self, cause: Exception):
        """
        Initialize ConfigDecodeError.

        Args:
            cause: Underlying decode/validation error
        """
        super().__init__(f"opentelemetry-infinity start up error (config): {cause}")
        self.cause = cause

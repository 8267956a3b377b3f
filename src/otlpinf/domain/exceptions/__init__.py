"""
Domain exceptions for otlpinf.
"""

from otlpinf.domain.exceptions.config_exceptions import (
    ConfigDecodeError,
    OtlpInfError,
)
from otlpinf.domain.exceptions.lifecycle_exceptions import (
    ServiceNotFoundError,
    ServiceStartError,
)

__all__ = [
    "OtlpInfError",
    "ConfigDecodeError",
    "ServiceNotFoundError",
    "ServiceStartError",
]

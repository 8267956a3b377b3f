"""
Configuration for otlpinf.
"""

from otlpinf.config.settings import (
    Config,
    FlagOverrides,
    OtlpInfSettings,
    config_keys,
    env_var_name,
    resolve_config,
)

__all__ = [
    "Config",
    "FlagOverrides",
    "OtlpInfSettings",
    "config_keys",
    "env_var_name",
    "resolve_config",
]

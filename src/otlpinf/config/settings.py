"""
Configuration management for otlpinf.

Layered configuration built on pydantic-settings.
Priority: CLI flags > environment variables > .env file > defaults

Environment variable names are derived from dotted configuration keys:
upper-cased, with dots replaced by underscores
(``otlp_inf.server_port`` -> ``OTLP_INF_SERVER_PORT``).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from otlpinf import __version__
from otlpinf.domain.exceptions import ConfigDecodeError

ENV_FILE = ".env"

# Top-level fields that are fixed at build time
_BUILD_FIELDS = ("version",)


class OtlpInfSettings(BaseModel):
    """Settings under the ``otlp_inf`` key."""

    model_config = ConfigDict(frozen=True)

    debug: bool = Field(
        default=False,
        description="Enable verbose (debug level) output",
    )
    server_host: str = Field(default="localhost", description="REST host")
    server_port: NonNegativeInt = Field(default=10222, description="REST port")


class Config(BaseSettings):
    """
    otlpinf configuration schema.

    Loads configuration from:
    1. Init kwargs (explicit CLI flags, highest priority)
    2. Environment variables
    3. .env file in the working directory
    4. Pydantic defaults (lowest priority)

    Instances are frozen once constructed.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    version: str = Field(default=__version__, description="Build version")
    otlp_inf: OtlpInfSettings = Field(default_factory=OtlpInfSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, DottedEnvSettingsSource(settings_cls))


def env_var_name(key: str) -> str:
    """
    Map a dotted configuration key to its environment variable name.

    Args:
        key: Dotted key (e.g. "otlp_inf.server_port")

    Returns:
        Environment variable name (e.g. "OTLP_INF_SERVER_PORT")
    """
    return key.replace(".", "_").upper()


def config_keys(model: Type[BaseModel] = Config, prefix: str = "") -> List[str]:
    """
    List the dotted keys that can be overridden from the environment.

    Nested models are flattened; build-time fields are skipped.

    Args:
        model: Model class to walk
        prefix: Dotted prefix of the model within the root config

    Returns:
        Dotted keys in field declaration order
    """
    keys = []
    for name, field in model.model_fields.items():
        if not prefix and name in _BUILD_FIELDS:
            continue
        annotation = field.annotation
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            keys.extend(config_keys(annotation, f"{prefix}{name}."))
        else:
            keys.append(f"{prefix}{name}")
    return keys


class DottedEnvSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source reading dotted keys from the environment.

    Process environment wins over values from the .env file.
    Values are handed to pydantic as raw strings and decoded there.
    """

    def _environ(self) -> Dict[str, Optional[str]]:
        environ: Dict[str, Optional[str]] = {}
        env_file = self.config.get("env_file")
        if env_file and Path(env_file).is_file():
            environ.update(
                dotenv_values(env_file, encoding=self.config.get("env_file_encoding"))
            )
        # Empty variables count as unset
        environ.update({name: value for name, value in os.environ.items() if value})
        return environ

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> Tuple[Any, str, bool]:
        # Values are collected per dotted key in __call__
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        environ = self._environ()
        data: Dict[str, Any] = {}

        for key in config_keys(self.settings_cls):
            value = environ.get(env_var_name(key))
            if not value:
                continue

            node = data
            *parents, leaf = key.split(".")
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = value

        return data


@dataclass(frozen=True)
class FlagOverrides:
    """
    Values given explicitly on the command line.

    None means the flag was not given and must not override anything.
    """

    debug: Optional[bool] = None
    server_host: Optional[str] = None
    server_port: Optional[int] = None

    def as_settings(self) -> Dict[str, Any]:
        """
        Build init kwargs for Config from the flags that were given.

        Returns:
            Nested dict under the ``otlp_inf`` key
        """
        given = {
            name: value
            for name, value in (
                ("debug", self.debug),
                ("server_host", self.server_host),
                ("server_port", self.server_port),
            )
            if value is not None
        }
        return {"otlp_inf": given} if given else {}


def resolve_config(overrides: Optional[FlagOverrides] = None) -> Config:
    """
    Resolve the process configuration.

    Priority: flags > environment variables > .env file > defaults

    Args:
        overrides: Explicit command-line values

    Returns:
        Frozen Config instance

    Raises:
        ConfigDecodeError: If merged values do not decode into Config
    """
    init_kwargs = (overrides or FlagOverrides()).as_settings()

    try:
        return Config(version=__version__, **init_kwargs)
    except ValidationError as e:
        raise ConfigDecodeError(e) from e

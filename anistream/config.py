"""Server configuration loaded from defaults and ``ANISTREAM_*`` environment variables."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants.paths import ITEMS_PER_PAGE, STREAM_DIR
from .errors import ConfigError

ENV_PREFIX = "ANISTREAM_"

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ServerConfig(BaseModel):
    """Runtime settings for the stream server."""

    stream_dir: Path = Field(default=STREAM_DIR, description="Directory holding the stream JSON files")
    host: str = Field(default="0.0.0.0", description="Interface to bind to")
    port: int = Field(default=3000, ge=1, le=65535, description="Port to listen on")
    items_per_page: int = Field(default=ITEMS_PER_PAGE, ge=1, description="Episodes per listing page")
    read_workers: int = Field(default=8, ge=1, description="Maximum number of files read concurrently")
    cache: bool = Field(default=False, description="Reuse aggregated episodes while the directory is unchanged")
    log_level: str = Field(default="INFO", description="Logging level name")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _VALID_LOG_LEVELS:
            raise ValueError(f"must be one of {sorted(_VALID_LOG_LEVELS)}")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ServerConfig":
        """
        Build a config from environment variables, then apply explicit overrides.

        Overrides whose value is None are ignored, so CLI options that were not
        given fall back to the environment and then to the defaults.
        """
        environ = os.environ if environ is None else environ
        values: dict = {}

        for name in cls.model_fields:
            env_name = f"{ENV_PREFIX}{name.upper()}"
            if env_name in environ:
                values[name] = environ[env_name]

        if "cache" in values:
            values["cache"] = _parse_bool(f"{ENV_PREFIX}CACHE", values["cache"])

        values.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else "config"
            raise ConfigError(f"{ENV_PREFIX}{field.upper()}: {error['msg']}") from e


def _parse_bool(env_name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{env_name}: expected a boolean, got {raw!r}")

"""Configuration loading from ``haarlab.toml``.

Resolution order:
    1. ``HAARLAB_CONFIG`` environment variable
    2. explicit ``config_path`` argument
    3. ``./haarlab.toml`` then ``~/haarlab.toml``

When no file is found the built-in defaults apply. A file that is named
explicitly (env or argument) but missing is an error.

Example ``haarlab.toml``:

    [basis]
    dtype = "float64"
    cache_size = 16

    [tolerance]
    atol = 1e-9

    [reconstruction]
    strategy = "independent"
    workers = 4
"""

from __future__ import annotations

import os
from typing import Any, Literal, cast

from pydantic import BaseModel, Field, ValidationError, field_validator

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

from haarlab.utils.logging import get_logger

logger = get_logger(__name__)

CONFIG_ENV = "HAARLAB_CONFIG"
CONFIG_FILENAME = "haarlab.toml"


class BasisSettings(BaseModel):
    dtype: Literal["float64", "float32"] = "float64"
    cache_size: int = Field(default=16, ge=1)
    max_dimension: int = Field(default=4096, ge=2)

    @field_validator("max_dimension")
    @classmethod
    def _dyadic(cls, value: int) -> int:
        if value & (value - 1):
            raise ValueError(f"max_dimension must be a power of two, got {value}")
        return value


class ToleranceSettings(BaseModel):
    atol: float = Field(default=1e-9, gt=0.0)


class ReconstructionSettings(BaseModel):
    strategy: Literal["incremental", "independent"] = "incremental"
    workers: int = Field(default=1, ge=1)


class LoggingSettings(BaseModel):
    level: str = "WARNING"


class Settings(BaseModel):
    """Validated package settings."""

    basis: BasisSettings = Field(default_factory=BasisSettings)
    tolerance: ToleranceSettings = Field(default_factory=ToleranceSettings)
    reconstruction: ReconstructionSettings = Field(default_factory=ReconstructionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _resolve_config_path(config_path: str | None) -> str | None:
    """Resolve configuration path from env, explicit path, or defaults."""
    explicit = os.environ.get(CONFIG_ENV) or config_path
    if explicit:
        if not os.path.exists(explicit):
            raise FileNotFoundError(
                f"Config file not found at {explicit}. Set {CONFIG_ENV} or create {CONFIG_FILENAME}"
            )
        return explicit
    candidates = [
        CONFIG_FILENAME,
        os.path.expanduser(f"~/{CONFIG_FILENAME}"),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return None


def load_settings(config_path: str | None = None) -> Settings:
    """Load and validate settings.

    Args:
        config_path: Path to haarlab.toml (auto-detected if None)

    Returns:
        Settings populated from the file, or defaults if no file exists

    Raises:
        FileNotFoundError: If an explicitly named config file is missing
        ValueError: If the file contains invalid values
    """
    resolved = _resolve_config_path(config_path)
    if resolved is None:
        logger.debug("No %s found, using defaults", CONFIG_FILENAME)
        return Settings()

    with open(resolved, "rb") as f:
        raw = cast(dict[str, Any], tomllib.load(f))
    try:
        settings = Settings.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {resolved}: {e}") from e
    logger.debug("Loaded settings from %s", resolved)
    return settings


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next ``get_settings()`` reloads."""
    global _settings
    _settings = None

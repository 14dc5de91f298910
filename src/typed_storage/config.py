"""Configuration management.

Loads from an optional TOML file plus environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from typed_storage.exceptions import ConfigError


def default_root_dir() -> Path:
    return Path.home() / ".typed_storage"


class StorageSettings(BaseSettings):
    """Runtime context handed to :func:`typed_storage.init`.

    Every field can be set from the environment with the ``TYPED_STORAGE_``
    prefix, e.g. ``TYPED_STORAGE_ENCRYPTION_KEY``.

    Attributes:
        engine:          ``"sqlite"`` (durable, multi-process) or ``"memory"``.
        root_dir:        Directory holding one engine file per domain.
        encryption_key:  Passphrase for the encrypted domain.  Opening that
                         domain without one fails.
        kdf_iterations:  PBKDF2 rounds used to derive the cipher key.
        busy_timeout_ms: How long SQLite waits on a lock held by another process.
        log_level:       Level used by the command-line runner.
    """

    engine: Literal["sqlite", "memory"] = "sqlite"
    root_dir: Path = Field(default_factory=default_root_dir)
    encryption_key: SecretStr | None = None
    kdf_iterations: int = Field(default=390_000, ge=1_000)
    busy_timeout_ms: int = Field(default=5_000, ge=0)
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="TYPED_STORAGE_", env_nested_delimiter="__")

    @field_validator("root_dir")
    @classmethod
    def expand_root_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    def passphrase(self) -> str | None:
        if self.encryption_key is None:
            return None
        return self.encryption_key.get_secret_value() or None


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> StorageSettings:
    """Load settings from a TOML file + env vars.

    Values from the file and from *overrides* take precedence over the
    environment; the environment fills whatever they leave unset.

    Args:
        config_path: Path to a TOML config file (optional, ignored if missing).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return StorageSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid storage settings: {exc}") from exc

"""Store configuration with YAML support."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel, field_validator


DEFAULT_CONFIG_FILENAME = "kvdb.yaml"
DB_PATH_ENV_VAR = "KVDB_DB_PATH"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class StoreConfig(BaseSchema):
    """Settings for one kvdb invocation."""

    # Database file, relative to the working directory
    db_path: str = "kvdb.db"

    # Deleting an absent key is reported as a failure
    strict_delete: bool = True

    log_level: str = "CRITICAL"

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_config(yaml_path: str | Path) -> StoreConfig:
    """Load store configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        StoreConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or has invalid fields
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        detail = " ".join(str(e).split())
        raise ValueError(f"Invalid YAML in {yaml_path}: {detail}") from e

    if not data or not isinstance(data, dict):
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

    try:
        return StoreConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: StoreConfig, yaml_path: str | Path) -> None:
    """Save store configuration to YAML file.

    Args:
        config: StoreConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False, indent=2)


def resolve_config(
    config_path: str | Path | None = None,
    db_path: str | None = None,
) -> StoreConfig:
    """Build the effective configuration.

    Later sources win: defaults, the YAML file (``config_path``, or
    ``kvdb.yaml`` in the working directory when present), the ``KVDB_DB_PATH``
    environment variable, then ``db_path``.
    """
    if config_path is not None:
        config = load_config(config_path)
    elif Path(DEFAULT_CONFIG_FILENAME).exists():
        config = load_config(DEFAULT_CONFIG_FILENAME)
    else:
        config = StoreConfig()

    env_db_path = os.environ.get(DB_PATH_ENV_VAR)
    if env_db_path:
        config.db_path = env_db_path
    if db_path:
        config.db_path = db_path
    return config

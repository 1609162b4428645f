"""Runtime settings for the FieldTrack store.

Settings come from an optional YAML file (``FIELDTRACK_CONFIG`` or an explicit
path) validated with pydantic; ``FIELDTRACK_ROOT`` overrides the storage root
so deployments can relocate the master workbook without editing the file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

ROOT_ENV = "FIELDTRACK_ROOT"
CONFIG_ENV = "FIELDTRACK_CONFIG"
DEFAULT_ROOT = Path.home() / "FieldTrack"


class StoreSettings(BaseModel):
    """Validated store configuration."""

    model_config = ConfigDict(extra="ignore")

    root: Path = Field(default=DEFAULT_ROOT)
    master_filename: str = "data.xlsx"
    uploads_dirname: str = "uploads"
    default_page_size: int = Field(default=50, ge=1)
    max_page_size: int = Field(default=500, ge=1)

    @field_validator("master_filename")
    @classmethod
    def _check_master(cls, value: str) -> str:
        name = value.strip()
        if not name.lower().endswith((".xlsx", ".xlsm")):
            raise ValueError("master_filename must end with .xlsx or .xlsm")
        return name

    def resolved_root(self) -> Path:
        return Path(self.root).expanduser().resolve()


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError("Settings file must contain a mapping")
    return data


def load_settings(path: str | Path | None = None) -> StoreSettings:
    """Load settings from *path*, ``$FIELDTRACK_CONFIG`` or defaults."""

    raw: Dict[str, Any] = {}
    config_path = path or os.getenv(CONFIG_ENV)
    if config_path:
        raw = _load_yaml(Path(config_path).expanduser())
    env_root = os.getenv(ROOT_ENV)
    if env_root:
        raw["root"] = env_root
    try:
        return StoreSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc

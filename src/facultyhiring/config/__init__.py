"""Configuration management utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..schemas import AppConfig, load_config

DATABASE_URL_ENV = "FACULTYHIRING_DATABASE_URL"


class ConfigManager:
    """Simple YAML-backed configuration loader."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        path = self._base_path / f"{name}.yaml"
        return read_yaml(path)

    def load_app_config(self, name: str, *, environ: Mapping[str, str] | None = None) -> AppConfig:
        return resolve_config(self.load(name), environ=environ)


def read_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a YAML mapping")
    return loaded


def resolve_config(
    raw: Mapping[str, Any] | None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Validate ``raw`` and apply environment overrides."""
    config = load_config(dict(raw) if raw else None)
    env = os.environ if environ is None else environ
    url = env.get(DATABASE_URL_ENV)
    if url:
        config = config.model_copy(
            update={"database": config.database.model_copy(update={"url": url})}
        )
    return config


__all__ = ["DATABASE_URL_ENV", "ConfigManager", "read_yaml", "resolve_config"]

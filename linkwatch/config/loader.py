"""Configuration loading helpers for linkwatch."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import MonitorConfig

CONFIG_FILENAME = "linkwatch.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None
    config_path: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("LINKWATCH_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        if self.config_path is None:
            self.config_path = self.data_dir / CONFIG_FILENAME
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: MonitorConfig | None = None

    def load(self) -> MonitorConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path
        if path.exists():
            config = MonitorConfig.model_validate(_read_file(path))
        else:
            config = MonitorConfig()
            self.save(config)
        self._cache = config
        return config

    def save(self, config: MonitorConfig) -> None:
        _write_file(self.locator.config_path, config.model_dump(mode="json"))
        self._cache = config

    def database_path(self) -> Path:
        return self.load().resolved_database_path(self.locator.data_dir)


__all__ = ["CONFIG_FILENAME", "ConfigLocator", "ConfigRepository"]

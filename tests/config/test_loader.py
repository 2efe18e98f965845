from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from linkwatch.config import ConfigLocator, ConfigRepository, MonitorConfig


def test_config_locator_uses_env_and_creates_directories(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home"
    monkeypatch.setenv("LINKWATCH_HOME", str(home))
    locator = ConfigLocator()
    assert locator.project_root == home.resolve()
    assert locator.data_dir.exists()
    assert locator.logs_dir.exists()
    assert locator.config_path == locator.data_dir / "linkwatch.yaml"


def test_first_load_writes_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load()
    assert config == MonitorConfig()
    payload = yaml.safe_load(temp_config_repository.locator.config_path.read_text(encoding="utf-8"))
    assert payload["sweep_interval"] == 90
    assert payload["cache_duration"] == config.cache_duration


def test_roundtrip_and_database_path(temp_config_repository: ConfigRepository) -> None:
    config = MonitorConfig(home_url="https://site.example/", sweep_interval=30, database_path="links.db")
    temp_config_repository.save(config)
    fresh = ConfigRepository(temp_config_repository.locator)
    assert fresh.load() == config
    assert fresh.database_path() == temp_config_repository.locator.data_dir / "links.db"


def test_json_config_is_accepted(tmp_path: Path) -> None:
    json_path = tmp_path / "custom.json"
    json_path.write_text('{"sweep_interval": 12, "cache_duration": 5}', encoding="utf-8")
    repository = ConfigRepository(ConfigLocator(config_path=json_path))
    config = repository.load()
    assert config.sweep_interval == 12
    assert config.cache_duration == 86400


def test_non_mapping_config_is_rejected(temp_config_repository: ConfigRepository) -> None:
    temp_config_repository.locator.config_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load()

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from linkwatch.config import DAY_IN_SECONDS, DEFAULT_PREVIEW_PROPERTIES, YEAR_IN_SECONDS, MonitorConfig


def test_defaults_match_reference_behaviour() -> None:
    cfg = MonitorConfig()
    assert cfg.cache_duration == YEAR_IN_SECONDS
    assert cfg.sweep_interval == 90
    assert cfg.request_timeout == 15
    assert cfg.preview_properties == DEFAULT_PREVIEW_PROPERTIES
    assert cfg.effective_error_ttl == YEAR_IN_SECONDS


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (10, DAY_IN_SECONDS),
        (2 * DAY_IN_SECONDS, 2 * DAY_IN_SECONDS),
        (10 * YEAR_IN_SECONDS, YEAR_IN_SECONDS),
        ("172800", 172800),
        (None, YEAR_IN_SECONDS),
    ],
)
def test_cache_duration_is_clamped(raw, expected) -> None:
    assert MonitorConfig(cache_duration=raw).cache_duration == expected


def test_preview_properties_are_normalised() -> None:
    cfg = MonitorConfig(preview_properties="image, Site_Name ,title")
    assert cfg.preview_properties == ["image", "site-name", "title"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"sweep_interval": 0},
        {"request_timeout": -1},
        {"fetch_workers": 0},
        {"error_ttl": 0},
        {"home_url": "localhost"},
    ],
)
def test_invalid_values_are_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        MonitorConfig(**overrides)


def test_error_ttl_override_and_database_path(tmp_path: Path) -> None:
    cfg = MonitorConfig(error_ttl=300, database_path="cache/links.db")
    assert cfg.effective_error_ttl == 300
    assert cfg.resolved_database_path(tmp_path) == (tmp_path / "cache" / "links.db").resolve()
    absolute = MonitorConfig(database_path=tmp_path / "abs.db")
    assert absolute.resolved_database_path(Path("/elsewhere")) == tmp_path / "abs.db"

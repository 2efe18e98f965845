"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DAY_IN_SECONDS, DEFAULT_PREVIEW_PROPERTIES, YEAR_IN_SECONDS, MonitorConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DAY_IN_SECONDS",
    "DEFAULT_PREVIEW_PROPERTIES",
    "MonitorConfig",
    "YEAR_IN_SECONDS",
]

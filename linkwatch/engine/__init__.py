"""Engine components: queue → fetch → correlate → extract."""

from .correlator import ErrorEvent, ResponseCorrelator, ResponseEvent
from .extractor import MetadataExtractor
from .fetcher import Fetcher
from .parser import PreviewParser, trim_words
from .queue import QueueManager
from .urls import QUEUE_KEY_PREFIX, ensure_valid_url, is_valid_url, normalize_url, url_key

__all__ = [
    "ErrorEvent",
    "Fetcher",
    "MetadataExtractor",
    "PreviewParser",
    "QUEUE_KEY_PREFIX",
    "QueueManager",
    "ResponseCorrelator",
    "ResponseEvent",
    "ensure_valid_url",
    "is_valid_url",
    "normalize_url",
    "trim_words",
    "url_key",
]

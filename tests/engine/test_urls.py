import httpx
import pytest

from linkwatch.engine.urls import ensure_valid_url, is_valid_url, normalize_url, url_key
from linkwatch.exceptions import InvalidURL


def test_normalize_lowercases_scheme_and_host_only():
    assert normalize_url(" HTTP://WWW.Example.com/A/B?X=Y#Z ") == "http://www.example.com/A/B?X=Y#Z"


def test_url_key_is_stable_across_equivalent_spellings():
    assert url_key("https://Example.com/a") == url_key("https://example.com/a")
    assert url_key("https://example.com/a") != url_key("https://example.com/A")


@pytest.mark.parametrize(
    ("url", "valid"),
    [
        ("https://example.com", True),
        ("http://127.0.0.1:8080/health", True),
        ("https://example.com:99999/", False),
        ("example.com", False),
        ("javascript:alert(1)", False),
        (None, False),
    ],
)
def test_is_valid_url(url, valid):
    assert is_valid_url(url) is valid


def test_ensure_valid_url_raises_invalid_url():
    with pytest.raises(InvalidURL):
        ensure_valid_url("not-a-url")
    assert ensure_valid_url("HTTPS://EXAMPLE.COM/x") == "https://example.com/x"


def test_non_ascii_urls_are_percent_encoded_like_httpx():
    normalized = normalize_url("https://Example.com/ä?q=ü")
    assert normalized == str(httpx.URL("https://example.com/ä?q=ü"))
    assert normalized.startswith("https://example.com/%C3%A4")
    assert normalize_url(normalized) == normalized
    assert url_key("https://example.com/ä") == url_key(str(httpx.Request("GET", "https://example.com/ä").url))

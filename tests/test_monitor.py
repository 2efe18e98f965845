from __future__ import annotations

import httpx


def _site(request: httpx.Request) -> httpx.Response:
    if request.url.host == "example.com" and request.url.path == "/page":
        return httpx.Response(200, text="<html><head><title>Hello World</title></head></html>")
    if request.url.path == "/missing":
        return httpx.Response(404, text="<title>Not Found</title>")
    raise httpx.ConnectError("name resolution failed", request=request)


def test_pending_then_resolved_after_sweep(monitor_factory) -> None:
    monitor = monitor_factory(_site)
    assert monitor.lookup("https://example.com/page") is None
    entry = monitor.queue.get_entry("https://example.com/page")
    assert entry.status == "pending"
    assert entry.source_url == "https://blog.example.org/"

    report = monitor.sweep()
    assert report.issued == 1
    assert report.wait(timeout=5)

    entry = monitor.lookup("https://example.com/page")
    assert entry.status == 200
    assert entry.preview["title"] == "Hello World"
    assert monitor.get_preview("https://example.com/page") == {"title": "Hello World"}
    assert monitor.is_broken("https://example.com/page") is False


def test_broken_links_and_transport_failures(monitor_factory) -> None:
    monitor = monitor_factory(_site)
    monitor.lookup("https://example.com/missing", "https://blog.example.org/post-1")
    monitor.lookup("https://unreachable.invalid/", "https://blog.example.org/post-1")
    resolved = []
    monitor.on_resolved(resolved.append)

    assert monitor.sweep().wait(timeout=5)

    assert monitor.is_broken("https://example.com/missing")
    assert monitor.is_broken("https://unreachable.invalid/")
    assert monitor.queue.get_entry("https://unreachable.invalid/").status == "error"
    assert sorted(str(entry.status) for entry in resolved) == ["404", "error"]


def test_invalid_url_never_queued(monitor_factory) -> None:
    monitor = monitor_factory(_site)
    assert monitor.lookup("not-a-url") is None
    assert monitor.queue.get_entry("not-a-url") is None
    assert monitor.sweep().issued == 0


def test_pending_lookup_has_no_preview(monitor_factory) -> None:
    monitor = monitor_factory(_site)
    assert monitor.get_preview("https://example.com/page") is None
    assert monitor.get_preview("https://example.com/page") is None
    assert monitor.is_broken("https://example.com/page") is False


def test_resolved_entry_expires_with_cache_duration(monitor_factory, clock) -> None:
    monitor = monitor_factory(_site)
    monitor.lookup("https://example.com/page")
    monitor.sweep().wait(timeout=5)
    clock.advance(monitor.config.cache_duration)
    assert monitor.lookup("https://example.com/page") is None
    assert monitor.queue.get_entry("https://example.com/page").is_pending


def test_uninstall_clears_everything(monitor_factory) -> None:
    monitor = monitor_factory(_site)
    monitor.lookup("https://example.com/page")
    monitor.lookup("https://other.example.net/")
    assert monitor.uninstall() == 2
    assert monitor.queue.list() == ([], 0)

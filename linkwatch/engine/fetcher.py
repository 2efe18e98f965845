"""Fire-and-forget HTTP GETs whose results flow into the response correlator."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import httpx
import structlog

from ..config import MonitorConfig
from ..exceptions import TransportError
from ..logging_conf import component_logger
from .correlator import ResponseCorrelator

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Expires": "0",
}


class Fetcher:
    """Issue GET requests on a worker pool without waiting for them."""

    def __init__(
        self,
        config: MonitorConfig,
        correlator: ResponseCorrelator,
        transport: httpx.BaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.correlator = correlator
        self.logger = logger or component_logger("fetcher")
        headers = dict(NO_CACHE_HEADERS)
        headers["Referer"] = config.home_url
        if config.user_agent:
            headers["User-Agent"] = config.user_agent
        client_kwargs: dict[str, Any] = {
            "follow_redirects": True,
            "timeout": config.request_timeout,
            "headers": headers,
            "verify": config.verify_ssl,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._executor = ThreadPoolExecutor(
            max_workers=config.fetch_workers, thread_name_prefix="linkwatch-fetch"
        )

    def submit(self, url: str) -> Future:
        future = self._executor.submit(self.fetch, url)
        future.add_done_callback(self._log_failure)
        return future

    def fetch(self, url: str) -> httpx.Response | None:
        """Run one GET and hand the outcome to the correlator."""

        try:
            response = self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self.logger.warning("fetch_failed", url=url, error=str(exc))
            self.correlator.process(url, error=TransportError(url, str(exc)))
            return None
        self.logger.debug("fetch_completed", url=url, status=response.status_code)
        return self.correlator.process(url, response)

    def _log_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self.logger.error("fetch_callback_failed", error=str(exc), exc_info=exc)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._client.close()


__all__ = ["Fetcher", "NO_CACHE_HEADERS"]

"""Rate-limited HTTP fetcher shared by all source adapters."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Mapping

import httpx

from redactor.ingestion.errors import TransportError
from redactor.ingestion.models import DelayPolicy

logger = logging.getLogger(__name__)

# Realistic, internally consistent browser header sets. A fetcher keeps one
# identity for its whole lifetime rather than rotating per request.
CHROME_WINDOWS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/137.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "es,en-US;q=0.9,en;q=0.8",
    "sec-ch-ua": '"Google Chrome";v="137", "Chromium";v="137", "Not/A)Brand";v="24"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

FIREFOX_MAC = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:128.0) "
        "Gecko/20100101 Firefox/128.0"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "es-CL,es;q=0.8,en-US;q=0.5,en;q=0.3",
    "DNT": "1",
}

BROWSER_IDENTITIES: tuple[Mapping[str, str], ...] = (CHROME_WINDOWS, FIREFOX_MAC)

NO_DELAY = DelayPolicy()


class RateLimitedFetcher:
    """Wraps an ``httpx.Client`` with per-call delays and a browser identity.

    Non-2xx responses are returned to the caller untouched; only
    network-level failures are raised, as TransportError.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        identity: Mapping[str, str] | None = None,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._timeout = timeout
        self._sleep = sleep
        self.identity: dict[str, str] = dict(
            identity if identity is not None else self._rng.choice(BROWSER_IDENTITIES)
        )

    def __enter__(self) -> RateLimitedFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def delay_seconds(self, delay: DelayPolicy) -> float:
        """Pick the delay for one call under ``delay``."""
        if delay.is_random:
            return self._rng.uniform(delay.min_seconds, delay.max_seconds)
        return delay.min_seconds

    def pause(self, delay: DelayPolicy | None) -> None:
        """Suspend for one delay interval, regardless of its before/after timing."""
        if delay is None:
            return
        seconds = self.delay_seconds(delay)
        if seconds > 0:
            self._sleep(seconds)

    def fetch(
        self,
        url: str,
        *,
        delay: DelayPolicy | None = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue a GET request under the given delay policy.

        Raises TransportError on connection errors and timeouts.
        """
        delay = delay or NO_DELAY
        if delay.when == "before":
            self.pause(delay)

        merged = {**self.identity, **(headers or {})}
        try:
            response = self._client.get(
                url, headers=merged, params=params, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}", url=url) from exc
        finally:
            if delay.when == "after":
                self.pause(delay)

        logger.debug("GET %s -> %d", url, response.status_code)
        return response


def require_success(response: httpx.Response) -> httpx.Response:
    """Raise TransportError unless the response has a 2xx status."""
    if not response.is_success:
        raise TransportError(
            f"GET {response.request.url} returned HTTP {response.status_code}",
            url=str(response.request.url),
            status_code=response.status_code,
        )
    return response

# dk_search/services/health_checker.py

"""Connectivity health checker for the target site's endpoints."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from dk_search.config.settings import Settings
from dk_search.scrapers.browser_session import looks_like_challenge
from dk_search.scrapers.resilient_fetcher import category_page_for

logger = logging.getLogger("dk_search.health")

_PROBE_TERM = "laptop"


@dataclass
class HealthResult:
    """Result of a single endpoint health check."""

    endpoint: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def default_endpoints() -> dict[str, str]:
    """The endpoints the resilience chain depends on."""
    return {
        "search": Settings.search_url(_PROBE_TERM),
        "category": category_page_for(_PROBE_TERM) or Settings.BASE_URL,
        "mobile": Settings.search_url(_PROBE_TERM, mobile=True),
    }


def probe_endpoint(name: str, url: str) -> HealthResult:
    """Probe a single endpoint for connectivity."""
    start = time.monotonic()
    try:
        session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        try:
            resp = session.get(
                url,
                headers={
                    **Settings.DEFAULT_HEADERS,
                    "Referer": Settings.BASE_URL + "/",
                },
                timeout=Settings.HEALTH_TIMEOUT,
            )
        finally:
            session.close()
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                endpoint=name,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        if looks_like_challenge(resp.text):
            return HealthResult(
                endpoint=name,
                status="down",
                latency_ms=elapsed_ms,
                message="Anti-bot challenge page",
            )

        if elapsed_ms > Settings.HEALTH_SLOW_MS:
            return HealthResult(
                endpoint=name,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            endpoint=name,
            status="ok",
            latency_ms=elapsed_ms,
            message="",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            endpoint=name,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


class HealthChecker:
    """Runs concurrent health probes against the site's endpoints."""

    def __init__(self, endpoints: dict[str, str] | None = None) -> None:
        self.endpoints = endpoints or default_endpoints()

    async def check_all(self) -> list[HealthResult]:
        """Probe every endpoint concurrently."""
        tasks = [
            asyncio.to_thread(probe_endpoint, name, url)
            for name, url in self.endpoints.items()
        ]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.endpoint,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results

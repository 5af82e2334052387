# dk_search/scrapers/browser_session.py

"""Browser sessions used by the resilient fetcher.

An engine is one way of rendering a page: ``chromium`` and ``firefox``
drive a real browser through Playwright, ``impersonate`` issues plain
GETs with a browser TLS fingerprint (curl_cffi) and falls back to
cloudscraper. Sessions are acquired through :func:`open_browser_session`,
which tries engines in order and always closes what it opened.
"""

import logging
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Protocol

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from dk_search.config.settings import Settings
from dk_search.exceptions import NavigationError, SessionUnavailableError

logger = logging.getLogger("dk_search.browser")

PLAYWRIGHT_ENGINES: tuple[str, ...] = ("chromium", "firefox")
IMPERSONATE_ENGINE = "impersonate"

# Cloudflare challenge page markers (checked before keyword scan)
_CF_CHALLENGE_MARKERS: tuple[str, ...] = (
    "challenges.cloudflare.com",
    "cdn-cgi/challenge-platform",
    "just a moment",
    "cf-turnstile",
    "cf_chl_opt",
)


def looks_like_challenge(text: str) -> bool:
    """True when *text* looks like an anti-bot page instead of content."""
    if not text:
        return False
    lower = text.lower()
    for marker in _CF_CHALLENGE_MARKERS:
        if marker in lower:
            logger.warning(
                "Cloudflare challenge detected (marker: '%s')", marker
            )
            return True

    # Generic CAPTCHA keyword scan (skip if page has
    # real content to avoid false positives)
    has_body_content = "<body" in lower and len(text) > 5000
    if not has_body_content:
        for keyword in Settings.CAPTCHA_KEYWORDS:
            if keyword in lower:
                logger.warning("CAPTCHA keyword '%s' detected", keyword)
                return True
    return False


class BrowserSession(Protocol):
    """One exclusively owned rendering session."""

    engine: str

    def open(self, url: str, timeout: float) -> None:
        """Navigate to *url*; raise :class:`NavigationError` on failure."""
        ...

    def markup(self) -> str:
        """Return the current page markup."""
        ...

    def close(self) -> None:
        """Release every resource held by the session."""
        ...


class PlaywrightSession:
    """A headless Playwright browser with one context and one page."""

    def __init__(
        self,
        engine: str = "chromium",
        headless: bool = Settings.HEADLESS,
    ) -> None:
        if engine not in PLAYWRIGHT_ENGINES:
            raise SessionUnavailableError(
                f"Unsupported Playwright engine '{engine}'"
            )
        self.engine = engine
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None

        try:
            self._playwright = sync_playwright().start()
            launcher = getattr(self._playwright, engine)
            launch_args: dict[str, Any] = {"headless": headless}
            if engine == "chromium":
                launch_args["args"] = Settings.BROWSER_ARGS
            self._browser = launcher.launch(**launch_args)
            self._context = self._browser.new_context(
                user_agent=Settings.USER_AGENT,
                viewport=Settings.VIEWPORT,
                locale=Settings.LOCALE,
                extra_http_headers={
                    "Accept-Language": (
                        Settings.DEFAULT_HEADERS["Accept-Language"]
                    ),
                },
            )
            self._page = self._context.new_page()
        except Exception as exc:
            self.close()
            raise SessionUnavailableError(
                f"Could not start {engine}: {exc}"
            ) from exc
        logger.debug("Started Playwright %s session", engine)

    def open(self, url: str, timeout: float) -> None:
        try:
            self._page.goto(
                url,
                timeout=timeout * 1000,
                wait_until="domcontentloaded",
            )
        except PlaywrightError as exc:
            raise NavigationError(
                f"{self.engine} navigation to {url} failed: {exc}"
            ) from exc

    def markup(self) -> str:
        try:
            content: str = self._page.content()
        except PlaywrightError as exc:
            raise NavigationError(
                f"{self.engine} could not read page: {exc}"
            ) from exc
        return content

    def close(self) -> None:
        """Close page, context, browser and driver, in that order."""
        for name in ("_page", "_context", "_browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                resource.close()
            except Exception as exc:
                logger.debug(
                    "Ignoring error while closing %s: %s", name, exc
                )
            setattr(self, name, None)
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as exc:
                logger.debug(
                    "Ignoring error while stopping Playwright: %s", exc
                )
            self._playwright = None


class ImpersonatedSession:
    """Plain GETs with a browser TLS fingerprint and a JS-challenge fallback."""

    engine = IMPERSONATE_ENGINE

    def __init__(self) -> None:
        self._session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self._markup = ""
        self._headers: dict[str, str] = {
            **Settings.DEFAULT_HEADERS,
            "User-Agent": Settings.USER_AGENT,
            "Referer": Settings.BASE_URL + "/",
        }

    def _fetch_get(self, url: str, timeout: float) -> str | None:
        """GET with retries; ``None`` when every attempt failed."""
        for attempt in range(Settings.MAX_RETRIES):
            try:
                resp = self._session.get(
                    url,
                    headers=self._headers,
                    timeout=timeout,
                )
                if resp.status_code == 200:
                    return str(resp.text)
                logger.warning(
                    "[impersonate] HTTP %d on attempt %d for %s",
                    resp.status_code,
                    attempt + 1,
                    url,
                )
            except Exception as exc:
                logger.warning(
                    "[impersonate] Request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            time.sleep(Settings.REQUEST_DELAY * (attempt + 1))
        return None

    def _fetch_cloudscraper(self, url: str, timeout: float) -> str | None:
        """Single GET through cloudscraper's challenge solver."""
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url, headers=self._headers, timeout=timeout
            )
            if resp.status_code == 200:
                return str(resp.text)
            logger.warning(
                "[impersonate] cloudscraper HTTP %d for %s",
                resp.status_code,
                url,
            )
        except Exception as exc:
            logger.error(
                "[impersonate] cloudscraper fallback failed: %s",
                exc,
                exc_info=True,
            )
        return None

    def open(self, url: str, timeout: float) -> None:
        self._markup = ""
        text = self._fetch_get(url, timeout)
        if text is None:
            logger.info(
                "[impersonate] curl_cffi exhausted, "
                "falling back to cloudscraper"
            )
            text = self._fetch_cloudscraper(url, timeout)
        if text is None:
            raise NavigationError(f"Could not fetch {url}")
        self._markup = text

    def markup(self) -> str:
        return self._markup

    def close(self) -> None:
        try:
            self._session.close()
        except Exception as exc:
            logger.debug("Ignoring error while closing session: %s", exc)


SessionFactory = Callable[[str], BrowserSession]


def create_session(engine: str) -> BrowserSession:
    """Start a session for *engine*; raise if it cannot start."""
    if engine == IMPERSONATE_ENGINE:
        return ImpersonatedSession()
    if engine in PLAYWRIGHT_ENGINES:
        return PlaywrightSession(engine)
    raise SessionUnavailableError(f"Unknown browser engine '{engine}'")


@contextmanager
def open_browser_session(
    engines: Sequence[str] | None = None,
    factory: SessionFactory = create_session,
) -> Iterator[BrowserSession]:
    """Yield the first session that starts; always close it afterwards.

    Raises :class:`SessionUnavailableError` when no engine starts.
    """
    engines = list(engines or Settings.BROWSER_ENGINES)
    session: BrowserSession | None = None
    for engine in engines:
        try:
            session = factory(engine)
            break
        except Exception as exc:
            logger.warning(
                "Browser engine '%s' unavailable: %s",
                engine,
                exc,
                exc_info=True,
            )

    if session is None:
        raise SessionUnavailableError(
            f"No browser engine could be started (tried {engines})"
        )

    logger.debug("Using browser engine '%s'", session.engine)
    try:
        yield session
    finally:
        session.close()

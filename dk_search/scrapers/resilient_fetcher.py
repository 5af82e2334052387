# dk_search/scrapers/resilient_fetcher.py

"""Fetch products for one search term through a chain of fallbacks.

The chain is: desktop search page, then a matching category page, then
the mobile site's search page. The first attempt that yields products
ends the chain. Every failure along the way is logged and turned into
an empty attempt, so :meth:`ResilientFetcher.fetch` never raises.
"""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass

from dk_search.config.lookups import CATEGORY_PAGES
from dk_search.config.settings import Settings
from dk_search.exceptions import (
    FetchCancelled,
    NavigationError,
    SessionUnavailableError,
)
from dk_search.models.product import Product
from dk_search.scrapers.browser_session import (
    BrowserSession,
    SessionFactory,
    create_session,
    looks_like_challenge,
    open_browser_session,
)
from dk_search.scrapers.page_extractor import PageExtractor

logger = logging.getLogger("dk_search.fetcher")


@dataclass(frozen=True)
class NavigationAttempt:
    """One step of the fallback chain."""

    name: str
    url: str
    settle_delay: float


def category_page_for(term: str) -> str | None:
    """Category listing URL for *term*, or ``None`` when none matches."""
    for pattern, path in CATEGORY_PAGES:
        if pattern.search(term):
            return Settings.BASE_URL + path
    return None


class ResilientFetcher:
    """Run the search, category and mobile attempts for a term."""

    def __init__(
        self,
        extractor: PageExtractor | None = None,
        session_factory: SessionFactory = create_session,
        engines: Sequence[str] | None = None,
        settle_delay: float = Settings.SETTLE_DELAY,
        mobile_settle_delay: float = Settings.MOBILE_SETTLE_DELAY,
        navigation_timeout: float = Settings.NAVIGATION_TIMEOUT,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.extractor = extractor or PageExtractor()
        self._session_factory = session_factory
        self._engines = list(engines or Settings.BROWSER_ENGINES)
        self._settle_delay = settle_delay
        self._mobile_settle_delay = mobile_settle_delay
        self._navigation_timeout = navigation_timeout
        self._cancel_event = cancel_event or threading.Event()

    def attempts_for(self, term: str) -> list[NavigationAttempt]:
        """The ordered fallback chain for *term*."""
        attempts = [
            NavigationAttempt(
                "search", Settings.search_url(term), self._settle_delay
            )
        ]
        category_url = category_page_for(term)
        if category_url:
            attempts.append(
                NavigationAttempt(
                    "category", category_url, self._settle_delay
                )
            )
        attempts.append(
            NavigationAttempt(
                "mobile",
                Settings.search_url(term, mobile=True),
                self._mobile_settle_delay,
            )
        )
        return attempts

    def fetch(self, term: str, limit: int) -> list[Product]:
        """Products for *term*, up to *limit*; empty on total failure."""
        if limit <= 0 or self._cancel_event.is_set():
            return []
        try:
            with open_browser_session(
                self._engines, self._session_factory
            ) as session:
                return self._run_chain(session, term, limit)
        except SessionUnavailableError as exc:
            logger.error("Fetch for '%s' failed closed: %s", term, exc)
        except FetchCancelled:
            logger.info("Fetch for '%s' cancelled", term)
        except Exception as exc:
            logger.error(
                "Unexpected error fetching '%s': %s",
                term,
                exc,
                exc_info=True,
            )
        return []

    def _run_chain(
        self,
        session: BrowserSession,
        term: str,
        limit: int,
    ) -> list[Product]:
        for attempt in self.attempts_for(term):
            self._check_cancelled()
            products = self._attempt(session, attempt, limit)
            if products:
                logger.info(
                    "'%s': %d products from %s attempt (%s)",
                    term,
                    len(products),
                    attempt.name,
                    session.engine,
                )
                return products
            logger.info(
                "'%s': %s attempt returned nothing", term, attempt.name
            )
        return []

    def _attempt(
        self,
        session: BrowserSession,
        attempt: NavigationAttempt,
        limit: int,
    ) -> list[Product]:
        """Navigate, settle and extract; empty list on failure."""
        try:
            session.open(attempt.url, self._navigation_timeout)
            self._settle(attempt.settle_delay)
            markup = session.markup()
        except NavigationError as exc:
            logger.warning("%s attempt failed: %s", attempt.name, exc)
            return []

        if looks_like_challenge(markup):
            logger.warning(
                "%s attempt hit an anti-bot page at %s",
                attempt.name,
                attempt.url,
            )
            return []
        return self.extractor.extract(markup, limit=limit)

    def _settle(self, delay: float) -> None:
        """Let dynamic content render, waking early on cancellation."""
        if delay > 0 and self._cancel_event.wait(delay):
            raise FetchCancelled("cancelled while waiting for page")
        self._check_cancelled()

    def _check_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise FetchCancelled("search cancelled")

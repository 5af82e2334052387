# dk_search/services/search_orchestrator.py

"""Orchestrates expansion, fetching, deduplication and ranking."""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from dk_search.config.settings import Settings
from dk_search.filters.deduplicator import ProductDeduplicator
from dk_search.filters.query_expander import QueryExpander
from dk_search.filters.ranker import RelevanceRanker
from dk_search.filters.text_classifier import TextClassifier
from dk_search.llm.completion_client import build_completion_client
from dk_search.models.product import Product
from dk_search.models.query import CandidateTerm, Query
from dk_search.scrapers.resilient_fetcher import ResilientFetcher

logger = logging.getLogger("dk_search.orchestrator")


class TermFetcher(Protocol):
    """Anything that fetches products for one search term."""

    def fetch(self, term: str, limit: int) -> list[Product]:
        ...


FetcherFactory = Callable[[threading.Event], TermFetcher]


def _default_fetcher(cancel_event: threading.Event) -> TermFetcher:
    return ResilientFetcher(cancel_event=cancel_event)


@dataclass
class SearchResult:
    """Container for one completed search."""

    query: str
    candidate_terms: list[CandidateTerm] = field(
        default_factory=lambda: list[CandidateTerm]()
    )
    products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    total_before_dedup: int = 0
    deduplicated_count: int = 0
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )
    cancelled: bool = False


class SearchOrchestrator:
    """Coordinates query expansion, per-term fetches and ranking."""

    def __init__(
        self,
        expander: QueryExpander | None = None,
        fetcher_factory: FetcherFactory | None = None,
        ranker: RelevanceRanker | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.expander = (
            expander
            if expander is not None
            else QueryExpander(build_completion_client())
        )
        self._fetcher_factory = fetcher_factory or _default_fetcher
        self.ranker = ranker or RelevanceRanker()
        self.max_workers = max(
            1, max_workers or Settings.MAX_CONCURRENT_FETCHES
        )

    # ── Private helpers ──────────────────────────────────

    async def _expand(self, query: Query) -> list[CandidateTerm]:
        """Expand in a worker thread; generic rules on any error."""
        try:
            return await asyncio.to_thread(self.expander.expand, query)
        except Exception as exc:
            logger.error(
                "Query expansion failed for '%s': %s",
                query.text,
                exc,
                exc_info=True,
            )
        try:
            terms = QueryExpander.rule_based_terms(query.text)
        except Exception as exc:
            logger.error("Rule-based expansion failed: %s", exc)
            terms = [Settings.GENERIC_FALLBACK_TERM]
        return QueryExpander.tag_terms(terms[:1])

    async def _fetch_term(
        self,
        candidate: CandidateTerm,
        limit: int,
        cancel_event: threading.Event,
    ) -> list[Product]:
        """Fetch one term in its own thread with its own session."""
        fetcher = self._fetcher_factory(cancel_event)
        products: list[Product] = await asyncio.to_thread(
            fetcher.fetch, candidate.text, limit
        )
        for product in products:
            product.source_strategy_tag = candidate.strategy_tag.value
        return products

    async def _fetch_all(
        self,
        candidates: list[CandidateTerm],
        limit: int,
        cancel_event: threading.Event,
        result: SearchResult,
    ) -> list[Product]:
        """Fetch terms in priority-ordered windows until the pool is full.

        Batches are merged in candidate order, not completion order.
        """
        pool: list[Product] = []
        for start in range(0, len(candidates), self.max_workers):
            if len(pool) >= limit:
                logger.debug(
                    "Result budget met after %d terms", start
                )
                break
            if cancel_event.is_set():
                break

            window = candidates[start:start + self.max_workers]
            batches = await asyncio.gather(
                *(
                    self._fetch_term(c, limit, cancel_event)
                    for c in window
                ),
                return_exceptions=True,
            )
            for candidate, batch in zip(window, batches):
                if isinstance(batch, Exception):
                    result.errors.append(str(batch))
                    logger.error(
                        "Fetch error for term '%s': %s",
                        candidate.text,
                        batch,
                        exc_info=batch,
                    )
                elif isinstance(batch, list):
                    pool.extend(batch)
        return pool

    # ── Public API ───────────────────────────────────────

    async def run(
        self,
        query_text: str,
        limit: int = Settings.DEFAULT_LIMIT,
        override_term: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> SearchResult:
        """Run the full pipeline and report counters alongside products.

        Never raises for search failures: the worst case is an empty
        product list. Cancelling the awaiting task sets the cancel event
        so in-flight fetches stop, then propagates the cancellation.
        """
        cancel_event = cancel_event or threading.Event()
        result = SearchResult(query=query_text)
        if limit <= 0 or not query_text.strip():
            return result

        try:
            query = TextClassifier.build_query(query_text, override_term)
            result.candidate_terms = await self._expand(query)

            pool = await self._fetch_all(
                result.candidate_terms, limit, cancel_event, result
            )
            result.total_before_dedup = len(pool)

            unique, result.deduplicated_count = (
                ProductDeduplicator.deduplicate(pool)
            )
            ranked = self.ranker.rank(
                unique,
                query_text,
                TextClassifier.detect_brands(query_text),
            )
            result.products = ranked[:limit]
        except asyncio.CancelledError:
            cancel_event.set()
            logger.info("Search for '%s' cancelled", query_text)
            raise
        except Exception as exc:
            logger.error(
                "Search failed for '%s': %s",
                query_text,
                exc,
                exc_info=True,
            )
            result.errors.append(str(exc))
            result.products = []

        result.cancelled = cancel_event.is_set()
        logger.info(
            "Search '%s': %d products (%d before dedup, %d removed)",
            query_text,
            len(result.products),
            result.total_before_dedup,
            result.deduplicated_count,
        )
        return result

    async def search(
        self,
        query_text: str,
        limit: int = Settings.DEFAULT_LIMIT,
        override_term: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[Product]:
        """Ranked, deduplicated products for *query_text*, up to *limit*."""
        result = await self.run(
            query_text, limit, override_term, cancel_event
        )
        return result.products

# dk_search/filters/deduplicator.py

"""Product deduplication across candidate-term fetches."""

import logging
import re

from dk_search.models.product import Product

logger = logging.getLogger("dk_search.filters")


class ProductDeduplicator:
    """Remove duplicate products using URL normalisation and name overlap."""

    # Query params and fragments don't affect the product identity
    _STRIP_PARAMS_RE = re.compile(r"[?#].*$")
    _NON_WORD_RE = re.compile(r"[^\u0600-\u06FFa-z0-9\s]")

    # Word-overlap ratio above which two names are the same product
    OVERLAP_THRESHOLD: float = 0.7
    # Names this short must match exactly
    SHORT_NAME_TOKENS: int = 2

    @staticmethod
    def _normalise_url(url: str) -> str:
        """Normalise a product URL for dedup comparison.

        Strips query parameters, fragments, trailing slashes,
        and lowercases the result.
        """
        if not url:
            return ""
        cleaned = ProductDeduplicator._STRIP_PARAMS_RE.sub("", url)
        return cleaned.rstrip("/").lower()

    @staticmethod
    def _normalise_name(name: str) -> str:
        """Lowercase, keep Persian and alphanumerics, collapse whitespace."""
        lowered = (name or "").replace("\u200c", " ").lower()
        kept = ProductDeduplicator._NON_WORD_RE.sub("", lowered)
        return " ".join(kept.split())

    @staticmethod
    def names_match(first: str, second: str) -> bool:
        """True when two normalised names denote the same product."""
        if not first or not second:
            return False
        if first == second:
            return True
        tokens_a = first.split()
        tokens_b = second.split()
        if (
            len(tokens_a) <= ProductDeduplicator.SHORT_NAME_TOKENS
            or len(tokens_b) <= ProductDeduplicator.SHORT_NAME_TOKENS
        ):
            return False
        shared = len(set(tokens_a) & set(tokens_b))
        # relative to the longer name, repeated words included
        overlap = shared / max(len(tokens_a), len(tokens_b))
        return overlap > ProductDeduplicator.OVERLAP_THRESHOLD

    @staticmethod
    def deduplicate(
        products: list[Product],
    ) -> tuple[list[Product], int]:
        """Remove duplicate products, keeping the first one seen.

        Dedup strategy:
        1. Exact URL match (after normalisation).
        2. Near-duplicate names (word overlap above the threshold).

        Returns the deduplicated list and the count of removed dupes.
        """
        if not products:
            return [], 0

        seen_urls: set[str] = set()
        kept_names: list[str] = []
        kept: list[Product] = []
        removed = 0

        for product in products:
            norm_url = ProductDeduplicator._normalise_url(product.url)
            norm_name = ProductDeduplicator._normalise_name(product.name)

            # Check URL-based duplicate
            if norm_url and norm_url in seen_urls:
                removed += 1
                continue

            # Check name-based duplicate
            if any(
                ProductDeduplicator.names_match(norm_name, existing)
                for existing in kept_names
            ):
                removed += 1
                continue

            # New unique product
            if norm_url:
                seen_urls.add(norm_url)
            kept_names.append(norm_name)
            kept.append(product)

        if removed:
            logger.info(
                "Deduplication removed %d duplicate products", removed
            )

        return kept, removed

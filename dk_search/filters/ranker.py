# dk_search/filters/ranker.py

"""Relevance scoring and ordering of deduplicated products."""

import logging
import re
from dataclasses import dataclass, field

from dk_search.config.lookups import BRAND_ALIASES
from dk_search.config.settings import Settings
from dk_search.filters.text_classifier import normalize_text
from dk_search.models.product import Product

logger = logging.getLogger("dk_search.filters")

_RATING_RE = re.compile(r"\d+(?:\.\d+)?")


@dataclass(frozen=True)
class ScoreWeights:
    """Coefficients of the relevance score."""

    query_token: float = Settings.SCORE_QUERY_TOKEN
    brand_match: float = Settings.SCORE_BRAND_MATCH
    price_present: float = Settings.SCORE_PRICE_PRESENT
    rating_multiplier: float = Settings.SCORE_RATING_MULTIPLIER
    strategy_bonus: dict[str, float] = field(
        default_factory=lambda: dict(Settings.SCORE_STRATEGY_BONUS)
    )


def parse_rating(rating: str) -> float | None:
    """Numeric rating from text such as ``"۴٫۵"`` or ``"(۱۲۳) ۴٫۵"``.

    Review counts often share the cell, so only values on the 0-5 scale
    count, and a decimal value wins over a bare integer.
    """
    if not rating or rating == Settings.RATING_PLACEHOLDER:
        return None
    text = normalize_text(rating).replace("٫", ".")
    values = [
        (match.group(), float(match.group()))
        for match in _RATING_RE.finditer(text)
    ]
    in_scale = [(raw, value) for raw, value in values if value <= 5.0]
    if not in_scale:
        return None
    decimals = [value for raw, value in in_scale if "." in raw]
    return decimals[0] if decimals else in_scale[0][1]


class RelevanceRanker:
    """Score products against the query and sort them, best first."""

    def __init__(self, weights: ScoreWeights | None = None) -> None:
        self.weights = weights or ScoreWeights()

    @staticmethod
    def _brand_forms(brands: tuple[str, ...] | list[str]) -> set[str]:
        forms: set[str] = set()
        for brand in brands:
            key = normalize_text(brand)
            forms.add(key)
            forms.update(
                normalize_text(alias)
                for alias in BRAND_ALIASES.get(key, ())
            )
        forms.discard("")
        return forms

    def score(
        self,
        product: Product,
        query_tokens: set[str],
        brand_forms: set[str],
    ) -> float:
        """Relevance score of one product."""
        name = normalize_text(product.name)
        total = 0.0

        total += self.weights.query_token * sum(
            1 for token in query_tokens if token in name
        )
        if any(form in name for form in brand_forms):
            total += self.weights.brand_match
        if product.has_price:
            total += self.weights.price_present
        rating = parse_rating(product.rating)
        if rating is not None:
            total += self.weights.rating_multiplier * rating
        total += self.weights.strategy_bonus.get(
            product.source_strategy_tag, 0.0
        )
        return total

    def rank(
        self,
        products: list[Product],
        query_text: str,
        brands: tuple[str, ...] | list[str] = (),
    ) -> list[Product]:
        """Set ``relevance_score`` on every product and sort descending.

        The sort is stable: equal scores keep their input order.
        """
        query_tokens = set(normalize_text(query_text).split())
        brand_forms = self._brand_forms(brands)
        for product in products:
            product.relevance_score = self.score(
                product, query_tokens, brand_forms
            )
        ranked = sorted(
            products, key=lambda p: p.relevance_score, reverse=True
        )
        if ranked:
            logger.debug(
                "Top product '%s' scored %.1f",
                ranked[0].name,
                ranked[0].relevance_score,
            )
        return ranked

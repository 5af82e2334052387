# dk_search/models/product.py

"""Product data model for inter-module data flow."""

from dataclasses import dataclass

from dk_search.config.settings import Settings


@dataclass
class Product:
    """A single product listing scraped from the target site.

    ``price``, ``rating`` and ``brand`` are display strings and hold a
    placeholder when the page did not provide a value.
    """

    name: str
    url: str
    price: str = Settings.PRICE_PLACEHOLDER
    rating: str = Settings.RATING_PLACEHOLDER
    brand: str = Settings.BRAND_PLACEHOLDER
    image_url: str = ""
    description: str = ""
    source_strategy_tag: str = ""
    relevance_score: float = 0.0

    @property
    def has_price(self) -> bool:
        """True when a real price (not the placeholder) was scraped."""
        return bool(self.price) and (
            Settings.PRICE_PLACEHOLDER not in self.price
        )

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict for JSON output."""
        return {
            "name": self.name,
            "price": self.price,
            "rating": self.rating,
            "brand": self.brand,
            "url": self.url,
            "image": self.image_url,
            "description": self.description,
            "search_strategy": self.source_strategy_tag,
            "relevance_score": self.relevance_score,
        }

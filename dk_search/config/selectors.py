# dk_search/config/selectors.py

"""Selector cascades for Digikala listing pages.

Container strategies are ordered from the most structural to the most
generic. Field cascades are ordered from the most specific marker to
the loosest one; the first selector producing non-empty text wins.
"""

from dk_search.models.selector_strategy import SelectorStrategy

CONTAINER_STRATEGIES: tuple[SelectorStrategy, ...] = (
    SelectorStrategy(
        "product_link",
        'a[data-product-index], a[data-testid="product-card"]',
    ),
    SelectorStrategy(
        "component_card",
        '[data-testid="product-card"], div[class*="ProductCard"], '
        'div[class*="product-list_ProductList__item"]',
    ),
    SelectorStrategy(
        "legacy_box",
        '.c-product-box, div.product-box, div[class*="product-card"]',
    ),
    SelectorStrategy(
        "generic_card",
        'article, div[class*="card"]',
    ),
)

NAME_SELECTORS: tuple[SelectorStrategy, ...] = (
    SelectorStrategy("heading", "h3, h2, h1, h4"),
    SelectorStrategy(
        "title_marker",
        '[data-testid="product-title"], [class*="title"], '
        '[class*="Title"]',
    ),
    SelectorStrategy("name_marker", '[class*="name"], [class*="Name"]'),
)

PRICE_SELECTORS: tuple[SelectorStrategy, ...] = (
    SelectorStrategy(
        "price_testid",
        '[data-testid="price-final"], [data-testid="price"]',
    ),
    SelectorStrategy("price_class", '[class*="price"], [class*="Price"]'),
    SelectorStrategy("toman_text", 'span:-soup-contains("تومان")'),
)

RATING_SELECTORS: tuple[SelectorStrategy, ...] = (
    SelectorStrategy("rating_testid", '[data-testid="rating"]'),
    SelectorStrategy(
        "rating_class",
        '[class*="rating"], [class*="Rating"], [class*="rate"]',
    ),
    SelectorStrategy("star_class", '[class*="star"], [class*="Star"]'),
)

BRAND_SELECTORS: tuple[SelectorStrategy, ...] = (
    SelectorStrategy("brand_testid", '[data-testid="brand"]'),
    SelectorStrategy("brand_class", '[class*="brand"], [class*="Brand"]'),
)

DESCRIPTION_SELECTORS: tuple[SelectorStrategy, ...] = (
    SelectorStrategy(
        "description_class",
        '[class*="description"], [class*="subtitle"]',
    ),
    SelectorStrategy("paragraph", "p"),
)

# Elements that carry a product link inside a container
URL_SELECTORS: tuple[SelectorStrategy, ...] = (
    SelectorStrategy("product_link_testid", '[data-testid="product-link"]'),
    SelectorStrategy("data_url", "[data-href], [data-url]"),
    SelectorStrategy("product_href", 'a[href*="/product/"]'),
)

IMAGE_SELECTOR = SelectorStrategy("image", "img")

# dk_search/scrapers/page_extractor.py

"""Turn a rendered listing page into :class:`Product` records.

Containers are located with the first matching strategy of
:data:`~dk_search.config.selectors.CONTAINER_STRATEGIES`. Each field is
then read through its own selector cascade, and the product URL goes
through a five-step resolution that only accepts product-page links.
Records without a resolvable product URL or a
name are dropped. When no container strategy yields a product, bare
product anchors are used as a last resort.
"""

import logging
import re
from collections.abc import Sequence
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from dk_search.config.selectors import (
    BRAND_SELECTORS,
    CONTAINER_STRATEGIES,
    DESCRIPTION_SELECTORS,
    IMAGE_SELECTOR,
    NAME_SELECTORS,
    PRICE_SELECTORS,
    RATING_SELECTORS,
    URL_SELECTORS,
)
from dk_search.config.settings import Settings
from dk_search.models.product import Product
from dk_search.models.selector_strategy import SelectorStrategy

logger = logging.getLogger("dk_search.extractor")

# Persian script (incl. Persian/Arabic digits and ٬ ٫ ،), ZWNJ,
# Latin alphanumerics, a little punctuation and whitespace.
_DISALLOWED_RE = re.compile(r"[^\u0600-\u06FF\u200cA-Za-z0-9.,\-()/+:%\s]")
_WHITESPACE_RE = re.compile(r"\s+")

_LINK_ATTRS: tuple[str, ...] = ("href", "data-href", "data-url")
_IMAGE_ATTRS: tuple[str, ...] = ("src", "data-src")


def clean_text(text: str | None) -> str:
    """Strip characters outside the allow-list and collapse whitespace."""
    if not text:
        return ""
    text = _DISALLOWED_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


class PageExtractor:
    """Extract products from listing-page markup."""

    def __init__(
        self,
        base_url: str = Settings.BASE_URL,
        mobile_base_url: str = Settings.MOBILE_BASE_URL,
        product_path_pattern: str = Settings.PRODUCT_PATH_PATTERN,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        base = urlsplit(self.base_url)
        self._scheme = base.scheme
        self._netloc = base.netloc.lower()
        self._mobile_netloc = urlsplit(mobile_base_url).netloc.lower()
        self._product_re = re.compile(product_path_pattern)
        self._raw_href_re = re.compile(
            r"""href=["']([^"']*"""
            + product_path_pattern
            + r"""[^"']*)["']"""
        )

    # ── Public API ───────────────────────────────────────

    def extract(
        self,
        markup: str,
        strategies: Sequence[SelectorStrategy] = CONTAINER_STRATEGIES,
        limit: int = Settings.DEFAULT_LIMIT,
    ) -> list[Product]:
        """Return up to *limit* products found in *markup*."""
        if not markup or limit <= 0:
            return []
        soup = BeautifulSoup(markup, "lxml")

        products: list[Product] = []
        for strategy in strategies:
            containers = strategy.match(soup)
            if not containers:
                continue
            logger.debug(
                "Strategy '%s' matched %d containers",
                strategy.name,
                len(containers),
            )
            products = self._from_containers(containers, limit)
            break

        if not products:
            products = self.extract_anchors(soup, limit)
            if products:
                logger.debug(
                    "Last-resort anchor pass found %d products",
                    len(products),
                )
        return products

    def extract_anchors(self, soup: Tag, limit: int) -> list[Product]:
        """Minimal records from bare product anchors."""
        products: list[Product] = []
        seen: set[str] = set()
        for anchor in soup.find_all("a", href=True):
            if len(products) >= limit:
                break
            href = str(anchor.get("href", ""))
            if not self._product_re.search(href):
                continue
            url = self.resolve_url(href)
            name = clean_text(anchor.get_text(" "))
            if not url or not name or url in seen:
                continue
            seen.add(url)
            products.append(Product(name=name, url=url))
        return products

    def resolve_url(self, href: str | None) -> str | None:
        """Absolute base-origin URL for *href*, or ``None`` if off-site."""
        if not href:
            return None
        href = href.strip()
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            return None

        parts = urlsplit(urljoin(self.base_url + "/", href))
        if parts.scheme not in ("http", "https"):
            return None
        netloc = parts.netloc.lower()
        if netloc not in (self._netloc, self._mobile_netloc):
            return None
        return urlunsplit(
            (self._scheme, self._netloc, parts.path, parts.query, "")
        )

    # ── Containers ───────────────────────────────────────

    def _from_containers(
        self,
        containers: list[Tag],
        limit: int,
    ) -> list[Product]:
        products: list[Product] = []
        seen: set[str] = set()
        dropped = 0
        for container in containers:
            if len(products) >= limit:
                break
            product = self._build_product(container)
            if product is None:
                dropped += 1
                continue
            # Nested matches of a loose selector repeat the same link
            if product.url in seen:
                continue
            seen.add(product.url)
            products.append(product)

        if dropped:
            logger.debug(
                "Dropped %d containers without name or URL", dropped
            )
        return products

    def _build_product(self, container: Tag) -> Product | None:
        url = self._container_url(container)
        if not url:
            return None
        name = self._container_name(container)
        if not name:
            return None
        return Product(
            name=name,
            url=url,
            price=(
                self._first_text(container, PRICE_SELECTORS)
                or Settings.PRICE_PLACEHOLDER
            ),
            rating=(
                self._first_text(container, RATING_SELECTORS)
                or Settings.RATING_PLACEHOLDER
            ),
            brand=(
                self._first_text(container, BRAND_SELECTORS)
                or Settings.BRAND_PLACEHOLDER
            ),
            image_url=self._container_image(container),
            description=self._first_text(container, DESCRIPTION_SELECTORS),
        )

    @staticmethod
    def _first_text(
        container: Tag,
        cascade: Sequence[SelectorStrategy],
    ) -> str:
        """First non-empty cleaned text produced by *cascade*."""
        for strategy in cascade:
            for element in strategy.match(container):
                text = clean_text(element.get_text(" "))
                if text:
                    return text
        return ""

    def _container_name(self, container: Tag) -> str:
        name = self._first_text(container, NAME_SELECTORS)
        if name:
            return name
        if container.name == "a":
            return clean_text(container.get_text(" "))
        anchor = container.find("a")
        if isinstance(anchor, Tag):
            return clean_text(anchor.get_text(" "))
        return ""

    def _product_url(self, href: str | None) -> str | None:
        """Resolved URL for *href* when it points at a product page."""
        url = self.resolve_url(href)
        if url and self._product_re.search(urlsplit(url).path):
            return url
        return None

    def _container_url(self, container: Tag) -> str | None:
        # 1. the container itself is a link
        if container.name == "a":
            url = self._product_url(_attr(container, "href"))
            if url:
                return url

        # 2. nearest ancestor link
        ancestor = container.find_parent("a", href=True)
        if isinstance(ancestor, Tag):
            url = self._product_url(_attr(ancestor, "href"))
            if url:
                return url

        # 3. link markers inside the container
        for strategy in URL_SELECTORS:
            for element in strategy.match(container):
                for attr in _LINK_ATTRS:
                    url = self._product_url(_attr(element, attr))
                    if url:
                        return url

        # 4. raw markup scan
        match = self._raw_href_re.search(str(container))
        if match:
            url = self._product_url(match.group(1))
            if url:
                return url

        # 5. any anchor with a product path
        for anchor in container.find_all("a", href=True):
            url = self._product_url(_attr(anchor, "href"))
            if url:
                return url
        return None

    def _container_image(self, container: Tag) -> str:
        image = IMAGE_SELECTOR.first(container)
        if image is None:
            return ""
        for attr in _IMAGE_ATTRS:
            src = _attr(image, attr)
            if src and not src.startswith("data:"):
                return urljoin(self.base_url + "/", src)
        return ""


def _attr(element: Tag, name: str) -> str:
    """String value of an attribute, joining multi-valued ones."""
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)

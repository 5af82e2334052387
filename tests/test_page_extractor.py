# tests/test_page_extractor.py

"""Tests for cascading product extraction from listing markup."""

import unittest

from dk_search.config.settings import Settings
from dk_search.scrapers.page_extractor import PageExtractor, clean_text

PRODUCT_LINK_PAGE = """
<html><body>
  <a data-product-index="1" href="/product/dkp-123/samsung-a54/">
    <img src="https://dkstatic.example/a54.jpg">
    <h3>گوشی موبایل سامسونگ Galaxy A54</h3>
    <div class="price">۱۲,۵۰۰,۰۰۰ تومان</div>
    <div data-testid="rating">۴٫۵</div>
  </a>
  <a data-product-index="2" href="https://m.digikala.com/product/dkp-456/">
    <h3>Galaxy S23</h3>
  </a>
  <a data-product-index="3" href="https://evil.example/product/dkp-9/">
    <h3>Off-site item</h3>
  </a>
  <div class="c-product-box">
    <a href="/product/dkp-999/"><h3>Legacy item</h3></a>
  </div>
</body></html>
"""

COMPONENT_CARD_PAGE = """
<html><body>
  <div data-testid="product-card">
    <div data-url="/product/dkp-77/"></div>
    <h2>Lenovo IdeaPad Slim 3</h2>
    <span class="brand">Lenovo</span>
    <p>Slim laptop for work</p>
  </div>
</body></html>
"""

LEGACY_PAGE = """
<html><body>
  <a href="/product/dkp-5/">
    <div class="product-box"><h3>Sony WH-1000XM5</h3></div>
  </a>
  <div class="product-box">
    <span href="/product/dkp-88/"></span>
    <h3>Raw href item</h3>
  </div>
</body></html>
"""

ANCHORS_ONLY_PAGE = """
<html><body>
  <ul>
    <li><a href="/product/dkp-1/">Phone One</a></li>
    <li><a href="/about-us/">About</a></li>
    <li><a href="/product/dkp-2/">Phone Two</a></li>
    <li><a href="/product/dkp-3/">Phone Three</a></li>
  </ul>
</body></html>
"""


class TestCleanText(unittest.TestCase):
    """clean_text allow-list and whitespace rules."""

    def test_persian_text_kept(self) -> None:
        """Persian letters, digits and separators survive."""
        self.assertEqual(
            clean_text("  قیمت:   ۱۲٬۰۰۰ تومان ★ "),
            "قیمت: ۱۲٬۰۰۰ تومان",
        )

    def test_symbols_removed(self) -> None:
        """Characters outside the allow-list are stripped."""
        self.assertEqual(clean_text("Price $5!"), "Price 5")

    def test_none(self) -> None:
        """None gives an empty string."""
        self.assertEqual(clean_text(None), "")


class TestResolveUrl(unittest.TestCase):
    """PageExtractor.resolve_url origin handling."""

    def setUp(self) -> None:
        """Extractor with default site origins."""
        self.extractor = PageExtractor()

    def test_relative(self) -> None:
        """Relative paths resolve against the base origin."""
        self.assertEqual(
            self.extractor.resolve_url("/product/dkp-1/"),
            "https://www.digikala.com/product/dkp-1/",
        )

    def test_protocol_relative(self) -> None:
        """Scheme-less URLs on the site are accepted."""
        self.assertEqual(
            self.extractor.resolve_url("//www.digikala.com/product/dkp-3/"),
            "https://www.digikala.com/product/dkp-3/",
        )

    def test_mobile_rewritten(self) -> None:
        """Mobile-origin URLs are rewritten, fragments dropped."""
        self.assertEqual(
            self.extractor.resolve_url(
                "https://m.digikala.com/product/dkp-1/?x=1#reviews"
            ),
            "https://www.digikala.com/product/dkp-1/?x=1",
        )

    def test_off_site_rejected(self) -> None:
        """Other origins are unresolvable."""
        self.assertIsNone(
            self.extractor.resolve_url("https://other.com/product/dkp-1/")
        )

    def test_non_links_rejected(self) -> None:
        """Empty, fragment and javascript hrefs are unresolvable."""
        for href in ("", None, "#top", "javascript:void(0)"):
            with self.subTest(href=href):
                self.assertIsNone(self.extractor.resolve_url(href))


class TestExtract(unittest.TestCase):
    """PageExtractor.extract strategy cascade."""

    def setUp(self) -> None:
        """Extractor with default site origins."""
        self.extractor = PageExtractor()

    def test_product_link_strategy_fields(self) -> None:
        """Fields are read through their cascades."""
        products = self.extractor.extract(PRODUCT_LINK_PAGE, limit=10)
        first = products[0]
        self.assertEqual(first.name, "گوشی موبایل سامسونگ Galaxy A54")
        self.assertEqual(
            first.url, "https://www.digikala.com/product/dkp-123/samsung-a54/"
        )
        self.assertEqual(first.price, "۱۲,۵۰۰,۰۰۰ تومان")
        self.assertEqual(first.rating, "۴٫۵")
        self.assertEqual(first.brand, Settings.BRAND_PLACEHOLDER)
        self.assertEqual(first.image_url, "https://dkstatic.example/a54.jpg")

    def test_first_matching_strategy_is_sole_source(self) -> None:
        """Legacy boxes are ignored once product links matched."""
        products = self.extractor.extract(PRODUCT_LINK_PAGE, limit=10)
        names = [p.name for p in products]
        self.assertNotIn("Legacy item", names)

    def test_off_site_dropped_and_mobile_rewritten(self) -> None:
        """Off-site containers vanish, mobile links are rewritten."""
        products = self.extractor.extract(PRODUCT_LINK_PAGE, limit=10)
        self.assertEqual(len(products), 2)
        self.assertEqual(
            products[1].url, "https://www.digikala.com/product/dkp-456/"
        )
        self.assertEqual(products[1].price, Settings.PRICE_PLACEHOLDER)
        self.assertEqual(products[1].rating, Settings.RATING_PLACEHOLDER)

    def test_limit(self) -> None:
        """No more than *limit* products are emitted."""
        products = self.extractor.extract(PRODUCT_LINK_PAGE, limit=1)
        self.assertEqual(len(products), 1)

    def test_component_card_with_data_url(self) -> None:
        """data-url markers inside the card give the URL."""
        products = self.extractor.extract(COMPONENT_CARD_PAGE, limit=10)
        self.assertEqual(len(products), 1)
        product = products[0]
        self.assertEqual(product.name, "Lenovo IdeaPad Slim 3")
        self.assertEqual(product.url, "https://www.digikala.com/product/dkp-77/")
        self.assertEqual(product.brand, "Lenovo")
        self.assertEqual(product.description, "Slim laptop for work")
        self.assertEqual(product.price, Settings.PRICE_PLACEHOLDER)

    def test_ancestor_link_and_raw_href(self) -> None:
        """URLs come from an ancestor link or the raw markup."""
        products = self.extractor.extract(LEGACY_PAGE, limit=10)
        self.assertEqual(
            [(p.name, p.url) for p in products],
            [
                (
                    "Sony WH-1000XM5",
                    "https://www.digikala.com/product/dkp-5/",
                ),
                (
                    "Raw href item",
                    "https://www.digikala.com/product/dkp-88/",
                ),
            ],
        )

    def test_last_resort_anchors(self) -> None:
        """Bare product anchors become minimal records."""
        products = self.extractor.extract(ANCHORS_ONLY_PAGE, limit=10)
        self.assertEqual(
            [p.name for p in products],
            ["Phone One", "Phone Two", "Phone Three"],
        )
        for product in products:
            self.assertEqual(product.price, Settings.PRICE_PLACEHOLDER)
            self.assertEqual(product.rating, Settings.RATING_PLACEHOLDER)
            self.assertEqual(product.brand, Settings.BRAND_PLACEHOLDER)

    def test_last_resort_respects_limit(self) -> None:
        """The anchor pass stops at *limit*."""
        products = self.extractor.extract(ANCHORS_ONLY_PAGE, limit=2)
        self.assertEqual(len(products), 2)

    def test_non_product_links_dropped(self) -> None:
        """Site links that are not product pages never become products."""
        pages = (
            '<a href="/landing/sale/"><article><h3>Big Sale</h3>'
            "</article></a>",
            '<article><div data-url="/cart/"></div><h3>Cart promo</h3>'
            "</article>",
            '<a data-product-index="1" href="/about-us/">About us</a>',
        )
        for markup in pages:
            with self.subTest(markup=markup):
                self.assertEqual(self.extractor.extract(markup, limit=5), [])

    def test_non_product_ancestor_falls_through(self) -> None:
        """A landing-page ancestor link gives way to a product marker."""
        markup = (
            '<a href="/landing/sale/"><article><h3>Galaxy A54 deal</h3>'
            '<span data-url="/product/dkp-42/"></span></article></a>'
        )
        products = self.extractor.extract(markup, limit=5)
        self.assertEqual(
            [(p.name, p.url) for p in products],
            [("Galaxy A54 deal", "https://www.digikala.com/product/dkp-42/")],
        )

    def test_empty_name_dropped(self) -> None:
        """Containers without any text are discarded."""
        markup = (
            '<a data-product-index="1" href="/product/dkp-1/">'
            '<img src="x.jpg"></a>'
        )
        self.assertEqual(self.extractor.extract(markup, limit=5), [])

    def test_empty_markup(self) -> None:
        """Empty markup or a zero limit yields nothing."""
        self.assertEqual(self.extractor.extract("", limit=5), [])
        self.assertEqual(
            self.extractor.extract(ANCHORS_ONLY_PAGE, limit=0), []
        )

    def test_url_invariant(self) -> None:
        """Every emitted URL is absolute on the base origin."""
        for page in (
            PRODUCT_LINK_PAGE,
            COMPONENT_CARD_PAGE,
            LEGACY_PAGE,
            ANCHORS_ONLY_PAGE,
        ):
            for product in self.extractor.extract(page, limit=10):
                with self.subTest(url=product.url):
                    self.assertTrue(
                        product.url.startswith(Settings.BASE_URL + "/")
                    )


if __name__ == "__main__":
    unittest.main()

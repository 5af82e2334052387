# tests/test_deduplicator.py

"""Tests for ProductDeduplicator URL and name-overlap deduplication."""

import itertools
import unittest

from dk_search.filters.deduplicator import ProductDeduplicator
from dk_search.models.product import Product

_ids = itertools.count(1)


def _make(
    name: str,
    url: str = "",
    tag: str = "primary",
) -> Product:
    """Create a minimal Product."""
    return Product(
        name=name,
        url=url or f"https://www.digikala.com/product/dkp-{next(_ids)}/",
        source_strategy_tag=tag,
    )


class TestDeduplicate(unittest.TestCase):
    """ProductDeduplicator.deduplicate behaviour."""

    def test_empty_list(self) -> None:
        """Empty input returns empty output."""
        kept, removed = ProductDeduplicator.deduplicate([])
        self.assertEqual(len(kept), 0)
        self.assertEqual(removed, 0)

    def test_no_duplicates(self) -> None:
        """Unique products are all kept."""
        products = [_make("Alpha phone"), _make("Beta tablet")]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 2)
        self.assertEqual(removed, 0)

    def test_exact_url_first_seen_wins(self) -> None:
        """Identical URLs keep the first product by priority order."""
        url = "https://www.digikala.com/product/dkp-1/"
        products = [
            _make("Widget", url=url, tag="primary"),
            _make("Another widget name", url=url, tag="alternative"),
        ]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 1)
        self.assertEqual(removed, 1)
        self.assertEqual(kept[0].source_strategy_tag, "primary")

    def test_url_normalisation(self) -> None:
        """Query params, fragments, trailing slashes and case are ignored."""
        products = [
            _make("Item one", url="https://www.digikala.com/product/dkp-1/?ref=abc"),
            _make("Item two", url="https://www.digikala.com/Product/dkp-1#x"),
        ]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 1)
        self.assertEqual(removed, 1)

    def test_near_duplicate_long_names_collapse(self) -> None:
        """Names with more than 70% token overlap are one product."""
        products = [
            _make("Samsung Galaxy A54 5G Black"),
            _make("Samsung Galaxy A54 5G"),
        ]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 1)
        self.assertEqual(removed, 1)
        self.assertEqual(kept[0].name, "Samsung Galaxy A54 5G Black")

    def test_short_names_need_exact_match(self) -> None:
        """Two-token names differing in one token are kept apart."""
        products = [_make("Asus Vivobook"), _make("Asus Zenbook")]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 2)
        self.assertEqual(removed, 0)

    def test_short_names_exact_match_collapse(self) -> None:
        """Short names equal after normalisation collapse."""
        products = [_make("Asus Vivobook!"), _make("asus  vivobook")]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 1)
        self.assertEqual(removed, 1)

    def test_persian_near_duplicates(self) -> None:
        """Overlap works on Persian names too."""
        products = [
            _make("گوشی موبایل سامسونگ مدل Galaxy A54 رنگ مشکی"),
            _make("گوشی موبایل سامسونگ مدل Galaxy A54 مشکی"),
        ]
        kept, _ = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 1)

    def test_low_overlap_kept(self) -> None:
        """Names sharing only a few tokens are different products."""
        products = [
            _make("Samsung Galaxy A54 5G"),
            _make("Samsung Galaxy S23 Ultra"),
        ]
        kept, removed = ProductDeduplicator.deduplicate(products)
        self.assertEqual(len(kept), 2)
        self.assertEqual(removed, 0)


class TestNamesMatch(unittest.TestCase):
    """ProductDeduplicator.names_match overlap ratio."""

    def test_ratio_uses_longer_name_word_count(self) -> None:
        """Repeated words count towards the longer name's length."""
        # 3 shared words over 5 words is 0.6, below the threshold
        self.assertFalse(
            ProductDeduplicator.names_match(
                "pro pro pro max x", "pro max x y"
            )
        )

    def test_ratio_above_threshold(self) -> None:
        """4 shared words over 5 words is a match."""
        self.assertTrue(
            ProductDeduplicator.names_match(
                "samsung galaxy a54 5g black", "samsung galaxy a54 5g"
            )
        )

    def test_empty_names_never_match(self) -> None:
        """Empty names are never duplicates."""
        self.assertFalse(ProductDeduplicator.names_match("", "a b c"))


class TestNormalisation(unittest.TestCase):
    """URL and name normalisation helpers."""

    def test_normalise_url(self) -> None:
        """Query, fragment and trailing slash are stripped."""
        self.assertEqual(
            ProductDeduplicator._normalise_url(
                "https://WWW.digikala.com/product/dkp-9/?a=1#b"
            ),
            "https://www.digikala.com/product/dkp-9",
        )
        self.assertEqual(ProductDeduplicator._normalise_url(""), "")

    def test_normalise_name(self) -> None:
        """Punctuation goes, Persian and alphanumerics stay."""
        self.assertEqual(
            ProductDeduplicator._normalise_name("  Galaxy-A54 (5G)  گوشی! "),
            "galaxya54 5g گوشی",
        )


if __name__ == "__main__":
    unittest.main()

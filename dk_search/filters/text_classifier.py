# dk_search/filters/text_classifier.py

"""Bilingual (Persian/English) query classification.

Everything here is a pure function of its input: no I/O, no shared
mutable state. The lookup tables come from
:mod:`dk_search.config.lookups`.
"""

import logging
import re

from dk_search.config.lookups import (
    BRAND_PAIRS,
    BUDGET_PATTERNS,
    CATEGORY_GROUPS,
    CATEGORY_HINT_PATTERNS,
    FEATURE_KEYWORDS,
    INTENT_PATTERNS,
    SHOPPING_KEYWORDS,
    TECHNICAL_PATTERN,
    URGENCY_PATTERN,
    USAGE_PATTERNS,
)
from dk_search.models.query import (
    CategoryMatch,
    Classification,
    Language,
    Query,
)

logger = logging.getLogger("dk_search.classifier")

# ── Normalisation ────────────────────────────────────────

_DIGITS = str.maketrans(
    "۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩",
    "01234567890123456789",
)

_CHARS = str.maketrans(
    {
        "ي": "ی",
        "ك": "ک",
        "ة": "ه",
        "أ": "ا",
        "إ": "ا",
        "ؤ": "و",
        "ئ": "ی",
        "ۀ": "ه",
        "\u200c": " ",
        "\u200f": "",
        "\u200e": "",
        "ـ": "",
    }
)

_DIACRITICS_RE = re.compile(r"[\u064B-\u065F\u0670]")
_WHITESPACE_RE = re.compile(r"\s+")
_PERSIAN_CHAR_RE = re.compile(r"[\u0600-\u06FF]")
_LATIN_CHAR_RE = re.compile(r"[A-Za-z]")


def normalize_text(text: str) -> str:
    """Normalise Persian/Arabic variants, digits and spacing, lower-cased."""
    if not text:
        return ""
    text = text.translate(_DIGITS).translate(_CHARS)
    text = _DIACRITICS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def _word_pattern(keyword: str) -> re.Pattern[str]:
    """Match *keyword* only when it is not glued to other word chars."""
    return re.compile(
        rf"(?<!\w){re.escape(normalize_text(keyword))}(?!\w)"
    )


# Persian forms first, mirroring how brands are usually written
_BRAND_RES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (surface, _word_pattern(surface))
    for surface in (
        [fa for fa, _ in BRAND_PAIRS] + [en for _, en in BRAND_PAIRS]
    )
)

_CATEGORY_RES: tuple[tuple[str, str, re.Pattern[str]], ...] = tuple(
    (group, keyword, _word_pattern(keyword))
    for group, keywords in CATEGORY_GROUPS.items()
    for keyword in keywords
)


class TextClassifier:
    """Detect language mix, intents, brands and categories in a query."""

    # Ratio thresholds for the Persian share of letters
    PERSIAN_THRESHOLD: float = 0.6
    ENGLISH_THRESHOLD: float = 0.2

    @staticmethod
    def detect_language(text: str) -> Language:
        """Classify the script mix by Persian vs Latin letter ratio."""
        persian = len(_PERSIAN_CHAR_RE.findall(text or ""))
        latin = len(_LATIN_CHAR_RE.findall(text or ""))
        if persian + latin == 0:
            return Language.UNKNOWN
        ratio = persian / (persian + latin)
        if ratio > TextClassifier.PERSIAN_THRESHOLD:
            return Language.PERSIAN
        if ratio < TextClassifier.ENGLISH_THRESHOLD:
            return Language.ENGLISH
        return Language.MIXED

    @staticmethod
    def detect_intents(text: str) -> frozenset[str]:
        """Return every intent tag whose pattern matches *text*."""
        normalized = normalize_text(text)
        return frozenset(
            tag
            for tag, pattern in INTENT_PATTERNS
            if pattern.search(normalized)
        )

    @staticmethod
    def detect_brands(text: str) -> tuple[str, ...]:
        """Return brand surface forms in order of appearance."""
        normalized = normalize_text(text)
        hits: list[tuple[int, str]] = []
        for surface, pattern in _BRAND_RES:
            match = pattern.search(normalized)
            if match:
                hits.append((match.start(), surface))
        hits.sort(key=lambda hit: hit[0])
        return tuple(surface for _, surface in hits)

    @staticmethod
    def detect_categories(text: str) -> tuple[CategoryMatch, ...]:
        """Return one match per category group, in order of appearance.

        Within a group the earliest keyword in the text wins.
        """
        normalized = normalize_text(text)
        earliest: dict[str, tuple[int, str]] = {}
        for group, keyword, pattern in _CATEGORY_RES:
            match = pattern.search(normalized)
            if not match:
                continue
            current = earliest.get(group)
            if current is None or match.start() < current[0]:
                earliest[group] = (match.start(), keyword)
        ordered = sorted(
            earliest.items(), key=lambda item: item[1][0]
        )
        return tuple(
            CategoryMatch(keyword=keyword, group=group)
            for group, (_, keyword) in ordered
        )

    @staticmethod
    def detect_features(text: str) -> tuple[str, ...]:
        """Return the product features the query asks about."""
        normalized = normalize_text(text)
        return tuple(
            feature
            for feature, keywords in FEATURE_KEYWORDS.items()
            if any(kw in normalized for kw in keywords)
        )

    @staticmethod
    def classify(text: str) -> Classification:
        """Run every detector over *text*."""
        normalized = normalize_text(text)

        budget = "flexible"
        for label, pattern in BUDGET_PATTERNS:
            if pattern.search(normalized):
                budget = label
                break

        result = Classification(
            language=TextClassifier.detect_language(text),
            intents=TextClassifier.detect_intents(text),
            brands=TextClassifier.detect_brands(text),
            categories=TextClassifier.detect_categories(text),
            features=TextClassifier.detect_features(text),
            urgency=(
                "high" if URGENCY_PATTERN.search(normalized)
                else "normal"
            ),
            technical_level=(
                "technical" if TECHNICAL_PATTERN.search(normalized)
                else "general"
            ),
            budget_preference=budget,
            usage_contexts=tuple(
                label
                for label, pattern in USAGE_PATTERNS
                if pattern.search(normalized)
            ),
            category_hints=tuple(
                label
                for label, pattern in CATEGORY_HINT_PATTERNS
                if pattern.search(normalized)
            ),
        )
        logger.debug(
            "Classified '%s': language=%s brands=%s categories=%s",
            text,
            result.language.value,
            result.brands,
            [c.keyword for c in result.categories],
        )
        return result

    @staticmethod
    def mentions_product(text: str) -> bool:
        """True when the text looks like a request about a product."""
        normalized = normalize_text(text)
        return any(kw in normalized for kw in SHOPPING_KEYWORDS)

    @staticmethod
    def build_query(
        text: str,
        override_term: str | None = None,
    ) -> Query:
        """Create the immutable :class:`Query` for an incoming request."""
        override = (override_term or "").strip() or None
        return Query(
            text=text.strip(),
            language=TextClassifier.detect_language(text),
            override_term=override,
        )

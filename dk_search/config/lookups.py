# dk_search/config/lookups.py

"""Static bilingual lookup tables used for query understanding.

Every table is built once at import time and exposed as an immutable
structure (tuples, frozensets, read-only mappings). Keywords are stored
in normalised form (see :func:`dk_search.filters.text_classifier.normalize_text`).
"""

import re
from types import MappingProxyType

# ── Brands ───────────────────────────────────────────────
# (persian, english) surface forms of the same brand.

BRAND_PAIRS: tuple[tuple[str, str], ...] = (
    ("سامسونگ", "samsung"),
    ("آیفون", "iphone"),
    ("اپل", "apple"),
    ("هواوی", "huawei"),
    ("شیائومی", "xiaomi"),
    ("ال جی", "lg"),
    ("سونی", "sony"),
    ("نوکیا", "nokia"),
    ("ایسوس", "asus"),
    ("لنوو", "lenovo"),
    ("دل", "dell"),
    ("اچ پی", "hp"),
    ("ام اس آی", "msi"),
    ("ایسر", "acer"),
    ("فیلیپس", "philips"),
    ("پاناسونیک", "panasonic"),
)

BRAND_ALIASES: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        **{fa: (fa, en) for fa, en in BRAND_PAIRS},
        **{en: (en, fa) for fa, en in BRAND_PAIRS},
    }
)

# ── Categories ───────────────────────────────────────────
# group name -> keywords that signal the group

CATEGORY_GROUPS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "گوشی موبایل": ("گوشی", "موبایل", "phone", "smartphone"),
        "لپ تاپ": ("لپ تاپ", "لپتاپ", "laptop", "notebook"),
        "هدفون": ("هدفون", "هندزفری", "headphone", "earphone"),
        "تلویزیون": ("تلویزیون", "تی وی", "tv", "television"),
        "تبلت": ("تبلت", "tablet", "ipad"),
        "ساعت هوشمند": ("ساعت هوشمند", "smartwatch", "watch"),
        "ماشین اصلاح": ("ماشین اصلاح", "اصلاح", "shaver", "trimmer"),
    }
)

# Category listing pages on the target site. Order matters:
# "headphone" must be tested before "phone".
CATEGORY_PAGES: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"headphone|earphone|هدفون|هندزفری", re.IGNORECASE),
        "/category/headphone/",
    ),
    (
        re.compile(r"laptop|notebook|لپ ?تاپ|لپتاپ", re.IGNORECASE),
        "/category/notebook-netbook-ultrabook/",
    ),
    (
        re.compile(r"tablet|ipad|تبلت", re.IGNORECASE),
        "/category/tablet/",
    ),
    (
        re.compile(r"smart ?watch|ساعت هوشمند", re.IGNORECASE),
        "/category/smart-watch/",
    ),
    (
        re.compile(r"\btv\b|television|تلویزیون", re.IGNORECASE),
        "/category/tv/",
    ),
    (
        re.compile(r"phone|mobile|گوشی|موبایل", re.IGNORECASE),
        "/category/mobile-phone/",
    ),
)

# ── Stopwords ────────────────────────────────────────────

STOPWORDS: frozenset[str] = frozenset(
    {
        # Persian
        "و", "یا", "که", "را", "در", "با", "از", "به", "تا", "برای",
        "خوب", "بهترین", "پیشنهاد", "بده", "کن", "میخوام", "میخواهم",
        "خوام", "خواهم", "لطفا", "معرفی", "یه", "یک", "چند",
        # English
        "the", "a", "an", "and", "or", "but", "for", "with", "good",
        "best", "need", "want", "help", "finding", "please", "some",
    }
)

# ── Intents ──────────────────────────────────────────────

INTENT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "comparison",
        re.compile(r"مقایسه|compare|بهتر|better|\bvs\b|در مقابل", re.IGNORECASE),
    ),
    (
        "budget",
        re.compile(r"ارزان|cheap|قیمت|price|budget|تومان", re.IGNORECASE),
    ),
    (
        "specific_feature",
        re.compile(r"عکاس|camera|gaming|گیمینگ|باتری|battery", re.IGNORECASE),
    ),
    (
        "urgent",
        re.compile(r"فوری|urgent|زود|سریع|امروز|today", re.IGNORECASE),
    ),
    (
        "recommendation",
        re.compile(r"پیشنهاد|recommend|بهترین|best|\bچی\b|what|کدام", re.IGNORECASE),
    ),
    (
        "replacement",
        re.compile(r"جایگزین|replace|alternative|بجای", re.IGNORECASE),
    ),
)

# ── User-context signals ─────────────────────────────────

FEATURE_KEYWORDS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "gaming": ("گیمینگ", "gaming", "بازی", "game"),
        "camera": ("دوربین", "عکاسی", "camera", "photo"),
        "battery": ("باتری", "battery", "شارژ", "charge"),
        "storage": ("حافظه", "storage", "memory", "گیگ"),
        "processor": ("پردازنده", "processor", "cpu", "chip"),
    }
)

URGENCY_PATTERN = re.compile(
    r"فوری|urgent|امروز|today|سریع|quick|زود|soon", re.IGNORECASE
)

TECHNICAL_PATTERN = re.compile(
    r"specs|مشخصات|processor|پردازنده|\bram\b|حافظه|gpu|benchmark",
    re.IGNORECASE,
)

BUDGET_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("budget", re.compile(r"ارزان|cheap|budget|\bکم\b", re.IGNORECASE)),
    ("premium", re.compile(r"گران|expensive|premium|پریمیم", re.IGNORECASE)),
    ("mid_range", re.compile(r"متوسط|middle|میان", re.IGNORECASE)),
)

USAGE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("gaming", re.compile(r"gaming|گیمینگ|بازی|game", re.IGNORECASE)),
    ("work", re.compile(r"\bکار\b|work|office|اداری|business", re.IGNORECASE)),
    ("study", re.compile(r"درس|study|دانشجو|student|university", re.IGNORECASE)),
    ("photography", re.compile(r"عکس|photo|camera|عکاسی", re.IGNORECASE)),
    ("daily_use", re.compile(r"روزانه|daily|عادی|normal", re.IGNORECASE)),
)

CATEGORY_HINT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("electronics", re.compile(r"گوشی|لپ تاپ|تلویزیون|هدفون")),
    ("home_appliance", re.compile(r"یخچال|ماشین لباسشویی|مایکروویو")),
    ("personal_care", re.compile(r"ماشین اصلاح|شامپو|عطر")),
    ("fashion", re.compile(r"لباس|کفش|کیف")),
)

# Words that signal the user is shopping for something
SHOPPING_KEYWORDS: tuple[str, ...] = (
    "خرید", "buy", "purchase", "product", "محصول", "قیمت", "price",
    "laptop", "لپ تاپ", "phone", "گوشی", "موبایل", "تلویزیون", "tv",
    "headphone", "هدفون", "کتاب", "book", "clothes", "لباس",
)

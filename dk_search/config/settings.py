# dk_search/config/settings.py

"""Central configuration for the dk_search engine."""

import os
from pathlib import Path
from urllib.parse import quote_plus

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> list[str]:
    """Read a comma-separated environment variable as a list."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Central configuration for the dk_search engine."""

    # --- Target site ---
    BASE_URL: str = "https://www.digikala.com"
    MOBILE_BASE_URL: str = "https://m.digikala.com"
    SEARCH_PATH: str = "/search/?q={query}"
    PRODUCT_PATH_PATTERN: str = r"/product/dkp-\d+"

    # --- Navigation ---
    NAVIGATION_TIMEOUT: float = 30.0    # Seconds per page navigation
    SETTLE_DELAY: float = 3.0           # Wait for dynamic content (desktop)
    MOBILE_SETTLE_DELAY: float = 1.5    # Mobile pages render lighter
    MAX_RETRIES: int = 2                # Impersonated GET attempts
    REQUEST_DELAY: float = 1.0          # Base back-off between retries

    # --- Browser engines (first that starts wins) ---
    BROWSER_ENGINES: list[str] = _env_list(
        "DK_BROWSER_ENGINES", "chromium,impersonate"
    )
    HEADLESS: bool = (
        os.getenv("DK_HEADLESS", "true").lower() != "false"
    )
    BROWSER_ARGS: list[str] = [
        "--disable-blink-features=AutomationControlled",
        "--disable-dev-shm-usage",
        "--no-sandbox",
    ]
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    VIEWPORT: dict[str, int] = {"width": 1366, "height": 900}
    LOCALE: str = "fa-IR"

    # --- Anti-bot detection ---
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "fa-IR,fa;q=0.9,en-US;q=0.7,en;q=0.5",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Search ---
    DEFAULT_LIMIT: int = 10
    MAX_CANDIDATE_TERMS: int = 3
    MAX_CONCURRENT_FETCHES: int = 1     # 1 = strictly sequential
    GENERIC_FALLBACK_TERM: str = "product"

    # --- Placeholder values (rendered as-is downstream) ---
    PRICE_PLACEHOLDER: str = "موجود نیست"
    RATING_PLACEHOLDER: str = "بدون امتیاز"
    BRAND_PLACEHOLDER: str = "نامشخص"

    # --- Relevance scoring ---
    SCORE_QUERY_TOKEN: float = 10.0
    SCORE_BRAND_MATCH: float = 20.0
    SCORE_PRICE_PRESENT: float = 5.0
    SCORE_RATING_MULTIPLIER: float = 2.0
    SCORE_STRATEGY_BONUS: dict[str, float] = {
        "primary": 15.0,
        "alternative": 10.0,
        "fallback": 5.0,
    }

    # --- AI completion collaborator ---
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    OPENROUTER_BASE_URL: str = os.getenv(
        "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
    )
    OPENROUTER_MODEL: str = os.getenv(
        "OPENROUTER_MODEL", "deepseek/deepseek-chat-v3.1:free"
    )
    LLM_TIMEOUT: float = 20.0
    LLM_MAX_TOKENS: int = 400
    LLM_TEMPERATURE: float = 0.3

    # --- Health check ---
    HEALTH_TIMEOUT: int = 10
    HEALTH_SLOW_MS: float = 5000.0

    # --- Paths & logging ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
    CONSOLE_LOG_LEVEL: str = os.getenv("DK_LOG_LEVEL", "WARNING")

    @classmethod
    def search_url(cls, query: str, mobile: bool = False) -> str:
        """Build the query-string search URL for *query*."""
        base = cls.MOBILE_BASE_URL if mobile else cls.BASE_URL
        return base + cls.SEARCH_PATH.format(query=quote_plus(query))

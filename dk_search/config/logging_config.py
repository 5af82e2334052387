# dk_search/config/logging_config.py

"""Logging for a dk_search run.

One file per run under ``logs/`` (``run_<YYYYmmdd_HHMMSS>.log``) keeps
the whole trace of a search: the expansion decision, every navigation
attempt with its engine, and the dedup/rank counters. The console only
shows records at ``Settings.CONSOLE_LOG_LEVEL`` and above so that the
CLI's JSON on stdout and Rich status lines on stderr stay readable.

The OpenAI SDK and its HTTP stack log every request at INFO/DEBUG;
those loggers are capped at WARNING so the run log stays about the
search itself.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from dk_search.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(funcName)s:%(lineno)d | %(threadName)s | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that drown out ours at DEBUG
_NOISY_LOGGERS = ("openai", "httpx", "httpcore", "asyncio")


def _console_level() -> int:
    level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(log_dir: Path | None = None) -> Path:
    """Attach the per-run file and console handlers to ``dk_search``.

    Safe to call more than once: when the ``dk_search`` logger already
    has handlers, nothing is added and a fresh path is returned.

    Args:
        log_dir: Directory for the run log; ``Settings.LOGS_DIR`` when
            omitted.

    Returns:
        Path of this run's log file.
    """
    directory = log_dir or Settings.LOGS_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    package_logger = logging.getLogger("dk_search")
    package_logger.setLevel(logging.DEBUG)
    if package_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )
    package_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level())
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    package_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.debug(
        "Run log %s (console level %s, engines %s)",
        log_file,
        logging.getLevelName(console_handler.level),
        ",".join(Settings.BROWSER_ENGINES),
    )
    return log_file

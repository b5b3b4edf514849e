"""Console + daily file logging, with per-provider message prefixes."""

import logging
import sys
from datetime import datetime

from .config import LOGS_DIR

_logger = None


class _ProviderFilter(logging.Filter):
    """Give every record a `provider` attribute so the file format can print it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "provider"):
            record.provider = "-"
        return True


class ProviderLogAdapter(logging.LoggerAdapter):
    """Tags messages with the provider they came from: "[perplexity] ..."."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return f"[{self.extra['provider']}] {msg}", kwargs


def get_logger() -> logging.Logger:
    """Get or create the trendscout logger with file + console handlers."""
    global _logger
    if _logger is not None:
        return _logger

    _logger = logging.getLogger("trendscout")
    _logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers on re-import
    if _logger.handlers:
        return _logger

    # Console: INFO by default, DEBUG with --verbose. stdout stays free for --json.
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("  %(message)s"))
    _logger.addHandler(console)

    # File: always DEBUG, one file per day, worker thread + provider per line
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOGS_DIR / f"trendscout_{datetime.now():%Y%m%d}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.addFilter(_ProviderFilter())
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-8s %(threadName)-16s %(provider)-13s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    _logger.addHandler(file_handler)

    return _logger


def get_provider_logger(provider: str) -> ProviderLogAdapter:
    """Logger whose messages are prefixed and tagged with a provider name."""
    return ProviderLogAdapter(get_logger(), {"provider": provider})


def set_verbose(verbose: bool = True):
    """Switch console handler to DEBUG level."""
    logger = get_logger()
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(logging.DEBUG if verbose else logging.INFO)


def log(msg: str):
    """Convenience wrapper — INFO level."""
    get_logger().info(msg)

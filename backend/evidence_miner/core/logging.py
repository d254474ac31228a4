"""
Logging Configuration

Root logger setup shared by the API and the review pipeline.

E-utilities requests carry the NCBI api_key and contact email as query
parameters, so every handler gets a filter masking them before a record
is written.
"""
import logging
import re
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from the HTTP and OpenAI clients
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

_SECRET_PARAM = re.compile(r"((?:api_key|email)=)[^&\s\"']+")


class SecretParamFilter(logging.Filter):
    """Masks api_key/email query parameters in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _SECRET_PARAM.sub(r"\1***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level name; unknown names fall back to INFO
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(log_level)
    handler.addFilter(SecretParamFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)


setup_logging()

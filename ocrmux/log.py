"""Logging setup for applications using ocrmux."""

import logging
from typing import Optional, Union

from rich.logging import RichHandler

from .config import Settings
from .rich_llm_printer import console

# httpx logs full request URLs at INFO, and Gemini's URL carries the API key.
_QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Attach a rich console handler to the ``ocrmux`` logger.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Log level name or number. Defaults to Settings.from_env().log_level.

    Returns:
        logging.Logger: The configured ``ocrmux`` logger.
    """
    if level is None:
        level = Settings.from_env().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger("ocrmux")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger

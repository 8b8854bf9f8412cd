"""
S1 Palette Logging
Loguru sink setup and per-request log binding.
"""
import sys
from typing import Optional

from loguru import logger

from s1palette.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[request_id]} | {message}"

_handler_id: Optional[int] = None


def configure_logging(level: Optional[str] = None) -> int:
    """
    Replace loguru's default handler with the service sink.

    Records logged outside a request carry request_id "-". Calling this
    again swaps the sink rather than adding a second one.

    Returns:
        The loguru handler id of the service sink
    """
    global _handler_id
    if _handler_id is None:
        logger.remove()
    else:
        logger.remove(_handler_id)

    logger.configure(extra={"request_id": "-"})
    _handler_id = logger.add(sys.stdout, format=LOG_FORMAT, level=level or config.LOG_LEVEL)
    return _handler_id


def request_logger(request_id: str):
    """Logger bound to one palette request; every record carries its id."""
    return logger.bind(request_id=request_id)

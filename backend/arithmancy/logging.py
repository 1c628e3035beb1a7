"""
Logging helpers.

Every module grabs its logger through get_logger(__name__) so the whole
package lives under the "arithmancy" logger hierarchy.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def configure_logging(level: str | int = "INFO") -> None:
    """
    Configure the root handler once.

    Safe to call repeatedly (app startup, CLI commands); only the level is
    updated after the first call.
    """
    global _configured

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not _configured:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        _configured = True

    logging.getLogger("arithmancy").setLevel(level)

"""
Logging for the minifier.

Every module logs through `logger`. The CLI calls `set_verbosity` once it
has parsed `-v`; debug output also names the module that logged.
"""

import logging

LOG_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_LOG_FORMAT = "%(levelname)s [%(module)s]: %(message)s"

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

logger = logging.getLogger("icon_minifier")


def set_verbosity(verbose: bool) -> None:
    """Switch the minifier's logger between info and debug output."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter(VERBOSE_LOG_FORMAT if verbose else LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)

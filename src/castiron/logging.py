# ===== MODULE DOCSTRING ===== #
"""
Package logger for castiron.

Every castiron module logs through the ``castiron`` logger. It ships with a
single stderr handler at WARNING, so a host application sees nothing unless
a descriptor misbehaves or it opts in to more detail. Hot paths (matching,
the transform cache fast path, checked-list validation) emit ``TRACE``
debug records only when DEBUG is enabled.

    import logging
    from castiron.logging import set_verbosity

    set_verbosity(logging.DEBUG)   # show TRACE records
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import Final, FrozenSet, List
import logging
import sys

## ===== LOCAL ===== ##
from .config import LOGGER_NAME

# ===== GLOBALS ===== #

## ===== CONSTANTS ===== ##
LOG_FORMAT: Final[str] = '%(levelname)s:%(name)s: %(message)s'
DEFAULT_LEVEL: Final[int] = logging.WARNING

VALID_LEVELS: Final[FrozenSet[int]] = frozenset({
    logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL,
})

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger(LOGGER_NAME)
logger = _log

# ===== FUNCTIONS ===== #

def _install_handler(target: logging.Logger) -> None:
    """Attach the stderr handler once; re-imports leave an existing setup alone."""
    if target.handlers:
        return
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    target.addHandler(stream_handler)
    target.setLevel(DEFAULT_LEVEL)

def set_verbosity(level: int) -> None:
    """Change how much the castiron logger reports.

    Args:
        level: One of the ``logging`` module's level constants.

    Raises:
        ValueError: If level is not a standard logging level.
    """
    if level not in VALID_LEVELS:
        raise ValueError(
            f"Invalid logging level: {level}. Expected one of "
            f"{sorted(logging.getLevelName(l) for l in VALID_LEVELS)}"
        )
    _log.setLevel(level)
    if _log.isEnabledFor(logging.DEBUG):
        _log.debug(f"TRACE logging.set_verbosity: Level is now {logging.getLevelName(level)}")

_install_handler(_log)

## ===== EXPORTS ===== ##
__all__: Final[List[str]] = ['logger', 'set_verbosity']

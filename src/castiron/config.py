# ===== MODULE DOCSTRING ===== #
"""Configuration constants for the castiron package."""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import Final, FrozenSet, List

# ===== GLOBALS ===== #

## ===== LOGGING ===== ##
LOGGER_NAME: Final[str] = 'castiron'

## ===== DISPLAY SETTINGS ===== ##
# Longest value repr kept in default exception messages
MAX_VALUE_REPR_LENGTH: Final[int] = 100

## ===== TYPE CHECKING ===== ##
# Module prefix skipped when searching the stack for the caller frame
_INTERNAL_MODULE_PREFIX: Final[str] = 'castiron.'

# Bare values coerced to identity (Unit) matchers rather than equality
_SINGLETON_TYPES: Final[FrozenSet[type]] = frozenset({type(None), bool, type(Ellipsis), type(NotImplemented)})

## ===== TRANSFORM CACHE ===== ##
TRANSFORM_CACHE_ENABLED_DEFAULT: Final[bool] = True

## ===== EXPORTS ===== ##
__all__: Final[List[str]] = [
    'LOGGER_NAME',
    'MAX_VALUE_REPR_LENGTH',
    'TRANSFORM_CACHE_ENABLED_DEFAULT',
]

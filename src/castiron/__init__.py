# ===== MODULE DOCSTRING ===== #
"""
castiron: runtime type descriptors, checked lists and outcomes.

    from castiron import types as t
    from castiron import CheckedList, check, matches

    matches(t.ArrayOf(int), [1, 2, 3])          # True
    check("x", t.Nilable(int))                   # Failure(TypeMismatchError(...))
    CheckedList([1, 2, 3], int).append("x")     # raises TypeMismatchError
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import Final, List

## ===== LOCAL ===== ##
from . import types
from .checked import CheckedList, CheckedListOf
from .checks import check, matches, subtype
from .descriptors import Descriptor, to_descriptor
from .error_utils import (
    ArgumentError,
    CastironError,
    CheckContext,
    ConfigurationError,
    ImmutableError,
    OutcomeError,
    TypeMismatchError,
)
from .logging import logger, set_verbosity
from .outcome import Failure, Outcome, Success
from .transforms import (
    clear_transforms,
    register_transform,
    set_transform_cache_enabled,
    unregister_transform,
)

# ===== GLOBALS ===== #

__version__: Final[str] = '0.1.0'

## ===== EXPORTS ===== ##
__all__: Final[List[str]] = [
    'ArgumentError',
    'CastironError',
    'CheckContext',
    'CheckedList',
    'CheckedListOf',
    'ConfigurationError',
    'Descriptor',
    'Failure',
    'ImmutableError',
    'Outcome',
    'OutcomeError',
    'Success',
    'TypeMismatchError',
    'check',
    'clear_transforms',
    'logger',
    'matches',
    'register_transform',
    'set_transform_cache_enabled',
    'set_verbosity',
    'subtype',
    'to_descriptor',
    'types',
    'unregister_transform',
]

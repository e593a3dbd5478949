# ===== MODULE DOCSTRING ===== #
"""
Low-level type utilities for castiron.

This module holds the helpers the descriptor variants lean on:
- Method resolution order (MRO) caching for fast isinstance checks
- Endpoint access and membership for range-like values (``range``/``slice``)
- Attribute and field lookup used by constraint and shape descriptors
- Detection of ``typing`` annotations that must not be used as descriptors
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import (
    Dict, List, Set, Any,
    Final,
    Tuple, Type,
)
import collections.abc
import threading
import inspect
import logging
import typing

# ===== GLOBALS ===== #

## ===== TYPE ALIASES ===== ##
NoneType: Final[Type[None]] = type(None)
RangeLike = typing.Union[range, slice]

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger('castiron')

## ===== MRO CACHE ===== ##
# Global cache for MRO sets (maps type -> set of MRO types)
_mro_cache: Dict[type, Set[type]] = {}
_mro_cache_lock = threading.Lock()

## ===== METHOD TYPES ===== ##
# Slot wrappers bound to builtins, e.g. [].__len__
_METHOD_WRAPPER_TYPES: Final[Tuple[type, ...]] = (type([].__len__),)

## ===== TEXT TYPES ===== ##
# Iterable, but atomic values rather than element collections
TEXT_TYPES: Final[Tuple[type, ...]] = (str, bytes, bytearray)

## ===== SENTINELS ===== ##
# Returned by lookups when a field or attribute does not exist
MISSING: Final[object] = object()

# ===== FUNCTIONS ===== #

## ===== MRO CACHE ===== ##
def get_cached_mro_set(value_type: Type) -> Set[Type]:
    """Calculates and caches the Method Resolution Order (MRO) set for a given type.

    Uses a lock for thread safety during cache writes and double-checking
    to minimize lock contention. Falls back gracefully if MRO calculation fails.

    Args:
        value_type: The type for which to get the MRO set.

    Returns:
        A set containing the types in the MRO of value_type.
    """
    cached_result = _mro_cache.get(value_type)
    if cached_result is not None:
        return cached_result

    with _mro_cache_lock:
        # Double check cache after acquiring lock
        cached_result = _mro_cache.get(value_type)
        if cached_result is not None:
            return cached_result

        if _log.isEnabledFor(logging.DEBUG):
            _log.debug(f"TRACE type_utils.get_cached_mro_set: Cache miss for {value_type!r}. Calculating MRO.")
        try:
            mro_set = set(inspect.getmro(value_type))
        except Exception as e:
            _log.warning(f"Failed to calculate MRO for {value_type!r}: {e}. Performance may be affected.", exc_info=True)
            mro_set = {value_type}
        _mro_cache[value_type] = mro_set
        return mro_set

def is_instance_optimized(value: Any, expected_type: Type) -> bool:
    """Checks isinstance using the MRO cache for potential speedup.

    Performs a direct type check first, then uses the cached MRO set.
    Falls back to standard `isinstance` when the expected type is not in the
    MRO (virtual subclasses registered on ABCs, ``__instancecheck__`` hooks).

    Args:
        value: The value to check.
        expected_type: The type to check against.

    Returns:
        True if the value is an instance of the expected type, False otherwise.
    """
    value_type = type(value)
    if value_type is expected_type:
        return True
    if expected_type in get_cached_mro_set(value_type):
        return True
    try:
        return isinstance(value, expected_type)
    except TypeError as te:
        if _log.isEnabledFor(logging.DEBUG):
            _log.debug(f"TRACE type_utils.is_instance_optimized: isinstance({value_type.__name__}, {expected_type!r}) raised {te!r}. Result: False")
        return False

def is_subclass_safe(candidate: Any, expected_type: Type) -> bool:
    """issubclass() that answers False instead of raising for non-class candidates."""
    if not isinstance(candidate, type):
        return False
    if expected_type in get_cached_mro_set(candidate):
        return True
    try:
        return issubclass(candidate, expected_type)
    except TypeError:
        return False

## ===== TYPE INTROSPECTION ===== ##
def is_typing_annotation(obj: Any) -> bool:
    """Check if obj is a ``typing`` construct (e.g. ``List[int]``, ``Optional[str]``).

    These look callable but are not descriptors and must be spelled with the
    factory namespace instead.
    """
    if typing.get_origin(obj) is not None:
        return True
    return type(obj).__module__ == 'typing' and not isinstance(obj, type)

## ===== RANGES ===== ##
def range_endpoints(value: RangeLike) -> Tuple[Any, Any]:
    """Return the (begin, end) endpoints of a ``range`` or ``slice``.

    ``range`` always has both endpoints; either endpoint of a ``slice`` may be
    ``None`` meaning unbounded.
    """
    return value.start, value.stop

def range_contains(container: RangeLike, value: Any) -> bool:
    """Membership test for ranges used as constraints.

    ``range`` uses its own ``in``. ``slice`` is half-open, ``start <= value < stop``,
    with missing endpoints unbounded; incomparable values are not members.
    """
    if isinstance(container, range):
        return value in container
    start, stop = range_endpoints(container)
    try:
        if start is not None and not start <= value:
            return False
        if stop is not None and not value < stop:
            return False
    except TypeError:
        return False
    return True

## ===== FIELD ACCESS ===== ##
def read_field(value: Any, name: str) -> Any:
    """Read a named field: by key on mappings, by attribute otherwise.

    Returns:
        The field value, or MISSING if the value does not expose it.
    """
    if isinstance(value, collections.abc.Mapping):
        return value[name] if name in value else MISSING
    return getattr(value, name, MISSING)

def read_attribute(value: Any, name: str) -> Any:
    """Read a named attribute for constraint predicates.

    Bound methods are called with no arguments, so ``__len__`` or ``isupper``
    can be constrained the same way as plain attributes.

    Returns:
        The attribute (or method result), or MISSING if absent.
    """
    attribute = getattr(value, name, MISSING)
    if attribute is MISSING:
        return MISSING
    if inspect.ismethod(attribute) or inspect.isbuiltin(attribute) or isinstance(attribute, _METHOD_WRAPPER_TYPES):
        return attribute()
    return attribute

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = [
    'MISSING',
    'NoneType',
    'TEXT_TYPES',
    'get_cached_mro_set',
    'is_instance_optimized',
    'is_subclass_safe',
    'is_typing_annotation',
    'range_contains',
    'range_endpoints',
    'read_attribute',
    'read_field',
]

# ===== MODULE DOCSTRING ===== #
"""
Transform cache for checked lists.

A process-wide registry of declarations of the form "applying ``fn`` to
elements matching ``element_type`` always yields values matching
``result_type``". ``CheckedList.map`` consults it to skip per-element
validation of the mapped values.

Entries are never inferred; descriptor authors register them explicitly,
usually at import time, and the table is read-mostly afterwards. Keys are
compared by descriptor equality (so ``int`` and ``InstanceOf(int)`` are the
same key) and by function identity. Registering the same key twice replaces
the earlier entry.

Usage:
    from castiron.transforms import register_transform

    def double(x):
        return x * 2

    register_transform(int, double, int)
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import (
    Any, Callable, Dict,
    Final, Hashable, List,
    Optional, Tuple,
)
import threading
import logging

## ===== LOCAL ===== ##
from .config import TRANSFORM_CACHE_ENABLED_DEFAULT
from .descriptors import Descriptor, to_descriptor

# ===== GLOBALS ===== #

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger('castiron')

## ===== TRANSFORM CACHE ===== ##
# Maps (element type key, transform function) -> declared result descriptor
_TRANSFORMS: Dict[Tuple[Hashable, Callable[..., Any]], Descriptor] = {}
_transforms_lock = threading.Lock()
_transforms_enabled: bool = TRANSFORM_CACHE_ENABLED_DEFAULT

# ===== FUNCTIONS ===== #

def _descriptor_key(descriptor: Descriptor) -> Hashable:
    """Key a descriptor by value where possible, by identity otherwise."""
    try:
        hash(descriptor)
    except TypeError:
        # Unhashable payload, e.g. Equal([1, 2])
        return ('id', id(descriptor))
    return descriptor

def register_transform(element_type: Any, fn: Callable[[Any], Any], result_type: Any) -> None:
    """Declare that fn maps element_type values to result_type values.

    Args:
        element_type: Descriptor (or bare value) of the source elements.
        fn: The exact function object later passed to ``CheckedList.map``.
        result_type: Descriptor (or bare value) every result is guaranteed to match.
    """
    source = to_descriptor(element_type)
    result = to_descriptor(result_type)
    with _transforms_lock:
        _TRANSFORMS[(_descriptor_key(source), fn)] = result
    if _log.isEnabledFor(logging.DEBUG):
        _log.debug(f"TRACE transforms.register_transform: {source.describe()} --{getattr(fn, '__name__', fn)}--> {result.describe()}")

def lookup_transform(element_type: Any, fn: Callable[[Any], Any]) -> Optional[Descriptor]:
    """Return the declared result type for (element_type, fn), or None.

    Always None while the cache is disabled.
    """
    if not _transforms_enabled:
        return None
    key = (_descriptor_key(to_descriptor(element_type)), fn)
    with _transforms_lock:
        return _TRANSFORMS.get(key)

def unregister_transform(element_type: Any, fn: Callable[[Any], Any]) -> bool:
    """Remove a declaration. Returns True if one was present."""
    key = (_descriptor_key(to_descriptor(element_type)), fn)
    with _transforms_lock:
        return _TRANSFORMS.pop(key, None) is not None

def clear_transforms() -> None:
    with _transforms_lock:
        _TRANSFORMS.clear()

def transform_cache_size() -> int:
    with _transforms_lock:
        return len(_TRANSFORMS)

def set_transform_cache_enabled(enabled: bool) -> None:
    """Turn the fast path on or off globally. Registrations are kept either way."""
    global _transforms_enabled
    _transforms_enabled = bool(enabled)
    _log.info(f"Transform cache {'enabled' if enabled else 'disabled'}")

def is_transform_cache_enabled() -> bool:
    return _transforms_enabled

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = [
    'clear_transforms',
    'is_transform_cache_enabled',
    'lookup_transform',
    'register_transform',
    'set_transform_cache_enabled',
    'transform_cache_size',
    'unregister_transform',
]

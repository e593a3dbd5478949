# ===== MODULE DOCSTRING ===== #
"""
Checked-validation entry points.

- ``matches(descriptor, value)``: boolean predicate for conditionals.
- ``subtype(candidate, of=...)``: the best-effort subtyping judgment.
- ``check(actual, expected, enrich=None)``: returns ``Success(actual)`` or a
  ``Failure`` carrying a ``TypeMismatchError``. It never raises for a
  mismatch; callers that want exception semantics call ``raise_or_value()``.

On a mismatch, ``enrich`` is called exactly once with the ``CheckContext``
before ``check`` returns, so the caller can record who performed the check
(receiver, operation name, argument position or name). An external reporter
reads that context back from the error to build its diagnostic.
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import Any, Callable, Final, List, Optional
import logging

## ===== LOCAL ===== ##
from .descriptors import to_descriptor
from .error_utils import CheckContext, TypeMismatchError, _get_caller_info
from .outcome import Failure, Outcome, Success

# ===== GLOBALS ===== #

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger('castiron')

## ===== TYPE ALIASES ===== ##
EnrichCallback = Callable[[CheckContext], Any]

# ===== FUNCTIONS ===== #

def matches(descriptor: Any, value: Any) -> bool:
    """Return True if value matches descriptor (bare values are coerced)."""
    return to_descriptor(descriptor).match(value)

def subtype(candidate: Any, of: Any) -> bool:
    """Return True if candidate is provably a subtype of ``of``."""
    return to_descriptor(candidate).subtype_of(to_descriptor(of))

def check(actual: Any, expected: Any, enrich: Optional[EnrichCallback] = None) -> Outcome:
    """Check a value against a descriptor without raising on mismatch.

    Args:
        actual: The value to check.
        expected: Descriptor (or bare value) the value must match.
        enrich: Optional callback receiving the CheckContext on failure.

    Returns:
        Success(actual) if it matches, else Failure(TypeMismatchError).
    """
    descriptor = to_descriptor(expected)
    if descriptor.match(actual):
        return Success(actual)

    context = CheckContext(expected=descriptor, actual=actual, caller_info=_get_caller_info())
    if enrich is not None:
        enrich(context)
    if _log.isEnabledFor(logging.DEBUG):
        _log.debug(
            f"TRACE checks.check: Mismatch against {descriptor.describe()} "
            f"(receiver={type(context.receiver).__name__}, operation={context.operation_name!r})"
        )
    return Failure(TypeMismatchError(descriptor, actual, context=context))

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = ['EnrichCallback', 'check', 'matches', 'subtype']

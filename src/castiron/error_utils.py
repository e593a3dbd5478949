# ===== MODULE DOCSTRING ===== #
"""Error utilities for the castiron package: the exception taxonomy, structured
mismatch details and the context object handed to enrichment callbacks."""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import (
    Optional, Final,
    Dict, List, Any
)
import dataclasses
import inspect
import logging

## ===== LOCAL ===== ##
from .config import MAX_VALUE_REPR_LENGTH, _INTERNAL_MODULE_PREFIX
from .logging import _log

# ===== GLOBALS ===== #

## ===== EXPORTS ===== ##
__all__: Final[List[str]] = [
    'ArgumentError',
    'CastironError',
    'CheckContext',
    'ConfigurationError',
    'ImmutableError',
    'Mismatch',
    'OutcomeError',
    'TypeMismatchError',
    '_construct_type_error',
    '_get_caller_info',
]

# ===== CLASSES ===== #

## ===== STRUCTURED DETAILS ===== ##
@dataclasses.dataclass(frozen=True)
class Mismatch:
    """Holds structured details about a failed check.

    Attributes:
        expected_repr (str): ``describe()`` of the expected descriptor.
        received_repr (str): Name of the received value's type.
        value (Any): The actual value that failed the check.
        message (Optional[str]): Specific failure reason message.
    """
    expected_repr: str
    received_repr: str
    value: Any
    message: Optional[str] = None

@dataclasses.dataclass
class CheckContext:
    """Identifying information about a failed check.

    Passed to the enrichment callback given to ``check``. The callback fills
    in who performed the check (``fill_receiver``); the reporter that builds
    human-readable diagnostics reads it back from ``TypeMismatchError.context``.
    """
    expected: Any
    actual: Any
    receiver: Any = None
    operation_name: Optional[str] = None
    argument_position: Optional[int] = None
    argument_name: Optional[str] = None
    caller_info: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def fill_receiver(
        self,
        receiver: Any,
        operation_name: str,
        argument_position: Optional[int] = None,
        argument_name: Optional[str] = None,
    ) -> 'CheckContext':
        self.receiver = receiver
        self.operation_name = operation_name
        if argument_position is not None:
            self.argument_position = argument_position
        if argument_name is not None:
            self.argument_name = argument_name
        return self

    @property
    def mismatch(self) -> Mismatch:
        return Mismatch(
            expected_repr=repr(self.expected),
            received_repr=type(self.actual).__name__,
            value=self.actual,
        )

## ===== EXCEPTIONS ===== ##
class CastironError(Exception):
    """Base class for every error raised by castiron."""

class TypeMismatchError(CastironError, TypeError):
    """A value failed to match its declared descriptor."""
    def __init__(self, expected: Any, actual: Any, context: Optional[CheckContext] = None, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.context = context
        super().__init__(message or _construct_type_error(expected, actual))

class ConfigurationError(CastironError, ValueError):
    """A descriptor or combinator was built from malformed arguments."""

class ArgumentError(CastironError, TypeError):
    """An operation received an operand of an unsupported kind."""

class ImmutableError(CastironError, TypeError):
    """A mutation was attempted on a frozen checked list."""

class OutcomeError(CastironError):
    """Raised by ``Failure.raise_or_value`` when the payload is not an exception."""
    def __init__(self, payload: Any):
        self.payload = payload
        super().__init__(f"Outcome failed with {_truncate_repr(payload)}")

# ===== FUNCTIONS ===== #

def _truncate_repr(value: Any) -> str:
    value_repr = repr(value)
    if len(value_repr) > MAX_VALUE_REPR_LENGTH:
        value_repr = value_repr[:MAX_VALUE_REPR_LENGTH] + "..."
    return value_repr

def _construct_type_error(expected: Any, actual: Any) -> str:
    """Constructs the terse default message for a TypeMismatchError."""
    return f"Expected {expected!r}, got {type(actual).__name__} {_truncate_repr(actual)}"

def _get_caller_info() -> Dict[str, Any]:
    """Get information about the first stack frame outside the castiron package.

    Returns:
        A dictionary containing filename, lineno and function name of the
        caller frame, or empty values if unavailable.
    """
    empty = {'filename': '', 'lineno': 0, 'function': ''}
    frame = inspect.currentframe()
    if frame is None:
        _log.warning("_get_caller_info: Could not get current frame.")
        return empty
    try:
        search_frame = frame.f_back
        while search_frame:
            module_name = search_frame.f_globals.get('__name__', '')
            if not module_name.startswith(_INTERNAL_MODULE_PREFIX):
                code = search_frame.f_code
                if _log.isEnabledFor(logging.DEBUG):
                    _log.debug(f"TRACE error_utils._get_caller_info: Found caller frame: {code.co_filename}:{search_frame.f_lineno} in {code.co_name}")
                return {
                    'filename': code.co_filename or '',
                    'lineno': search_frame.f_lineno or 0,
                    'function': code.co_name or '',
                }
            search_frame = search_frame.f_back
        _log.warning("_get_caller_info: Could not find a caller frame outside the castiron package.")
        return empty
    finally:
        # Frames hold references to locals; drop them promptly
        del frame

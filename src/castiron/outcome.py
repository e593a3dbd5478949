# ===== MODULE DOCSTRING ===== #
"""
Outcome: a two-variant success/failure result with monadic chaining.

``Success(value)`` and ``Failure(error)`` are immutable values. Chaining
combinators run on ``Success`` and are no-ops on ``Failure``, so a pipeline of
fallible steps short-circuits at the first failure without raising:

    check(x, int).map(double).bind(validate_positive).value_or(lambda e: 0)

Both variants support structural pattern matching, positionally or by name:

    match outcome:
        case Success(value): ...
        case Failure(failure=err): ...
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import (
    Any, Callable, Final,
    Generic, List, Optional,
    TypeVar,
)
import dataclasses
import logging
import abc

## ===== THIRD PARTY ===== ##
from typing_extensions import final

## ===== LOCAL ===== ##
from .error_utils import ArgumentError, ConfigurationError, OutcomeError

# ===== GLOBALS ===== #

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger('castiron')

## ===== TYPE VARIABLES ===== ##
T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

# ===== CLASSES ===== #

class Outcome(abc.ABC):
    """Base of the sealed Success/Failure pair."""

    @abc.abstractmethod
    def is_success(self) -> bool: ...

    @abc.abstractmethod
    def is_failure(self) -> bool: ...

    @abc.abstractmethod
    def map(self, fn: Callable[[Any], Any]) -> 'Outcome': ...

    @abc.abstractmethod
    def bind(self, fn: Callable[[Any], 'Outcome']) -> 'Outcome': ...

    @abc.abstractmethod
    def filter(self, predicate: Callable[[Any], Any], on_reject: Optional[Callable[[Any], Any]] = None) -> 'Outcome': ...

    @abc.abstractmethod
    def value_or(self, fallback: Callable[[Any], Any]) -> Any: ...

    @abc.abstractmethod
    def raise_or_value(self) -> Any: ...

    @abc.abstractmethod
    def lift(self, *steps: Callable[[Any], 'Outcome']) -> 'Outcome': ...

    @abc.abstractmethod
    def lift_or_raise(self, *steps: Callable[[Any], 'Outcome']) -> 'Outcome': ...

    def fmap(self, fn: Callable[[Any], Any]) -> 'Outcome':
        return self.map(fn)

    def then(self, fn: Callable[[Any], 'Outcome']) -> 'Outcome':
        return self.bind(fn)

    def value_or_raise(self) -> Any:
        return self.raise_or_value()

@final
@dataclasses.dataclass(frozen=True)
class Success(Outcome, Generic[T]):
    value: T

    @property
    def success(self) -> T:
        return self.value

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> 'Success[U]':
        return Success(fn(self.value))

    def bind(self, fn: Callable[[T], Outcome]) -> Outcome:
        # No re-wrapping: fn's Outcome is returned as is
        return _ensure_outcome(fn(self.value), fn)

    def filter(self, predicate: Callable[[T], Any], on_reject: Optional[Callable[[T], Any]] = None) -> Outcome:
        """Keep this Success if predicate holds, else fail with on_reject(value)."""
        if predicate(self.value):
            return self
        if on_reject is None:
            return Failure(OutcomeError(self.value))
        return Failure(on_reject(self.value))

    def value_or(self, fallback: Callable[[Any], Any]) -> T:
        return self.value

    def raise_or_value(self) -> T:
        return self.value

    def lift(self, *steps: Callable[[Any], Outcome]) -> Outcome:
        return self

    def lift_or_raise(self, *steps: Callable[[Any], Outcome]) -> Outcome:
        return self

    def __repr__(self) -> str:
        return f"Success({self.value!r})"

@final
@dataclasses.dataclass(frozen=True)
class Failure(Outcome, Generic[E]):
    error: E

    @property
    def failure(self) -> E:
        return self.error

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def map(self, fn: Callable[[Any], Any]) -> 'Failure[E]':
        return self

    def bind(self, fn: Callable[[Any], Outcome]) -> 'Failure[E]':
        return self

    def filter(self, predicate: Callable[[Any], Any], on_reject: Optional[Callable[[Any], Any]] = None) -> 'Failure[E]':
        return self

    def value_or(self, fallback: Callable[[E], Any]) -> Any:
        return fallback(self.error)

    def raise_or_value(self) -> Any:
        """Raise the stored error.

        Raises:
            The stored exception (or an instance of a stored exception class).
            OutcomeError: Wrapping the payload when it is not exception-like.
        """
        error = self.error
        if isinstance(error, BaseException):
            raise error
        if isinstance(error, type) and issubclass(error, BaseException):
            raise error()
        raise OutcomeError(error)

    def lift(self, *steps: Callable[[Any], Outcome]) -> Outcome:
        """Chain dependent recovery steps starting from the stored error.

        The first step receives the error, each later step the previous
        Success value. Returns the first Failure, or the last Success.
        """
        return _run_lift(self.error, steps, raising=False)

    def lift_or_raise(self, *steps: Callable[[Any], Outcome]) -> Outcome:
        """Like lift, but a failing step raises instead of being returned."""
        return _run_lift(self.error, steps, raising=True)

    def __repr__(self) -> str:
        return f"Failure({self.error!r})"

# ===== FUNCTIONS ===== #

def _ensure_outcome(result: Any, step: Callable[..., Any]) -> Outcome:
    if not isinstance(result, Outcome):
        name = getattr(step, '__name__', repr(step))
        raise ArgumentError(f"{name} must return a Success or Failure, got {type(result).__name__}")
    return result

def _run_lift(start: Any, steps: tuple, raising: bool) -> Outcome:
    if not steps:
        raise ConfigurationError("lift requires at least one step")
    current = start
    result: Optional[Outcome] = None
    for index, step in enumerate(steps):
        result = _ensure_outcome(step(current), step)
        if result.is_failure():
            if _log.isEnabledFor(logging.DEBUG):
                _log.debug(f"TRACE outcome._run_lift: Step {index} failed with {result.error!r}")
            if raising:
                result.raise_or_value()
            return result
        current = result.value
    return result

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = ['Failure', 'Outcome', 'Success']

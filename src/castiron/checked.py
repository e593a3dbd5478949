# ===== MODULE DOCSTRING ===== #
"""
CheckedList: a list that enforces an element descriptor on every mutation.

The whole contents are validated once at construction. After that:
- single-element writes (append, prepend, insert, item assignment) are
  checked against ``element_type`` before they are applied
- bulk writes (extend, push, slice assignment) are checked against
  ``collection_type`` (``ArrayOf(element_type)``) in one pass before any
  element is applied, so a failed bulk write leaves the list untouched
- copies that can only drop or reorder elements (filter, reject, sort,
  slicing, intersection, difference) share the descriptors and skip
  validation
- ``map`` changes the element type. A registered transform whose declared
  result type is a subtype of the requested one skips validation of the
  mapped values; otherwise the new list is fully validated.

A CheckedList is not safe for concurrent mutation; guard shared instances
with an external lock.

Usage:
    from castiron.checked import CheckedList

    numbers = CheckedList([1, 2, 3], int)
    numbers.append(4)
    numbers.append("x")    # raises TypeMismatchError, contents unchanged
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import (
    Any, Callable, Final,
    Iterable, Iterator, List,
    Optional, Sequence, Tuple,
    Union,
)
import collections.abc
import dataclasses
import functools
import logging
import heapq

## ===== LOCAL ===== ##
from .checks import check
from .descriptors import ArrayType, Descriptor, to_descriptor
from .error_utils import ArgumentError, ImmutableError
from .transforms import lookup_transform
from .type_utils import TEXT_TYPES

# ===== GLOBALS ===== #

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger('castiron')

## ===== BULK INPUT ===== ##
# Iterable inputs that must never be split into their items
_UNSPLIT_TYPES: Final[Tuple[type, ...]] = (*TEXT_TYPES, collections.abc.Mapping)

# ===== CLASSES ===== #

class CheckedList(collections.abc.MutableSequence):
    """An ordered sequence whose elements always match ``element_type``.

    Args:
        values: Initial contents. Copied into a new backing list.
        element_type: Descriptor (or bare value) every element must match.

    Raises:
        TypeMismatchError: If any initial value does not match.
    """

    def __init__(self, values: Iterable[Any], element_type: Any):
        descriptor = to_descriptor(element_type)
        # Fully initialized (empty) before validating, so a failed check
        # hands enrich callbacks a receiver that can be inspected
        self._values: Union[List[Any], Tuple[Any, ...]] = []
        self._element_type: Descriptor = descriptor
        self._collection_type: Descriptor = ArrayType(descriptor)
        self._frozen = False
        self._values = self._collected(values, '__init__')

    @classmethod
    def _unchecked(cls, values: List[Any], element_type: Descriptor, collection_type: Descriptor) -> 'CheckedList':
        """Build a CheckedList around values without validating them."""
        instance = cls.__new__(cls)
        instance._values = values
        instance._element_type = element_type
        instance._collection_type = collection_type
        instance._frozen = False
        return instance

    def _with(self, values: Iterable[Any]) -> 'CheckedList':
        # Same descriptors, new contents; only for values drawn from self
        return type(self)._unchecked(list(values), self._element_type, self._collection_type)

    ## ===== VALIDATION ===== ##
    def _validated(self, values: Any, expected: Descriptor, operation: str, argument_position: Optional[int] = None) -> Any:
        return check(
            values, expected,
            enrich=lambda context: context.fill_receiver(self, operation, argument_position=argument_position),
        ).raise_or_value()

    def _collected(self, values: Iterable[Any], operation: str, argument_position: Optional[int] = None) -> List[Any]:
        """Validate a bulk input against collection_type and return a private copy.

        Lists are checked as given. Strings, byte strings and mappings are
        checked as given too, so they fail whole instead of being split into
        characters or keys. Other iterables are materialized first.
        """
        if not isinstance(values, (list, *_UNSPLIT_TYPES)):
            values = list(values)
        return list(self._validated(values, self._collection_type, operation, argument_position=argument_position))

    def _ensure_mutable(self, operation: str) -> None:
        if self._frozen:
            raise ImmutableError(f"Cannot {operation} a frozen CheckedList")

    def _operand_values(self, other: Any, operation: str) -> Sequence[Any]:
        if isinstance(other, CheckedList):
            return other._values
        if isinstance(other, list):
            return other
        raise ArgumentError(f"Cannot perform {operation} with {type(other).__name__}.")

    def _foreign_values(self, other: Any, operation: str) -> Sequence[Any]:
        """Values from other that are about to join self, validated unless provably safe."""
        values = self._operand_values(other, operation)
        if isinstance(other, CheckedList) and other._element_type.subtype_of(self._element_type):
            return values
        return self._validated(list(values), self._collection_type, operation, argument_position=0)

    ## ===== DESCRIPTORS ===== ##
    @property
    def element_type(self) -> Descriptor:
        return self._element_type

    @property
    def collection_type(self) -> Descriptor:
        return self._collection_type

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    ## ===== READING ===== ##
    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __contains__(self, value: Any) -> bool:
        return value in self._values

    def __getitem__(self, index: Union[int, slice]) -> Any:
        if isinstance(index, slice):
            return self._with(self._values[index])
        return self._values[index]

    def to_list(self) -> List[Any]:
        return list(self._values)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CheckedList):
            return list(self._values) == list(other._values)
        if isinstance(other, list):
            return list(self._values) == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"CheckedList({list(self._values)!r}, {self._element_type.describe()})"

    ## ===== SINGLE-ELEMENT WRITES ===== ##
    def __setitem__(self, index: Union[int, slice], value: Any) -> None:
        self._ensure_mutable('assign to')
        if isinstance(index, slice):
            self._values[index] = self._collected(value, '__setitem__', argument_position=1)
        else:
            self._validated(value, self._element_type, '__setitem__', argument_position=1)
            self._values[index] = value

    def insert(self, index: int, value: Any) -> None:
        self._ensure_mutable('insert into')
        self._validated(value, self._element_type, 'insert', argument_position=1)
        self._values.insert(index, value)

    def append(self, value: Any) -> None:
        self._ensure_mutable('append to')
        self._validated(value, self._element_type, 'append', argument_position=0)
        self._values.append(value)

    def prepend(self, value: Any) -> None:
        self._ensure_mutable('prepend to')
        self._validated(value, self._element_type, 'prepend', argument_position=0)
        self._values.insert(0, value)

    ## ===== BULK WRITES ===== ##
    def extend(self, values: Iterable[Any]) -> None:
        """Append every value, or none of them if any fails to match."""
        self._ensure_mutable('extend')
        if isinstance(values, CheckedList):
            incoming = self._foreign_values(values, 'extend')
        else:
            incoming = self._collected(values, 'extend', argument_position=0)
        self._values.extend(incoming)

    def push(self, *values: Any) -> 'CheckedList':
        self._ensure_mutable('push to')
        self._validated(list(values), self._collection_type, 'push')
        self._values.extend(values)
        return self

    ## ===== REMOVAL ===== ##
    def __delitem__(self, index: Union[int, slice]) -> None:
        self._ensure_mutable('delete from')
        del self._values[index]

    def pop(self, index: int = -1) -> Any:
        self._ensure_mutable('pop from')
        return self._values.pop(index)

    def shift(self) -> Any:
        self._ensure_mutable('shift')
        return self._values.pop(0)

    def remove(self, value: Any) -> None:
        self._ensure_mutable('remove from')
        self._values.remove(value)

    def clear(self) -> None:
        self._ensure_mutable('clear')
        self._values.clear()

    ## ===== IN-PLACE REORDERING ===== ##
    def reverse(self) -> None:
        self._ensure_mutable('reverse')
        self._values.reverse()

    def filter_in_place(self, predicate: Callable[[Any], Any]) -> 'CheckedList':
        self._ensure_mutable('filter')
        self._values[:] = [v for v in self._values if predicate(v)]
        return self

    def reject_in_place(self, predicate: Callable[[Any], Any]) -> 'CheckedList':
        self._ensure_mutable('reject from')
        self._values[:] = [v for v in self._values if not predicate(v)]
        return self

    def sort_in_place(self, comparator: Optional[Callable[[Any, Any], int]] = None, *, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False) -> 'CheckedList':
        self._ensure_mutable('sort')
        self._values.sort(key=_sort_key(comparator, key), reverse=reverse)
        return self

    ## ===== COPIES ===== ##
    def filter(self, predicate: Callable[[Any], Any]) -> 'CheckedList':
        return self._with(v for v in self._values if predicate(v))

    def reject(self, predicate: Callable[[Any], Any]) -> 'CheckedList':
        return self._with(v for v in self._values if not predicate(v))

    def sort(self, comparator: Optional[Callable[[Any, Any], int]] = None, *, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False) -> 'CheckedList':
        """Return a sorted copy. comparator is a cmp-style function (negative, zero, positive)."""
        return self._with(sorted(self._values, key=_sort_key(comparator, key), reverse=reverse))

    def max(self, n: Optional[int] = None, *, key: Optional[Callable[[Any], Any]] = None) -> Any:
        """The largest element (None if empty), or a CheckedList of the n largest."""
        if n is None:
            return max(self._values, key=key, default=None)
        return self._with(heapq.nlargest(n, self._values, key=key))

    def min(self, n: Optional[int] = None, *, key: Optional[Callable[[Any], Any]] = None) -> Any:
        """The smallest element (None if empty), or a CheckedList of the n smallest."""
        if n is None:
            return min(self._values, key=key, default=None)
        return self._with(heapq.nsmallest(n, self._values, key=key))

    def minmax(self, *, key: Optional[Callable[[Any], Any]] = None) -> Tuple[Any, Any]:
        return self.min(key=key), self.max(key=key)

    def map(self, element_type: Any, fn: Callable[[Any], Any]) -> 'CheckedList':
        """Return a new CheckedList of fn(v) for each element, typed as element_type.

        If (self.element_type, fn) is registered in the transform cache with a
        result type that is a subtype of element_type, the mapped values are
        trusted. Otherwise they are validated like a new list.

        Raises:
            TypeMismatchError: If a mapped value does not match element_type.
        """
        target = to_descriptor(element_type)
        declared = lookup_transform(self._element_type, fn)
        if declared is not None and declared.subtype_of(target):
            if _log.isEnabledFor(logging.DEBUG):
                _log.debug(f"TRACE checked.CheckedList.map: Fast path, {declared.describe()} <= {target.describe()}")
            return type(self)._unchecked([fn(v) for v in self._values], target, ArrayType(target))

        if _log.isEnabledFor(logging.DEBUG):
            _log.debug(f"TRACE checked.CheckedList.map: Validating mapped values against {target.describe()}")
        collection_type = ArrayType(target)
        values = self._validated([fn(v) for v in self._values], collection_type, 'map')
        return type(self)._unchecked(values, target, collection_type)

    transform = map

    ## ===== SET OPERATORS ===== ##
    def __and__(self, other: Any) -> 'CheckedList':
        """Elements of self also in other, in order, without duplicates."""
        other_values = self._operand_values(other, '&')
        return self._with(_unique(v for v in self._values if v in other_values))

    def __sub__(self, other: Any) -> 'CheckedList':
        other_values = self._operand_values(other, '-')
        return self._with(v for v in self._values if v not in other_values)

    def __or__(self, other: Any) -> 'CheckedList':
        """Elements of self then of other, without duplicates."""
        incoming = self._foreign_values(other, '|')
        return self._with(_unique([*self._values, *incoming]))

    def __add__(self, other: Any) -> 'CheckedList':
        incoming = self._foreign_values(other, '+')
        return self._with([*self._values, *incoming])

    ## ===== FREEZING ===== ##
    def freeze(self) -> 'CheckedList':
        """Make the list immutable. Later mutations raise ImmutableError."""
        if not self._frozen:
            self._values = tuple(self._values)
            self._frozen = True
        return self

@dataclasses.dataclass(frozen=True, repr=False)
class CheckedListType(Descriptor):
    """Matches CheckedLists whose declared element type is a subtype of element_type.

    Calling it builds a new CheckedList: ``CheckedListOf(int)(1, 2, 3)``.
    """
    element_type: Descriptor

    def match(self, value: Any) -> bool:
        return isinstance(value, CheckedList) and value.element_type.subtype_of(self.element_type)

    def _subtype_of(self, other: Descriptor) -> bool:
        return isinstance(other, CheckedListType) and self.element_type.subtype_of(other.element_type)

    def describe(self) -> str:
        return f"CheckedListOf({self.element_type.describe()})"

    def __call__(self, *values: Any) -> CheckedList:
        return CheckedList(values, self.element_type)

# ===== FUNCTIONS ===== #

def CheckedListOf(element_type: Any) -> CheckedListType:
    return CheckedListType(to_descriptor(element_type))

def _sort_key(comparator: Optional[Callable[[Any, Any], int]], key: Optional[Callable[[Any], Any]]) -> Optional[Callable[[Any], Any]]:
    if comparator is not None and key is not None:
        raise ArgumentError("Pass either a comparator or a key, not both.")
    if comparator is not None:
        return functools.cmp_to_key(comparator)
    return key

def _unique(values: Iterable[Any]) -> List[Any]:
    # Membership by equality, so unhashable elements are fine
    result: List[Any] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = ['CheckedList', 'CheckedListOf', 'CheckedListType']

# ===== MODULE DOCSTRING ===== #
"""
Type descriptor variants for castiron.

Every descriptor is an immutable node answering three questions:
- ``match(value)``: does this value conform?
- ``subtype_of(other)``: is every value I match provably matched by ``other``?
- ``describe()``: a short display string (also used as ``repr``).

The variant set is closed: combinators (Union, Intersection, Not, Nilable,
Constraint), structural matchers (Range, Tuple, Shape, the collection
family, Mapping), nominal and behavioural matchers (Instance, Class,
Descendant, Interface, Predicate, Unit, Equal, Within, Regex) and the lazy
Deferred. ``castiron.types`` is the factory namespace that builds them and
normalizes where needed; the classes here assume their children are already
descriptors.

Subtyping is sound but incomplete. Variants are compared against the same
variant only (plus the bottom ``Never`` and the top ``Void``); anything not
provable answers False.
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import (
    Any, Callable, Final,
    FrozenSet, List, Optional,
    Tuple,
)
import collections.abc
import dataclasses
import threading
import logging
import abc
import re

## ===== LOCAL ===== ##
from .config import _SINGLETON_TYPES
from .error_utils import ConfigurationError
from .type_utils import (
    MISSING, RangeLike, TEXT_TYPES,
    is_instance_optimized,
    is_subclass_safe,
    is_typing_annotation,
    range_contains,
    range_endpoints,
    read_attribute,
    read_field,
)

# ===== GLOBALS ===== #

## ===== LOGGER ===== ##
_log: Final[logging.Logger] = logging.getLogger('castiron')

# ===== BASE CLASS ===== #

class Descriptor(abc.ABC):
    """Base class of every type descriptor."""

    @abc.abstractmethod
    def match(self, value: Any) -> bool:
        """Return True if value conforms to this descriptor. Pure and total."""

    @abc.abstractmethod
    def describe(self) -> str:
        """Return a short display string for this descriptor."""

    def subtype_of(self, other: 'Descriptor') -> bool:
        """Return True if every value matching self provably matches other.

        Reflexive. May answer False for semantically equivalent descriptors
        with different structure; never answers True incorrectly.
        """
        if isinstance(other, DeferredType):
            other = other.resolve()
        if other is self or other == self:
            return True
        if isinstance(other, VoidType):
            return True
        return self._subtype_of(other)

    def _subtype_of(self, other: 'Descriptor') -> bool:
        # Same-variant structural rules live in the overrides
        return False

    def __repr__(self) -> str:
        return self.describe()

def _describe_all(descriptors: Tuple[Descriptor, ...]) -> str:
    return ", ".join(d.describe() for d in descriptors)

def _class_name(cls: type) -> str:
    if cls.__module__ == 'builtins':
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"

# ===== TOP / BOTTOM ===== #

@dataclasses.dataclass(frozen=True, repr=False)
class AnyType(Descriptor):
    """Matches any value except None."""
    def match(self, value: Any) -> bool:
        return value is not None

    def describe(self) -> str:
        return "Any"

@dataclasses.dataclass(frozen=True, repr=False)
class VoidType(Descriptor):
    """Matches every value, None included."""
    def match(self, value: Any) -> bool:
        return True

    def describe(self) -> str:
        return "Void"

@dataclasses.dataclass(frozen=True, repr=False)
class NeverType(Descriptor):
    """Matches nothing. Subtype of every descriptor."""
    def match(self, value: Any) -> bool:
        return False

    def subtype_of(self, other: Descriptor) -> bool:
        return True

    def describe(self) -> str:
        return "Never"

ANY: Final[AnyType] = AnyType()
VOID: Final[VoidType] = VoidType()
NEVER: Final[NeverType] = NeverType()

# ===== COMBINATORS ===== #

@dataclasses.dataclass(frozen=True, repr=False)
class UnionType(Descriptor):
    types: Tuple[Descriptor, ...]

    def match(self, value: Any) -> bool:
        # Left to right, stops at the first match
        return any(t.match(value) for t in self.types)

    def _subtype_of(self, other: Descriptor) -> bool:
        if not isinstance(other, UnionType):
            return False
        return all(any(mine.subtype_of(theirs) for theirs in other.types) for mine in self.types)

    def describe(self) -> str:
        return f"Union({_describe_all(self.types)})"

@dataclasses.dataclass(frozen=True, repr=False)
class IntersectionType(Descriptor):
    types: Tuple[Descriptor, ...]

    def match(self, value: Any) -> bool:
        # Left to right, stops at the first mismatch
        return all(t.match(value) for t in self.types)

    def _subtype_of(self, other: Descriptor) -> bool:
        if not isinstance(other, IntersectionType):
            return False
        return all(any(mine.subtype_of(theirs) for mine in self.types) for theirs in other.types)

    def describe(self) -> str:
        return f"Intersection({_describe_all(self.types)})"

@dataclasses.dataclass(frozen=True, repr=False)
class NotType(Descriptor):
    inner: Descriptor

    def match(self, value: Any) -> bool:
        return not self.inner.match(value)

    def _subtype_of(self, other: Descriptor) -> bool:
        # Contravariant: Not(A) <= Not(B) when B <= A
        return isinstance(other, NotType) and other.inner.subtype_of(self.inner)

    def describe(self) -> str:
        return f"Not({self.inner.describe()})"

@dataclasses.dataclass(frozen=True, repr=False)
class NilableType(Descriptor):
    inner: Descriptor

    def match(self, value: Any) -> bool:
        return value is None or self.inner.match(value)

    def _subtype_of(self, other: Descriptor) -> bool:
        return isinstance(other, NilableType) and self.inner.subtype_of(other.inner)

    def describe(self) -> str:
        return f"Nilable({self.inner.describe()})"

@dataclasses.dataclass(frozen=True, repr=False)
class ConstraintType(Descriptor):
    """Matches when every base matches and every named attribute satisfies its expectation.

    Attributes:
        bases: Descriptors the value itself must match.
        predicates: (attribute name, descriptor) pairs. Methods are called with
            no arguments before the attribute value is matched.
    """
    bases: Tuple[Descriptor, ...]
    predicates: Tuple[Tuple[str, Descriptor], ...]

    def match(self, value: Any) -> bool:
        if not all(base.match(value) for base in self.bases):
            return False
        for name, expected in self.predicates:
            attribute = read_attribute(value, name)
            if attribute is MISSING or not expected.match(attribute):
                return False
        return True

    def _subtype_of(self, other: Descriptor) -> bool:
        if not isinstance(other, ConstraintType):
            return False
        if not all(any(mine.subtype_of(theirs) for mine in self.bases) for theirs in other.bases):
            return False
        mine = dict(self.predicates)
        for name, expected in other.predicates:
            if name not in mine or not mine[name].subtype_of(expected):
                return False
        return True

    def describe(self) -> str:
        parts = [b.describe() for b in self.bases]
        parts.extend(f"{name}={expected.describe()}" for name, expected in self.predicates)
        return f"Constraint({', '.join(parts)})"

# ===== STRUCTURAL ===== #

@dataclasses.dataclass(frozen=True, repr=False)
class RangeType(Descriptor):
    """Matches a ``range`` or ``slice`` whose present endpoints match element_type.

    A range with neither endpoint never matches.
    """
    element_type: Descriptor

    def match(self, value: Any) -> bool:
        if not isinstance(value, (range, slice)):
            return False
        begin, end = range_endpoints(value)
        if begin is None and end is None:
            return False
        element_type = self.element_type
        if begin is None:
            return element_type.match(end)
        if end is None:
            return element_type.match(begin)
        return element_type.match(begin) and element_type.match(end)

    def _subtype_of(self, other: Descriptor) -> bool:
        return isinstance(other, RangeType) and self.element_type.subtype_of(other.element_type)

    def describe(self) -> str:
        return f"RangeOf({self.element_type.describe()})"

@dataclasses.dataclass(frozen=True, repr=False)
class TupleType(Descriptor):
    types: Tuple[Descriptor, ...]

    def match(self, value: Any) -> bool:
        if not isinstance(value, (tuple, list)) or len(value) != len(self.types):
            return False
        return all(t.match(item) for t, item in zip(self.types, value))

    def _subtype_of(self, other: Descriptor) -> bool:
        if not isinstance(other, TupleType) or len(other.types) != len(self.types):
            return False
        return all(mine.subtype_of(theirs) for mine, theirs in zip(self.types, other.types))

    def describe(self) -> str:
        return f"TupleOf({_describe_all(self.types)})"

@dataclasses.dataclass(frozen=True, repr=False)
class ShapeType(Descriptor):
    """Matches values exposing every named field (mapping key or attribute)."""
    fields: Tuple[Tuple[str, Descriptor], ...]

    def match(self, value: Any) -> bool:
        for name, expected in self.fields:
            field = read_field(value, name)
            if field is MISSING or not expected.match(field):
                return False
        return True

    def _subtype_of(self, other: Descriptor) -> bool:
        # Width and depth: every field other requires, we require at least as strictly
        if not isinstance(other, ShapeType):
            return False
        mine = dict(self.fields)
        return all(name in mine and mine[name].subtype_of(expected) for name, expected in other.fields)

    def describe(self) -> str:
        fields = ", ".join(f"{name}={expected.describe()}" for name, expected in self.fields)
        return f"Shape({fields})"

## ===== COLLECTIONS ===== ##
@dataclasses.dataclass(frozen=True, repr=False)
class EnumerableType(Descriptor):
    """Matches a re-iterable collection whose elements all match element_type.

    Iterators are not collections, so matching never consumes its input.
    Strings and byte strings are values, not collections of characters.
    ArrayType and SetType narrow the accepted container kinds; a narrower
    kind is a subtype of a wider one with a covariant element type.
    """
    element_type: Descriptor

    _container_types = (collections.abc.Collection,)
    _label = "EnumerableOf"

    def match(self, value: Any) -> bool:
        if isinstance(value, TEXT_TYPES) or not isinstance(value, self._container_types):
            return False
        element_type = self.element_type
        return all(element_type.match(item) for item in value)

    def _subtype_of(self, other: Descriptor) -> bool:
        return isinstance(other, EnumerableType) and isinstance(self, type(other)) and self.element_type.subtype_of(other.element_type)

    def describe(self) -> str:
        return f"{self._label}({self.element_type.describe()})"

@dataclasses.dataclass(frozen=True, repr=False)
class ArrayType(EnumerableType):
    _container_types = (list,)
    _label = "ArrayOf"

@dataclasses.dataclass(frozen=True, repr=False)
class SetType(EnumerableType):
    _container_types = (set, frozenset)
    _label = "SetOf"

@dataclasses.dataclass(frozen=True, repr=False)
class MappingType(Descriptor):
    key_type: Descriptor
    value_type: Descriptor

    def match(self, value: Any) -> bool:
        if not isinstance(value, collections.abc.Mapping):
            return False
        key_type, value_type = self.key_type, self.value_type
        return all(key_type.match(k) and value_type.match(v) for k, v in value.items())

    def _subtype_of(self, other: Descriptor) -> bool:
        return (
            isinstance(other, MappingType)
            and self.key_type.subtype_of(other.key_type)
            and self.value_type.subtype_of(other.value_type)
        )

    def describe(self) -> str:
        return f"MappingOf({self.key_type.describe()}, {self.value_type.describe()})"

# ===== NOMINAL / BEHAVIOURAL ===== #

@dataclasses.dataclass(frozen=True, repr=False)
class InstanceType(Descriptor):
    """Matches instances of cls. This is what a bare class means."""
    cls: type

    def __post_init__(self):
        if not isinstance(self.cls, type):
            raise ConfigurationError(f"InstanceOf expects a class, got {self.cls!r}")

    def match(self, value: Any) -> bool:
        return is_instance_optimized(value, self.cls)

    def _subtype_of(self, other: Descriptor) -> bool:
        return isinstance(other, InstanceType) and is_subclass_safe(self.cls, other.cls)

    def describe(self) -> str:
        return _class_name(self.cls)

@dataclasses.dataclass(frozen=True, repr=False)
class ClassType(Descriptor):
    """Matches a class value that is cls or one of its subclasses."""
    cls: type

    def __post_init__(self):
        if not isinstance(self.cls, type):
            raise ConfigurationError(f"{type(self).__name__} expects a class, got {self.cls!r}")

    def match(self, value: Any) -> bool:
        return is_subclass_safe(value, self.cls)

    def _subtype_of(self, other: Descriptor) -> bool:
        # A strict-descendant matcher fits inside a class matcher, not the reverse
        if type(other) is ClassType or (isinstance(other, DescendantType) and isinstance(self, DescendantType)):
            return is_subclass_safe(self.cls, other.cls)
        return False

    def describe(self) -> str:
        return f"ClassOf({_class_name(self.cls)})"

@dataclasses.dataclass(frozen=True, repr=False)
class DescendantType(ClassType):
    """Matches a class value that is a strict subclass of cls."""

    def match(self, value: Any) -> bool:
        return value is not self.cls and is_subclass_safe(value, self.cls)

    def describe(self) -> str:
        return f"DescendantOf({_class_name(self.cls)})"

@dataclasses.dataclass(frozen=True, repr=False)
class InterfaceType(Descriptor):
    """Matches values that respond to every named method."""
    methods: FrozenSet[str]

    def __post_init__(self):
        if not all(isinstance(name, str) for name in self.methods):
            raise ConfigurationError(f"Interface method names must be strings, got {sorted(map(repr, self.methods))}")

    def match(self, value: Any) -> bool:
        return all(callable(getattr(value, name, None)) for name in self.methods)

    def _subtype_of(self, other: Descriptor) -> bool:
        return isinstance(other, InterfaceType) and other.methods <= self.methods

    def describe(self) -> str:
        return f"Interface({', '.join(sorted(self.methods))})"

@dataclasses.dataclass(frozen=True, repr=False)
class PredicateType(Descriptor):
    """Matches when fn(value) is truthy. fn must be free of side effects."""
    message: str
    fn: Callable[[Any], Any]

    def __post_init__(self):
        if not callable(self.fn):
            raise ConfigurationError(f"Predicate {self.message!r} requires a callable, got {self.fn!r}")

    def match(self, value: Any) -> bool:
        return bool(self.fn(value))

    def describe(self) -> str:
        return f"Predicate({self.message})"

@dataclasses.dataclass(frozen=True, repr=False, eq=False)
class UnitType(Descriptor):
    """Matches only the very same object."""
    obj: Any

    def match(self, value: Any) -> bool:
        return value is self.obj

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, UnitType):
            return NotImplemented
        return other.obj is self.obj

    def __hash__(self) -> int:
        return hash((UnitType, id(self.obj)))

    def describe(self) -> str:
        return f"Unit({self.obj!r})"

@dataclasses.dataclass(frozen=True, repr=False)
class EqualType(Descriptor):
    """Matches values equal to obj. This is what a bare non-class value means."""
    obj: Any

    def match(self, value: Any) -> bool:
        return bool(value == self.obj)

    def describe(self) -> str:
        return repr(self.obj)

@dataclasses.dataclass(frozen=True, repr=False)
class WithinType(Descriptor):
    """Matches members of a ``range`` or ``slice``. This is what a bare range means."""
    container: RangeLike

    def match(self, value: Any) -> bool:
        return range_contains(self.container, value)

    def describe(self) -> str:
        container = self.container
        if isinstance(container, slice):
            start = "" if container.start is None else repr(container.start)
            stop = "" if container.stop is None else repr(container.stop)
            return f"Within({start}:{stop})"
        return f"Within({container!r})"

@dataclasses.dataclass(frozen=True, repr=False)
class RegexType(Descriptor):
    """Matches strings in which pattern is found. This is what a bare compiled regex means."""
    pattern: re.Pattern

    def match(self, value: Any) -> bool:
        return isinstance(value, str) and self.pattern.search(value) is not None

    def describe(self) -> str:
        return f"Regex({self.pattern.pattern!r})"

@dataclasses.dataclass(frozen=True, repr=False)
class BooleanType(Descriptor):
    def match(self, value: Any) -> bool:
        return value is True or value is False

    def describe(self) -> str:
        return "Boolean"

@dataclasses.dataclass(frozen=True, repr=False)
class TruthyType(Descriptor):
    def match(self, value: Any) -> bool:
        return bool(value)

    def describe(self) -> str:
        return "Truthy"

@dataclasses.dataclass(frozen=True, repr=False)
class FalsyType(Descriptor):
    def match(self, value: Any) -> bool:
        return not value

    def describe(self) -> str:
        return "Falsy"

@dataclasses.dataclass(frozen=True, repr=False)
class JSONDataType(Descriptor):
    """Matches values made only of what ``json.loads`` can produce."""

    def match(self, value: Any) -> bool:
        if value is None or isinstance(value, (bool, int, float, str)):
            return True
        if isinstance(value, list):
            return all(self.match(item) for item in value)
        if isinstance(value, dict):
            return all(isinstance(k, str) and self.match(v) for k, v in value.items())
        return False

    def describe(self) -> str:
        return "JSONData"

# ===== LAZY ===== #

class DeferredType(Descriptor):
    """Resolves a zero-argument thunk on first use and memoizes the descriptor.

    Breaks definition-order cycles, e.g. a tree node whose children are nodes.
    Resolution is lazy-once-then-cached; if two threads race, both resolve
    the same thunk and the first stored result wins.
    """

    def __init__(self, thunk: Callable[[], Any]):
        if not callable(thunk):
            raise ConfigurationError(f"Deferred requires a zero-argument callable, got {thunk!r}")
        self._thunk = thunk
        self._resolved: Optional[Descriptor] = None
        self._lock = threading.Lock()

    def resolve(self) -> Descriptor:
        resolved = self._resolved
        if resolved is not None:
            return resolved
        descriptor = to_descriptor(self._thunk())
        with self._lock:
            if self._resolved is None:
                if _log.isEnabledFor(logging.DEBUG):
                    _log.debug(f"TRACE descriptors.DeferredType.resolve: Resolved to {descriptor.describe()}")
                self._resolved = descriptor
            return self._resolved

    @property
    def is_resolved(self) -> bool:
        return self._resolved is not None

    def match(self, value: Any) -> bool:
        return self.resolve().match(value)

    def subtype_of(self, other: Descriptor) -> bool:
        if other is self:
            return True
        return self.resolve().subtype_of(other)

    def describe(self) -> str:
        # Never resolve here: a self-referential descriptor would recurse forever
        return "Deferred"

# ===== COERCION ===== #

def to_descriptor(obj: Any) -> Descriptor:
    """Interpret a bare value given where a descriptor is expected.

    - descriptors are returned unchanged
    - ``typing.Any`` matches everything (Void)
    - classes match their instances (InstanceOf)
    - None, booleans and other singletons match by identity (Unit)
    - ``range``/``slice`` match their members (Within)
    - compiled regexes match strings containing the pattern (Regex)
    - other callables are predicates
    - anything else matches by equality (Equal)

    Raises:
        ConfigurationError: For ``typing`` annotations such as ``List[int]``,
            which must be spelled with the factory namespace instead.
    """
    if isinstance(obj, Descriptor):
        return obj
    if obj is Any:
        return VOID
    if is_typing_annotation(obj):
        raise ConfigurationError(
            f"{obj!r} is a typing annotation, not a descriptor. "
            f"Use the castiron.types factories (e.g. ArrayOf, Union, Nilable) instead."
        )
    if isinstance(obj, type):
        return InstanceType(obj)
    if type(obj) in _SINGLETON_TYPES:
        return UnitType(obj)
    if isinstance(obj, (range, slice)):
        return WithinType(obj)
    if isinstance(obj, re.Pattern):
        return RegexType(obj)
    if callable(obj):
        return PredicateType(getattr(obj, '__name__', repr(obj)), obj)
    return EqualType(obj)

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = [
    'ANY', 'VOID', 'NEVER',
    'AnyType', 'ArrayType', 'BooleanType', 'ClassType', 'ConstraintType',
    'DeferredType', 'DescendantType', 'Descriptor', 'EnumerableType',
    'EqualType', 'FalsyType', 'InstanceType', 'InterfaceType',
    'IntersectionType', 'JSONDataType', 'MappingType', 'NeverType',
    'NilableType', 'NotType', 'PredicateType', 'RangeType', 'RegexType',
    'SetType', 'ShapeType', 'TruthyType', 'TupleType', 'UnionType',
    'UnitType', 'VoidType', 'WithinType',
    'to_descriptor',
]

# ===== MODULE DOCSTRING ===== #
"""
Descriptor factory namespace.

One factory per descriptor variant. Factories accept nested descriptors or
bare values (classes, ranges, regexes, callables, plain values), coerce them
with ``to_descriptor`` and normalize where the algebra says so:
``Not(Not(x))`` is ``x`` and a ``Constraint`` with no predicates is its base.

Usage:
    from castiron import types as t

    t.ArrayOf(int).match([1, 2, 3])                    # True
    t.Union(int, str).match("x")                       # True
    t.Nilable(t.Shape(name=str, age=t.Integer(range(0, 130)))).match(None)  # True
"""

# ===== IMPORTS ===== #

## ===== STANDARD LIBRARY ===== ##
from typing import Any, Callable, Final, List, Optional
import datetime
import re

## ===== LOCAL ===== ##
from .checked import CheckedListOf
from .descriptors import (
    ANY, NEVER, VOID,
    ArrayType, BooleanType, ClassType, ConstraintType, DeferredType,
    DescendantType, Descriptor, EnumerableType, EqualType, FalsyType,
    InstanceType, InterfaceType, IntersectionType, JSONDataType,
    MappingType, NilableType, NotType, PredicateType, RangeType, SetType,
    ShapeType, TruthyType, TupleType, UnionType, UnitType, WithinType,
    to_descriptor,
)
from .error_utils import ConfigurationError

# ===== CONSTANTS ===== #

Any_: Final[Descriptor] = ANY
Void: Final[Descriptor] = VOID
Never: Final[Descriptor] = NEVER
Boolean: Final[Descriptor] = BooleanType()
Truthy: Final[Descriptor] = TruthyType()
Falsy: Final[Descriptor] = FalsyType()
JSONData: Final[Descriptor] = JSONDataType()
Callable_: Final[Descriptor] = InterfaceType(frozenset({'__call__'}))

# ===== COMBINATORS ===== #

def Union(*types: Any) -> Descriptor:
    """Matches if *any* given type is matched, tried left to right."""
    if not types:
        raise ConfigurationError("Union requires at least one type")
    return UnionType(tuple(to_descriptor(t) for t in types))

def Intersection(*types: Any) -> Descriptor:
    """Matches if *all* given types are matched, tried left to right."""
    if not types:
        raise ConfigurationError("Intersection requires at least one type")
    return IntersectionType(tuple(to_descriptor(t) for t in types))

def Not(*types: Any) -> Descriptor:
    """Matches if the given type is *not* matched.

    Several types mean ``Not(Union(...))``. Double negation collapses:
    ``Not(Not(x))`` returns ``x`` itself.
    """
    if not types:
        raise ConfigurationError("Not requires at least one type")
    if len(types) > 1:
        return NotType(Union(*types))
    inner = to_descriptor(types[0])
    if isinstance(inner, NotType):
        return inner.inner
    return NotType(inner)

def Nilable(type_: Any) -> Descriptor:
    """Matches None or the given type."""
    return NilableType(to_descriptor(type_))

def Constraint(*bases: Any, **predicates: Any) -> Descriptor:
    """Every base must match and every named attribute must satisfy its expectation.

    Expectations are coerced like any bare value: a class checks the type of
    the attribute, a range checks membership, a plain value checks equality.
    Methods are called with no arguments first.

    ```python
    Constraint(str, isupper=True)
    Constraint(list, __len__=range(1, 4))
    ```
    """
    if not bases:
        raise ConfigurationError("Constraint requires at least one base type")
    if len(bases) == 1 and not predicates:
        return to_descriptor(bases[0])
    return ConstraintType(
        tuple(to_descriptor(b) for b in bases),
        tuple((name, to_descriptor(expected)) for name, expected in predicates.items()),
    )

# ===== STRUCTURAL ===== #

def RangeOf(element_type: Any) -> Descriptor:
    """Matches a ``range`` or ``slice`` whose endpoints match element_type.

    One endpoint of a ``slice`` may be open (``slice(1, None)``); a slice open
    at both ends never matches.
    """
    return RangeType(to_descriptor(element_type))

def TupleOf(*types: Any) -> Descriptor:
    """Matches a tuple or list with exactly these positional types."""
    return TupleType(tuple(to_descriptor(t) for t in types))

def Shape(**fields: Any) -> Descriptor:
    """Matches values exposing each named field (mapping key or attribute)."""
    if not fields:
        raise ConfigurationError("Shape requires at least one field")
    return ShapeType(tuple((name, to_descriptor(t)) for name, t in fields.items()))

def ArrayOf(element_type: Any) -> Descriptor:
    return ArrayType(to_descriptor(element_type))

def SetOf(element_type: Any) -> Descriptor:
    return SetType(to_descriptor(element_type))

def EnumerableOf(element_type: Any) -> Descriptor:
    return EnumerableType(to_descriptor(element_type))

def MappingOf(key_type: Any, value_type: Any) -> Descriptor:
    return MappingType(to_descriptor(key_type), to_descriptor(value_type))

# ===== NOMINAL / BEHAVIOURAL ===== #

def InstanceOf(cls: type) -> Descriptor:
    return InstanceType(cls)

def ClassOf(cls: type) -> Descriptor:
    """Matches the class itself or any subclass (the value is a class)."""
    return ClassType(cls)

def DescendantOf(cls: type) -> Descriptor:
    """Matches strict subclasses of cls (the value is a class)."""
    return DescendantType(cls)

def Interface(*methods: str) -> Descriptor:
    """Matches values responding to all the given methods."""
    if not methods:
        raise ConfigurationError("Interface requires at least one method name")
    return InterfaceType(frozenset(methods))

def Predicate(message: str, fn: Callable[[Any], Any]) -> Descriptor:
    return PredicateType(message, fn)

def Unit(obj: Any) -> Descriptor:
    """Matches only the very same object."""
    return UnitType(obj)

def Equal(obj: Any) -> Descriptor:
    return EqualType(obj)

def Within(container: Any) -> Descriptor:
    if not isinstance(container, (range, slice)):
        raise ConfigurationError(f"Within expects a range or slice, got {type(container).__name__}")
    return WithinType(container)

def Deferred(thunk: Callable[[], Any]) -> Descriptor:
    """Takes the type as a thunk so it is only built when first needed.

    ```python
    Node = Shape(children=ArrayOf(Deferred(lambda: Node)))
    ```
    """
    return DeferredType(thunk)

def Pattern(regex: Any, evaluator: Optional[Callable[..., Any]] = None) -> Descriptor:
    """Matches strings where regex is found and evaluator accepts the captures.

    Positional groups are passed positionally and named groups as keywords.

    Raises:
        ConfigurationError: If no evaluator is given.
    """
    if evaluator is None:
        raise ConfigurationError("Pattern requires an evaluator")
    compiled = re.compile(regex) if isinstance(regex, str) else regex
    named_indexes = set(compiled.groupindex.values())

    def _evaluate(value: Any) -> bool:
        if not isinstance(value, str):
            return False
        data = compiled.search(value)
        if data is None:
            return False
        named = data.groupdict()
        positional = [g for i, g in enumerate(data.groups(), start=1) if i not in named_indexes]
        return bool(evaluator(*positional, **named))

    return PredicateType(f"Pattern({compiled.pattern!r})", _evaluate)

# ===== CONSTRAINED SCALARS ===== #

def Integer(*constraints: Any, **predicates: Any) -> Descriptor:
    """An ``int`` matching the given constraints, e.g. ``Integer(range(18, 128))``."""
    return Constraint(int, *constraints, **predicates)

def Float(*constraints: Any, **predicates: Any) -> Descriptor:
    return Constraint(float, *constraints, **predicates)

def String(*constraints: Any, **predicates: Any) -> Descriptor:
    return Constraint(str, *constraints, **predicates)

def Date(*constraints: Any, **predicates: Any) -> Descriptor:
    """A ``datetime.date`` matching the given constraints, e.g. ``Date(year=2025)``."""
    return Constraint(datetime.date, *constraints, **predicates)

def DateTime(*constraints: Any, **predicates: Any) -> Descriptor:
    return Constraint(datetime.datetime, *constraints, **predicates)

# ===== PUBLIC API EXPORTS ===== #
__all__: Final[List[str]] = [
    'Any_', 'ArrayOf', 'Boolean', 'Callable_', 'CheckedListOf', 'ClassOf', 'Constraint',
    'Date', 'DateTime', 'Deferred', 'DescendantOf', 'EnumerableOf',
    'Equal', 'Falsy', 'Float', 'InstanceOf', 'Integer', 'Interface',
    'Intersection', 'JSONData', 'MappingOf', 'Never', 'Nilable', 'Not',
    'Pattern', 'Predicate', 'RangeOf', 'SetOf', 'Shape', 'String',
    'Truthy', 'TupleOf', 'Union', 'Unit', 'Void', 'Within',
]

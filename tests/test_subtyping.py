import pytest

from castiron import types as t
from castiron import subtype
from castiron.descriptors import to_descriptor

# ===== MOCKS ===== #

class Base: pass
class Derived(Base): pass
class Unrelated: pass

ALL_DESCRIPTORS = [
    t.Any_, t.Void, t.Never, t.Boolean,
    t.InstanceOf(int), t.ClassOf(Base), t.DescendantOf(Base),
    t.Union(int, str), t.Intersection(int, t.Truthy), t.Not(str), t.Nilable(int),
    t.RangeOf(int), t.TupleOf(int, str), t.Shape(x=int),
    t.ArrayOf(int), t.SetOf(int), t.EnumerableOf(int), t.MappingOf(str, int),
    t.Interface('read'), t.Unit(None), t.Equal(3), t.Within(range(3)),
    t.Integer(real=range(0, 3)), t.CheckedListOf(int),
]

# ===== LATTICE ===== #

@pytest.mark.parametrize("descriptor", ALL_DESCRIPTORS, ids=repr)
def test_reflexivity(descriptor):
    assert descriptor.subtype_of(descriptor) is True

@pytest.mark.parametrize("descriptor", ALL_DESCRIPTORS, ids=repr)
def test_never_is_bottom_and_void_is_top(descriptor):
    assert t.Never.subtype_of(descriptor) is True
    assert descriptor.subtype_of(t.Void) is True

def test_structurally_equal_descriptors_are_subtypes():
    assert t.ArrayOf(int).subtype_of(t.ArrayOf(int)) is True
    assert t.Union(int, str).subtype_of(t.Union(int, str)) is True

def test_void_is_not_a_subtype_of_narrower_types():
    assert t.Void.subtype_of(t.InstanceOf(int)) is False
    assert t.Void.subtype_of(t.Any_) is False

# ===== NOMINAL ===== #

def test_instance_subtyping_follows_classes():
    assert subtype(Derived, Base) is True
    assert subtype(Base, Derived) is False
    assert subtype(bool, int) is True
    assert subtype(Unrelated, Base) is False

def test_class_and_descendant():
    assert t.ClassOf(Derived).subtype_of(t.ClassOf(Base)) is True
    assert t.DescendantOf(Base).subtype_of(t.ClassOf(Base)) is True
    assert t.ClassOf(Base).subtype_of(t.DescendantOf(Base)) is False
    assert t.DescendantOf(Derived).subtype_of(t.DescendantOf(Base)) is True

def test_interface_method_inclusion():
    assert t.Interface('read', 'write').subtype_of(t.Interface('read')) is True
    assert t.Interface('read').subtype_of(t.Interface('read', 'write')) is False

# ===== COMBINATORS ===== #

def test_union_subtyping():
    assert subtype(t.Union(int, str), t.Union(int, str, float)) is True
    assert subtype(t.Union(bool, str), t.Union(int, str)) is True
    assert subtype(t.Union(int, float), t.Union(int, str)) is False

def test_intersection_subtyping():
    assert subtype(t.Intersection(int, t.Truthy), t.Intersection(int)) is True
    assert subtype(t.Intersection(int), t.Intersection(int, t.Truthy)) is False

def test_not_is_contravariant():
    assert subtype(t.Not(int), t.Not(bool)) is True
    assert subtype(t.Not(bool), t.Not(int)) is False

def test_nilable_is_covariant():
    assert subtype(t.Nilable(bool), t.Nilable(int)) is True
    assert subtype(t.Nilable(int), t.Nilable(bool)) is False

def test_constraint_subtyping():
    narrow = t.Integer(real=range(0, 3), imag=0)
    wide = t.Integer(real=range(0, 3))
    assert subtype(narrow, wide) is True
    assert subtype(wide, narrow) is False

# ===== STRUCTURAL ===== #

def test_collection_family():
    assert subtype(t.ArrayOf(bool), t.ArrayOf(int)) is True
    assert subtype(t.ArrayOf(int), t.ArrayOf(bool)) is False
    assert subtype(t.ArrayOf(int), t.EnumerableOf(int)) is True
    assert subtype(t.SetOf(bool), t.EnumerableOf(int)) is True
    assert subtype(t.EnumerableOf(int), t.ArrayOf(int)) is False
    assert subtype(t.ArrayOf(int), t.SetOf(int)) is False

def test_range_and_mapping_are_covariant():
    assert subtype(t.RangeOf(bool), t.RangeOf(int)) is True
    assert subtype(t.RangeOf(int), t.RangeOf(str)) is False
    assert subtype(t.MappingOf(str, bool), t.MappingOf(str, int)) is True
    assert subtype(t.MappingOf(str, int), t.MappingOf(str, bool)) is False

def test_tuple_is_pairwise():
    assert subtype(t.TupleOf(bool, str), t.TupleOf(int, str)) is True
    assert subtype(t.TupleOf(int, str), t.TupleOf(int)) is False

def test_shape_width_and_depth():
    assert subtype(t.Shape(x=bool, y=int), t.Shape(x=int)) is True
    assert subtype(t.Shape(x=int), t.Shape(x=int, y=int)) is False
    assert subtype(t.Shape(x=int), t.Shape(x=bool)) is False

def test_checked_list_type_is_covariant():
    assert subtype(t.CheckedListOf(bool), t.CheckedListOf(int)) is True
    assert subtype(t.CheckedListOf(int), t.CheckedListOf(bool)) is False

# ===== INCOMPLETENESS ===== #

def test_different_variants_are_not_compared():
    # Semantically Nilable(int) == Union(None, int), structurally not provable
    assert subtype(t.Nilable(int), t.Union(None, int)) is False
    assert subtype(t.ArrayOf(int), t.InstanceOf(list)) is False

def test_deferred_resolves_for_subtyping(call_counter):
    thunk = call_counter(lambda: t.ArrayOf(bool))
    deferred = t.Deferred(thunk)
    assert subtype(deferred, t.ArrayOf(int)) is True
    assert subtype(t.ArrayOf(bool), deferred) is True
    assert thunk.count == 1

def test_bare_values_are_coerced():
    assert subtype(bool, to_descriptor(int)) is True
    assert subtype(None, None) is True

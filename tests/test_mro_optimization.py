import pytest

from castiron import types as t
from castiron.type_utils import (
    get_cached_mro_set,
    is_instance_optimized,
    is_subclass_safe,
    _mro_cache,
)

# --- Test Setup --- 

class Base: pass
class Derived(Base): pass
class Mixin:
    def mixin_method(self): pass
class ComplexDerived(Derived, Mixin): pass
class Unrelated: pass

# --- Direct Cache & Optimization Tests --- 

def test_get_cached_mro_set_populates_cache():
    """Verify get_cached_mro_set calculates and caches the MRO set."""
    assert Base not in _mro_cache
    mro_set = get_cached_mro_set(Base)
    assert Base in _mro_cache
    assert _mro_cache[Base] == mro_set
    assert mro_set == {Base, object}

def test_get_cached_mro_set_uses_cache():
    first_mro_set = get_cached_mro_set(Derived)
    assert _mro_cache[Derived] == {Derived, Base, object}
    second_mro_set = get_cached_mro_set(Derived)
    assert second_mro_set is first_mro_set

def test_get_cached_mro_set_complex_inheritance():
    mro_set = get_cached_mro_set(ComplexDerived)
    assert mro_set == {ComplexDerived, Derived, Base, Mixin, object}

def test_is_instance_optimized_direct_match():
    assert is_instance_optimized(Derived(), Derived) is True

def test_is_instance_optimized_cache_hit_false():
    d = Derived()
    get_cached_mro_set(Derived)
    assert is_instance_optimized(d, Unrelated) is False
    assert is_instance_optimized(d, Mixin) is False

def test_is_instance_optimized_cache_miss():
    """Test that a check populates the cache if missed."""
    assert Derived not in _mro_cache
    assert is_instance_optimized(Derived(), Base) is True
    assert _mro_cache[Derived] == {Derived, Base, object}

def test_is_instance_optimized_falls_back_to_isinstance_for_abcs():
    """Virtual subclasses are not in the MRO; isinstance still sees them."""
    import collections.abc
    assert collections.abc.Sized not in get_cached_mro_set(list)
    assert is_instance_optimized([1], collections.abc.Sized) is True

def test_is_subclass_safe():
    assert is_subclass_safe(Derived, Base) is True
    assert is_subclass_safe(Base, Derived) is False
    assert is_subclass_safe(Derived(), Base) is False
    assert is_subclass_safe("not a class", object) is False

# --- Descriptor integration ---

def test_instance_descriptor_uses_mro_cache():
    assert ComplexDerived not in _mro_cache
    assert t.InstanceOf(Mixin).match(ComplexDerived()) is True
    assert ComplexDerived in _mro_cache

def test_class_descriptor_uses_mro_cache():
    assert t.ClassOf(Base).match(ComplexDerived) is True
    assert ComplexDerived in _mro_cache

def test_get_cached_mro_set_concurrent_callers_share_one_entry():
    import threading
    results = []
    def worker():
        results.append(get_cached_mro_set(ComplexDerived))
    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(results) == 8
    assert all(result is _mro_cache[ComplexDerived] for result in results)

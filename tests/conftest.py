import logging
import pytest
import sys
import os

# Add src dir to path to allow importing castiron without installing it
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from castiron.type_utils import _mro_cache, _mro_cache_lock
from castiron.transforms import clear_transforms, set_transform_cache_enabled
from castiron.config import TRANSFORM_CACHE_ENABLED_DEFAULT


@pytest.fixture(scope="function", autouse=True)
def clear_caches():
    """Clears the process-wide caches before each test function runs."""
    with _mro_cache_lock:
        _mro_cache.clear()
    clear_transforms()
    set_transform_cache_enabled(TRANSFORM_CACHE_ENABLED_DEFAULT)
    yield
    clear_transforms()
    set_transform_cache_enabled(TRANSFORM_CACHE_ENABLED_DEFAULT)


@pytest.fixture
def castiron_debug_logging():
    """Turns on TRACE logging for the duration of a test."""
    castiron_logger = logging.getLogger('castiron')
    previous = castiron_logger.level
    castiron_logger.setLevel(logging.DEBUG)
    yield castiron_logger
    castiron_logger.setLevel(previous)


class CallCounter:
    """Wraps a callable and counts how often it is invoked."""
    def __init__(self, fn=None):
        self.fn = fn
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.fn is None:
            return None
        return self.fn(*args, **kwargs)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def call_counter():
    return CallCounter

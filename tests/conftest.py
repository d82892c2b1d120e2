"""
Test configuration and fixtures for ndconstruct tests.

Provides common fixtures, source builders and assertion helpers for all test
modules.
"""

import numpy as np
import pytest

from ndconstruct import (
    ConstructionConfig, ElementType, NumpyStorageEngine, TypeTag, unregister_scalar_kind,
)


@pytest.fixture
def engine():
    """Fresh NumPy storage engine."""
    return NumpyStorageEngine()


@pytest.fixture
def default_config():
    """Library defaults."""
    return ConstructionConfig()


@pytest.fixture
def scalar_config():
    """Config that allows 0-d arrays from bare scalars."""
    return ConstructionConfig(allow_scalar_conversion=True)


@pytest.fixture
def object_resolver_config():
    """Config whose default resolver turns unknown leaves into objects."""
    return ConstructionConfig(default_type_resolver=lambda value: ElementType.from_tag(TypeTag.OBJECT))


@pytest.fixture
def record_dtype():
    """Structured dtype with two named fields."""
    return np.dtype([("x", "i4"), ("y", "f8")])


@pytest.fixture
def swapped_int32():
    """int32 in the non-native byte order of the running machine."""
    return np.dtype("i4").newbyteorder("S")


@pytest.fixture
def scalar_registry():
    """Track scalar kinds registered by a test and drop them afterwards."""
    registered = []
    yield registered
    for kind in registered:
        unregister_scalar_kind(kind)


def nest(value, levels):
    """Wrap ``value`` in ``levels`` single-element lists."""
    for _ in range(levels):
        value = [value]
    return value


def assert_array_matches(arr, expected_shape, expected_dtype, expected_values=None):
    """Assert shape, dtype and (optionally) contents of a constructed array."""
    assert isinstance(arr, np.ndarray)
    assert arr.shape == tuple(expected_shape), f"shape {arr.shape} != {tuple(expected_shape)}"
    assert arr.dtype == np.dtype(expected_dtype), f"dtype {arr.dtype} != {np.dtype(expected_dtype)}"
    if expected_values is not None:
        np.testing.assert_array_equal(arr, np.asarray(expected_values, dtype=arr.dtype))

"""
Scalar classification.

Maps a single non-sequence Python value to its minimal canonical element type.
Coverage is a fixed table of host scalar kinds that can be extended through
:func:`register_scalar_kind`; anything else fails with UnsupportedScalarKind.
"""

import numbers
import warnings
from typing import Any, Dict

import numpy as np

from ..errors import UnsupportedScalarKind
from .dtypes import ElementType, TypeTag

_INT32_MIN, _INT32_MAX = -(2 ** 31), 2 ** 31 - 1
_INT64_MIN, _INT64_MAX = -(2 ** 63), 2 ** 63 - 1

# Lookup is by exact type first, then isinstance in insertion order.
# bool must precede anything int-like.
_BUILTIN_KINDS = {
    bool: TypeTag.BOOL,
    np.bool_: TypeTag.BOOL,
    float: TypeTag.DOUBLE,
    np.float64: TypeTag.DOUBLE,
    np.float32: TypeTag.FLOAT,
    np.int8: TypeTag.BYTE,
    np.int16: TypeTag.LONG,
    np.int32: TypeTag.LONG,
    np.int64: TypeTag.LONGLONG,
}

_SCALAR_KINDS: Dict[type, TypeTag] = dict(_BUILTIN_KINDS)


def register_scalar_kind(pytype: type, tag: TypeTag, *, override: bool = False) -> None:
    """
    Teach the classifier a new host scalar kind.

    Args:
        pytype: Python type whose instances should classify as ``tag``
        tag: Canonical element type for those instances
        override: Replace an existing registration without warning

    Example:
        register_scalar_kind(decimal.Decimal, TypeTag.OBJECT)
    """
    if not isinstance(pytype, type):
        raise TypeError(f"Expected a type, got {pytype!r}")
    tag = TypeTag(tag)
    if tag is TypeTag.NOTYPE or tag is TypeTag.VOID:
        raise ValueError(f"Cannot register scalar kind as {tag.name}")
    existing = _SCALAR_KINDS.get(pytype)
    if existing is not None and existing is not tag and not override:
        warnings.warn(
            f"Overriding scalar kind {pytype.__name__}: {existing.name} -> {tag.name}. "
            f"Use override=True to suppress this warning."
        )
    _SCALAR_KINDS[pytype] = tag


def unregister_scalar_kind(pytype: type) -> bool:
    """Drop a registration; builtin kinds revert to their default tag."""
    if pytype in _BUILTIN_KINDS:
        changed = _SCALAR_KINDS.get(pytype) is not _BUILTIN_KINDS[pytype]
        _SCALAR_KINDS[pytype] = _BUILTIN_KINDS[pytype]
        return changed
    return _SCALAR_KINDS.pop(pytype, None) is not None


def registered_scalar_kinds() -> Dict[type, TypeTag]:
    """Copy of the current registry; editing it does not change classification."""
    return dict(_SCALAR_KINDS)


def is_scalar_kind(value: Any) -> bool:
    """Whether ``value`` is a host scalar (classifiable or not)."""
    if isinstance(value, (numbers.Number, np.generic)):
        return True
    return any(isinstance(value, kind) for kind in _SCALAR_KINDS)


def _classify_int(value: int) -> ElementType:
    if _INT32_MIN <= value <= _INT32_MAX:
        return ElementType.from_tag(TypeTag.LONG)
    if _INT64_MIN <= value <= _INT64_MAX:
        return ElementType.from_tag(TypeTag.LONGLONG)
    # arbitrary precision integers have no fixed-width slot
    raise UnsupportedScalarKind(value)


def classify_scalar(value: Any) -> ElementType:
    """
    Minimal element type of a single host scalar.

    Python ints take the LONG slot when they fit in 32 bits and LONGLONG when
    they fit in 64 bits. Record scalars (``numpy.void``) keep their layout.

    Raises:
        UnsupportedScalarKind: complex numbers, unsigned and half-precision
            NumPy scalars, oversized ints and anything unregistered
    """
    tag = _SCALAR_KINDS.get(type(value))
    if tag is None:
        for kind, kind_tag in _SCALAR_KINDS.items():
            if isinstance(value, kind):
                tag = kind_tag
                break
    if tag is not None:
        return ElementType.from_tag(tag)
    if isinstance(value, np.void):
        return ElementType.from_numpy(value.dtype)
    if isinstance(value, int):
        return _classify_int(value)
    raise UnsupportedScalarKind(value)

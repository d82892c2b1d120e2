"""
Canonical element-type descriptors.

An :class:`ElementType` is the immutable dtype the construction engine reasons
about: a :class:`TypeTag`, an item size in bytes, a byte order and, for
structured/record types, the NumPy record layout. Tags are ordered so that the
builtin numeric ladder reads bottom to top:

    BOOL < BYTE < SHORT < INT < LONG < LONGLONG < FLOAT < DOUBLE

followed by the flexible and sentinel kinds (OBJECT, STRING, UNICODE, VOID,
NOTYPE). LONG is the slot 16/32-bit host integers land in, LONGLONG holds
64-bit integers.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Optional

import numpy as np

from ..errors import UnsupportedScalarKind


class TypeTag(IntEnum):
    """Canonical element-type tags, ordered along the promotion ladder."""
    BOOL = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    LONGLONG = 5
    FLOAT = 6
    DOUBLE = 7
    OBJECT = 8
    STRING = 9
    UNICODE = 10
    VOID = 11
    NOTYPE = 12


NUMERIC_LADDER = (
    TypeTag.BOOL, TypeTag.BYTE, TypeTag.SHORT, TypeTag.INT,
    TypeTag.LONG, TypeTag.LONGLONG, TypeTag.FLOAT, TypeTag.DOUBLE,
)
TEXT_TAGS = frozenset({TypeTag.STRING, TypeTag.UNICODE})

# Fixed-size kinds and their NumPy type codes
_NUMPY_CODES = {
    TypeTag.BOOL: "?",
    TypeTag.BYTE: "i1",
    TypeTag.SHORT: "i2",
    TypeTag.INT: "i4",
    TypeTag.LONG: "i4",
    TypeTag.LONGLONG: "i8",
    TypeTag.FLOAT: "f4",
    TypeTag.DOUBLE: "f8",
    TypeTag.OBJECT: "O",
}

_INT_TAGS_BY_SIZE = {1: TypeTag.BYTE, 2: TypeTag.SHORT, 4: TypeTag.LONG, 8: TypeTag.LONGLONG}
_FLOAT_TAGS_BY_SIZE = {4: TypeTag.FLOAT, 8: TypeTag.DOUBLE}


@dataclass(frozen=True, eq=False)
class ElementType:
    """
    Immutable element-type descriptor.

    Attributes:
        tag: Canonical type tag
        itemsize: Size of one element in bytes (UNICODE uses 4 bytes per character)
        byteorder: '=' native, '<' or '>' explicit, '|' not applicable
        record: NumPy layout of a structured type (named fields or sub-array)
    """
    tag: TypeTag
    itemsize: int
    byteorder: str = "="
    record: Optional[np.dtype] = None

    def _key(self):
        return (self.tag, self.itemsize, self.byteorder, None if self.record is None else str(self.record))

    def __eq__(self, other):
        if not isinstance(other, ElementType):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    @classmethod
    def from_tag(cls, tag: TypeTag, itemsize: Optional[int] = None) -> "ElementType":
        """Descriptor for a builtin tag in native byte order."""
        tag = TypeTag(tag)
        if tag in _NUMPY_CODES:
            dt = np.dtype(_NUMPY_CODES[tag])
            return cls(tag, dt.itemsize, "|" if dt.itemsize == 1 or tag is TypeTag.OBJECT else "=")
        return cls(tag, itemsize or 0, "=" if tag is TypeTag.UNICODE else "|")

    @classmethod
    def from_numpy(cls, dtype: Any) -> "ElementType":
        """Map a NumPy dtype onto its canonical descriptor."""
        dt = np.dtype(dtype)
        kind = dt.kind
        if kind == "b":
            return cls(TypeTag.BOOL, 1, "|")
        if kind == "i" and dt.itemsize in _INT_TAGS_BY_SIZE:
            return cls(_INT_TAGS_BY_SIZE[dt.itemsize], dt.itemsize, dt.byteorder)
        if kind == "f" and dt.itemsize in _FLOAT_TAGS_BY_SIZE:
            return cls(_FLOAT_TAGS_BY_SIZE[dt.itemsize], dt.itemsize, dt.byteorder)
        if kind == "O":
            return cls(TypeTag.OBJECT, dt.itemsize, "|")
        if kind == "S":
            return cls(TypeTag.STRING, dt.itemsize, "|")
        if kind == "U":
            return cls(TypeTag.UNICODE, dt.itemsize, dt.byteorder)
        if kind == "V":
            structured = dt.names is not None or dt.subdtype is not None
            return cls(TypeTag.VOID, dt.itemsize, "|", dt if structured else None)
        raise UnsupportedScalarKind(dt)

    @property
    def name(self) -> str:
        return self.tag.name.lower()

    @property
    def has_fields(self) -> bool:
        return self.record is not None and self.record.names is not None

    @property
    def has_subarray(self) -> bool:
        return self.record is not None and self.record.subdtype is not None

    @property
    def is_structured(self) -> bool:
        return self.tag is TypeTag.VOID

    @property
    def is_numeric(self) -> bool:
        return self.tag in NUMERIC_LADDER

    @property
    def is_text(self) -> bool:
        return self.tag in TEXT_TAGS

    @property
    def is_native(self) -> bool:
        return self.byteorder in ("=", "|")

    def with_native_byteorder(self) -> "ElementType":
        if self.is_native:
            return self
        if self.record is not None:
            return replace(self, byteorder="=", record=self.record.newbyteorder("="))
        return replace(self, byteorder="=")

    def to_numpy(self) -> np.dtype:
        """NumPy dtype with the same layout; NOTYPE has none."""
        if self.tag is TypeTag.NOTYPE:
            raise TypeError("NOTYPE has no NumPy dtype")
        if self.tag is TypeTag.VOID:
            return self.record if self.record is not None else np.dtype(f"V{self.itemsize}")
        if self.tag is TypeTag.STRING:
            return np.dtype(f"S{self.itemsize}")
        if self.tag is TypeTag.UNICODE:
            dt = np.dtype(f"U{self.itemsize // 4}")
        else:
            dt = np.dtype(_NUMPY_CODES[self.tag])
        if self.byteorder in ("<", ">"):
            dt = dt.newbyteorder(self.byteorder)
        return dt

    def __str__(self) -> str:
        if self.tag is TypeTag.NOTYPE:
            return "notype"
        return str(self.to_numpy())


def as_element_type(obj: Any) -> Optional[ElementType]:
    """
    Coerce a user-supplied type request into an :class:`ElementType`.

    Accepts an ElementType, a TypeTag, or anything ``numpy.dtype`` understands.
    ``None`` passes through unchanged.
    """
    if obj is None or isinstance(obj, ElementType):
        return obj
    if isinstance(obj, TypeTag):
        return ElementType.from_tag(obj)
    return ElementType.from_numpy(obj)

"""
Type promotion over canonical element types.

``promote(a, b)`` returns the smallest type both ``a`` and ``b`` can be
assigned to without loss. The numeric ladder follows NumPy's safe-casting
table; flexible kinds (text, object, records) use the rules below.
"""

import numpy as np

from .dtypes import ElementType, TypeTag, NUMERIC_LADDER

# UNICODE stores 4 bytes per character, STRING one
_UCS4 = 4

# characters needed to print any value of a numeric kind
_NUMERIC_TEXT_WIDTH = {
    TypeTag.BOOL: 5,
    TypeTag.BYTE: 4,
    TypeTag.SHORT: 6,
    TypeTag.INT: 11,
    TypeTag.LONG: 11,
    TypeTag.LONGLONG: 21,
    TypeTag.FLOAT: 32,
    TypeTag.DOUBLE: 32,
}


def can_cast_safely(src: ElementType, dst: ElementType) -> bool:
    """Whether every value of ``src`` is representable in ``dst``."""
    return bool(np.can_cast(src.to_numpy(), dst.to_numpy(), casting="safe"))


def equivalent_records(a: ElementType, b: ElementType) -> bool:
    """Two structured types with the same record layout."""
    if a.record is None or b.record is None:
        return a.record is None and b.record is None and a.itemsize == b.itemsize
    return a.record == b.record


def _promote_numeric(a: ElementType, b: ElementType) -> ElementType:
    start = max(a.tag, b.tag)
    for tag in NUMERIC_LADDER[NUMERIC_LADDER.index(start):]:
        candidate = ElementType.from_tag(tag)
        if can_cast_safely(a, candidate) and can_cast_safely(b, candidate):
            return candidate
    # DOUBLE accepts every ladder member, so this is only hit for exotic byte orders
    return ElementType.from_tag(TypeTag.DOUBLE)


def _text_chars(t: ElementType) -> int:
    if t.tag is TypeTag.UNICODE:
        return t.itemsize // _UCS4
    if t.tag is TypeTag.STRING:
        return t.itemsize
    return _NUMERIC_TEXT_WIDTH[t.tag]


def _promote_text(a: ElementType, b: ElementType) -> ElementType:
    chars = max(_text_chars(a), _text_chars(b))
    if TypeTag.UNICODE in (a.tag, b.tag):
        return ElementType.from_tag(TypeTag.UNICODE, chars * _UCS4)
    return ElementType.from_tag(TypeTag.STRING, chars)


def promote(a: ElementType, b: ElementType) -> ElementType:
    """
    Smallest common element type of ``a`` and ``b``.

    Rules, first match wins:
        - equal descriptors return ``a``
        - NOTYPE is the identity
        - records only promote with an equivalent record; any other mix
          involving a record gives OBJECT so no record type is invented
        - OBJECT absorbs everything
        - text absorbs numbers wide enough to print them, UNICODE absorbs
          STRING, widths take the max
        - numbers climb the ladder until both sides cast safely

    Idempotent and commutative; associative over the numeric ladder.
    """
    if a == b:
        return a
    if a.tag is TypeTag.NOTYPE:
        return b
    if b.tag is TypeTag.NOTYPE:
        return a
    if a.is_structured or b.is_structured:
        if a.is_structured and b.is_structured and equivalent_records(a, b):
            return a if a.itemsize >= b.itemsize else b
        return ElementType.from_tag(TypeTag.OBJECT)
    if TypeTag.OBJECT in (a.tag, b.tag):
        return ElementType.from_tag(TypeTag.OBJECT)
    if a.is_text or b.is_text:
        return _promote_text(a, b)
    return _promote_numeric(a, b)

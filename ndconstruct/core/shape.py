"""
Shape discovery for nested sequences.

``fill_shape`` walks the source depth-first, left to right, writing one size
per dimension. In strict mode ragged input is rejected as soon as a sibling
is a leaf where the first sibling is a sequence (or the other way round) or
its sub-shape disagrees with the first sibling's; otherwise the largest size seen
at each dimension is kept.
"""

from typing import Any, List, Tuple

from ..errors import InconsistentShape
from .source import (
    ArrayNode, SequenceNode, TextNode, ScalarNode, UnclassifiableNode, classify_source,
)


def _is_leaf(value: Any, stop_at_record_tuple: bool) -> bool:
    node = classify_source(value)
    if isinstance(node, SequenceNode):
        return stop_at_record_tuple and node.is_record_tuple
    if isinstance(node, ArrayNode):
        return node.value.ndim == 0
    return True


def fill_shape(source: Any, ndim: int, shape_out: List[int], start: int = 0,
               strict: bool = True, stop_at_record_tuple: bool = False,
               _path: Tuple[int, ...] = ()) -> None:
    """
    Fill ``shape_out[start:]`` with the per-dimension sizes of ``source``.

    Args:
        source: Host value whose shape is wanted
        ndim: Number of dimensions discovered for the whole source
        shape_out: Mutable list of length ``ndim``, updated in place
        start: Dimension ``source`` sits at
        strict: Reject ragged siblings instead of taking the outer bound
        stop_at_record_tuple: Tuples are record leaves

    Raises:
        InconsistentShape: Ragged input in strict mode
    """
    # leaves below the discovered depth do not contribute
    if start >= ndim:
        return

    node = classify_source(source)
    if isinstance(node, ArrayNode):
        arr = node.value
        if arr.ndim == 0:
            shape_out[start] = 0
        else:
            n = min(arr.ndim, ndim - start)
            shape_out[start:start + n] = arr.shape[:n]
    elif isinstance(node, SequenceNode):
        if stop_at_record_tuple and node.is_record_tuple:
            shape_out[start] = 1
            return
        shape_out[start] = len(node)
        tail = ndim - start - 1
        if len(node) == 0 or tail == 0:
            return
        first = None
        first_leaf = None
        largest = [0] * tail
        for index, item in enumerate(node.value):
            leaf = _is_leaf(item, stop_at_record_tuple)
            if first_leaf is None:
                first_leaf = leaf
            elif strict and leaf != first_leaf:
                raise InconsistentShape(start + 1, _path + (index,),
                                        "scalars and sequences mixed at the same level")
            shape_out[start + 1:] = [0] * tail
            fill_shape(item, ndim, shape_out, start + 1, strict,
                       stop_at_record_tuple, _path + (index,))
            sub = shape_out[start + 1:]
            if first is None:
                first = sub
            elif strict and sub != first:
                offset = next(i for i, (a, b) in enumerate(zip(sub, first)) if a != b)
                raise InconsistentShape(start + 1 + offset, _path + (index,),
                                        f"expected {tuple(first)}, got {tuple(sub)}")
            largest = [max(a, b) for a, b in zip(largest, sub)]
        shape_out[start + 1:] = largest
    elif isinstance(node, (TextNode, ScalarNode, UnclassifiableNode)):
        shape_out[start] = 1
    else:
        raise TypeError(f"Unhandled source node {type(node).__name__}")


def discover_shape(source: Any, ndim: int, strict: bool = True,
                   stop_at_record_tuple: bool = False) -> Tuple[int, ...]:
    """Shape of ``source`` as a tuple of ``ndim`` sizes."""
    shape = [0] * ndim
    fill_shape(source, ndim, shape, 0, strict, stop_at_record_tuple)
    return tuple(shape)

"""
Nesting depth discovery.

Depth is decided by following the first element of each sequence only. A
ragged source is therefore not detected here; shape discovery catches it.

Leaves (scalars, unclassifiable values, records and text when told to stop
there) add no level of their own, so ``[[1, 2], [3, 4]]`` has depth 2 and a bare
scalar has depth 0.
"""

from typing import Any

from ..errors import DepthExceeded
from .source import (
    ArrayNode, SequenceNode, TextNode, ScalarNode, UnclassifiableNode, classify_source,
)


def _depth(source: Any, budget: int, stop_at_text: bool, stop_at_record_tuple: bool) -> int:
    node = classify_source(source)
    if isinstance(node, SequenceNode):
        if stop_at_record_tuple and node.is_record_tuple:
            return 0
        # -1 signals an exhausted budget anywhere below
        if budget < 1:
            return -1
        if len(node) == 0:
            return 1
        inner = _depth(node.value[0], budget - 1, stop_at_text, stop_at_record_tuple)
        return -1 if inner < 0 else inner + 1
    if isinstance(node, ArrayNode):
        return -1 if node.value.ndim > budget else node.value.ndim
    if isinstance(node, TextNode):
        if stop_at_text:
            return 0
        return 1 if budget >= 1 else -1
    if isinstance(node, (ScalarNode, UnclassifiableNode)):
        return 0
    raise TypeError(f"Unhandled source node {type(node).__name__}")


def discover_depth(source: Any, max_allowed: int,
                   stop_at_text: bool = True, stop_at_record_tuple: bool = False) -> int:
    """
    Number of nested-sequence levels in ``source``.

    Args:
        source: Host value to inspect
        max_allowed: Depth budget; running out raises DepthExceeded
        stop_at_text: Text leaves add no dimension (otherwise they add one)
        stop_at_record_tuple: Tuples are records and end the descent

    Returns:
        Nesting depth; 0 for a leaf

    Raises:
        DepthExceeded: Nesting deeper than ``max_allowed``
    """
    depth = _depth(source, max_allowed, stop_at_text, stop_at_record_tuple)
    if depth < 0:
        raise DepthExceeded(max_allowed)
    return depth

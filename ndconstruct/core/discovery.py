"""
Element type discovery.

Aggregates leaf types bottom-up over a nested source with ``promote`` so the
whole structure gets one dtype.
"""

from typing import Any, Optional

from ..config import ConstructionConfig, DEFAULT_CONFIG, NPY_MAXDIMS
from ..errors import DefaultTypeUnavailable, UnsupportedScalarKind
from .dtypes import ElementType, TypeTag
from .lattice import promote
from .scalars import classify_scalar
from .source import (
    ArrayNode, SequenceNode, TextNode, ScalarNode, UnclassifiableNode, classify_source,
)


def text_type(value) -> ElementType:
    """STRING for bytes-like values, UNICODE (4 bytes per character) for str."""
    if isinstance(value, str):
        return ElementType.from_tag(TypeTag.UNICODE, 4 * len(value))
    return ElementType.from_tag(TypeTag.STRING, len(value))


def _default_type(value: Any, config: ConstructionConfig) -> ElementType:
    if config.default_type_resolver is None:
        raise DefaultTypeUnavailable(value)
    resolved = config.default_type_resolver(value)
    if not isinstance(resolved, ElementType):
        raise TypeError(
            f"default_type_resolver returned {type(resolved).__name__}, expected ElementType"
        )
    return resolved


def discover_type(source: Any, minimum: Optional[ElementType] = None,
                  remaining_depth: int = NPY_MAXDIMS,
                  config: ConstructionConfig = DEFAULT_CONFIG) -> ElementType:
    """
    Smallest element type able to hold every leaf of ``source``.

    Args:
        source: Host value to inspect
        minimum: Floor the result is promoted with; BOOL when omitted
        remaining_depth: Levels left before leaves fall back to the default resolver
        config: Supplies the default numeric type and the default resolver

    Returns:
        The discovered element type

    Raises:
        UnsupportedScalarKind: A scalar leaf with no type and no resolver
        DefaultTypeUnavailable: A leaf that could not be classified at all
    """
    node = classify_source(source)
    if isinstance(node, ArrayNode):
        found = ElementType.from_numpy(node.value.dtype)
        if minimum is None:
            return found
    else:
        found = None

    if minimum is None:
        minimum = ElementType.from_tag(TypeTag.BOOL)

    if found is None and remaining_depth >= 0:
        if isinstance(node, ScalarNode):
            try:
                found = classify_scalar(node.value)
            except UnsupportedScalarKind:
                if config.default_type_resolver is None:
                    raise
        elif isinstance(node, TextNode):
            found = text_type(node.value)
        elif isinstance(node, SequenceNode):
            acc = minimum
            if len(node) == 0 and acc.tag is TypeTag.BOOL:
                # an empty list must not become a boolean array
                acc = config.default_element_type
            for item in node.value:
                acc = promote(discover_type(item, acc, remaining_depth - 1, config), acc)
            found = acc
        elif not isinstance(node, UnclassifiableNode):
            raise TypeError(f"Unhandled source node {type(node).__name__}")

    if found is None:
        found = _default_type(source, config)

    result = promote(found, minimum)
    # records only survive when the caller already asked for one
    if result.is_structured and not minimum.is_structured:
        result = ElementType.from_tag(TypeTag.OBJECT)
    return result

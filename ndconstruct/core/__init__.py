"""
Discovery core: element types, promotion, and the depth/shape walkers.

Type discovery and storage live in ``core.discovery`` and ``core.storage``;
they depend on the package config and are imported from there directly.
"""

from .dtypes import ElementType, TypeTag, NUMERIC_LADDER, as_element_type
from .lattice import promote, can_cast_safely
from .scalars import (
    classify_scalar, register_scalar_kind, unregister_scalar_kind, registered_scalar_kinds,
)
from .source import (
    SourceNode, ArrayNode, SequenceNode, TextNode, ScalarNode, UnclassifiableNode,
    classify_source,
)
from .depth import discover_depth
from .shape import fill_shape, discover_shape
from .flags import ConstructionFlags

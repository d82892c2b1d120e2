"""
Array construction from arbitrary Python objects.

``from_any`` is the entry point: it dispatches on what the source is and runs
type discovery, depth discovery, shape discovery, allocation and population
in that order, so a type error always surfaces before a depth error and a
depth error before a shape error.

Example:
    >>> arr = from_any([[1, 2], [3, 4]])
    >>> arr.shape, arr.dtype
    ((2, 2), dtype('int32'))
"""

import logging
from typing import Any, Optional

import numpy as np

from .config import ConstructionConfig, DEFAULT_CONFIG
from .core.depth import discover_depth
from .core.discovery import discover_type
from .core.dtypes import ElementType, TypeTag, as_element_type
from .core.flags import ConstructionFlags
from .core.shape import discover_shape
from .core.source import (
    ArrayNode, SequenceNode, TextNode, ScalarNode, UnclassifiableNode, classify_source,
)
from .core.storage import NumpyStorageEngine, StorageEngine
from .errors import (
    DepthExceeded, InvalidDimensionCount, InvalidFlagCombination,
    ScalarConversionUnsupported, UnclassifiableSource,
)

logger = logging.getLogger(__name__)


def _check_depth_bounds(ndim: int, min_depth: int, max_depth: int) -> None:
    # a bound only applies when positive
    if (max_depth > 0 and ndim > max_depth) or (min_depth > 0 and ndim < min_depth):
        raise InvalidDimensionCount(ndim, min_depth, max_depth)


def _reject_writeback(flags: ConstructionFlags) -> None:
    if ConstructionFlags.UPDATE_SOURCE_ON_WRITE in flags:
        raise InvalidFlagCombination("UPDATE_SOURCE_ON_WRITE used for non-array input")


def _is_record_type(dtype: ElementType) -> bool:
    return dtype.is_structured and (dtype.has_fields or dtype.has_subarray)


def from_array(source: np.ndarray, dtype: Optional[ElementType] = None,
               flags: ConstructionFlags = ConstructionFlags.NONE,
               engine: Optional[StorageEngine] = None) -> np.ndarray:
    """
    Build from an existing array; may return ``source`` itself.

    With UPDATE_SOURCE_ON_WRITE a converted copy stays linked to ``source``
    (see :class:`~ndconstruct.core.storage.WritebackArray`).
    """
    engine = engine or NumpyStorageEngine()
    writeback = ConstructionFlags.UPDATE_SOURCE_ON_WRITE in flags
    if writeback and not source.flags.writeable:
        raise InvalidFlagCombination("UPDATE_SOURCE_ON_WRITE requires a writeable source array")

    result = engine.convert_array(source, as_element_type(dtype), flags)
    if result is source:
        logger.debug("Array source already satisfies %s", flags)
        return result
    if writeback:
        result = engine.link_writeback(result, source)
    return result


def from_sequence(source: Any, dtype: Optional[ElementType] = None,
                  min_depth: int = 0, max_depth: int = 0,
                  flags: ConstructionFlags = ConstructionFlags.NONE,
                  config: ConstructionConfig = DEFAULT_CONFIG,
                  engine: Optional[StorageEngine] = None) -> np.ndarray:
    """
    Build a new array from a nested sequence.

    Args:
        source: Nested sequence of scalars, text, records or arrays
        dtype: Forced element type; discovered when None
        min_depth: Minimum number of dimensions (0 for no bound)
        max_depth: Maximum number of dimensions (0 for no bound); object arrays
            stop descending at this depth instead of failing
        flags: FORCE_FORTRAN_ORDER selects column-major storage
        config: Construction settings
        engine: Storage engine; NumPy when None

    Raises:
        InvalidFlagCombination: UPDATE_SOURCE_ON_WRITE was requested
        DepthExceeded: Nesting deeper than ``config.max_dims``
        InvalidDimensionCount: Depth outside ``[min_depth, max_depth]``
        InconsistentShape: Ragged input for a non-text element type
    """
    _reject_writeback(flags)
    engine = engine or NumpyStorageEngine()
    dtype = as_element_type(dtype)
    if dtype is None:
        dtype = discover_type(source, None, config.max_dims, config)
    if ConstructionFlags.REQUIRE_NATIVE_BYTE_ORDER in flags:
        dtype = dtype.with_native_byteorder()

    records = _is_record_type(dtype)
    ndim = discover_depth(source, config.max_dims, stop_at_text=True, stop_at_record_tuple=records)
    if max_depth > 0 and dtype.tag is TypeTag.OBJECT and ndim > max_depth:
        ndim = max_depth
    _check_depth_bounds(ndim, min_depth, max_depth)

    # ragged text is padded rather than rejected
    strict = not dtype.is_text
    shape = discover_shape(source, ndim, strict, stop_at_record_tuple=records)
    logger.debug("Sequence source: dtype=%s ndim=%d shape=%s strict=%s", dtype, ndim, shape, strict)

    array = engine.allocate(dtype, shape, ConstructionFlags.FORCE_FORTRAN_ORDER in flags)
    engine.populate(array, source, ndim, stop_at_record_tuple=records)
    return array


def from_scalar(source: Any, dtype: Optional[ElementType] = None,
                min_depth: int = 0, max_depth: int = 0,
                flags: ConstructionFlags = ConstructionFlags.NONE,
                config: ConstructionConfig = DEFAULT_CONFIG,
                engine: Optional[StorageEngine] = None) -> np.ndarray:
    """Zero-dimensional array holding ``source`` when the config allows it."""
    _reject_writeback(flags)
    if not config.allow_scalar_conversion:
        raise ScalarConversionUnsupported(source)
    engine = engine or NumpyStorageEngine()
    dtype = as_element_type(dtype)
    if dtype is None:
        dtype = discover_type(source, None, config.max_dims, config)
    _check_depth_bounds(0, min_depth, max_depth)
    array = engine.allocate(dtype, (), False)
    engine.populate(array, source, 0)
    return array


def from_any(source: Any, dtype: Any = None, min_depth: int = 0, max_depth: int = 0,
             flags: ConstructionFlags = ConstructionFlags.NONE, *,
             config: Optional[ConstructionConfig] = None,
             engine: Optional[StorageEngine] = None) -> np.ndarray:
    """
    Construct an array from any supported Python object.

    Args:
        source: Array, nested sequence, text or scalar
        dtype: Requested element type (ElementType, TypeTag or NumPy dtype-like)
        min_depth: Minimum number of dimensions (0 for no bound)
        max_depth: Maximum number of dimensions (0 for no bound)
        flags: ConstructionFlags
        config: Construction settings; library defaults when None
        engine: Storage engine; NumPy when None

    Returns:
        The constructed array (possibly ``source`` itself for array input)

    Raises:
        InvalidFlagCombination: UPDATE_SOURCE_ON_WRITE with a non-array source
        UnclassifiableSource: Source is none of array, sequence, text or scalar
        ScalarConversionUnsupported: Scalar source with scalar conversion disabled
    """
    config = config or DEFAULT_CONFIG
    engine = engine or NumpyStorageEngine()
    dtype = as_element_type(dtype)

    node = classify_source(source)
    logger.debug("from_any: %s source, dtype=%s, flags=%s", type(node).__name__, dtype, flags)

    if isinstance(node, ArrayNode):
        result = from_array(node.value, dtype, flags, engine)
        _check_depth_bounds(result.ndim, min_depth, max_depth)
        return result

    _reject_writeback(flags)
    if isinstance(node, SequenceNode):
        return from_sequence(node.value, dtype, min_depth, max_depth, flags, config, engine)
    if isinstance(node, (ScalarNode, TextNode)):
        return from_scalar(node.value, dtype, min_depth, max_depth, flags, config, engine)
    if isinstance(node, UnclassifiableNode):
        raise UnclassifiableSource(source)
    raise TypeError(f"Unhandled source node {type(node).__name__}")


def check_from_any(source: Any, dtype: Any = None, min_depth: int = 0, max_depth: int = 0,
                   flags: ConstructionFlags = ConstructionFlags.NONE, *,
                   config: Optional[ConstructionConfig] = None,
                   engine: Optional[StorageEngine] = None) -> np.ndarray:
    """
    ``from_any`` that also enforces byte-order and stride requirements.

    REQUIRE_NATIVE_BYTE_ORDER normalises the requested dtype before
    construction; REQUIRE_ELEMENT_CONTIGUITY copies a result whose strides are
    not whole elements.
    """
    engine = engine or NumpyStorageEngine()
    dtype = as_element_type(dtype)
    if ConstructionFlags.REQUIRE_NATIVE_BYTE_ORDER in flags and dtype is not None:
        dtype = dtype.with_native_byteorder()

    result = from_any(source, dtype, min_depth, max_depth, flags, config=config, engine=engine)
    if ConstructionFlags.REQUIRE_ELEMENT_CONTIGUITY in flags:
        result = engine.convert_array(result, None, ConstructionFlags.REQUIRE_ELEMENT_CONTIGUITY)
    return result


def prepend_ones(array: np.ndarray, ndmin: int, max_dims: int = DEFAULT_CONFIG.max_dims) -> np.ndarray:
    """View of ``array`` with leading length-1 axes so that ``ndim >= ndmin``."""
    if ndmin > max_dims:
        raise DepthExceeded(max_dims)
    missing = ndmin - array.ndim
    if missing <= 0:
        return array
    return array.reshape((1,) * missing + array.shape, order="A")

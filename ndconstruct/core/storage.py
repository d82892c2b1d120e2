"""
Storage engine interface and its NumPy implementation.

The construction core only needs three things from storage: allocate a
buffer, convert an existing array to a set of requirements, and populate a
fresh buffer from the source it was sized from. ``NumpyStorageEngine`` backs
all three with ``numpy.ndarray``.
"""

import logging
import math
import sys
from typing import Any, Optional, Protocol, Sequence, Tuple

import numpy as np

from ..errors import AllocationError, CastingError, ElementConversionError, InconsistentShape
from .dtypes import ElementType
from .flags import ConstructionFlags
from .source import ArrayNode, SequenceNode, classify_source

logger = logging.getLogger(__name__)


class StorageEngine(Protocol):
    """Operations the construction core delegates to array storage."""

    def allocate(self, dtype: ElementType, shape: Sequence[int], fortran: bool = False) -> Any:
        """Allocate a zero-initialised array of ``dtype`` and ``shape``."""
        ...

    def convert_array(self, array: Any, dtype: Optional[ElementType],
                      flags: ConstructionFlags) -> Any:
        """Return ``array`` or a converted copy satisfying ``dtype`` and ``flags``."""
        ...

    def populate(self, array: Any, source: Any, ndim: Optional[int] = None,
                 stop_at_record_tuple: bool = False) -> Any:
        """Copy the leaves of ``source`` into ``array``."""
        ...

    def link_writeback(self, copy: Any, source: Any) -> Any:
        """Tie a converted copy to its source so later writes can flow back."""
        ...


class WritebackArray(np.ndarray):
    """
    Converted copy of an array that was requested with UPDATE_SOURCE_ON_WRITE.

    Writes stay local until :meth:`resolve_writeback` copies them into the
    source. Used as a context manager the copy-back happens on exit.
    Views taken from a WritebackArray do not carry the link.
    """

    def __array_finalize__(self, obj):
        self.writeback_source = None

    def resolve_writeback(self) -> bool:
        """Copy contents back into the source; False if already resolved."""
        if self.writeback_source is None:
            return False
        np.copyto(self.writeback_source, np.asarray(self), casting="unsafe")
        self.writeback_source = None
        return True

    def discard_writeback(self) -> None:
        self.writeback_source = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.resolve_writeback()
        else:
            self.discard_writeback()
        return False


def has_element_strides(array: np.ndarray) -> bool:
    """Every stride is a whole number of elements."""
    itemsize = array.dtype.itemsize
    if itemsize == 0 or array.size == 0:
        return True
    return all(stride % itemsize == 0 for stride in array.strides)


def attach_writeback(copy: np.ndarray, source: np.ndarray) -> WritebackArray:
    linked = copy.view(WritebackArray)
    linked.writeback_source = source
    return linked


class NumpyStorageEngine:
    """StorageEngine backed by ``numpy.ndarray``."""

    def allocate(self, dtype: ElementType, shape: Sequence[int], fortran: bool = False) -> np.ndarray:
        shape = tuple(int(s) for s in shape)
        if any(s < 0 for s in shape):
            raise AllocationError(shape, "negative dimension")
        count = math.prod(shape)
        if count > sys.maxsize or count * max(dtype.itemsize, 1) > sys.maxsize:
            raise AllocationError(shape, "element count overflows the address space")
        try:
            return np.zeros(shape, dtype=dtype.to_numpy(), order="F" if fortran else "C")
        except (ValueError, MemoryError) as e:
            raise AllocationError(shape, str(e)) from e

    def convert_array(self, array: np.ndarray, dtype: Optional[ElementType],
                      flags: ConstructionFlags = ConstructionFlags.NONE) -> np.ndarray:
        target = array.dtype if dtype is None else dtype.to_numpy()
        if ConstructionFlags.REQUIRE_NATIVE_BYTE_ORDER in flags and not target.isnative:
            target = target.newbyteorder("=")

        if target != array.dtype and ConstructionFlags.FORCE_CAST not in flags:
            if not np.can_cast(array.dtype, target, casting="safe"):
                raise CastingError(f"Cannot safely cast array from {array.dtype} to {target}")

        fortran = ConstructionFlags.FORCE_FORTRAN_ORDER in flags
        reasons = []
        if ConstructionFlags.ENSURE_COPY in flags:
            reasons.append("copy requested")
        if target != array.dtype:
            reasons.append(f"dtype {array.dtype} -> {target}")
        if fortran and not array.flags.f_contiguous:
            reasons.append("fortran order")
        if ConstructionFlags.REQUIRE_ELEMENT_CONTIGUITY in flags and not has_element_strides(array):
            reasons.append("element strides")

        if not reasons:
            return array
        logger.debug("Copying array of shape %s: %s", array.shape, ", ".join(reasons))
        return array.astype(target, order="F" if fortran else "K", casting="unsafe", copy=True)

    def link_writeback(self, copy: np.ndarray, source: np.ndarray) -> WritebackArray:
        return attach_writeback(copy, source)

    def populate(self, array: np.ndarray, source: Any, ndim: Optional[int] = None,
                 stop_at_record_tuple: bool = False) -> np.ndarray:
        """
        Walk ``source`` depth-first, left to right, storing each leaf.

        Cells the source does not reach (ragged input admitted by non-strict
        shape discovery) keep the zero fill from allocation.
        """
        ndim = array.ndim if ndim is None else ndim
        self._assign(array, (), source, ndim, stop_at_record_tuple)
        return array

    def _assign(self, out: np.ndarray, index: Tuple[int, ...], value: Any,
                ndim: int, records: bool) -> None:
        depth = len(index)
        if depth == ndim:
            self._store(out, index, value, records)
            return

        node = classify_source(value)
        if isinstance(node, ArrayNode):
            expected = out.shape[depth:ndim]
            if node.value.shape != expected:
                raise InconsistentShape(depth, index,
                                        f"array of shape {node.value.shape} where {expected} is needed")
            try:
                out[index] = node.value
            except (ValueError, TypeError, OverflowError) as e:
                raise ElementConversionError(f"Cannot store array as {out.dtype}: {e}") from e
        elif isinstance(node, SequenceNode) and not (records and node.is_record_tuple):
            if len(node) > out.shape[depth]:
                raise InconsistentShape(depth, index)
            for i, item in enumerate(node.value):
                self._assign(out, index + (i,), item, ndim, records)
        else:
            # a leaf above the bottom was sized as a single cell
            self._store(out, index + (0,) * (ndim - depth), value, records)

    def _store(self, out: np.ndarray, index: Tuple[int, ...], value: Any, records: bool) -> None:
        if out.dtype == np.dtype(object):
            cell = np.empty((), dtype=object)
            cell[()] = value
            out[index] = cell
            return
        node = classify_source(value)
        nested = isinstance(node, SequenceNode) and not (records and node.is_record_tuple)
        if isinstance(node, ArrayNode) and node.value.ndim > 0:
            nested = True
        if nested:
            raise InconsistentShape(len(index), index, "setting an array element with a sequence")
        try:
            out[index] = value
        except (ValueError, TypeError, OverflowError) as e:
            raise ElementConversionError(f"Cannot store {value!r} as {out.dtype}: {e}") from e

"""
Unit tests for the NumPy storage engine and write-back copies.
"""

import numpy as np
import pytest

from ndconstruct import ConstructionFlags, ElementType, NumpyStorageEngine, TypeTag, WritebackArray
from ndconstruct.core.storage import has_element_strides
from ndconstruct.errors import AllocationError, CastingError, ElementConversionError, InconsistentShape


def t(tag, itemsize=None):
    return ElementType.from_tag(tag, itemsize)


class TestAllocate:
    """Zero-initialised buffers in either memory order."""

    def test_c_order(self, engine):
        arr = engine.allocate(t(TypeTag.DOUBLE), (2, 3))
        assert arr.shape == (2, 3)
        assert arr.dtype == np.float64
        assert arr.flags.c_contiguous
        assert not arr.any()

    def test_fortran_order(self, engine):
        arr = engine.allocate(t(TypeTag.LONG), (2, 3), fortran=True)
        assert arr.flags.f_contiguous and not arr.flags.c_contiguous

    def test_zero_dim_and_empty(self, engine):
        assert engine.allocate(t(TypeTag.BOOL), ()).shape == ()
        assert engine.allocate(t(TypeTag.DOUBLE), (0,)).shape == (0,)

    def test_negative_dimension(self, engine):
        with pytest.raises(AllocationError):
            engine.allocate(t(TypeTag.DOUBLE), (2, -1))

    def test_overflowing_element_count(self, engine):
        with pytest.raises(AllocationError) as exc:
            engine.allocate(t(TypeTag.DOUBLE), (2 ** 40, 2 ** 40))
        assert exc.value.shape == (2 ** 40, 2 ** 40)


class TestConvertArray:
    """Returning the source or a copy that satisfies the requirements."""

    def test_satisfied_source_is_returned(self, engine):
        a = np.arange(6, dtype="i4").reshape(2, 3)
        assert engine.convert_array(a, None, ConstructionFlags.NONE) is a
        assert engine.convert_array(a, t(TypeTag.LONG), ConstructionFlags.NONE) is a

    def test_safe_dtype_change_copies(self, engine):
        a = np.arange(3, dtype="i4")
        result = engine.convert_array(a, t(TypeTag.DOUBLE), ConstructionFlags.NONE)
        assert result is not a
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [0.0, 1.0, 2.0])

    def test_unsafe_cast_needs_force(self, engine):
        a = np.array([1.5, 2.7])
        with pytest.raises(CastingError):
            engine.convert_array(a, t(TypeTag.BYTE), ConstructionFlags.NONE)
        result = engine.convert_array(a, t(TypeTag.BYTE), ConstructionFlags.FORCE_CAST)
        np.testing.assert_array_equal(result, [1, 2])

    def test_native_byte_order(self, engine, swapped_int32):
        a = np.arange(3, dtype=swapped_int32)
        result = engine.convert_array(a, None, ConstructionFlags.REQUIRE_NATIVE_BYTE_ORDER)
        assert result.dtype.isnative
        np.testing.assert_array_equal(result, [0, 1, 2])

    def test_fortran_order(self, engine):
        a = np.arange(6).reshape(2, 3)
        result = engine.convert_array(a, None, ConstructionFlags.FORCE_FORTRAN_ORDER)
        assert result.flags.f_contiguous
        np.testing.assert_array_equal(result, a)

    def test_element_strides(self, engine):
        packed = np.zeros(4, dtype=[("a", "i1"), ("b", "i4")])
        packed["b"] = [1, 2, 3, 4]
        view = packed["b"]
        assert not has_element_strides(view)
        result = engine.convert_array(view, None, ConstructionFlags.REQUIRE_ELEMENT_CONTIGUITY)
        assert has_element_strides(result)
        np.testing.assert_array_equal(result, [1, 2, 3, 4])

    def test_ensure_copy(self, engine):
        a = np.arange(3)
        result = engine.convert_array(a, None, ConstructionFlags.ENSURE_COPY)
        assert result is not a
        assert not np.shares_memory(result, a)


class TestPopulate:
    """Depth-first population of an allocated buffer."""

    def test_nested_lists(self, engine):
        arr = engine.allocate(t(TypeTag.LONG), (2, 2))
        engine.populate(arr, [[1, 2], [3, 4]])
        np.testing.assert_array_equal(arr, [[1, 2], [3, 4]])

    def test_ragged_source_leaves_zero_fill(self, engine):
        arr = engine.allocate(t(TypeTag.UNICODE, 8), (2, 2))
        engine.populate(arr, [["a", "bb"], ["c"]])
        assert arr.tolist() == [["a", "bb"], ["c", ""]]

    def test_object_cells_hold_sequences(self, engine):
        arr = engine.allocate(t(TypeTag.OBJECT), (2,))
        engine.populate(arr, [[1, 2], [3]], ndim=1)
        assert arr[0] == [1, 2]
        assert arr[1] == [3]

    def test_nested_arrays(self, engine):
        arr = engine.allocate(t(TypeTag.LONGLONG), (2, 2))
        engine.populate(arr, [np.array([1, 2], dtype="i8"), [3, 4]])
        np.testing.assert_array_equal(arr, [[1, 2], [3, 4]])

    def test_mismatched_nested_array(self, engine):
        arr = engine.allocate(t(TypeTag.DOUBLE), (2, 2))
        with pytest.raises(InconsistentShape):
            engine.populate(arr, [np.zeros(3), np.zeros(3)])

    def test_sequence_in_scalar_slot(self, engine):
        arr = engine.allocate(t(TypeTag.LONG), (2,))
        with pytest.raises(InconsistentShape):
            engine.populate(arr, [1, [2, 3]])

    def test_unconvertible_leaf(self, engine):
        arr = engine.allocate(t(TypeTag.DOUBLE), (1,))
        with pytest.raises(ElementConversionError):
            engine.populate(arr, ["abc"])

    def test_zero_dim(self, engine):
        arr = engine.allocate(t(TypeTag.DOUBLE), ())
        engine.populate(arr, 2.5, 0)
        assert arr[()] == 2.5


class TestWriteback:
    """Converted copies that flow back into their source."""

    def test_resolve_copies_back_once(self, engine):
        src = np.arange(4, dtype="i4")
        wb = engine.link_writeback(src.astype("f8"), src)
        assert isinstance(wb, WritebackArray)
        wb[0] = 42
        assert src[0] == 0
        assert wb.resolve_writeback() is True
        assert src[0] == 42
        assert wb.resolve_writeback() is False

    def test_context_manager(self, engine):
        src = np.arange(4, dtype="i4")
        with engine.link_writeback(src.astype("f8"), src) as wb:
            wb[1] = 7
        assert src[1] == 7

    def test_error_discards_writes(self, engine):
        src = np.arange(4, dtype="i4")
        with pytest.raises(RuntimeError):
            with engine.link_writeback(src.astype("f8"), src) as wb:
                wb[2] = 9
                raise RuntimeError("boom")
        assert src[2] == 2
        assert wb.writeback_source is None

    def test_views_are_unlinked(self, engine):
        src = np.arange(4, dtype="i4")
        wb = engine.link_writeback(src.astype("f8"), src)
        assert wb[1:].writeback_source is None

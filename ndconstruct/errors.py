"""
Error taxonomy for array construction.

Every failure raised while turning a Python object into an array derives from
:class:`ConstructionError`, itself a ``ValueError`` so callers that already
guard ``numpy.asarray`` style calls keep working. None of these are retried and
no partially populated array is ever handed back.
"""

from typing import Optional, Tuple


class ConstructionError(ValueError):
    """Base class for array construction failures."""
    pass


class UnsupportedScalarKind(ConstructionError):
    """A scalar value has no canonical element type."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unhandled scalar type {type(value).__name__}")


class DepthExceeded(ConstructionError):
    """Nesting is deeper than the maximum number of dimensions."""

    def __init__(self, max_dims: int):
        self.max_dims = max_dims
        super().__init__(f"Source is nested deeper than the maximum of {max_dims} dimensions")


class InvalidDimensionCount(ConstructionError):
    """The discovered number of dimensions is outside the requested bounds."""

    def __init__(self, ndim: int, min_depth: int, max_depth: int):
        self.ndim = ndim
        self.min_depth = min_depth
        self.max_depth = max_depth
        super().__init__(
            f"Invalid number of dimensions: got {ndim}, "
            f"expected min_depth={min_depth}, max_depth={max_depth}"
        )


class InconsistentShape(ConstructionError):
    """
    Sibling sequences disagree on their sub-shape.

    Attributes:
        dimension: First dimension at which the siblings differ
        path: Indices leading from the top-level source to the offending element
    """

    def __init__(self, dimension: int, path: Optional[Tuple[int, ...]] = None, detail: str = ""):
        self.dimension = dimension
        self.path = tuple(path) if path is not None else None
        msg = f"Inconsistent shape in sequence at dimension {dimension}"
        if self.path:
            msg += " (element " + "".join(f"[{i}]" for i in self.path) + ")"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class InvalidFlagCombination(ConstructionError):
    """Construction flags that cannot be honoured for this source."""
    pass


class ScalarConversionUnsupported(ConstructionError):
    """Scalar-to-array conversion was requested but is disabled."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Scalar-to-array conversion not enabled for {type(value).__name__}; "
            "set allow_scalar_conversion=True in the config"
        )


class UnclassifiableSource(ConstructionError):
    """The top-level source is neither an array, a sequence nor a scalar."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Cannot build an array from {type(value).__name__}")


class DefaultTypeUnavailable(ConstructionError):
    """No element type could be found and no default resolver is configured."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"No element type for {type(value).__name__} and no default_type_resolver configured"
        )


class AllocationError(ConstructionError):
    """The storage engine could not allocate the requested array."""

    def __init__(self, shape: Tuple[int, ...], reason: str):
        self.shape = shape
        super().__init__(f"Cannot allocate array of shape {shape}: {reason}")


class CastingError(ConstructionError):
    """An existing array cannot be safely cast to the requested type."""
    pass


class ElementConversionError(ConstructionError):
    """A leaf value cannot be stored in the allocated element type."""
    pass

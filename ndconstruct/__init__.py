from .__about__ import __version__

from .errors import (
    ConstructionError, UnsupportedScalarKind, DepthExceeded, InvalidDimensionCount,
    InconsistentShape, InvalidFlagCombination, ScalarConversionUnsupported,
    UnclassifiableSource, DefaultTypeUnavailable, AllocationError, CastingError,
    ElementConversionError,
)
from .core import (
    ElementType, TypeTag, as_element_type, promote,
    classify_scalar, register_scalar_kind, unregister_scalar_kind, registered_scalar_kinds,
    classify_source, discover_depth, fill_shape, discover_shape,
    ConstructionFlags,
)
from .config import ConstructionConfig, DEFAULT_CONFIG, load_config
from .core.discovery import discover_type
from .core.storage import StorageEngine, NumpyStorageEngine, WritebackArray
from .construction import (
    from_any, check_from_any, from_array, from_sequence, from_scalar, prepend_ones,
)

__all__ = [
    # Version
    "__version__",

    # Entry points
    "from_any", "check_from_any", "from_array", "from_sequence", "from_scalar",
    "prepend_ones", "ConstructionFlags",

    # Discovery
    "ElementType", "TypeTag", "as_element_type", "promote",
    "classify_scalar", "register_scalar_kind", "unregister_scalar_kind", "registered_scalar_kinds",
    "classify_source", "discover_depth", "fill_shape", "discover_shape", "discover_type",

    # Storage
    "StorageEngine", "NumpyStorageEngine", "WritebackArray",

    # Configuration
    "ConstructionConfig", "DEFAULT_CONFIG", "load_config",

    # Errors
    "ConstructionError", "UnsupportedScalarKind", "DepthExceeded", "InvalidDimensionCount",
    "InconsistentShape", "InvalidFlagCombination", "ScalarConversionUnsupported",
    "UnclassifiableSource", "DefaultTypeUnavailable", "AllocationError", "CastingError",
    "ElementConversionError",
]

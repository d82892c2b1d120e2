from enum import Flag, auto


class ConstructionFlags(Flag):
    """Independent construction options; combine with ``|``."""
    NONE = 0
    FORCE_FORTRAN_ORDER = auto()          # column-major result
    REQUIRE_NATIVE_BYTE_ORDER = auto()    # swap non-native element data
    REQUIRE_ELEMENT_CONTIGUITY = auto()   # strides must be whole elements
    UPDATE_SOURCE_ON_WRITE = auto()       # converted copies write back to the source array
    ENSURE_COPY = auto()                  # never hand back the source array itself
    FORCE_CAST = auto()                   # allow unsafe casts of existing arrays

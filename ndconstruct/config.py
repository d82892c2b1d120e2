from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from .core.dtypes import ElementType, TypeTag, NUMERIC_LADDER

NPY_MAXDIMS = 32


class ConstructionConfig(BaseModel):
    """
    Library-wide construction settings, passed explicitly to every call.

    default_type: element type an empty sequence becomes when nothing else is known
    max_dims: largest number of dimensions an array may have
    allow_scalar_conversion: build 0-d arrays from bare scalars instead of failing
    default_type_resolver: fallback classifier for leaves with no element type
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    default_type: TypeTag = TypeTag.DOUBLE
    max_dims: PositiveInt = Field(NPY_MAXDIMS, le=64)
    allow_scalar_conversion: bool = False
    default_type_resolver: Optional[Callable[[Any], ElementType]] = None

    @field_validator("default_type", mode="before")
    @classmethod
    def _parse_tag(cls, value):
        if isinstance(value, str):
            try:
                return TypeTag[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown type tag '{value}'") from None
        return value

    @field_validator("default_type")
    @classmethod
    def _numeric_default(cls, value: TypeTag) -> TypeTag:
        if value not in NUMERIC_LADDER:
            raise ValueError(f"default_type must be numeric, got {value.name}")
        return value

    @property
    def default_element_type(self) -> ElementType:
        return ElementType.from_tag(self.default_type)


DEFAULT_CONFIG = ConstructionConfig()


def load_config(path: Union[str, Path, None]) -> ConstructionConfig:
    """Read a config from YAML or JSON; no path gives the defaults."""
    if not path:
        return DEFAULT_CONFIG
    path = Path(path)
    with open(path, "r", encoding="utf-8") as fh:
        if path.suffix == ".json":
            raw = json.load(fh)
        else:
            raw = yaml.safe_load(fh)
    return ConstructionConfig(**raw) if raw else DEFAULT_CONFIG

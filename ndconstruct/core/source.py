"""
Classification of the raw host value visited during discovery.

Every recursive step turns the value it is looking at into exactly one of the
node kinds below and dispatches on it. Nodes are rebuilt at each visit rather
than cached, so a discovery pass never holds on to more than the current path.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from .scalars import is_scalar_kind


@dataclass(frozen=True)
class ArrayNode:
    """An already-typed array; its dtype and shape are authoritative."""
    value: np.ndarray


@dataclass(frozen=True)
class SequenceNode:
    """An ordered, countable, re-visitable sequence of values."""
    value: Sequence

    @property
    def is_record_tuple(self) -> bool:
        # tuples (named or not) are the fixed-arity records of the host model
        return isinstance(self.value, tuple)

    def __len__(self) -> int:
        return len(self.value)


@dataclass(frozen=True)
class TextNode:
    """str, bytes or bytearray: a leaf even though Python can index into it."""
    value: Union[str, bytes, bytearray]


@dataclass(frozen=True)
class ScalarNode:
    value: Any


@dataclass(frozen=True)
class UnclassifiableNode:
    value: Any


SourceNode = Union[ArrayNode, SequenceNode, TextNode, ScalarNode, UnclassifiableNode]


def classify_source(value: Any) -> SourceNode:
    """Wrap ``value`` in the node kind discovery should treat it as."""
    if isinstance(value, np.ndarray):
        return ArrayNode(value)
    if isinstance(value, (str, bytes, bytearray)):
        return TextNode(value)
    if isinstance(value, Sequence):
        return SequenceNode(value)
    if is_scalar_kind(value):
        return ScalarNode(value)
    return UnclassifiableNode(value)

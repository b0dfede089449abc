"""Lazy, composable cursors: cartesian products, sorted joins and friends."""

from lazyseek.adaptors import (
    ExceptCursor, EnumerateCursor, GenerateCursor, MapCursor, RandomView, Uniform,
    enumerated, excluding, generate, mapped, random_values, random_view,
)
from lazyseek.cursor import (
    CapabilityError, Cursor, IterableCursor, SequenceCursor, Tier, View, as_view,
    lower_bound,
)
from lazyseek.joinwhere import ExecutionPolicy, JoinWhereCursor, join_where
from lazyseek.product import CartesianProductCursor, cartesian_product

__all__ = [
    "CapabilityError",
    "CartesianProductCursor",
    "Cursor",
    "EnumerateCursor",
    "ExceptCursor",
    "ExecutionPolicy",
    "GenerateCursor",
    "IterableCursor",
    "JoinWhereCursor",
    "MapCursor",
    "RandomView",
    "SequenceCursor",
    "Tier",
    "Uniform",
    "View",
    "as_view",
    "cartesian_product",
    "enumerated",
    "excluding",
    "generate",
    "join_where",
    "lower_bound",
    "mapped",
    "random_values",
    "random_view",
]

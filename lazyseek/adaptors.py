"""
Single-sequence adaptors: map, enumerate, generate, random and except.

Each wraps at most one cursor and follows the same contract as the leaf
cursors, so any of them can feed cartesian_product() or join_where().
"""

import random
from collections.abc import Container
from dataclasses import dataclass
from typing import Any, Callable

from lazyseek.cursor import Cursor, Tier, View, as_view


class Adaptor(Cursor):
    """Cursor over another cursor. Takes on the tier of the cursor it wraps."""

    def __init__(self, inner: Cursor | None = None):
        self.inner = inner
        self.tier = inner.tier if inner is not None else Tier.FORWARD

    def copy(self):
        clone = super().copy()
        if self.inner is not None:
            clone.inner = self.inner.copy()
        return clone

    def dereference(self):
        return self.inner.dereference()

    def increment(self):
        self.inner.increment()

    def equals(self, other) -> bool:
        return self.inner == other.inner

    def decrement(self):
        self.require(Tier.BIDIRECTIONAL)
        self.inner.decrement()

    def advance_by(self, offset: int):
        self.require(Tier.RANDOM_ACCESS)
        self.inner.advance_by(offset)

    def distance_to(self, other) -> int:
        self.require(Tier.RANDOM_ACCESS)
        return self.inner.distance_to(other.inner)


# ----- MAP -----
class MapCursor(Adaptor):
    def __init__(self, inner: Cursor | None = None, function: Callable | None = None):
        super().__init__(inner)
        self.function = function

    def dereference(self):
        return self.function(self.inner.dereference())


def mapped(iterable, function: Callable[[Any], Any]) -> View:
    view = as_view(iterable)
    return View(MapCursor(view.begin(), function), MapCursor(view.end(), function))


# ----- ENUMERATE -----
class EnumerateCursor(Adaptor):
    """
    (index, element) at the wrapped cursor. An index of None is unknown until
    needed and is counted from `origin`, a (cursor, index) pair at or before
    this position.
    """

    def __init__(self, inner: Cursor | None = None, index: int | None = 0,
                 origin: tuple[Cursor, int] | None = None):
        super().__init__(inner)
        self.index = index
        self.origin = origin

    def dereference(self):
        return self.index, self.inner.dereference()

    def increment(self):
        self.inner.increment()
        self.index += 1

    def decrement(self):
        self.require(Tier.BIDIRECTIONAL)
        self._resolve()
        super().decrement()
        self.index -= 1

    # Compares positions only; nothing is dereferenced.
    def _resolve(self):
        if self.index is not None:
            return
        cursor, index = self.origin
        cursor = cursor.copy()
        while cursor != self.inner:
            cursor.increment()
            index += 1
        self.index = index

    def advance_by(self, offset: int):
        super().advance_by(offset)
        self.index += offset


def enumerated(iterable, start: int = 0) -> View:
    """View of (index, element) pairs, counting from `start`."""
    view = as_view(iterable)
    # The end index only matters when walking backwards from the end, so below
    # random access it is counted on the first decrement from the end.
    if view.tier == Tier.RANDOM_ACCESS:
        end = EnumerateCursor(view.end(), start + view.size())
    else:
        end = EnumerateCursor(view.end(), None, (view.begin(), start))
    return View(EnumerateCursor(view.begin(), start), end)


# ----- GENERATE -----
_UNSET = object()

class GenerateCursor(Cursor):
    """
    Position `count` in a sequence of values from a zero-argument producer. The
    producer is called once per position and the value kept, so dereferencing
    twice gives the same value. An unbounded sequence's end has count None and
    is never reached.
    """

    def __init__(self, producer: Callable[[], Any] | None = None,
                 count: int | None = 0, bounded: bool = True):
        self.producer = producer
        self.count = count
        self.tier = Tier.RANDOM_ACCESS if bounded else Tier.FORWARD
        self._value = _UNSET

    def dereference(self):
        if self._value is _UNSET:
            self._value = self.producer()
        return self._value

    def increment(self):
        self.count += 1
        self._value = _UNSET

    def equals(self, other) -> bool:
        return self.count == other.count

    def decrement(self):
        self.require(Tier.BIDIRECTIONAL)
        self.count -= 1
        self._value = _UNSET

    def advance_by(self, offset: int):
        self.require(Tier.RANDOM_ACCESS)
        if offset:
            self.count += offset
            self._value = _UNSET

    def distance_to(self, other) -> int:
        self.require(Tier.RANDOM_ACCESS)
        return other.count - self.count


def generate(producer: Callable[[], Any], amount: int | None = None) -> View:
    """
    View of `amount` values from `producer`, or an endless one if `amount` is
    None. Bounded views are random access.
    """
    if amount is not None and amount < 0:
        raise ValueError(f"amount must not be negative, got {amount}")
    bounded = amount is not None
    return View(GenerateCursor(producer, 0, bounded), GenerateCursor(producer, amount, bounded))


# ----- RANDOM -----
@dataclass(frozen=True)
class Uniform:
    """Uniform distribution over [low, high]; integers if both bounds are ints."""
    low: int | float
    high: int | float

    def __call__(self, engine: random.Random):
        if isinstance(self.low, int) and isinstance(self.high, int):
            return engine.randint(self.low, self.high)
        return engine.uniform(self.low, self.high)


# Seeded from OS entropy on import, shared by every random view that isn't
# given an engine.
_default_engine = random.Random()

class RandomView(View):
    def __init__(self, distribution: Callable[[random.Random], Any],
                 engine: random.Random, amount: int | None = None):
        if amount is not None and amount < 0:
            raise ValueError(f"amount must not be negative, got {amount}")
        self.distribution = distribution
        self.engine = engine
        bounded = amount is not None
        super().__init__(GenerateCursor(self.next_random, 0, bounded),
                         GenerateCursor(self.next_random, amount, bounded))

    # A fresh value, independent of any position in the view.
    def next_random(self):
        return self.distribution(self.engine)

    def min_random(self): return self._bound("low", "min")
    def max_random(self): return self._bound("high", "max")

    # A distribution states its bounds as `low`/`high` attributes (as Uniform
    # does) or as `min()`/`max()` methods.
    def _bound(self, attribute: str, method: str):
        distribution = self.distribution
        if hasattr(distribution, attribute):
            return getattr(distribution, attribute)
        if callable(getattr(distribution, method, None)):
            return getattr(distribution, method)()
        raise TypeError(
            f"{type(distribution).__name__} distribution has no {attribute!r} "
            f"attribute or {method}() method")


def random_view(distribution: Callable[[random.Random], Any], engine: random.Random,
                amount: int | None = None) -> RandomView:
    return RandomView(distribution, engine, amount)


def random_values(low: int | float, high: int | float, amount: int | None = None, *,
                  engine: random.Random | None = None) -> RandomView:
    """
    `amount` uniform random numbers in [low, high] (endless if None). Integer
    bounds give integers, otherwise floats.
    """
    if low > high:
        raise ValueError(f"low must not exceed high, got {low} > {high}")
    return RandomView(Uniform(low, high), engine or _default_engine, amount)


# ----- EXCEPT -----
class ExceptCursor(Adaptor):
    """Skips elements found in `excluded`. Always forward only."""

    def __init__(self, inner: Cursor | None = None, end: Cursor | None = None,
                 excluded: Container = ()):
        super().__init__(inner)
        self.tier = Tier.FORWARD
        self.end = end
        self.excluded = excluded
        if inner is not None:
            self._skip()

    def _skip(self):
        while self.inner != self.end and self.inner.dereference() in self.excluded:
            self.inner.increment()

    def increment(self):
        self.inner.increment()
        self._skip()


def excluding(iterable, to_except) -> View:
    """
    View of the elements of `iterable` not in `to_except`. Pass a set for
    constant-time lookups; other containers are scanned. A str or bytes
    reference excludes its individual characters or bytes, not substrings.
    """
    if isinstance(to_except, (str, bytes)):
        to_except = set(to_except)
    elif not isinstance(to_except, Container):
        to_except = as_view(to_except)
    view = as_view(iterable)
    end = view.end()
    return View(ExceptCursor(view.begin(), end, to_except), ExceptCursor(end.copy(), end, to_except))

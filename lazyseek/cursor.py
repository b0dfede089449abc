"""
Cursors: positional objects over a sequence, and the capability contract they
share.

A cursor implements a handful of primitives (dereference, increment, equals;
optionally decrement, advance_by, distance_to) and the Cursor base class
derives the rest of the navigation surface from those. Each cursor carries a
Tier saying which primitives it supports. Composed cursors report the weakest
tier of the cursors they wrap.

A View is a (begin, end) pair of cursors and is what callers iterate over.
"""

import bisect
import copy
import enum
import threading
from collections.abc import Sequence
from typing import Any, Callable


class Tier(enum.IntEnum):
    FORWARD = 0
    BIDIRECTIONAL = 1
    RANDOM_ACCESS = 2


class CapabilityError(TypeError):
    """A tier-specific operation was used on a cursor below that tier."""


# ----- THE CURSOR CONTRACT -----
class Cursor:
    tier = Tier.FORWARD

    # Primitives. Forward cursors implement the first three.
    def dereference(self): raise NotImplementedError
    def increment(self): raise NotImplementedError
    def equals(self, other) -> bool: raise NotImplementedError

    # Bidirectional.
    def decrement(self):
        self.require(Tier.BIDIRECTIONAL)
        raise NotImplementedError

    # Random access. distance_to(other) is `other - self`, in increments.
    def advance_by(self, offset: int):
        self.require(Tier.RANDOM_ACCESS)
        raise NotImplementedError

    def distance_to(self, other) -> int:
        self.require(Tier.RANDOM_ACCESS)
        raise NotImplementedError

    # An independent cursor at the same position. Cursors holding other
    # cursors must override this.
    def copy(self):
        return copy.copy(self)

    def require(self, tier: Tier):
        if self.tier < tier:
            raise CapabilityError(
                f"{type(self).__name__} is {self.tier.name}, "
                f"operation needs {tier.name}")

    # ----- derived surface -----
    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.equals(other)

    def __ne__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return not self.equals(other)

    # Cursors are mutable positions.
    __hash__ = None

    def __lt__(self, other): return self.distance_to(other) > 0
    def __gt__(self, other): return self.distance_to(other) < 0
    def __le__(self, other): return self.distance_to(other) >= 0
    def __ge__(self, other): return self.distance_to(other) <= 0

    def post_increment(self):
        previous = self.copy()
        self.increment()
        return previous

    def post_decrement(self):
        previous = self.copy()
        self.decrement()
        return previous

    def __iadd__(self, offset: int):
        self.advance_by(offset)
        return self

    def __isub__(self, offset: int):
        self.advance_by(-offset)
        return self

    def __add__(self, offset: int):
        if not isinstance(offset, int):
            return NotImplemented
        moved = self.copy()
        moved.advance_by(offset)
        return moved

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, Cursor):
            return other.distance_to(self)
        if not isinstance(other, int):
            return NotImplemented
        moved = self.copy()
        moved.advance_by(-other)
        return moved

    def __getitem__(self, offset: int):
        return (self + offset).dereference()


# ----- LEAF CURSORS -----
class SequenceCursor(Cursor):
    """
    Index into a Python sequence. Random access by default; pass a lower `tier`
    to expose the sequence with fewer capabilities.
    """

    def __init__(self, seq: Sequence | None = None, index: int = 0,
                 tier: Tier = Tier.RANDOM_ACCESS):
        self.seq = seq
        self.index = index
        self.tier = tier

    def dereference(self):
        return self.seq[self.index]

    def increment(self):
        self.index += 1

    def equals(self, other) -> bool:
        return self.seq is other.seq and self.index == other.index

    def decrement(self):
        self.require(Tier.BIDIRECTIONAL)
        self.index -= 1

    def advance_by(self, offset: int):
        self.require(Tier.RANDOM_ACCESS)
        self.index += offset

    def distance_to(self, other) -> int:
        self.require(Tier.RANDOM_ACCESS)
        return other.index - self.index

    def __repr__(self):
        return f"SequenceCursor(index={self.index}, tier={self.tier.name})"


class _Source:
    def __init__(self, iterable):
        self.iter = iter(iterable)
        self.lock = threading.Lock()

_PENDING, _FULL, _DRAINED = range(3)

# One element of an iterable, pulled on first use. Cursors hold links, so
# copies share whatever has been pulled and links behind every cursor can be
# collected.
class _Link:
    __slots__ = ("source", "state", "value", "rest")

    def __init__(self, source: _Source):
        self.source = source
        self.state = _PENDING
        self.value = None
        self.rest = None

    # Returns True iff this link holds an element.
    def fill(self) -> bool:
        if self.state == _PENDING:
            with self.source.lock:
                if self.state == _PENDING:
                    try:
                        self.value = next(self.source.iter)
                    except StopIteration:
                        self.state = _DRAINED
                    else:
                        self.rest = _Link(self.source)
                        self.state = _FULL
        return self.state == _FULL


class IterableCursor(Cursor):
    """
    Forward cursor over an arbitrary iterable. A cursor with no link is the end
    sentinel; a cursor whose link finds the source exhausted compares equal to
    it.
    """

    def __init__(self, link: _Link | None = None):
        self.link = link

    @classmethod
    def over(cls, iterable):
        return cls(_Link(_Source(iterable)))

    def done(self) -> bool:
        return self.link is None or not self.link.fill()

    def dereference(self):
        assert not self.done()
        return self.link.value

    def increment(self):
        assert not self.done()
        self.link = self.link.rest

    def equals(self, other) -> bool:
        if self.done() or other.done():
            return self.done() and other.done()
        return self.link is other.link

    def __repr__(self):
        return "IterableCursor(end)" if self.done() else "IterableCursor()"


# ----- VIEWS -----
class View:
    """A (begin, end) cursor pair, iterable as a Python iterable."""

    def __init__(self, begin: Cursor, end: Cursor):
        assert type(begin) is type(end)
        self._begin = begin
        self._end = end

    @property
    def tier(self) -> Tier:
        return self._begin.tier

    def begin(self) -> Cursor: return self._begin.copy()
    def end(self) -> Cursor: return self._end.copy()

    def empty(self) -> bool:
        return self._begin == self._end

    def size(self) -> int:
        return self._begin.distance_to(self._end)

    def __iter__(self):
        cursor = self.begin()
        while cursor != self._end:
            yield cursor.dereference()
            cursor.increment()

    def __reversed__(self):
        self._begin.require(Tier.BIDIRECTIONAL)
        cursor = self.end()
        while cursor != self._begin:
            cursor.decrement()
            yield cursor.dereference()

    def __getitem__(self, index: int):
        size = self.size()
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("view index out of range")
        return self._begin[index]

    def to_list(self) -> list:
        return list(self)

    def __repr__(self):
        return f"{type(self).__name__}({self.tier.name})"


def as_view(obj: Any, tier: Tier | None = None) -> View:
    """
    Views pass through. Python sequences become random access views (or `tier`
    if given); any other iterable becomes a forward view.
    """
    if isinstance(obj, View):
        if tier is not None and tier > obj.tier:
            raise CapabilityError(f"{obj!r} cannot be used as {tier.name}")
        return obj
    if isinstance(obj, Sequence):
        tier = Tier.RANDOM_ACCESS if tier is None else tier
        return View(SequenceCursor(obj, 0, tier), SequenceCursor(obj, len(obj), tier))
    if tier is not None and tier > Tier.FORWARD:
        raise CapabilityError(f"{type(obj).__name__} is only iterable forward")
    return View(IterableCursor.over(obj), IterableCursor())


# ----- ALGORITHMS -----
def lower_bound(first: Cursor, last: Cursor, value, key: Callable[[Any], Any]) -> Cursor:
    """
    First position in [first, last) whose key is not less than `value`. The
    range must be sorted by `key`. Never moves `first` itself.
    """
    if (first.tier == Tier.RANDOM_ACCESS and isinstance(first, SequenceCursor)
            and isinstance(last, SequenceCursor) and first.seq is last.seq):
        index = bisect.bisect_left(first.seq, value, first.index, last.index, key=key)
        return SequenceCursor(first.seq, index, first.tier)

    first = first.copy()
    if first.tier == Tier.RANDOM_ACCESS and last.tier == Tier.RANDOM_ACCESS:
        count = first.distance_to(last)
        while count > 0:
            step = count // 2
            middle = first + step
            if key(middle.dereference()) < value:
                first = middle
                first.increment()
                count -= step + 1
            else:
                count = step
        return first

    while first != last and key(first.dereference()) < value:
        first.increment()
    return first

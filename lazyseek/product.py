"""
Cartesian product of two or more sequences.

The product cursor is an odometer: one cursor per dimension, dimension 0
varying slowest and the last dimension fastest. Random access treats the
dimensions as digits of a mixed-radix number whose radixes are the sequence
sizes.
"""

import logging

from lazyseek.cursor import Cursor, Tier, View, as_view

logger = logging.getLogger(__name__)


class CartesianProductCursor(Cursor):
    # begin/current/end hold one cursor per dimension. begin and end are shared
    # between copies and never mutated.
    #
    # The terminal state is current[0] == end[0] with every other dimension at
    # its begin. That is exactly where carrying out of the last combination
    # lands, and it gives the terminal state rank size0 * size1 * ... .
    def __init__(self, current=(), begin=(), end=()):
        assert len(current) == len(begin) == len(end)
        self.current = list(current)
        self.begin = list(begin)
        self.end = list(end)
        self.tier = min((c.tier for c in self.begin), default=Tier.FORWARD)

    def copy(self):
        clone = super().copy()
        clone.current = [c.copy() for c in self.current]
        return clone

    def dereference(self) -> tuple:
        return tuple(c.dereference() for c in self.current)

    def equals(self, other) -> bool:
        return (len(self.current) == len(other.current)
                and all(a == b for a, b in zip(self.current, other.current)))

    def at_end(self) -> bool:
        return self.current[0] == self.end[0]

    def increment(self):
        dim = len(self.current) - 1
        while True:
            self.current[dim].increment()
            # Dimension 0 is never reset; reaching its end is the terminal state.
            if dim == 0 or self.current[dim] != self.end[dim]:
                return
            self.current[dim] = self.begin[dim].copy()
            dim -= 1

    def decrement(self):
        self.require(Tier.BIDIRECTIONAL)
        if self.at_end():
            # The terminal state holds sentinels, so borrowing from it would be
            # wrong. Jump straight to the last combination.
            for dim, end in enumerate(self.end):
                self.current[dim] = end.copy()
                self.current[dim].decrement()
            return

        dim = len(self.current) - 1
        while dim > 0 and self.current[dim] == self.begin[dim]:
            last = self.end[dim].copy()
            last.decrement()
            self.current[dim] = last
            dim -= 1
        self.current[dim].decrement()

    def advance_by(self, offset: int):
        self.require(Tier.RANDOM_ACCESS)
        if not offset:
            return
        # Right to left: each dimension keeps the remainder and passes the
        # quotient on. Floor division turns negative offsets into borrows, which
        # also makes jumping back from the terminal state work.
        carry = offset
        for dim in range(len(self.current) - 1, 0, -1):
            begin = self.begin[dim]
            radix = begin.distance_to(self.end[dim])
            carry, digit = divmod(begin.distance_to(self.current[dim]) + carry, radix)
            self.current[dim] = begin + digit
        self.current[0] += carry
        self._check_end()

    def distance_to(self, other) -> int:
        self.require(Tier.RANDOM_ACCESS)
        return other.rank() - self.rank()

    # Number of increments from the first combination to this position.
    def rank(self) -> int:
        self.require(Tier.RANDOM_ACCESS)
        rank = 0
        for current, begin, end in zip(self.current, self.begin, self.end):
            rank = rank * begin.distance_to(end) + begin.distance_to(current)
        return rank

    def _check_end(self):
        if self.at_end():
            for dim in range(1, len(self.current)):
                self.current[dim] = self.begin[dim].copy()

    def __repr__(self):
        return f"CartesianProductCursor({len(self.current)} dims, {self.tier.name})"


def cartesian_product(*iterables) -> View:
    """
    View over every combination of one element from each iterable, as tuples,
    in lexicographic order with the last iterable varying fastest.

    The view's tier is the weakest tier among the inputs. If any input is empty
    the view is empty and nothing is dereferenced.
    """
    if len(iterables) < 2:
        raise ValueError(
            f"cartesian_product needs at least 2 sequences, got {len(iterables)}")

    views = [as_view(it) for it in iterables]
    begin = [v.begin() for v in views]
    end = [v.end() for v in views]
    terminal = [end[0]] + begin[1:]

    first = begin
    if any(b == e for b, e in zip(begin, end)):
        logger.debug("cartesian product over %d sequences has an empty dimension",
                     len(views))
        first = terminal

    return View(
        CartesianProductCursor([c.copy() for c in first], begin, end),
        CartesianProductCursor([c.copy() for c in terminal], begin, end),
    )

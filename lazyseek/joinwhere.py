"""
Equi-join of a sequence A against a sequence B that is sorted by its join key.

For each element of A the cursor binary-searches the rest of B for the first
element with an equal key. B must be sorted ascending by `selector_b`; this is
never checked and an unsorted B silently produces incomplete or repeated
matches. No sorting or indexing is done here.

Matching follows B-side duplicates before moving A: after a match, the next
increment searches again from just past the matched B element with the same A
element. So A = [1, 2, 2, 3] against B keyed [1, 2, 2, 4] produces
(1,1) (2,2) (2,2') (2,2) (2,2'), with each of A's 2s meeting both of B's.
"""

import concurrent.futures
import enum
import logging
import threading
from typing import Any, Callable

from lazyseek.cursor import Cursor, Tier, View, as_view, lower_bound

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 64


class ExecutionPolicy(enum.Enum):
    SEQUENTIAL = "sequential"
    # Searches several A elements at once on worker threads. Callers using it
    # must not depend on result order.
    PARALLEL = "parallel"


_pool = None
_pool_lock = threading.Lock()

def _shared_pool() -> concurrent.futures.Executor:
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = concurrent.futures.ThreadPoolExecutor(thread_name_prefix="lazyseek-join")
            logger.debug("started shared join worker pool")
        return _pool


class JoinWhereCursor(Cursor):
    # Invariant: outside of find_next(), either iter_a == end_a or iter_b is a
    # B element whose key equals the key of A's current element.
    tier = Tier.FORWARD

    def __init__(self, iter_a: Cursor | None = None, end_a: Cursor | None = None,
                 iter_b: Cursor | None = None, end_b: Cursor | None = None,
                 selector_a: Callable | None = None, selector_b: Callable | None = None,
                 result_selector: Callable | None = None,
                 policy: ExecutionPolicy = ExecutionPolicy.SEQUENTIAL,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 executor: concurrent.futures.Executor | None = None):
        self.iter_a = iter_a
        self.end_a = end_a
        self.iter_b = iter_b
        self.begin_b = iter_b
        self.end_b = end_b
        self.selector_a = selector_a
        self.selector_b = selector_b
        self.result_selector = result_selector
        self.policy = policy
        self.batch_size = batch_size
        self.executor = executor
        self._lock = threading.Lock()
        # Parallel only: A positions after iter_a already read by an earlier
        # batch, as (cursor, element), and the cursor just past them. Reading a
        # position again could produce a different element.
        self._read_ahead = []
        self._read_end = None

        if iter_a is None:      # default-constructed sentinel
            return
        self.begin_b = iter_b.copy()
        if iter_a == end_a or iter_b == end_b:
            self.iter_a = end_a.copy()
            return
        self.find_next()

    def copy(self):
        clone = super().copy()
        if self.iter_a is not None:
            clone.iter_a = self.iter_a.copy()
            clone.iter_b = self.iter_b.copy()
        if self._read_end is not None:
            clone._read_end = self._read_end.copy()
        return clone

    def dereference(self):
        return self.result_selector(self.iter_a.dereference(), self.iter_b.dereference())

    def increment(self):
        self.iter_b.increment()
        self.find_next()

    def equals(self, other) -> bool:
        return self.iter_a == other.iter_a

    # Moves to the next match, starting with A's current element and the B
    # position in iter_b. Leaves iter_a == end_a if there is none.
    def find_next(self):
        if self.policy is ExecutionPolicy.PARALLEL:
            self._find_next_parallel()
            return
        while self.iter_a != self.end_a:
            found = self._probe(self.iter_a.dereference(), self.iter_b)
            if found is not None:
                self.iter_b = found
                return
            self.iter_b = self.begin_b.copy()
            self.iter_a.increment()

    # B position in [start, end_b) whose key equals a's key, or None. Does not
    # touch cursor state, so it can run on worker threads.
    def _probe(self, a, start: Cursor) -> Cursor | None:
        key = self.selector_a(a)
        found = lower_bound(start, self.end_b, key, self.selector_b)
        if found != self.end_b and not key < self.selector_b(found.dereference()):
            return found
        return None

    def _find_next_parallel(self):
        executor = self.executor or _shared_pool()
        while self.iter_a != self.end_a:
            # Elements are read on this thread, each exactly once; only key
            # selection and the B search run on workers. A cursor is copied
            # after it is read so the copy keeps any value computed for it.
            batch = [(self.iter_a, self.iter_a.dereference())] + self._read_ahead
            position = self._read_end
            if position is None:
                position = self.iter_a.copy()
                position.increment()
            while len(batch) < self.batch_size and position != self.end_a:
                value = position.dereference()
                batch.append((position.copy(), value))
                position.increment()

            hit = []
            def search(index, a, start):
                found = self._probe(a, start)
                if found is None:
                    return
                with self._lock:
                    if not hit or index < hit[0]:
                        hit[:] = [index, found]

            # Only the first candidate resumes from the current B position.
            futures = [
                executor.submit(search, index, a, self.iter_b if index == 0 else self.begin_b)
                for index, (_, a) in enumerate(batch)
            ]
            logger.debug("join_where searching %d candidates in parallel", len(futures))
            for future in futures:
                future.result()

            if hit:
                index, found = hit
                self.iter_a = batch[index][0]
                self.iter_b = found
                self._read_ahead = batch[index + 1:]
                self._read_end = position
                return
            self.iter_a = position
            self.iter_b = self.begin_b.copy()
            self._read_ahead = []
            self._read_end = None

    def __repr__(self):
        state = "end" if self.iter_a is None or self.iter_a == self.end_a else "match"
        return f"JoinWhereCursor({state}, {self.policy.value})"


def join_where(a, b, selector_a: Callable[[Any], Any], selector_b: Callable[[Any], Any],
               result_selector: Callable[[Any, Any], Any],
               policy: ExecutionPolicy = ExecutionPolicy.SEQUENTIAL, *,
               batch_size: int = DEFAULT_BATCH_SIZE,
               executor: concurrent.futures.Executor | None = None) -> View:
    """
    Forward view of result_selector(x, y) for each x in `a` and each y in `b`
    with selector_a(x) == selector_b(y). `b` must be sorted by selector_b.

    The keys may be of different types as long as they compare with `<`.
    Under ExecutionPolicy.PARALLEL the search for matches runs on `executor`
    (a shared thread pool by default), `batch_size` A elements at a time.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    view_a, view_b = as_view(a), as_view(b)
    if view_a.empty() or view_b.empty():
        logger.debug("join_where over an empty sequence is empty")

    end_a, end_b = view_a.end(), view_b.end()
    args = (selector_a, selector_b, result_selector, policy, batch_size, executor)
    return View(
        JoinWhereCursor(view_a.begin(), end_a, view_b.begin(), end_b, *args),
        JoinWhereCursor(end_a.copy(), end_a, end_b.copy(), end_b, *args),
    )

import pytest

from lazyseek.adaptors import mapped
from lazyseek.cursor import (
    CapabilityError, IterableCursor, SequenceCursor, Tier, View, as_view, lower_bound,
)


def test_sequence_cursor_derived_surface():
    data = [10, 20, 30, 40]
    view = as_view(data)
    first, last = view.begin(), view.end()

    assert view.tier == Tier.RANDOM_ACCESS
    assert last - first == 4
    assert first - last == -4
    assert first < last and last > first
    assert first <= first.copy() and first >= first.copy()
    assert first[2] == 30
    assert (first + 3).dereference() == 40
    assert (2 + first).dereference() == 30
    assert (last - 1).dereference() == 40

    cursor = first.copy()
    previous = cursor.post_increment()
    assert previous.dereference() == 10
    assert cursor.dereference() == 20
    cursor += 2
    assert cursor.dereference() == 40
    cursor -= 1
    assert cursor.dereference() == 30
    previous = cursor.post_decrement()
    assert previous.dereference() == 30
    assert cursor.dereference() == 20


def test_copies_are_independent():
    cursor = as_view("abc").begin()
    other = cursor.copy()
    other.increment()
    assert cursor.dereference() == "a"
    assert other.dereference() == "b"
    assert cursor != other


def test_dereference_is_idempotent():
    cursor = as_view(x for x in "xyz").begin()
    assert cursor.dereference() == cursor.dereference() == "x"


def test_same_positions_compare_equal():
    data = [1, 2, 3]
    assert as_view(data).begin() == as_view(data).begin()
    assert as_view(data).begin() != as_view(data).end()
    assert as_view(data).begin() != as_view([1, 2, 3]).begin()


def test_default_cursors_are_equal_sentinels():
    assert SequenceCursor() == SequenceCursor()
    assert IterableCursor() == IterableCursor()
    assert as_view(iter([])).begin() == IterableCursor()


def test_forward_cursor_rejects_backward_and_jumps():
    cursor = as_view(iter([1, 2, 3])).begin()
    assert cursor.tier == Tier.FORWARD
    with pytest.raises(CapabilityError):
        cursor.decrement()
    with pytest.raises(CapabilityError):
        cursor + 1
    with pytest.raises(CapabilityError):
        cursor < cursor.copy()
    assert issubclass(CapabilityError, TypeError)


def test_bidirectional_sequence():
    view = as_view([1, 2, 3], tier=Tier.BIDIRECTIONAL)
    assert list(reversed(view)) == [3, 2, 1]
    with pytest.raises(CapabilityError):
        view.size()
    with pytest.raises(CapabilityError):
        view.begin().advance_by(1)


def test_iterable_view_pulls_lazily_and_is_multipass():
    pulled = []

    def source():
        for x in range(5):
            pulled.append(x)
            yield x

    view = as_view(source())
    assert pulled == []
    assert view.begin().dereference() == 0
    assert pulled == [0]
    assert list(view) == [0, 1, 2, 3, 4]
    assert list(view) == [0, 1, 2, 3, 4]
    assert pulled == [0, 1, 2, 3, 4]


def test_view_surface():
    view = as_view([5, 6, 7])
    assert view.size() == 3
    assert view[0] == 5
    assert view[-1] == 7
    with pytest.raises(IndexError):
        view[3]
    assert view.to_list() == [5, 6, 7]
    assert list(reversed(view)) == [7, 6, 5]
    assert not view.empty()
    assert as_view([]).empty()
    assert as_view(iter([])).empty()


def test_forward_view_cannot_be_reversed():
    view = as_view(iter([1, 2]))
    with pytest.raises(CapabilityError):
        list(reversed(view))


def test_as_view_passes_views_through():
    view = as_view([1, 2])
    assert as_view(view) is view
    forward = as_view(iter([1]))
    with pytest.raises(CapabilityError):
        as_view(forward, tier=Tier.RANDOM_ACCESS)
    with pytest.raises(CapabilityError):
        as_view({1, 2}, tier=Tier.BIDIRECTIONAL)
    assert isinstance(as_view({1, 2}), View)


@pytest.mark.parametrize("value, index", [(0, 0), (3, 1), (4, 3), (7, 4), (8, 5)])
def test_lower_bound_on_sequences(value, index):
    data = [1, 3, 3, 5, 7]
    view = as_view(data)
    found = lower_bound(view.begin(), view.end(), value, key=lambda x: x)
    assert found.index == index

    linear = as_view(data, tier=Tier.FORWARD)
    found = lower_bound(linear.begin(), linear.end(), value, key=lambda x: x)
    assert found.index == index


@pytest.mark.parametrize("value, index", [(0, 0), (30, 1), (40, 3), (80, 5)])
def test_lower_bound_by_cursor_arithmetic(value, index):
    view = mapped([1, 3, 3, 5, 7], lambda x: x * 10)
    first = view.begin()
    found = lower_bound(first, view.end(), value, key=lambda x: x)
    assert first - view.begin() == 0
    assert view.begin().distance_to(found) == index


def test_lower_bound_over_iterable():
    view = as_view(iter([(1, "a"), (2, "b"), (2, "c"), (5, "d")]))
    found = lower_bound(view.begin(), view.end(), 2, key=lambda pair: pair[0])
    assert found.dereference() == (2, "b")
    assert lower_bound(view.begin(), view.end(), 9, key=lambda pair: pair[0]) == view.end()

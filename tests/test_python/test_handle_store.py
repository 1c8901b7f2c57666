import pytest

from handlequadtree import HandleStore


def test_handles_are_monotonic_and_never_reused():
    store = HandleStore()
    a = store.alloc_handle()
    b = store.alloc_handle()
    assert (a, b) == (0, 1)

    store.add(a, "a")
    store.add(b, "b")
    assert store.pop(a) == "a"
    assert store.alloc_handle() == 2

    store.clear()
    assert len(store) == 0
    assert store.alloc_handle() == 3


def test_alloc_range():
    store = HandleStore()
    store.alloc_handle()
    assert store.alloc_range(3) == range(1, 4)
    assert store.next_handle == 4


def test_lookup_and_items_order():
    store = HandleStore()
    for h, obj in ((2, "c"), (0, "a"), (1, "b")):
        store.add(h, obj)
    assert store.by_handle(1) == "b"
    assert store.by_handle(9) is None
    assert 0 in store
    assert 9 not in store
    assert list(store.items()) == [(0, "a"), (1, "b"), (2, "c")]
    assert store.get_many([2, 0]) == ["c", "a"]
    assert store.pop(9) is None


def test_require_missing_is_internal_error():
    store = HandleStore()
    with pytest.raises(RuntimeError, match="missing tracked item"):
        store.require(0)

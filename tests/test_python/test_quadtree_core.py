import pytest

from handlequadtree import InsertError, QuadTree
from tests.test_python.conftest import Body, corners, make_tree


def brute_force(bodies, pos, r):
    cx, cy = pos
    out = set()
    for b in bodies:
        dx = b.x - cx
        dy = b.y - cy
        if dx * dx + dy * dy <= r * r:
            out.add(b.name)
    return out


def test_insert_search_len_contains_and_iter(bounds):
    qt = make_tree(bounds)
    a = Body(10.0, 10.0, "a")
    b = Body(20.0, 20.0, "b")
    ha = qt.insert(a)
    hb = qt.insert(b)

    assert (ha, hb) == (0, 1)
    assert len(qt) == 2
    assert ha in qt
    assert 7 not in qt
    assert qt.get(hb) is b
    assert list(qt) == [(ha, a), (hb, b)]
    assert qt.get_all_items() == [a, b]

    assert qt.search_radius((10.0, 10.0), 1.0) == [a]
    assert set(qt.search_radius_ids((0.0, 0.0), 100.0)) == {ha, hb}


def test_concrete_split_scenario():
    qt = QuadTree(1, 0.01, (0.0, 0.0), (1.0, 1.0))
    a = Body(0.1, 0.1, "A")
    b = Body(0.2, 0.2, "B")
    qt.insert(a)
    qt.insert(b)

    assert qt.get_inner_max_depth() > 1
    assert {x.name for x in qt.search_radius((0.0, 0.0), 0.5)} == {"A", "B"}
    assert qt.search_radius((0.0, 0.0), 0.05) == []


def test_out_of_bounds_insert_changes_nothing(bounds):
    qt = make_tree(bounds)
    qt.insert(Body(1.0, 1.0))
    before = qt.leaf_handles()

    for pos in [(-0.1, 5.0), (100.1, 5.0), (5.0, -0.1), (5.0, 100.1), (200.0, 200.0)]:
        with pytest.raises(InsertError):
            qt.insert(Body(*pos))

    assert len(qt) == 1
    assert qt.leaf_handles() == before
    # no handle was burned by the failures
    assert qt.insert(Body(2.0, 2.0)) == 1


def test_insert_on_root_boundary(bounds):
    qt = make_tree(bounds, capacity=1)
    pts = [(0.0, 0.0), (100.0, 100.0), (0.0, 100.0), (100.0, 0.0), (50.0, 50.0)]
    bodies = [Body(x, y, i) for i, (x, y) in enumerate(pts)]
    for b in bodies:
        qt.insert(b)
    got = {b.name for b in qt.search_radius((50.0, 50.0), 80.0)}
    assert got == set(range(len(pts)))


def test_remove_round_trip(bounds):
    qt = make_tree(bounds, capacity=2)
    x = Body(33.0, 66.0, "x")
    others = [Body(30.0 + i, 60.0 + i) for i in range(6)]
    for o in others:
        qt.insert(o)
    h = qt.insert(x)

    assert qt.remove(h, (33.0, 66.0)) is x
    assert h not in qt
    for r in (0.0, 1.0, 10.0, 500.0):
        assert x not in qt.search_radius((33.0, 66.0), r)
        assert h not in qt.search_radius_ids((33.0, 66.0), r)
    assert qt.remove(h, (33.0, 66.0)) is None


def test_radius_search_matches_brute_force(bounds, rng):
    qt = make_tree(bounds, capacity=4, min_size=0.5)
    bodies = [Body(rng.uniform(0, 100), rng.uniform(0, 100), i) for i in range(600)]
    for b in bodies:
        qt.insert(b)

    for _ in range(200):
        pos = (rng.uniform(-20, 120), rng.uniform(-20, 120))
        r = rng.uniform(0, 40)
        got = [b.name for b in qt.search_radius(pos, r)]
        assert len(got) == len(set(got))
        assert set(got) == brute_force(bodies, pos, r)


def test_radius_ids_are_a_superset(bounds, rng):
    qt = make_tree(bounds, capacity=3)
    bodies = [Body(rng.uniform(0, 100), rng.uniform(0, 100), i) for i in range(200)]
    handles = {qt.insert(b): b for b in bodies}

    for _ in range(50):
        pos = (rng.uniform(0, 100), rng.uniform(0, 100))
        r = rng.uniform(0, 30)
        ids = set(qt.search_radius_ids(pos, r))
        exact = {h for h, b in handles.items() if b.name in brute_force(bodies, pos, r)}
        assert exact <= ids


def test_single_split_preserves_membership(bounds):
    qt = make_tree(bounds, capacity=4)
    pts = [(10.0, 10.0), (90.0, 10.0), (10.0, 90.0), (90.0, 90.0), (20.0, 20.0)]
    for i, (x, y) in enumerate(pts):
        qt.insert(Body(x, y, i))

    assert qt.get_inner_max_depth() == 2
    got = {b.name for b in qt.search_radius((50.0, 50.0), 80.0)}
    assert got == set(range(5))


def test_identical_positions_terminate_and_stay_retrievable():
    qt = QuadTree(5, 0.01, (0.0, 0.0), (1.0, 1.0))
    n = 2000
    for i in range(n):
        qt.insert(Body(0.1, 0.1, i))

    assert len(qt) == n
    # region halves until an edge is <= min_size: 1 / 2**7 < 0.01
    assert qt.get_inner_max_depth() == 8
    assert len(qt.search_radius((0.1, 0.1), 0.0)) == n


def test_leaves_stay_sorted_after_churn(bounds, rng):
    qt = make_tree(bounds, capacity=3)
    live = {}
    for step in range(1500):
        if live and rng.random() < 0.35:
            h = rng.choice(list(live))
            assert qt.remove(h, live.pop(h).position()) is not None
        else:
            b = Body(rng.uniform(0, 100), rng.uniform(0, 100), step)
            live[qt.insert(b)] = b

    for leaf in qt.leaf_handles():
        assert all(a < b for a, b in zip(leaf, leaf[1:]))
    assert sorted(h for leaf in qt.leaf_handles() for h in leaf) == sorted(live)
    assert len(qt) == len(live)


def test_every_handle_is_in_the_leaf_its_position_routes_to(bounds, rng):
    qt = make_tree(bounds, capacity=2, min_size=0.1)
    placed = {}
    for i in range(400):
        b = Body(rng.uniform(0, 100), rng.uniform(0, 100), i)
        placed[qt.insert(b)] = b
    # include midpoint lines
    for x, y in [(50.0, 50.0), (25.0, 75.0), (50.0, 12.5), (75.0, 50.0)]:
        b = Body(x, y)
        placed[qt.insert(b)] = b

    root = qt._tree  # type: ignore[attr-defined]
    for h, b in placed.items():
        node = root
        while not node.is_leaf:
            node = node.child(node.region.route(b.position()))
        assert h in node.handles
        assert node.region.contains(b.position())


def test_reinsert_moves_item(bounds):
    qt = make_tree(bounds, capacity=2)
    bodies = [Body(10.0 + i, 10.0 + i, i) for i in range(8)]
    handles = [qt.insert(b) for b in bodies]

    mover = bodies[3]
    old = mover.position()
    mover.x, mover.y = 90.0, 80.0
    qt.reinsert(handles[3], old)

    assert qt.search_radius((90.0, 80.0), 0.5) == [mover]
    assert mover not in qt.search_radius(old, 0.5)
    assert len(qt) == 8
    assert qt.remove(handles[3], (90.0, 80.0)) is mover


def test_lines_grow_with_splits(bounds):
    qt = make_tree(bounds, capacity=1)
    assert len(qt.lines()) == 4
    qt.insert(Body(10.0, 10.0))
    qt.insert(Body(90.0, 90.0))
    assert len(qt.lines()) == 20
    assert len(qt.get_all_node_boundaries()) == 5
    assert qt.get_all_node_boundaries()[0] == bounds


def test_properties(bounds):
    tl, br = corners(bounds)
    qt = QuadTree(6, 2.5, tl, br)
    assert qt.bounds == bounds
    assert qt.capacity == 6
    assert qt.min_size == 2.5

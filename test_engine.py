import math

import numpy as np
import pytest

from tapegrad import leaf, add, mul, pow, tanh, topological_sort, backward, zero_grads
from tapegrad.cli import build_neuron_example


def test_forward_neuron_example():
    o, v = build_neuron_example()
    x1w1 = mul(v["x1"], v["w1"])
    x2w2 = mul(v["x2"], v["w2"])
    assert x1w1.value == pytest.approx(-6.0, abs=1e-3)
    assert x2w2.value == pytest.approx(0.0, abs=1e-3)
    assert v["n"].value == pytest.approx(0.881373587019543, abs=1e-3)
    assert o.value == pytest.approx(0.7071067811865476, abs=1e-3)


def test_backward_neuron_example():
    o, v = build_neuron_example()
    o.backward()

    assert o.grad == 1.0
    assert v["n"].grad == pytest.approx(0.5, abs=1e-3)
    assert v["b"].grad == pytest.approx(0.5, abs=1e-3)
    assert v["x1"].grad == pytest.approx(-1.5, abs=1e-3)
    assert v["w1"].grad == pytest.approx(1.0, abs=1e-3)
    assert v["x2"].grad == pytest.approx(0.5, abs=1e-3)
    assert v["w2"].grad == pytest.approx(0.0, abs=1e-3)


def test_shared_operand_accumulates():
    a = leaf(3.0, label="a")
    c = mul(a, a)
    c.backward()
    assert c.value == 9.0
    assert a.grad == pytest.approx(2 * a.value)


def test_diamond_accumulates_both_paths():
    # e = (a*b) + (a+b)  ->  de/da = b + 1, de/db = a + 1
    a = leaf(2.0, label="a")
    b = leaf(-4.0, label="b")
    e = add(mul(a, b), add(a, b))
    e.backward()
    assert a.grad == pytest.approx(-3.0)
    assert b.grad == pytest.approx(3.0)


def test_label_collision_does_not_merge_nodes():
    a = leaf(2.0, label="same")
    b = leaf(3.0, label="same")
    c = mul(a, b)
    assert len(topological_sort(c)) == 3
    c.backward()
    assert a.grad == pytest.approx(3.0)
    assert b.grad == pytest.approx(2.0)


def test_leaf_root_sorts_to_itself():
    a = leaf(1.5)
    assert topological_sort(a) == [a]
    a.backward()
    assert a.grad == 1.0


def _random_dag(rng, n_leaves=5, n_ops=30):
    pool = [leaf(float(rng.uniform(-1, 1)), label=f"x{i}") for i in range(n_leaves)]
    for _ in range(n_ops):
        op = rng.integers(0, 4)
        a = pool[rng.integers(0, len(pool))]
        b = pool[rng.integers(0, len(pool))]
        if op == 0:
            pool.append(add(a, b))
        elif op == 1:
            pool.append(mul(a, b))
        elif op == 2:
            pool.append(pow(a, 2.0))
        else:
            pool.append(tanh(a))
    root = pool[0]
    for v in pool[1:]:
        root = add(root, v)
    return pool, root


@pytest.mark.parametrize("seed", range(5))
def test_topological_order_respects_every_edge(seed):
    rng = np.random.default_rng(seed)
    pool, root = _random_dag(rng)
    order = topological_sort(root)
    position = {v.index: i for i, v in enumerate(order)}

    # each reachable node exactly once
    assert len(position) == len(order)
    assert all(v.index in position for v in pool)
    assert order[-1] == root

    for v in order:
        for p in v.parents:
            assert position[p.index] < position[v.index]


def test_backward_twice_accumulates_without_reset():
    a = leaf(2.0)
    b = leaf(5.0)
    c = mul(a, b)
    c.backward()
    assert a.grad == pytest.approx(5.0)

    c.backward()
    assert c.grad == 1.0
    assert a.grad == pytest.approx(10.0)

    zero_grads(c)
    assert a.grad == 0.0 and b.grad == 0.0 and c.grad == 0.0
    backward(c)
    assert a.grad == pytest.approx(5.0)


def test_deep_chain_has_no_recursion_limit():
    x = leaf(0.5, label="x")
    y = x
    for _ in range(5000):
        y = add(y, 0.0)
    y.backward()
    assert len(topological_sort(y)) == 1 + 2 * 5000
    assert x.grad == 1.0


def test_nan_propagates_without_raising():
    a = leaf(-2.0)
    p = pow(a, 0.5)
    assert math.isnan(p.value)
    out = mul(p, 3.0)
    out.backward()
    assert math.isnan(a.grad)


def test_tanh_of_huge_input_saturates():
    a = leaf(1e6)
    t = tanh(a)
    assert t.value == 1.0
    t.backward()
    assert a.grad == 0.0


def test_power_rule():
    a = leaf(3.0)
    p = pow(a, 3.0)
    p.backward()
    assert p.value == pytest.approx(27.0)
    assert a.grad == pytest.approx(27.0)

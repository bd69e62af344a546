import numpy as np
import pytest

from tapegrad import Tape, Value, leaf, add, sub, mul, neg, pow, tanh, use_tape


def test_leaf_defaults():
    a = leaf(2.5)
    assert a.value == 2.5
    assert a.grad == 0.0
    assert a.op == "leaf"
    assert a.is_leaf
    assert a.label == "2.5"
    assert a.parents == ()


def test_leaf_rejects_non_numbers():
    with pytest.raises(TypeError):
        leaf("1.0")
    with pytest.raises(TypeError):
        leaf(leaf(1.0))


def test_composed_labels():
    x1, w1 = leaf(2.0, label="x1"), leaf(-3.0, label="w1")
    x2, w2 = leaf(0.0, label="x2"), leaf(1.0, label="w2")
    b = leaf(6.881373587019543, label="b")
    n = add(add(mul(x1, w1), mul(x2, w2)), b)
    assert n.label == "x1*w1 + x2*w2 + b"
    assert tanh(n).label == "tanh(x1*w1 + x2*w2 + b)"
    assert pow(x1, 2).label == "x1^2.0"
    assert mul(x1, w1, label="p").label == "p"


def test_ops_record_operands():
    a, b = leaf(1.0), leaf(2.0)
    c = mul(a, b)
    assert c.op == "mul"
    assert c.parents == (a, b)
    p = pow(a, 3.0)
    assert p.op == "pow" and p.exponent == 3.0 and p.parents == (a,)


def test_sub_is_derived_from_add_and_mul():
    a, b = leaf(5.0), leaf(3.0)
    d = sub(a, b)
    assert d.value == 2.0
    assert d.op == "add"
    lhs, rhs = d.parents
    assert lhs == a
    assert rhs.op == "mul"
    assert rhs.parents[0] == b
    assert rhs.parents[1].value == -1.0

    d.backward()
    assert a.grad == 1.0
    assert b.grad == -1.0


@pytest.mark.parametrize("seed", range(3))
def test_subtraction_identity(seed):
    rng = np.random.default_rng(seed)
    for av, bv in rng.uniform(-100, 100, size=(20, 2)):
        a, b = leaf(av), leaf(bv)
        assert add(a, b).sub(b).value == pytest.approx(a.value, abs=1e-9)


def test_neg():
    a = leaf(4.0)
    n = neg(a)
    assert n.value == -4.0
    n.backward()
    assert a.grad == -1.0


def test_operator_overloads_and_plain_numbers():
    x = leaf(3.0, label="x")
    y = 2 * x + 1 - x ** 2.0
    assert y.value == pytest.approx(2 * 3 + 1 - 9)
    y.backward()
    assert x.grad == pytest.approx(2 - 2 * 3)

    z = 1 - x
    assert z.value == -2.0
    assert (-x).value == -3.0


def test_named_methods():
    a, b = leaf(0.5), leaf(2.0)
    assert a.add(b).value == 2.5
    assert a.mul(b).value == 1.0
    assert a.sub(b).value == -1.5
    assert b.pow(3.0).value == 8.0
    assert a.tanh().value == pytest.approx(np.tanh(0.5))


def test_tanh_matches_exponential_form():
    for v in (-2.0, -0.3, 0.0, 0.7, 1.9):
        e2x = np.exp(2 * v)
        assert tanh(leaf(v)).value == pytest.approx((e2x - 1) / (e2x + 1))


def test_pow_exponent_must_be_a_constant():
    a = leaf(2.0)
    with pytest.raises(TypeError):
        pow(a, leaf(2.0))
    with pytest.raises(TypeError):
        a ** "2"


def test_operands_from_different_tapes_are_rejected():
    a = leaf(1.0)
    with use_tape(Tape()):
        b = leaf(2.0)
    with pytest.raises(ValueError, match="different tapes"):
        add(a, b)


def test_constants_join_the_operand_tape():
    other = Tape()
    with use_tape(other):
        a = leaf(1.0)
    c = mul(a, 5.0)  # the active tape is not `other`
    assert c.tape is other
    assert len(other) == 3


def test_adjust_value_only_on_leaves():
    a = leaf(1.0)
    a.adjust_value(-0.25)
    assert a.value == 0.75
    with pytest.raises(ValueError, match="leaf"):
        add(a, a).adjust_value(1.0)


def test_zero_grad():
    a = leaf(1.0)
    a.backward()
    assert a.grad == 1.0
    a.zero_grad()
    assert a.grad == 0.0


def test_value_identity_is_the_handle():
    a = leaf(1.0, label="a")
    again = Value(a.tape, a.index)
    assert again == a
    assert hash(again) == hash(a)
    assert leaf(1.0, label="a") != a

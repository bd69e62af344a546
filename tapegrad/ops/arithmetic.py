# tapegrad/ops/arithmetic.py
import numbers
from typing import Optional

import numpy as np

from ..core.var import Value
from ..core import tape as tape_mod  # module access so use_tape() swaps are seen


def leaf(value, label: Optional[str] = None) -> Value:
    """New input/parameter node on the active tape. Label defaults to the value."""
    if isinstance(value, Value) or not isinstance(value, numbers.Real):
        raise TypeError(f"leaf() only accepts real numbers, but got {type(value)}")
    val = np.float64(value)
    tape = tape_mod.global_tape
    idx = tape.push_node(op_tag="leaf", value=val,
                         label=label if label is not None else f"{float(val)}")
    return Value(tape, idx)


def _as_value(x, tape=None) -> Value:
    """Ensure x is a Value; otherwise record it as a constant leaf."""
    if isinstance(x, Value):
        return x
    if tape is None:
        return leaf(x)
    with tape_mod.use_tape(tape):
        return leaf(x)


def _operands(x, y):
    """
    Coerce a binary op's operands onto one tape. Plain numbers join the tape
    of the Value operand; two Values from different tapes are rejected.
    """
    tape = x.tape if isinstance(x, Value) else y.tape if isinstance(y, Value) else None
    x = _as_value(x, tape)
    y = _as_value(y, tape)
    if x.tape is not y.tape:
        raise ValueError(f"operands {x.label!r} and {y.label!r} live on different tapes")
    return x, y


def _binary(x, y, f, tag, label):
    """
    Generic binary primitive:
      - computes out.value = f(x.value, y.value) eagerly
      - pushes a node whose parents are the handles of x and y
    """
    x, y = _operands(x, y)
    with np.errstate(all="ignore"):
        val = np.float64(f(x.value, y.value))
    idx = x.tape.push_node(op_tag=tag, value=val, label=label,
                           parents=(x.handle, y.handle))
    return Value(x.tape, idx)


def add(x, y, label=None): return _binary(x, y, lambda a, b: a + b, "add", label)
def mul(x, y, label=None): return _binary(x, y, lambda a, b: a * b, "mul", label)


def sub(x, y, label=None):
    """x - y, built as x + y*(-1) so no extra gradient rule is needed."""
    x, y = _operands(x, y)
    with tape_mod.use_tape(y.tape):
        minus_one = leaf(-1.0)
    return add(x, mul(y, minus_one), label=label)


def neg(x, label=None):
    x = _as_value(x)
    with tape_mod.use_tape(x.tape):
        minus_one = leaf(-1.0)
    return mul(x, minus_one, label=label)


def pow(x, exponent, label=None):
    """
    Power with a constant real exponent:
      out.value = x.value ** exponent

    A negative base with a fractional exponent gives NaN (float64
    semantics), not an exception.
    """
    if isinstance(exponent, Value) or not isinstance(exponent, numbers.Real):
        raise TypeError(f"pow() exponent must be a real number, not {type(exponent)}")
    x = _as_value(x)
    k = float(exponent)
    with np.errstate(all="ignore"):
        val = np.power(np.float64(x.value), k)
    idx = x.tape.push_node(op_tag="pow", value=val, label=label,
                           parents=(x.handle,), exponent=k)
    return Value(x.tape, idx)

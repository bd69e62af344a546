# tapegrad/ops/transcendental.py
import numpy as np
from ..core.var import Value
from .arithmetic import _as_value


def tanh(x, label=None) -> Value:
    """
    Hyperbolic tangent, (e^{2x} - 1) / (e^{2x} + 1).

    np.tanh evaluates the same function without forming e^{2x}, so very
    large |x| saturates to +/-1 instead of overflowing to inf/inf = NaN.
    """
    x = _as_value(x)
    t = np.tanh(np.float64(x.value))
    idx = x.tape.push_node(op_tag="tanh", value=t, label=label,
                           parents=(x.handle,))
    return Value(x.tape, idx)

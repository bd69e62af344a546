"""
Gradient checking by bumping.

Compares the reverse-mode gradient of a scalar function against a central
finite difference of the same function:

    df/dx_i ≈ [f(x + ε e_i) - f(x - ε e_i)] / (2ε)

One backward pass gives all partials; bumping costs 2 forward evaluations
per input.
"""

from typing import Callable, Dict, List, Sequence

import numpy as np

from .core.tape import use_tape
from .core.var import Value
from .ops.arithmetic import leaf

GraphFn = Callable[[List[Value]], Value]


def _evaluate(f: GraphFn, x: Sequence[float]) -> float:
    with use_tape():
        xs = [leaf(v, label=f"x{i}") for i, v in enumerate(x)]
        return float(f(xs).value)


def analytic_grad(f: GraphFn, x0: Sequence[float]) -> np.ndarray:
    """
    Gradient of f at x0 from one backward pass, on an isolated tape.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    analytic_grad(f, [2.0, 4.0]) -> array([4., 3.])
    """
    with use_tape():
        xs = [leaf(v, label=f"x{i}") for i, v in enumerate(x0)]
        y = f(xs)
        y.backward()
        return np.array([float(x.grad) for x in xs], dtype=float)


def numerical_grad(f: GraphFn, x0: Sequence[float], eps: float = 1e-6) -> np.ndarray:
    """Central-difference gradient of f at x0."""
    x = np.asarray(x0, dtype=float)
    grad = np.zeros_like(x)
    for i in range(x.size):
        x_up = x.copy()
        x_dn = x.copy()
        x_up[i] += eps
        x_dn[i] -= eps
        grad[i] = (_evaluate(f, x_up) - _evaluate(f, x_dn)) / (2.0 * eps)
    return grad


def check_gradients(f: GraphFn, x0: Sequence[float], eps: float = 1e-6,
                    rtol: float = 1e-4, atol: float = 1e-4) -> Dict:
    """
    Compare analytic and numerical gradients of f at x0.

    Returns:
        {
            'analytic': np.ndarray,
            'numerical': np.ndarray,
            'max_abs_err': float,
            'ok': bool,          # np.allclose(analytic, numerical, rtol, atol)
        }
    """
    analytic = analytic_grad(f, x0)
    numerical = numerical_grad(f, x0, eps=eps)
    err = np.abs(analytic - numerical)
    return {
        'analytic': analytic,
        'numerical': numerical,
        'max_abs_err': float(err.max()) if err.size else 0.0,
        'ok': bool(np.allclose(analytic, numerical, rtol=rtol, atol=atol)),
    }
